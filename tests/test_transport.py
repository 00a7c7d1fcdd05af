import pytest
import requests

from batoto_scraper.config import HttpConfig
from batoto_scraper.errors import TransportError
from batoto_scraper.transport import HttpClient, raise_for_status, retry_backoff

from conftest import FakeSession, make_response


def test_retry_backoff_retries_then_succeeds():
    calls = []

    @retry_backoff(max_retries=2, base_delay=0.0, allowed_exceptions=(requests.ConnectionError,))
    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise requests.ConnectionError("reset")
        return "ok"

    assert flaky() == "ok"
    assert len(calls) == 3


def test_retry_backoff_gives_up():
    @retry_backoff(max_retries=1, base_delay=0.0, allowed_exceptions=(requests.Timeout,))
    def slow():
        raise requests.Timeout("slow")

    with pytest.raises(requests.Timeout):
        slow()


def test_retry_backoff_ignores_other_errors():
    calls = []

    @retry_backoff(max_retries=3, base_delay=0.0, allowed_exceptions=(requests.Timeout,))
    def broken():
        calls.append(1)
        raise ValueError("bug")

    with pytest.raises(ValueError):
        broken()
    assert len(calls) == 1


def test_client_retries_transient_errors_on_primary_attempt():
    attempts = []

    def handler(request):
        attempts.append(request.url)
        return requests.ConnectionError("reset") if len(attempts) == 1 else "ok"

    client = HttpClient(HttpConfig(max_retries=2, retry_base_delay=0.0), FakeSession(handler))
    response = client.send_with_retries(requests.Request("GET", "https://bato.to/browse"))
    assert response.text == "ok"
    assert len(attempts) == 2


def test_client_applies_session_headers():
    session = FakeSession(lambda r: "ok")
    client = HttpClient(HttpConfig(session_headers={"Cookie": "a=b"}), session)
    client.send(requests.Request("GET", "https://bato.to/"))
    headers = session.sent[0].request.headers
    assert headers["Cookie"] == "a=b"
    assert headers["User-Agent"].startswith("batoto-scraper/")


def test_raise_for_status():
    ok = make_response("https://bato.to/", 204)
    assert raise_for_status(ok) is ok
    with pytest.raises(TransportError) as info:
        raise_for_status(make_response("https://bato.to/x", 503))
    assert info.value.status_code == 503
    assert info.value.url == "https://bato.to/x"
