import pytest
import requests

from batoto_scraper.config import HttpConfig
from batoto_scraper.errors import TransportError
from batoto_scraper.failover import SERVER_POOL, MirrorFailover, fallback_urls, sibling_url

from conftest import FakeSession

IMAGE_URL = "https://k03.mbxyz.org/media/7/a.webp"


def failover_for(session, http_config):
    return MirrorFailover.from_session(session, http_config)


def test_sibling_flips_the_letter():
    assert sibling_url(IMAGE_URL) == "https://n03.mbxyz.org/media/7/a.webp"
    assert sibling_url("https://n11.mbxyz.org/x") == "https://k11.mbxyz.org/x"
    assert sibling_url("https://bato.to/x") is None


def test_fallback_order_and_bound():
    urls = fallback_urls(IMAGE_URL)
    assert urls[0] == "https://n03.mbxyz.org/media/7/a.webp"
    assert urls[1] == "https://n01.mbxyz.org/media/7/a.webp"
    assert IMAGE_URL not in urls
    assert len(urls) == len(set(urls))
    assert len(urls) <= len(SERVER_POOL)
    # every pool host except the failing one, the sibling only once
    assert len(urls) == len(SERVER_POOL) - 1


def test_no_fallbacks_for_site_pages():
    assert fallback_urls("https://bato.to/series/1") == []


def test_success_needs_no_fallback(http_config):
    session = FakeSession(lambda r: "image")
    response = failover_for(session, http_config).execute(requests.Request("GET", IMAGE_URL))
    assert response.status_code == 200
    assert session.urls == [IMAGE_URL]


def test_sibling_is_tried_first(http_config):
    session = FakeSession(lambda r: "image" if "//n03." in r.url else (503, ""))
    response = failover_for(session, http_config).execute(requests.Request("GET", IMAGE_URL))
    assert response.url == "https://n03.mbxyz.org/media/7/a.webp"
    assert session.urls == [IMAGE_URL, "https://n03.mbxyz.org/media/7/a.webp"]


def test_recovers_on_a_later_pool_member(http_config):
    target = "https://k10.mbxyz.org/media/7/a.webp"
    session = FakeSession(lambda r: "image" if r.url == target else requests.ConnectionError("down"))
    response = failover_for(session, http_config).execute(requests.Request("GET", IMAGE_URL))
    assert response.url == target
    assert len(session.sent) == 1 + fallback_urls(IMAGE_URL).index(target) + 1


def test_fallbacks_use_short_timeouts(http_config):
    session = FakeSession(lambda r: (503, ""))
    failover_for(session, http_config).execute(requests.Request("GET", IMAGE_URL))
    assert session.sent[0].timeout == http_config.timeout
    assert all(s.timeout == (5, 10) for s in session.sent[1:])


def test_exhausted_pool_returns_original_response(http_config):
    session = FakeSession(lambda r: (503, "busy"))
    response = failover_for(session, http_config).execute(requests.Request("GET", IMAGE_URL))
    assert response.status_code == 503
    assert response.url == IMAGE_URL
    assert len(session.sent) == 1 + len(fallback_urls(IMAGE_URL))


def test_exhausted_pool_reraises_original_error(http_config):
    session = FakeSession(lambda r: requests.ConnectionError(f"down: {r.url}"))
    with pytest.raises(TransportError) as info:
        failover_for(session, http_config).execute(requests.Request("GET", IMAGE_URL))
    assert isinstance(info.value.__cause__, requests.ConnectionError)
    assert IMAGE_URL in str(info.value.__cause__)


def test_site_page_failure_is_passed_through(http_config):
    session = FakeSession(lambda r: (404, "missing"))
    response = failover_for(session, http_config).execute(requests.Request("GET", "https://bato.to/series/1"))
    assert response.status_code == 404
    assert len(session.sent) == 1


def test_fallback_keeps_method_and_headers(http_config):
    session = FakeSession(lambda r: "ok" if "//n03." in r.url else (500, ""))
    request = requests.Request("GET", IMAGE_URL, headers={"Referer": "https://bato.si/"})
    failover_for(session, http_config).execute(request)
    retried = session.sent[1].request
    assert retried.method == "GET"
    assert retried.headers["Referer"] == "https://bato.si/"
    assert request.url == IMAGE_URL


def test_media_primary_is_sent_once_with_default_retries():
    cfg = HttpConfig(retry_base_delay=0.0)
    target = "https://k11.mbxyz.org/media/7/a.webp"
    session = FakeSession(lambda r: "image" if r.url == target else requests.ConnectionError("down"))
    response = failover_for(session, cfg).execute(requests.Request("GET", IMAGE_URL))
    assert response.url == target
    assert session.urls[:2] == [IMAGE_URL, "https://n03.mbxyz.org/media/7/a.webp"]
    assert session.urls.count(IMAGE_URL) == 1
    assert len(session.sent) <= len(SERVER_POOL) + 1


def test_site_pages_keep_transport_retries():
    cfg = HttpConfig(retry_base_delay=0.0)
    attempts = []

    def handler(request):
        attempts.append(request.url)
        return requests.ConnectionError("reset") if len(attempts) < 3 else "page"

    response = failover_for(FakeSession(handler), cfg).execute(requests.Request("GET", "https://bato.to/series/1"))
    assert response.text == "page"
    assert attempts == ["https://bato.to/series/1"] * 3
