import json
from typing import Any, Callable, Dict, List, NamedTuple, Optional

import pytest
import requests

from batoto_scraper.config import HttpConfig, SourceConfig, Version


def make_response(url: str, status: int = 200, body: Any = "", method: str = "GET") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    response._content_consumed = True
    response.encoding = "utf-8"
    response.url = url
    response.request = requests.Request(method, url).prepare()
    return response


class Sent(NamedTuple):
    request: requests.PreparedRequest
    timeout: Any


class FakeSession(requests.Session):
    """
    Session whose transport is a function of the prepared request.

    The handler returns a body (200), a ``(status, body)`` tuple, a ready
    response, or an exception instance to raise.
    """

    def __init__(self, handler: Callable[[requests.PreparedRequest], Any]):
        super().__init__()
        self.handler = handler
        self.sent: List[Sent] = []

    def send(self, request, **kwargs):
        self.sent.append(Sent(request, kwargs.get("timeout")))
        result = self.handler(request)
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, requests.Response):
            return result
        status, body = result if isinstance(result, tuple) else (200, result)
        return make_response(request.url, status, body, request.method)

    @property
    def urls(self) -> List[str]:
        return [s.request.url for s in self.sent]


def route_table(routes: Dict[str, Any], default: Any = (404, "")) -> Callable[[requests.PreparedRequest], Any]:
    """Match on the full URL first, then on the URL without its query."""

    def handler(request):
        if request.url in routes:
            return routes[request.url]
        return routes.get(request.url.split("?", 1)[0], default)

    return handler


def qwik_page(objs: List[Any], body: str = "") -> str:
    state = json.dumps({"objs": objs})
    return f'<html><head></head><body>{body}<script type="qwik/json">{state}</script></body></html>'


@pytest.fixture
def http_config() -> HttpConfig:
    return HttpConfig(max_retries=0, retry_base_delay=0.0)


def source_config(version: Version, base_url: Optional[str] = None, **kwargs) -> SourceConfig:
    defaults = {
        Version.V2: "https://bato.to",
        Version.V3: "https://bato.to/",
        Version.V4: "https://bato.si",
    }
    return SourceConfig(
        lang="en",
        site_lang=kwargs.pop("site_lang", ""),
        version=version,
        base_url=base_url or defaults[version],
        **kwargs,
    )
