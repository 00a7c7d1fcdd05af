from __future__ import annotations

import functools
import time
from typing import Optional, Tuple, Union

import requests

from .config import HttpConfig
from .errors import TransportError
from .log import logger

Timeout = Union[float, Tuple[float, float]]

TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout)


# ---------------------------
# Retry decorator
# ---------------------------
def retry_backoff(max_retries: int = 4, base_delay: float = 1.0, allowed_exceptions=(Exception,)):
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except allowed_exceptions as e:
                    attempt += 1
                    if attempt > max_retries:
                        logger.error("Max retries reached for %s(): %s", func.__name__, e)
                        raise
                    delay = base_delay * (2 ** (attempt - 1))
                    jitter = delay * 0.1 * (0.5 - (time.time() % 1))
                    wait = max(0.0, delay + jitter)
                    logger.warning(
                        "Transient error in %s(): %s, retrying in %.1f seconds (attempt %d/%d)",
                        func.__name__,
                        e,
                        wait,
                        attempt,
                        max_retries,
                    )
                    time.sleep(wait)

        return wrapper

    return decorator


def is_success(response: Optional[requests.Response]) -> bool:
    return response is not None and 200 <= response.status_code < 300


def raise_for_status(response: requests.Response) -> requests.Response:
    if not is_success(response):
        raise TransportError(
            f"HTTP {response.status_code} for {response.url}",
            url=response.url,
            status_code=response.status_code,
        )
    return response


# ---------------------------
# HTTP client
# ---------------------------
class HttpClient:
    def __init__(self, cfg: HttpConfig, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self.session = session if session is not None else requests.Session()
        headers = {"User-Agent": self.cfg.user_agent, "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"}
        headers.update(self.cfg.session_headers)
        self.session.headers.update(headers)

    def send(self, request: requests.Request, timeout: Optional[Timeout] = None) -> requests.Response:
        logger.debug("%s %s", request.method, request.url)
        prepared = self.session.prepare_request(request)
        return self.session.send(prepared, timeout=timeout if timeout is not None else self.cfg.timeout)

    def send_with_retries(self, request: requests.Request, timeout: Optional[Timeout] = None) -> requests.Response:
        send = retry_backoff(
            max_retries=self.cfg.max_retries,
            base_delay=self.cfg.retry_base_delay,
            allowed_exceptions=TRANSIENT_ERRORS,
        )(self.send)
        return send(request, timeout)
