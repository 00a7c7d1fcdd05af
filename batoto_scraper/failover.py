"""
Media host failover.

Chapter images are served from a load-balanced pool of hosts named ``k00``
to ``k11`` and ``n00`` to ``n11``; individual hosts flap. A failed request to
one of them is retried once on its sibling (same digits, other letter) and
then across the fixed pool, every fallback under a short timeout. When the
whole pool fails the caller gets the original failure back.
"""

from __future__ import annotations

import copy
import re
from typing import Iterator, List, Optional

import requests

from .config import HttpConfig
from .errors import TransportError
from .log import logger
from .transport import HttpClient, is_success

SERVER_PATTERN = re.compile(r"https://[kn]\d{2}")
SIBLING_PATTERN = re.compile(r"https://([kn])(\d{2})")

SERVER_POOL = (
    "n01", "n03", "n04", "n00", "n05", "n06", "n07", "n08", "n09", "n10", "n02", "n11",
    "k05", "k07",
    "k01", "k03", "k04", "k00", "k06", "k08", "k09", "k10", "k02", "k11",
)


def sibling_url(url: str) -> Optional[str]:
    match = SIBLING_PATTERN.search(url)
    if match is None:
        return None
    letter, number = match.groups()
    flipped = "n" if letter == "k" else "k"
    new_url = SIBLING_PATTERN.sub(f"https://{flipped}{number}", url, count=1)
    return new_url if new_url != url else None


def fallback_urls(url: str) -> List[str]:
    """Every alternative to try for ``url``, in order; empty for non-media hosts."""
    if not SERVER_PATTERN.search(url):
        return []
    candidates: List[str] = []
    sibling = sibling_url(url)
    if sibling is not None:
        candidates.append(sibling)
    for server in SERVER_POOL:
        if f"https://{server}" in url:
            continue
        new_url = SERVER_PATTERN.sub(f"https://{server}", url, count=1)
        if new_url == url or new_url in candidates:
            continue
        candidates.append(new_url)
    return candidates


class MirrorFailover:
    def __init__(self, http: HttpClient, cfg: Optional[HttpConfig] = None):
        self.http = http
        self.cfg = cfg or http.cfg

    @classmethod
    def from_session(cls, session: requests.Session, cfg: HttpConfig) -> "MirrorFailover":
        return cls(HttpClient(cfg, session), cfg)

    def _attempts(self, request: requests.Request) -> Iterator[requests.Request]:
        for url in fallback_urls(request.url):
            retry = copy.copy(request)
            retry.url = url
            yield retry

    def execute(self, request: requests.Request) -> requests.Response:
        original_response: Optional[requests.Response] = None
        original_error: Optional[requests.RequestException] = None
        media = SERVER_PATTERN.search(request.url) is not None
        try:
            # media hosts get one primary attempt, the pool is their retry
            if media:
                original_response = self.http.send(request)
            else:
                original_response = self.http.send_with_retries(request)
        except requests.RequestException as e:
            original_error = e
        if is_success(original_response):
            return original_response

        for attempt in self._attempts(request):
            try:
                response = self.http.send(attempt, timeout=self.cfg.fallback_timeout)
            except requests.RequestException as e:
                logger.debug("Fallback %s failed: %s", attempt.url, e)
                continue
            if is_success(response):
                logger.debug("Recovered %s via %s", request.url, attempt.url)
                return response
            logger.debug("Fallback %s returned HTTP %d", attempt.url, response.status_code)
            response.close()

        if original_error is not None:
            raise TransportError(f"Request to {request.url} failed: {original_error}", url=request.url) from original_error
        if media:
            logger.warning("All media hosts failed for %s", request.url)
        return original_response
