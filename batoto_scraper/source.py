"""
Bato.to source: the entry point a reading application talks to.

The site version is read once when the source is built (switching versions
needs a new source). Every operation then takes a single preference snapshot,
asks the matching strategy for a request/parser pair, runs the request through
the mirror failover client and parses the response.
"""

from __future__ import annotations

from typing import List, Optional

import requests

from .config import HttpConfig, PreferenceStore, SourceConfig, Version
from .failover import MirrorFailover
from .filters import SearchFilters
from .log import logger
from .models import ChapterItem, ContentItem, ListingPage, PageItem
from .sites import Call, SiteStrategy, strategy_for
from .transport import HttpClient, raise_for_status


class BatoSource:
    name = "Bato.to"

    def __init__(
        self,
        preferences: PreferenceStore,
        lang: str = "en",
        site_lang: str = "",
        http_config: Optional[HttpConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.preferences = preferences
        self.lang = lang
        self.site_lang = site_lang
        self.preferences.migrate_mirrors(lang)
        self.version: Version = preferences.version(lang)
        self.http = HttpClient(http_config or HttpConfig(), session)
        self.client = MirrorFailover(self.http)
        logger.debug("Bato.to source for %s uses site version %s", lang, self.version.value)

    def snapshot(self) -> SourceConfig:
        return self.preferences.snapshot(self.lang, self.site_lang, self.version)

    def strategy(self) -> SiteStrategy:
        return strategy_for(self.snapshot())

    @property
    def base_url(self) -> str:
        return self.snapshot().base_url

    def _run(self, call: Call):
        if call.request is None:
            return call.parse(None)
        response = raise_for_status(self.client.execute(call.request))
        return call.parse(response)

    # ---------------------------
    # Operations
    # ---------------------------
    def list_latest(self, page: int = 1) -> ListingPage:
        return self._run(self.strategy().latest(page))

    def list_popular(self, page: int = 1) -> ListingPage:
        return self._run(self.strategy().popular(page))

    def search(self, page: int = 1, query: str = "", filters: Optional[SearchFilters] = None) -> ListingPage:
        return self._run(self.strategy().search(page, query, filters or SearchFilters()))

    def fetch_details(self, item: ContentItem) -> ContentItem:
        return self._run(self.strategy().details(item))

    def fetch_chapters(self, item: ContentItem) -> List[ChapterItem]:
        return self._run(self.strategy().chapters(item))

    def fetch_pages(self, chapter: ChapterItem) -> List[PageItem]:
        return self._run(self.strategy().pages(chapter))

    def fetch_image(self, page: PageItem) -> requests.Response:
        """GET one page image; media host failures fall back across the mirror pool."""
        strategy = self.strategy()
        response = self.client.execute(strategy.get(page.image_url))
        return raise_for_status(response)
