"""
Per-version request builders and parsers.

Every site version answers the same six questions (latest, popular, search,
details, chapters, pages) against a different backend. A strategy turns one
question into a :class:`Call`: the request to send and the parser for its
response. :data:`STRATEGIES` is the version table the router dispatches on.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Type
from urllib.parse import parse_qs, urljoin, urlparse

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from . import decode, qwik
from .config import DEPRECATED_MIRRORS, SourceConfig, Version
from .errors import ContentRemoved, ParseError
from .filters import SearchFilters
from .log import logger
from .models import ChapterItem, ContentItem, ListingPage, PageItem, ordered_genres
from .normalize import (
    build_description,
    canonical_path,
    canonicalize,
    clean_title,
    parse_epoch_millis,
    parse_relative_date,
    parse_rss_date,
    parse_status_v2,
    parse_status_v4,
    remove_entities,
    strip_series_url,
    strip_title_slug,
)

ID_PREFIX = "ID:"
DELETED_MESSAGE = "This comic has been marked as deleted and the chapter list is not available."
HISTORY_FORM = {"_where": "browse", "first": "0", "limit": "0", "prevPos": "null"}

Parser = Callable[[Optional[requests.Response]], object]


@dataclass(frozen=True)
class Call:
    """A request plus the parser for its response. ``request`` is None when no I/O is needed."""

    request: Optional[requests.Request]
    parse: Parser


# ---------------------------
# Markup helpers
# ---------------------------
def _document(response: requests.Response) -> BeautifulSoup:
    return BeautifulSoup(response.text, "html.parser")


def _text(element: Optional[Tag]) -> str:
    if element is None:
        return ""
    return " ".join(element.get_text(" ").split())


def _texts(elements) -> str:
    return " ".join(t for t in (_text(e) for e in elements) if t)


def _abs(base: str, value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return urljoin(base, value)


def _first_attr(elements, attr: str) -> str:
    for element in elements:
        value = element.get(attr)
        if value:
            return value
    return ""


def _without_domain(url: str) -> str:
    if not url.startswith("http"):
        return url
    parsed = urlparse(url)
    return parsed.path + (f"?{parsed.query}" if parsed.query else "")


def _page_of(response: requests.Response) -> int:
    values = parse_qs(urlparse(response.url).query).get("page")
    try:
        return int(values[0]) if values else 1
    except ValueError:
        return 1


def _is_deleted(document: BeautifulSoup) -> bool:
    needle = DELETED_MESSAGE.lower()
    return any(
        needle in _texts(document.select(selector)).lower()
        for selector in (".episode-list > .alert-warning", ".alert-outline.alert-outline-warning")
    )


class SiteStrategy(abc.ABC):
    version: Version

    def __init__(self, config: SourceConfig):
        self.config = config

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def headers(self) -> Dict[str, str]:
        return {}

    def get(self, url: str, params: Optional[Dict[str, str]] = None) -> requests.Request:
        request = requests.Request("GET", url, headers=self.headers(), params=params or {})
        logger.debug("%s request: %s %s", self.version.value, url, params or "")
        return request

    def post(self, url: str, data: Dict[str, str]) -> requests.Request:
        logger.debug("%s request: POST %s", self.version.value, url)
        return requests.Request("POST", url, headers=self.headers(), data=data)

    def clean(self, raw: str) -> str:
        return clean_title(raw, self.config.custom_title_pattern, self.config.remove_title_version).title

    def item_id(self, item: ContentItem) -> str:
        return canonicalize(item.canonical_id)

    def page_request(self, chapter: ChapterItem) -> requests.Request:
        url = chapter.url
        if url.startswith("http"):
            parsed = urlparse(url)
            if f"https://{parsed.netloc}" in DEPRECATED_MIRRORS:
                url = parsed._replace(netloc=urlparse(self.base_url).netloc).geturl()
            return self.get(url)
        return self.get(self.config.trimmed_base + url)

    @abc.abstractmethod
    def latest(self, page: int) -> Call: ...

    @abc.abstractmethod
    def popular(self, page: int) -> Call: ...

    @abc.abstractmethod
    def search(self, page: int, query: str, filters: SearchFilters) -> Call: ...

    @abc.abstractmethod
    def details(self, item: ContentItem) -> Call: ...

    @abc.abstractmethod
    def chapters(self, item: ContentItem) -> Call: ...

    @abc.abstractmethod
    def pages(self, chapter: ChapterItem) -> Call: ...


# ---------------------------
# V2: classic /series/ site
# ---------------------------
class V2Strategy(SiteStrategy):
    version = Version.V2

    NEXT_PAGE_SELECTOR = "div#mainer nav.d-none .pagination .page-item:last-of-type:not(.disabled)"
    CHAPTER_ROW_SELECTOR = "div.main div.p-2"

    @property
    def list_selector(self) -> str:
        site_lang = self.config.site_lang
        if site_lang == "":
            return "div#series-list div.col"
        if site_lang == "en,en_us":
            return "div#series-list div.col.no-flag"
        return f'div#series-list div.col:has([data-lang="{site_lang}"])'

    # requests
    def _browse(self, page: int, sort: str) -> Call:
        url = f"{self.base_url}/browse"
        return Call(self.get(url, {"langs": self.config.site_lang, "sort": sort, "page": str(page)}), self.parse_listing)

    def latest(self, page: int) -> Call:
        return self._browse(page, "update")

    def popular(self, page: int) -> Call:
        return self._browse(page, "views_a")

    def search(self, page: int, query: str, filters: SearchFilters) -> Call:
        if query.startswith(ID_PREFIX):
            series_id = query[len(ID_PREFIX):]
            return Call(self.get(f"{self.base_url}/series/{series_id}"), self.parse_id_search)

        if query.strip():
            params = {"word": query, "page": str(page)}
            if filters.letter_mode:
                params["mode"] = "letter"
            return Call(self.get(f"{self.base_url}/search", params), self.parse_listing)

        special = filters.special_mode()
        if special is not None:
            kind, value = special
            if kind == "utils":
                return Call(self.get(f"{self.base_url}/_utils/comic-list", {"type": value}), self.parse_utils)
            return Call(self.post(f"{self.base_url}/ajax.my.{value}.paging", dict(HISTORY_FORM)), self.parse_history)

        params: Dict[str, str] = {}
        site_lang = self.config.site_lang
        params["langs"] = ",".join(filters.languages + [site_lang]) if filters.languages else site_lang
        genres = filters.genres_param(always_separator=True)
        if genres is not None:
            params["genres"] = genres
        if filters.status:
            params["release"] = filters.status
        if filters.sort is not None:
            params["sort"] = f"{filters.sort.option.value}.{'az' if filters.sort.ascending else 'za'}"
        if filters.origins:
            params["origs"] = ",".join(filters.origins)
        params["page"] = str(page)
        chapters = filters.chapters_param()
        if chapters is not None:
            params["chapters"] = chapters
        return Call(self.get(f"{self.base_url}/browse", params), self.parse_listing)

    def details(self, item: ContentItem) -> Call:
        return Call(self.get(f"{self.base_url}/series/{self.item_id(item)}"), self.parse_details)

    def chapters(self, item: ContentItem) -> Call:
        series_id = self.item_id(item)
        if self.config.alt_chapter_list and series_id.strip():
            return Call(self.get(f"{self.base_url}/rss/series/{series_id}.xml"), self.parse_rss_chapters)
        return Call(self.get(f"{self.base_url}/series/{series_id}"), self.parse_chapters)

    def pages(self, chapter: ChapterItem) -> Call:
        return Call(self.page_request(chapter), self.parse_pages)

    # parsers
    def _card(self, element: Tag, base: str) -> ContentItem:
        cover = element.select("a.item-cover")
        raw_url = strip_series_url(_first_attr(cover, "href"))
        return ContentItem(
            canonical_id=canonicalize(raw_url),
            title=self.clean(remove_entities(_texts(element.select("a.item-title")))),
            thumbnail_url=_abs(base, _first_attr([img for c in cover for img in c.select("img")], "src")),
        )

    def parse_listing(self, response: requests.Response) -> ListingPage:
        document = _document(response)
        items = tuple(self._card(el, response.url) for el in document.select(self.list_selector))
        return ListingPage(items, document.select_one(self.NEXT_PAGE_SELECTOR) is not None)

    def parse_id_search(self, response: requests.Response) -> ListingPage:
        document = _document(response)
        info = document.select("div#mainer div.container-fluid")
        heading_links = [a for el in info for a in el.select("h3 a")]
        raw_url = strip_series_url(_abs(response.url, _first_attr(heading_links, "href")) or "")
        item = ContentItem(
            canonical_id=canonicalize(raw_url),
            title=self.clean(remove_entities(_texts(h for el in info for h in el.select("h3")))),
            thumbnail_url=_abs(response.url, _first_attr(document.select("div.attr-cover img"), "src")),
        )
        return ListingPage((item,), False)

    def parse_utils(self, response: requests.Response) -> ListingPage:
        document = _document(response)
        items = []
        for row in document.select("tbody > tr"):
            links = row.select("td a")
            items.append(
                ContentItem(
                    canonical_id=canonicalize(strip_series_url(_first_attr(links, "href"))),
                    title=self.clean(_texts(links)),
                    thumbnail_url=_abs(response.url, _first_attr(row.select("img"), "src")),
                )
            )
        return ListingPage(tuple(items), False)

    def parse_history(self, response: requests.Response) -> ListingPage:
        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError("history json", f"History response is not JSON: {e}") from e
        fragment = payload.get("html") if isinstance(payload, dict) else None
        if not isinstance(fragment, str):
            raise ParseError("history html")
        document = BeautifulSoup(fragment, "html.parser")
        items = []
        for element in document.select(".my-history-item"):
            links = element.select(".position-relative a")
            items.append(
                ContentItem(
                    canonical_id=canonicalize(strip_series_url(_first_attr(links, "href"))),
                    title=self.clean(_texts(links)),
                    thumbnail_url=_abs(response.url, _first_attr(element.select("img"), "src")),
                )
            )
        return ListingPage(tuple(items), False)

    @staticmethod
    def _attr_items(info: Tag, label: str) -> List[Tag]:
        label = label.lower()
        return [item for item in info.select("div.attr-item") if label in _text(item).lower()]

    def _attr_value(self, info: Tag, label: str) -> Optional[str]:
        for item in self._attr_items(info, label):
            span = item.select_one("span")
            if span is not None:
                return _text(span)
        return None

    def parse_details(self, response: requests.Response) -> ContentItem:
        document = _document(response)
        info = document.select_one("div#mainer div.container-fluid")
        if info is None:
            raise ParseError("details container", f"No details container in {response.url}")

        cleaned = clean_title(
            remove_entities(_texts(info.select("h3"))),
            self.config.custom_title_pattern,
            self.config.remove_title_version,
        )

        summary = document.select_one(
            'h5:-soup-contains-own("Summary:") + div #limit-height-ctrl-summary '
            "#limit-height-body-summary .limit-html"
        )
        extra = info.select_one('h5:-soup-contains-own("Extra Info:") + div')
        notice = info.select_one(".episode-list > .alert-warning")
        aliases = document.select_one("div.pb-2.alias-set.line-b-f")
        alt_titles = _text(aliases).split("/") if aliases is not None and _text(aliases) else []

        genres: List[str] = []
        for item in info.select("div.attr-item"):
            label = item.select_one("b")
            if label is not None and "genres" in _text(label).lower():
                value = label.find_next_sibling("span")
                genres.extend(_text(value).split(","))

        people = {}
        for label in ("author", "artist"):
            values = [_text(span) for item in self._attr_items(info, label) for span in item.select("span")]
            people[label] = " ".join(v for v in values if v) or None

        path_id = canonicalize(canonical_path(response.url))
        return ContentItem(
            canonical_id=path_id,
            title=cleaned.title,
            thumbnail_url=_abs(response.url, _first_attr(document.select("div.attr-cover img"), "src")),
            author=people["author"],
            artist=people["artist"],
            genres=ordered_genres(genres),
            status=parse_status_v2(self._attr_value(info, "original work"), self._attr_value(info, "upload status")),
            description=build_description(
                summary=summary.get_text() if summary is not None else None,
                extra_info=extra.get_text() if extra is not None else None,
                notice=_text(notice) if notice is not None else None,
                alt_titles=alt_titles,
                removed=cleaned.removed,
                notice_before_extra=True,
            ),
        )

    def _chapter(self, element: Tag) -> ChapterItem:
        link = element.select("a.chapt")
        group = _texts(element.select("div.extra > a:not(.ps-3)"))
        user = _texts(element.select("div.extra > a.ps-3"))
        time_text = _texts(element.select("div.extra > i.ps-3"))
        return ChapterItem(
            url=_without_domain(canonicalize(_first_attr(link, "href"))),
            name=_texts(link),
            scanlator=group or user or "Unknown",
            uploaded_at=parse_relative_date(time_text) if time_text else 0,
        )

    def parse_chapters(self, response: requests.Response) -> List[ChapterItem]:
        document = _document(response)
        if _is_deleted(document):
            raise ContentRemoved(f"{response.url} was deleted from the site")
        return [self._chapter(el) for el in document.select(self.CHAPTER_ROW_SELECTOR)]

    def parse_rss_chapters(self, response: requests.Response) -> List[ChapterItem]:
        feed = BeautifulSoup(response.content, "xml")
        chapters = []
        for item in feed.select("channel > item"):
            guid = item.find("guid")
            title = item.find("title")
            published = item.find("pubDate")
            if guid is None or title is None:
                raise ParseError("rss item", "RSS item without guid/title")
            chapters.append(
                ChapterItem(
                    url=_without_domain(guid.get_text(strip=True)),
                    name=title.get_text(strip=True),
                    uploaded_at=parse_rss_date(published.get_text(strip=True)) if published is not None else 0,
                )
            )
        return chapters

    def parse_pages(self, response: requests.Response) -> List[PageItem]:
        document = _document(response)
        for script in document.find_all("script"):
            text = script.string or script.get_text() or ""
            if all(name in text for name in (decode.IMAGES_CONST, decode.CIPHER_CONST, decode.PASSWORD_CONST)):
                return decode.build_page_items(decode.decode_page_tokens(text))
        raise ParseError("image script", "Couldn't find script with image data.")


# ---------------------------
# V4: /title/ comics site, state in qwik/json
# ---------------------------
class V4Strategy(SiteStrategy):
    version = Version.V4

    CHAPTER_ROW_SELECTOR = "div.px-2.py-2.flex.flex-wrap.justify-between"
    ALT_TITLES_SELECTOR = "div.mt-1.text-xs.md\\:text-base.opacity-80 span:not(.text-sm)"

    def headers(self) -> Dict[str, str]:
        return {"Referer": f"{self.base_url}/"}

    def with_lang(self, params: Dict[str, str]) -> Dict[str, str]:
        if self.config.site_lang.strip():
            params["lang"] = self.config.site_lang
        return params

    @property
    def search_url(self) -> str:
        return f"{self.base_url}/comics"

    def title_url(self, title_id: str) -> str:
        return f"{self.base_url}/title/{title_id}"

    def _listing(self, page: int, sort: str) -> Call:
        params = self.with_lang({"sortby": sort, "order": "desc", "page": str(page)})
        return Call(self.get(self.search_url, params), self.parse_listing)

    def latest(self, page: int) -> Call:
        return self._listing(page, "field_update")

    def popular(self, page: int) -> Call:
        return self._listing(page, "views_d000")

    def search(self, page: int, query: str, filters: SearchFilters) -> Call:
        if query.startswith(ID_PREFIX):
            title_id = query[len(ID_PREFIX):].strip()
            if not title_id:
                return Call(None, lambda _: ListingPage())
            return Call(self.get(self.title_url(title_id), self.with_lang({})), self.parse_id_search)

        if filters.special_mode() is not None:
            logger.debug("Saved lists and history are only available on V2X; ignoring")

        params: Dict[str, str] = {}
        if query.strip():
            params["word"] = query.strip()
        params["page"] = str(page)
        self.apply_filters(params, filters)
        return Call(self.get(self.search_url, params), self.parse_listing)

    def apply_filters(self, params: Dict[str, str], filters: SearchFilters) -> None:
        if filters.languages:
            params["lang"] = ",".join(filters.languages)
        elif self.config.site_lang.strip():
            params["lang"] = self.config.site_lang
        if filters.origins:
            params["orig"] = ",".join(filters.origins)
        genres = filters.genres_param(always_separator=False)
        if genres is not None:
            params["genres"] = genres
        if filters.status.strip():
            params["status"] = filters.status
        chapters = filters.chapters_param()
        if chapters is not None:
            params["chapters"] = chapters
        if filters.sort is not None:
            params["sortby"] = filters.sort.option.field_v4
            params["order"] = "asc" if filters.sort.ascending else "desc"

    def details(self, item: ContentItem) -> Call:
        return Call(self.get(f"{self.base_url}/title/{self.item_id(item)}"), self.parse_details)

    def chapters(self, item: ContentItem) -> Call:
        return Call(self.get(f"{self.base_url}/title/{self.item_id(item)}"), self.parse_chapters)

    def pages(self, chapter: ChapterItem) -> Call:
        return Call(self.page_request(chapter), self.parse_pages)

    # helpers
    def absolute(self, url: str) -> str:
        return url if url.startswith("http") else f"{self.base_url}{url}"

    @staticmethod
    def normalize_image_url(url: str) -> str:
        # k-hosts are frequently down; n-hosts serve the same paths
        for scheme in ("https://", "http://"):
            prefix = f"{scheme}k"
            if url.startswith(prefix) and url[len(prefix):len(prefix) + 2].isdigit():
                return f"{scheme}n" + url[len(prefix):]
        return url

    @staticmethod
    def is_page_image_url(url: str) -> bool:
        marker = "/media/"
        idx = url.find(marker)
        if idx < 0:
            return False
        after = url[idx + len(marker):]
        return after.startswith("mbch/") or (after[:1].isdigit())

    # parsers
    def parse_listing(self, response: requests.Response) -> ListingPage:
        objs = qwik.parse_qwik_objs(_document(response))
        if objs is None:
            return ListingPage()
        page = _page_of(response)
        graph = qwik.QwikGraph(objs)

        items: List[ContentItem] = []
        seen = set()
        raw_count = 0
        for has_cover, record in qwik.iter_comics(graph):
            raw_count += 1
            if not has_cover:
                continue
            name = qwik.as_string(record.get("name"))
            if name is None:
                continue
            cover = qwik.first_non_blank(*(qwik.as_string(record.get(k)) for k in qwik.COVER_KEYS))
            item = ContentItem(
                canonical_id=canonicalize(strip_title_slug(record["urlPath"])),
                title=self.clean(name),
                thumbnail_url=self.absolute(cover) if cover else None,
            )
            if item.canonical_id in seen:
                continue
            seen.add(item.canonical_id)
            items.append(item)

        paging = qwik.find_paging_info(graph, page)
        page_size = qwik.find_page_size(graph, page)
        if paging is not None and paging.next is not None:
            has_next = paging.next > 0
        elif paging is not None and paging.page is not None and paging.pages is not None:
            has_next = paging.page < paging.pages
        elif page_size is not None:
            has_next = raw_count >= page_size
        else:
            has_next = bool(items)
        return ListingPage(tuple(items), has_next)

    def parse_id_search(self, response: requests.Response) -> ListingPage:
        return ListingPage((self.parse_details(response),), False)

    def heading_title(self, document: BeautifulSoup) -> Optional[str]:
        link = document.select_one("h3 a.link.link-hover, h3 a.link-hover, h3 a")
        return _text(link) if link is not None else None

    def original_title(self, document: BeautifulSoup, resolved_name: Optional[str]) -> str:
        return resolved_name or self.heading_title(document) or ""

    def parse_details(self, response: requests.Response) -> ContentItem:
        document = _document(response)
        objs = qwik.parse_qwik_objs(document)
        record = qwik.find_comic_details(qwik.QwikGraph(objs)) if objs is not None else None
        record = record or {}

        cleaned = clean_title(
            self.original_title(document, qwik.as_string(record.get("name"))),
            self.config.custom_title_pattern,
            self.config.remove_title_version,
        )
        title = cleaned.title
        if not title:
            og_title = document.select_one("meta[property='og:title']")
            page_title = document.select_one("title")
            if og_title is not None and og_title.get("content") is not None:
                fallback = og_title["content"]
            else:
                fallback = _text(page_title).split("|", 1)[0].strip()
            title = self.clean(fallback)

        authors = qwik.extract_string_list(record.get("authors"))
        artists = qwik.extract_string_list(record.get("artists"))

        genres = [t for t in (_text(s) for s in document.select("div.flex.items-center.flex-wrap > span span.font-bold")) if t]
        if not genres:
            genres = qwik.extract_string_list(record.get("genres"))

        status_text = next(
            (
                t
                for t in (_text(s) for s in document.select("span.font-bold.uppercase"))
                if t.lower() in ("ongoing", "completed", "hiatus", "cancelled")
            ),
            None,
        ) or qwik.as_string(record.get("statusName")) or qwik.as_string(record.get("status"))

        cover = qwik.first_non_blank(*(qwik.as_string(record.get(k)) for k in qwik.COVER_KEYS))
        if cover:
            thumbnail = self.absolute(cover)
        else:
            og_image = document.select_one("meta[property='og:image']")
            thumbnail = og_image.get("content") if og_image is not None else None

        summary = document.select_one("div.limit-html.prose .limit-html-p")
        extra = None
        for block in document.select("div.mt-5.space-y-3"):
            heading = block.select_one("b.text-lg.font-bold")
            if heading is not None and "extra info" in _text(heading).lower():
                extra = block.select_one("div.limit-html.prose .limit-html-p")
                break
        notices = document.select(".alert-outline.alert-outline-warning")
        alt_titles = list(dict.fromkeys(t for t in (_text(s) for s in document.select(self.ALT_TITLES_SELECTOR)) if t))

        canonical_id = canonicalize(canonical_path(response.url))
        url_path = qwik.as_string(record.get("urlPath"))
        if not canonical_id.isdigit() and url_path:
            canonical_id = canonicalize(strip_title_slug(url_path))
        return ContentItem(
            canonical_id=canonical_id,
            title=title,
            thumbnail_url=thumbnail,
            author=", ".join(authors) or None,
            artist=", ".join(artists) or None,
            genres=ordered_genres(genres),
            status=parse_status_v4(status_text),
            description=build_description(
                summary=summary.get_text() if summary is not None else None,
                extra_info=extra.get_text() if extra is not None else None,
                notice=_text(notices[-1]) if notices else None,
                alt_titles=alt_titles,
                removed=cleaned.removed,
            ),
        )

    def _chapter(self, element: Tag) -> ChapterItem:
        anchor = element.select_one("a.link-hover.link-primary")
        group = element.select_one("div.inline-flex.items-center.space-x-1 a span")
        stamp = element.select_one("time[data-time]")
        return ChapterItem(
            url=anchor.get("href", "") if anchor is not None else "",
            name=_text(anchor),
            scanlator=_text(group) or None,
            uploaded_at=parse_epoch_millis(stamp.get("data-time") if stamp is not None else None),
        )

    def parse_chapters(self, response: requests.Response) -> List[ChapterItem]:
        document = _document(response)
        if _is_deleted(document):
            raise ContentRemoved(f"{response.url} was deleted from the site")
        if self.config.alt_chapter_list:
            return self.parse_alt_chapters(document)
        return [self._chapter(el) for el in document.select(self.CHAPTER_ROW_SELECTOR)]

    @staticmethod
    def parse_alt_chapters(document: BeautifulSoup) -> List[ChapterItem]:
        chapters = []
        for link in document.select('a[href*="/title/"]'):
            name = _text(link)
            if name:
                chapters.append(ChapterItem(url=link.get("href", ""), name=name))
        return chapters

    def parse_pages(self, response: requests.Response) -> List[PageItem]:
        objs = qwik.parse_qwik_objs(_document(response))
        if objs is None:
            raise ParseError("qwik state", f"No qwik/json state in {response.url}")
        urls = []
        for value in objs:
            if isinstance(value, str) and self.is_page_image_url(value):
                urls.append(self.normalize_image_url(self.absolute(value)))
        return [PageItem(i, url) for i, url in enumerate(dict.fromkeys(urls))]


# ---------------------------
# V3: V4 backend served under /v3x
# ---------------------------
class V3Strategy(V4Strategy):
    version = Version.V3

    def headers(self) -> Dict[str, str]:
        return {"Referer": f"{self.config.trimmed_base}/v3x/"}

    @property
    def search_url(self) -> str:
        return f"{self.config.trimmed_base}/v3x-search"

    def title_url(self, title_id: str) -> str:
        return f"{self.config.trimmed_base}/v3x/title/{title_id}"

    def _listing(self, page: int, sort: str) -> Call:
        params = self.with_lang({"order": "desc", "sort": sort, "page": str(page)})
        return Call(self.get(self.search_url, params), self.parse_listing)

    def latest(self, page: int) -> Call:
        return self._listing(page, "field_upload")

    def original_title(self, document: BeautifulSoup, resolved_name: Optional[str]) -> str:
        return self.heading_title(document) or resolved_name or ""


STRATEGIES: Dict[Version, Type[SiteStrategy]] = {
    Version.V2: V2Strategy,
    Version.V3: V3Strategy,
    Version.V4: V4Strategy,
}


def strategy_for(config: SourceConfig) -> SiteStrategy:
    return STRATEGIES.get(config.version, V2Strategy)(config)
