from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple


class MangaStatus(enum.Enum):
    UNKNOWN = 0
    ONGOING = 1
    COMPLETED = 2
    HIATUS = 3
    CANCELLED = 4
    PUBLISHING_FINISHED = 5


@dataclass(frozen=True)
class ContentItem:
    canonical_id: str
    title: str
    thumbnail_url: Optional[str] = None
    author: Optional[str] = None
    artist: Optional[str] = None
    genres: Tuple[str, ...] = ()
    status: MangaStatus = MangaStatus.UNKNOWN
    description: str = ""


@dataclass(frozen=True)
class ChapterItem:
    url: str
    name: str
    scanlator: Optional[str] = None
    uploaded_at: int = 0  # epoch millis, 0 when unknown


@dataclass(frozen=True)
class PageItem:
    index: int
    image_url: str


@dataclass(frozen=True)
class ListingPage:
    items: Tuple[ContentItem, ...] = field(default_factory=tuple)
    has_next_page: bool = False


@dataclass(frozen=True)
class PagingInfo:
    page: Optional[int]
    pages: Optional[int]
    next: Optional[int]


def ordered_genres(values) -> Tuple[str, ...]:
    seen = set()
    out = []
    for v in values:
        v = (v or "").strip()
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return tuple(out)
