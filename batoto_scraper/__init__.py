"""Bato.to content-source adapter."""

from .config import HttpConfig, PreferenceStore, SourceConfig, Version
from .errors import BatoError, ContentRemoved, DecodeError, ParseError, TransportError
from .filters import SearchFilters, Sort
from .models import ChapterItem, ContentItem, ListingPage, MangaStatus, PageItem
from .source import BatoSource

__version__ = "1.0.0"

__all__ = [
    "BatoError",
    "BatoSource",
    "ChapterItem",
    "ContentItem",
    "ContentRemoved",
    "DecodeError",
    "HttpConfig",
    "ListingPage",
    "MangaStatus",
    "PageItem",
    "ParseError",
    "PreferenceStore",
    "SearchFilters",
    "Sort",
    "SourceConfig",
    "TransportError",
    "Version",
]
