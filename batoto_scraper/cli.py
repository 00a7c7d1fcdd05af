"""
batoto-scraper command line.

Usage:
    batoto-scraper latest --page 2
    batoto-scraper --site-version V4X search "solo leveling"
    batoto-scraper search --genre action --exclude-genre gore --sort views_m
    batoto-scraper search "ID:86663"
    batoto-scraper details 86663
    batoto-scraper chapters 86663
    batoto-scraper pages /chapter/1234567

Results are printed as JSON on stdout, log lines go to stderr.
"""

from __future__ import annotations

import argparse
import enum
import json
import pathlib
import sys
from dataclasses import asdict, is_dataclass
from typing import List, Optional, Sequence

from .config import (
    ALT_CHAPTER_LIST_PREF_KEY,
    MIRROR_CHOICES_V2X,
    MIRROR_PREF_KEY_V2X,
    MIRROR_PREF_KEY_V4X,
    MIRRORS_V4X,
    REMOVE_TITLE_CUSTOM_PREF,
    REMOVE_TITLE_VERSION_PREF,
    VERSION_PREF_KEY,
    HttpConfig,
    PreferenceStore,
    Version,
    load_config_file,
)
from .errors import BatoError
from .filters import HISTORY_TYPES, SORT_BY_VALUE, UTILS_TYPES, SearchFilters, Sort
from .log import logger, logging_to, set_debug
from .models import ChapterItem, ContentItem
from .source import BatoSource


def _json_default(value):
    if isinstance(value, enum.Enum):
        return value.name
    if is_dataclass(value):
        return asdict(value)
    raise TypeError(f"Cannot serialise {type(value).__name__}")


def dump(result) -> str:
    if is_dataclass(result):
        result = asdict(result)
    elif isinstance(result, list):
        result = [asdict(r) if is_dataclass(r) else r for r in result]
    return json.dumps(result, default=_json_default, ensure_ascii=False, indent=2)


def _split(values: Optional[List[str]]) -> List[str]:
    out: List[str] = []
    for value in values or []:
        out.extend(v.strip() for v in value.split(",") if v.strip())
    return out


def build_filters(args: argparse.Namespace) -> SearchFilters:
    sort = Sort(args.sort, args.asc) if args.sort else None
    return SearchFilters(
        letter_mode=args.letter,
        sort=sort,
        status=args.status or "",
        include_genres=_split(args.genre),
        exclude_genres=_split(args.exclude_genre),
        origins=_split(args.origin),
        languages=_split(args.language),
        min_chapters=args.min_chapters or "",
        max_chapters=args.max_chapters or "",
        utils=args.utils or "",
        history=args.history or "",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="batoto-scraper", description="Query Bato.to listings, details, chapters and pages.")
    p.add_argument("--config", default=None, help="YAML file with 'http' and 'preferences' sections.")
    p.add_argument("--prefs", default=None, help="YAML preference store (created if missing, keeps the automatic mirror stable).")
    p.add_argument("--lang", default="en", help="Source language key used to namespace preferences (default en).")
    p.add_argument("--site-lang", default="", help="Site language filter, e.g. 'en' or 'en,en_us' (default: all).")
    p.add_argument("--site-version", choices=[v.value for v in Version], default=None, help="Override the site version preference.")
    p.add_argument("--mirror", default=None, help="Override the mirror preference, e.g. https://bato.to")
    p.add_argument("--alt-chapters", action="store_true", help="Use the alternative chapter list.")
    p.add_argument("--remove-version", action="store_true", help="Strip version tags like '(Official)' from titles.")
    p.add_argument("--title-regex", default=None, help="Custom regex removed from titles.")
    p.add_argument("--debug", action="store_true", help="Enable debug logging.")

    sub = p.add_subparsers(dest="command", required=True)
    for name in ("latest", "popular"):
        sp = sub.add_parser(name, help=f"List {name} entries.")
        sp.add_argument("--page", type=int, default=1)

    sp = sub.add_parser("search", help="Search by text, 'ID:<n>' or filters.")
    sp.add_argument("query", nargs="?", default="")
    sp.add_argument("--page", type=int, default=1)
    sp.add_argument("--letter", action="store_true", help="Match titles by first letter (text search, V2X).")
    sp.add_argument("--sort", choices=sorted(SORT_BY_VALUE), default=None)
    sp.add_argument("--asc", action="store_true", help="Ascending sort order.")
    sp.add_argument("--status", default=None, help="Release status, e.g. ongoing, completed, hiatus.")
    sp.add_argument("--genre", action="append", help="Genre to include (repeatable or comma separated).")
    sp.add_argument("--exclude-genre", action="append", help="Genre to exclude (repeatable or comma separated).")
    sp.add_argument("--origin", action="append", help="Original language, e.g. ko, ja, zh.")
    sp.add_argument("--language", action="append", help="Translated language.")
    sp.add_argument("--min-chapters", default=None)
    sp.add_argument("--max-chapters", default=None)
    sp.add_argument("--utils", choices=UTILS_TYPES, default=None, help="Saved list type (V2X, login required); ignores other filters.")
    sp.add_argument("--history", choices=HISTORY_TYPES, default=None, help="History type (V2X, login required); ignores other filters.")

    for name in ("details", "chapters"):
        sp = sub.add_parser(name, help=f"Fetch {name} for a series/title id or URL.")
        sp.add_argument("id")
    sp = sub.add_parser("pages", help="Resolve page image URLs of a chapter.")
    sp.add_argument("chapter_url")
    sub.add_parser("mirror", help="Show the effective mirror, site version and selectable mirrors.")
    return p


def load_preferences(args: argparse.Namespace):
    http_cfg, store = HttpConfig(), None
    if args.config:
        http_cfg, store = load_config_file(pathlib.Path(args.config).expanduser())
    if args.prefs:
        store = PreferenceStore.load(pathlib.Path(args.prefs).expanduser())
        if store.dirty:
            store.save()
    if store is None:
        store = PreferenceStore()

    lang = args.lang
    if args.site_version:
        store.put(f"{VERSION_PREF_KEY}_{lang}", args.site_version)
    if args.mirror:
        key = MIRROR_PREF_KEY_V4X if store.version(lang) is Version.V4 else MIRROR_PREF_KEY_V2X
        store.put(f"{key}_{lang}", args.mirror)
    if args.alt_chapters:
        store.put(f"{ALT_CHAPTER_LIST_PREF_KEY}_{lang}", True)
    if args.remove_version:
        store.put(f"{REMOVE_TITLE_VERSION_PREF}_{lang}", True)
    if args.title_regex:
        store.put(f"{REMOVE_TITLE_CUSTOM_PREF}_{lang}", args.title_regex)
    return http_cfg, store


def run(args: argparse.Namespace) -> str:
    http_cfg, store = load_preferences(args)
    source = BatoSource(store, lang=args.lang, site_lang=args.site_lang, http_config=http_cfg)

    if args.command == "latest":
        return dump(source.list_latest(args.page))
    if args.command == "popular":
        return dump(source.list_popular(args.page))
    if args.command == "search":
        return dump(source.search(args.page, args.query, build_filters(args)))
    if args.command == "details":
        return dump(source.fetch_details(ContentItem(canonical_id=args.id, title="")))
    if args.command == "chapters":
        return dump(source.fetch_chapters(ContentItem(canonical_id=args.id, title="")))
    if args.command == "pages":
        return dump(source.fetch_pages(ChapterItem(url=args.chapter_url, name="")))
    if args.command == "mirror":
        choices = MIRRORS_V4X if source.version is Version.V4 else MIRROR_CHOICES_V2X
        return dump({"version": source.version.value, "base_url": source.base_url, "choices": list(choices)})
    raise ValueError(f"Unknown command {args.command}")


def main(argv: Optional[Sequence[str]] = None):
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.debug:
        set_debug(True)
    with logging_to(sys.stderr):
        try:
            print(run(args))
        except BatoError as e:
            logger.exception("Fatal error while scraping: %s", e)
            sys.exit(2)


if __name__ == "__main__":
    main()
