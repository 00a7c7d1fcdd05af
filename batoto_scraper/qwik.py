"""
Decoder for the Qwik ``objs`` state embedded in V3/V4 pages.

The payload is a flat array of slots. Object fields and array elements are
frequently base-36 strings pointing at other slots, so the real document is
a pointer graph flattened into an array. :class:`QwikGraph` resolves it on
demand with a per-graph memo and a visiting set so self-references terminate.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from bs4 import BeautifulSoup

from .log import logger
from .models import PagingInfo

COVER_KEYS = ("urlCover600", "urlCover300", "urlCover")
TITLE_PATH_PREFIX = "/title/"


def parse_qwik_objs(document: BeautifulSoup) -> Optional[List[Any]]:
    for script in document.select("script[type='qwik/json']"):
        text = (script.string or script.get_text() or "").strip()
        if not text:
            continue
        try:
            root = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("Skipping qwik/json script that is not valid JSON")
            continue
        objs = root.get("objs") if isinstance(root, dict) else None
        if isinstance(objs, list):
            return objs
    return None


def _slot_index(value: str) -> Optional[int]:
    # int(x, 36) also accepts signs, underscores and upper case; slots never do
    if not value or not value.isalnum() or not value.isascii() or value != value.lower():
        return None
    try:
        return int(value, 36)
    except ValueError:
        return None


class QwikGraph:
    """One decode session over a slot table. Do not share across calls."""

    def __init__(self, objs: List[Any]):
        self.objs = objs
        self._cache: Dict[int, Any] = {}
        self._visiting: Set[int] = set()

    def resolve(self, value: Any) -> Any:
        # explicit work stack; pointer chains can be deeper than the interpreter stack
        tasks: List[Tuple[str, Any]] = [(_EVAL, value)]
        results: List[Any] = []
        try:
            while tasks:
                op, arg = tasks.pop()
                if op == _EVAL:
                    self._evaluate(arg, tasks, results)
                elif op == _SLOT_DONE:
                    self._visiting.discard(arg)
                    self._cache[arg] = results[-1]
                elif op == _BUILD_DICT:
                    values = _pop_many(results, len(arg))
                    results.append(dict(zip(arg, values)))
                else:
                    results.append(_pop_many(results, arg))
        finally:
            self._visiting.clear()
        return results[-1]

    def _evaluate(self, value: Any, tasks: List[Tuple[str, Any]], results: List[Any]) -> None:
        if isinstance(value, str):
            index = _slot_index(value)
            if index is None or not 0 <= index < len(self.objs):
                results.append(value)
            elif index in self._cache:
                results.append(self._cache[index])
            elif index in self._visiting:
                results.append(None)
            else:
                self._visiting.add(index)
                tasks.append((_SLOT_DONE, index))
                tasks.append((_EVAL, self.objs[index]))
        elif isinstance(value, dict):
            keys = list(value)
            tasks.append((_BUILD_DICT, keys))
            tasks.extend((_EVAL, value[key]) for key in reversed(keys))
        elif isinstance(value, list):
            tasks.append((_BUILD_LIST, len(value)))
            tasks.extend((_EVAL, item) for item in reversed(value))
        else:
            results.append(value)

    def resolve_object(self, obj: Dict[str, Any]) -> Dict[str, Any]:
        return self.resolve(obj)

    def resolve_slot(self, index: int) -> Any:
        return self.resolve(_to_base36(index))

    def objects(self) -> Iterator[Tuple[int, Dict[str, Any]]]:
        for i, slot in enumerate(self.objs):
            if isinstance(slot, dict):
                yield i, slot


_EVAL = "eval"
_SLOT_DONE = "slot"
_BUILD_DICT = "dict"
_BUILD_LIST = "list"


def _pop_many(stack: List[Any], n: int) -> List[Any]:
    items = stack[len(stack) - n:]
    del stack[len(stack) - n:]
    return items


def _to_base36(n: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(digits[r])
    return "".join(reversed(out))


# ---------------------------
# Value helpers
# ---------------------------
def as_string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def extract_string(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return as_string(value.get("name"))
    return None


def extract_string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [s for s in (extract_string(v) for v in value) if s is not None]
    single = extract_string(value)
    return [single] if single is not None else []


def first_non_blank(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value and value.strip():
            return value
    return None


# ---------------------------
# Record lookups
# ---------------------------
def _title_record(graph: QwikGraph, slot: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if "urlPath" not in slot or "name" not in slot:
        return None
    resolved = graph.resolve_object(slot)
    url_path = as_string(resolved.get("urlPath"))
    if not url_path or not url_path.startswith(TITLE_PATH_PREFIX):
        return None
    return resolved


def find_comic_details(graph: QwikGraph) -> Optional[Dict[str, Any]]:
    for _, slot in graph.objects():
        resolved = _title_record(graph, slot)
        if resolved is not None and any(key in resolved for key in COVER_KEYS):
            return resolved
    return None


def iter_comics(graph: QwikGraph) -> Iterator[Tuple[bool, Dict[str, Any]]]:
    """
    Yield ``(has_cover, record)`` for every slot that looks like a title
    entry. Entries without a cover still count towards the page size
    heuristic, so they are yielded with ``has_cover=False``.
    """
    for _, slot in graph.objects():
        resolved = _title_record(graph, slot)
        if resolved is None:
            continue
        yield any(key in slot for key in COVER_KEYS), resolved


def find_page_size(graph: QwikGraph, page: int) -> Optional[int]:
    for _, slot in graph.objects():
        if "page" not in slot or "size" not in slot:
            continue
        resolved = graph.resolve_object(slot)
        size = as_int(resolved.get("size"))
        page_value = as_int(resolved.get("page"))
        if size is not None and (page_value is None or page_value == page):
            return size
    return None


def find_paging_info(graph: QwikGraph, page: int) -> Optional[PagingInfo]:
    for _, slot in graph.objects():
        if "paging" in slot:
            paging = graph.resolve(slot["paging"])
        elif "pages" in slot or "total" in slot:
            paging = graph.resolve_object(slot)
        else:
            continue
        if not isinstance(paging, dict):
            continue
        page_value = as_int(paging.get("page"))
        pages = as_int(paging.get("pages"))
        next_page = as_int(paging.get("next"))
        if pages is None:
            continue
        if page_value is None or page_value == page:
            return PagingInfo(page_value, pages, next_page)
    return None
