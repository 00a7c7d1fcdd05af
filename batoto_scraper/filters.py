"""
Search filter values.

Only what a filter does to the outgoing request lives here; how a host
application renders the choices is its own business.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class SortOption:
    name: str
    value: str
    field_v4: str


SORT_OPTIONS: Tuple[SortOption, ...] = (
    SortOption("Z-A", "title", "field_name"),
    SortOption("Last Updated", "update", "field_update"),
    SortOption("Newest Added", "create", "field_create"),
    SortOption("Most Views Totally", "views_a", "field_views"),
    SortOption("Most Views 365 days", "views_y", "field_views_y"),
    SortOption("Most Views 30 days", "views_m", "field_views_m"),
    SortOption("Most Views 7 days", "views_w", "field_views_w"),
    SortOption("Most Views 24 hours", "views_d", "field_views_d"),
    SortOption("Most Views 60 minutes", "views_h", "field_views_h"),
)
SORT_BY_VALUE: Dict[str, SortOption] = {opt.value: opt for opt in SORT_OPTIONS}

# saved lists (V2 "_utils/comic-list?type=")
UTILS_TYPES = ("d150", "d030", "d007", "d001", "h001")
# reading history (V2 "ajax.my.<type>.paging")
HISTORY_TYPES = ("comic_history", "comic_bookmark", "comic_rating")


@dataclass(frozen=True)
class Sort:
    key: str = "update"
    ascending: bool = False

    @property
    def option(self) -> SortOption:
        try:
            return SORT_BY_VALUE[self.key]
        except KeyError:
            raise ValueError(f"Unknown sort key {self.key!r}, expected one of {', '.join(SORT_BY_VALUE)}")


@dataclass
class SearchFilters:
    letter_mode: bool = False
    sort: Optional[Sort] = None
    status: str = ""
    include_genres: List[str] = field(default_factory=list)
    exclude_genres: List[str] = field(default_factory=list)
    origins: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    min_chapters: str = ""
    max_chapters: str = ""
    utils: str = ""
    history: str = ""

    def special_mode(self) -> Optional[Tuple[str, str]]:
        """``("utils", type)`` or ``("history", type)`` when one is active; it overrides everything else."""
        if self.utils:
            return ("utils", self.utils)
        if self.history:
            return ("history", self.history)
        return None

    def genres_param(self, always_separator: bool) -> Optional[str]:
        if not self.include_genres and not self.exclude_genres:
            return None
        value = ",".join(self.include_genres)
        if always_separator or self.exclude_genres:
            value += "|" + ",".join(self.exclude_genres)
        return value

    def chapters_param(self) -> Optional[str]:
        if not self.min_chapters and not self.max_chapters:
            return None
        return f"{self.min_chapters}-{self.max_chapters}"
