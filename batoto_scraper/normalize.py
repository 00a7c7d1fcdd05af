"""
Identifier, title and description clean-up shared by every site version.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlparse

from .log import logger
from .models import MangaStatus

SERIES_ID_RE = re.compile(r"/(?:series|title)/(\d+)")
TITLE_SLUG_RE = re.compile(r"/title/(\d+)(-[^/]*)?")
CHAPTER_SLUG_RE = re.compile(r"/title/(\d+)(-[^/]*)?/(\d+)(-[^/]*)?")

TITLE_NOISE_RE = re.compile(
    r"\([^()]*\)|\{[^{}]*\}|\[(?:(?!]).)*]|«[^»]*»|〘[^〙]*〙|「[^」]*」|『[^』]*』|≪[^≫]*≫|﹛[^﹜]*﹜"
    r"|〖[^〖〗]*〗|\U0001690D.+?\U0001690D|《[^》]*》|⌜.+?⌝|⟨[^⟩]*⟩|【[^】]*】"
    r"|([|].*)|([/].*)|([~].*)|-[^-]*-|‹[^›]*›|/Official|/ Official",
    re.IGNORECASE,
)

DIVIDER = "----"

URL_RE = re.compile(
    r"(?:[a-zA-Z][a-zA-Z0-9+.-]*:[^\s<>()\[\]]+"
    r"|(?:www\.|m\.)?(?:[a-zA-Z0-9-]+\.)+[A-Za-z]{2,}(?:/[^\s<>()\[\]]*)?)"
)


# ---------------------------
# Identifiers
# ---------------------------
def canonicalize(url: str) -> str:
    """Numeric id of a series/title URL, or ``url`` itself when there is none."""
    m = SERIES_ID_RE.search(url or "")
    if m is None or not m.group(1):
        return url
    return m.group(1)


def strip_title_slug(url: str) -> str:
    return TITLE_SLUG_RE.sub(r"/title/\1", url)


def strip_chapter_slug(url: str) -> str:
    return CHAPTER_SLUG_RE.sub(r"/title/\1/\3", url)


def strip_series_url(url: str) -> str:
    """Drop the query and everything after the last dash."""
    head = url.split("?", 1)[0]
    return head.rsplit("-", 1)[0] if "-" in head else head


def extract_path(url: str) -> Optional[str]:
    trimmed = (url or "").strip()
    if not trimmed:
        return None
    if trimmed.startswith("http"):
        return urlparse(trimmed).path or None
    return trimmed.split("?", 1)[0].split("#", 1)[0]


def canonical_path(url: str) -> str:
    """Path a details response was served from, reduced to ``/title/<id>`` or ``/series/<id>``."""
    path = extract_path(url) or url
    if "/title/" in path:
        return strip_title_slug(strip_chapter_slug(path))
    m = SERIES_ID_RE.search(path)
    if m:
        return f"/series/{m.group(1)}"
    return strip_series_url(path) if "/series/" in path else path


def remove_entities(text: str) -> str:
    return html.unescape(text or "")


# ---------------------------
# Titles
# ---------------------------
@dataclass
class CleanedTitle:
    title: str
    removed: List[str] = field(default_factory=list)


def _compile_custom(pattern: str) -> Optional[re.Pattern]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        logger.warning("Ignoring invalid custom title regex %r: %s", pattern, e)
        return None


def clean_title(raw: str, custom_pattern: Optional[str] = None, remove_version: bool = False) -> CleanedTitle:
    title = raw or ""
    removed: List[str] = []

    def strip(regex: re.Pattern) -> None:
        nonlocal title
        # repeat until stable: "(a (b) c)" only exposes its outer group after one pass
        while True:
            found = [m.group(0) for m in regex.finditer(title) if m.group(0)]
            if not found:
                return
            removed.extend(f.strip() for f in found if f.strip())
            title = regex.sub("", title)

    if custom_pattern:
        regex = _compile_custom(custom_pattern)
        if regex is not None:
            strip(regex)
    if remove_version:
        strip(TITLE_NOISE_RE)
    return CleanedTitle(title.strip(), removed)


# ---------------------------
# Descriptions
# ---------------------------
def _link_label(url: str) -> Optional[str]:
    lowered = url.lower()
    if lowered.startswith(("https://www.", "http://www.", "https://m.", "http://m.")):
        host = url.split("://", 1)[1].split(".", 1)[1].split(".", 1)[0]
    elif lowered.startswith(("https://", "http://")):
        host = url.split("://", 1)[1].split(".", 1)[0]
    else:
        candidate = f"http://{url}" if lowered.startswith(("www.", "m.")) else url
        try:
            host = urlparse(candidate).hostname or ""
        except ValueError:
            host = ""
        if not host:
            host = url.split("/", 1)[0].split("?", 1)[0]
    if host and any(ch.isalpha() for ch in host):
        return host[0].upper() + host[1:]
    return None


def auto_markdown_links(text: str) -> str:
    def replace(m: re.Match) -> str:
        url = m.group(0)
        start, end = m.start(), m.end()
        in_markdown = start >= 2 and text[start - 2:start] == "]("
        in_angle = start >= 1 and text[start - 1] == "<" and end < len(text) and text[end] == ">"
        if in_markdown or in_angle:
            return url
        label = _link_label(url)
        return f"[{label}]({url})" if label else f"<{url}>"

    return URL_RE.sub(replace, text).strip()


def build_description(
    summary: Optional[str] = None,
    extra_info: Optional[str] = None,
    notice: Optional[str] = None,
    alt_titles: Iterable[str] = (),
    removed: Iterable[str] = (),
    notice_before_extra: bool = False,
) -> str:
    """
    Assemble the Markdown description. The notice paragraph follows the
    extra info unless ``notice_before_extra`` is set (V2 detail pages).
    """
    parts: List[str] = []
    notice_part = f"\n\n{notice}" if notice and notice.strip() else None
    if summary and summary.strip():
        parts.append(f"\n\n{DIVIDER}\n#### **Summary**\n{summary}")
    if notice_part and notice_before_extra:
        parts.append(notice_part)
    if extra_info and extra_info.strip():
        parts.append(f"\n\n{DIVIDER}\n#### **Extra Info**\n{extra_info}")
    if notice_part and not notice_before_extra:
        parts.append(notice_part)
    alt = [t.strip() for t in alt_titles if t and t.strip()]
    if alt:
        parts.append(f"\n\n{DIVIDER}\n#### **Alternative Titles**\n" + "\n".join(f"- {t}" for t in alt))
    stripped = [r for r in removed if r]
    if stripped:
        parts.append(f"\n\n{DIVIDER}\n#### **Removed From Title**\n" + "".join(f"- `{r}`\n" for r in stripped))
    return auto_markdown_links("".join(parts).strip())


# ---------------------------
# Dates
# ---------------------------
# Plural forms first so "mins" is not read as "min" + noise
_RELATIVE_UNITS: Tuple[Tuple[str, str, int], ...] = (
    ("secs", "seconds", 1),
    ("mins", "minutes", 1),
    ("hours", "hours", 1),
    ("days", "days", 1),
    ("weeks", "days", 7),
    ("months", "months", 1),
    ("years", "years", 1),
    ("sec", "seconds", 1),
    ("min", "minutes", 1),
    ("hour", "hours", 1),
    ("day", "days", 1),
    ("week", "days", 7),
    ("month", "months", 1),
    ("year", "years", 1),
)


def _to_millis(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def _shift_months(dt: datetime, months: int) -> datetime:
    month_index = dt.year * 12 + (dt.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    # clamp the day like a calendar would (Mar 31 - 1 month -> Feb 28/29)
    for day in (dt.day, 30, 29, 28):
        try:
            return dt.replace(year=year, month=month, day=day)
        except ValueError:
            continue
    return dt.replace(year=year, month=month, day=28)


def parse_relative_date(text: str, now: Optional[datetime] = None) -> int:
    """'3 hours ago' -> epoch millis. Anything unparseable gives 0."""
    text = (text or "").strip()
    if not text:
        return 0
    try:
        value = int(text.split(" ", 1)[0])
    except ValueError:
        return 0
    now = now or datetime.now(timezone.utc)
    for token, unit, factor in _RELATIVE_UNITS:
        if token not in text:
            continue
        if unit == "months":
            return _to_millis(_shift_months(now, value))
        if unit == "years":
            return _to_millis(_shift_months(now, value * 12))
        return _to_millis(now - timedelta(**{unit: value * factor}))
    return 0


def parse_rss_date(text: str) -> int:
    try:
        dt = parsedate_to_datetime((text or "").strip())
    except (TypeError, ValueError, IndexError):
        return 0
    if dt is None:
        return 0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return _to_millis(dt)


def parse_epoch_millis(value: Optional[str]) -> int:
    try:
        return int(value) if value else 0
    except ValueError:
        return 0


# ---------------------------
# Status
# ---------------------------
def parse_status_v2(work_status: Optional[str], upload_status: Optional[str]) -> MangaStatus:
    status = work_status if work_status is not None else upload_status
    if status is None:
        return MangaStatus.UNKNOWN
    if "Ongoing" in status:
        return MangaStatus.ONGOING
    if "Cancelled" in status:
        return MangaStatus.CANCELLED
    if "Hiatus" in status:
        return MangaStatus.HIATUS
    if "Completed" in status:
        if upload_status and "Ongoing" in upload_status:
            return MangaStatus.PUBLISHING_FINISHED
        return MangaStatus.COMPLETED
    return MangaStatus.UNKNOWN


def parse_status_v4(status: Optional[str]) -> MangaStatus:
    normalized = (status or "").lower()
    for word, value in (
        ("ongoing", MangaStatus.ONGOING),
        ("completed", MangaStatus.COMPLETED),
        ("hiatus", MangaStatus.HIATUS),
        ("cancelled", MangaStatus.CANCELLED),
    ):
        if word in normalized:
            return value
    return MangaStatus.UNKNOWN
