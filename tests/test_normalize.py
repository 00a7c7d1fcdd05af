from datetime import datetime, timedelta, timezone

import pytest

from batoto_scraper import normalize
from batoto_scraper.models import MangaStatus


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://bato.to/series/86663/solo-leveling", "86663"),
        ("/series/86663", "86663"),
        ("https://bato.si/title/86663-solo-leveling", "86663"),
        ("/title/86663-solo-leveling/1234-ch_1", "86663"),
        ("https://bato.to/v3x/title/86663", "86663"),
        ("not-a-url", "not-a-url"),
    ],
)
def test_canonicalize(url, expected):
    assert normalize.canonicalize(url) == expected


def test_canonicalize_is_idempotent():
    assert normalize.canonicalize(normalize.canonicalize("/title/86663-x")) == "86663"


def test_slug_stripping():
    assert normalize.strip_title_slug("/title/86663-solo-leveling") == "/title/86663"
    assert normalize.strip_chapter_slug("/title/86663-solo/1234-ch_1") == "/title/86663/1234"
    assert normalize.canonicalize(normalize.strip_series_url("/series/86663/solo-leveling?x=1")) == "86663"


def test_canonical_path():
    assert normalize.canonical_path("https://bato.si/title/86663-solo-leveling") == "/title/86663"
    assert normalize.canonical_path("https://bato.to/series/86663/solo-leveling") == "/series/86663"


def test_clean_title_without_options_only_trims():
    result = normalize.clean_title("  Solo Leveling (Official) ")
    assert result.title == "Solo Leveling (Official)"
    assert result.removed == []


def test_clean_title_removes_version_tags():
    result = normalize.clean_title("Solo Leveling (Official) [Colored]", remove_version=True)
    assert result.title == "Solo Leveling"
    assert result.removed == ["(Official)", "[Colored]"]


def test_clean_title_handles_nested_brackets():
    assert normalize.clean_title("Title (a (b) c)", remove_version=True).title == "Title"


def test_clean_title_is_idempotent():
    once = normalize.clean_title("Omniscient Reader 【Official】 (Remake)", remove_version=True)
    twice = normalize.clean_title(once.title, remove_version=True)
    assert twice.title == once.title
    assert twice.removed == []


def test_clean_title_custom_pattern_runs_first():
    result = normalize.clean_title("Foo - Raw Scans", custom_pattern=r"\s*-\s*raw scans")
    assert result.title == "Foo"
    assert result.removed == ["- Raw Scans"]


def test_clean_title_ignores_invalid_custom_pattern():
    assert normalize.clean_title("Foo (bar)", custom_pattern="(").title == "Foo (bar)"


def test_description_sections_in_order():
    text = normalize.build_description(
        summary="Hunter story.",
        extra_info="Season 2 soon.",
        notice="Licensed.",
        alt_titles=["Na Honjaman Level Up", " "],
        removed=["(Official)"],
    )
    positions = [
        text.index("#### **Summary**"),
        text.index("#### **Extra Info**"),
        text.index("Licensed."),
        text.index("#### **Alternative Titles**"),
        text.index("#### **Removed From Title**"),
    ]
    assert positions == sorted(positions)
    assert "- Na Honjaman Level Up" in text
    assert "- `(Official)`" in text


def test_description_notice_before_extra_info():
    text = normalize.build_description(
        summary="Hunter story.",
        extra_info="Season 2 soon.",
        notice="Licensed.",
        alt_titles=["Na Honjaman Level Up"],
        notice_before_extra=True,
    )
    positions = [
        text.index("#### **Summary**"),
        text.index("Licensed."),
        text.index("#### **Extra Info**"),
        text.index("#### **Alternative Titles**"),
    ]
    assert positions == sorted(positions)
    assert text.count("Licensed.") == 1


def test_description_skips_empty_sections():
    assert normalize.build_description() == ""
    text = normalize.build_description(summary="Hunter story.", extra_info="   ")
    assert "Extra Info" not in text
    assert text.startswith("----\n#### **Summary**")


def test_description_links_are_wrapped_once():
    text = normalize.build_description(summary="Read at https://example.com/x now")
    assert "[Example](https://example.com/x)" in text
    assert normalize.auto_markdown_links(text) == text


def test_existing_links_are_left_alone():
    assert normalize.auto_markdown_links("[Site](https://example.com)") == "[Site](https://example.com)"
    assert normalize.auto_markdown_links("<https://example.com>") == "<https://example.com>"


def test_relative_date_hours():
    expected = (datetime.now(timezone.utc) - timedelta(hours=3)).timestamp() * 1000
    assert abs(normalize.parse_relative_date("3 hours ago") - expected) < 1000


@pytest.mark.parametrize(
    "text,delta",
    [
        ("2 mins ago", timedelta(minutes=2)),
        ("1 min ago", timedelta(minutes=1)),
        ("5 secs ago", timedelta(seconds=5)),
        ("4 days ago", timedelta(days=4)),
        ("1 week ago", timedelta(days=7)),
    ],
)
def test_relative_date_units(text, delta):
    now = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)
    assert normalize.parse_relative_date(text, now) == int((now - delta).timestamp() * 1000)


def test_relative_date_months_clamp_day():
    now = datetime(2024, 3, 31, tzinfo=timezone.utc)
    expected = datetime(2024, 2, 29, tzinfo=timezone.utc)
    assert normalize.parse_relative_date("1 month ago", now) == int(expected.timestamp() * 1000)


def test_relative_date_years():
    now = datetime(2024, 5, 10, tzinfo=timezone.utc)
    expected = datetime(2022, 5, 10, tzinfo=timezone.utc)
    assert normalize.parse_relative_date("2 years ago", now) == int(expected.timestamp() * 1000)


@pytest.mark.parametrize("text", ["", "yesterday", "a few hours ago", "3 fortnights ago"])
def test_unparseable_relative_dates_are_zero(text):
    assert normalize.parse_relative_date(text) == 0


def test_rss_date():
    assert normalize.parse_rss_date("Mon, 01 Jan 2024 00:00:00 GMT") == 1704067200000
    assert normalize.parse_rss_date("garbage") == 0


def test_epoch_millis():
    assert normalize.parse_epoch_millis("1700000000000") == 1700000000000
    assert normalize.parse_epoch_millis(None) == 0
    assert normalize.parse_epoch_millis("soon") == 0


@pytest.mark.parametrize(
    "work,upload,expected",
    [
        ("Ongoing", None, MangaStatus.ONGOING),
        ("Completed", "Ongoing", MangaStatus.PUBLISHING_FINISHED),
        ("Completed", "Completed", MangaStatus.COMPLETED),
        (None, "Hiatus", MangaStatus.HIATUS),
        ("Cancelled", None, MangaStatus.CANCELLED),
        (None, None, MangaStatus.UNKNOWN),
    ],
)
def test_status_v2(work, upload, expected):
    assert normalize.parse_status_v2(work, upload) is expected


def test_status_v4():
    assert normalize.parse_status_v4("Completed") is MangaStatus.COMPLETED
    assert normalize.parse_status_v4("ONGOING") is MangaStatus.ONGOING
    assert normalize.parse_status_v4(None) is MangaStatus.UNKNOWN
