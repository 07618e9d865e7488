"""Test filtering the videos of a feed."""

from tests import get_entry
from ytfeed import filter_entries


def test_no_filter() -> None:
    """Test that the filter is the identity without a duration or a query."""
    entries = [
        get_entry("a", duration_seconds=10),
        get_entry("b", duration_seconds=None),
        get_entry("c", duration_seconds=5000),
    ]

    assert filter_entries(entries, 0, "") == entries
    assert filter_entries(entries, 0, "   ") == entries


def test_min_duration() -> None:
    """Test that short videos are dropped and unknown durations are kept."""
    entries = [
        get_entry("short", duration_seconds=30),
        get_entry("unknown", duration_seconds=None),
        get_entry("exact", duration_seconds=90),
        get_entry("long", duration_seconds=600),
    ]

    filtered = filter_entries(entries, 90)

    assert [entry.id for entry in filtered] == ["unknown", "exact", "long"]
    assert all(
        entry.duration_seconds is None or entry.duration_seconds >= 90
        for entry in filtered
    )


def test_query() -> None:
    """Test that the query matches the title, description and channel name."""
    entries = [
        get_entry("title", title="Learning PYTHON"),
        get_entry("description", description="all about python"),
        get_entry("channel", channel_name="Python Weekly"),
        get_entry("none", title="Rust", description="", channel_name="Other"),
    ]

    filtered = filter_entries(entries, 0, "Python")

    assert [entry.id for entry in filtered] == ["title", "description", "channel"]


def test_keeps_order() -> None:
    """Test that filtering never reorders the videos."""
    entries = [get_entry(str(i), days_ago=i % 3) for i in range(10)]

    filtered = filter_entries(entries, 0, "mock")

    assert filtered == entries


def test_query_trimmed() -> None:
    """Test that whitespace around the query is ignored."""
    entries = [
        get_entry("match", title="Weekly python news"),
        get_entry("other", title="Pythonic", description="", channel_name="Other"),
    ]

    filtered = filter_entries(entries, 0, "  PYTHON news\n")

    assert [entry.id for entry in filtered] == ["match"]
