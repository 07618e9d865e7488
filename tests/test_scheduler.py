"""Test the rules deciding when to fetch again."""

from datetime import timedelta

from tests import NOW
from ytfeed import Defaults, ProfileDefaults, should_refresh
from ytfeed.scheduler import needs_seeding


def test_never_fetched() -> None:
    """Test that a feed that was never fetched is refreshed only with channels."""
    assert should_refresh(None, 12, NOW, channel_count=1)
    assert should_refresh(None, 12, NOW)
    assert not should_refresh(None, 12, NOW, channel_count=0)


def test_fresh_and_stale() -> None:
    """Test the staleness threshold."""
    assert not should_refresh(NOW - timedelta(hours=1), 12, NOW)
    assert should_refresh(NOW - timedelta(hours=13), 12, NOW)
    assert not should_refresh(NOW - timedelta(hours=12), 12, NOW)
    assert should_refresh(NOW - timedelta(hours=12, seconds=1), 12, NOW)


def test_needs_seeding() -> None:
    """Test the gate of the default seeding."""
    defaults = Defaults(channels=["@mock"])

    assert needs_seeding(False, defaults)
    assert not needs_seeding(True, defaults)
    assert not needs_seeding(False, Defaults())
    assert needs_seeding(False, Defaults(profiles=[ProfileDefaults(name="Work")]))
