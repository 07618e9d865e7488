"""Contains the rules deciding when a feed is fetched again and when the defaults are
applied.
"""

__all__ = ["needs_seeding", "should_refresh"]

from datetime import datetime, timedelta

from ytfeed.models import Defaults


def should_refresh(
    last_fetched_at: datetime | None,
    refresh_interval_hours: int,
    now: datetime,
    *,
    channel_count: int = 1,
) -> bool:
    """Check if a feed is due to be fetched again.

    :param last_fetched_at: The time of the last successful fetch, or None if the feed
        was never fetched.
    :param refresh_interval_hours: How many hours a feed stays fresh.
    :param now: The current time.
    :param channel_count: The number of channels of the feed's profile.
    :return: True if a feed that was never fetched has channels, or if more hours
        than the interval have passed since the last fetch.
    """
    if last_fetched_at is None:
        return channel_count > 0

    return (now - last_fetched_at) / timedelta(hours=1) > refresh_interval_hours


def needs_seeding(applied: bool, defaults: Defaults) -> bool:
    """Check if the default channels and profiles still have to be applied.

    :param applied: Whether the defaults were applied before.
    :param defaults: The defaults to apply.
    :return: True if the defaults were never applied and there is something to apply.
    """
    return not applied and bool(defaults.channels or defaults.profiles)
