"""Contains the dataclasses for the profile model."""

__all__ = ["Feed", "Profile"]

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Self

from ytfeed.models.video import Channel, VideoEntry


@dataclass
class Feed:
    """Represents the last fetched feed of a profile."""

    entries: list[VideoEntry] = field(default_factory=list)
    """The videos of the feed, newest first"""

    last_fetched_at: datetime | None = None
    """The time of the last successful fetch, or None if never fetched"""

    last_error: str | None = None
    """The error message of the last failed fetch, if any"""

    def to_dict(self) -> dict[str, Any]:
        """Convert the feed into a JSON-serializable dict."""
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "lastFetchedAt": (
                None
                if self.last_fetched_at is None
                else self.last_fetched_at.isoformat()
            ),
            "lastError": self.last_error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a feed from a dict made by :meth:`to_dict`."""
        last_fetched_at = data.get("lastFetchedAt")
        return cls(
            entries=[VideoEntry.from_dict(entry) for entry in data.get("entries", [])],
            last_fetched_at=(
                None
                if last_fetched_at is None
                else datetime.fromisoformat(last_fetched_at)
            ),
            last_error=data.get("lastError"),
        )


@dataclass
class Profile:
    """Represents a named set of tracked channels with its own feed."""

    id: str
    """The unique ID of the profile"""

    name: str
    """The name of the profile"""

    channels: list[Channel] = field(default_factory=list)
    """The tracked channels, unique by ID"""

    feed: Feed = field(default_factory=Feed)
    """The last fetched feed"""

    def find_channel(self, query: str) -> Channel | None:
        """Find a tracked channel by its ID or by its name, ignoring case.

        :param query: The channel ID or name.
        :return: The matching channel, or None if not tracked.
        """
        folded = query.strip().casefold()
        for channel in self.channels:
            if channel.id == query.strip() or channel.name.casefold() == folded:
                return channel

        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert the profile into a JSON-serializable dict."""
        return {
            "id": self.id,
            "name": self.name,
            "channels": [channel.to_dict() for channel in self.channels],
            "feed": self.feed.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a profile from a dict made by :meth:`to_dict`."""
        return cls(
            id=data["id"],
            name=data["name"],
            channels=[Channel.from_dict(channel) for channel in data["channels"]],
            feed=Feed.from_dict(data.get("feed") or {}),
        )
