"""Contains the dataclasses for the video model."""

__all__ = ["Channel", "VideoEntry"]

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Self


@dataclass(frozen=True)
class Channel:
    """Represents a resolved YouTube channel."""

    id: str
    """The unique ID of the channel"""

    name: str
    """The name of the channel"""

    uploads_list_id: str
    """The ID of the playlist that holds the uploads of the channel"""

    thumbnail_url: str | None = None
    """The URL of the thumbnail of the channel, if available"""

    def to_dict(self) -> dict[str, Any]:
        """Convert the channel into a JSON-serializable dict."""
        return {
            "id": self.id,
            "name": self.name,
            "thumbnailUrl": self.thumbnail_url,
            "uploadsListId": self.uploads_list_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a channel from a dict made by :meth:`to_dict`.

        :raises KeyError: If a required key is missing.
        """
        return cls(
            id=data["id"],
            name=data["name"],
            uploads_list_id=data["uploadsListId"],
            thumbnail_url=data.get("thumbnailUrl"),
        )


@dataclass
class VideoEntry:
    """Represents a video in a feed."""

    id: str
    """The unique ID of the video"""

    title: str
    """The title of the video"""

    description: str
    """The description of the video"""

    channel_name: str
    """The name of the channel that uploaded the video"""

    channel_id: str
    """The ID of the channel that uploaded the video"""

    url: str
    """The URL of the video"""

    published_at: datetime
    """The published time of the video"""

    thumbnail_url: str
    """The URL of the thumbnail of the video"""

    duration_seconds: int | None = None
    """The length of the video in seconds, if known"""

    view_count: int | None = None
    """The number of views of the video, if known"""

    def to_dict(self) -> dict[str, Any]:
        """Convert the video into a JSON-serializable dict."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "channelName": self.channel_name,
            "channelId": self.channel_id,
            "url": self.url,
            "publishedAt": self.published_at.isoformat(),
            "thumbnailUrl": self.thumbnail_url,
            "durationSeconds": self.duration_seconds,
            "viewCount": self.view_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a video from a dict made by :meth:`to_dict`.

        :raises KeyError: If a required key is missing.
        :raises ValueError: If the published time is not in ISO 8601 format.
        """
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description") or "",
            channel_name=data["channelName"],
            channel_id=data["channelId"],
            url=data["url"],
            published_at=datetime.fromisoformat(data["publishedAt"]),
            thumbnail_url=data.get("thumbnailUrl") or "",
            duration_seconds=data.get("durationSeconds"),
            view_count=data.get("viewCount"),
        )
