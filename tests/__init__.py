"""Contains fixtures and utility functions."""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from ytfeed import Channel, Endpoint, VideoEntry

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)

Handler = Callable[[Endpoint, dict[str, str]], dict[str, Any] | Exception]


class FakeTransport:
    """A transport that answers requests with a handler and records them."""

    def __init__(self, handler: Handler | None = None) -> None:
        self.requests: list[tuple[Endpoint, dict[str, str]]] = []
        self._handler = handler or (lambda _endpoint, _params: {"items": []})

    async def request(
        self, endpoint: Endpoint, params: Mapping[str, str]
    ) -> dict[str, Any]:
        self.requests.append((endpoint, dict(params)))
        result = self._handler(endpoint, dict(params))
        if isinstance(result, Exception):
            raise result
        return result

    def count(self, endpoint: Endpoint) -> int:
        """Count the requests sent to an endpoint."""
        return sum(1 for sent, _ in self.requests if sent == endpoint)


def get_channel(channel_id: str = "C1", name: str = "Mock Channel") -> Channel:
    """Create a mock channel."""
    return Channel(
        id=channel_id,
        name=name,
        uploads_list_id=f"UU{channel_id}",
        thumbnail_url=f"https://example.com/{channel_id}.jpg",
    )


def get_entry(
    video_id: str = "mock_video_id",
    *,
    days_ago: float = 1,
    duration_seconds: int | None = 600,
    title: str = "Mock Video",
    description: str = "",
    channel_name: str = "Mock Channel",
) -> VideoEntry:
    """Create a mock video."""
    return VideoEntry(
        id=video_id,
        title=title,
        description=description,
        channel_name=channel_name,
        channel_id="C1",
        url=f"https://www.youtube.com/watch?v={video_id}",
        published_at=NOW - timedelta(days=days_ago),
        thumbnail_url="https://example.com/thumb.jpg",
        duration_seconds=duration_seconds,
        view_count=100,
    )


def playlist_item(
    video_id: str, published_at: datetime, title: str = "Video title"
) -> dict[str, Any]:
    """Create an uploads list item as returned by the API."""
    return {
        "snippet": {
            "publishedAt": published_at.isoformat().replace("+00:00", "Z"),
            "channelId": "upstream_channel_id",
            "title": title,
            "description": f"Description of {title}",
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                "medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"},
            },
            "channelTitle": "Upstream channel title",
            "resourceId": {"kind": "youtube#video", "videoId": video_id},
        }
    }


def video_stats(
    video_id: str, duration: str = "PT10M", views: str = "1000"
) -> dict[str, Any]:
    """Create a video details item as returned by the API."""
    return {
        "id": video_id,
        "contentDetails": {"duration": duration},
        "statistics": {"viewCount": views},
    }


def channel_item(
    channel_id: str, title: str, uploads: str | None = None
) -> dict[str, Any]:
    """Create a channel item as returned by the API."""
    item: dict[str, Any] = {
        "id": channel_id,
        "snippet": {
            "title": title,
            "thumbnails": {"default": {"url": f"https://yt3.ggpht.com/{channel_id}"}},
        },
        "contentDetails": {"relatedPlaylists": {}},
    }
    if uploads is not None:
        item["contentDetails"]["relatedPlaylists"]["uploads"] = uploads
    return item
