"""Contains the FeedAggregator class which fetches the recent uploads of many channels
and merges them into a single feed.
"""

__all__ = ["FeedAggregator", "parse_duration"]

import asyncio
import logging
import re
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

from ytfeed.enums import Endpoint
from ytfeed.errors import AggregationError, AuthError, YTFeedError
from ytfeed.models.video import Channel, VideoEntry
from ytfeed.types import Clock, Transport

PAGE_SIZE = 50
STATS_BATCH_SIZE = 50

ISO8601_DURATION_PATTERN = re.compile(
    r"^P(?:(?P<days>\d+)D)?"
    r"(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)


def parse_duration(value: Any) -> int | None:
    """Convert an ISO 8601 duration such as ``PT15M33S`` into seconds.

    :param value: The duration to convert.
    :return: The number of seconds, or None if the value is not a duration.
    """
    if not isinstance(value, str):
        return None

    matched = ISO8601_DURATION_PATTERN.match(value.strip())
    if matched is None or value.strip() in ("P", "PT"):
        return None

    days = int(matched.group("days") or 0)
    hours = int(matched.group("hours") or 0)
    minutes = int(matched.group("minutes") or 0)
    seconds = int(matched.group("seconds") or 0)
    return days * 86_400 + hours * 3_600 + minutes * 60 + seconds


def _safe_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


class FeedAggregator:
    """Fetches the recent uploads of channels concurrently and merges them into one
    feed sorted from newest to oldest. It keeps no state between calls.
    """

    def __init__(self, transport: Transport, *, clock: Clock | None = None) -> None:
        """Set up the FeedAggregator instance.

        :param transport: The transport to send API requests with.
        :param clock: The function returning the current time.
            If not provided, the system clock in UTC is used.
        """
        self._logger = logging.getLogger(self.__class__.__name__)
        self._transport = transport
        self._clock = clock or (lambda: datetime.now(UTC))

    async def aggregate(
        self,
        channels: Iterable[Channel],
        lookback_days: int,
        max_results_per_channel: int,
    ) -> list[VideoEntry]:
        """Fetch the videos the channels published within the lookback window.

        Channels are fetched concurrently and a channel that fails does not affect the
        others. Only when every channel fails is an error raised.

        :param channels: The channels to fetch the videos of.
        :param lookback_days: How many days back to look for videos.
        :param max_results_per_channel: The maximum number of recent uploads to read
            per channel. Older videos within the window may be missed beyond it.
        :return: The videos, newest first. Videos published at the same time keep the
            order of the channels and of their uploads lists.
        :raises AuthError: If every channel failed and the credentials were rejected.
        :raises AggregationError: If every channel failed for any other reason.
        """
        channels = list(channels)
        if not channels:
            return []

        cutoff = self._clock() - timedelta(days=lookback_days)
        self._logger.debug(
            "Fetching videos of %d channels published since %s", len(channels), cutoff
        )

        results = await asyncio.gather(
            *(
                self._fetch_channel(channel, cutoff, max_results_per_channel)
                for channel in channels
            )
        )

        entries: list[VideoEntry] = []
        failures: dict[str, YTFeedError] = {}
        failed = 0
        for channel, result in zip(channels, results, strict=True):
            if isinstance(result, YTFeedError):
                failures[channel.name] = result
                failed += 1
            else:
                entries.extend(result)

        if failed == len(channels):
            self._raise_total_failure(failures)

        entries = self._deduplicate(entries)
        await self._add_stats(entries)

        self._logger.info(
            "Fetched %d videos from %d of %d channels",
            len(entries),
            len(channels) - failed,
            len(channels),
        )

        return sorted(entries, key=lambda entry: entry.published_at, reverse=True)

    async def _fetch_channel(
        self, channel: Channel, cutoff: datetime, max_results: int
    ) -> list[VideoEntry] | YTFeedError:
        """Fetch the videos of a channel published since the cutoff.

        :param channel: The channel to fetch the videos of.
        :param cutoff: The oldest published time to keep.
        :param max_results: The maximum number of uploads to read.
        :return: The videos in the order of the uploads list, or the error that
            stopped the fetch.
        """
        entries: list[VideoEntry] = []
        page_token: str | None = None
        read = 0

        try:
            while read < max_results:
                params = {
                    "part": "snippet",
                    "playlistId": channel.uploads_list_id,
                    "maxResults": str(min(PAGE_SIZE, max_results - read)),
                }
                if page_token:
                    params["pageToken"] = page_token

                data = await self._transport.request(Endpoint.PLAYLIST_ITEMS, params)
                items = data.get("items") or []
                read += len(items)

                reached_cutoff = False
                for item in items:
                    entry = self._make_entry(channel, item)
                    if entry is None:
                        continue
                    if entry.published_at < cutoff:
                        reached_cutoff = True
                        continue
                    entries.append(entry)

                page_token = data.get("nextPageToken")
                if not items or not page_token or reached_cutoff:
                    break
        except YTFeedError as ex:
            self._logger.warning("Failed to fetch videos for %s: %s", channel.name, ex)
            return ex

        self._logger.debug("Found %d recent videos for %s", len(entries), channel.name)

        return entries

    def _make_entry(self, channel: Channel, item: dict[str, Any]) -> VideoEntry | None:
        """Convert an uploads list item into a video.

        :param channel: The channel the uploads list belongs to.
        :param item: The uploads list item.
        :return: The video, or None if the item is unusable.
        """
        snippet = item.get("snippet") or {}
        video_id = (snippet.get("resourceId") or {}).get("videoId") or (
            item.get("contentDetails") or {}
        ).get("videoId")

        try:
            published_at = datetime.fromisoformat(snippet["publishedAt"])
        except (KeyError, TypeError, ValueError):
            self._logger.debug("Skipping item without a valid published time: %s", item)
            return None

        if not video_id:
            self._logger.debug("Skipping item without a video ID: %s", item)
            return None

        if published_at.tzinfo is None:
            published_at = published_at.replace(tzinfo=UTC)

        thumbnails = snippet.get("thumbnails") or {}
        thumbnail = (
            thumbnails.get("medium")
            or thumbnails.get("high")
            or thumbnails.get("default")
            or {}
        )

        return VideoEntry(
            id=video_id,
            title=snippet.get("title") or "",
            description=snippet.get("description") or "",
            channel_name=channel.name,
            channel_id=channel.id,
            url=f"https://www.youtube.com/watch?v={video_id}",
            published_at=published_at,
            thumbnail_url=thumbnail.get("url") or "",
        )

    @staticmethod
    def _deduplicate(entries: list[VideoEntry]) -> list[VideoEntry]:
        seen: set[str] = set()
        unique = []
        for entry in entries:
            if entry.id in seen:
                continue
            seen.add(entry.id)
            unique.append(entry)

        return unique

    async def _add_stats(self, entries: list[VideoEntry]) -> None:
        """Add the duration and the view count to the videos, in batches. A batch
        that fails leaves its videos without stats.

        :param entries: The videos to add the stats to. They must have unique IDs.
        """
        by_id = {entry.id: entry for entry in entries}
        video_ids = list(by_id)

        for start in range(0, len(video_ids), STATS_BATCH_SIZE):
            batch = video_ids[start : start + STATS_BATCH_SIZE]

            try:
                data = await self._transport.request(
                    Endpoint.VIDEOS,
                    {"part": "contentDetails,statistics", "id": ",".join(batch)},
                )
            except YTFeedError as ex:
                self._logger.warning("Failed to fetch video stats batch: %s", ex)
                continue

            for item in data.get("items") or []:
                entry = by_id.get(item.get("id"))
                if entry is None:
                    continue

                entry.duration_seconds = parse_duration(
                    (item.get("contentDetails") or {}).get("duration")
                )
                entry.view_count = _safe_int(
                    (item.get("statistics") or {}).get("viewCount")
                )

    @staticmethod
    def _raise_total_failure(failures: dict[str, YTFeedError]) -> None:
        """Raise the error describing that every channel failed.

        :param failures: The error of each channel, by channel name.
        """
        for error in failures.values():
            if isinstance(error, AuthError):
                raise AuthError(
                    f"Invalid credentials. Please log in again. ({error.message})",
                    error.status_code,
                ) from error

        raise AggregationError(
            {
                name: getattr(error, "message", None) or str(error)
                for name, error in failures.items()
            }
        )
