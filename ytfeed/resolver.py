"""Contains the ChannelResolver class which turns channel IDs, handles and names into
Channel records.
"""

__all__ = ["CHANNEL_ID_PATTERN", "ChannelResolver"]

import logging
import re
from collections.abc import Iterable
from typing import Any

from ytfeed.enums import Endpoint
from ytfeed.errors import NotFoundError, ResolutionIncompleteError, YTFeedError
from ytfeed.models.video import Channel
from ytfeed.types import Transport

CHANNEL_ID_PATTERN = re.compile(r"^UC[0-9A-Za-z_-]{22}$")


class ChannelResolver:
    """Resolves user input into Channel records. It keeps no state between calls."""

    def __init__(self, transport: Transport) -> None:
        """Set up the ChannelResolver instance.

        :param transport: The transport to send API requests with.
        """
        self._logger = logging.getLogger(self.__class__.__name__)
        self._transport = transport

    async def resolve(self, query: str) -> Channel:
        """Resolve a channel ID, handle or name into a channel.

        A channel ID is looked up directly with a single request. Anything else is
        searched for, and the best match is then looked up for its uploads list.

        :param query: The channel ID, handle or name.
        :return: The resolved channel.
        :raises NotFoundError: If no channel matches the query.
        :raises ResolutionIncompleteError: If the channel has no uploads list.
        :raises UpstreamError: If the request failed.
        """
        query = query.strip()

        if CHANNEL_ID_PATTERN.match(query):
            self._logger.debug("Resolving by channel ID: %s", query)
            channel = await self._resolve_by_id(query)
        else:
            self._logger.debug("Resolving by search: %s", query)
            channel = await self._resolve_by_search(query)

        self._logger.info(
            "Resolved %s to channel: %s (%s)", query, channel.name, channel.id
        )

        return channel

    async def resolve_many(self, queries: Iterable[str]) -> list[Channel]:
        """Resolve many queries one by one. A query that fails to resolve is logged
        and skipped, so one bad entry never blocks the rest.

        :param queries: The channel IDs, handles or names.
        :return: The channels that were resolved, in the order of the queries.
        """
        channels = []
        for query in queries:
            try:
                channels.append(await self.resolve(query))
            except YTFeedError as ex:
                self._logger.warning("Failed to resolve channel '%s': %s", query, ex)

        return channels

    async def _resolve_by_id(self, channel_id: str) -> Channel:
        data = await self._transport.request(
            Endpoint.CHANNELS,
            {"part": "snippet,contentDetails", "id": channel_id},
        )

        items = data.get("items") or []
        if not items:
            raise NotFoundError(f'No channel found with ID "{channel_id}"')

        item = items[0]
        snippet = item.get("snippet") or {}

        return self._make_channel(
            channel_id=item.get("id") or channel_id,
            name=snippet.get("title") or channel_id,
            thumbnail_url=self._get_thumbnail_url(snippet),
            uploads_list_id=self._get_uploads_list_id(item),
        )

    async def _resolve_by_search(self, query: str) -> Channel:
        data = await self._transport.request(
            Endpoint.SEARCH,
            {"part": "snippet", "type": "channel", "q": query, "maxResults": "1"},
        )

        items = data.get("items") or []
        if not items:
            raise NotFoundError(f'No channel found for "{query}"')

        item = items[0]
        snippet = item.get("snippet") or {}
        channel_id = snippet.get("channelId") or (item.get("id") or {}).get("channelId")
        if not channel_id:
            raise NotFoundError(f'No channel found for "{query}"')

        details = await self._transport.request(
            Endpoint.CHANNELS, {"part": "contentDetails", "id": channel_id}
        )
        detail_items = details.get("items") or [{}]

        return self._make_channel(
            channel_id=channel_id,
            name=snippet.get("title") or snippet.get("channelTitle") or query,
            thumbnail_url=self._get_thumbnail_url(snippet),
            uploads_list_id=self._get_uploads_list_id(detail_items[0]),
        )

    @staticmethod
    def _make_channel(
        *,
        channel_id: str,
        name: str,
        thumbnail_url: str | None,
        uploads_list_id: str | None,
    ) -> Channel:
        if not uploads_list_id:
            raise ResolutionIncompleteError(
                f"Could not find uploads playlist for channel: {name} ({channel_id})"
            )

        return Channel(
            id=channel_id,
            name=name,
            uploads_list_id=uploads_list_id,
            thumbnail_url=thumbnail_url,
        )

    @staticmethod
    def _get_thumbnail_url(snippet: dict[str, Any]) -> str | None:
        return ((snippet.get("thumbnails") or {}).get("default") or {}).get("url")

    @staticmethod
    def _get_uploads_list_id(item: dict[str, Any]) -> str | None:
        return (
            (item.get("contentDetails") or {}).get("relatedPlaylists") or {}
        ).get("uploads")
