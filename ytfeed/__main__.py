"""Script for fetching the feed of the active profile, or for serving the YouTube proxy.

Usage::

    python -m ytfeed          # print the recent videos of the active profile
    python -m ytfeed serve    # serve the YouTube proxy on port 8000
"""

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from ytfeed import AsyncFeedTracker, Defaults, FileStore, YouTubeTransport
from ytfeed.errors import YTFeedError
from ytfeed.server import YouTubeProxy
from ytfeed.transport import API_BASE_URL


async def print_feed() -> None:
    """Scan the active profile if its feed is stale and print its videos."""
    default_channels = [
        channel.strip()
        for channel in os.getenv("YTFEED_DEFAULT_CHANNELS", "").split(",")
        if channel.strip()
    ]

    async with YouTubeTransport(
        api_key=os.getenv("YTFEED_API_KEY"),
        base_url=os.getenv("YTFEED_BASE_URL", API_BASE_URL),
        pin=os.getenv("YTFEED_PIN"),
    ) as transport:
        tracker = await AsyncFeedTracker(
            transport=transport,
            store=FileStore(dir_path=os.getenv("YTFEED_DATA_DIR", "./.ytfeed")),
            defaults=Defaults(channels=default_channels),
        ).start()

        try:
            await tracker.refresh_if_stale()
        except YTFeedError:
            logging.getLogger(__name__).warning("Showing the previous videos")

        for entry in tracker.feed():
            print(  # noqa: T201
                f"{entry.published_at:%Y-%m-%d %H:%M} [{entry.channel_name}] "
                f"{entry.title} {entry.url}"
            )

        if tracker.profile.feed.last_error:
            print(f"Error: {tracker.profile.feed.last_error}")  # noqa: T201


if __name__ == "__main__":  # pragma: no cover
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if sys.argv[1:] == ["serve"]:
        YouTubeProxy(
            api_key=os.getenv("YTFEED_API_KEY"), pin=os.getenv("YTFEED_PIN")
        ).run(host=os.getenv("YTFEED_HOST", "127.0.0.1"), log_level=logging.INFO)
    else:
        asyncio.run(print_feed())
