"""
This example demonstrates how to use the FileStore class to keep the profiles, the
videos and the preferences on the local disk, so they survive a restart. The feed is
only fetched again once it is older than the refresh interval.

You can also extend the abstract class KeyValueStore to create your own storage.
"""

import asyncio

from ytfeed import AsyncFeedTracker, Defaults, FileStore, YouTubeTransport


async def main() -> None:
    """Run the application."""
    # This will create a new folder called "feedData" in the current directory
    store = FileStore(dir_path="./feedData")

    # The default channels are only added on the first run
    defaults = Defaults(channels=["UCuFFtHWoLl5fauMMD5Ww2jA", "@mreflow"])

    async with YouTubeTransport(api_key="Your API key here") as transport:
        tracker = await AsyncFeedTracker(
            transport=transport, store=store, defaults=defaults
        ).start()

        await tracker.refresh_if_stale()

        for video in tracker.feed():
            print(f"{video.published_at:%Y-%m-%d} {video.channel_name}: {video.title}")


if __name__ == "__main__":
    asyncio.run(main())
