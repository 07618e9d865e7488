"""The following example demonstrates how to use the AsyncFeedTracker to print the
recent uploads of a few channels.
"""

import asyncio

from ytfeed import AsyncFeedTracker, YouTubeTransport


async def main() -> None:
    """Run the application."""
    async with YouTubeTransport(api_key="Your API key here") as transport:
        tracker = await AsyncFeedTracker(transport=transport).start()

        await tracker.add_channel("UCuFFtHWoLl5fauMMD5Ww2jA")  # Channel ID of CBC News
        await tracker.add_channel("@mreflow")

        await tracker.scan()

        for video in tracker.feed():
            print(f"New video from {video.channel_name}: {video.title}")


if __name__ == "__main__":
    asyncio.run(main())
