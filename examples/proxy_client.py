"""The following example demonstrates how to fetch videos through a ytfeed proxy
started with ``python -m ytfeed serve``. Only the PIN is needed on this side.
"""

import asyncio

from ytfeed import AsyncFeedTracker, YouTubeTransport


async def main() -> None:
    """Run the application."""
    async with YouTubeTransport(
        base_url="http://127.0.0.1:8000/api/youtube", pin="Your PIN here"
    ) as transport:
        tracker = await AsyncFeedTracker(transport=transport).start()

        await tracker.add_channel("@mreflow")
        await tracker.scan()

        for video in tracker.feed():
            print(f"New video from {video.channel_name}: {video.title}")


if __name__ == "__main__":
    asyncio.run(main())
