"""
This example demonstrates how to keep separate sets of channels in profiles and
refresh all of them in the background.
"""

import asyncio
from datetime import timedelta

from ytfeed import AsyncFeedTracker, Defaults, ProfileDefaults, YouTubeTransport


async def main() -> None:
    """Run the application."""
    defaults = Defaults(
        channels=["UCuFFtHWoLl5fauMMD5Ww2jA"],
        profiles=[ProfileDefaults(name="Tech", channels=["@mreflow", "@mkbhd"])],
    )

    async with YouTubeTransport(api_key="Your API key here") as transport:
        tracker = await AsyncFeedTracker(transport=transport, defaults=defaults).start()

        for profile in tracker.profiles:
            print(f"{profile.name}: {[channel.name for channel in profile.channels]}")

        # Check the feeds every minute and fetch them once they are an hour old
        await tracker.set_config(refresh_interval_hours=1)
        await tracker.run_auto_refresh(interval=timedelta(minutes=1), all_profiles=True)


if __name__ == "__main__":
    asyncio.run(main())
