"""The following example demonstrates how to use the FeedTracker to print the recent
uploads of a channel without writing any async code.
"""

from ytfeed import FeedTracker, YouTubeTransport


def main() -> None:
    """Run the application."""
    tracker = FeedTracker(transport=YouTubeTransport(api_key="Your API key here"))

    try:
        tracker.start()
        tracker.add_channel("UCuFFtHWoLl5fauMMD5Ww2jA")  # Channel ID of CBC News
        tracker.scan()

        for video in tracker.feed():
            print(f"New video from {video.channel_name}: {video.title}")
    finally:
        tracker.close()


if __name__ == "__main__":
    main()
