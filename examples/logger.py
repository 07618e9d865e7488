"""The following example shows the logs of the FeedTracker with the logging module.
Turn off the diagnostics to hide the debug logs.
"""

import logging

from ytfeed import FeedTracker, YouTubeTransport


def main() -> None:
    """Run the application."""
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    tracker = FeedTracker(transport=YouTubeTransport(api_key="Your API key here"))

    try:
        tracker.start()
        tracker.set_config(diagnostics_enabled=False)

        tracker.add_channel("UCuFFtHWoLl5fauMMD5Ww2jA")  # Channel ID of CBC News
        tracker.scan()
    finally:
        tracker.close()


if __name__ == "__main__":
    main()
