"""
This is a basic script that will be run inside a docker container. It serves the
YouTube proxy, so clients only need the PIN instead of the API key.
"""

import logging
import os

from ytfeed.server import YouTubeProxy


def main() -> None:
    """Run the application."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    proxy = YouTubeProxy(
        api_key=os.getenv("YTFEED_API_KEY"), pin=os.getenv("YTFEED_PIN")
    )
    proxy.run(host="0.0.0.0", port=8000)  # noqa: S104


if __name__ == "__main__":
    main()
