"""Contains type hints for the library."""

__all__ = [
    "JSON",
    "Clock",
    "Migration",
    "T",
    "Transport",
]

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Protocol, TypeVar

from ytfeed.enums import Endpoint

T = TypeVar("T")

JSON = Any

Clock = Callable[[], datetime]
Migration = Callable[[str | None, JSON], JSON]


class Transport(Protocol):
    """Anything that can send a request to the YouTube Data API."""

    async def request(
        self, endpoint: Endpoint, params: Mapping[str, str]
    ) -> dict[str, Any]: ...
