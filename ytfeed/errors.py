"""Contains custom exceptions for the ytfeed package."""

__all__ = [
    "AggregationError",
    "AuthError",
    "DuplicateChannelError",
    "LastProfileError",
    "MigrationError",
    "NotFoundError",
    "QuotaError",
    "ResolutionIncompleteError",
    "UpstreamError",
    "YTFeedError",
]

import sys
from collections.abc import Mapping
from http import HTTPStatus

if sys.version_info >= (3, 12):  # pragma: no cover
    from typing import override  # novm
else:
    from typing_extensions import override


class YTFeedError(Exception):
    """Base class of every error raised by the ytfeed package."""


class UpstreamError(YTFeedError):
    """Exception raised when the YouTube Data API or the transport fails."""

    @override
    def __init__(
        self, message: str, status_code: int | HTTPStatus | None = None
    ) -> None:
        """Initialize the UpstreamError object.

        :param message: The error message
        :param status_code: The HTTP status code of the error, if any
        """
        super().__init__(message)
        self.status_code = (
            status_code
            if status_code is None or isinstance(status_code, HTTPStatus)
            else HTTPStatus(status_code)
        )
        self.message = message

    @override
    def __str__(self) -> str:
        """Return a string representation of the UpstreamError object."""
        if self.status_code is None:
            return self.message

        return f"Status code: {self.status_code}: {self.message}"


class AuthError(UpstreamError):
    """Exception raised when the credentials were rejected.

    Callers should treat this as a forced logout.
    """


class QuotaError(UpstreamError):
    """Exception raised when the API quota is exhausted."""


class NotFoundError(YTFeedError):
    """Exception raised when a channel or a profile does not exist."""


class DuplicateChannelError(YTFeedError):
    """Exception raised when a channel is already tracked by a profile."""


class ResolutionIncompleteError(YTFeedError):
    """Exception raised when a channel was found but has no uploads list."""


class LastProfileError(YTFeedError):
    """Exception raised when deleting the only remaining profile."""


class MigrationError(YTFeedError):
    """Exception raised when a persisted value cannot be migrated."""


class AggregationError(YTFeedError):
    """Exception raised when the videos of every channel failed to be fetched."""

    @override
    def __init__(self, failures: Mapping[str, str]) -> None:
        """Initialize the AggregationError object.

        :param failures: The error message of each failed channel, by channel name
        """
        self.failures = dict(failures)
        super().__init__(str(self))

    @override
    def __str__(self) -> str:
        """Return a string representation of the AggregationError object."""
        errors = ", ".join(
            f"{name}: {message}" for name, message in self.failures.items()
        )
        return f"Failed to fetch videos. Errors: {errors}"
