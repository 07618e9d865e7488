"""Test errors."""

from http import HTTPStatus

from ytfeed.errors import AggregationError, AuthError, UpstreamError, YTFeedError


def test_upstream_errors() -> None:
    """Test creating UpstreamError instances."""
    error = UpstreamError("test", 400)
    assert isinstance(error.status_code, HTTPStatus)

    error = UpstreamError("test", HTTPStatus.BAD_REQUEST)
    assert isinstance(error.status_code, HTTPStatus)

    assert error.message in str(error)
    assert "400" in str(error)

    error = UpstreamError("test")
    assert error.status_code is None
    assert str(error) == "test"

    assert isinstance(AuthError("test", 401), UpstreamError)
    assert isinstance(AuthError("test", 401), YTFeedError)


def test_aggregation_error() -> None:
    """Test that AggregationError lists every failed channel."""
    error = AggregationError({"First": "quota", "Second": "timeout"})

    assert error.failures == {"First": "quota", "Second": "timeout"}
    assert "First: quota" in str(error)
    assert "Second: timeout" in str(error)
