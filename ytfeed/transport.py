"""Contains the HTTP transport used to call the YouTube Data API."""

__all__ = ["API_BASE_URL", "YouTubeTransport"]

import logging
from collections.abc import Mapping
from http import HTTPStatus
from json import JSONDecodeError
from types import TracebackType
from typing import Any, Self

from httpx import AsyncClient, HTTPError, Response

from ytfeed.enums import Endpoint
from ytfeed.errors import AuthError, NotFoundError, QuotaError, UpstreamError

API_BASE_URL = "https://www.googleapis.com/youtube/v3"
PIN_HEADER = "x-auth-pin"

_QUOTA_REASONS = frozenset({"quotaExceeded", "dailyLimitExceeded", "rateLimitExceeded"})
_AUTH_REASONS = frozenset({"keyInvalid", "keyExpired"})


class YouTubeTransport:
    """Sends requests to the YouTube Data API, either directly with an API key or
    through a ytfeed proxy that injects the key on the server.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str = API_BASE_URL,
        pin: str | None = None,
        timeout: float = 30.0,
        client: AsyncClient | None = None,
    ) -> None:
        """Set up the YouTubeTransport instance.

        :param api_key: The API key to send with each request.
            Leave it empty when the base URL points at a proxy.
        :param base_url: The URL of the YouTube Data API, or of a ytfeed proxy
            endpoint such as ``https://example.com/api/youtube``.
        :param pin: The PIN to send to the proxy, if the proxy requires one.
        :param timeout: The timeout of each request in seconds.
        :param client: The HTTP client to use. If not provided, a new client will be
            created and closed with the transport.
        """
        self._logger = logging.getLogger(self.__class__.__name__)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._is_using_proxy = base_url.rstrip("/") != API_BASE_URL
        self._headers = {PIN_HEADER: pin} if pin else {}
        self._owns_client = client is None
        self._client = client or AsyncClient(timeout=timeout)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if it was created by the transport."""
        if self._owns_client:
            await self._client.aclose()

    async def request(
        self, endpoint: Endpoint, params: Mapping[str, str]
    ) -> dict[str, Any]:
        """Send a GET request to an endpoint.

        :param endpoint: The endpoint to call.
        :param params: The query parameters of the request.
        :return: The JSON body of the response.
        :raises AuthError: If the credentials were rejected.
        :raises QuotaError: If the API quota is exhausted.
        :raises NotFoundError: If the endpoint responded with 404.
        :raises UpstreamError: If the request failed for any other reason.
        """
        query = dict(params)
        if self._is_using_proxy:
            url = self._base_url
            query["endpoint"] = endpoint.value
        else:
            url = f"{self._base_url}/{endpoint.value}"

        if self._api_key:
            query["key"] = self._api_key

        self._logger.debug("Sending %s request: %s", endpoint.value, params)

        try:
            response = await self._client.get(url, params=query, headers=self._headers)
        except HTTPError as ex:
            raise UpstreamError(
                f"Failed to connect to the YouTube Data API: {ex}"
            ) from ex

        return self._parse_response(endpoint, response)

    def _parse_response(self, endpoint: Endpoint, response: Response) -> dict[str, Any]:
        """Parse the body of a response, raising the error it describes.

        :param endpoint: The endpoint that was called.
        :param response: The response to parse.
        :return: The JSON body of the response.
        """
        try:
            body = response.json()
        except (JSONDecodeError, UnicodeDecodeError) as ex:
            raise UpstreamError(
                f"Connection Error: {response.reason_phrase}", response.status_code
            ) from ex

        if response.is_success:
            return body

        self._logger.debug("API error (%s): %s", endpoint.value, body)

        message, reasons = self._get_error_details(body)
        status = response.status_code

        if status == HTTPStatus.UNAUTHORIZED or reasons & _AUTH_REASONS:
            raise AuthError(message, status)

        if status in (HTTPStatus.FORBIDDEN, HTTPStatus.TOO_MANY_REQUESTS) and (
            reasons & _QUOTA_REASONS or status == HTTPStatus.TOO_MANY_REQUESTS
        ):
            raise QuotaError(message, status)

        if status == HTTPStatus.NOT_FOUND:
            raise NotFoundError(message)

        raise UpstreamError(message, status)

    @staticmethod
    def _get_error_details(body: Any) -> tuple[str, set[str]]:
        """Get the message and the reasons of an error body.

        :param body: The JSON body of an error response.
        :return: The error message and the set of error reasons.
        """
        if not isinstance(body, dict):
            return "Unknown Error", set()

        error = body.get("error")
        if isinstance(error, str):
            return error, set()

        if not isinstance(error, dict):
            return "Unknown Error", set()

        reasons = {
            detail.get("reason")
            for detail in error.get("errors") or []
            if isinstance(detail, dict) and detail.get("reason")
        }
        return error.get("message") or "Unknown Error", reasons
