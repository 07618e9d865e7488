"""Contains the YouTubeProxy class which serves the YouTube Data API to clients that
only know a shared PIN. The API key never leaves the server.
"""

__all__ = ["YouTubeProxy"]

import hmac
import logging
from http import HTTPStatus
from json import JSONDecodeError

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from httpx import AsyncClient, HTTPError
from uvicorn import Config, Server

from ytfeed.enums import Endpoint
from ytfeed.transport import API_BASE_URL, PIN_HEADER

ALLOWED_ENDPOINTS = frozenset(endpoint.value for endpoint in Endpoint)


class YouTubeProxy:
    """A FastAPI app that forwards whitelisted requests to the YouTube Data API and
    injects the API key.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        pin: str | None = None,
        app: FastAPI | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Set up the YouTubeProxy instance.

        :param api_key: The API key to inject into each request.
        :param pin: The PIN clients must send. If not provided, every client is
            allowed.
        :param app: The FastAPI app instance to add the routes to. If not provided, a
            new instance will be created.
        :param timeout: The timeout of each upstream request in seconds.
        """
        self._logger = logging.getLogger(self.__class__.__name__)
        self._api_key = api_key
        self._pin = pin
        self._timeout = timeout
        self._app = app or FastAPI()
        self._app.include_router(self._get_router())

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI app serving the proxy.

        :return: The FastAPI app.
        """
        return self._app

    def _get_router(self) -> APIRouter:
        router = APIRouter()
        router.add_api_route("/api/youtube", self._youtube, methods=["GET"])
        router.add_api_route("/api/validate-pin", self._validate_pin, methods=["GET"])

        return router

    def run(
        self,
        *,
        host: str = "127.0.0.1",
        port: int = 8000,
        log_level: int = logging.WARNING,
        **configs: object,
    ) -> None:
        """Start the server in the current thread and wait until it stops.

        :param host: The host to run the server on.
        :param port: The port to run the server on.
        :param log_level: The log level to use for the uvicorn server.
        :param configs: Additional arguments to pass to the Config class of uvicorn.
        """
        config = Config(
            app=self._app,
            host=host,
            port=port,
            log_level=log_level,
            **configs,  # ty: ignore[invalid-argument-type]
        )
        self._logger.info("Serving the YouTube proxy on %s:%d", host, port)

        try:
            Server(config=config).run()
        except KeyboardInterrupt:  # pragma: no cover
            pass

    async def _youtube(self, request: Request) -> Response:
        """Forward a request to the YouTube Data API."""
        if not self._is_authorized(request):
            return self._error("Invalid Access PIN", HTTPStatus.UNAUTHORIZED)

        if not self._api_key:
            return self._error(
                "Server Configuration Error: API key is missing.",
                HTTPStatus.INTERNAL_SERVER_ERROR,
            )

        params = dict(request.query_params)
        endpoint = params.pop("endpoint", None)
        if endpoint not in ALLOWED_ENDPOINTS:
            return self._error("Invalid API Endpoint", HTTPStatus.BAD_REQUEST)

        params["key"] = self._api_key

        self._logger.debug("Forwarding %s request", endpoint)

        try:
            async with AsyncClient(timeout=self._timeout) as client:
                response = await client.get(f"{API_BASE_URL}/{endpoint}", params=params)
            body = response.json()
        except (HTTPError, JSONDecodeError):
            self._logger.warning("Failed to contact YouTube", exc_info=True)
            return self._error(
                "Internal Server Error contacting YouTube",
                HTTPStatus.INTERNAL_SERVER_ERROR,
            )

        return JSONResponse(body, status_code=response.status_code)

    async def _validate_pin(self, request: Request) -> Response:
        """Check the PIN without calling YouTube."""
        if not self._is_authorized(request):
            return self._error("Invalid Access PIN", HTTPStatus.UNAUTHORIZED)

        return JSONResponse({"success": True, "message": "PIN validation successful"})

    def _is_authorized(self, request: Request) -> bool:
        if not self._pin:
            return True

        pin = request.headers.get(PIN_HEADER)
        if pin is None:
            return False

        return hmac.compare_digest(pin.encode(), self._pin.encode())

    @staticmethod
    def _error(message: str, status: HTTPStatus) -> Response:
        return JSONResponse({"error": {"message": message}}, status_code=status)
