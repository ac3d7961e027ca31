"""API client for the TaskNest server."""

import asyncio
from typing import Any

import httpx

from tasknest.exceptions import (
    NotFoundError,
    TaskNestError,
    TransportError,
    Unauthorized,
    ValidationError,
)
from tasknest.services.config_service import get_config_service
from tasknest.utils.logger import get_logger


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("detail")
        if isinstance(message, str) and message:
            return message
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()


def decode_json(response: httpx.Response) -> Any:
    """Body of a successful response.

    Raises:
        TransportError: If the body is not JSON (a proxy error page, say)
    """
    try:
        return response.json()
    except ValueError as e:
        raise TransportError(
            f"Unexpected response from {response.request.url.path}: not JSON"
        ) from e


def error_for_response(response: httpx.Response) -> TaskNestError:
    """Map an unsuccessful response to the matching TaskNestError."""
    message = _error_message(response)
    status = response.status_code
    if status == 401:
        return Unauthorized(message)
    if status == 404:
        return NotFoundError(message)
    if status in (400, 422):
        return ValidationError(message)
    return TransportError(message)


class APIClient:
    """HTTP client for the TaskNest API.

    Reads are retried on network errors and 5xx responses up to
    ``api.retry`` times; mutations are sent exactly once.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        timeout: float | None = None,
        retry: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if base_url is None or timeout is None or retry is None:
            config = get_config_service().config
            base_url = base_url or config.api.endpoint
            timeout = config.api.timeout if timeout is None else timeout
            retry = config.api.retry if retry is None else retry
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.retry = retry
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "APIClient":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager and ensure the client is closed."""
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers with authentication."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self._get_headers(),
                follow_redirects=True,
                transport=self.transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Make an HTTP request to the API.

        Raises:
            TaskNestError: Subclass matching the failure
        """
        retry = self.retry if method == "GET" else 0
        client = self._get_client()
        url = path if path.startswith("/") else f"/{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        last_error: TaskNestError | None = None
        for attempt in range(retry + 1):
            try:
                response = await client.request(method=method, url=url, json=json, params=params)
            except httpx.RequestError as e:
                last_error = TransportError(f"Could not reach {self.base_url}: {e}")
            else:
                if response.is_success:
                    return response
                last_error = error_for_response(response)
                # Don't retry client errors (4xx)
                if response.status_code < 500:
                    raise last_error

            if attempt < retry:
                get_logger().warning(
                    "%s %s failed (%s), retrying", method, url, last_error.message
                )
                # Simple exponential backoff
                await asyncio.sleep(2**attempt)

        raise last_error

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, params=params)

    async def post(self, path: str, *, json: dict[str, Any] | None = None) -> httpx.Response:
        """Make a POST request."""
        return await self.request("POST", path, json=json)

    async def put(self, path: str, *, json: dict[str, Any] | None = None) -> httpx.Response:
        """Make a PUT request."""
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, *, json: dict[str, Any] | None = None) -> httpx.Response:
        """Make a PATCH request."""
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request("DELETE", path)


def get_client(token: str | None = None) -> APIClient:
    """Get an API client instance configured from the config file."""
    return APIClient(token=token)
