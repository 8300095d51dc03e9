"""HTTP transport for the marketplace REST API.

Wraps an ``httpx.AsyncClient`` with the client-wide conventions:

- JSON request and response bodies
- A fixed client-level timeout
- ``Authorization: Bearer <token>`` on authenticated calls
- Translation of transport and HTTP failures into ``ApiError``
- A callback when the server rejects the credential (HTTP 401)
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from marketchat.core.config.models import ApiConfig
from marketchat.core.errors import ApiError, ErrorKind

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

TokenProvider = Callable[[], str | None]
UnauthorizedHandler = Callable[[str], Awaitable[None]]


def parse_response(schema: type[SchemaT], data: Any) -> SchemaT:
    """Validate a decoded response body against a schema.

    Args:
        schema: Pydantic model describing the expected body.
        data: Decoded JSON body.

    Returns:
        Validated model instance.

    Raises:
        ApiError: With kind INVALID_RESPONSE if the body does not match.
    """
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.error(f"Malformed {schema.__name__} payload: {e.error_count()} validation error(s)")
        raise ApiError(
            ErrorKind.INVALID_RESPONSE,
            f"Unexpected response from server ({schema.__name__})",
        ) from e


def _server_message(response: httpx.Response) -> str | None:
    """Extract the ``message`` (or ``error``) field from an error body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return None


class ApiClient:
    """Async JSON client for the marketplace API.

    The bearer token comes from ``token_provider`` (the session's in-memory
    credential) unless a call passes an explicit ``token``, which is how a
    stored credential is verified before it becomes the session token.

    Example:
        >>> async with ApiClient(ApiConfig(), token_provider=lambda: token) as api:
        ...     body = await api.get("/chat/conversations")
    """

    def __init__(
        self,
        config: ApiConfig,
        token_provider: TokenProvider | None = None,
        on_unauthorized: UnauthorizedHandler | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the API client.

        Args:
            config: API settings (base URL, timeout, user agent).
            token_provider: Returns the current bearer token, or None.
            on_unauthorized: Awaited with the rejected token when an authenticated
                request gets HTTP 401.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self.config = config
        self._token_provider = token_provider or (lambda: None)
        self._on_unauthorized = on_unauthorized
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": config.user_agent,
            },
            transport=transport,
            event_hooks={
                "request": [self._log_request],
                "response": [self._log_response],
            },
        )

    def set_unauthorized_handler(self, handler: UnauthorizedHandler | None) -> None:
        self._on_unauthorized = handler

    async def _log_request(self, request: httpx.Request) -> None:
        logger.debug(f"-> {request.method} {request.url.path}")

    async def _log_response(self, response: httpx.Response) -> None:
        logger.debug(f"<- {response.status_code} {response.request.method} {response.request.url.path}")

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        token: str | None = None,
        authenticate: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Endpoint path relative to the base URL (e.g. "/auth/login").
            json: Optional JSON body.
            token: Bearer token overriding the token provider for this call.
            authenticate: Attach the bearer token when one is available.

        Returns:
            Decoded JSON body, or None for an empty body.

        Raises:
            ApiError: On timeout, transport failure, non-2xx status or undecodable body.
        """
        headers: dict[str, str] = {}
        bearer = (token or self._token_provider()) if authenticate else None
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"

        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out after {self.config.timeout_seconds}s")
            raise ApiError(ErrorKind.TIMEOUT, "Request timed out") from e
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError(ErrorKind.NETWORK, str(e) or "Network error") from e

        if response.status_code == 401:
            message = _server_message(response)
            logger.info(f"{method} {path} rejected with 401")
            if bearer and self._on_unauthorized is not None:
                await self._on_unauthorized(bearer)
            raise ApiError(ErrorKind.UNAUTHORIZED, message, status_code=401)

        if response.is_error:
            message = _server_message(response)
            logger.warning(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiError(ErrorKind.HTTP, message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(ErrorKind.INVALID_RESPONSE, "Response body is not valid JSON") from e

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
