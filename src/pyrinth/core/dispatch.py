"""Request dispatch: send, translate error statuses, decode JSON.

The dispatcher only depends on the small ``Transport`` protocol, so the
status translation can be exercised without a network or a specific HTTP
library. ``HttpxTransport`` is the production implementation.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from pyrinth.core.exceptions import (
    APIError,
    ApiDeprecatedError,
    AuthenticationError,
    DecodeError,
    NotFoundError,
    RateLimitError,
    TransportError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATELIMIT_LIMIT_HEADER = "X-Ratelimit-Limit"
RATELIMIT_REMAINING_HEADER = "X-Ratelimit-Remaining"
RATELIMIT_RESET_HEADER = "X-Ratelimit-Reset"


def _parse_int(value: str | None) -> int | None:
    # Plain ASCII digits only; signs and underscores count as malformed
    if value is None:
        return None
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


@dataclass(frozen=True)
class ApiResponse:
    """A response reduced to what the dispatcher needs."""

    status_code: int
    headers: Mapping[str, str]
    content: bytes = b""
    url: str = ""

    def __post_init__(self) -> None:
        # Header lookups are case-insensitive
        lowered = {key.lower(): value for key, value in self.headers.items()}
        object.__setattr__(self, "headers", lowered)

    def header(self, name: str) -> str | None:
        """Return the value of header name, or None."""
        return self.headers.get(name.lower())

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.content)


@dataclass(frozen=True)
class RateLimitInfo:
    """Rate limit state reported by the server."""

    remaining: int
    limit: int
    reset: int  # seconds until the window resets

    @classmethod
    def from_headers(cls, response: ApiResponse) -> "RateLimitInfo | None":
        """Parse the rate limit headers of response.

        Returns:
            RateLimitInfo, or None if any header is missing or malformed
        """
        remaining = _parse_int(response.header(RATELIMIT_REMAINING_HEADER))
        limit = _parse_int(response.header(RATELIMIT_LIMIT_HEADER))
        reset = _parse_int(response.header(RATELIMIT_RESET_HEADER))
        if remaining is None or limit is None or reset is None:
            return None
        return cls(remaining=remaining, limit=limit, reset=reset)


class Transport(Protocol):
    """Anything that can perform one HTTP exchange."""

    async def send(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        """Send one request and return its response without judging it."""
        ...

    async def aclose(self) -> None:
        """Release any connections held by the transport."""
        ...


@dataclass
class HttpxTransport:
    """Transport backed by an httpx.AsyncClient."""

    client: httpx.AsyncClient = field(default_factory=httpx.AsyncClient)

    async def send(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        try:
            response = await self.client.request(
                method, url, json=json, content=content, headers=headers
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}", url=url) from e
        return ApiResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            content=response.content,
            url=str(response.url),
        )

    async def aclose(self) -> None:
        await self.client.aclose()


def _error_detail(response: ApiResponse) -> str | None:
    # Modrinth error bodies look like {"error": ..., "description": ...}
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        description = body.get("description") or body.get("error")
        if isinstance(description, str):
            return description
    return None


def check_response(
    response: ApiResponse, api_base_url: str | None = None
) -> ApiResponse:
    """Raise the typed error matching response's status, if any.

    Args:
        response: Response to check
        api_base_url: Base URL of the API the request went to. None for
            requests outside the API, such as file downloads.

    Returns:
        The same response when its status is below 400

    Raises:
        RateLimitError: For 429 with a valid X-Ratelimit-Reset header
        ApiDeprecatedError: For 410 responses from the API
        NotFoundError: For 404 responses
        AuthenticationError: For 401 responses
        APIError: For other error responses, including 429 without a
            usable reset header
    """
    status = response.status_code
    if status < 400:
        return response

    if status == 429:
        retry_after = _parse_int(response.header(RATELIMIT_RESET_HEADER))
        if retry_after is None:
            logger.warning(
                "429 from %s without a valid %s header",
                response.url,
                RATELIMIT_RESET_HEADER,
            )
            raise APIError(
                "Rate limit exceeded (no retry time reported)",
                status_code=429,
                url=response.url,
            )
        raise RateLimitError(
            retry_after=retry_after,
            info=RateLimitInfo.from_headers(response),
            url=response.url,
        )

    if status == 410 and api_base_url is not None:
        raise ApiDeprecatedError(api_base_url)
    if status == 404:
        raise NotFoundError(url=response.url)
    if status == 401:
        raise AuthenticationError(url=response.url)

    message = f"API request failed: {status}"
    detail = _error_detail(response)
    if detail:
        message += f" ({detail})"
    raise APIError(message, status_code=status, url=response.url)


@lru_cache(maxsize=None)
def _adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


def decode(response: ApiResponse, type_: type[T]) -> T:
    """Decode the body of response into type_.

    Raises:
        DecodeError: If the body is not JSON or does not match type_
    """
    try:
        return _adapter(type_).validate_json(response.content)
    except PydanticValidationError as e:
        if any(err["type"] == "json_invalid" for err in e.errors()):
            message = f"Response from {response.url} is not valid JSON"
        else:
            message = (
                f"Response from {response.url} does not match "
                f"{getattr(type_, '__name__', type_)}: "
                f"{e.error_count()} error(s)"
            )
        raise DecodeError(message, url=response.url) from e


class Dispatcher:
    """Sends requests through a transport and applies response checks.

    Every request carries the User-Agent header; the Authorization header is
    added when a token is configured, unless the caller opts out.
    """

    def __init__(
        self,
        transport: Transport,
        api_base_url: str,
        user_agent: str,
        token: str | None = None,
    ) -> None:
        self._transport = transport
        self._api_base_url = api_base_url
        # Normalized form, for telling API requests from file downloads
        self._api_prefix = str(httpx.URL(api_base_url))
        self._user_agent = user_agent
        self._token = token

    @property
    def transport(self) -> Transport:
        return self._transport

    def _headers(
        self, extra: Mapping[str, str] | None, include_auth: bool
    ) -> dict[str, str]:
        headers = {"User-Agent": self._user_agent}
        if include_auth and self._token is not None:
            headers["Authorization"] = self._token
        if extra:
            headers.update(extra)
        return headers

    async def send(
        self,
        method: str,
        url: httpx.URL | str,
        *,
        json: Any = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        include_auth: bool = True,
    ) -> ApiResponse:
        """Send a request and return the checked response.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            url: Absolute request URL
            json: JSON-serializable request body
            content: Raw request body
            headers: Headers added to the defaults
            include_auth: Send the Authorization header if a token is set

        Raises:
            TransportError: If no response was received
            APIError: Or a subclass, for error statuses
        """
        url = str(url)
        logger.debug("%s %s", method, url)
        response = await self._transport.send(
            method,
            url,
            json=json,
            content=content,
            headers=self._headers(headers, include_auth),
        )
        info = RateLimitInfo.from_headers(response)
        if info is not None:
            logger.debug(
                "Rate limit: %d/%d remaining, resets in %ds",
                info.remaining,
                info.limit,
                info.reset,
            )
        api_base_url = (
            self._api_base_url if url.startswith(self._api_prefix) else None
        )
        return check_response(response, api_base_url)

    async def send_json(
        self,
        method: str,
        url: httpx.URL | str,
        type_: type[T],
        *,
        json: Any = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> T:
        """Send a request and decode its JSON body into type_.

        Raises:
            DecodeError: If the body does not decode into type_
        """
        response = await self.send(
            method, url, json=json, content=content, headers=headers
        )
        return decode(response, type_)
