"""Exceptions for pyrinth."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pyrinth.core.dispatch import RateLimitInfo


class PyrinthError(Exception):
    """Base exception for all pyrinth errors."""


# === Local validation ===


class ValidationFailure(PyrinthError):
    """Input rejected before any request was sent."""

    def __init__(self, message: str, value: str) -> None:
        """Initialize ValidationFailure.

        Args:
            message: Error message
            value: The rejected input
        """
        super().__init__(message)
        self.value = value


class InvalidIDError(ValidationFailure):
    """Value is not a valid Modrinth ID or slug."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid Modrinth ID or slug: {value!r}", value)


class InvalidHashError(ValidationFailure):
    """Value is not a lowercase hex SHA1 hash."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid SHA1 hash: {value!r}", value)


class AuthenticationRequiredError(PyrinthError):
    """Operation requires a token but the client has none."""

    def __init__(self, operation: str) -> None:
        """Initialize AuthenticationRequiredError.

        Args:
            operation: Name of the client method that was called
        """
        super().__init__(f"{operation} requires an authentication token")
        self.operation = operation


# === Remote errors ===


class APIError(PyrinthError):
    """General API error."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        """Initialize APIError.

        Args:
            message: Error message
            status_code: HTTP status code if applicable
            url: Request URL if known
        """
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class NotFoundError(APIError):
    """Requested resource does not exist, or is hidden from this token."""

    def __init__(self, url: str | None = None) -> None:
        message = "Resource not found"
        if url is not None:
            message += f": {url}"
        super().__init__(message, status_code=404, url=url)


class AuthenticationError(APIError):
    """Token missing, invalid or lacking the required scope."""

    def __init__(self, url: str | None = None) -> None:
        super().__init__("Authentication failed", status_code=401, url=url)


class RateLimitError(APIError):
    """Rate limit exceeded."""

    def __init__(
        self,
        retry_after: int,
        info: RateLimitInfo | None = None,
        url: str | None = None,
    ) -> None:
        """Initialize RateLimitError.

        Args:
            retry_after: Seconds to wait before retrying
            info: Rate limit headers of the rejected response, if complete
            url: Request URL
        """
        super().__init__(
            f"Rate limit exceeded, retry after {retry_after} seconds",
            status_code=429,
            url=url,
        )
        self.retry_after = retry_after
        self.info = info


class ApiDeprecatedError(APIError):
    """The API version in use has been retired by the server."""

    def __init__(self, api_base_url: str) -> None:
        super().__init__(
            f"The API at {api_base_url} is deprecated", status_code=410
        )
        self.api_base_url = api_base_url


class TransportError(PyrinthError):
    """Request could not be completed (connection, TLS, timeout)."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class DecodeError(PyrinthError):
    """Response body is not valid JSON or does not match the expected schema."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class HashMismatchError(PyrinthError):
    """Downloaded file hash does not match expected value."""

    def __init__(
        self,
        filename: str,
        expected: str,
        actual: str,
    ) -> None:
        """Initialize HashMismatchError.

        Args:
            filename: Name of the file
            expected: Expected SHA1 hash
            actual: Actual computed hash
        """
        message = (
            f"Hash mismatch for {filename}: "
            f"expected {expected[:16]}..., got {actual[:16]}..."
        )
        super().__init__(message)
        self.filename = filename
        self.expected = expected
        self.actual = actual
