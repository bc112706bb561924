"""Core client, models and errors for pyrinth."""

from pyrinth.core.api import ModrinthClient
from pyrinth.core.config import build_user_agent
from pyrinth.core.dispatch import (
    ApiResponse,
    Dispatcher,
    HttpxTransport,
    RateLimitInfo,
    Transport,
    check_response,
)
from pyrinth.core.exceptions import (
    APIError,
    ApiDeprecatedError,
    AuthenticationError,
    AuthenticationRequiredError,
    DecodeError,
    HashMismatchError,
    InvalidHashError,
    InvalidIDError,
    NotFoundError,
    PyrinthError,
    RateLimitError,
    TransportError,
    ValidationFailure,
)
from pyrinth.core.facets import Facet, FacetBuilder
from pyrinth.core.validation import check_id_slug, check_sha1_hash

__all__ = [
    "ModrinthClient",
    "build_user_agent",
    "ApiResponse",
    "Dispatcher",
    "HttpxTransport",
    "RateLimitInfo",
    "Transport",
    "check_response",
    "APIError",
    "ApiDeprecatedError",
    "AuthenticationError",
    "AuthenticationRequiredError",
    "DecodeError",
    "HashMismatchError",
    "InvalidHashError",
    "InvalidIDError",
    "NotFoundError",
    "PyrinthError",
    "RateLimitError",
    "TransportError",
    "ValidationFailure",
    "Facet",
    "FacetBuilder",
    "check_id_slug",
    "check_sha1_hash",
]
