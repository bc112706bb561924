"""URL building helpers for API endpoints."""

from collections.abc import Sequence
from enum import Enum
from typing import Any
from urllib.parse import quote

import httpx
from pydantic_core import to_json

# Sub-delimiters allowed verbatim in a path segment. ":" is left out so a
# leading segment can never be read as a scheme.
_SEGMENT_SAFE = "!$&'()*+,;=@"


def ensure_trailing_slash(url: str | httpx.URL) -> httpx.URL:
    """Return url as an httpx.URL whose path ends with "/"."""
    url = httpx.URL(url)
    if not url.path.endswith("/"):
        url = url.copy_with(path=url.path + "/")
    return url


def _encode_segment(segment: str) -> str:
    encoded = quote(segment, safe=_SEGMENT_SAFE)
    # Dot segments would otherwise be resolved away by the join
    if encoded in (".", ".."):
        encoded = encoded.replace(".", "%2E")
    return encoded


def join_all(base: str | httpx.URL, segments: Sequence[str]) -> httpx.URL:
    """Join all path segments onto base.

    Each segment is percent-encoded, so "/", "?" and "#" inside a segment
    stay part of that segment.

    Args:
        base: Base URL; treated as a directory even without a trailing "/"
        segments: Path segments in order

    Returns:
        The joined URL

    Raises:
        ValueError: If segments is empty
    """
    if not segments:
        raise ValueError("segments must not be empty")
    relative = "/".join(
        _encode_segment(str(segment)) for segment in segments
    )
    return ensure_trailing_slash(base).join(relative)


def format_query_value(value: Any) -> str:
    """Render a scalar query value the way the API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def with_query(url: httpx.URL, name: str, value: Any) -> httpx.URL:
    """Append the name=value query pair to url and return the new URL."""
    return url.copy_add_param(name, format_query_value(value))


def with_query_json(url: httpx.URL, name: str, value: Any) -> httpx.URL:
    """Append name with the compact JSON encoding of value.

    Lists, enums, datetimes and pydantic models are supported.
    """
    return url.copy_add_param(name, to_json(value).decode())
