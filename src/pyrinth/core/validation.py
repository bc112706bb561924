"""Local checks on identifiers before they reach a URL."""

import re
from collections.abc import Iterable

from pyrinth.core.exceptions import InvalidHashError, InvalidIDError

# From the Modrinth project model documentation
ID_SLUG_PATTERN = re.compile(r"""[\w!@$()`.+,"\-']{3,64}""")
SHA1_PATTERN = re.compile(r"[a-f0-9]{40}")


def is_id_slug(value: str) -> bool:
    """Return True if value is a syntactically valid Modrinth ID or slug."""
    return ID_SLUG_PATTERN.fullmatch(value) is not None


def is_sha1_hash(value: str) -> bool:
    """Return True if value is exactly 40 lowercase hex characters."""
    return SHA1_PATTERN.fullmatch(value) is not None


def check_id_slug(*inputs: str | Iterable[str]) -> None:
    """Verify that every input is Modrinth ID or slug compliant.

    Args:
        inputs: Strings, or iterables of strings, to check

    Raises:
        InvalidIDError: For the first input that does not comply
    """
    for value in _flatten(inputs):
        if not is_id_slug(value):
            raise InvalidIDError(value)


def check_sha1_hash(*inputs: str | Iterable[str]) -> None:
    """Verify that every input is a lowercase hex SHA1 hash.

    Args:
        inputs: Strings, or iterables of strings, to check

    Raises:
        InvalidHashError: For the first input that does not comply
    """
    for value in _flatten(inputs):
        if not is_sha1_hash(value):
            raise InvalidHashError(value)


def _flatten(inputs: tuple[str | Iterable[str], ...]) -> Iterable[str]:
    for item in inputs:
        if isinstance(item, str):
            yield item
        else:
            yield from item
