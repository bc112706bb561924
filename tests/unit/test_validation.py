"""Tests for pyrinth.core.validation."""

import pytest

from pyrinth.core.exceptions import InvalidHashError, InvalidIDError
from pyrinth.core.validation import (
    check_id_slug,
    check_sha1_hash,
    is_id_slug,
    is_sha1_hash,
)


class TestIsIdSlug:
    """Tests for is_id_slug function."""

    @pytest.mark.parametrize(
        "value",
        ["AANobbMI", "sodium", "fabric-api", "abc", "a" * 64, "mod_menu", "x.y+z"],
    )
    def test_accepts_valid_values(self, value: str) -> None:
        """Valid IDs and slugs are accepted."""
        assert is_id_slug(value)

    @pytest.mark.parametrize(
        "value",
        ["", "ab", "a" * 65, "has space", "a/b", "a?b", "a#b", "sodium\n"],
    )
    def test_rejects_invalid_values(self, value: str) -> None:
        """Too short, too long and unsafe values are rejected."""
        assert not is_id_slug(value)


class TestIsSha1Hash:
    """Tests for is_sha1_hash function."""

    def test_accepts_lowercase_hex(self) -> None:
        """40 lowercase hex characters are a SHA1 hash."""
        assert is_sha1_hash("795d4c12bffdb1b21eed5ff87c07ce5ca3c0dcbf")

    @pytest.mark.parametrize(
        "value",
        [
            "795D4C12BFFDB1B21EED5FF87C07CE5CA3C0DCBF",
            "795d4c12bffdb1b21eed5ff87c07ce5ca3c0dcb",
            "795d4c12bffdb1b21eed5ff87c07ce5ca3c0dcbf0",
            "g95d4c12bffdb1b21eed5ff87c07ce5ca3c0dcbf",
            "",
        ],
    )
    def test_rejects_other_values(self, value: str) -> None:
        """Uppercase, wrong length and non-hex values are rejected."""
        assert not is_sha1_hash(value)


class TestCheckIdSlug:
    """Tests for check_id_slug function."""

    def test_accepts_strings_and_iterables(self) -> None:
        """Plain strings and lists of strings can be mixed."""
        # Act & Assert (no exception)
        check_id_slug("sodium", ["lithium", "AANobbMI"])

    def test_raises_for_first_invalid_value(self) -> None:
        """The first non-compliant value is reported."""
        # Act & Assert
        with pytest.raises(InvalidIDError) as exc_info:
            check_id_slug("sodium", ["ok-id", "no", "x y"])

        assert exc_info.value.value == "no"

    def test_empty_input_is_accepted(self) -> None:
        """Checking nothing succeeds."""
        check_id_slug([])


class TestCheckSha1Hash:
    """Tests for check_sha1_hash function."""

    def test_raises_invalid_hash_error(self) -> None:
        """A malformed hash raises InvalidHashError."""
        # Act & Assert
        with pytest.raises(InvalidHashError) as exc_info:
            check_sha1_hash(["795d4c12bffdb1b21eed5ff87c07ce5ca3c0dcbf", "abc123"])

        assert exc_info.value.value == "abc123"
        assert "abc123" in str(exc_info.value)
