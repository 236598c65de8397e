"""Unit tests for shared request validators."""

import pytest
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from email_query_engine.validation import (
    MAX_NUMBER,
    JsonBool,
    UnsignedNumber,
    describe_validation_error,
    validate_keyword,
)


class Probe(BaseModel):
    flag: JsonBool = False
    number: UnsignedNumber = 0


class TestJsonBool:
    """Test suite for boolean coercion."""

    @pytest.mark.parametrize(("raw", "expected"), [(True, True), ("true", True), ("false", False)])
    def test_accepted_values(self, raw, expected) -> None:
        """Test booleans and their string forms are accepted."""
        assert Probe(flag=raw).flag is expected

    @pytest.mark.parametrize("raw", ["yes", 1, None, "0"])
    def test_rejected_values(self, raw) -> None:
        """Test that other values are structural errors."""
        with pytest.raises(PydanticValidationError):
            Probe(flag=raw)


class TestUnsignedNumber:
    """Test suite for the 2^53 bounded integer."""

    def test_upper_bound_inclusive(self) -> None:
        """Test the largest accepted value."""
        assert Probe(number=MAX_NUMBER).number == 2**53 - 1

    @pytest.mark.parametrize("raw", [2**53, -1])
    def test_out_of_range_describes_bound(self, raw) -> None:
        """Test that the error description states the bound."""
        with pytest.raises(PydanticValidationError) as exc_info:
            Probe(number=raw)

        description = describe_validation_error(exc_info.value)
        assert description == "'number': value should be positive and less than 2^53"

    @pytest.mark.parametrize("raw", [True, 1.5, "3"])
    def test_non_integers_rejected(self, raw) -> None:
        """Test that booleans, floats and strings are not numbers."""
        with pytest.raises(PydanticValidationError):
            Probe(number=raw)


class TestValidateKeyword:
    """Test suite for keyword names."""

    @pytest.mark.parametrize("keyword", ["$Flagged", "custom", "a" * 255])
    def test_valid_keywords(self, keyword) -> None:
        """Test accepted keyword names."""
        assert validate_keyword(keyword) == keyword

    @pytest.mark.parametrize("keyword", ["", "a" * 256, "with space", "bad*", "quote\"", "é"])
    def test_invalid_keywords(self, keyword) -> None:
        """Test rejected keyword names."""
        with pytest.raises(ValueError):
            validate_keyword(keyword)
