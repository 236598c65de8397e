"""Shared value validators for request parsing.

These keep JSON coercion strict where the protocol is strict: booleans may
arrive as JSON booleans or as the strings "true"/"false", and numbers are
unsigned integers below 2^53.
"""

from __future__ import annotations

import re
from typing import Annotated, Any

from pydantic import BeforeValidator
from pydantic import ValidationError as PydanticValidationError

MAX_NUMBER = 2**53 - 1
NUMBER_BOUND_MESSAGE = "value should be positive and less than 2^53"

_KEYWORD_FORBIDDEN = re.compile(r'[(){\]%*"\\\s]')
_KEYWORD_MAX_LENGTH = 255


def _json_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ValueError(f"expected a boolean, got {value!r}")


def _unsigned_number(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {value!r}")
    if value < 0 or value > MAX_NUMBER:
        raise ValueError(NUMBER_BOUND_MESSAGE)
    return value


JsonBool = Annotated[bool, BeforeValidator(_json_bool)]
UnsignedNumber = Annotated[int, BeforeValidator(_unsigned_number)]


def validate_keyword(value: str) -> str:
    """Reject keyword names that cannot be stored as IMAP flags."""
    if not value or len(value) > _KEYWORD_MAX_LENGTH:
        raise ValueError(f"keyword must be 1 to {_KEYWORD_MAX_LENGTH} characters long")
    if not value.isascii() or not value.isprintable() or _KEYWORD_FORBIDDEN.search(value):
        raise ValueError(f"'{value}' is not a valid keyword")
    return value


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten a pydantic error into one human-readable description."""
    parts: list[str] = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err["loc"])
        message = err["msg"].removeprefix("Value error, ")
        parts.append(f"'{location}': {message}" if location else message)
    return "; ".join(parts)
