"""Request parsing for message queries.

The wire request is validated as a whole before anything is evaluated:
any structural problem yields a single ValidationError and no partial
work happens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from email_query_engine.config import Settings
from email_query_engine.exceptions import ValidationError
from email_query_engine.filters import FilterNode, parse_filter
from email_query_engine.models import SortDirection, SortField, SortKey
from email_query_engine.query.materializer import validate_properties
from email_query_engine.validation import JsonBool, UnsignedNumber, describe_validation_error


class QueryRequestModel(BaseModel):
    """Wire form of a getMessageList request."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    filter: dict[str, Any] | None = None
    sort: list[str] | None = None
    position: UnsignedNumber | None = None
    limit: UnsignedNumber | None = None
    collapse_threads: JsonBool = Field(default=False, alias="collapseThreads")
    fetch_messages: JsonBool = Field(default=False, alias="fetchMessages")
    fetch_message_properties: list[str] | None = Field(default=None, alias="fetchMessageProperties")


@dataclass(frozen=True)
class QueryRequest:
    """A validated message query."""

    filter: FilterNode | None = None
    sort: tuple[SortKey, ...] | None = None
    position: int = 0
    limit: int | None = None
    collapse_threads: bool = False
    fetch_messages: bool = False
    fetch_message_properties: frozenset[str] | None = None


def parse_sort_key(raw: str) -> SortKey:
    """Parse ``"<field>"`` or ``"<field> asc|desc"``; a bare field sorts descending."""
    parts = raw.split()
    if not parts or len(parts) > 2:
        raise ValidationError(f"Invalid sort entry: '{raw}'")
    try:
        field = SortField(parts[0])
    except ValueError as exc:
        raise ValidationError(f"Unknown sort field: '{parts[0]}'") from exc

    if len(parts) == 1:
        return SortKey(field=field)
    try:
        direction = SortDirection(parts[1].lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown sort direction: '{parts[1]}'") from exc
    return SortKey(field=field, direction=direction)


def parse_query_request(raw: Any, settings: Settings) -> QueryRequest:
    """Validate a wire request.

    Args:
        raw: Decoded JSON request arguments (None is an empty request).
        settings: Engine settings providing limits.

    Returns:
        QueryRequest: The validated request.

    Raises:
        ValidationError: If any part of the request is malformed.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError("Request arguments must be an object")

    try:
        model = QueryRequestModel.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(describe_validation_error(exc)) from exc

    node = (
        parse_filter(model.filter, max_depth=settings.max_filter_depth)
        if model.filter is not None
        else None
    )

    sort: tuple[SortKey, ...] | None = None
    if model.sort is not None:
        if not model.sort:
            raise ValidationError("'sort' must not be empty")
        sort = tuple(parse_sort_key(entry) for entry in model.sort)

    properties: frozenset[str] | None = None
    if model.fetch_message_properties is not None:
        properties = validate_properties(model.fetch_message_properties)

    return QueryRequest(
        filter=node,
        sort=sort,
        position=model.position or 0,
        limit=model.limit,
        collapse_threads=model.collapse_threads,
        fetch_messages=model.fetch_messages,
        fetch_message_properties=properties,
    )
