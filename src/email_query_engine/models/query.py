"""Sort and result models for message queries."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# A materialized message: JMAP property name -> JSON-ready value.
MessageProjection = dict[str, Any]


class SortField(str, Enum):
    """Message attributes a query can be ordered by."""

    ID = "id"
    DATE = "date"
    SUBJECT = "subject"
    FROM = "from"
    TO = "to"
    SIZE = "size"


class SortDirection(str, Enum):
    """Sort direction enumeration."""

    ASC = "asc"
    DESC = "desc"


class SortKey(BaseModel):
    """One entry of a sort specification."""

    model_config = ConfigDict(frozen=True)

    field: SortField = Field(description="Attribute to compare")
    direction: SortDirection = Field(default=SortDirection.DESC, description="Sort direction")

    def as_wire(self) -> str:
        return f"{self.field.value} {self.direction.value}"


class QueryResult(BaseModel):
    """Ordered, paginated outcome of a message query."""

    message_ids: list[str] = Field(default_factory=list, description="Matching message ids, in order")
    thread_ids: list[str | None] = Field(
        default_factory=list, description="Thread id of each returned message"
    )
    position: int = Field(default=0, ge=0, description="Index of the first returned message")
    total: int = Field(default=0, ge=0, description="Number of matches before pagination")
    sort: list[SortKey] = Field(default_factory=list, description="Sort specification applied")
    collapse_threads: bool = Field(default=False, description="Whether threads were collapsed")
    messages: list[MessageProjection] | None = Field(
        default=None, description="Projections parallel to message_ids when fetched"
    )

    def to_response(self) -> dict[str, Any]:
        """Render as a messageList response body."""
        body: dict[str, Any] = {
            "messageIds": list(self.message_ids),
            "threadIds": list(self.thread_ids),
            "position": self.position,
            "total": self.total,
            "sort": [key.as_wire() for key in self.sort],
            "collapseThreads": self.collapse_threads,
        }
        if self.messages is not None:
            body["messages"] = list(self.messages)
        return body
