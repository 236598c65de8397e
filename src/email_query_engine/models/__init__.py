"""Data models for Email Query Engine.

This module contains Pydantic models for message snapshots, sort
specifications and query results.
"""

from .candidate import Candidate
from .message_view import (
    ANSWERED,
    DELETED,
    DRAFT,
    FLAGGED,
    FORWARDED,
    RECENT,
    SEEN,
    TRANSIENT_KEYWORDS,
    Attachment,
    MessageView,
)
from .query import MessageProjection, QueryResult, SortDirection, SortField, SortKey

__all__ = [
    "ANSWERED",
    "DELETED",
    "DRAFT",
    "FLAGGED",
    "FORWARDED",
    "RECENT",
    "SEEN",
    "TRANSIENT_KEYWORDS",
    "Attachment",
    "Candidate",
    "MessageProjection",
    "MessageView",
    "QueryResult",
    "SortDirection",
    "SortField",
    "SortKey",
]
