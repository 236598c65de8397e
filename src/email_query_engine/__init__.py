"""Email Query Engine - filter, sort and page mailbox contents.

This package evaluates declarative message list queries over messages
supplied by external collaborators (message store, visibility resolver
and text index).
"""

__version__ = "0.1.0"

from email_query_engine.config import Settings, get_settings
from email_query_engine.exceptions import (
    CollaboratorError,
    EmailQueryError,
    ValidationError,
)
from email_query_engine.models import MessageView, QueryResult
from email_query_engine.query import MessageQueryEngine, QueryRequest, parse_query_request

__all__ = [
    "CollaboratorError",
    "EmailQueryError",
    "MessageQueryEngine",
    "MessageView",
    "QueryRequest",
    "QueryResult",
    "Settings",
    "ValidationError",
    "get_settings",
    "parse_query_request",
    "__version__",
]
