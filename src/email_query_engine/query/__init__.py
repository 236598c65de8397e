"""Query pipeline: request validation, collection, ordering and paging."""

from .engine import MessageQueryEngine
from .materializer import MESSAGE_PROPERTIES, MessageMaterializer, validate_properties
from .pagination import effective_limit, paginate
from .request import QueryRequest, parse_query_request, parse_sort_key
from .sorting import sort_messages

__all__ = [
    "MESSAGE_PROPERTIES",
    "MessageMaterializer",
    "MessageQueryEngine",
    "QueryRequest",
    "effective_limit",
    "paginate",
    "parse_query_request",
    "parse_sort_key",
    "sort_messages",
]
