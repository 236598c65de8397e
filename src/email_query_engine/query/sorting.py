"""Multi-key stable ordering of matched messages."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from email_query_engine.models import MessageView, SortDirection, SortField, SortKey

_KEY_FUNCTIONS: dict[SortField, Callable[[MessageView], Any]] = {
    SortField.ID: lambda m: m.id,
    SortField.DATE: lambda m: m.sent_at,
    # Raw header strings, compared case-sensitively; absent sorts as empty.
    SortField.SUBJECT: lambda m: m.subject or "",
    SortField.FROM: lambda m: m.from_ or "",
    SortField.TO: lambda m: m.to or "",
    SortField.SIZE: lambda m: m.size,
}


def sort_messages(
    messages: Sequence[MessageView],
    sort: Sequence[SortKey] | None,
) -> list[MessageView]:
    """Order messages by the given keys, first key primary.

    The input is first put in identifier order, so the result does not
    depend on the order the store returned messages in. Each key is then
    applied with a stable sort, least significant first; ties on every key
    keep identifier order.

    Args:
        messages: Matched messages, in any order.
        sort: Sort keys, or None for identifier order.

    Returns:
        The messages in result order.
    """
    ordered = sorted(messages, key=lambda m: m.id)
    for key in reversed(sort or ()):
        ordered.sort(
            key=_KEY_FUNCTIONS[key.field],
            reverse=key.direction is SortDirection.DESC,
        )
    return ordered
