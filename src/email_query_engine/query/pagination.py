"""Position/limit windowing."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def effective_limit(requested: int | None, maximum_limit: int) -> int:
    """Requested limit capped at the configured maximum; the maximum when absent."""
    if requested is None:
        return maximum_limit
    return min(requested, maximum_limit)


def paginate(items: Sequence[T], position: int, limit: int) -> list[T]:
    """Return ``items[position:position + limit]``, clipped to the available length."""
    if position < 0 or limit < 0:
        raise ValueError("position and limit must be non-negative")
    return list(items[position : position + limit])
