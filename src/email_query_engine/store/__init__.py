"""Collaborator interfaces and in-memory implementations.

The engine consumes message storage, visibility resolution and text
indexing through these protocols; the in-memory versions back the CLI and
the tests.
"""

from .memory import (
    InMemoryMessageStore,
    InMemoryTextIndex,
    Snapshot,
    StaticVisibility,
    build_snapshot,
    load_snapshot,
)
from .parsing import message_to_view
from .protocols import MessageStore, TextIndex, VisibleMailboxes

__all__ = [
    "InMemoryMessageStore",
    "InMemoryTextIndex",
    "MessageStore",
    "Snapshot",
    "StaticVisibility",
    "TextIndex",
    "VisibleMailboxes",
    "build_snapshot",
    "load_snapshot",
    "message_to_view",
]
