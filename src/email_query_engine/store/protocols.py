"""Collaborator interfaces consumed by the query engine.

Access rights, message storage and full-text indexing live outside the
engine. Implementations may perform I/O; the engine only awaits them.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from email_query_engine.filters.nodes import SearchScope
from email_query_engine.models import MessageView


class VisibleMailboxes(Protocol):
    """Resolves the mailboxes a principal may read."""

    async def visible_mailboxes(self, principal: str) -> set[str]:
        """Return owned and delegated-with-read-right mailbox ids."""
        ...


class TextIndex(Protocol):
    """Answers whether indexed message content matches a term."""

    async def matches(
        self,
        term: str,
        message_id: str,
        scope: SearchScope = SearchScope.TEXT,
    ) -> bool:
        """Return True when the message content in ``scope`` matches ``term``."""
        ...


class MessageStore(Protocol):
    """Loads message views by mailbox."""

    async def views_for(self, mailbox_ids: Iterable[str]) -> Iterable[MessageView]:
        """Return views of every message held by any of ``mailbox_ids``.

        A message held by several of the mailboxes may be returned more than
        once. Unknown mailbox ids contribute nothing.
        """
        ...
