"""A message reachable by the requesting principal."""

from __future__ import annotations

from dataclasses import dataclass

from .message_view import MessageView


@dataclass(frozen=True)
class Candidate:
    """A message together with the visible mailboxes holding it."""

    message: MessageView
    mailbox_ids: frozenset[str]

    @property
    def message_id(self) -> str:
        return self.message.id
