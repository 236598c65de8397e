"""Candidate collection across visible mailboxes."""

from __future__ import annotations

import structlog

from email_query_engine.exceptions import CollaboratorError, MessageStoreError
from email_query_engine.filters import FilterEvaluator, FilterNode
from email_query_engine.filters.nodes import mailbox_scope
from email_query_engine.models import Candidate
from email_query_engine.store.protocols import MessageStore

logger = structlog.get_logger()


class CandidateCollector:
    """Gathers matching messages, one entry per message id.

    Only visible mailboxes are fetched from the store; an inMailboxes
    constraint on the top-level AND path narrows the fetch further. Each
    candidate carries just the visible mailboxes holding the message, so
    hidden mailboxes never influence membership predicates.
    """

    def __init__(self, store: MessageStore, evaluator: FilterEvaluator) -> None:
        self._store = store
        self._evaluator = evaluator

    async def collect(
        self,
        visible: frozenset[str],
        node: FilterNode | None,
    ) -> list[Candidate]:
        """Return matching candidates, in the order the store yields them.

        Raises:
            MessageStoreError: If the store cannot provide views.
            CollaboratorError: If a predicate collaborator fails.
        """
        mailboxes = visible
        scope = mailbox_scope(node)
        if scope is not None:
            mailboxes = visible & scope
        if not mailboxes:
            return []

        try:
            views = list(await self._store.views_for(sorted(mailboxes)))
        except CollaboratorError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("message_store_failed", mailbox_count=len(mailboxes), error=str(exc))
            raise MessageStoreError(f"Could not load messages: {exc}") from exc

        seen: set[str] = set()
        candidates: list[Candidate] = []
        for view in views:
            if view.id in seen:
                continue
            containers = view.mailbox_ids & visible
            if not containers:
                continue
            seen.add(view.id)
            candidate = Candidate(message=view, mailbox_ids=containers)
            if await self._evaluator.evaluate(node, candidate):
                candidates.append(candidate)

        logger.debug(
            "candidates_collected",
            fetched=len(views),
            unique=len(seen),
            matched=len(candidates),
        )
        return candidates
