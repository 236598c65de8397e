"""Message query engine.

Evaluates one request against externally supplied state: resolve the
readable mailboxes, collect and filter candidates, order them, collapse
threads, paginate and optionally materialize projections. The engine
holds no mutable state and may serve concurrent requests.
"""

from __future__ import annotations

from typing import Any

import structlog

from email_query_engine.config import Settings, get_settings
from email_query_engine.exceptions import EmailQueryError
from email_query_engine.filters import FilterEvaluator, PredicateEvaluator
from email_query_engine.models import Candidate, QueryResult
from email_query_engine.query.collector import CandidateCollector
from email_query_engine.query.materializer import MessageMaterializer
from email_query_engine.query.pagination import effective_limit, paginate
from email_query_engine.query.request import QueryRequest, parse_query_request
from email_query_engine.query.sorting import sort_messages
from email_query_engine.query.visibility import VisibilityAdapter
from email_query_engine.store.protocols import MessageStore, TextIndex, VisibleMailboxes

logger = structlog.get_logger()


class MessageQueryEngine:
    """Answers message list queries for a principal."""

    def __init__(
        self,
        store: MessageStore,
        text_index: TextIndex,
        visibility: VisibleMailboxes,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Source of message views.
            text_index: Oracle for content searches.
            visibility: Resolver of readable mailboxes.
            settings: Engine settings. If None, loads from environment.
        """
        self.settings = settings or get_settings()
        self._visibility = VisibilityAdapter(visibility)
        self._collector = CandidateCollector(store, FilterEvaluator(PredicateEvaluator(text_index)))
        self._materializer = MessageMaterializer(self.settings.preview_length)

    def parse_request(self, raw: Any) -> QueryRequest:
        """Validate wire request arguments with this engine's settings."""
        return parse_query_request(raw, self.settings)

    async def query(self, principal: str, request: QueryRequest | dict[str, Any] | None) -> QueryResult:
        """Run a query.

        Args:
            principal: Requesting user.
            request: A validated request, or raw wire arguments to validate.

        Returns:
            QueryResult: Ordered, paginated ids and optional projections.

        Raises:
            ValidationError: If the request is malformed.
            CollaboratorError: If a collaborator fails; no partial result is returned.
        """
        try:
            if not isinstance(request, QueryRequest):
                request = self.parse_request(request)
            return await self._run(principal, request)
        except EmailQueryError as exc:
            logger.warning(
                "query_rejected",
                principal=principal,
                error_type=exc.kind,
                description=exc.description,
            )
            raise

    async def _run(self, principal: str, request: QueryRequest) -> QueryResult:
        limit = effective_limit(request.limit, self.settings.maximum_limit)
        logger.info(
            "query_started",
            principal=principal,
            has_filter=request.filter is not None,
            sort=[key.as_wire() for key in request.sort or ()],
            position=request.position,
            limit=limit,
        )

        visible = await self._visibility.readable_mailboxes(principal)
        candidates = await self._collector.collect(visible, request.filter)

        by_id = {c.message_id: c for c in candidates}
        ordered = [by_id[m.id] for m in sort_messages([c.message for c in candidates], request.sort)]
        if request.collapse_threads:
            ordered = _collapse_threads(ordered)

        page = paginate(ordered, request.position, limit)

        messages = None
        if request.fetch_messages:
            messages = [
                self._materializer.materialize(c, request.fetch_message_properties) for c in page
            ]

        result = QueryResult(
            message_ids=[c.message_id for c in page],
            thread_ids=[c.message.thread_id for c in page],
            position=request.position,
            total=len(ordered),
            sort=list(request.sort or ()),
            collapse_threads=request.collapse_threads,
            messages=messages,
        )
        logger.info(
            "query_completed",
            principal=principal,
            total=result.total,
            returned=len(result.message_ids),
        )
        return result


def _collapse_threads(candidates: list[Candidate]) -> list[Candidate]:
    """Keep the first message of each thread; unthreaded messages stay."""
    seen_threads: set[str] = set()
    kept: list[Candidate] = []
    for candidate in candidates:
        thread_id = candidate.message.thread_id
        if thread_id is not None:
            if thread_id in seen_threads:
                continue
            seen_threads.add(thread_id)
        kept.append(candidate)
    return kept
