"""In-memory collaborators backed by a JSON snapshot.

These implement the collaborator protocols for local use and tests: a
message store, a naive text index and a static visibility table.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from email_query_engine.exceptions import ConfigurationError, EmailQueryError
from email_query_engine.filters.nodes import SearchScope
from email_query_engine.models import MessageView
from email_query_engine.store.parsing import message_to_view
from email_query_engine.utils import html_to_text

logger = structlog.get_logger()


class InMemoryMessageStore:
    """Message store holding views in insertion order."""

    def __init__(self, views: Iterable[MessageView] = ()) -> None:
        self._views: list[MessageView] = list(views)

    def add(self, view: MessageView) -> None:
        self._views.append(view)

    def views(self) -> list[MessageView]:
        """Every stored view, in insertion order."""
        return list(self._views)

    async def views_for(self, mailbox_ids: Iterable[str]) -> list[MessageView]:
        # One pass per mailbox, like a per-mailbox backend: a message held by
        # several requested mailboxes is returned once per mailbox.
        result: list[MessageView] = []
        for mailbox_id in sorted(set(mailbox_ids)):
            result.extend(v for v in self._views if mailbox_id in v.mailbox_ids)
        return result


@dataclass
class _IndexedDocument:
    headers: str = ""
    body: str = ""
    attachments: str = ""
    file_names: str = ""


class InMemoryTextIndex:
    """Case-insensitive token matching over indexed message content.

    A term matches when every whitespace-separated token of it occurs in the
    searched content.
    """

    def __init__(self) -> None:
        self._documents: dict[str, _IndexedDocument] = {}

    def index(
        self,
        message_id: str,
        *,
        headers: str = "",
        body: str = "",
        attachments: Iterable[str] = (),
        file_names: Iterable[str] = (),
    ) -> None:
        self._documents[message_id] = _IndexedDocument(
            headers=headers.lower(),
            body=body.lower(),
            attachments="\n".join(attachments).lower(),
            file_names="\n".join(file_names).lower(),
        )

    def index_view(self, view: MessageView, attachment_texts: Iterable[str] = ()) -> None:
        """Index a view's headers, body and attachment names."""
        headers = "\n".join(
            value for value in (view.subject, view.from_, view.to, view.cc, view.bcc) if value
        )
        body = view.text_body or (html_to_text(view.html_body) if view.html_body else "")
        self.index(
            view.id,
            headers=headers,
            body=body,
            attachments=attachment_texts,
            file_names=view.attachment_names,
        )

    async def matches(
        self,
        term: str,
        message_id: str,
        scope: SearchScope = SearchScope.TEXT,
    ) -> bool:
        document = self._documents.get(message_id)
        if document is None:
            return False

        if scope is SearchScope.BODY:
            content = document.body
        elif scope is SearchScope.ATTACHMENTS:
            content = document.attachments
        else:
            content = "\n".join(
                (document.headers, document.body, document.attachments, document.file_names)
            )

        tokens = term.lower().split()
        return bool(tokens) and all(token in content for token in tokens)


class StaticVisibility:
    """Visibility table mapping principals to readable mailbox ids."""

    def __init__(self, table: dict[str, Iterable[str]]) -> None:
        self._table = {principal: frozenset(ids) for principal, ids in table.items()}

    async def visible_mailboxes(self, principal: str) -> set[str]:
        return set(self._table.get(principal, frozenset()))


@dataclass(frozen=True)
class Snapshot:
    """Collaborators loaded from one snapshot file."""

    store: InMemoryMessageStore
    text_index: InMemoryTextIndex
    visibility: StaticVisibility


def build_snapshot(data: dict[str, Any]) -> Snapshot:
    """Build in-memory collaborators from decoded snapshot data.

    The snapshot holds ``visibility`` (principal -> mailbox ids) and
    ``messages`` (message records, see ``message_to_view``). Attachment
    records may carry a ``text`` entry used as indexed attachment content.
    """
    visibility_raw = data.get("visibility") or {}
    messages_raw = data.get("messages") or []
    if not isinstance(visibility_raw, dict) or not isinstance(messages_raw, list):
        raise ConfigurationError("Snapshot requires a 'visibility' object and a 'messages' list")

    store = InMemoryMessageStore()
    text_index = InMemoryTextIndex()
    for record in messages_raw:
        if not isinstance(record, dict):
            raise ConfigurationError("Snapshot messages must be objects")
        try:
            view = message_to_view(record)
        except (EmailQueryError, PydanticValidationError, ValueError, TypeError) as exc:
            raise ConfigurationError(
                f"Invalid snapshot message {record.get('id')!r}: {exc}"
            ) from exc
        store.add(view)
        attachment_texts = [
            a["text"]
            for a in record.get("attachments") or []
            if isinstance(a, dict) and isinstance(a.get("text"), str)
        ]
        text_index.index_view(view, attachment_texts)

    logger.info("snapshot_loaded", messages=len(messages_raw), principals=len(visibility_raw))
    return Snapshot(
        store=store,
        text_index=text_index,
        visibility=StaticVisibility({str(k): [str(m) for m in v] for k, v in visibility_raw.items()}),
    )


def load_snapshot(path: Path) -> Snapshot:
    """Load collaborators from a JSON snapshot file.

    Raises:
        ConfigurationError: If the file is missing or not valid JSON.
    """
    if not path.exists():
        raise ConfigurationError(f"Snapshot file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid snapshot JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError("Snapshot root must be a JSON object.")
    return build_snapshot(data)
