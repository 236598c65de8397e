"""Leaf predicate evaluation.

Everything except text search is answered from the MessageView alone;
text search is delegated to the injected text index.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from email_query_engine.exceptions import CollaboratorError, TextIndexUnavailableError
from email_query_engine.filters.nodes import (
    AttachmentFileNameSearch,
    Comparator,
    HasAttachment,
    HasKeyword,
    HeaderContains,
    HeaderField,
    HeaderFieldMatch,
    MailboxIn,
    MailboxNotIn,
    MatchAll,
    MaxSize,
    MessageFlag,
    MinSize,
    NotKeyword,
    Predicate,
    SentAfter,
    SentBefore,
    StateFlag,
    TextSearch,
)
from email_query_engine.models import (
    ANSWERED,
    DRAFT,
    FLAGGED,
    FORWARDED,
    SEEN,
    TRANSIENT_KEYWORDS,
    Candidate,
    MessageView,
)
from email_query_engine.utils import parse_address_list

if TYPE_CHECKING:
    from email_query_engine.store.protocols import TextIndex

logger = structlog.get_logger()

_FLAG_KEYWORDS = {
    MessageFlag.UNREAD: SEEN,
    MessageFlag.FLAGGED: FLAGGED,
    MessageFlag.ANSWERED: ANSWERED,
    MessageFlag.DRAFT: DRAFT,
    MessageFlag.FORWARDED: FORWARDED,
}

_HEADER_NAMES = {
    HeaderField.FROM: ("from",),
    HeaderField.TO: ("to",),
    HeaderField.CC: ("cc",),
    HeaderField.BCC: ("bcc",),
    HeaderField.SUBJECT: ("subject",),
    HeaderField.RECIPIENT: ("to", "cc"),
}

_FOLDING = re.compile(r"\r?\n[ \t]+")

_TRANSIENT_LOWER = frozenset(k.lower() for k in TRANSIENT_KEYWORDS)


def is_transient_keyword(keyword: str) -> bool:
    """$Deleted and $Recent are session state, not queryable state."""
    return keyword.lower() in _TRANSIENT_LOWER


class PredicateEvaluator:
    """Evaluates leaf predicates against a candidate message."""

    def __init__(self, text_index: TextIndex) -> None:
        """Create an evaluator.

        Args:
            text_index: Oracle answering content-based predicates.
        """
        self._text_index = text_index

    async def matches(self, predicate: Predicate, candidate: Candidate) -> bool:
        if isinstance(predicate, TextSearch):
            return await self._search(predicate, candidate.message_id)
        return matches_in_memory(predicate, candidate)

    async def _search(self, predicate: TextSearch, message_id: str) -> bool:
        try:
            return bool(await self._text_index.matches(predicate.term, message_id, predicate.scope))
        except CollaboratorError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "text_index_failed",
                message_id=message_id,
                scope=predicate.scope.value,
                error=str(exc),
            )
            raise TextIndexUnavailableError(
                f"Text index could not answer '{predicate.scope.value}' search: {exc}"
            ) from exc


def matches_in_memory(predicate: Predicate, candidate: Candidate) -> bool:
    """Evaluate a predicate that needs no collaborator."""
    message = candidate.message

    if isinstance(predicate, MatchAll):
        return True
    if isinstance(predicate, MailboxIn):
        return not candidate.mailbox_ids.isdisjoint(predicate.mailbox_ids)
    if isinstance(predicate, MailboxNotIn):
        return candidate.mailbox_ids.isdisjoint(predicate.mailbox_ids)
    if isinstance(predicate, HeaderFieldMatch):
        return match_header_field(predicate, message)
    if isinstance(predicate, AttachmentFileNameSearch):
        term = predicate.term.lower()
        return any(term in name.lower() for name in message.attachment_names)
    if isinstance(predicate, HasAttachment):
        return message.has_attachment == predicate.value
    if isinstance(predicate, StateFlag):
        present = message.has_keyword(_FLAG_KEYWORDS[predicate.flag])
        if predicate.flag is MessageFlag.UNREAD:
            present = not present
        return present == predicate.value
    if isinstance(predicate, HasKeyword):
        # Intentional: transient markers never constrain a query.
        if is_transient_keyword(predicate.keyword):
            return True
        return message.has_keyword(predicate.keyword)
    if isinstance(predicate, NotKeyword):
        if is_transient_keyword(predicate.keyword):
            return True
        return not message.has_keyword(predicate.keyword)
    if isinstance(predicate, HeaderContains):
        value = predicate.value.lower()
        return any(value in _unfold(v).lower() for v in message.header_values(predicate.name))
    if isinstance(predicate, SentBefore):
        return message.sent_at < predicate.instant
    if isinstance(predicate, SentAfter):
        return message.sent_at >= predicate.instant
    if isinstance(predicate, MinSize):
        return message.size > predicate.size
    if isinstance(predicate, MaxSize):
        return message.size < predicate.size

    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")


def match_header_field(predicate: HeaderFieldMatch, message: MessageView) -> bool:
    """Match a from/to/cc/bcc/subject predicate.

    Query filters use a case-insensitive substring test on the raw header.
    Rule conditions compare against every candidate value of the field.
    """
    raw_values = [
        _unfold(value)
        for name in _HEADER_NAMES[predicate.field]
        for value in message.header_values(name)
    ]

    if predicate.comparator is None:
        raw = ", ".join(raw_values)
        if not raw:
            return False
        return predicate.value.lower() in raw.lower()

    if predicate.field is HeaderField.SUBJECT:
        candidates = raw_values
        value = predicate.value
    else:
        candidates = [c.lower() for raw in raw_values for c in address_candidates(raw)]
        value = predicate.value.lower()

    if predicate.comparator is Comparator.CONTAINS:
        return any(value in c for c in candidates)
    if predicate.comparator is Comparator.NOT_CONTAINS:
        return not any(value in c for c in candidates)
    if predicate.comparator is Comparator.EXACTLY_EQUALS:
        return any(value == c for c in candidates)
    return not any(value == c for c in candidates)


def address_candidates(raw: str) -> list[str]:
    """Values an address header can be matched against.

    The whole header, each comma-separated entry, and for every parsed
    address its display name, its address and ``name <address>``.
    """
    candidates = [raw.strip()]
    candidates.extend(entry for entry in _split_entries(raw) if entry)
    for name, addr in parse_address_list(raw):
        if name:
            candidates.append(name)
        if addr:
            candidates.append(addr)
        if name and addr:
            candidates.append(f"{name} <{addr}>")
    return candidates


def _split_entries(raw: str) -> list[str]:
    entries: list[str] = []
    current: list[str] = []
    in_quotes = False
    in_angle = False
    for char in raw:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "<" and not in_quotes:
            in_angle = True
        elif char == ">" and not in_quotes:
            in_angle = False
        elif char == "," and not in_quotes and not in_angle:
            entries.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    entries.append("".join(current).strip())
    return entries


def _unfold(value: str) -> str:
    return _FOLDING.sub(" ", value)
