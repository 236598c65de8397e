"""Expansion of result ids into message projections."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from email_query_engine.exceptions import ValidationError
from email_query_engine.models import (
    ANSWERED,
    DRAFT,
    FLAGGED,
    FORWARDED,
    SEEN,
    TRANSIENT_KEYWORDS,
    Candidate,
    MessageProjection,
    MessageView,
)
from email_query_engine.utils import html_to_text, parse_address_list

HEADER_PROPERTY_PREFIX = "headers."

MESSAGE_PROPERTIES = frozenset(
    {
        "id",
        "blobId",
        "threadId",
        "mailboxIds",
        "keywords",
        "isUnread",
        "isFlagged",
        "isAnswered",
        "isDraft",
        "isForwarded",
        "hasAttachment",
        "headers",
        "from",
        "to",
        "cc",
        "bcc",
        "replyTo",
        "subject",
        "date",
        "size",
        "preview",
        "textBody",
        "htmlBody",
        "attachments",
    }
)

DEFAULT_PROPERTIES = MESSAGE_PROPERTIES

_TRANSIENT_LOWER = frozenset(k.lower() for k in TRANSIENT_KEYWORDS)


def validate_properties(names: Iterable[str]) -> frozenset[str]:
    """Check requested property names; ``id`` is always included.

    Raises:
        ValidationError: If a name is not a known property.
    """
    requested = set(names)
    unknown = sorted(
        name
        for name in requested
        if name not in MESSAGE_PROPERTIES
        and not (name.startswith(HEADER_PROPERTY_PREFIX) and len(name) > len(HEADER_PROPERTY_PREFIX))
    )
    if unknown:
        raise ValidationError(f"Unknown message properties: {', '.join(unknown)}")
    requested.add("id")
    return frozenset(requested)


class MessageMaterializer:
    """Builds projections holding only the requested properties."""

    def __init__(self, preview_length: int) -> None:
        self._preview_length = preview_length

    def materialize(
        self,
        candidate: Candidate,
        properties: frozenset[str] | None = None,
    ) -> MessageProjection:
        wanted = properties if properties is not None else DEFAULT_PROPERTIES
        message = candidate.message

        projection: MessageProjection = {"id": message.id}
        for name in sorted(wanted & MESSAGE_PROPERTIES):
            if name == "id":
                continue
            projection[name] = self._value(name, candidate)

        header_names = [
            name[len(HEADER_PROPERTY_PREFIX) :]
            for name in sorted(wanted)
            if name.startswith(HEADER_PROPERTY_PREFIX)
        ]
        if header_names and "headers" not in wanted:
            projection["headers"] = _headers(message, header_names)
        return projection

    def _value(self, name: str, candidate: Candidate) -> Any:
        message = candidate.message
        if name == "blobId":
            return message.blob_id
        if name == "threadId":
            return message.thread_id
        if name == "mailboxIds":
            return sorted(candidate.mailbox_ids)
        if name == "keywords":
            return {k: True for k in sorted(message.keywords) if k.lower() not in _TRANSIENT_LOWER}
        if name == "isUnread":
            return not message.has_keyword(SEEN)
        if name == "isFlagged":
            return message.has_keyword(FLAGGED)
        if name == "isAnswered":
            return message.has_keyword(ANSWERED)
        if name == "isDraft":
            return message.has_keyword(DRAFT)
        if name == "isForwarded":
            return message.has_keyword(FORWARDED)
        if name == "hasAttachment":
            return message.has_attachment
        if name == "headers":
            return _headers(message, None)
        if name == "from":
            emailers = _emailers(message.from_)
            return emailers[0] if emailers else None
        if name == "to":
            return _emailers(message.to)
        if name == "cc":
            return _emailers(message.cc)
        if name == "bcc":
            return _emailers(message.bcc)
        if name == "replyTo":
            return _emailers(message.header("reply-to"))
        if name == "subject":
            return message.subject or ""
        if name == "date":
            return message.sent_at.isoformat()
        if name == "size":
            return message.size
        if name == "preview":
            return _preview(message, self._preview_length)
        if name == "textBody":
            return text_body(message)
        if name == "htmlBody":
            return message.html_body
        if name == "attachments":
            return [
                {
                    "blobId": a.blob_id,
                    "type": a.content_type,
                    "name": a.name,
                    "size": a.size,
                    "cid": a.cid,
                    "isInline": a.is_inline,
                }
                for a in message.attachments
            ]
        raise ValueError(f"Unsupported property: {name}")


def text_body(message: MessageView) -> str | None:
    """Plain text body, or the HTML body rendered as text."""
    if message.text_body is not None:
        return message.text_body
    if message.html_body is not None:
        return html_to_text(message.html_body)
    return None


def _preview(message: MessageView, length: int) -> str:
    body = text_body(message) or ""
    return " ".join(body.split())[:length]


def _headers(message: MessageView, names: list[str] | None) -> dict[str, str]:
    # First spelling of a name wins; repeated headers are joined.
    wanted = {n.lower() for n in names} if names is not None else None
    result: dict[str, str] = {}
    seen: dict[str, str] = {}
    for key, value in message.headers:
        lowered = key.lower()
        if wanted is not None and lowered not in wanted:
            continue
        if lowered in seen:
            result[seen[lowered]] = f"{result[seen[lowered]]}, {value}"
        else:
            seen[lowered] = key
            result[key] = value
    return result


def _emailers(raw: str | None) -> list[dict[str, str]]:
    return [{"name": name, "email": addr} for name, addr in parse_address_list(raw)]
