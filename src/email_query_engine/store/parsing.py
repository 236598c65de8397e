"""Helpers for turning stored message records into MessageView snapshots.

A record is a JSON object either carrying structured fields (``headers``,
``textBody``, ``attachments``...) or a ``raw`` RFC 5322 message that is
parsed with the standard library email package.
"""

from __future__ import annotations

from datetime import datetime, timezone
from email import message_from_string, policy
from typing import Any

from email_query_engine.exceptions import ValidationError
from email_query_engine.models import Attachment, MessageView


def _header_pairs(raw_headers: Any) -> tuple[tuple[str, str], ...]:
    if not raw_headers:
        return ()
    pairs: list[tuple[str, str]] = []
    if isinstance(raw_headers, dict):
        for name, value in raw_headers.items():
            values = value if isinstance(value, list) else [value]
            pairs.extend((str(name), str(v)) for v in values if v is not None)
    elif isinstance(raw_headers, list):
        for item in raw_headers:
            # Accept [name, value] pairs and {"name":..., "value":...} objects.
            if isinstance(item, dict):
                name, value = item.get("name"), item.get("value")
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                name, value = item
            else:
                continue
            if isinstance(name, str) and isinstance(value, str):
                pairs.append((name, value))
    return tuple(pairs)


def _keywords(raw_keywords: Any) -> frozenset[str]:
    if isinstance(raw_keywords, dict):
        return frozenset(str(k) for k, v in raw_keywords.items() if v)
    if isinstance(raw_keywords, list):
        return frozenset(str(k) for k in raw_keywords)
    return frozenset()


def _parse_received(value: Any) -> datetime:
    if isinstance(value, datetime):
        received = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        # Milliseconds since epoch.
        received = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            received = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValidationError(f"Invalid receivedAt value: {value!r}") from exc
    else:
        raise ValidationError("Message record requires a 'receivedAt' timestamp")

    if received.tzinfo is None:
        received = received.replace(tzinfo=timezone.utc)
    return received


def _attachment(item: dict[str, Any]) -> Attachment:
    return Attachment(
        blob_id=item.get("blobId"),
        name=item.get("name"),
        content_type=item.get("type") or "application/octet-stream",
        size=int(item.get("size") or 0),
        is_inline=bool(item.get("isInline", False)),
        cid=item.get("cid"),
    )


def parse_mime(raw: str) -> dict[str, Any]:
    """Extract headers, bodies and attachments from an RFC 5322 message."""
    message = message_from_string(raw, policy=policy.default)

    headers = [(name, str(value)) for name, value in message.items()]

    text_part = message.get_body(preferencelist=("plain",))
    html_part = message.get_body(preferencelist=("html",))

    attachments: list[dict[str, Any]] = []
    for part in message.iter_attachments():
        payload = part.get_payload(decode=True) or b""
        attachments.append(
            {
                "name": part.get_filename(),
                "type": part.get_content_type(),
                "size": len(payload),
                "isInline": part.get_content_disposition() == "inline",
                "cid": (part.get("Content-ID") or "").strip("<>") or None,
            }
        )

    return {
        "headers": headers,
        "textBody": text_part.get_content() if text_part is not None else None,
        "htmlBody": html_part.get_content() if html_part is not None else None,
        "attachments": attachments,
        "size": len(raw.encode("utf-8")),
    }


def message_to_view(record: dict[str, Any]) -> MessageView:
    """Convert a stored message record to a MessageView.

    Args:
        record: Message record dict.

    Returns:
        MessageView: Read-only snapshot of the message.

    Raises:
        ValidationError: If the record lacks an id or a receive time.
    """
    message_id = record.get("id")
    if not isinstance(message_id, str) or not message_id:
        raise ValidationError("Message record requires a non-empty 'id'")

    fields = dict(record)
    raw = record.get("raw")
    if isinstance(raw, str):
        parsed = parse_mime(raw)
        for key, value in parsed.items():
            fields.setdefault(key, value)

    attachments = fields.get("attachments") or []
    if not isinstance(attachments, list):
        attachments = []

    return MessageView(
        id=message_id,
        blob_id=fields.get("blobId"),
        thread_id=fields.get("threadId"),
        mailbox_ids=frozenset(str(m) for m in fields.get("mailboxIds") or []),
        keywords=_keywords(fields.get("keywords")),
        headers=_header_pairs(fields.get("headers")),
        size=int(fields.get("size") or 0),
        received_at=_parse_received(fields.get("receivedAt")),
        attachments=tuple(_attachment(a) for a in attachments if isinstance(a, dict)),
        text_body=fields.get("textBody"),
        html_body=fields.get("htmlBody"),
    )
