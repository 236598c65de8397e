"""Read-only message snapshot.

A MessageView holds everything the query engine may look at for a single
message. It is built per request from external state and never mutated.
Body text is kept for projection only; content matching is answered by
the text index.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from email_query_engine.utils import parse_header_date

SEEN = "$Seen"
FLAGGED = "$Flagged"
ANSWERED = "$Answered"
DRAFT = "$Draft"
FORWARDED = "$Forwarded"
DELETED = "$Deleted"
RECENT = "$Recent"

# Session-transient markers. They are intentionally left out of keyword
# filtering and of exposed keywords: a hasKeyword/notKeyword naming one of
# them matches every message.
TRANSIENT_KEYWORDS = frozenset({DELETED, RECENT})


class Attachment(BaseModel):
    """A single attachment part of a message."""

    model_config = ConfigDict(frozen=True)

    blob_id: str | None = Field(default=None, description="Blob identifier of the part")
    name: str | None = Field(default=None, description="Attachment file name")
    content_type: str = Field(default="application/octet-stream", description="MIME type")
    size: int = Field(default=0, ge=0, description="Part size in bytes")
    is_inline: bool = Field(default=False, description="Whether the part is displayed inline")
    cid: str | None = Field(default=None, description="Content-ID for inline parts")


class MessageView(BaseModel):
    """Queryable attributes of one message."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Message identifier")
    blob_id: str | None = Field(default=None, description="Blob identifier of the raw message")
    thread_id: str | None = Field(default=None, description="Thread identifier")
    mailbox_ids: frozenset[str] = Field(
        default_factory=frozenset, description="Mailboxes the message currently belongs to"
    )
    keywords: frozenset[str] = Field(default_factory=frozenset, description="Keywords set on the message")

    # Raw (name, value) pairs in message order; names keep their original case.
    headers: tuple[tuple[str, str], ...] = Field(default=(), description="Message headers")

    size: int = Field(default=0, ge=0, description="Message size in bytes")
    received_at: datetime = Field(description="Time the message reached the mailbox")
    attachments: tuple[Attachment, ...] = Field(default=(), description="Attachment parts")

    text_body: str | None = Field(default=None, description="Plain text body, if any")
    html_body: str | None = Field(default=None, description="HTML body, if any")

    @field_validator("received_at")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def header_values(self, name: str) -> list[str]:
        """Return every value of a header, matching the name case-insensitively."""
        wanted = name.lower()
        return [value for key, value in self.headers if key.lower() == wanted]

    def header(self, name: str) -> str | None:
        """Return all values of a header joined, or None when absent."""
        values = self.header_values(name)
        if not values:
            return None
        return ", ".join(values)

    @property
    def subject(self) -> str | None:
        return self.header("subject")

    @property
    def from_(self) -> str | None:
        return self.header("from")

    @property
    def to(self) -> str | None:
        return self.header("to")

    @property
    def cc(self) -> str | None:
        return self.header("cc")

    @property
    def bcc(self) -> str | None:
        return self.header("bcc")

    @property
    def sent_at(self) -> datetime:
        """Date header when parseable, otherwise the received time."""
        return parse_header_date(self.header("date")) or self.received_at

    @property
    def attachment_names(self) -> list[str]:
        return [a.name for a in self.attachments if a.name]

    @property
    def has_attachment(self) -> bool:
        return any(not a.is_inline for a in self.attachments)

    def has_keyword(self, keyword: str) -> bool:
        """Keyword presence, compared case-insensitively."""
        wanted = keyword.lower()
        return any(k.lower() == wanted for k in self.keywords)
