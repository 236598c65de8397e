"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from typing import Any

import pytest


def make_view(
    message_id: str,
    *,
    mailboxes: tuple[str, ...] = ("inbox",),
    keywords: tuple[str, ...] = (),
    headers: dict[str, str] | None = None,
    size: int = 1000,
    received_at: datetime | None = None,
    thread_id: str | None = None,
    attachments: tuple[dict[str, Any], ...] = (),
    text_body: str | None = None,
    html_body: str | None = None,
):
    """Build a MessageView with sensible defaults."""
    from email_query_engine.models import Attachment, MessageView

    return MessageView(
        id=message_id,
        blob_id=f"blob-{message_id}",
        thread_id=thread_id or f"thread-{message_id}",
        mailbox_ids=frozenset(mailboxes),
        keywords=frozenset(keywords),
        headers=tuple((headers or {}).items()),
        size=size,
        received_at=received_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
        attachments=tuple(Attachment(**a) for a in attachments),
        text_body=text_body,
        html_body=html_body,
    )


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from email_query_engine.config import Settings

    return Settings(
        maximum_limit=256,
        max_filter_depth=10,
        preview_length=32,
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def view_factory():
    """Provide the MessageView builder."""
    return make_view


@pytest.fixture
def build_engine(mock_settings):
    """Build an engine over in-memory collaborators.

    Returns a callable taking message views, a visibility table and an
    optional text index.
    """
    from email_query_engine.query import MessageQueryEngine
    from email_query_engine.store import InMemoryMessageStore, InMemoryTextIndex, StaticVisibility

    def _build(views, visibility=None, text_index=None, settings=None):
        views = list(views)
        if visibility is None:
            visibility = {"alice": sorted({m for v in views for m in v.mailbox_ids})}
        if text_index is None:
            text_index = InMemoryTextIndex()
            for view in views:
                text_index.index_view(view)
        return MessageQueryEngine(
            store=InMemoryMessageStore(views),
            text_index=text_index,
            visibility=StaticVisibility(visibility),
            settings=settings or mock_settings,
        )

    return _build


@pytest.fixture
def sample_snapshot() -> dict:
    """Provide a snapshot with two principals and overlapping mailboxes."""
    return {
        "visibility": {
            "alice": ["inbox", "archive"],
            "bob": ["shared"],
        },
        "messages": [
            {
                "id": "m1",
                "threadId": "t1",
                "mailboxIds": ["inbox", "archive"],
                "keywords": {"$Seen": True},
                "headers": {
                    "From": "Newsletter <newsletter@python.org>",
                    "To": "alice@example.com",
                    "Subject": "Weekly Newsletter - Python Tips",
                    "Date": "Mon, 1 Jan 2024 10:00:00 +0000",
                },
                "size": 2048,
                "receivedAt": "2024-01-01T10:00:05Z",
                "textBody": "Welcome to this week's Python tips!",
            },
            {
                "id": "m2",
                "threadId": "t2",
                "mailboxIds": ["inbox"],
                "keywords": ["$Flagged"],
                "headers": [
                    ["From", "Bob <bob@example.com>"],
                    ["To", "alice@example.com"],
                    ["Subject", "Quarterly report"],
                    ["Date", "Tue, 2 Jan 2024 09:00:00 +0000"],
                ],
                "size": 50000,
                "receivedAt": 1704186000000,
                "textBody": "Numbers attached.",
                "attachments": [
                    {
                        "blobId": "b-report",
                        "name": "report.pdf",
                        "type": "application/pdf",
                        "size": 40000,
                        "text": "revenue grew in the third quarter",
                    }
                ],
            },
            {
                "id": "m3",
                "threadId": "t3",
                "mailboxIds": ["shared"],
                "headers": {"From": "carol@example.com", "Subject": "Shared notes"},
                "size": 300,
                "receivedAt": "2024-01-03T08:00:00+00:00",
            },
        ],
    }


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Restore structlog defaults so a CLI test's captured stream does not leak."""
    import structlog

    yield
    structlog.reset_defaults()
