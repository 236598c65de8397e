"""Unit tests for message projections."""

import pytest

from email_query_engine.exceptions import ValidationError
from email_query_engine.models import Candidate
from email_query_engine.query import MESSAGE_PROPERTIES, MessageMaterializer, validate_properties


@pytest.fixture
def candidate(view_factory) -> Candidate:
    view = view_factory(
        "m1",
        mailboxes=("inbox", "hidden"),
        keywords=("$Flagged", "$Recent", "custom"),
        headers={
            "From": '"Doe, John" <john@example.com>',
            "To": "alice@example.com, Bob <bob@example.com>",
            "Subject": "Status",
            "Date": "Tue, 2 Jan 2024 09:00:00 +0000",
            "X-Priority": "1",
        },
        size=4096,
        html_body="<p>Shipped   the <b>release</b></p><p>Thanks</p>",
        attachments=({"blob_id": "b1", "name": "log.txt", "content_type": "text/plain", "size": 12},),
    )
    return Candidate(message=view, mailbox_ids=frozenset({"inbox"}))


class TestValidateProperties:
    """Test suite for property validation."""

    def test_id_always_included(self) -> None:
        """Test that id is added to any selection."""
        assert validate_properties(["subject"]) == frozenset({"id", "subject"})

    def test_header_properties(self) -> None:
        """Test that headers.<name> is accepted."""
        assert "headers.X-Priority" in validate_properties(["headers.X-Priority"])

    @pytest.mark.parametrize("name", ["color", "headers.", "Subject"])
    def test_unknown_properties(self, name) -> None:
        """Test that unknown names are validation errors."""
        with pytest.raises(ValidationError):
            validate_properties([name])


class TestMessageMaterializer:
    """Test suite for MessageMaterializer."""

    def test_selected_properties_only(self, candidate) -> None:
        """Test that a projection holds only requested properties."""
        projection = MessageMaterializer(preview_length=10).materialize(
            candidate, frozenset({"id", "subject", "isFlagged", "isUnread"})
        )

        assert projection == {"id": "m1", "subject": "Status", "isFlagged": True, "isUnread": True}

    def test_default_properties(self, candidate) -> None:
        """Test that omitted selection returns every regular property."""
        projection = MessageMaterializer(preview_length=10).materialize(candidate)

        assert set(projection) == MESSAGE_PROPERTIES

    def test_values(self, candidate) -> None:
        """Test the rendered property values."""
        projection = MessageMaterializer(preview_length=16).materialize(candidate)

        assert projection["mailboxIds"] == ["inbox"]
        assert projection["keywords"] == {"$Flagged": True, "custom": True}
        assert projection["from"] == {"name": "Doe, John", "email": "john@example.com"}
        assert projection["to"] == [
            {"name": "", "email": "alice@example.com"},
            {"name": "Bob", "email": "bob@example.com"},
        ]
        assert projection["cc"] == []
        assert projection["replyTo"] == []
        assert projection["date"] == "2024-01-02T09:00:00+00:00"
        assert projection["size"] == 4096
        assert projection["textBody"] == "Shipped the release\nThanks"
        assert projection["preview"] == "Shipped the rele"
        assert projection["hasAttachment"] is True
        assert projection["attachments"] == [
            {
                "blobId": "b1",
                "type": "text/plain",
                "name": "log.txt",
                "size": 12,
                "cid": None,
                "isInline": False,
            }
        ]

    def test_named_headers(self, candidate) -> None:
        """Test that headers.<name> selects single headers."""
        projection = MessageMaterializer(preview_length=10).materialize(
            candidate, validate_properties(["headers.x-priority", "headers.Subject"])
        )

        assert projection == {"id": "m1", "headers": {"Subject": "Status", "X-Priority": "1"}}
