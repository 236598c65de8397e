"""Unit tests for wire filter parsing."""

from datetime import datetime, timezone

import pytest

from email_query_engine.exceptions import ValidationError
from email_query_engine.filters import Combinator, Operator, parse_filter
from email_query_engine.filters.nodes import (
    HasKeyword,
    HeaderContains,
    HeaderField,
    HeaderFieldMatch,
    MailboxIn,
    MatchAll,
    MessageFlag,
    MinSize,
    SearchScope,
    SentBefore,
    StateFlag,
    TextSearch,
    mailbox_scope,
    operator_depth,
)


def _nested(depth: int) -> dict:
    node: dict = {"isFlagged": True}
    for _ in range(depth):
        node = {"operator": "AND", "conditions": [node]}
    return node


class TestConditionParsing:
    """Test suite for condition objects."""

    def test_empty_condition_matches_all(self) -> None:
        """Test that a condition without keys is unconstrained."""
        assert parse_filter({}, max_depth=10) == MatchAll()

    def test_single_key_is_a_leaf(self) -> None:
        """Test that one key produces the predicate itself."""
        assert parse_filter({"isFlagged": True}, max_depth=10) == StateFlag(MessageFlag.FLAGGED, True)

    def test_several_keys_are_anded(self) -> None:
        """Test that condition keys combine by AND."""
        node = parse_filter(
            {"inMailboxes": ["inbox"], "minSize": 10, "subject": "report", "text": "q3"},
            max_depth=10,
        )

        assert node == Combinator(
            Operator.AND,
            (
                MailboxIn(frozenset({"inbox"})),
                MinSize(10),
                TextSearch("q3", SearchScope.TEXT),
                HeaderFieldMatch(HeaderField.SUBJECT, "report"),
            ),
        )

    def test_string_booleans_accepted(self) -> None:
        """Test that "true"/"false" strings are read as booleans."""
        assert parse_filter({"isUnread": "false"}, max_depth=10) == StateFlag(MessageFlag.UNREAD, False)

    def test_non_boolean_flag_rejected(self) -> None:
        """Test that an ill-typed flag is a validation error."""
        with pytest.raises(ValidationError) as exc_info:
            parse_filter({"isFlagged": "maybe"}, max_depth=10)

        assert exc_info.value.kind == "invalidArguments"
        assert "isFlagged" in exc_info.value.description

    def test_unknown_key_rejected(self) -> None:
        """Test that unknown condition keys are validation errors."""
        with pytest.raises(ValidationError):
            parse_filter({"isImportant": True}, max_depth=10)

    def test_dates_without_offset_are_utc(self) -> None:
        """Test that naive date-times are taken as UTC."""
        node = parse_filter({"before": "2024-01-02T00:00:00"}, max_depth=10)

        assert node == SentBefore(datetime(2024, 1, 2, tzinfo=timezone.utc))

    def test_header_pair(self) -> None:
        """Test the two-element header condition."""
        node = parse_filter({"header": ["X-Priority", "1"]}, max_depth=10)

        assert node == HeaderContains("X-Priority", "1")

    @pytest.mark.parametrize("header", [[], ["X-Priority"], ["a", "b", "c"]])
    def test_header_wrong_arity_rejected(self, header) -> None:
        """Test that header needs exactly a name and a value."""
        with pytest.raises(ValidationError):
            parse_filter({"header": header}, max_depth=10)

    def test_size_bound(self) -> None:
        """Test that sizes beyond 2^53 are rejected with the bound."""
        with pytest.raises(ValidationError) as exc_info:
            parse_filter({"maxSize": 2**53}, max_depth=10)

        assert "value should be positive and less than 2^53" in exc_info.value.description

    def test_keyword_validation(self) -> None:
        """Test keyword names are validated."""
        assert parse_filter({"hasKeyword": "$Flagged"}, max_depth=10) == HasKeyword("$Flagged")
        with pytest.raises(ValidationError):
            parse_filter({"notKeyword": "bad keyword"}, max_depth=10)

    def test_non_object_rejected(self) -> None:
        """Test that filters must be objects."""
        with pytest.raises(ValidationError):
            parse_filter(["isFlagged"], max_depth=10)


class TestOperatorParsing:
    """Test suite for operator objects."""

    def test_nested_operators(self) -> None:
        """Test operators nest and keep child order."""
        node = parse_filter(
            {
                "operator": "OR",
                "conditions": [
                    {"isFlagged": True},
                    {"operator": "NOT", "conditions": [{"isUnread": True}]},
                ],
            },
            max_depth=10,
        )

        assert isinstance(node, Combinator)
        assert node.operator is Operator.OR
        assert node.children[0] == StateFlag(MessageFlag.FLAGGED, True)
        assert node.children[1] == Combinator(Operator.NOT, (StateFlag(MessageFlag.UNREAD, True),))
        assert operator_depth(node) == 2

    def test_empty_conditions_rejected(self) -> None:
        """Test that operators need at least one condition."""
        with pytest.raises(ValidationError):
            parse_filter({"operator": "AND", "conditions": []}, max_depth=10)

    def test_unknown_operator_rejected(self) -> None:
        """Test that only AND/OR/NOT are operators."""
        with pytest.raises(ValidationError):
            parse_filter({"operator": "XOR", "conditions": [{}]}, max_depth=10)

    def test_depth_at_limit_accepted(self) -> None:
        """Test that the maximum depth itself is allowed."""
        assert operator_depth(parse_filter(_nested(10), max_depth=10)) == 10

    def test_depth_over_limit_rejected(self) -> None:
        """Test that deeper nesting fails with the limit in the message."""
        with pytest.raises(ValidationError) as exc_info:
            parse_filter(_nested(11), max_depth=10)

        assert exc_info.value.description == "Filter depth is higher than maximum allowed value 10"


class TestMailboxScope:
    """Test suite for store fetch narrowing."""

    def test_and_path_intersects(self) -> None:
        """Test inMailboxes constraints under AND narrow the scope."""
        node = parse_filter(
            {
                "operator": "AND",
                "conditions": [{"inMailboxes": ["a", "b"]}, {"inMailboxes": ["b", "c"]}],
            },
            max_depth=10,
        )

        assert mailbox_scope(node) == frozenset({"b"})

    def test_or_path_does_not_narrow(self) -> None:
        """Test that alternatives leave the scope open."""
        node = parse_filter(
            {"operator": "OR", "conditions": [{"inMailboxes": ["a"]}, {"isFlagged": True}]},
            max_depth=10,
        )

        assert mailbox_scope(node) is None
        assert mailbox_scope(None) is None
