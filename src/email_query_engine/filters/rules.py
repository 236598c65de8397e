"""Rule-based header conditions.

Filtering rules attach a single header condition with an explicit
comparator. Evaluation goes through the same header predicate used by
query filters; the comparator selects the matching mode.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from email_query_engine.exceptions import ValidationError
from email_query_engine.filters.nodes import Comparator, HeaderField, HeaderFieldMatch
from email_query_engine.filters.predicates import match_header_field
from email_query_engine.models import MessageView
from email_query_engine.validation import describe_validation_error

logger = structlog.get_logger()


class RuleCondition(BaseModel):
    """Header condition of a filtering rule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: HeaderField
    comparator: Comparator
    value: str

    def to_predicate(self) -> HeaderFieldMatch:
        return HeaderFieldMatch(field=self.field, value=self.value, comparator=self.comparator)

    def matches(self, message: MessageView) -> bool:
        return match_header_field(self.to_predicate(), message)


class Rule(BaseModel):
    """A named filtering rule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(description="Rule identifier")
    name: str = Field(description="Human readable rule name")
    condition: RuleCondition = Field(description="Condition a message must satisfy")


def parse_rules(raw: Any) -> list[Rule]:
    """Validate a list of wire rules.

    Raises:
        ValidationError: If any rule is malformed.
    """
    if not isinstance(raw, list):
        raise ValidationError("Rules must be a list")
    try:
        return [Rule.model_validate(item) for item in raw]
    except PydanticValidationError as exc:
        raise ValidationError(describe_validation_error(exc)) from exc


def matching_rules(rules: Iterable[Rule], message: MessageView) -> list[Rule]:
    """Return the rules matching a message, in declaration order."""
    matched = [rule for rule in rules if rule.condition.matches(message)]
    logger.debug("rules_evaluated", message_id=message.id, matched=[r.id for r in matched])
    return matched
