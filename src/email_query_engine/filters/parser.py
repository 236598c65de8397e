"""Parse wire filters into filter trees.

Accepts the getMessageList filter shape: either a condition object whose
keys are ANDed together, or an operator object
``{"operator": "AND"|"OR"|"NOT", "conditions": [...]}``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from email_query_engine.exceptions import ValidationError
from email_query_engine.filters.nodes import (
    AttachmentFileNameSearch,
    Combinator,
    FilterNode,
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
    Operator,
    Predicate,
    SearchScope,
    SentAfter,
    SentBefore,
    StateFlag,
    TextSearch,
)
from email_query_engine.validation import (
    JsonBool,
    UnsignedNumber,
    describe_validation_error,
    validate_keyword,
)

logger = structlog.get_logger()


class FilterConditionModel(BaseModel):
    """Wire form of a filter condition."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    in_mailboxes: list[str] | None = Field(default=None, alias="inMailboxes")
    not_in_mailboxes: list[str] | None = Field(default=None, alias="notInMailboxes")
    before: datetime | None = None
    after: datetime | None = None
    min_size: UnsignedNumber | None = Field(default=None, alias="minSize")
    max_size: UnsignedNumber | None = Field(default=None, alias="maxSize")
    is_flagged: JsonBool | None = Field(default=None, alias="isFlagged")
    is_unread: JsonBool | None = Field(default=None, alias="isUnread")
    is_answered: JsonBool | None = Field(default=None, alias="isAnswered")
    is_draft: JsonBool | None = Field(default=None, alias="isDraft")
    is_forwarded: JsonBool | None = Field(default=None, alias="isForwarded")
    has_attachment: JsonBool | None = Field(default=None, alias="hasAttachment")
    text: str | None = None
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    cc: str | None = None
    bcc: str | None = None
    subject: str | None = None
    body: str | None = None
    attachments: str | None = None
    attachment_file_name: str | None = Field(default=None, alias="attachmentFileName")
    header: list[str] | None = None
    has_keyword: str | None = Field(default=None, alias="hasKeyword")
    not_keyword: str | None = Field(default=None, alias="notKeyword")

    @field_validator("header")
    @classmethod
    def _header_is_name_value_pair(cls, value: list[str] | None) -> list[str] | None:
        if value is not None and len(value) != 2:
            raise ValueError("'header' must contain exactly a header name and a value")
        return value

    @field_validator("has_keyword", "not_keyword")
    @classmethod
    def _keyword_is_valid(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return validate_keyword(value)


class FilterOperatorModel(BaseModel):
    """Wire form of a filter operator."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    operator: Operator
    conditions: list[Any] = Field(min_length=1)


def parse_filter(raw: Any, *, max_depth: int) -> FilterNode:
    """Parse and validate a wire filter.

    Args:
        raw: Decoded JSON filter.
        max_depth: Maximum number of nested operators.

    Returns:
        The filter tree.

    Raises:
        ValidationError: If the filter is malformed or nested too deeply.
    """
    return _parse(raw, depth=0, max_depth=max_depth)


def _parse(raw: Any, *, depth: int, max_depth: int) -> FilterNode:
    if not isinstance(raw, dict):
        raise ValidationError(f"A filter must be an object, got {type(raw).__name__}")

    if "operator" in raw:
        if depth >= max_depth:
            raise ValidationError(f"Filter depth is higher than maximum allowed value {max_depth}")
        try:
            operator = FilterOperatorModel.model_validate(raw)
        except PydanticValidationError as exc:
            raise ValidationError(describe_validation_error(exc)) from exc
        children = tuple(
            _parse(child, depth=depth + 1, max_depth=max_depth) for child in operator.conditions
        )
        return Combinator(operator=operator.operator, children=children)

    try:
        condition = FilterConditionModel.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(describe_validation_error(exc)) from exc
    return condition_to_node(condition)


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def condition_to_node(condition: FilterConditionModel) -> FilterNode:
    """Turn one condition object into an AND of its predicates."""
    leaves: list[Predicate] = []

    if condition.in_mailboxes is not None:
        leaves.append(MailboxIn(frozenset(condition.in_mailboxes)))
    if condition.not_in_mailboxes is not None:
        leaves.append(MailboxNotIn(frozenset(condition.not_in_mailboxes)))
    if condition.before is not None:
        leaves.append(SentBefore(_utc(condition.before)))
    if condition.after is not None:
        leaves.append(SentAfter(_utc(condition.after)))
    if condition.min_size is not None:
        leaves.append(MinSize(condition.min_size))
    if condition.max_size is not None:
        leaves.append(MaxSize(condition.max_size))

    flags = (
        (MessageFlag.FLAGGED, condition.is_flagged),
        (MessageFlag.UNREAD, condition.is_unread),
        (MessageFlag.ANSWERED, condition.is_answered),
        (MessageFlag.DRAFT, condition.is_draft),
        (MessageFlag.FORWARDED, condition.is_forwarded),
    )
    leaves.extend(StateFlag(flag, value) for flag, value in flags if value is not None)

    if condition.has_attachment is not None:
        leaves.append(HasAttachment(condition.has_attachment))
    if condition.text is not None:
        leaves.append(TextSearch(condition.text, SearchScope.TEXT))

    fields = (
        (HeaderField.FROM, condition.from_),
        (HeaderField.TO, condition.to),
        (HeaderField.CC, condition.cc),
        (HeaderField.BCC, condition.bcc),
        (HeaderField.SUBJECT, condition.subject),
    )
    leaves.extend(HeaderFieldMatch(field, value) for field, value in fields if value is not None)

    if condition.body is not None:
        leaves.append(TextSearch(condition.body, SearchScope.BODY))
    if condition.attachments is not None:
        leaves.append(TextSearch(condition.attachments, SearchScope.ATTACHMENTS))
    if condition.attachment_file_name is not None:
        leaves.append(AttachmentFileNameSearch(condition.attachment_file_name))
    if condition.header is not None:
        name, value = condition.header
        leaves.append(HeaderContains(name, value))
    if condition.has_keyword is not None:
        leaves.append(HasKeyword(condition.has_keyword))
    if condition.not_keyword is not None:
        leaves.append(NotKeyword(condition.not_keyword))

    if not leaves:
        return MatchAll()
    if len(leaves) == 1:
        return leaves[0]
    logger.debug("filter_condition_expanded", predicates=len(leaves))
    return Combinator(operator=Operator.AND, children=tuple(leaves))
