"""Filter tree node types.

A filter is parsed once into these immutable variants; evaluation never
looks at raw request data. Leaves are predicates, inner nodes are
combinators over a non-empty ordered list of children.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union


class Operator(str, Enum):
    """Boolean combinator operators."""

    AND = "AND"
    OR = "OR"
    NOT = "NOT"


class HeaderField(str, Enum):
    """Address and subject fields a header predicate can target."""

    FROM = "from"
    TO = "to"
    CC = "cc"
    BCC = "bcc"
    SUBJECT = "subject"
    # To and Cc together; only used by rule conditions.
    RECIPIENT = "recipient"


class Comparator(str, Enum):
    """Text comparison used by rule conditions."""

    CONTAINS = "contains"
    NOT_CONTAINS = "not-contains"
    EXACTLY_EQUALS = "exactly-equals"
    NOT_EXACTLY_EQUALS = "not-exactly-equals"


class SearchScope(str, Enum):
    """Which indexed content a text search looks at."""

    TEXT = "text"
    BODY = "body"
    ATTACHMENTS = "attachments"


class MessageFlag(str, Enum):
    """Boolean message states exposed as filter conditions."""

    UNREAD = "isUnread"
    FLAGGED = "isFlagged"
    ANSWERED = "isAnswered"
    DRAFT = "isDraft"
    FORWARDED = "isForwarded"


@dataclass(frozen=True)
class MatchAll:
    """Unconstrained predicate."""


@dataclass(frozen=True)
class MailboxIn:
    mailbox_ids: frozenset[str]


@dataclass(frozen=True)
class MailboxNotIn:
    mailbox_ids: frozenset[str]


@dataclass(frozen=True)
class HeaderFieldMatch:
    """Match on from/to/cc/bcc/subject.

    Without a comparator this is the query-filter form: case-insensitive
    substring match on the raw header.
    """

    field: HeaderField
    value: str
    comparator: Comparator | None = None


@dataclass(frozen=True)
class TextSearch:
    term: str
    scope: SearchScope = SearchScope.TEXT


@dataclass(frozen=True)
class AttachmentFileNameSearch:
    term: str


@dataclass(frozen=True)
class HasAttachment:
    value: bool


@dataclass(frozen=True)
class StateFlag:
    flag: MessageFlag
    value: bool


@dataclass(frozen=True)
class HasKeyword:
    keyword: str


@dataclass(frozen=True)
class NotKeyword:
    keyword: str


@dataclass(frozen=True)
class HeaderContains:
    name: str
    value: str


@dataclass(frozen=True)
class SentBefore:
    instant: datetime


@dataclass(frozen=True)
class SentAfter:
    instant: datetime


@dataclass(frozen=True)
class MinSize:
    size: int


@dataclass(frozen=True)
class MaxSize:
    size: int


Predicate = Union[
    MatchAll,
    MailboxIn,
    MailboxNotIn,
    HeaderFieldMatch,
    TextSearch,
    AttachmentFileNameSearch,
    HasAttachment,
    StateFlag,
    HasKeyword,
    NotKeyword,
    HeaderContains,
    SentBefore,
    SentAfter,
    MinSize,
    MaxSize,
]


@dataclass(frozen=True)
class Combinator:
    operator: Operator
    children: tuple["FilterNode", ...]

    def __post_init__(self) -> None:
        if not self.children:
            raise ValueError(f"{self.operator.value} requires at least one condition")


FilterNode = Union[Predicate, Combinator]


def operator_depth(node: FilterNode) -> int:
    """Number of nested combinators on the deepest path."""
    if isinstance(node, Combinator):
        return 1 + max(operator_depth(child) for child in node.children)
    return 0


def mailbox_scope(node: FilterNode | None) -> frozenset[str] | None:
    """Mailboxes every match must belong to, or None when unconstrained.

    Only inMailboxes constraints reachable through AND nodes narrow the
    scope; anything under OR/NOT is left to regular evaluation. Membership
    conditions are accepted at any depth, whereas some getMessageList
    servers reject them inside operators.
    """
    if isinstance(node, MailboxIn):
        return node.mailbox_ids
    if isinstance(node, Combinator) and node.operator is Operator.AND:
        scope: frozenset[str] | None = None
        for child in node.children:
            child_scope = mailbox_scope(child)
            if child_scope is not None:
                scope = child_scope if scope is None else scope & child_scope
        return scope
    return None


def requires_text_index(node: FilterNode) -> bool:
    """Whether evaluating the node may call the text index."""
    if isinstance(node, Combinator):
        return any(requires_text_index(child) for child in node.children)
    return isinstance(node, TextSearch)
