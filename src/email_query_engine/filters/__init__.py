"""Filter trees: parsing, predicate evaluation and combinators."""

from .evaluator import FilterEvaluator
from .nodes import Combinator, FilterNode, Operator, Predicate
from .parser import parse_filter
from .predicates import PredicateEvaluator
from .rules import Rule, RuleCondition, matching_rules, parse_rules

__all__ = [
    "Combinator",
    "FilterEvaluator",
    "FilterNode",
    "Operator",
    "Predicate",
    "PredicateEvaluator",
    "Rule",
    "RuleCondition",
    "matching_rules",
    "parse_filter",
    "parse_rules",
]
