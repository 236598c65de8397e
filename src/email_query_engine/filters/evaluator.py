"""Recursive filter tree evaluation."""

from __future__ import annotations

from email_query_engine.filters.nodes import Combinator, FilterNode, Operator, requires_text_index
from email_query_engine.filters.predicates import PredicateEvaluator
from email_query_engine.models import Candidate


class FilterEvaluator:
    """Combines predicate results through AND/OR/NOT nodes.

    NOT is true when none of its children is true, so ``NOT[a, b]`` selects
    the messages matching neither condition. Children that can be answered
    in memory are evaluated before children needing the text index, which
    only changes how many index lookups happen, never the result.
    """

    def __init__(self, predicates: PredicateEvaluator) -> None:
        self._predicates = predicates

    async def evaluate(self, node: FilterNode | None, candidate: Candidate) -> bool:
        if node is None:
            return True
        if not isinstance(node, Combinator):
            return await self._predicates.matches(node, candidate)

        children = sorted(node.children, key=requires_text_index)

        if node.operator is Operator.AND:
            for child in children:
                if not await self.evaluate(child, candidate):
                    return False
            return True

        matched_any = False
        for child in children:
            if await self.evaluate(child, candidate):
                matched_any = True
                break

        if node.operator is Operator.OR:
            return matched_any
        return not matched_any
