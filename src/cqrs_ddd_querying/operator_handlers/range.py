"""Range handler: between, not_between (exclusive bounds)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..ast import ALWAYS_FALSE, ALWAYS_TRUE, PredicateNode, Range
from ..coercion import coerce
from ..exceptions import UnsupportedOperationError
from ..operators import FilterOperator
from ..registry import OperatorHandler

if TYPE_CHECKING:
    from ..criteria import FilterCriterion
    from ..paths import ResolvedPath


class RangeHandler(OperatorHandler):
    """
    ``between`` matches ``low < v < high``; ``not_between`` matches
    ``v < low or v > high``.

    Fewer than two literals yields a predicate that never matches.  A
    ``None`` literal is rejected before the path is even considered.
    """

    @property
    def operators(self) -> frozenset[FilterOperator]:
        return frozenset({FilterOperator.BETWEEN, FilterOperator.NOT_BETWEEN})

    def _build(
        self,
        path: ResolvedPath | None,
        criterion: FilterCriterion,
    ) -> PredicateNode:
        if len(criterion.values) < 2:
            return ALWAYS_FALSE
        if any(value is None for value in criterion.values):
            raise UnsupportedOperationError(
                criterion.operator,
                f"Both bounds must be non-null for '{criterion.operator.value}'",
            )
        if path is None:
            return ALWAYS_TRUE
        low = coerce(criterion.values[0], path.annotation)
        high = coerce(criterion.values[1], path.annotation)
        return Range(
            path,
            low,
            high,
            negated=criterion.operator is FilterOperator.NOT_BETWEEN,
        )
