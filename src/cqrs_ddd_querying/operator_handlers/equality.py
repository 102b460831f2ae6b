"""Equality handler: eq, ne."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..ast import ALWAYS_TRUE, Comparison, PredicateNode
from ..coercion import coerce
from ..operators import FilterOperator
from ..registry import OperatorHandler

if TYPE_CHECKING:
    from ..criteria import FilterCriterion
    from ..paths import ResolvedPath


class EqualityHandler(OperatorHandler):
    """``eq`` / ``ne`` against a single literal; a ``None`` literal is allowed."""

    @property
    def operators(self) -> frozenset[FilterOperator]:
        return frozenset({FilterOperator.EQ, FilterOperator.NE})

    def _build(
        self,
        path: ResolvedPath | None,
        criterion: FilterCriterion,
    ) -> PredicateNode:
        if path is None:
            return ALWAYS_TRUE
        value = coerce(criterion.value, path.annotation)
        return Comparison(path, criterion.operator, value)
