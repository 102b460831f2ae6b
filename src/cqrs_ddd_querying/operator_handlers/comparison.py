"""Ordering handler: gt, lt, ge, le."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..ast import ALWAYS_TRUE, Comparison, PredicateNode
from ..coercion import SemanticKind, coerce, semantic_kind
from ..exceptions import InvalidFilterError
from ..operators import FilterOperator
from ..registry import OperatorHandler

if TYPE_CHECKING:
    from ..criteria import FilterCriterion
    from ..paths import ResolvedPath


def is_orderable(tp: Any) -> bool:
    """``False`` for classes that inherit ``object``'s ``<``."""
    if not isinstance(tp, type) or tp is object:
        return True
    return getattr(tp, "__lt__", None) is not object.__lt__


class ComparisonHandler(OperatorHandler):
    """
    ``>``, ``<``, ``>=``, ``<=`` against a single literal.

    A property whose declared type has no ordering is rejected when the
    filter is built; a ``None`` on either side never matches.
    """

    @property
    def operators(self) -> frozenset[FilterOperator]:
        return frozenset(
            {
                FilterOperator.GT,
                FilterOperator.LT,
                FilterOperator.GE,
                FilterOperator.LE,
            }
        )

    def _build(
        self,
        path: ResolvedPath | None,
        criterion: FilterCriterion,
    ) -> PredicateNode:
        if path is None:
            return ALWAYS_TRUE
        value_type = path.value_type
        if semantic_kind(value_type) is not SemanticKind.ANY and not is_orderable(
            value_type
        ):
            raise InvalidFilterError(
                f"Operator '{criterion.operator.value}' requires an orderable "
                f"property; {value_type.__name__} has no ordering",
                path=criterion.path,
            )
        value = coerce(criterion.value, path.annotation)
        return Comparison(path, criterion.operator, value)
