"""Containment handler: contains, not_contains."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..ast import ALWAYS_TRUE, Containment, PredicateNode
from ..coercion import SemanticKind, coerce, element_type_of, semantic_kind
from ..operators import FilterOperator
from ..registry import OperatorHandler
from ..utils import to_text

if TYPE_CHECKING:
    from ..criteria import FilterCriterion
    from ..paths import ResolvedPath


def _is_collection_type(tp: Any) -> bool:
    return semantic_kind(tp) is SemanticKind.OTHER and element_type_of(tp) is not Any


class ContainmentHandler(OperatorHandler):
    """
    Substring test for strings, element membership for collections.

    For a collection property the literal is coerced to the element type.
    Any other property is compared through its string form.
    ``not_contains`` negates the whole test.
    """

    @property
    def operators(self) -> frozenset[FilterOperator]:
        return frozenset({FilterOperator.CONTAINS, FilterOperator.NOT_CONTAINS})

    def _build(
        self,
        path: ResolvedPath | None,
        criterion: FilterCriterion,
    ) -> PredicateNode:
        if path is None:
            return ALWAYS_TRUE
        literal = criterion.value
        value = literal
        if _is_collection_type(path.annotation):
            value = coerce(literal, element_type_of(path.annotation))
        text = "" if literal is None else to_text(literal)
        return Containment(
            path,
            value,
            text,
            negated=criterion.operator is FilterOperator.NOT_CONTAINS,
        )
