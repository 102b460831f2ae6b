"""Membership handler: in, not_in."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..ast import ALWAYS_TRUE, Membership, PredicateNode
from ..coercion import coerce_many
from ..operators import FilterOperator
from ..registry import OperatorHandler

if TYPE_CHECKING:
    from ..criteria import FilterCriterion
    from ..paths import ResolvedPath


class MembershipHandler(OperatorHandler):
    """Every literal is coerced to the property type; the first failure propagates."""

    @property
    def operators(self) -> frozenset[FilterOperator]:
        return frozenset({FilterOperator.IN, FilterOperator.NOT_IN})

    def _build(
        self,
        path: ResolvedPath | None,
        criterion: FilterCriterion,
    ) -> PredicateNode:
        if path is None:
            return ALWAYS_TRUE
        values = coerce_many(criterion.values, path.annotation)
        return Membership(
            path,
            values,
            negated=criterion.operator is FilterOperator.NOT_IN,
        )
