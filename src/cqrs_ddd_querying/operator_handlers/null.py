"""Null-check handler: is_null, is_not_null."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..ast import ALWAYS_TRUE, NullCheck, PredicateNode
from ..operators import FilterOperator
from ..registry import OperatorHandler

if TYPE_CHECKING:
    from ..criteria import FilterCriterion
    from ..paths import ResolvedPath


class NullCheckHandler(OperatorHandler):
    @property
    def operators(self) -> frozenset[FilterOperator]:
        return frozenset({FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL})

    def _build(
        self,
        path: ResolvedPath | None,
        criterion: FilterCriterion,
    ) -> PredicateNode:
        if path is None:
            return ALWAYS_TRUE
        return NullCheck(path, is_null=criterion.operator is FilterOperator.IS_NULL)
