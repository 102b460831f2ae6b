"""String pattern handler: startswith, endswith."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..ast import ALWAYS_TRUE, PredicateNode, StringMatch
from ..operators import FilterOperator
from ..registry import OperatorHandler
from ..utils import to_text

if TYPE_CHECKING:
    from ..criteria import FilterCriterion
    from ..paths import ResolvedPath


class StringPatternHandler(OperatorHandler):
    """
    Case-insensitive prefix / suffix tests.

    Non-string properties are compared through their string form; a
    ``None`` literal is the empty string.
    """

    @property
    def operators(self) -> frozenset[FilterOperator]:
        return frozenset({FilterOperator.STARTSWITH, FilterOperator.ENDSWITH})

    def _build(
        self,
        path: ResolvedPath | None,
        criterion: FilterCriterion,
    ) -> PredicateNode:
        if path is None:
            return ALWAYS_TRUE
        literal = criterion.value
        text = "" if literal is None else to_text(literal)
        return StringMatch(path, criterion.operator, text)
