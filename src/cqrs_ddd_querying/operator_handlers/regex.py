"""Pattern-match handler: regex."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..ast import ALWAYS_TRUE, PatternMatch, PredicateNode
from ..exceptions import InvalidFilterError
from ..operators import FilterOperator
from ..registry import OperatorHandler
from ..utils import to_text

if TYPE_CHECKING:
    from ..criteria import FilterCriterion
    from ..paths import ResolvedPath


class RegexHandler(OperatorHandler):
    """
    ``re.search`` of the first literal over the property's string form.

    Case-sensitive.  No literal at all matches everything; a ``None``
    literal is the empty pattern.
    """

    @property
    def operators(self) -> frozenset[FilterOperator]:
        return frozenset({FilterOperator.REGEX})

    def _build(
        self,
        path: ResolvedPath | None,
        criterion: FilterCriterion,
    ) -> PredicateNode:
        if path is None or not criterion.values:
            return ALWAYS_TRUE
        literal = criterion.value
        source = "" if literal is None else to_text(literal)
        try:
            pattern = re.compile(source)
        except re.error as exc:
            raise InvalidFilterError(
                f"Invalid regular expression {source!r}: {exc}",
                path=criterion.path,
            ) from exc
        return PatternMatch(path, pattern)
