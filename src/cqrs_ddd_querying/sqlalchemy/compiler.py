"""
Lower the predicate IR into a SQLAlchemy filter expression.

The same filter tree that drives in-memory evaluation is compiled here
into a ``ColumnElement[bool]`` for a mapped model.  Dotted paths cross
relationships with ``has()`` (many-to-one) or ``any()`` (collections).

``None`` semantics follow the in-memory evaluator: a missing value
satisfies ``ne``, ``not_in``, ``not_contains`` and ``is_null``, and never
satisfies an ordering comparison.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import ColumnElement, String, and_, false, not_, or_, true
from sqlalchemy import cast as sql_cast

from ..ast import (
    Comparison,
    Composite,
    Constant,
    Containment,
    Membership,
    NullCheck,
    PatternMatch,
    PredicateVisitor,
    Range,
    StringMatch,
)
from ..compiler import FilterCompiler
from ..operators import Conjunction, FilterOperator
from ..paths import PropertyPathResolver
from ..schema import default_schema_providers
from .schema import MappedClassSchemaProvider, column_python_type

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..criteria import FilterNode
    from ..paths import ResolvedPath
    from ..registry import OperatorHandlerRegistry

logger = logging.getLogger("cqrs_ddd.querying.sqlalchemy")

ColumnBuilder = Callable[[Any], "ColumnElement[bool]"]


def mapped_resolver() -> PropertyPathResolver:
    """A path resolver that understands mapped classes first."""
    return PropertyPathResolver(
        providers=[MappedClassSchemaProvider(), *default_schema_providers()]
    )


DEFAULT_MAPPED_RESOLVER = mapped_resolver()


def _as_text(column: Any) -> Any:
    """The column itself for string columns, otherwise a ``CAST(... AS VARCHAR)``."""
    if column_python_type(column) is str:
        return column
    return sql_cast(column, String)


class SQLAlchemyPredicateBuilder(PredicateVisitor[ColumnElement[bool]]):
    """
    Lowers IR nodes built for *model* into SQL expressions.

    Usage::

        node = FilterCompiler(resolver=mapped_resolver()).build_tree(Product, group)
        clause = SQLAlchemyPredicateBuilder(Product).lower(node)
        stmt = select(Product).where(clause)
    """

    def __init__(self, model: type[Any]) -> None:
        self._model = model

    # ------------------------------------------------------------------ #
    # Path traversal                                                      #
    # ------------------------------------------------------------------ #

    def _on_path(
        self,
        path: ResolvedPath,
        build: ColumnBuilder,
        *,
        matches_missing: bool = False,
    ) -> ColumnElement[bool]:
        """
        Apply *build* to the column at the end of *path*.

        With *matches_missing*, rows whose many-to-one chain is broken
        (a ``NULL`` relationship) also satisfy the predicate.
        """
        return self._walk(self._model, path.segments, build, matches_missing)

    def _walk(
        self,
        model: type[Any],
        segments: Sequence[str],
        build: ColumnBuilder,
        matches_missing: bool,
    ) -> ColumnElement[bool]:
        head, rest = segments[0], segments[1:]
        attr = getattr(model, head)
        if not rest:
            return build(attr)

        relationship = attr.property
        inner = self._walk(relationship.mapper.class_, rest, build, matches_missing)
        if relationship.uselist:
            return cast("ColumnElement[bool]", attr.any(inner))
        clause = cast("ColumnElement[bool]", attr.has(inner))
        if matches_missing:
            return or_(not_(attr.has()), clause)
        return clause

    # ------------------------------------------------------------------ #
    # Visitors                                                            #
    # ------------------------------------------------------------------ #

    def visit_constant(self, node: Constant) -> ColumnElement[bool]:
        return true() if node.value else false()

    def visit_comparison(self, node: Comparison) -> ColumnElement[bool]:
        op, value = node.operator, node.value
        if op is FilterOperator.EQ:
            if value is None:
                return self._on_path(
                    node.path, lambda col: col.is_(None), matches_missing=True
                )
            return self._on_path(node.path, lambda col: col == value)
        if op is FilterOperator.NE:
            if value is None:
                return self._on_path(node.path, lambda col: col.is_not(None))
            return self._on_path(
                node.path,
                lambda col: or_(col != value, col.is_(None)),
                matches_missing=True,
            )
        if value is None:
            return false()
        if op is FilterOperator.GT:
            return self._on_path(node.path, lambda col: col > value)
        if op is FilterOperator.LT:
            return self._on_path(node.path, lambda col: col < value)
        if op is FilterOperator.GE:
            return self._on_path(node.path, lambda col: col >= value)
        return self._on_path(node.path, lambda col: col <= value)

    def visit_range(self, node: Range) -> ColumnElement[bool]:
        low, high = node.low, node.high
        if node.negated:
            return self._on_path(node.path, lambda col: or_(col < low, col > high))
        return self._on_path(node.path, lambda col: and_(col > low, col < high))

    def visit_membership(self, node: Membership) -> ColumnElement[bool]:
        values = [value for value in node.values if value is not None]
        has_null = len(values) != len(node.values)

        if node.negated:
            if has_null:
                return self._on_path(
                    node.path, lambda col: and_(col.not_in(values), col.is_not(None))
                )
            return self._on_path(
                node.path,
                lambda col: or_(col.not_in(values), col.is_(None)),
                matches_missing=True,
            )
        if has_null:
            return self._on_path(
                node.path,
                lambda col: or_(col.in_(values), col.is_(None)),
                matches_missing=True,
            )
        return self._on_path(node.path, lambda col: col.in_(values))

    def visit_string_match(self, node: StringMatch) -> ColumnElement[bool]:
        text = node.text
        if node.operator is FilterOperator.STARTSWITH:
            return self._on_path(
                node.path, lambda col: _as_text(col).istartswith(text, autoescape=True)
            )
        return self._on_path(
            node.path, lambda col: _as_text(col).iendswith(text, autoescape=True)
        )

    def visit_containment(self, node: Containment) -> ColumnElement[bool]:
        text = node.text

        def contains(col: Any) -> ColumnElement[bool]:
            return cast(
                "ColumnElement[bool]", _as_text(col).icontains(text, autoescape=True)
            )

        if node.negated:
            return self._on_path(
                node.path,
                lambda col: or_(col.is_(None), not_(contains(col))),
                matches_missing=True,
            )
        return self._on_path(node.path, contains)

    def visit_null_check(self, node: NullCheck) -> ColumnElement[bool]:
        if node.is_null:
            return self._on_path(
                node.path, lambda col: col.is_(None), matches_missing=True
            )
        return self._on_path(node.path, lambda col: col.is_not(None))

    def visit_pattern_match(self, node: PatternMatch) -> ColumnElement[bool]:
        pattern = node.pattern.pattern
        return self._on_path(node.path, lambda col: _as_text(col).regexp_match(pattern))

    def visit_composite(self, node: Composite) -> ColumnElement[bool]:
        if not node.children:
            return true()
        clauses = [self.lower(child) for child in node.children]
        if len(clauses) == 1:
            return clauses[0]
        if node.conjunction is Conjunction.OR:
            return or_(*clauses)
        return and_(*clauses)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_sqla_filter(
    model: type[Any],
    filters: FilterNode | None,
    *,
    registry: OperatorHandlerRegistry | None = None,
    resolver: PropertyPathResolver | None = None,
) -> ColumnElement[bool]:
    """
    Compile a filter tree into a SQLAlchemy boolean expression for *model*.

    Paths are resolved and literals coerced exactly as for in-memory
    evaluation; paths that do not resolve on *model* match every row.

    Args:
        model: The mapped class the statement selects.
        filters: A ``FilterCriterion`` or ``FilterGroup`` (``None`` = all rows).
        registry: Optional operator handler registry.
        resolver: Optional path resolver; defaults to one that knows
            mapped classes.

    Raises:
        InvalidFilterError / UnsupportedOperationError / CoercionError:
            Exactly as for in-memory compilation.
    """
    compiler = FilterCompiler(
        registry=registry,
        resolver=resolver if resolver is not None else DEFAULT_MAPPED_RESOLVER,
    )
    node = compiler.build_tree(model, filters)
    logger.debug("Lowering %s filter for %s", type(node).__name__, model.__name__)
    return SQLAlchemyPredicateBuilder(model).lower(node)
