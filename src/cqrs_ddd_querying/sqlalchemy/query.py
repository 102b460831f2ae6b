"""
Apply query options to a SQLAlchemy ``Select`` statement.

``apply_query_options`` takes a ``Select`` statement and a
:class:`~cqrs_ddd_querying.query_options.QueryOptions` instance and applies
the filter tree, ordering and offset or cursor paging, mirroring
:meth:`QueryEngine.apply <cqrs_ddd_querying.engine.QueryEngine.apply>`.

Ordering and cursors only use columns of the selected model itself;
dotted paths are skipped because ordering across a relationship needs an
explicit join.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, asc, desc

from ..coercion import coerce
from ..criteria import FilterGroup, PagingDescriptor, SortKey, sort_keys_from
from ..exceptions import CoercionError, MissingArgumentError
from .compiler import DEFAULT_MAPPED_RESOLVER, build_sqla_filter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..criteria import FilterNode
    from ..paths import PropertyPathResolver, ResolvedPath
    from ..query_options import QueryOptions
    from ..registry import OperatorHandlerRegistry

logger = logging.getLogger("cqrs_ddd.querying.sqlalchemy")


def _own_column(
    model: type[Any],
    path: str,
    resolver: PropertyPathResolver,
) -> tuple[Any, ResolvedPath] | None:
    resolved = resolver.resolve(model, path)
    if resolved is None or len(resolved.segments) != 1:
        logger.debug("Skipping %r: not a column of %s", path, model.__name__)
        return None
    return getattr(model, resolved.segments[0]), resolved


def apply_filters(
    stmt: Select[Any],
    model: type[Any],
    filters: FilterNode | None,
    *,
    registry: OperatorHandlerRegistry | None = None,
    resolver: PropertyPathResolver | None = None,
) -> Select[Any]:
    """Add the compiled filter tree as a ``WHERE`` clause."""
    if filters is None or (isinstance(filters, FilterGroup) and filters.is_empty):
        return stmt
    return stmt.where(
        build_sqla_filter(model, filters, registry=registry, resolver=resolver)
    )


def apply_sort(
    stmt: Select[Any],
    model: type[Any],
    sort_keys: Iterable[SortKey | str] | None,
    *,
    resolver: PropertyPathResolver | None = None,
) -> Select[Any]:
    """
    Append ``ORDER BY`` clauses, primary key first.

    ``NULL`` sorts first ascending and last descending, as in memory.
    """
    if not sort_keys:
        return stmt
    resolver = resolver if resolver is not None else DEFAULT_MAPPED_RESOLVER
    order_clauses: list[Any] = []
    for sort_key in sort_keys_from(sort_keys):
        found = _own_column(model, sort_key.path, resolver)
        if found is None:
            continue
        column = found[0]
        if sort_key.descending:
            order_clauses.append(desc(column).nulls_last())
        else:
            order_clauses.append(asc(column).nulls_first())
    if order_clauses:
        return stmt.order_by(*order_clauses)
    return stmt


def apply_paging(stmt: Select[Any], paging: PagingDescriptor | None) -> Select[Any]:
    """Apply ``OFFSET``/``LIMIT``; a limit of ``0`` is unbounded."""
    if paging is None:
        return stmt
    if paging.offset > 0:
        stmt = stmt.offset(paging.offset)
    if paging.limit > 0:
        stmt = stmt.limit(paging.limit)
    return stmt


def _cursor_value(text: str | None, target_type: Any) -> Any:
    if text is None:
        return None
    try:
        return coerce(text, target_type)
    except CoercionError as exc:
        logger.debug("Discarding cursor %r: %s", text, exc)
        return None


def apply_cursor_paging(
    stmt: Select[Any],
    model: type[Any],
    paging: PagingDescriptor | None,
    cursor: str | None,
    *,
    resolver: PropertyPathResolver | None = None,
) -> Select[Any]:
    """
    Window a statement by a cursor column.

    - ``before``: ``WHERE cursor < :before ORDER BY cursor DESC``
    - otherwise ``after``: ``WHERE cursor > :after ORDER BY cursor ASC``
    - otherwise ``ORDER BY cursor ASC NULLS FIRST``

    each followed by ``LIMIT`` when one is set.  A cursor string that
    cannot be converted to the column type counts as absent.

    Raises:
        MissingArgumentError: If *cursor* is ``None``.
    """
    if cursor is None:
        raise MissingArgumentError("cursor", "A cursor column is required")
    if paging is None:
        return stmt
    resolver = resolver if resolver is not None else DEFAULT_MAPPED_RESOLVER

    found = _own_column(model, cursor, resolver)
    if found is None:
        return stmt.limit(paging.limit) if paging.limit > 0 else stmt
    column, resolved = found

    before = _cursor_value(paging.before, resolved.annotation)
    after = _cursor_value(paging.after, resolved.annotation)
    if before is not None:
        stmt = stmt.where(column < before).order_by(desc(column))
    elif after is not None:
        stmt = stmt.where(column > after).order_by(asc(column))
    else:
        stmt = stmt.order_by(asc(column).nulls_first())
    if paging.limit > 0:
        stmt = stmt.limit(paging.limit)
    return stmt


def apply_query_options(
    stmt: Select[Any],
    model: type[Any],
    options: QueryOptions | None,
    cursor: str | None = None,
    *,
    registry: OperatorHandlerRegistry | None = None,
    resolver: PropertyPathResolver | None = None,
) -> Select[Any]:
    """
    Apply a ``QueryOptions`` instance to a SQLAlchemy ``Select`` statement.

    With a *cursor* column the paging descriptor is applied as a cursor
    window and the sort keys only break ties; otherwise sort keys order
    the rows and paging is ``OFFSET``/``LIMIT``.

    Args:
        stmt: The base ``Select`` statement.
        model: The mapped class (used for path resolution).
        options: Filters, sort keys and paging.
        cursor: Name of the cursor column, for cursor paging.

    Raises:
        MissingArgumentError: If the paging descriptor carries
            ``before``/``after`` but no cursor column is given.
    """
    if options is None:
        return stmt
    paging = options.paging
    if paging is not None and paging.uses_cursor and cursor is None:
        raise MissingArgumentError("cursor", "Cursor paging requires a cursor column")

    stmt = apply_filters(
        stmt, model, options.filters, registry=registry, resolver=resolver
    )
    if cursor is not None and paging is not None:
        stmt = apply_cursor_paging(stmt, model, paging, cursor, resolver=resolver)
        return apply_sort(stmt, model, options.sort, resolver=resolver)
    stmt = apply_sort(stmt, model, options.sort, resolver=resolver)
    return apply_paging(stmt, paging)
