"""
In-memory query engine.

:class:`QueryEngine` wires the path resolver, the filter compiler, the
sort engine and the pagination engine together behind one object.  The
module-level functions delegate to a shared default engine.

Every operation returns ``None`` for a ``None`` source, never mutates its
input and stays lazy where it can: filtering and offset windows are
generators; sorting and cursor windows produce lists.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from .cache import IMemoCache, InMemoryMemoCache
from .compiler import FilterCompiler
from .criteria import FilterGroup, PagingDescriptor, SortKey
from .exceptions import MissingArgumentError
from .pagination import CursorSelector, cursor_window, offset_window, page_number_window
from .paths import PropertyPathResolver
from .query_options import QueryOptions
from .registry import OperatorHandlerRegistry
from .sorting import apply_order
from .utils import peek_element_type

if TYPE_CHECKING:
    from .criteria import FilterNode

logger = logging.getLogger("cqrs_ddd.querying.engine")

T = TypeVar("T")


def _is_empty(filters: FilterNode | None) -> bool:
    return filters is None or (isinstance(filters, FilterGroup) and filters.is_empty)


class QueryEngine:
    """
    Filter, sort and page in-memory sequences.

    Args:
        registry: Operator handlers (defaults to the built-in set).
        resolver: Property path resolver; a default one sharing *cache*
            is created if omitted.
        cache: Memoization cache shared by path resolution and filter
            compilation.

    Usage::

        engine = QueryEngine()
        options = QueryOptions(
            filters=FilterCriterion("category", "eq", "Electronics"),
            sort=("-price",),
            paging=PagingDescriptor(limit=20),
        )
        page = list(engine.apply(products, options))
    """

    def __init__(
        self,
        registry: OperatorHandlerRegistry | None = None,
        resolver: PropertyPathResolver | None = None,
        cache: IMemoCache | None = None,
    ) -> None:
        self._cache = cache if cache is not None else InMemoryMemoCache()
        self._resolver = (
            resolver if resolver is not None else PropertyPathResolver(cache=self._cache)
        )
        self._compiler = FilterCompiler(
            registry=registry, resolver=self._resolver, cache=self._cache
        )

    @property
    def compiler(self) -> FilterCompiler:
        return self._compiler

    @property
    def resolver(self) -> PropertyPathResolver:
        return self._resolver

    # -- filtering -----------------------------------------------------------

    def filter(
        self,
        source: Iterable[T] | None,
        filters: FilterNode | None,
        element_type: Any = None,
    ) -> Iterable[T] | None:
        """
        Lazily keep the items of *source* matching *filters*.

        An empty or missing filter returns *source* itself.  Paths that do
        not resolve on the element type match everything.

        The filter is compiled before this method returns when the element
        type is given or *source* is a sequence; for other iterables the
        type is taken from the first item when iteration starts, and only
        type-independent errors are raised up front.
        """
        if source is None:
            return None
        if _is_empty(filters):
            return source
        if element_type is None and isinstance(source, Sequence):
            element_type = type(source[0]) if len(source) else object
        if element_type is not None:
            predicate = self._compiler.compile(element_type, filters)
            return (item for item in source if predicate(item))
        self._compiler.build_tree(object, filters)
        return self._filter_lazily(source, filters)

    def _filter_lazily(self, source: Iterable[T], filters: FilterNode | None) -> Iterator[T]:
        element_type, items = peek_element_type(source)
        if element_type is None:
            return
        predicate = self._compiler.compile(element_type, filters)
        for item in items:
            if predicate(item):
                yield item

    # -- sorting -------------------------------------------------------------

    def sort(
        self,
        source: Iterable[T] | None,
        sort_keys: Sequence[SortKey | str] | None,
        element_type: Any = None,
    ) -> Iterable[T] | None:
        """Stable multi-key sort; returns *source* when no key is usable."""
        if source is None:
            return None
        return apply_order(source, sort_keys, element_type, self._resolver)

    # -- paging --------------------------------------------------------------

    def page(
        self,
        source: Iterable[T] | None,
        paging: PagingDescriptor | None,
    ) -> Iterable[T] | None:
        """Offset window ``[offset, offset + limit)``; ``limit == 0`` is unbounded."""
        if source is None or paging is None:
            return source
        return offset_window(source, paging.offset, paging.limit)

    def page_by_number(
        self,
        source: Iterable[T] | None,
        page_number: int,
        page_size: int,
    ) -> Iterable[T] | None:
        """1-based page; ``page_size <= 0`` returns *source* unchanged."""
        if source is None:
            return None
        return page_number_window(source, page_number, page_size)

    def page_by_cursor(
        self,
        source: Iterable[T] | None,
        paging: PagingDescriptor | None,
        cursor: CursorSelector | None,
        *,
        element_type: Any = None,
        cursor_type: Any = None,
    ) -> Iterable[T] | None:
        """
        Cursor window over *source*; see
        :func:`~cqrs_ddd_querying.pagination.cursor_window`.

        Raises:
            MissingArgumentError: If *cursor* is ``None`` (checked first).
        """
        if cursor is None:
            raise MissingArgumentError("cursor", "A cursor selector is required")
        if source is None or paging is None:
            return source
        return cursor_window(
            source,
            paging,
            cursor,
            element_type=element_type,
            cursor_type=cursor_type,
            resolver=self._resolver,
        )

    # -- everything ----------------------------------------------------------

    def apply(
        self,
        source: Iterable[T] | None,
        options: QueryOptions | None,
        cursor: CursorSelector | None = None,
        *,
        element_type: Any = None,
        cursor_type: Any = None,
    ) -> Iterable[T] | None:
        """
        Filter, then sort, then page *source* according to *options*.

        With a *cursor* selector the paging descriptor is applied as a
        cursor window (which orders by the cursor itself); otherwise as an
        offset window.

        Raises:
            MissingArgumentError: If the paging descriptor carries
                ``before``/``after`` but no cursor selector is given.
        """
        if source is None:
            return None
        if options is None:
            return source
        paging = options.paging
        if paging is not None and paging.uses_cursor and cursor is None:
            raise MissingArgumentError(
                "cursor", "Cursor paging requires a cursor selector"
            )

        if element_type is None:
            element_type, source = peek_element_type(source)
            if element_type is None:
                return source

        result: Iterable[T] = source
        if not _is_empty(options.filters):
            predicate = self._compiler.compile(element_type, options.filters)
            result = (item for item in result if predicate(item))
        if options.sort:
            result = apply_order(result, options.sort, element_type, self._resolver)
        if paging is None:
            return result
        if cursor is not None:
            logger.debug("Applying cursor paging %s", paging.to_dict())
            return cursor_window(
                result,
                paging,
                cursor,
                element_type=element_type,
                cursor_type=cursor_type,
                resolver=self._resolver,
            )
        return offset_window(result, paging.offset, paging.limit)


# ---------------------------------------------------------------------------
# Module-level function family
# ---------------------------------------------------------------------------

_default_engine = QueryEngine()


def default_engine() -> QueryEngine:
    """The shared engine behind the module-level functions."""
    return _default_engine


def filter_items(
    source: Iterable[T] | None,
    filters: FilterNode | None,
    element_type: Any = None,
) -> Iterable[T] | None:
    return _default_engine.filter(source, filters, element_type)


def sort_items(
    source: Iterable[T] | None,
    sort_keys: Sequence[SortKey | str] | None,
    element_type: Any = None,
) -> Iterable[T] | None:
    return _default_engine.sort(source, sort_keys, element_type)


def page_items(
    source: Iterable[T] | None,
    paging: PagingDescriptor | None,
) -> Iterable[T] | None:
    return _default_engine.page(source, paging)


def page_items_by_number(
    source: Iterable[T] | None,
    page_number: int,
    page_size: int,
) -> Iterable[T] | None:
    return _default_engine.page_by_number(source, page_number, page_size)


def page_items_by_cursor(
    source: Iterable[T] | None,
    paging: PagingDescriptor | None,
    cursor: CursorSelector | None,
    *,
    element_type: Any = None,
    cursor_type: Any = None,
) -> Iterable[T] | None:
    return _default_engine.page_by_cursor(
        source, paging, cursor, element_type=element_type, cursor_type=cursor_type
    )


def apply_query(
    source: Iterable[T] | None,
    options: QueryOptions | None,
    cursor: CursorSelector | None = None,
    *,
    element_type: Any = None,
    cursor_type: Any = None,
) -> Iterable[T] | None:
    return _default_engine.apply(
        source, options, cursor, element_type=element_type, cursor_type=cursor_type
    )
