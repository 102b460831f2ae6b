"""
Offset, page-number and cursor windowing of in-memory sequences.

Offset windows are lazy.  Cursor windows order by the cursor value and
therefore consume their input once.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any, NamedTuple

from .coercion import SemanticKind, coerce, semantic_kind
from .criteria import PagingDescriptor
from .exceptions import CoercionError, MissingArgumentError
from .paths import PropertyPathResolver
from .utils import peek_element_type, to_text

logger = logging.getLogger("cqrs_ddd.querying.pagination")

CursorSelector = str | Callable[[Any], Any]


class CursorPage(NamedTuple):
    """Cursor strings bracketing a page, for follow-up requests."""

    before: str | None
    after: str | None


# ---------------------------------------------------------------------------
# Offset / page number
# ---------------------------------------------------------------------------


def offset_window(source: Iterable[Any], offset: int = 0, limit: int = 0) -> Iterator[Any]:
    """
    Lazily yield items ``[offset, offset + limit)``.

    ``limit == 0`` is unbounded.  Consecutive windows at ``0, L, 2L, ...``
    partition the sequence.
    """
    stop = None if limit <= 0 else max(offset, 0) + limit
    return itertools.islice(source, max(offset, 0), stop)


def page_number_window(
    source: Iterable[Any],
    page_number: int,
    page_size: int,
) -> Iterable[Any]:
    """
    1-based page of *source*.

    ``page_number <= 0`` is treated as the first page; ``page_size <= 0``
    returns *source* unchanged.
    """
    if page_size <= 0:
        return source
    page_number = max(page_number, 1)
    return offset_window(source, (page_number - 1) * page_size, page_size)


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------


def _cursor_getter(
    selector: CursorSelector,
    element_type: Any,
    cursor_type: Any,
    resolver: PropertyPathResolver,
) -> tuple[Callable[[Any], Any], Any] | None:
    if callable(selector):
        return selector, cursor_type if cursor_type is not None else Any
    path = resolver.resolve(element_type, selector)
    if path is None:
        return None
    return path, cursor_type if cursor_type is not None else path.annotation


def _parse_cursor(text: str | None, cursor_type: Any) -> Any:
    if text is None:
        return None
    try:
        return coerce(text, cursor_type)
    except CoercionError as exc:
        logger.debug("Discarding cursor %r: %s", text, exc)
        return None


def _runtime_cursor_type(values: Iterable[Any]) -> Any:
    for value in values:
        if value is not None:
            return type(value)
    return str


def cursor_window(
    source: Iterable[Any],
    paging: PagingDescriptor,
    cursor: CursorSelector | None,
    *,
    element_type: Any = None,
    cursor_type: Any = None,
    resolver: PropertyPathResolver | None = None,
) -> list[Any]:
    """
    Window *source* by a cursor value.

    - ``before`` set: items whose cursor is ``< before``, descending, the
      ``limit`` closest to the cursor;
    - otherwise ``after`` set: items whose cursor is ``> after``,
      ascending, the first ``limit``;
    - otherwise: ascending by cursor (``None`` first), the first ``limit``.

    A cursor string that cannot be converted to the cursor type counts as
    absent.  Items whose cursor value is ``None`` never satisfy a
    before/after bound.

    Args:
        cursor: Dotted path of the cursor property, or a callable
            returning the cursor value of an item.
        cursor_type: Type cursor strings are converted to.  Defaults to the
            resolved property's type for paths; for callables (and untyped
            properties) the type of the first non-``None`` cursor value,
            or ``str`` when there is none.

    Raises:
        MissingArgumentError: If *cursor* is ``None``.
    """
    if cursor is None:
        raise MissingArgumentError("cursor", "A cursor selector is required")
    limit = paging.effective_limit

    if element_type is None and not callable(cursor):
        element_type, source = peek_element_type(source)
        if element_type is None:
            return []

    resolver = resolver if resolver is not None else PropertyPathResolver()
    selected = _cursor_getter(cursor, element_type, cursor_type, resolver)
    if selected is None:
        logger.debug("Cursor path %r is not resolvable; windowing by limit only", cursor)
        return list(offset_window(source, 0, paging.limit))
    getter, target_type = selected

    keyed = [(getter(item), index, item) for index, item in enumerate(source)]
    if semantic_kind(target_type) is SemanticKind.ANY:
        target_type = _runtime_cursor_type(value for value, _, _ in keyed)

    before = _parse_cursor(paging.before, target_type)
    if before is not None:
        logger.debug("Cursor paging before %r (limit=%s)", before, limit)
        candidates = [entry for entry in keyed if entry[0] is not None and entry[0] < before]
        if limit is None:
            chosen = sorted(candidates, key=_descending_key)
        else:
            chosen = heapq.nsmallest(limit, candidates, key=_descending_key)
        return [item for _, _, item in chosen]

    after = _parse_cursor(paging.after, target_type)
    if after is not None:
        logger.debug("Cursor paging after %r (limit=%s)", after, limit)
        candidates = [entry for entry in keyed if entry[0] is not None and entry[0] > after]
        if limit is None:
            chosen = sorted(candidates, key=_ascending_key)
        else:
            chosen = heapq.nsmallest(limit, candidates, key=_ascending_key)
        return [item for _, _, item in chosen]

    logger.debug("Cursor paging from the start (limit=%s)", limit)
    if limit is None:
        chosen = sorted(keyed, key=_nulls_first_key)
    else:
        chosen = heapq.nsmallest(limit, keyed, key=_nulls_first_key)
    return [item for _, _, item in chosen]


class _Reversed:
    """Inverts the ordering of a wrapped value."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def __lt__(self, other: _Reversed) -> bool:
        return bool(other.value < self.value)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Reversed) and bool(self.value == other.value)


def _ascending_key(entry: tuple[Any, int, Any]) -> tuple[Any, int]:
    return entry[0], entry[1]


def _descending_key(entry: tuple[Any, int, Any]) -> tuple[Any, int]:
    return _Reversed(entry[0]), entry[1]


def _nulls_first_key(entry: tuple[Any, int, Any]) -> tuple[Any, ...]:
    value, index = entry[0], entry[1]
    return (0, index) if value is None else (1, value, index)


def next_cursors(
    items: Iterable[Any],
    cursor: CursorSelector,
    *,
    element_type: Any = None,
    resolver: PropertyPathResolver | None = None,
) -> CursorPage:
    """
    Cursor strings for the pages adjacent to *items*.

    ``before`` is the smallest cursor value on the page and ``after`` the
    largest, so ``before=page.before`` fetches earlier items and
    ``after=page.after`` later ones, whatever order the page is in.
    """
    if cursor is None:
        raise MissingArgumentError("cursor", "A cursor selector is required")
    if callable(cursor):
        getter: Callable[[Any], Any] = cursor
    else:
        if element_type is None:
            element_type, items = peek_element_type(items)
            if element_type is None:
                return CursorPage(None, None)
        resolver = resolver if resolver is not None else PropertyPathResolver()
        path = resolver.resolve(element_type, cursor)
        if path is None:
            return CursorPage(None, None)
        getter = path
    values = [value for value in (getter(item) for item in items) if value is not None]
    if not values:
        return CursorPage(None, None)
    return CursorPage(before=_cursor_text(min(values)), after=_cursor_text(max(values)))


def _cursor_text(value: Any) -> str:
    if hasattr(value, "isoformat"):
        return str(value.isoformat())
    return to_text(value)
