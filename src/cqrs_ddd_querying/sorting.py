"""
Multi-key ordering of in-memory sequences.

The first sort key is primary; later keys break ties.  ``None`` sorts
before every other value ascending and after every other value
descending.  Keys whose path does not resolve are skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from .criteria import SortKey, sort_keys_from
from .paths import PropertyPathResolver, ResolvedPath
from .utils import peek_element_type

logger = logging.getLogger("cqrs_ddd.querying.sorting")


def null_first_key(path: ResolvedPath) -> Any:
    """Sort key placing ``None`` before every other value."""

    def key(element: Any) -> tuple[Any, ...]:
        value = path(element)
        return (0,) if value is None else (1, value)

    return key


def resolve_sort_keys(
    element_type: Any,
    sort_keys: Iterable[SortKey | str],
    resolver: PropertyPathResolver,
) -> list[tuple[SortKey, ResolvedPath]]:
    """Pair each key with its resolved path, dropping keys that do not resolve."""
    resolved: list[tuple[SortKey, ResolvedPath]] = []
    for sort_key in sort_keys_from(sort_keys):
        path = resolver.resolve(element_type, sort_key.path)
        if path is None:
            logger.debug(
                "Skipping sort key %r: not resolvable on %s",
                sort_key.path,
                getattr(element_type, "__name__", element_type),
            )
            continue
        resolved.append((sort_key, path))
    return resolved


def apply_order(
    source: Iterable[Any],
    sort_keys: Sequence[SortKey | str] | None,
    element_type: Any = None,
    resolver: PropertyPathResolver | None = None,
) -> Iterable[Any]:
    """
    Order *source* by *sort_keys*.

    Args:
        source: Items to order; never mutated.
        sort_keys: ``SortKey`` objects or ``"-field"`` strings.
        element_type: Type the paths are resolved against.  Inferred from
            the first item when omitted.
        resolver: Path resolver; a default one is created if omitted.

    Returns:
        A new sorted list, or *source* itself when no key is usable.
        The sort is stable.
    """
    if not sort_keys:
        return source
    if element_type is None:
        element_type, source = peek_element_type(source)
        if element_type is None:
            return source

    resolver = resolver if resolver is not None else PropertyPathResolver()
    resolved = resolve_sort_keys(element_type, sort_keys, resolver)
    if not resolved:
        return source

    items = list(source)
    # One stable pass per key, least significant first.
    for sort_key, path in reversed(resolved):
        items.sort(key=null_first_key(path), reverse=sort_key.descending)
    return items
