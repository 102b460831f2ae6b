"""
IMemoCache - Protocol for the memoization caches used by path resolution
and filter compilation.

Entries are lazily populated and never invalidated: the values cached
(resolved paths, compiled predicates) are pure functions of their keys.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable


@runtime_checkable
class IMemoCache(Protocol):
    """
    Abstract interface for a memoization cache.

    Implementations must be safe to share between threads.
    """

    def get_or_create(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        """
        Return the value cached under *key*, computing it with *factory*
        on a miss.
        """
        ...

    def clear(self) -> None:
        """Drop every entry."""
        ...


class InMemoryMemoCache:
    """
    Dict-backed memoization cache guarded by a lock.

    The factory runs outside the lock; the first value published for a
    key wins, so concurrent misses may compute twice but every caller
    observes the same entry.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, Any] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        with self._lock:
            if key in self._entries:
                return self._entries[key]
        value = factory()
        with self._lock:
            return self._entries.setdefault(key, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


class NoOpMemoCache:
    """Cache that never stores anything; every lookup recomputes."""

    def get_or_create(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        return factory()

    def clear(self) -> None:
        return None
