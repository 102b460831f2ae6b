"""
Query options: filters, ordering and paging in one value.

``QueryOptions`` bundles the three request-shaping inputs the engine
consumes.  The filter tree defines *what* to return; sort keys and the
paging descriptor define *how* results are ordered and windowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .criteria import FilterGroup, PagingDescriptor, SortKey, sort_keys_from

if TYPE_CHECKING:
    from .criteria import FilterNode


@dataclass(frozen=True)
class QueryOptions:
    """
    Immutable container for result-shaping parameters.

    Attributes:
        filters: The filter tree (``None`` = no filter).
        sort: Sort keys, primary first.  Strings such as ``"-created_at"``
            are accepted and normalised.
        paging: Paging descriptor (``None`` = everything).
    """

    filters: FilterNode | None = None
    sort: tuple[SortKey, ...] = field(default_factory=tuple)
    paging: PagingDescriptor | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "sort", tuple(sort_keys_from(self.sort)))

    def with_filters(self, filters: FilterNode | None) -> QueryOptions:
        """Return a copy with the filter tree replaced."""
        return QueryOptions(filters=filters, sort=self.sort, paging=self.paging)

    def with_sort(self, *keys: SortKey | str) -> QueryOptions:
        """Return a copy with updated ordering."""
        return QueryOptions(filters=self.filters, sort=tuple(keys), paging=self.paging)

    def with_paging(
        self,
        paging: PagingDescriptor | None = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
    ) -> QueryOptions:
        """
        Return a copy with updated paging.

        Either pass a full descriptor, or ``limit``/``offset`` to adjust the
        current one.
        """
        if paging is None:
            current = self.paging or PagingDescriptor()
            paging = PagingDescriptor(
                offset=offset if offset is not None else current.offset,
                limit=limit if limit is not None else current.limit,
                before=current.before,
                after=current.after,
            )
        return QueryOptions(filters=self.filters, sort=self.sort, paging=paging)

    def merge(self, other: QueryOptions) -> QueryOptions:
        """
        Merge two ``QueryOptions`` instances.

        - Filters are combined with AND.
        - Sort keys are concatenated (``other`` appended).
        - ``other``'s paging overrides ``self``'s if set.
        """
        merged: FilterNode | None = self.filters
        if other.filters is not None:
            if merged is not None:
                merged = FilterGroup.all_of(merged, other.filters)
            else:
                merged = other.filters

        return QueryOptions(
            filters=merged,
            sort=self.sort + other.sort,
            paging=other.paging if other.paging is not None else self.paging,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary."""
        result: dict[str, Any] = {}
        if self.filters is not None:
            result["filters"] = self.filters.to_dict()
        if self.sort:
            result["sort"] = [str(key) for key in self.sort]
        if self.paging is not None:
            result["paging"] = self.paging.to_dict()
        return result
