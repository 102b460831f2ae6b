"""
Immutable value objects describing what to filter, how to order and
which window to return.

These are built once per request by the caller (request binding lives
outside this package) and are never mutated by the engine.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .exceptions import InvalidFilterError
from .operators import Conjunction, FilterOperator, SortDirection


class _Composable:
    """``&`` / ``|`` composition for filter nodes."""

    def __and__(self, other: FilterNode) -> FilterGroup:
        return FilterGroup.all_of(self, other)  # type: ignore[arg-type]

    def __or__(self, other: FilterNode) -> FilterGroup:
        return FilterGroup.any_of(self, other)  # type: ignore[arg-type]


def _as_values(values: Any) -> tuple[Any, ...]:
    if isinstance(values, tuple):
        return values
    if values is None:
        return ()
    if isinstance(values, str | bytes) or not isinstance(values, Iterable):
        return (values,)
    return tuple(values)


@dataclass(frozen=True)
class FilterCriterion(_Composable):
    """
    A single filter leaf: ``path <operator> values``.

    Attributes:
        path: Dotted property path, e.g. ``"address.city"``.
        operator: The operator (members, values and aliases accepted).
        values: Literals compared against the property.  Null checks take
            none, range operators two, membership any number, the rest one.
            A scalar is wrapped into a one-element tuple.
    """

    path: str
    operator: FilterOperator
    values: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        try:
            operator = FilterOperator.parse(self.operator)
        except ValueError as exc:
            raise InvalidFilterError(str(exc), path=self.path) from exc
        object.__setattr__(self, "operator", operator)
        object.__setattr__(self, "values", _as_values(self.values))

    @property
    def value(self) -> Any:
        """The first literal, or ``None`` when there is none."""
        return self.values[0] if self.values else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.operator.value,
            "attr": self.path,
            "val": list(self.values),
        }


@dataclass(frozen=True)
class FilterGroup(_Composable):
    """
    A recursive AND/OR composite of criteria and nested groups.

    An empty group matches everything.
    """

    conjunction: Conjunction = Conjunction.AND
    children: tuple[FilterNode, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        conjunction = self.conjunction
        if not isinstance(conjunction, Conjunction):
            try:
                conjunction = Conjunction(str(conjunction).strip().lower())
            except ValueError as exc:
                raise InvalidFilterError(
                    f"Unknown conjunction: {self.conjunction!r}"
                ) from exc
        object.__setattr__(self, "conjunction", conjunction)
        children = tuple(self.children)
        for child in children:
            if not isinstance(child, FilterCriterion | FilterGroup):
                raise InvalidFilterError(
                    f"Filter group children must be criteria or groups, "
                    f"got {type(child).__name__}"
                )
        object.__setattr__(self, "children", children)

    @classmethod
    def all_of(cls, *children: FilterNode) -> FilterGroup:
        return cls(Conjunction.AND, children)

    @classmethod
    def any_of(cls, *children: FilterNode) -> FilterGroup:
        return cls(Conjunction.OR, children)

    @property
    def is_empty(self) -> bool:
        return not self.children

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.conjunction.value,
            "conditions": [child.to_dict() for child in self.children],
        }


FilterNode = FilterCriterion | FilterGroup


@dataclass(frozen=True)
class SortKey:
    """One ordering key.  A list of keys orders by the first, ties broken by the rest."""

    path: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        if not self.path or not str(self.path).strip():
            raise InvalidFilterError("Sort key path cannot be empty")
        try:
            direction = SortDirection.parse(self.direction)
        except ValueError as exc:
            raise InvalidFilterError(str(exc), path=self.path) from exc
        object.__setattr__(self, "path", str(self.path).strip())
        object.__setattr__(self, "direction", direction)

    @classmethod
    def parse(cls, text: str) -> SortKey:
        """``"name"`` sorts ascending, ``"-name"`` descending, ``"+name"`` ascending."""
        stripped = text.strip()
        if stripped.startswith("-"):
            return cls(stripped[1:], SortDirection.DESC)
        if stripped.startswith("+"):
            return cls(stripped[1:], SortDirection.ASC)
        return cls(stripped, SortDirection.ASC)

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC

    def __str__(self) -> str:
        return f"-{self.path}" if self.descending else self.path


@dataclass(frozen=True)
class PagingDescriptor:
    """
    Which window of an ordered sequence to return.

    Attributes:
        offset: Number of items to skip (offset paging only).
        limit: Page size.  ``0`` means *unbounded*, not "no items".
        before: Cursor; return the items immediately preceding it.
        after: Cursor; return the items immediately following it.
            Ignored entirely whenever ``before`` is set.
    """

    offset: int = 0
    limit: int = 0
    before: str | None = None
    after: str | None = None

    def __post_init__(self) -> None:
        for name in ("offset", "limit"):
            raw = getattr(self, name)
            if isinstance(raw, bool):
                raise InvalidFilterError(f"'{name}' must be an integer, got {raw!r}")
            try:
                number = int(raw)
            except (TypeError, ValueError) as exc:
                raise InvalidFilterError(
                    f"'{name}' must be an integer, got {raw!r}"
                ) from exc
            if not isinstance(raw, str) and number != raw:
                raise InvalidFilterError(f"'{name}' must be a whole number, got {raw!r}")
            if number < 0:
                raise InvalidFilterError(f"'{name}' cannot be negative, got {number}")
            object.__setattr__(self, name, number)
        for name in ("before", "after"):
            raw = getattr(self, name)
            if raw is not None and not str(raw).strip():
                raw = None
            object.__setattr__(self, name, None if raw is None else str(raw))

    @classmethod
    def for_page(cls, page_number: int, page_size: int) -> PagingDescriptor:
        """Offset paging from a 1-based page number; pages below 1 clamp to 1."""
        if page_size < 0:
            raise InvalidFilterError(f"'page_size' cannot be negative, got {page_size}")
        page_number = max(page_number, 1)
        return cls(offset=(page_number - 1) * page_size, limit=page_size)

    @property
    def is_unbounded(self) -> bool:
        return self.limit == 0

    @property
    def effective_limit(self) -> int | None:
        """The page size, or ``None`` when unbounded."""
        return None if self.is_unbounded else self.limit

    @property
    def uses_cursor(self) -> bool:
        return self.before is not None or self.after is not None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"offset": self.offset, "limit": self.limit}
        if self.before is not None:
            result["before"] = self.before
        if self.after is not None:
            result["after"] = self.after
        return result


def sort_keys_from(keys: Iterable[SortKey | str]) -> list[SortKey]:
    """Normalise a mix of ``SortKey`` objects and ``"-field"`` strings."""
    return [key if isinstance(key, SortKey) else SortKey.parse(key) for key in keys]
