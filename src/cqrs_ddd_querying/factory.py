"""
Build filter trees and query options from dictionary / JSON representations.

Dictionary form::

    {
        "op": "and",
        "conditions": [
            {"op": "eq", "attr": "category", "val": "Electronics"},
            {"op": "between", "attr": "price", "val": [10, 100]},
            {"op": "or", "conditions": [...]},
        ],
    }

This is the inverse of ``FilterCriterion.to_dict()`` /
``FilterGroup.to_dict()``.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from .criteria import FilterCriterion, FilterGroup, PagingDescriptor, sort_keys_from
from .exceptions import InvalidFilterError, OperatorNotFoundError
from .operators import Conjunction, FilterOperator
from .query_options import QueryOptions

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .criteria import FilterNode

# Pre-compute valid operator values for validation
_VALID_OPERATORS: list[str] = [m.value for m in FilterOperator]
_LOGICAL_OPERATORS: frozenset[str] = frozenset(m.value for m in Conjunction)


def _parse_operator(op_str: str, path: str) -> FilterOperator:
    try:
        return FilterOperator.parse(op_str)
    except ValueError:
        raise OperatorNotFoundError(op_str, _VALID_OPERATORS, path=path) from None


class FilterFactory:
    """
    Factory for filter trees in dictionary / JSON form.

    Supports:
    - ``from_dict(data)``: parse a nested dict tree
    - ``from_json(text)``: parse a JSON string
    - ``validate(data)``: collect every problem without constructing
    - ``options_from_dict(data)``: filters, sort and paging together
    """

    # ------------------------------------------------------------------ #
    # Public API                                                          #
    # ------------------------------------------------------------------ #

    @staticmethod
    def from_dict(
        data: dict[str, Any],
        *,
        allowed_fields: Sequence[str] | None = None,
    ) -> FilterNode:
        """
        Create a filter tree from a dictionary.

        Parameters
        ----------
        data:
            The filter dictionary (potentially nested).
        allowed_fields:
            Optional whitelist of property paths.  Any ``attr`` not in
            this list raises :class:`InvalidFilterError`.

        Raises
        ------
        InvalidFilterError
            On the first structural problem found (fail-fast).
        OperatorNotFoundError
            For an unknown operator, with suggestions.
        """
        return FilterFactory._build(data, path="<root>", allowed_fields=allowed_fields)

    @staticmethod
    def from_json(
        text: str,
        *,
        allowed_fields: Sequence[str] | None = None,
    ) -> FilterNode:
        """Parse a JSON string and build a filter tree."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidFilterError(f"Invalid JSON: {exc}", path="<root>") from exc

        if not isinstance(data, dict):
            raise InvalidFilterError(
                "Top-level JSON value must be an object", path="<root>"
            )

        return FilterFactory.from_dict(data, allowed_fields=allowed_fields)

    @staticmethod
    def validate(
        data: Any,
        *,
        allowed_fields: Sequence[str] | None = None,
    ) -> list[str]:
        """
        Validate a filter dict and return a list of error messages.

        Returns an empty list when the structure is valid.
        """
        errors: list[str] = []
        FilterFactory._collect_errors(
            data, errors, path="<root>", allowed_fields=allowed_fields
        )
        return errors

    @staticmethod
    def options_from_dict(
        data: dict[str, Any],
        *,
        allowed_fields: Sequence[str] | None = None,
    ) -> QueryOptions:
        """
        Build :class:`QueryOptions` from
        ``{"filters": {...}, "sort": ["-price", "name"], "paging": {...}}``.

        Every key is optional.  ``paging`` accepts ``offset``, ``limit``,
        ``before`` and ``after``, or ``page`` and ``page_size``.
        """
        filters_data = data.get("filters")
        filters = (
            FilterFactory.from_dict(filters_data, allowed_fields=allowed_fields)
            if filters_data
            else None
        )

        sort_data = data.get("sort") or []
        if isinstance(sort_data, str):
            sort_data = [part for part in sort_data.split(",") if part.strip()]
        sort = tuple(sort_keys_from(sort_data))

        paging_data = data.get("paging")
        paging: PagingDescriptor | None = None
        if paging_data is not None:
            if not isinstance(paging_data, dict):
                raise InvalidFilterError("'paging' must be an object", path="paging")
            if "page" in paging_data or "page_size" in paging_data:
                paging = PagingDescriptor.for_page(
                    int(paging_data.get("page", 1)),
                    int(paging_data.get("page_size", 0)),
                )
            else:
                paging = PagingDescriptor(
                    offset=paging_data.get("offset", 0),
                    limit=paging_data.get("limit", 0),
                    before=paging_data.get("before"),
                    after=paging_data.get("after"),
                )

        return QueryOptions(filters=filters, sort=sort, paging=paging)

    # ------------------------------------------------------------------ #
    # Internal: recursive build                                           #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _build(
        data: Any,
        *,
        path: str,
        allowed_fields: Sequence[str] | None,
    ) -> FilterNode:
        if not isinstance(data, dict):
            raise InvalidFilterError(
                f"Expected a dict, got {type(data).__name__}", path=path
            )

        op_str = data.get("op")
        if not op_str or not isinstance(op_str, str):
            raise InvalidFilterError("Missing or empty 'op' key", path=path)
        op_lower = op_str.strip().lower()

        if op_lower in _LOGICAL_OPERATORS:
            conditions = data.get("conditions", [])
            if not isinstance(conditions, list):
                raise InvalidFilterError("'conditions' must be a list", path=path)
            return FilterGroup(
                Conjunction(op_lower),
                tuple(
                    FilterFactory._build(
                        child,
                        path=f"{path}.conditions[{idx}]",
                        allowed_fields=allowed_fields,
                    )
                    for idx, child in enumerate(conditions)
                ),
            )

        # Leaf node
        operator = _parse_operator(op_str, path)
        attr = data.get("attr")
        if not attr or not isinstance(attr, str) or not attr.strip():
            raise InvalidFilterError(f"Leaf filter missing 'attr': {data}", path=path)
        if allowed_fields is not None and attr not in allowed_fields:
            raise InvalidFilterError(
                f"Field '{attr}' is not in the allowed fields list", path=path
            )
        return FilterCriterion(attr, operator, data.get("val"))

    # ------------------------------------------------------------------ #
    # Internal: validation                                                #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _collect_errors(
        data: Any,
        errors: list[str],
        *,
        path: str,
        allowed_fields: Sequence[str] | None = None,
    ) -> None:
        if not isinstance(data, dict):
            errors.append(f"{path}: expected a dict, got {type(data).__name__}")
            return

        op_str = data.get("op")
        if not op_str or not isinstance(op_str, str):
            errors.append(f"{path}: missing or empty 'op'")
            return
        op_lower = op_str.strip().lower()

        if op_lower in _LOGICAL_OPERATORS:
            conditions = data.get("conditions", [])
            if not isinstance(conditions, list):
                errors.append(f"{path}: 'conditions' must be a list")
                return
            for idx, child in enumerate(conditions):
                FilterFactory._collect_errors(
                    child,
                    errors,
                    path=f"{path}.conditions[{idx}]",
                    allowed_fields=allowed_fields,
                )
            return

        try:
            FilterOperator.parse(op_str)
        except ValueError:
            errors.append(f"{path}: unknown operator '{op_lower}'")

        attr = data.get("attr")
        if not attr or not isinstance(attr, str) or not attr.strip():
            errors.append(f"{path}: missing 'attr'")
            return

        if allowed_fields is not None and attr not in allowed_fields:
            errors.append(f"{path}: field '{attr}' not allowed")
