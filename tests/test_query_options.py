"""Tests for QueryOptions (immutability, builders, merge, serialisation)."""

from __future__ import annotations

import dataclasses

import pytest

from cqrs_ddd_querying import (
    FilterCriterion,
    FilterGroup,
    PagingDescriptor,
    QueryOptions,
    SortKey,
)


def _category(value: str) -> FilterCriterion:
    return FilterCriterion("category", "eq", value)


def test_sort_strings_are_normalised():
    opts = QueryOptions(sort=("-created_at", "name"))  # type: ignore[arg-type]
    assert opts.sort == (SortKey.parse("-created_at"), SortKey("name"))


def test_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        QueryOptions().paging = PagingDescriptor(limit=1)  # type: ignore[misc]


# -- Builders ----------------------------------------------------------------


def test_with_filters_keeps_the_rest():
    opts = QueryOptions(sort=(SortKey("name"),), paging=PagingDescriptor(limit=5))
    updated = opts.with_filters(_category("Lighting"))
    assert updated.filters == _category("Lighting")
    assert updated.sort == opts.sort
    assert updated.paging == opts.paging
    assert opts.filters is None


def test_with_sort():
    opts = QueryOptions().with_sort("-value", "name")
    assert [str(key) for key in opts.sort] == ["-value", "name"]


def test_with_paging_adjusts_current():
    opts = QueryOptions(paging=PagingDescriptor(offset=10, limit=5, after="x"))
    updated = opts.with_paging(limit=20)
    assert updated.paging == PagingDescriptor(offset=10, limit=20, after="x")


def test_with_paging_replaces_descriptor():
    paging = PagingDescriptor(limit=3, before="9")
    assert QueryOptions().with_paging(paging).paging is paging


# -- Merge -------------------------------------------------------------------


def test_merge_filters_combined_with_and():
    merged = QueryOptions(filters=_category("A")).merge(
        QueryOptions(filters=_category("B"))
    )
    assert merged.filters == FilterGroup.all_of(_category("A"), _category("B"))


def test_merge_none_filters_keeps_existing():
    filters = _category("A")
    merged = QueryOptions(filters=filters).merge(QueryOptions())
    assert merged.filters is filters


def test_merge_takes_other_filters_when_self_has_none():
    filters = _category("B")
    assert QueryOptions().merge(QueryOptions(filters=filters)).filters is filters


def test_merge_sort_concatenates():
    merged = QueryOptions().with_sort("-created_at").merge(
        QueryOptions().with_sort("name")
    )
    assert [str(key) for key in merged.sort] == ["-created_at", "name"]


def test_merge_paging_overrides():
    a = QueryOptions(paging=PagingDescriptor(limit=5))
    b = QueryOptions(paging=PagingDescriptor(limit=10))
    assert a.merge(b).paging == PagingDescriptor(limit=10)
    assert a.merge(QueryOptions()).paging == PagingDescriptor(limit=5)


# -- Serialisation -----------------------------------------------------------


def test_to_dict_empty():
    assert QueryOptions().to_dict() == {}


def test_to_dict_full():
    opts = QueryOptions(
        filters=_category("Lighting"),
        sort=(SortKey.parse("-value"),),
        paging=PagingDescriptor(offset=5, limit=5),
    )
    assert opts.to_dict() == {
        "filters": {"op": "eq", "attr": "category", "val": ["Lighting"]},
        "sort": ["-value"],
        "paging": {"offset": 5, "limit": 5},
    }
