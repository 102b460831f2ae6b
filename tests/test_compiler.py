"""Tests for filter tree compilation and in-memory predicate semantics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from cqrs_ddd_querying import (
    ALWAYS_TRUE,
    Composite,
    Conjunction,
    FilterCompiler,
    FilterCriterion,
    FilterGroup,
    NoOpMemoCache,
    build_predicate,
)

from .models import Product, make_products, names


@dataclass(frozen=True)
class Label:
    name: str


def _matching(compiler: FilterCompiler, node: Any, items: list[Any] | None = None) -> list[str]:
    items = items if items is not None else make_products()
    predicate = compiler.compile(type(items[0]), node)
    return names(item for item in items if predicate(item))


class TestBuildTree:
    def test_none_is_always_true(self, compiler: FilterCompiler) -> None:
        assert compiler.build_tree(Product, None) is ALWAYS_TRUE

    def test_group_becomes_composite(self, compiler: FilterCompiler) -> None:
        tree = compiler.build_tree(
            Product,
            FilterGroup.any_of(
                FilterCriterion("name", "eq", "Phone"),
                FilterCriterion("nope", "eq", 1),
            ),
        )
        assert isinstance(tree, Composite)
        assert tree.conjunction is Conjunction.OR
        assert tree.children[1] is ALWAYS_TRUE
        assert tree.to_dict()["op"] == "or"

    def test_rejects_foreign_nodes(self, compiler: FilterCompiler) -> None:
        with pytest.raises(TypeError):
            compiler.build_tree(Product, {"op": "eq"})  # type: ignore[arg-type]

    def test_lowering_a_tree_directly(self, compiler: FilterCompiler) -> None:
        tree = compiler.build_tree(Product, FilterCriterion("value", "ge", 8))
        predicate = build_predicate(tree)
        assert names(p for p in make_products() if predicate(p)) == ["Laptop", "Phone"]


class TestCaching:
    def test_compiled_predicates_are_reused(self, compiler: FilterCompiler) -> None:
        node = FilterCriterion("category", "eq", "Lighting")
        assert compiler.compile(Product, node) is compiler.compile(Product, node)

    def test_unhashable_literals_bypass_the_cache(self, compiler: FilterCompiler) -> None:
        node = FilterCriterion("tags", "eq", [["home"]])
        assert _matching(compiler, node) == ["Desk Lamp", "Ceiling Light"]

    def test_equal_literals_of_different_types_are_cached_apart(
        self, compiler: FilterCompiler
    ) -> None:
        """``1``, ``1.0`` and ``True`` hash alike but render as different text."""
        labels = [Label("1"), Label("1.0"), Label("True")]
        assert _matching(compiler, FilterCriterion("name", "eq", 1.0), labels) == ["1.0"]
        assert _matching(compiler, FilterCriterion("name", "eq", 1), labels) == ["1"]
        assert _matching(compiler, FilterCriterion("name", "eq", True), labels) == ["True"]
        assert _matching(compiler, FilterCriterion("name", "in", [1, 2]), labels) == ["1"]
        assert _matching(compiler, FilterCriterion("name", "in", [1.0, 2]), labels) == ["1.0"]

    def test_no_op_cache(self) -> None:
        compiler = FilterCompiler(cache=NoOpMemoCache())
        node = FilterCriterion("category", "eq", "Lighting")
        assert compiler.compile(Product, node) is not compiler.compile(Product, node)


class TestGroups:
    """AND-group ⇔ all children; OR-group ⇔ any child; empty group ⇒ true."""

    def test_and(self, compiler: FilterCompiler) -> None:
        node = FilterCriterion("category", "eq", "Electronics") & FilterCriterion(
            "value", "lt", 9
        )
        assert _matching(compiler, node) == ["Phone", "Monitor"]

    def test_or(self, compiler: FilterCompiler) -> None:
        node = FilterCriterion("category", "eq", "Furniture") | FilterCriterion(
            "value", "gt", 9
        )
        assert _matching(compiler, node) == ["Laptop", "Chair"]

    def test_empty_group(self, compiler: FilterCompiler) -> None:
        assert len(_matching(compiler, FilterGroup())) == 6
        assert len(_matching(compiler, FilterGroup(Conjunction.OR))) == 6

    def test_nested(self, compiler: FilterCompiler) -> None:
        node = FilterGroup.all_of(
            FilterCriterion("category", "in", ["Electronics", "Lighting"]),
            FilterGroup.any_of(
                FilterCriterion("rating", "is_null"),
                FilterCriterion("rating", "gt", 4.6),
            ),
        )
        assert _matching(compiler, node) == ["Desk Lamp", "Phone", "Monitor"]


class TestLeafSemantics:
    def test_ne_null(self, compiler: FilterCompiler) -> None:
        node = FilterCriterion("rating", "ne", None)
        assert _matching(compiler, node) == ["Laptop", "Phone", "Chair", "Ceiling Light"]

    def test_ordering_never_matches_missing_values(self, compiler: FilterCompiler) -> None:
        assert _matching(compiler, FilterCriterion("rating", "lt", 100)) == [
            "Laptop",
            "Phone",
            "Chair",
            "Ceiling Light",
        ]

    def test_between_is_exclusive(self, compiler: FilterCompiler) -> None:
        assert _matching(compiler, FilterCriterion("value", "between", [4, 8])) == [
            "Chair",
            "Monitor",
        ]

    def test_not_between(self, compiler: FilterCompiler) -> None:
        node = FilterCriterion("value", "not_between", [4, 8])
        assert _matching(compiler, node) == ["Laptop", "Desk Lamp"]

    def test_nested_path_equality(self, compiler: FilterCompiler) -> None:
        node = FilterCriterion("supplier.address.city", "eq", "Berlin")
        assert _matching(compiler, node) == ["Laptop", "Phone"]

    def test_collection_contains_is_element_membership(
        self, compiler: FilterCompiler
    ) -> None:
        assert _matching(compiler, FilterCriterion("tags", "contains", "portable")) == [
            "Laptop",
            "Phone",
        ]
        assert _matching(compiler, FilterCriterion("tags", "contains", "port")) == []

    def test_contains_on_numbers_uses_string_form(self, compiler: FilterCompiler) -> None:
        assert _matching(compiler, FilterCriterion("value", "contains", 1)) == ["Laptop"]

    def test_not_contains_matches_missing_values(self, compiler: FilterCompiler) -> None:
        node = FilterCriterion("supplier.name", "not_contains", "ACME")
        assert _matching(compiler, node) == [
            "Desk Lamp",
            "Chair",
            "Ceiling Light",
            "Monitor",
        ]

    def test_string_patterns_ignore_case(self, compiler: FilterCompiler) -> None:
        assert _matching(compiler, FilterCriterion("name", "startswith", "c")) == [
            "Chair",
            "Ceiling Light",
        ]
        assert _matching(compiler, FilterCriterion("status", "endswith", "tinued")) == [
            "Chair"
        ]

    def test_regex_is_case_sensitive(self, compiler: FilterCompiler) -> None:
        assert _matching(compiler, FilterCriterion("name", "regex", "^l")) == []
        assert _matching(compiler, FilterCriterion("name", "regex", "^L")) == ["Laptop"]

    def test_enum_equality_by_name(self, compiler: FilterCompiler) -> None:
        node = FilterCriterion("status", "eq", "DISCONTINUED")
        assert _matching(compiler, node) == ["Chair"]


class TestDynamicProperties:
    """
    Dict rows have no declared types; literals adapt to each value.

    Row "d" holds an explicit ``None``; row "e" has no ``qty`` key at all,
    so every criterion on ``qty`` holds for it.
    """

    ROWS = [
        {"name": "a", "qty": 1},
        {"name": "b", "qty": 2},
        {"name": "c", "qty": 3},
        {"name": "d", "qty": None},
        {"name": "e"},
    ]

    def _names(self, compiler: FilterCompiler, node: Any) -> list[str]:
        predicate = compiler.compile(dict, node)
        return [row["name"] for row in self.ROWS if predicate(row)]

    def test_literal_is_aligned_with_value(self, compiler: FilterCompiler) -> None:
        assert self._names(compiler, FilterCriterion("qty", "gt", "1")) == ["b", "c", "e"]
        assert self._names(compiler, FilterCriterion("qty", "in", ["1", "3"])) == [
            "a",
            "c",
            "e",
        ]

    def test_inconvertible_literal_never_equals(self, compiler: FilterCompiler) -> None:
        assert self._names(compiler, FilterCriterion("qty", "eq", "x")) == ["e"]
        assert self._names(compiler, FilterCriterion("qty", "ne", "x")) == [
            "a",
            "b",
            "c",
            "d",
            "e",
        ]

    def test_null_value_differs_from_absent_key(self, compiler: FilterCompiler) -> None:
        assert self._names(compiler, FilterCriterion("qty", "is_null")) == ["d", "e"]
        assert self._names(compiler, FilterCriterion("qty", "is_not_null")) == [
            "a",
            "b",
            "c",
            "e",
        ]

    def test_key_no_row_has_matches_every_row(self, compiler: FilterCompiler) -> None:
        everyone = ["a", "b", "c", "d", "e"]
        assert self._names(compiler, FilterCriterion("colour", "eq", "x")) == everyone
        assert self._names(compiler, FilterCriterion("colour", "gt", 0)) == everyone
        assert self._names(compiler, FilterCriterion("colour", "startswith", "r")) == everyone

    def test_absent_key_is_vacuous_inside_groups(self, compiler: FilterCompiler) -> None:
        node = FilterGroup.all_of(
            FilterCriterion("qty", "ge", 2),
            FilterCriterion("name", "ne", "c"),
        )
        assert self._names(compiler, node) == ["b", "e"]
