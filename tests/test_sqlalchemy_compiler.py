"""Tests for lowering filter trees to SQLAlchemy expressions."""

from __future__ import annotations

from typing import Any

import pytest
from sqlalchemy.dialects import sqlite
from sqlalchemy.sql.elements import False_, True_

from cqrs_ddd_querying import (
    CoercionFormatError,
    FilterCompiler,
    FilterCriterion,
    FilterGroup,
    UnsupportedOperationError,
)
from cqrs_ddd_querying.sqlalchemy import (
    MappedClassSchemaProvider,
    SQLAlchemyPredicateBuilder,
    build_sqla_filter,
    mapped_resolver,
)

from .sql_models import ProductRecord, SupplierRecord


def _sql(expr: Any) -> str:
    return str(
        expr.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True})
    )


def test_equality_binds_coerced_literal():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("value", "gt", "5"))
    assert _sql(expr) == "products.value > 5"


def test_and_group():
    expr = build_sqla_filter(
        ProductRecord,
        FilterCriterion("category", "eq", "Lighting") & FilterCriterion("value", "le", 4),
    )
    compiled = _sql(expr)
    assert "products.category = 'Lighting'" in compiled
    assert " AND " in compiled
    assert "products.value <= 4" in compiled


def test_or_group():
    expr = build_sqla_filter(
        ProductRecord,
        FilterGroup.any_of(
            FilterCriterion("category", "eq", "Furniture"),
            FilterCriterion("rating", "is_null"),
        ),
    )
    assert _sql(expr) == "products.category = 'Furniture' OR products.rating IS NULL"


def test_single_child_group_is_unwrapped():
    expr = build_sqla_filter(
        ProductRecord, FilterGroup.all_of(FilterCriterion("value", "eq", 3))
    )
    assert _sql(expr) == "products.value = 3"


def test_empty_and_missing_filters_are_true():
    assert isinstance(build_sqla_filter(ProductRecord, FilterGroup()), True_)
    assert isinstance(build_sqla_filter(ProductRecord, None), True_)


def test_unknown_path_is_true():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("colour", "eq", "red"))
    assert isinstance(expr, True_)


def test_ordering_against_null_is_false():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("value", "gt", None))
    assert isinstance(expr, False_)


def test_ne_includes_nulls():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("rating", "ne", 4.5))
    assert _sql(expr) == "products.rating != 4.5 OR products.rating IS NULL"


def test_eq_null():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("rating", "eq", None))
    assert _sql(expr) == "products.rating IS NULL"


def test_between_is_exclusive():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("value", "between", [4, 8]))
    assert _sql(expr) == "products.value > 4 AND products.value < 8"


def test_not_between():
    expr = build_sqla_filter(
        ProductRecord, FilterCriterion("value", "not_between", [4, 8])
    )
    assert _sql(expr) == "products.value < 4 OR products.value > 8"


def test_between_rejects_null_bound():
    with pytest.raises(UnsupportedOperationError):
        build_sqla_filter(ProductRecord, FilterCriterion("value", "between", [None, 8]))


def test_in():
    expr = build_sqla_filter(
        ProductRecord, FilterCriterion("category", "in", ["Electronics", "Lighting"])
    )
    assert _sql(expr) == "products.category IN ('Electronics', 'Lighting')"


def test_not_in_includes_nulls():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("rating", "not_in", [4.5]))
    compiled = _sql(expr)
    assert "NOT IN (4.5)" in compiled
    assert "products.rating IS NULL" in compiled


def test_in_with_null_value():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("rating", "in", [4.5, None]))
    assert _sql(expr) == "products.rating IN (4.5) OR products.rating IS NULL"


def test_contains_is_case_insensitive_and_escaped():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("name", "contains", "50%"))
    compiled = _sql(expr)
    assert "lower(products.name) LIKE" in compiled
    assert "ESCAPE '/'" in compiled
    assert "50/%" in compiled


def test_string_operators_cast_non_text_columns():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("value", "startswith", 1))
    assert "CAST(products.value AS VARCHAR)" in _sql(expr)


def test_regex():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("name", "regex", "^L"))
    assert "REGEXP" in _sql(expr)


def test_many_to_one_uses_exists():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("supplier.name", "eq", "Acme"))
    compiled = _sql(expr)
    assert compiled.startswith("EXISTS")
    assert "suppliers.name = 'Acme'" in compiled


def test_negative_operators_match_missing_relationship():
    expr = build_sqla_filter(ProductRecord, FilterCriterion("supplier.name", "ne", "Acme"))
    compiled = _sql(expr)
    assert compiled.startswith("NOT")
    assert compiled.count("EXISTS") == 2


def test_collection_uses_any():
    expr = build_sqla_filter(
        SupplierRecord, FilterCriterion("products.category", "eq", "Lighting")
    )
    compiled = _sql(expr)
    assert "EXISTS" in compiled
    assert "products.category = 'Lighting'" in compiled


def test_coercion_errors_propagate():
    with pytest.raises(CoercionFormatError):
        build_sqla_filter(ProductRecord, FilterCriterion("value", "eq", "ten"))


def test_builder_lowers_prebuilt_tree():
    compiler = FilterCompiler(resolver=mapped_resolver())
    tree = compiler.build_tree(ProductRecord, FilterCriterion("name", "endswith", "lamp"))
    compiled = _sql(SQLAlchemyPredicateBuilder(ProductRecord).lower(tree))
    assert "lower(products.name) LIKE '%' || lower('lamp')" in compiled


class TestMappedClassSchemaProvider:
    def test_supports_only_mapped_classes(self) -> None:
        provider = MappedClassSchemaProvider()
        assert provider.supports(ProductRecord)
        assert not provider.supports(dict)
        assert not provider.supports("ProductRecord")

    def test_columns_and_relationships(self) -> None:
        schema = MappedClassSchemaProvider().schema(ProductRecord)
        assert schema.lookup("value").annotation is int
        assert schema.lookup("rating").annotation is float
        assert schema.lookup("supplier").annotation is SupplierRecord

    def test_resolves_across_relationship(self) -> None:
        path = mapped_resolver().resolve(ProductRecord, "supplier.city")
        assert path is not None
        assert path.segments == ("supplier", "city")
        assert path.annotation is str
