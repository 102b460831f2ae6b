"""
Filter-tree-to-SQLAlchemy compilation.

Public API:
    - ``build_sqla_filter(model, filters)``: compile a filter tree to a
      ``ColumnElement[bool]``
    - ``apply_query_options(stmt, model, options)``: apply
      ``QueryOptions`` to a ``Select`` statement
    - ``apply_filters`` / ``apply_sort`` / ``apply_paging`` /
      ``apply_cursor_paging``: the individual steps
    - ``SQLAlchemyPredicateBuilder``: lowers predicate IR to SQL
    - ``MappedClassSchemaProvider`` / ``mapped_resolver``: path
      resolution over mapped classes
"""

from .compiler import (
    DEFAULT_MAPPED_RESOLVER,
    SQLAlchemyPredicateBuilder,
    build_sqla_filter,
    mapped_resolver,
)
from .query import (
    apply_cursor_paging,
    apply_filters,
    apply_paging,
    apply_query_options,
    apply_sort,
)
from .schema import MappedClassSchemaProvider, column_python_type

__all__ = [
    "build_sqla_filter",
    "apply_query_options",
    "apply_filters",
    "apply_sort",
    "apply_paging",
    "apply_cursor_paging",
    "SQLAlchemyPredicateBuilder",
    "MappedClassSchemaProvider",
    "mapped_resolver",
    "DEFAULT_MAPPED_RESOLVER",
    "column_python_type",
]
