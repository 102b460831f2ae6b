from .ast import (
    ALWAYS_FALSE,
    ALWAYS_TRUE,
    Comparison,
    Composite,
    Constant,
    Containment,
    Membership,
    NullCheck,
    PatternMatch,
    PredicateNode,
    PredicateVisitor,
    Range,
    StringMatch,
)
from .cache import IMemoCache, InMemoryMemoCache, NoOpMemoCache
from .coercion import SemanticKind, coerce, coerce_many, semantic_kind
from .compiler import FilterCompiler
from .criteria import (
    FilterCriterion,
    FilterGroup,
    FilterNode,
    PagingDescriptor,
    SortKey,
    sort_keys_from,
)
from .engine import (
    QueryEngine,
    apply_query,
    default_engine,
    filter_items,
    page_items,
    page_items_by_cursor,
    page_items_by_number,
    sort_items,
)
from .evaluator import MemoryPredicateBuilder, Predicate, build_predicate
from .exceptions import (
    CoercionError,
    CoercionFormatError,
    CoercionOverflowError,
    HandlerResolutionError,
    InvalidFilterError,
    MissingArgumentError,
    OperatorNotFoundError,
    QueryingError,
    UnsupportedConversionError,
    UnsupportedOperationError,
)
from .factory import FilterFactory
from .operator_handlers import build_default_registry
from .operators import Conjunction, FilterOperator, SortDirection
from .pagination import (
    CursorPage,
    CursorSelector,
    cursor_window,
    next_cursors,
    offset_window,
    page_number_window,
)
from .paths import PropertyPathResolver, ResolvedPath
from .query_options import QueryOptions
from .registry import OperatorHandler, OperatorHandlerRegistry
from .schema import (
    AnnotatedClassSchemaProvider,
    DataclassSchemaProvider,
    MISSING,
    MappingSchemaProvider,
    MemberInfo,
    PydanticSchemaProvider,
    SchemaProvider,
    TypeSchema,
    default_schema_providers,
)
from .sorting import apply_order
from .types import Int8, Int16, Int32, Int64, UInt8, UInt16, UInt32, UInt64
from .utils import parse_bool, parse_interval

__all__ = [
    # Filter model
    "FilterOperator",
    "Conjunction",
    "SortDirection",
    "FilterCriterion",
    "FilterGroup",
    "FilterNode",
    "SortKey",
    "PagingDescriptor",
    "sort_keys_from",
    "QueryOptions",
    "FilterFactory",
    # Engine
    "QueryEngine",
    "default_engine",
    "filter_items",
    "sort_items",
    "page_items",
    "page_items_by_number",
    "page_items_by_cursor",
    "apply_query",
    # Compilation
    "FilterCompiler",
    "OperatorHandler",
    "OperatorHandlerRegistry",
    "build_default_registry",
    "MemoryPredicateBuilder",
    "Predicate",
    "build_predicate",
    # Predicate IR
    "PredicateNode",
    "PredicateVisitor",
    "Constant",
    "ALWAYS_TRUE",
    "ALWAYS_FALSE",
    "Comparison",
    "Range",
    "Membership",
    "StringMatch",
    "Containment",
    "NullCheck",
    "PatternMatch",
    "Composite",
    # Paths and schemas
    "PropertyPathResolver",
    "ResolvedPath",
    "SchemaProvider",
    "TypeSchema",
    "MISSING",
    "MemberInfo",
    "PydanticSchemaProvider",
    "DataclassSchemaProvider",
    "MappingSchemaProvider",
    "AnnotatedClassSchemaProvider",
    "default_schema_providers",
    # Coercion
    "SemanticKind",
    "coerce",
    "coerce_many",
    "semantic_kind",
    "parse_interval",
    "parse_bool",
    # Sorting / paging
    "apply_order",
    "offset_window",
    "page_number_window",
    "cursor_window",
    "next_cursors",
    "CursorPage",
    "CursorSelector",
    # Caching
    "IMemoCache",
    "InMemoryMemoCache",
    "NoOpMemoCache",
    # Bounded integers
    "Int8",
    "UInt8",
    "Int16",
    "UInt16",
    "Int32",
    "UInt32",
    "Int64",
    "UInt64",
    # Exceptions
    "QueryingError",
    "CoercionError",
    "CoercionFormatError",
    "CoercionOverflowError",
    "UnsupportedConversionError",
    "InvalidFilterError",
    "OperatorNotFoundError",
    "UnsupportedOperationError",
    "MissingArgumentError",
    "HandlerResolutionError",
]
