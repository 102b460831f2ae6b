"""
Built-in operator handlers.

One handler per operator family, and a factory function to create
registries.

Usage::

    from cqrs_ddd_querying.operator_handlers import build_default_registry

    registry = build_default_registry()
    node = registry.build(resolved_path, criterion)
"""

from __future__ import annotations

from ..registry import OperatorHandler, OperatorHandlerRegistry
from .comparison import ComparisonHandler
from .containment import ContainmentHandler
from .equality import EqualityHandler
from .membership import MembershipHandler
from .null import NullCheckHandler
from .range import RangeHandler
from .regex import RegexHandler
from .string import StringPatternHandler


def build_default_registry() -> OperatorHandlerRegistry:
    """
    Create a registry with all built-in handlers.

    Returns a fresh instance on every call so callers can register custom
    handlers without affecting others.

    Example:
        >>> registry = build_default_registry()
        >>> registry.has(FilterOperator.BETWEEN)
        True
    """
    registry = OperatorHandlerRegistry()
    registry.register_all(
        EqualityHandler(),
        ComparisonHandler(),
        RangeHandler(),
        MembershipHandler(),
        StringPatternHandler(),
        ContainmentHandler(),
        NullCheckHandler(),
        RegexHandler(),
    )
    return registry


__all__ = [
    "build_default_registry",
    "ComparisonHandler",
    "ContainmentHandler",
    "EqualityHandler",
    "MembershipHandler",
    "NullCheckHandler",
    "OperatorHandler",
    "OperatorHandlerRegistry",
    "RangeHandler",
    "RegexHandler",
    "StringPatternHandler",
]
