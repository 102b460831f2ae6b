"""
Filter tree compiler.

Walks a :class:`FilterGroup` tree, resolves every leaf's path against the
element type, dispatches the leaf to its operator handler and combines
the resulting IR nodes.  Compiled predicates are cached per
``(element type, tree)``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .ast import ALWAYS_TRUE, Composite, PredicateNode
from .cache import IMemoCache, InMemoryMemoCache
from .criteria import FilterCriterion, FilterGroup
from .evaluator import MemoryPredicateBuilder, Predicate
from .operator_handlers import build_default_registry
from .paths import PropertyPathResolver

if TYPE_CHECKING:
    from .criteria import FilterNode
    from .registry import OperatorHandlerRegistry

logger = logging.getLogger("cqrs_ddd.querying.compiler")


class FilterCompiler:
    """
    Compiles filter trees into predicates.

    Args:
        registry: Operator handlers; defaults to
            :func:`~cqrs_ddd_querying.operator_handlers.build_default_registry`.
        resolver: Property path resolver; a default one is created if omitted.
        cache: Memoization cache for compiled predicates.

    Usage::

        compiler = FilterCompiler()
        predicate = compiler.compile(Product, group)
        cheap = [p for p in products if predicate(p)]
    """

    def __init__(
        self,
        registry: OperatorHandlerRegistry | None = None,
        resolver: PropertyPathResolver | None = None,
        cache: IMemoCache | None = None,
    ) -> None:
        self._registry = registry if registry is not None else build_default_registry()
        self._resolver = resolver if resolver is not None else PropertyPathResolver()
        self._cache = cache if cache is not None else InMemoryMemoCache()

    @property
    def registry(self) -> OperatorHandlerRegistry:
        return self._registry

    @property
    def resolver(self) -> PropertyPathResolver:
        return self._resolver

    def build_tree(self, element_type: Any, node: FilterNode | None) -> PredicateNode:
        """
        Build the IR tree for *node*.

        Raises:
            CoercionError: A literal does not fit its property's type.
            InvalidFilterError: A leaf is malformed (e.g. invalid regex).
            UnsupportedOperationError: A range bound is ``None``.
            HandlerResolutionError: No handler services an operator.
        """
        if node is None:
            return ALWAYS_TRUE
        if isinstance(node, FilterCriterion):
            path = self._resolver.resolve(element_type, node.path)
            return self._registry.build(path, node)
        if isinstance(node, FilterGroup):
            return Composite(
                node.conjunction,
                tuple(self.build_tree(element_type, child) for child in node.children),
            )
        raise TypeError(
            f"Expected FilterCriterion or FilterGroup, got {type(node).__name__}"
        )

    def compile(self, element_type: Any, node: FilterNode | None) -> Predicate:
        """
        Compile *node* into a predicate over instances of *element_type*.

        Identical trees compiled for the same type share one cached
        predicate; trees holding unhashable literals are compiled afresh.
        Literal types are part of the key, so ``1``, ``1.0`` and ``True``
        do not share an entry.
        """
        key = ("predicate", element_type, node, _literal_signature(node))
        try:
            hash(key)
        except TypeError:
            logger.debug("Filter tree is unhashable; compiling without cache")
            return self._compile(element_type, node)
        predicate: Predicate = self._cache.get_or_create(
            key, lambda: self._compile(element_type, node)
        )
        return predicate

    def _compile(self, element_type: Any, node: FilterNode | None) -> Predicate:
        logger.debug(
            "Compiling filter for %s",
            getattr(element_type, "__name__", element_type),
        )
        return MemoryPredicateBuilder().lower(self.build_tree(element_type, node))


def _literal_signature(node: Any) -> Any:
    """The runtime types of every literal in *node*, in tree order."""
    if isinstance(node, FilterGroup):
        return tuple(_literal_signature(child) for child in node.children)
    if isinstance(node, FilterCriterion):
        return tuple(_value_signature(value) for value in node.values)
    return type(node)


def _value_signature(value: Any) -> Any:
    if isinstance(value, list | tuple | set | frozenset):
        return (type(value), tuple(_value_signature(item) for item in value))
    return type(value)
