"""
Operator handler strategy and registry.

Provides the :class:`OperatorHandler` interface and a registry that maps
each :class:`FilterOperator` to exactly one handler.

New operators are added by subclassing ``OperatorHandler`` and
registering it via ``register()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .exceptions import HandlerResolutionError

if TYPE_CHECKING:
    from .ast import PredicateNode
    from .criteria import FilterCriterion
    from .operators import FilterOperator
    from .paths import ResolvedPath


class OperatorHandler(ABC):
    """
    Strategy interface turning one filter criterion into a predicate node.

    Each handler services a fixed family of operators.
    """

    @property
    @abstractmethod
    def operators(self) -> frozenset[FilterOperator]:
        """The operators this handler services."""
        ...

    def handles(self, operator: FilterOperator) -> bool:
        return operator in self.operators

    def build(
        self,
        path: ResolvedPath | None,
        criterion: FilterCriterion,
    ) -> PredicateNode:
        """
        Build the predicate node for *criterion*.

        Args:
            path: The resolved property path, or ``None`` when the path
                names no member of the element type.
            criterion: The filter leaf.

        Raises:
            HandlerResolutionError: If the criterion's operator is not
                serviced by this handler.
        """
        if not self.handles(criterion.operator):
            raise HandlerResolutionError(
                f"{type(self).__name__} cannot handle operator "
                f"'{criterion.operator.value}'"
            )
        return self._build(path, criterion)

    @abstractmethod
    def _build(
        self,
        path: ResolvedPath | None,
        criterion: FilterCriterion,
    ) -> PredicateNode: ...


class OperatorHandlerRegistry:
    """
    Registry of operator handlers keyed by ``FilterOperator``.

    Usage::

        registry = OperatorHandlerRegistry()
        registry.register(EqualityHandler())

        node = registry.build(resolved_path, criterion)
    """

    def __init__(self) -> None:
        self._handlers: dict[FilterOperator, OperatorHandler] = {}

    # -- registration --------------------------------------------------------

    def register(self, handler: OperatorHandler) -> None:
        """
        Register a handler for every operator it declares.

        Raises:
            HandlerResolutionError: If any of its operators already has a
                handler.
        """
        overlap = sorted(op.value for op in handler.operators if op in self._handlers)
        if overlap:
            raise HandlerResolutionError(
                f"{type(handler).__name__} overlaps already registered "
                f"operators: {', '.join(overlap)}"
            )
        for op in handler.operators:
            self._handlers[op] = handler

    def register_all(self, *handlers: OperatorHandler) -> None:
        """Register multiple handlers at once."""
        for handler in handlers:
            self.register(handler)

    def unregister(self, handler: OperatorHandler) -> None:
        """Remove *handler* from every operator it was registered for."""
        for op in handler.operators:
            if self._handlers.get(op) is handler:
                del self._handlers[op]

    # -- look-up -------------------------------------------------------------

    def get(self, operator: FilterOperator) -> OperatorHandler | None:
        """Return the registered handler or ``None``."""
        return self._handlers.get(operator)

    def has(self, operator: FilterOperator) -> bool:
        return operator in self._handlers

    @property
    def supported_operators(self) -> set[FilterOperator]:
        return set(self._handlers.keys())

    def resolve(self, operator: FilterOperator) -> OperatorHandler:
        """
        Return the handler for *operator*.

        Raises:
            HandlerResolutionError: If no handler is registered.
        """
        handler = self.get(operator)
        if handler is None:
            raise HandlerResolutionError(
                f"No operator handler registered for '{operator.value}'"
            )
        return handler

    # -- build shortcut ------------------------------------------------------

    def build(
        self,
        path: ResolvedPath | None,
        criterion: FilterCriterion,
    ) -> PredicateNode:
        """Look up the handler for the criterion's operator and build its node."""
        return self.resolve(criterion.operator).build(path, criterion)
