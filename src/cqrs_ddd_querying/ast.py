"""
Predicate IR.

Operator handlers turn filter criteria into these nodes; visitors lower
the nodes into something executable (a Python callable in
:mod:`~cqrs_ddd_querying.evaluator`, a SQLAlchemy clause in
:mod:`cqrs_ddd_querying.sqlalchemy.compiler`).

Every node is immutable, carries the :class:`ResolvedPath` it reads from
and literals already coerced into the property's type.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .operators import Conjunction, FilterOperator

if TYPE_CHECKING:
    from .paths import ResolvedPath

R = TypeVar("R")


class PredicateNode(ABC):
    """Base class of all IR nodes."""

    @abstractmethod
    def accept(self, visitor: PredicateVisitor[R]) -> R: ...

    @abstractmethod
    def to_dict(self) -> dict[str, Any]: ...


@dataclass(frozen=True)
class Constant(PredicateNode):
    """A predicate that ignores its input."""

    value: bool

    def accept(self, visitor: PredicateVisitor[R]) -> R:
        return visitor.visit_constant(self)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "constant", "value": self.value}


ALWAYS_TRUE = Constant(True)
ALWAYS_FALSE = Constant(False)


@dataclass(frozen=True)
class Comparison(PredicateNode):
    """``path <op> value`` for ``eq``, ``ne``, ``gt``, ``lt``, ``ge``, ``le``."""

    path: ResolvedPath
    operator: FilterOperator
    value: Any

    def accept(self, visitor: PredicateVisitor[R]) -> R:
        return visitor.visit_comparison(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "comparison",
            "path": self.path.path,
            "op": self.operator.value,
            "value": self.value,
        }


@dataclass(frozen=True)
class Range(PredicateNode):
    """
    Exclusive range test.

    ``low < v < high``, or ``v < low or v > high`` when negated.
    """

    path: ResolvedPath
    low: Any
    high: Any
    negated: bool = False

    def accept(self, visitor: PredicateVisitor[R]) -> R:
        return visitor.visit_range(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "range",
            "path": self.path.path,
            "low": self.low,
            "high": self.high,
            "negated": self.negated,
        }


@dataclass(frozen=True)
class Membership(PredicateNode):
    path: ResolvedPath
    values: tuple[Any, ...]
    negated: bool = False

    def accept(self, visitor: PredicateVisitor[R]) -> R:
        return visitor.visit_membership(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "membership",
            "path": self.path.path,
            "values": list(self.values),
            "negated": self.negated,
        }


@dataclass(frozen=True)
class StringMatch(PredicateNode):
    """Case-insensitive prefix (``startswith``) or suffix (``endswith``) test."""

    path: ResolvedPath
    operator: FilterOperator
    text: str

    def accept(self, visitor: PredicateVisitor[R]) -> R:
        return visitor.visit_string_match(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "string_match",
            "path": self.path.path,
            "op": self.operator.value,
            "text": self.text,
        }


@dataclass(frozen=True)
class Containment(PredicateNode):
    """
    Substring (string properties) or element membership (collections).

    Attributes:
        value: The literal, coerced to the element type for collections.
        text: String form of the literal used for substring tests.
        negated: ``not_contains``.  The negation of the whole test, so a
            ``None`` property value satisfies it.
    """

    path: ResolvedPath
    value: Any
    text: str
    negated: bool = False

    def accept(self, visitor: PredicateVisitor[R]) -> R:
        return visitor.visit_containment(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "containment",
            "path": self.path.path,
            "value": self.value,
            "negated": self.negated,
        }


@dataclass(frozen=True)
class NullCheck(PredicateNode):
    path: ResolvedPath
    is_null: bool = True

    def accept(self, visitor: PredicateVisitor[R]) -> R:
        return visitor.visit_null_check(self)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "null_check", "path": self.path.path, "is_null": self.is_null}


@dataclass(frozen=True)
class PatternMatch(PredicateNode):
    """``re.search`` of ``pattern`` over the property's string form."""

    path: ResolvedPath
    pattern: re.Pattern[str]

    def accept(self, visitor: PredicateVisitor[R]) -> R:
        return visitor.visit_pattern_match(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "pattern_match",
            "path": self.path.path,
            "pattern": self.pattern.pattern,
        }


@dataclass(frozen=True)
class Composite(PredicateNode):
    """AND / OR over child nodes.  No children means ``True``."""

    conjunction: Conjunction
    children: tuple[PredicateNode, ...]

    def accept(self, visitor: PredicateVisitor[R]) -> R:
        return visitor.visit_composite(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "composite",
            "op": self.conjunction.value,
            "children": [child.to_dict() for child in self.children],
        }


class PredicateVisitor(ABC, Generic[R]):
    """
    Lowers IR nodes into a target representation.

    Implementations provide one ``visit_*`` method per node type.
    """

    def lower(self, node: PredicateNode) -> R:
        return node.accept(self)

    @abstractmethod
    def visit_constant(self, node: Constant) -> R: ...

    @abstractmethod
    def visit_comparison(self, node: Comparison) -> R: ...

    @abstractmethod
    def visit_range(self, node: Range) -> R: ...

    @abstractmethod
    def visit_membership(self, node: Membership) -> R: ...

    @abstractmethod
    def visit_string_match(self, node: StringMatch) -> R: ...

    @abstractmethod
    def visit_containment(self, node: Containment) -> R: ...

    @abstractmethod
    def visit_null_check(self, node: NullCheck) -> R: ...

    @abstractmethod
    def visit_pattern_match(self, node: PatternMatch) -> R: ...

    @abstractmethod
    def visit_composite(self, node: Composite) -> R: ...
