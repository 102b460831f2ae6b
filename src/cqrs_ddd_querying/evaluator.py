"""
In-memory lowering of the predicate IR.

:class:`MemoryPredicateBuilder` turns a :class:`PredicateNode` tree into a
plain ``Callable[[Any], bool]``.  Every leaf reads its property through
the null-safe getter of its :class:`ResolvedPath`.  An element that lacks
a dynamic member altogether (a dict without the key) satisfies any leaf
on that member.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Mapping
from typing import Any

from .ast import (
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
from .coercion import SemanticKind, coerce, semantic_kind
from .exceptions import CoercionError
from .operators import Conjunction, FilterOperator
from .schema import MISSING
from .utils import to_text

Predicate = Callable[[Any], bool]

_NO_MATCH = object()


def _align(literal: Any, actual: Any) -> Any:
    """
    Coerce *literal* to the runtime type of *actual*.

    Used for properties whose declared type is unknown (dicts, untyped
    objects); a literal that cannot be converted never matches.
    """
    if literal is None or actual is None or type(literal) is type(actual):
        return literal
    try:
        return coerce(literal, type(actual))
    except CoercionError:
        return _NO_MATCH


def _is_dynamic(node: Comparison | Range | Membership) -> bool:
    return semantic_kind(node.path.annotation) is SemanticKind.ANY


_ORDERING: dict[FilterOperator, Callable[[Any, Any], bool]] = {
    FilterOperator.GT: lambda a, b: bool(a > b),
    FilterOperator.LT: lambda a, b: bool(a < b),
    FilterOperator.GE: lambda a, b: bool(a >= b),
    FilterOperator.LE: lambda a, b: bool(a <= b),
}


class MemoryPredicateBuilder(PredicateVisitor[Predicate]):
    """
    Lowers IR nodes to Python predicates.

    Usage::

        predicate = MemoryPredicateBuilder().lower(node)
        matches = [item for item in items if predicate(item)]
    """

    def visit_constant(self, node: Constant) -> Predicate:
        value = node.value
        return lambda _element: value

    def visit_comparison(self, node: Comparison) -> Predicate:
        path, literal, op = node.path, node.value, node.operator
        dynamic = _is_dynamic(node)

        if op in (FilterOperator.EQ, FilterOperator.NE):
            negate = op is FilterOperator.NE

            def equals(element: Any) -> bool:
                actual = path.read(element)
                if actual is MISSING:
                    return True
                expected = _align(literal, actual) if dynamic else literal
                result = expected is not _NO_MATCH and bool(actual == expected)
                return result is not negate

            return equals

        compare = _ORDERING[op]

        def ordered(element: Any) -> bool:
            actual = path.read(element)
            if actual is MISSING:
                return True
            if actual is None or literal is None:
                return False
            expected = _align(literal, actual) if dynamic else literal
            if expected is _NO_MATCH:
                return False
            return compare(actual, expected)

        return ordered

    def visit_range(self, node: Range) -> Predicate:
        path, low, high, negated = node.path, node.low, node.high, node.negated
        dynamic = _is_dynamic(node)

        def in_range(element: Any) -> bool:
            actual = path.read(element)
            if actual is MISSING:
                return True
            if actual is None:
                return False
            lo = _align(low, actual) if dynamic else low
            hi = _align(high, actual) if dynamic else high
            if lo is _NO_MATCH or hi is _NO_MATCH:
                return False
            if negated:
                return bool(actual < lo or actual > hi)
            return bool(lo < actual < hi)

        return in_range

    def visit_membership(self, node: Membership) -> Predicate:
        path, values, negated = node.path, node.values, node.negated
        dynamic = _is_dynamic(node)

        def member(element: Any) -> bool:
            actual = path.read(element)
            if actual is MISSING:
                return True
            candidates = [_align(v, actual) for v in values] if dynamic else values
            return (actual in candidates) is not negated

        return member

    def visit_string_match(self, node: StringMatch) -> Predicate:
        path = node.path
        text = node.text.casefold()
        prefix = node.operator is FilterOperator.STARTSWITH

        def matches(element: Any) -> bool:
            actual = path.read(element)
            if actual is MISSING:
                return True
            if actual is None:
                return False
            folded = to_text(actual).casefold()
            return folded.startswith(text) if prefix else folded.endswith(text)

        return matches

    def visit_containment(self, node: Containment) -> Predicate:
        path, value, negated = node.path, node.value, node.negated
        text = node.text.casefold()

        def contains(element: Any) -> bool:
            actual = path.read(element)
            if actual is MISSING:
                return True
            if actual is None:
                found = False
            elif isinstance(actual, str):
                found = text in actual.casefold()
            elif isinstance(actual, Collection) and not isinstance(
                actual, bytes | bytearray | Mapping
            ):
                found = value in actual
            else:
                found = text in to_text(actual).casefold()
            return found is not negated

        return contains

    def visit_null_check(self, node: NullCheck) -> Predicate:
        path, is_null = node.path, node.is_null

        def null_check(element: Any) -> bool:
            actual = path.read(element)
            if actual is MISSING:
                return True
            return (actual is None) is is_null

        return null_check

    def visit_pattern_match(self, node: PatternMatch) -> Predicate:
        path, pattern = node.path, node.pattern

        def search(element: Any) -> bool:
            actual = path.read(element)
            if actual is MISSING:
                return True
            if actual is None:
                return False
            return pattern.search(to_text(actual)) is not None

        return search

    def visit_composite(self, node: Composite) -> Predicate:
        children = [self.lower(child) for child in node.children]
        if not children:
            return lambda _element: True
        if len(children) == 1:
            return children[0]
        if node.conjunction is Conjunction.OR:
            return lambda element: any(child(element) for child in children)
        return lambda element: all(child(element) for child in children)


def build_predicate(node: PredicateNode) -> Predicate:
    """Lower *node* with a fresh :class:`MemoryPredicateBuilder`."""
    return MemoryPredicateBuilder().lower(node)
