"""
Querying exception hierarchy.

All exceptions inherit from ``QueryingError`` and provide ``to_dict()``
for API-friendly error responses.  Coercion errors also inherit from the
matching built-in (``ValueError``, ``OverflowError``, ``TypeError``) so
callers that only know the standard library still catch them.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any


class QueryingError(Exception):
    """Base exception for all querying errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


class CoercionError(QueryingError):
    """A literal could not be converted into a property's type."""

    code = "COERCION_ERROR"

    def __init__(self, value: Any, target_type: Any, message: str) -> None:
        self.value = value
        self.target_type = target_type
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": str(self),
            "value": repr(self.value),
            "target_type": getattr(self.target_type, "__name__", str(self.target_type)),
        }


class CoercionFormatError(CoercionError, ValueError):
    """The literal's text cannot be parsed into the target type."""

    code = "FORMAT_ERROR"


class CoercionOverflowError(CoercionError, OverflowError):
    """The literal lies outside the target type's representable range."""

    code = "OVERFLOW_ERROR"


class UnsupportedConversionError(CoercionError, TypeError):
    """No conversion path exists from the literal's type to the target."""

    code = "UNSUPPORTED_CONVERSION"


# ---------------------------------------------------------------------------
# Filter construction
# ---------------------------------------------------------------------------


class InvalidFilterError(QueryingError, ValueError):
    """A filter, sort or paging description is structurally invalid."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "INVALID_FILTER",
            "message": self.message,
            "path": self.path,
        }


class OperatorNotFoundError(InvalidFilterError):
    """
    Unknown operator specified.

    Provides fuzzy-matched suggestions for likely intended operators.
    """

    def __init__(
        self,
        operator: str,
        valid_operators: list[str],
        path: str | None = None,
    ) -> None:
        self.operator = operator
        self.valid_operators = valid_operators
        self.suggestions = get_close_matches(operator, valid_operators, n=3, cutoff=0.6)

        message = f"Unknown operator: '{operator}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        message += f" Valid operators: {', '.join(sorted(valid_operators))}"
        super().__init__(message, path=path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "OPERATOR_NOT_FOUND",
            "operator": self.operator,
            "suggestions": self.suggestions,
            "valid_operators": sorted(self.valid_operators),
        }


class UnsupportedOperationError(QueryingError):
    """The operator cannot be applied to the supplied values (e.g. a null range bound)."""

    def __init__(self, operator: Any, message: str) -> None:
        self.operator = operator
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_OPERATION",
            "operator": getattr(self.operator, "value", str(self.operator)),
            "message": str(self),
        }


class MissingArgumentError(QueryingError, ValueError):
    """A required argument was ``None``."""

    def __init__(self, argument: str, message: str | None = None) -> None:
        self.argument = argument
        super().__init__(message or f"'{argument}' is required")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "MISSING_ARGUMENT",
            "argument": self.argument,
            "message": str(self),
        }


class HandlerResolutionError(QueryingError):
    """
    Operator/handler mismatch.

    Raised when no handler, or more than one, services an operator, or
    when a handler is invoked for an operator outside its declared set.
    This is a programming error, not a user-facing one.
    """
