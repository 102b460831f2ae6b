from __future__ import annotations

from enum import Enum


class FilterOperator(str, Enum):
    """Operators a filter criterion may carry."""

    # Equality / comparison
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    LT = "lt"
    GE = "ge"
    LE = "le"

    # Range
    BETWEEN = "between"
    NOT_BETWEEN = "not_between"

    # Membership
    IN = "in"
    NOT_IN = "not_in"

    # Containment / string patterns
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"

    # Null checks
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"

    # Pattern match
    REGEX = "regex"

    @classmethod
    def parse(cls, value: FilterOperator | str) -> FilterOperator:
        """
        Normalise *value* into a ``FilterOperator``.

        Accepts members, canonical values (``"ge"``), member names in any
        case (``"NOT_IN"``), symbolic aliases (``">="``) and long names
        (``"GreaterThanOrEqualTo"``).

        Raises:
            ValueError: If the text names no operator.
        """
        if isinstance(value, cls):
            return value
        lowered = str(value).strip().lower()
        alias = _OP_ALIASES.get(lowered)
        if alias is not None:
            return alias
        try:
            return cls(lowered)
        except ValueError:
            raise ValueError(f"{value!r} is not a valid {cls.__name__}") from None


class Conjunction(str, Enum):
    """How the children of a filter group are combined."""

    AND = "and"
    OR = "or"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: SortDirection | str) -> SortDirection:
        if isinstance(value, cls):
            return value
        lowered = str(value).strip().lower()
        if lowered in ("desc", "descending", "-"):
            return cls.DESC
        if lowered in ("asc", "ascending", "+", ""):
            return cls.ASC
        raise ValueError(f"{value!r} is not a valid {cls.__name__}")


# Symbolic and long-form spellings accepted by ``FilterOperator.parse``
_OP_ALIASES: dict[str, FilterOperator] = {
    "=": FilterOperator.EQ,
    "==": FilterOperator.EQ,
    "equalto": FilterOperator.EQ,
    "!=": FilterOperator.NE,
    "<>": FilterOperator.NE,
    "notequalto": FilterOperator.NE,
    ">": FilterOperator.GT,
    "greaterthan": FilterOperator.GT,
    ">=": FilterOperator.GE,
    "gte": FilterOperator.GE,
    "greaterthanorequalto": FilterOperator.GE,
    "<": FilterOperator.LT,
    "lessthan": FilterOperator.LT,
    "lte": FilterOperator.LE,
    "<=": FilterOperator.LE,
    "lessthanorequalto": FilterOperator.LE,
    "notbetween": FilterOperator.NOT_BETWEEN,
    "notin": FilterOperator.NOT_IN,
    "notcontains": FilterOperator.NOT_CONTAINS,
    "starts_with": FilterOperator.STARTSWITH,
    "ends_with": FilterOperator.ENDSWITH,
    "null": FilterOperator.IS_NULL,
    "isnull": FilterOperator.IS_NULL,
    "notnull": FilterOperator.IS_NOT_NULL,
    "not_null": FilterOperator.IS_NOT_NULL,
    "isnotnull": FilterOperator.IS_NOT_NULL,
}
