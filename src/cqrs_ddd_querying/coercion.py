"""
Literal → property type coercion.

Filter literals usually arrive as text; before comparison they are
converted to the semantic type of the property they are compared with.
Dispatch is on a :class:`SemanticKind` tag computed from the (unwrapped)
target annotation.  Conversion failures raise one of the
:class:`~cqrs_ddd_querying.exceptions.CoercionError` subclasses.
"""

from __future__ import annotations

import datetime
import decimal
import math
import typing
import uuid
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

import annotated_types

from .exceptions import (
    CoercionFormatError,
    CoercionOverflowError,
    UnsupportedConversionError,
)
from .schema import unwrap_annotation
from .utils import (
    parse_bool,
    parse_date,
    parse_datetime,
    parse_interval,
    parse_time,
    to_text,
)


class SemanticKind(str, Enum):
    """Coarse classification of a property type."""

    ANY = "any"
    IDENTIFIER = "identifier"
    ENUM = "enum"
    STRING = "string"
    INSTANT = "instant"
    DATE = "date"
    TIME = "time"
    DURATION = "duration"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    OTHER = "other"


_NUMERIC_KINDS = frozenset({SemanticKind.INTEGER, SemanticKind.FLOAT, SemanticKind.DECIMAL})

# Order matters: bool before int, Enum before int/str, datetime before date.
_KIND_BY_TYPE: tuple[tuple[type, SemanticKind], ...] = (
    (bool, SemanticKind.BOOLEAN),
    (Enum, SemanticKind.ENUM),
    (uuid.UUID, SemanticKind.IDENTIFIER),
    (str, SemanticKind.STRING),
    (datetime.datetime, SemanticKind.INSTANT),
    (datetime.date, SemanticKind.DATE),
    (datetime.time, SemanticKind.TIME),
    (datetime.timedelta, SemanticKind.DURATION),
    (int, SemanticKind.INTEGER),
    (float, SemanticKind.FLOAT),
    (decimal.Decimal, SemanticKind.DECIMAL),
)


def _runtime_class(annotation: Any) -> Any:
    """``list[int]`` -> ``list``; non-generic annotations are returned as-is."""
    origin = typing.get_origin(annotation)
    return annotation if origin is None else origin


def semantic_kind(target: Any) -> SemanticKind:
    """Classify *target* (``Optional``/``Annotated`` are unwrapped)."""
    base = _runtime_class(unwrap_annotation(target)[0])
    if base is None or base is Any or base is object or not isinstance(base, type):
        return SemanticKind.ANY
    for tp, kind in _KIND_BY_TYPE:
        if issubclass(base, tp):
            return kind
    return SemanticKind.OTHER


def element_type_of(target: Any) -> Any:
    """
    Element type of a collection annotation (``list[X]``, ``tuple[X, ...]``,
    ``set[X]``, ``Sequence[X]``), or ``Any``.
    """
    base = unwrap_annotation(target)[0]
    args = typing.get_args(base)
    if not args or typing.get_origin(base) is None:
        return Any
    if len(args) == 2 and args[1] is Ellipsis:
        return args[0]
    if len(args) == 1:
        return args[0]
    return Any


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", str(tp))


# ---------------------------------------------------------------------------
# Per-kind converters
# ---------------------------------------------------------------------------


def _to_identifier(value: Any, base: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, str):
        try:
            return uuid.UUID(value.strip())
        except ValueError as exc:
            raise CoercionFormatError(
                value, base, f"{value!r} is not a valid identifier"
            ) from exc
    if isinstance(value, bytes | bytearray):
        if len(value) != 16:
            raise CoercionFormatError(
                value, base, f"Identifier bytes must be 16 long, got {len(value)}"
            )
        return uuid.UUID(bytes=bytes(value))
    raise UnsupportedConversionError(
        value, base, f"Cannot convert {type(value).__name__} to an identifier"
    )


def _to_enum(value: Any, base: type[Enum]) -> Enum:
    if isinstance(value, base):
        return value
    if isinstance(value, bool):
        raise UnsupportedConversionError(
            value, base, f"Cannot convert bool to {base.__name__}"
        )
    if isinstance(value, str):
        text = value.strip()
        member = base.__members__.get(text)
        if member is not None:
            return member
        folded = text.casefold()
        for name, candidate in base.__members__.items():
            if name.casefold() == folded:
                return candidate
        for candidate in base:
            if isinstance(candidate.value, str) and candidate.value.casefold() == folded:
                return candidate
        try:
            number = int(text)
        except ValueError:
            raise CoercionFormatError(
                value, base, f"{value!r} is not a member of {base.__name__}"
            ) from None
        return _to_enum(number, base)
    if isinstance(value, int):
        try:
            return base(value)
        except ValueError as exc:
            raise CoercionFormatError(
                value, base, f"{value!r} is not a value of {base.__name__}"
            ) from exc
    raise UnsupportedConversionError(
        value, base, f"Cannot convert {type(value).__name__} to {base.__name__}"
    )


def _parse_text(
    value: Any,
    base: Any,
    parser: Callable[[str], Any],
    label: str,
) -> Any:
    try:
        return parser(value)
    except (ValueError, OverflowError) as exc:
        raise CoercionFormatError(value, base, f"{value!r} is not a valid {label}") from exc


def _to_instant(value: Any, base: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        result: datetime.datetime = _parse_text(value, base, parse_datetime, "datetime")
        return result
    raise UnsupportedConversionError(
        value, base, f"Cannot convert {type(value).__name__} to datetime"
    )


def _to_date(value: Any, base: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        result: datetime.date = _parse_text(value, base, parse_date, "date")
        return result
    raise UnsupportedConversionError(
        value, base, f"Cannot convert {type(value).__name__} to date"
    )


def _to_time(value: Any, base: Any) -> datetime.time:
    if isinstance(value, datetime.time):
        return value
    if isinstance(value, str):
        result: datetime.time = _parse_text(value, base, parse_time, "time")
        return result
    raise UnsupportedConversionError(
        value, base, f"Cannot convert {type(value).__name__} to time"
    )


def _to_duration(value: Any, base: Any) -> datetime.timedelta:
    if isinstance(value, datetime.timedelta):
        return value
    if isinstance(value, str):
        result: datetime.timedelta = _parse_text(value, base, parse_interval, "interval")
        return result
    if isinstance(value, int | float) and not isinstance(value, bool):
        try:
            return datetime.timedelta(seconds=value)
        except OverflowError as exc:
            raise CoercionOverflowError(
                value, base, f"{value!r} seconds is out of range for an interval"
            ) from exc
    raise UnsupportedConversionError(
        value, base, f"Cannot convert {type(value).__name__} to timedelta"
    )


def _to_bool(value: Any, base: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        result: bool = _parse_text(value, base, parse_bool, "boolean")
        return result
    if isinstance(value, int | float | decimal.Decimal):
        return bool(value)
    raise UnsupportedConversionError(
        value, base, f"Cannot convert {type(value).__name__} to bool"
    )


def _integral(value: Any, base: Any, number: float | decimal.Decimal) -> int:
    if isinstance(number, float) and math.isinf(number):
        raise CoercionOverflowError(value, base, f"{value!r} is out of range")
    if isinstance(number, float) and math.isnan(number):
        raise CoercionFormatError(value, base, f"{value!r} is not a number")
    if isinstance(number, decimal.Decimal) and not number.is_finite():
        raise CoercionFormatError(value, base, f"{value!r} is not a finite number")
    if number != int(number):
        raise CoercionFormatError(value, base, f"{value!r} is not an integer")
    return int(number)


def _to_int(value: Any, base: Any) -> int:
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float | decimal.Decimal):
        return _integral(value, base, value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = decimal.Decimal(text)
        except decimal.InvalidOperation as exc:
            raise CoercionFormatError(
                value, base, f"{value!r} is not a valid integer"
            ) from exc
        return _integral(value, base, parsed)
    raise UnsupportedConversionError(
        value, base, f"Cannot convert {type(value).__name__} to int"
    )


def _to_float(value: Any, base: Any) -> float:
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            result = float(text)
        except ValueError as exc:
            raise CoercionFormatError(value, base, f"{value!r} is not a valid number") from exc
        if math.isinf(result) and "inf" not in text.lower():
            raise CoercionOverflowError(value, base, f"{value!r} is out of range for float")
        return result
    if isinstance(value, int | decimal.Decimal):
        try:
            result = float(value)
        except OverflowError as exc:
            raise CoercionOverflowError(
                value, base, f"{value!r} is out of range for float"
            ) from exc
        if math.isinf(result) and not (
            isinstance(value, decimal.Decimal) and value.is_infinite()
        ):
            raise CoercionOverflowError(value, base, f"{value!r} is out of range for float")
        return result
    raise UnsupportedConversionError(
        value, base, f"Cannot convert {type(value).__name__} to float"
    )


def _to_decimal(value: Any, base: Any) -> decimal.Decimal:
    if isinstance(value, decimal.Decimal):
        return value
    if isinstance(value, int | float | str):
        try:
            return decimal.Decimal(str(value).strip())
        except decimal.InvalidOperation as exc:
            raise CoercionFormatError(
                value, base, f"{value!r} is not a valid decimal"
            ) from exc
    raise UnsupportedConversionError(
        value, base, f"Cannot convert {type(value).__name__} to Decimal"
    )


def _to_other(value: Any, base: Any) -> Any:
    try:
        return base(value)
    except (TypeError, ValueError) as exc:
        raise UnsupportedConversionError(
            value, base, f"Cannot convert {type(value).__name__} to {_type_name(base)}"
        ) from exc


_CONVERTERS: dict[SemanticKind, Callable[[Any, Any], Any]] = {
    SemanticKind.IDENTIFIER: _to_identifier,
    SemanticKind.ENUM: _to_enum,
    SemanticKind.STRING: lambda value, _base: to_text(value),
    SemanticKind.INSTANT: _to_instant,
    SemanticKind.DATE: _to_date,
    SemanticKind.TIME: _to_time,
    SemanticKind.DURATION: _to_duration,
    SemanticKind.BOOLEAN: _to_bool,
    SemanticKind.INTEGER: _to_int,
    SemanticKind.FLOAT: _to_float,
    SemanticKind.DECIMAL: _to_decimal,
    SemanticKind.OTHER: _to_other,
}


# ---------------------------------------------------------------------------
# Range constraints
# ---------------------------------------------------------------------------


def _flatten_metadata(metadata: Iterable[Any]) -> list[Any]:
    flat: list[Any] = []
    for item in metadata:
        if isinstance(item, annotated_types.GroupedMetadata):
            flat.extend(item)
        else:
            flat.append(item)
    return flat


def _check_bounds(
    original: Any,
    result: Any,
    target: Any,
    metadata: tuple[Any, ...],
) -> None:
    for constraint in _flatten_metadata(metadata):
        if isinstance(constraint, annotated_types.Ge):
            ok = result >= constraint.ge
        elif isinstance(constraint, annotated_types.Gt):
            ok = result > constraint.gt
        elif isinstance(constraint, annotated_types.Le):
            ok = result <= constraint.le
        elif isinstance(constraint, annotated_types.Lt):
            ok = result < constraint.lt
        else:
            continue
        if not ok:
            raise CoercionOverflowError(
                original,
                target,
                f"{original!r} is out of range for {_type_name(target)} "
                f"({constraint!r})",
            )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def coerce(value: Any, target_type: Any) -> Any:
    """
    Convert *value* into *target_type*.

    ``None`` passes through; a value already of the target type is returned
    unchanged (``bool`` does not count as an integer).  Numeric results are
    checked against ``annotated_types`` bounds on the annotation.

    Raises:
        CoercionFormatError: The text cannot be parsed.
        CoercionOverflowError: The value is outside the target's range.
        UnsupportedConversionError: No conversion path exists.
    """
    if value is None:
        return None
    annotation, metadata, _nullable = unwrap_annotation(target_type)
    base = _runtime_class(annotation)
    kind = semantic_kind(base)
    if kind is SemanticKind.ANY:
        return value

    if isinstance(value, base) and not (
        (kind is SemanticKind.INTEGER and isinstance(value, bool))
        or (kind is SemanticKind.DATE and isinstance(value, datetime.datetime))
    ):
        result = value
    else:
        result = _CONVERTERS[kind](value, base)

    if kind in _NUMERIC_KINDS and metadata:
        _check_bounds(value, result, base, metadata)
    return result


def coerce_many(values: Iterable[Any], target_type: Any) -> tuple[Any, ...]:
    """Coerce each value; the first failure propagates."""
    return tuple(coerce(value, target_type) for value in values)
