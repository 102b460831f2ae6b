"""
Schema descriptors: which members a type exposes and how to read them.

Path resolution never pokes at arbitrary attributes.  Each element type is
described by the first :class:`SchemaProvider` that supports it; the
provider lists the type's members, their declared types and a getter for
each.  A *dynamic* schema accepts any member name (dicts, untyped objects)
and reports its members as ``Any``.

New kinds of element types are supported by writing a provider and
passing it to :class:`~cqrs_ddd_querying.paths.PropertyPathResolver`.
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import inspect
import logging
import sys
import types
import typing
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, ClassVar, Protocol, get_type_hints, runtime_checkable

from pydantic import BaseModel
from pydantic_core import PydanticUndefined

logger = logging.getLogger("cqrs_ddd.querying.schema")

# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MemberInfo:
    """
    One readable member of a type.

    Attributes:
        name: Canonical member name as declared.
        annotation: Declared type, possibly ``Optional``/``Annotated``;
            ``Any`` when unknown.
        getter: Reads the member from an instance.
    """

    name: str
    annotation: Any
    getter: Callable[[Any], Any] = field(compare=False)


@dataclass(frozen=True)
class TypeSchema:
    """Members of a type, or ``dynamic=True`` when any name is accepted."""

    members: Mapping[str, MemberInfo] = field(default_factory=dict)
    dynamic: bool = False

    def lookup(self, name: str) -> MemberInfo | None:
        """
        Find *name*: an exact-case match wins over a case-insensitive one.

        For dynamic schemas an unknown name produces a dynamic member.
        """
        member = self.members.get(name)
        if member is not None:
            return member
        folded = name.casefold()
        for candidate in self.members.values():
            if candidate.name.casefold() == folded:
                return candidate
        if self.dynamic:
            return MemberInfo(name, Any, dynamic_getter(name))
        return None


EMPTY_SCHEMA = TypeSchema()
DYNAMIC_SCHEMA = TypeSchema(dynamic=True)


def attribute_getter(name: str) -> Callable[[Any], Any]:
    def get(obj: Any) -> Any:
        return getattr(obj, name, None)

    return get


def key_getter(name: str) -> Callable[[Any], Any]:
    def get(obj: Any) -> Any:
        return obj.get(name) if isinstance(obj, Mapping) else getattr(obj, name, None)

    return get


class _Missing:
    """Marks a dynamic member the element does not have at all."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def dynamic_getter(name: str) -> Callable[[Any], Any]:
    """
    Read *name* from a mapping (exact key, then case-insensitive) or an
    attribute of any other object.

    An absent key or attribute reads as :data:`MISSING`; a key that is
    present with a ``None`` value reads as ``None``.
    """
    folded = name.casefold()

    def get(obj: Any) -> Any:
        if isinstance(obj, Mapping):
            if name in obj:
                return obj[name]
            for key, value in obj.items():
                if isinstance(key, str) and key.casefold() == folded:
                    return value
            return MISSING
        return getattr(obj, name, MISSING)

    return get


# ---------------------------------------------------------------------------
# Provider protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class SchemaProvider(Protocol):
    """Describes the members of the types it supports."""

    def supports(self, tp: Any) -> bool:
        """Return ``True`` if this provider can describe *tp*."""
        ...

    def schema(self, tp: Any) -> TypeSchema:
        """Describe *tp*.  Only called when ``supports(tp)`` is true."""
        ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_SCALAR_TYPES: tuple[type, ...] = (
    str,
    bytes,
    bytearray,
    int,
    float,
    complex,
    bool,
    decimal.Decimal,
    uuid.UUID,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    Enum,
    list,
    tuple,
    set,
    frozenset,
)


def _safe_type_hints(obj: Any) -> dict[str, Any]:
    try:
        return get_type_hints(obj, include_extras=True)
    except (NameError, TypeError, AttributeError, SyntaxError):
        return _per_member_type_hints(obj)


def _per_member_type_hints(obj: Any) -> dict[str, Any]:
    """
    Resolve annotations one member at a time; only the members whose
    annotation cannot be evaluated become ``Any``.
    """
    owners = reversed(obj.__mro__) if isinstance(obj, type) else (obj,)
    hints: dict[str, Any] = {}
    for owner in owners:
        try:
            raw = inspect.get_annotations(owner)
        except (NameError, TypeError, AttributeError, SyntaxError):
            logger.debug("Cannot read annotations of %r", owner)
            continue
        globalns = getattr(owner, "__globals__", None)
        if globalns is None:
            module = sys.modules.get(getattr(owner, "__module__", None) or "")
            globalns = vars(module) if module is not None else {}
        localns = dict(vars(owner)) if isinstance(owner, type) else None
        for name, annotation in raw.items():
            if not isinstance(annotation, str):
                hints[name] = annotation
                continue
            try:
                hints[name] = eval(annotation, globalns, localns)  # noqa: S307
            except (NameError, TypeError, AttributeError, SyntaxError):
                logger.debug(
                    "Unresolvable annotation %r for %s.%s; treating as Any",
                    annotation,
                    getattr(owner, "__qualname__", owner),
                    name,
                )
                hints[name] = Any
    return hints


def _is_class_var(annotation: Any) -> bool:
    origin = typing.get_origin(annotation)
    if origin is Annotated:
        return _is_class_var(typing.get_args(annotation)[0])
    return annotation is ClassVar or origin is ClassVar


def _property_members(tp: type) -> dict[str, MemberInfo]:
    members: dict[str, MemberInfo] = {}
    for name, attr in inspect.getmembers(tp, lambda a: isinstance(a, property)):
        if name.startswith("_") or attr.fget is None:
            continue
        annotation = _safe_type_hints(attr.fget).get("return", Any)
        members[name] = MemberInfo(name, annotation, attribute_getter(name))
    return members


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class PydanticSchemaProvider:
    """
    Pydantic v2 models: declared fields and computed fields.

    ``Field`` constraints (``ge``, ``le``, ...) are carried as ``Annotated``
    metadata so coercion can enforce them.
    """

    def supports(self, tp: Any) -> bool:
        return isinstance(tp, type) and issubclass(tp, BaseModel)

    def schema(self, tp: Any) -> TypeSchema:
        members: dict[str, MemberInfo] = {}
        for name, info in tp.model_fields.items():
            annotation: Any = info.annotation if info.annotation is not None else Any
            if info.metadata:
                annotation = Annotated[(annotation, *info.metadata)]  # type: ignore[valid-type]
            members[name] = MemberInfo(name, annotation, attribute_getter(name))
        for name, computed in tp.model_computed_fields.items():
            return_type = computed.return_type
            if return_type is PydanticUndefined:
                return_type = Any
            members[name] = MemberInfo(name, return_type, attribute_getter(name))
        return TypeSchema(members)


class DataclassSchemaProvider:
    """Dataclasses: fields with their resolved annotations, plus typed properties."""

    def supports(self, tp: Any) -> bool:
        return isinstance(tp, type) and dataclasses.is_dataclass(tp)

    def schema(self, tp: Any) -> TypeSchema:
        hints = _safe_type_hints(tp)
        members = _property_members(tp)
        for f in dataclasses.fields(tp):
            members[f.name] = MemberInfo(
                f.name, hints.get(f.name, Any), attribute_getter(f.name)
            )
        return TypeSchema(members)


class MappingSchemaProvider:
    """
    Mappings.  ``TypedDict`` classes expose their declared keys; any other
    mapping is dynamic.
    """

    def supports(self, tp: Any) -> bool:
        if typing.is_typeddict(tp):
            return True
        return isinstance(tp, type) and issubclass(tp, Mapping)

    def schema(self, tp: Any) -> TypeSchema:
        if not typing.is_typeddict(tp):
            return DYNAMIC_SCHEMA
        return TypeSchema(
            {
                name: MemberInfo(name, annotation, key_getter(name))
                for name, annotation in _safe_type_hints(tp).items()
            }
        )


class AnnotatedClassSchemaProvider:
    """
    Plain classes: class-level annotations and typed ``property`` getters.

    Scalars and builtin collections have no members.  ``object``,
    ``SimpleNamespace`` and classes that declare nothing fall back to
    dynamic attribute lookup.
    """

    def supports(self, tp: Any) -> bool:
        return isinstance(tp, type)

    def schema(self, tp: Any) -> TypeSchema:
        if tp is object or tp is types.SimpleNamespace:
            return DYNAMIC_SCHEMA
        if issubclass(tp, _SCALAR_TYPES):
            return EMPTY_SCHEMA
        members = _property_members(tp)
        for name, annotation in _safe_type_hints(tp).items():
            if name.startswith("_") or _is_class_var(annotation):
                continue
            members[name] = MemberInfo(name, annotation, attribute_getter(name))
        if not members:
            return DYNAMIC_SCHEMA
        return TypeSchema(members)


def default_schema_providers() -> list[SchemaProvider]:
    """The built-in providers, most specific first."""
    return [
        PydanticSchemaProvider(),
        DataclassSchemaProvider(),
        MappingSchemaProvider(),
        AnnotatedClassSchemaProvider(),
    ]


# ---------------------------------------------------------------------------
# Annotation unwrapping
# ---------------------------------------------------------------------------


def unwrap_annotation(annotation: Any) -> tuple[Any, tuple[Any, ...], bool]:
    """
    Strip ``Annotated`` and ``Optional`` wrappers.

    Returns:
        ``(base_type, metadata, nullable)``.  Unions of more than one
        non-``None`` member are returned as-is.
    """
    metadata: list[Any] = []
    nullable = False
    while True:
        origin = typing.get_origin(annotation)
        if origin is Annotated:
            args = typing.get_args(annotation)
            annotation = args[0]
            metadata.extend(args[1:])
            continue
        if origin is typing.Union or origin is types.UnionType:
            args = typing.get_args(annotation)
            non_null = [arg for arg in args if arg is not type(None)]
            if len(non_null) == 1 and len(args) > 1:
                annotation = non_null[0]
                nullable = True
                continue
        return annotation, tuple(metadata), nullable
