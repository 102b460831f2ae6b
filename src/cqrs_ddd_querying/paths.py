"""
Property path resolution.

A path such as ``"supplier.address.city"`` is resolved once per element
type into a :class:`ResolvedPath`: the canonical member names, the
declared type of the final member and a null-safe getter.  Resolution is
schema-driven (see :mod:`cqrs_ddd_querying.schema`) and case-insensitive.
"""

from __future__ import annotations

import logging
import typing
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .cache import IMemoCache, InMemoryMemoCache
from .schema import (
    DYNAMIC_SCHEMA,
    EMPTY_SCHEMA,
    MISSING,
    SchemaProvider,
    TypeSchema,
    default_schema_providers,
    unwrap_annotation,
)

logger = logging.getLogger("cqrs_ddd.querying.paths")


@dataclass(frozen=True)
class ResolvedPath:
    """
    A property path bound to an element type.

    Calling the instance reads the value from an element; a ``None`` or
    an absent dynamic member anywhere along the chain yields ``None``.
    :meth:`read` keeps the two apart by returning
    :data:`~cqrs_ddd_querying.schema.MISSING` for an absent member.
    """

    segments: tuple[str, ...]
    annotation: Any
    getter: Callable[[Any], Any] = field(compare=False, repr=False)

    @property
    def path(self) -> str:
        return ".".join(self.segments)

    @property
    def value_type(self) -> Any:
        """The declared type with ``Optional``/``Annotated`` stripped."""
        return unwrap_annotation(self.annotation)[0]

    def __call__(self, element: Any) -> Any:
        value = self.getter(element)
        return None if value is MISSING else value

    def read(self, element: Any) -> Any:
        """Like calling the path, but an absent dynamic member reads as ``MISSING``."""
        return self.getter(element)


def split_path(path: str) -> list[str]:
    """Split on ``.``, trimming whitespace and dropping empty segments."""
    return [segment.strip() for segment in path.split(".") if segment.strip()]


def _chain(getters: Sequence[Callable[[Any], Any]]) -> Callable[[Any], Any]:
    if len(getters) == 1:
        only = getters[0]

        def get_one(element: Any) -> Any:
            return element if element is None or element is MISSING else only(element)

        return get_one

    def get(element: Any) -> Any:
        current = element
        for getter in getters:
            if current is None or current is MISSING:
                return current
            current = getter(current)
        return current

    return get


class PropertyPathResolver:
    """
    Resolves dotted property paths against element types.

    Args:
        providers: Schema providers, consulted in order; the first that
            supports a type describes it.  Defaults to
            :func:`~cqrs_ddd_querying.schema.default_schema_providers`.
        cache: Memoization cache for resolved paths and schemas.

    Usage::

        resolver = PropertyPathResolver()
        resolved = resolver.resolve(Order, "customer.name")
        if resolved is not None:
            name = resolved(order)
    """

    def __init__(
        self,
        providers: Sequence[SchemaProvider] | None = None,
        cache: IMemoCache | None = None,
    ) -> None:
        self._providers = (
            list(providers) if providers is not None else default_schema_providers()
        )
        self._cache = cache if cache is not None else InMemoryMemoCache()

    @property
    def providers(self) -> list[SchemaProvider]:
        return list(self._providers)

    def resolve(self, element_type: Any, path: str | None) -> ResolvedPath | None:
        """
        Resolve *path* against *element_type*.

        Returns:
            The resolved path, or ``None`` if any segment names no member.
            Unresolvable paths are not errors.
        """
        if path is None:
            return None
        key = ("path", element_type, path)
        try:
            hash(key)
        except TypeError:
            return self._resolve(element_type, path)
        result: ResolvedPath | None = self._cache.get_or_create(
            key, lambda: self._resolve(element_type, path)
        )
        return result

    def schema_for(self, tp: Any) -> TypeSchema:
        """Return the schema describing *tp* (dynamic for unknown types)."""
        base = unwrap_annotation(tp)[0]
        if base is None or base is Any or isinstance(base, typing.TypeVar):
            return DYNAMIC_SCHEMA
        origin = typing.get_origin(base)
        if origin is not None and isinstance(origin, type):
            base = origin
        key = ("schema", base)
        try:
            hash(key)
        except TypeError:
            return self._describe(base)
        schema: TypeSchema = self._cache.get_or_create(key, lambda: self._describe(base))
        return schema

    # -- internals -----------------------------------------------------------

    def _describe(self, tp: Any) -> TypeSchema:
        for provider in self._providers:
            if provider.supports(tp):
                return provider.schema(tp)
        return EMPTY_SCHEMA

    def _resolve(self, element_type: Any, path: str) -> ResolvedPath | None:
        segments = split_path(path)
        if not segments:
            logger.debug("Blank property path %r", path)
            return None

        current: Any = element_type if element_type is not None else Any
        canonical: list[str] = []
        getters: list[Callable[[Any], Any]] = []
        for segment in segments:
            member = self.schema_for(current).lookup(segment)
            if member is None:
                logger.debug(
                    "Property path %r is not resolvable on %s (segment %r)",
                    path,
                    getattr(element_type, "__name__", element_type),
                    segment,
                )
                return None
            canonical.append(member.name)
            getters.append(member.getter)
            current = member.annotation

        return ResolvedPath(tuple(canonical), current, _chain(getters))
