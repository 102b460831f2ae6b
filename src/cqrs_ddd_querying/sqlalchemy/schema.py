"""
Schema provider for SQLAlchemy mapped classes.

Column attributes are typed from the column's ``python_type``;
relationships are typed as their target class so that paths such as
``"supplier.name"`` resolve across them.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper

from ..schema import MemberInfo, TypeSchema, attribute_getter


def column_python_type(column: Any) -> Any:
    """The Python type of a column, or ``Any`` when the dialect type has none."""
    try:
        return column.type.python_type
    except NotImplementedError:
        return Any


class MappedClassSchemaProvider:
    """
    Describes declaratively (or imperatively) mapped classes.

    Collection relationships are described by their target class; a path
    through one is compiled to ``EXISTS`` (``.any()``) on the SQL side.
    """

    def supports(self, tp: Any) -> bool:
        if not isinstance(tp, type):
            return False
        return isinstance(sa_inspect(tp, raiseerr=False), Mapper)

    def schema(self, tp: Any) -> TypeSchema:
        mapper: Mapper[Any] = sa_inspect(tp)
        members: dict[str, MemberInfo] = {}
        for prop in mapper.column_attrs:
            members[prop.key] = MemberInfo(
                prop.key, column_python_type(prop.columns[0]), attribute_getter(prop.key)
            )
        for rel in mapper.relationships:
            members[rel.key] = MemberInfo(
                rel.key, rel.mapper.class_, attribute_getter(rel.key)
            )
        return TypeSchema(members)
