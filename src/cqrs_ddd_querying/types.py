"""
Fixed-width integer annotations.

Python integers are unbounded; these ``Annotated`` aliases carry the
range of the matching machine type so that coercion can report an
overflow instead of silently accepting an out-of-range literal::

    @dataclass
    class Sensor:
        channel: UInt8
        reading: Int32
"""

from __future__ import annotations

from typing import Annotated

from annotated_types import Interval

Int8 = Annotated[int, Interval(ge=-(2**7), le=2**7 - 1)]
UInt8 = Annotated[int, Interval(ge=0, le=2**8 - 1)]
Int16 = Annotated[int, Interval(ge=-(2**15), le=2**15 - 1)]
UInt16 = Annotated[int, Interval(ge=0, le=2**16 - 1)]
Int32 = Annotated[int, Interval(ge=-(2**31), le=2**31 - 1)]
UInt32 = Annotated[int, Interval(ge=0, le=2**32 - 1)]
Int64 = Annotated[int, Interval(ge=-(2**63), le=2**63 - 1)]
UInt64 = Annotated[int, Interval(ge=0, le=2**64 - 1)]

__all__ = [
    "Int8",
    "UInt8",
    "Int16",
    "UInt16",
    "Int32",
    "UInt32",
    "Int64",
    "UInt64",
]
