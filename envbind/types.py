"""
Type vocabulary understood by the binding engine.

Python integers have no width, so fixed-width fields are declared with the
``Annotated`` aliases below (``port: UInt16``). Plain ``int`` stays unbounded.
"""
from __future__ import annotations

import types
from dataclasses import dataclass
from datetime import timedelta
from typing import Annotated, Any, Optional, Protocol, Tuple, Union, get_args, get_origin, runtime_checkable


@dataclass(frozen=True)
class IntWidth:
    bits: int
    signed: bool = True

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1


@dataclass(frozen=True)
class FloatWidth:
    bits: int


Int8 = Annotated[int, IntWidth(8)]
Int16 = Annotated[int, IntWidth(16)]
Int32 = Annotated[int, IntWidth(32)]
Int64 = Annotated[int, IntWidth(64)]

UInt8 = Annotated[int, IntWidth(8, signed=False)]
UInt16 = Annotated[int, IntWidth(16, signed=False)]
UInt32 = Annotated[int, IntWidth(32, signed=False)]
UInt64 = Annotated[int, IntWidth(64, signed=False)]

Float32 = Annotated[float, FloatWidth(32)]
Float64 = Annotated[float, FloatWidth(64)]

Duration = timedelta


@runtime_checkable
class TextDecodable(Protocol):
    """Any type that owns the parsing of its own textual form."""

    def decode_text(self, text: str) -> None:
        ...


def unwrap_annotated(tp: Any) -> Tuple[Any, tuple]:
    """``Annotated[int, IntWidth(8)]`` -> ``(int, (IntWidth(8),))``."""
    if get_origin(tp) is Annotated:
        base, *extras = get_args(tp)
        return base, tuple(extras)
    return tp, ()


def unwrap_optional(tp: Any) -> Tuple[Any, bool]:
    """Strip one ``Optional`` layer: ``Optional[T]`` -> ``(T, True)``."""
    base, extras = unwrap_annotated(tp)
    origin = get_origin(base)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(base) if a is not type(None)]
        if len(args) == 1 and len(get_args(base)) == 2:
            return (Annotated[(args[0], *extras)] if extras else args[0]), True
    return tp, False


def runtime_class(tp: Any) -> Optional[type]:
    """The class behind ``tp``, looking through subscripted generics."""
    base, _ = unwrap_annotated(tp)
    origin = get_origin(base)
    if isinstance(origin, type):
        return origin
    if isinstance(base, type):
        return base
    return None


def is_text_decodable(tp: Any) -> bool:
    cls = runtime_class(tp)
    return cls is not None and callable(getattr(cls, "decode_text", None))


def type_name(tp: Any) -> str:
    base, _ = unwrap_annotated(tp)
    if isinstance(base, type) and get_origin(base) is None:
        return base.__name__
    return repr(base).replace("typing.", "")
