"""
Text -> value coercion for single environment values.

``coerce_value`` mirrors the type dispatch of the binder: decode capability
first, then str / bool / duration / int / float, then sequences and
mappings. Record-shaped targets are reported as not handled so the caller
can recurse into them instead.
"""
from __future__ import annotations

import functools
import re
import struct
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Tuple, get_origin

from pydantic import TypeAdapter, ValidationError

from .errors import ConversionError, DecodeError, SequenceElementError, UnsupportedTypeError
from .fields import is_mapping_type, is_record_type, sequence_element_type
from .types import FloatWidth, IntWidth, is_text_decodable, type_name, unwrap_annotated, unwrap_optional

_TRUE = {"1", "t", "true"}
_FALSE = {"0", "f", "false"}

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")

# nanoseconds per unit
_DURATION_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
# durations are bounded to a signed 64-bit nanosecond count
_DURATION_MAX_NS = (1 << 63) - 1
_DURATION_MIN_NS = -(1 << 63)
_DURATION_PART_RE = re.compile(r"([0-9]*(?:\.[0-9]*)?)([^0-9.]+)")


def parse_bool(text: str) -> bool:
    v = text.lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ConversionError(f"invalid boolean {text!r}")


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration literal such as ``300ms``, ``-1.5h`` or ``2h45m``.

    A sequence of decimal numbers, each with an optional fraction and a unit
    suffix (ns, us/µs, ms, s, m, h). A bare ``0`` is accepted.
    """
    s = text
    sign = 1
    if s[:1] in ("-", "+"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]

    if s == "0":
        return timedelta(0)
    if not s:
        raise ConversionError(f"invalid duration {text!r}")

    total = Decimal(0)
    pos = 0
    while pos < len(s):
        m = _DURATION_PART_RE.match(s, pos)
        if m is None or m.group(1) in ("", "."):
            raise ConversionError(f"invalid duration {text!r}")
        unit = _DURATION_UNITS.get(m.group(2))
        if unit is None:
            raise ConversionError(f"unknown unit {m.group(2)!r} in duration {text!r}")
        try:
            total += Decimal(m.group(1)) * unit
        except InvalidOperation as exc:
            raise ConversionError(f"invalid duration {text!r}") from exc
        pos = m.end()

    total *= sign
    if not (_DURATION_MIN_NS <= total <= _DURATION_MAX_NS):
        raise ConversionError(f"invalid duration {text!r}: out of range")
    try:
        return timedelta(microseconds=float(total / 1000))
    except OverflowError as exc:
        raise ConversionError(f"invalid duration {text!r}: out of range") from exc


def parse_int(text: str, width: IntWidth | None = None) -> int:
    signed = width is None or width.signed
    if not (_INT_RE if signed else _UINT_RE).fullmatch(text):
        raise ConversionError(f"invalid {'integer' if signed else 'unsigned integer'} {text!r}")
    value = int(text)
    if width is not None and not (width.min_value <= value <= width.max_value):
        raise ConversionError(f"value {text!r} out of range for {width.bits}-bit field")
    return value


def parse_float(text: str, width: FloatWidth | None = None) -> float:
    if text != text.strip() or "_" in text:
        raise ConversionError(f"invalid float {text!r}")
    try:
        value = float(text)
    except ValueError as exc:
        raise ConversionError(f"invalid float {text!r}") from exc
    if width is not None and width.bits == 32:
        try:
            value = struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError as exc:
            raise ConversionError(f"value {text!r} out of range for 32-bit field") from exc
    return value


def decode_with(tp: Any, text: str) -> Any:
    """Build a fresh ``tp`` and let it parse ``text`` itself."""
    obj = tp()
    try:
        obj.decode_text(text)
    except Exception as exc:
        raise DecodeError(str(exc)) from exc
    return obj


def _marker(extras: tuple, kind: type) -> Any:
    for x in extras:
        if isinstance(x, kind):
            return x
    return None


def coerce_scalar(tp: Any, text: str) -> Tuple[Any, bool]:
    """
    Returns ``(value, handled)``. ``handled`` is False only for record-shaped
    targets. Raises ``ConversionError`` for malformed text or unsupported types.
    """
    tp, _ = unwrap_optional(tp)
    base, extras = unwrap_annotated(tp)

    if is_text_decodable(base):
        return decode_with(base, text), True

    if isinstance(base, type):
        if issubclass(base, str):
            return base(text), True
        if issubclass(base, bool):
            return parse_bool(text), True
        if issubclass(base, timedelta):
            return parse_duration(text), True
        if issubclass(base, int):
            value = parse_int(text, _marker(extras, IntWidth))
            return (value if base is int else _construct(base, value)), True
        if issubclass(base, float):
            value = parse_float(text, _marker(extras, FloatWidth))
            return (value if base is float else _construct(base, value)), True
        if is_record_type(base):
            return None, False

    raise UnsupportedTypeError(f"unsupported {type_name(tp)}")


def _construct(tp: type, value: Any) -> Any:
    try:
        return tp(value)
    except (TypeError, ValueError) as exc:
        raise ConversionError(f"invalid {tp.__name__} {value!r}") from exc


def split_values(text: str, sep: str) -> list:
    if sep == "":
        return list(text)
    return text.split(sep)


def coerce_sequence(tp: Any, text: str, array_separator: str) -> Any:
    """Split ``text`` and coerce each part to the element type; None when nothing to set."""
    elem = sequence_element_type(tp)
    parts = split_values(text, array_separator)
    if not parts:
        return None

    out = []
    for i, part in enumerate(parts):
        try:
            value, handled = coerce_value(elem, part, array_separator)
        except ConversionError as exc:
            raise SequenceElementError(i, exc) from exc
        if not handled:
            raise SequenceElementError(i, UnsupportedTypeError(f"unsupported {type_name(elem)}"))
        out.append(value)

    base = unwrap_annotated(tp)[0]
    return tuple(out) if (base is tuple or get_origin(base) is tuple) else out


@functools.lru_cache(maxsize=256)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


def coerce_mapping(tp: Any, text: str) -> Any:
    """Parse ``text`` as a JSON object into the mapping type ``tp``."""
    try:
        return _adapter(tp).validate_json(text)
    except ValidationError as exc:
        raise ConversionError(f"invalid mapping literal: {exc.errors(include_url=False)[0]['msg']}") from exc


def coerce_value(tp: Any, text: str, array_separator: str) -> Tuple[Any, bool]:
    tp, _ = unwrap_optional(tp)
    base, _ = unwrap_annotated(tp)

    if is_text_decodable(base):
        return decode_with(base, text), True
    if sequence_element_type(base) is not None:
        value = coerce_sequence(base, text, array_separator)
        return value, value is not None
    if is_mapping_type(base):
        return coerce_mapping(base, text), True
    return coerce_scalar(tp, text)
