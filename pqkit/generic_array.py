"""Arrays of any element type and nesting depth, in PostgreSQL text format."""

from __future__ import annotations

import datetime
import math
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Optional

from .array import (
    ArrayError,
    BoolArray,
    ByteaArray,
    Float64Array,
    Int64Array,
    PgArray,
    StringArray,
    parse_array,
    quote_array_element,
)

__all__ = ["Scanner", "GenericArray", "array", "check_named_value"]

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


class Scanner(ABC):
    """An array element that fills itself from one element's raw text.

    ``scan`` receives the element as bytes, or None for NULL. Subclasses may
    override ``array_delimiter`` to change the separator used between elements.
    """

    array_delimiter = ","

    @abstractmethod
    def scan(self, src) -> None:
        """Set this element from raw text, or from None for NULL."""


def _format_dims(dims) -> str:
    return "[" + "][".join(str(d) for d in dims) + "]"


def _is_valuer(value: Any) -> bool:
    return not isinstance(value, type) and callable(getattr(value, "value", None))


def _is_driver_value(value: Any) -> bool:
    if value is None or isinstance(value, (bool, float, str, bytes, bytearray)):
        return True
    if isinstance(value, int):
        return True
    return isinstance(value, (datetime.datetime, datetime.date))


def _convert(value: Any) -> Any:
    """Reduce an element to a plain value, calling ``value()`` on valuers."""
    if _is_valuer(value):
        out = value.value()
        if not _is_driver_value(out):
            raise ArrayError(
                f"pq: non-Value type {type(out).__name__} returned from Value"
            )
        value = out
    elif not _is_driver_value(value):
        raise ArrayError(f"pq: unsupported type {type(value).__name__}")
    if isinstance(value, int) and not isinstance(value, bool):
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise ArrayError(f"pq: integer {value} does not fit in 64 bits")
    return value


def _format_float(x: float) -> str:
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "+Inf" if x > 0 else "-Inf"
    return format(Decimal(repr(x)).normalize(), "f")


def _encode_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, datetime.datetime):
        return value.isoformat(sep=" ")
    return value.isoformat()


def _append_element(value: Any) -> tuple[str, str]:
    """Render one element; return its text and the delimiter that follows it."""
    if isinstance(value, (list, tuple)) and not _is_valuer(value):
        if value:
            return _append_array(value)
        return "", ""

    delimiter = getattr(value, "array_delimiter", ",")
    value = _convert(value)
    if value is None:
        return "NULL", delimiter
    if isinstance(value, (str, bytes, bytearray)):
        return quote_array_element(value), delimiter
    return _encode_scalar(value), delimiter


def _append_array(values) -> tuple[str, str]:
    text, delimiter = _append_element(values[0])
    parts = ["{", text]
    for item in values[1:]:
        parts.append(delimiter)
        text, delimiter = _append_element(item)
        parts.append(text)
    parts.append("}")
    return "".join(parts), delimiter


class GenericArray:
    """Reads and writes arrays of arbitrary elements.

    ``a`` is the list to fill when scanning, or the (possibly nested) list or
    tuple to render. Scanning needs elements that are :class:`Scanner`
    subclasses; ``element_type`` names that class and is otherwise taken from
    the list's first element. With ``fixed`` the list length is part of its
    type and must match the number of scanned elements.
    """

    def __init__(self, a: Any, element_type: Optional[type] = None, fixed: bool = False):
        self.a = a
        self.element_type = element_type
        self.fixed = fixed

    def __repr__(self) -> str:
        return f"GenericArray({self.a!r})"

    def _resolve_element_type(self) -> type:
        if self.element_type is not None:
            return self.element_type
        if self.a:
            return type(self.a[0])
        return object

    def _describe(self, element_type: type) -> str:
        if self.fixed:
            return f"[{len(self.a)}]{element_type.__name__}"
        return f"[]{element_type.__name__}"

    def scan(self, src):
        """Fill the list from an array's text form and return it.

        A NULL source (None) empties a non-fixed destination to None.
        """
        if not isinstance(self.a, list):
            raise ArrayError(
                f"pq: destination {type(self.a).__name__} is not a list"
            )
        element_type = self._resolve_element_type()

        if isinstance(src, (str, bytes, bytearray, memoryview)):
            return self._scan_text(src, element_type)
        if src is None and not self.fixed:
            self.a = None
            return None
        raise ArrayError(
            f"pq: cannot convert {type(src).__name__} to {self._describe(element_type)}"
        )

    def _scan_text(self, src, element_type: type):
        delimiter = getattr(element_type, "array_delimiter", ",")
        dims, elems = parse_array(src, delimiter)

        if len(dims) > 1:
            raise ArrayError(
                f"pq: scanning from multidimensional ARRAY{_format_dims(dims)} "
                "is not implemented"
            )
        if not dims:
            dims = [0]
        if self.fixed and len(self.a) != dims[0]:
            raise ArrayError(
                f"pq: cannot convert ARRAY{_format_dims(dims)} to "
                f"{self._describe(element_type)}"
            )

        values = [
            self._assign(element_type, index, raw) for index, raw in enumerate(elems)
        ]
        self.a[:] = values
        return self.a

    @staticmethod
    def _assign(element_type: type, index: int, raw: Optional[bytes]):
        if not (isinstance(element_type, type) and issubclass(element_type, Scanner)):
            raise ArrayError(
                f"pq: parsing array element index {index}: pq: scanning to "
                f"{element_type.__name__} is not implemented; only Scanner"
            )
        item = element_type()
        try:
            item.scan(raw)
        except (ValueError, TypeError) as exc:
            raise ArrayError(
                f"pq: parsing array element index {index}: {exc}"
            ) from exc
        return item

    def value(self) -> Optional[str]:
        """Return the array in text format, or None when there is no array."""
        if self.a is None:
            return None
        if not isinstance(self.a, (list, tuple)):
            raise ArrayError(
                f"pq: Unable to convert {type(self.a).__name__} to array"
            )
        if not self.a:
            return "{}"
        text, _ = _append_array(self.a)
        return text


def _is_int64(x: Any) -> bool:
    return (
        isinstance(x, int)
        and not isinstance(x, bool)
        and _INT64_MIN <= x <= _INT64_MAX
    )


_TYPED_ARRAYS = (
    (BoolArray, lambda x: isinstance(x, bool)),
    (Int64Array, _is_int64),
    (Float64Array, lambda x: isinstance(x, float)),
    (StringArray, lambda x: isinstance(x, str)),
    (ByteaArray, lambda x: isinstance(x, (bytes, bytearray))),
)


def array(value):
    """Return the best array wrapper for value.

    Arrays already wrapped come back unchanged; a non-empty list whose
    elements are all of one simple type becomes the matching typed array;
    anything else is wrapped in :class:`GenericArray`.
    """
    if isinstance(value, (PgArray, GenericArray)):
        return value
    if isinstance(value, list) and value:
        for cls, accepts in _TYPED_ARRAYS:
            if all(accepts(item) for item in value):
                return cls(value)
    return GenericArray(value)


def check_named_value(value):
    """Convert a list query argument to array text; leave others unchanged.

    Valuers and byte strings are left for the default conversion.
    """
    if _is_valuer(value) or isinstance(value, (bytes, bytearray, memoryview)):
        return value
    if isinstance(value, list):
        return array(value).value()
    return value