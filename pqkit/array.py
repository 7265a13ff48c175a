"""Text-format PostgreSQL arrays: parsing and one-dimensional typed arrays."""

from __future__ import annotations

import math
import re
import struct
from decimal import Decimal
from typing import Any, Callable, Optional, Sequence

__all__ = [
    "ArrayError",
    "PgArray",
    "BoolArray",
    "ByteaArray",
    "Float64Array",
    "Float32Array",
    "Int64Array",
    "Int32Array",
    "StringArray",
    "parse_array",
    "scan_linear_array",
    "quote_array_element",
]

_LBRACE = ord("{")
_RBRACE = ord("}")
_QUOTE = ord('"')
_BACKSLASH = ord("\\")

_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)
_INT_RE = re.compile(r"[+-]?[0-9]+")


class ArrayError(ValueError):
    """Raised when an array value cannot be parsed or converted."""


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8", "surrogateescape")
    return bytes(value)


def _quote_char(c: int) -> str:
    if c == ord("'"):
        return "'\\''"
    if c == _BACKSLASH:
        return "'\\\\'"
    if 0x20 <= c < 0x7F:
        return f"'{chr(c)}'"
    return f"'\\x{c:02x}'"


def _go_quote(raw: Optional[bytes]) -> str:
    text = "" if raw is None else raw.decode("utf-8", "surrogateescape")
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _format_dims(dims: Sequence[int]) -> str:
    return "[" + "][".join(str(d) for d in dims) + "]"


def _unexpected(src: bytes, i: int) -> ArrayError:
    return ArrayError(
        f"pq: unable to parse array; unexpected {_quote_char(src[i])} at offset {i}"
    )


def parse_array(src, delimiter=b",") -> tuple[list[int], list[Optional[bytes]]]:
    """Return the dimensions and elements of a backend text-format array.

    Whitespace around brackets and delimiters is significant and NULL is
    case-sensitive; NULL elements come back as None.
    """
    src = _as_bytes(src)
    delim = _as_bytes(delimiter)
    n = len(src)
    elems: list[Optional[bytes]] = []
    dims: list[int] = []
    depth = 0
    i = 0

    if n < 1 or src[0] != _LBRACE:
        raise ArrayError("pq: unable to parse array; expected '{' at offset 0")

    empty = False
    while i < n:
        if src[i] == _LBRACE:
            depth += 1
            i += 1
        elif src[i] == _RBRACE:
            empty = True
            break
        else:
            break

    if not empty:
        dims = [0] * i
        while True:
            # One element, possibly preceded by opening brackets.
            while i < n:
                c = src[i]
                if c == _LBRACE:
                    if depth == len(dims):
                        break
                    depth += 1
                    dims[depth - 1] = 0
                    i += 1
                elif c == _QUOTE:
                    elem = bytearray()
                    escape = False
                    closed = False
                    i += 1
                    while i < n:
                        ch = src[i]
                        if escape:
                            elem.append(ch)
                            escape = False
                        elif ch == _BACKSLASH:
                            escape = True
                        elif ch == _QUOTE:
                            elems.append(bytes(elem))
                            i += 1
                            closed = True
                            break
                        else:
                            elem.append(ch)
                        i += 1
                    if closed:
                        break
                else:
                    start = i
                    found = False
                    while i < n:
                        if src.startswith(delim, i) or src[i] == _RBRACE:
                            raw = src[start:i]
                            if not raw:
                                raise _unexpected(src, i)
                            elems.append(None if raw == b"NULL" else raw)
                            found = True
                            break
                        i += 1
                    if found:
                        break

            restart = False
            while i < n:
                if src.startswith(delim, i) and depth > 0:
                    dims[depth - 1] += 1
                    i += len(delim)
                    restart = True
                    break
                if src[i] == _RBRACE and depth > 0:
                    dims[depth - 1] += 1
                    depth -= 1
                    i += 1
                else:
                    raise _unexpected(src, i)
            if not restart:
                break

    while i < n:
        if src[i] == _RBRACE and depth > 0:
            depth -= 1
            i += 1
        else:
            raise _unexpected(src, i)

    if depth > 0:
        raise ArrayError(f"pq: unable to parse array; expected '}}' at offset {i}")
    if any(d and len(elems) % d for d in dims):
        raise ArrayError(
            "pq: multidimensional arrays must have elements with matching dimensions"
        )
    return dims, elems


def scan_linear_array(src, delimiter, type_name) -> list[Optional[bytes]]:
    """Parse a one-dimensional array, rejecting multidimensional input."""
    dims, elems = parse_array(src, delimiter)
    if len(dims) > 1:
        raise ArrayError(
            f"pq: cannot convert ARRAY{_format_dims(dims)} to {type_name}"
        )
    return elems


def quote_array_element(value) -> str:
    """Double-quote an array element, escaping quotes and backslashes."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        text = bytes(value).decode("utf-8", "surrogateescape")
    else:
        text = value
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _to_float32(x: float) -> float:
    try:
        return struct.unpack(">f", struct.pack(">f", x))[0]
    except OverflowError:
        return math.copysign(math.inf, x)


def _parse_float(raw: Optional[bytes], bits: int) -> float:
    text = "" if raw is None else raw.decode("utf-8", "surrogateescape")
    if not _FLOAT_RE.fullmatch(text):
        raise ValueError(f"parsing {_go_quote(raw)}: invalid syntax")
    value = float(text)
    if bits == 32:
        value = _to_float32(value)
    if math.isinf(value) and "inf" not in text.lower():
        raise ValueError(f"parsing {_go_quote(raw)}: value out of range")
    return value


def _parse_int(raw: Optional[bytes], bits: int) -> int:
    text = "" if raw is None else raw.decode("utf-8", "surrogateescape")
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"parsing {_go_quote(raw)}: invalid syntax")
    value = int(text)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise ValueError(f"parsing {_go_quote(raw)}: value out of range")
    return value


def _format_float(x: float, bits: int) -> str:
    x = float(x)
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "+Inf" if x > 0 else "-Inf"
    if bits == 32:
        x = _to_float32(x)
        if math.isinf(x):
            return "+Inf" if x > 0 else "-Inf"
        text = repr(x)
        for precision in range(1, 10):
            candidate = f"{x:.{precision}g}"
            if _to_float32(float(candidate)) == x:
                text = candidate
                break
    else:
        text = repr(x)
    return format(Decimal(text).normalize(), "f")


def _parse_bytea(raw: bytes) -> bytes:
    if raw.startswith(b"\\x"):
        try:
            return bytes.fromhex(raw[2:].decode("ascii"))
        except ValueError as exc:
            raise ValueError("could not parse bytea value") from exc
    out = bytearray()
    i = 0
    while i < len(raw):
        c = raw[i]
        if c != _BACKSLASH:
            out.append(c)
            i += 1
            continue
        if raw[i + 1:i + 2] == b"\\":
            out.append(_BACKSLASH)
            i += 2
            continue
        digits = raw[i + 1:i + 4]
        if len(digits) != 3 or any(d not in b"01234567" for d in digits):
            raise ValueError("could not parse bytea value")
        value = int(digits, 8)
        if value > 0xFF:
            raise ValueError("could not parse bytea value")
        out.append(value)
        i += 4
    return bytes(out)


class PgArray(list):
    """A one-dimensional PostgreSQL array held as a Python list.

    Subclasses supply how each element is read from and written to text.
    """

    _parse_element: Callable[[int, Optional[bytes]], Any]
    _render_element: Callable[[Any], str]

    def __init_subclass__(cls, *, parse=None, render=None, **kwargs):
        super().__init_subclass__(**kwargs)
        if parse is not None:
            cls._parse_element = staticmethod(parse)
        if render is not None:
            cls._render_element = staticmethod(render)

    @classmethod
    def scan(cls, src):
        """Build an array from its text form; None yields None."""
        if src is None:
            return None
        if isinstance(src, str):
            raw = src.encode("utf-8", "surrogateescape")
        elif isinstance(src, (bytes, bytearray, memoryview)):
            raw = bytes(src)
        else:
            raise ArrayError(
                f"pq: cannot convert {type(src).__name__} to {cls.__name__}"
            )
        elems = scan_linear_array(raw, b",", cls.__name__)
        return cls(cls._parse_element(i, e) for i, e in enumerate(elems))

    def value(self) -> str:
        """Return the array in PostgreSQL text format."""
        return "{" + ",".join(self._render_element(v) for v in self) + "}"


def _parse_bool(index: int, raw: Optional[bytes]) -> bool:
    if raw == b"t":
        return True
    if raw == b"f":
        return False
    raise ArrayError(
        f"pq: could not parse boolean array index {index}: "
        f"invalid boolean {_go_quote(raw)}"
    )


def _numeric_parser(convert: Callable[[Optional[bytes], int], Any], bits: int):
    def parse(index: int, raw: Optional[bytes]):
        try:
            return convert(raw, bits)
        except ValueError as exc:
            raise ArrayError(
                f"pq: parsing array element index {index}: {exc}"
            ) from exc

    return parse


def _parse_bytea_element(index: int, raw: Optional[bytes]) -> Optional[bytes]:
    if raw is None:
        return None
    try:
        return _parse_bytea(raw)
    except ValueError as exc:
        raise ArrayError(f"could not parse bytea array index {index}: {exc}") from exc


def _render_bytea(value) -> str:
    data = b"" if value is None else bytes(value)
    return '"\\\\x' + data.hex() + '"'


def _parse_string(index: int, raw: Optional[bytes]) -> str:
    if raw is None:
        raise ArrayError(
            f"pq: parsing array element index {index}: cannot convert nil to string"
        )
    return raw.decode("utf-8", "surrogateescape")


class BoolArray(PgArray, parse=_parse_bool, render=lambda v: "t" if v else "f"):
    """An array of the PostgreSQL boolean type."""


class ByteaArray(PgArray, parse=_parse_bytea_element, render=_render_bytea):
    """An array of the PostgreSQL bytea type, written in hex format."""


class Float64Array(
    PgArray,
    parse=_numeric_parser(_parse_float, 64),
    render=lambda v: _format_float(v, 64),
):
    """An array of the PostgreSQL double precision type."""


class Float32Array(
    PgArray,
    parse=_numeric_parser(_parse_float, 32),
    render=lambda v: _format_float(v, 32),
):
    """An array of single-precision floats."""


class Int64Array(
    PgArray,
    parse=_numeric_parser(_parse_int, 64),
    render=lambda v: str(int(v)),
):
    """An array of 64-bit PostgreSQL integers."""


class Int32Array(
    PgArray,
    parse=_numeric_parser(_parse_int, 32),
    render=lambda v: str(int(v)),
):
    """An array of 32-bit PostgreSQL integers."""


class StringArray(PgArray, parse=_parse_string, render=quote_array_element):
    """An array of the PostgreSQL character types."""