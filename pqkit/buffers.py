"""Big-endian read and write buffers for frontend/backend protocol messages."""

from __future__ import annotations

import struct

__all__ = ["BufferError", "ReadBuffer", "WriteBuffer"]


class BufferError(ValueError):  # noqa: A001
    """Raised when a message is malformed or too short."""


def _kind_byte(kind) -> int:
    if isinstance(kind, str):
        kind = kind.encode("ascii")
    if isinstance(kind, (bytes, bytearray)):
        if len(kind) != 1:
            raise ValueError(f"message type must be a single byte, got {kind!r}")
        return kind[0]
    if not 0 <= kind <= 0xFF:
        raise ValueError(f"message type out of range: {kind}")
    return kind


class ReadBuffer:
    """Consumes the body of a received message from the front."""

    def __init__(self, data=b""):
        self._data = bytes(data)
        self._pos = 0

    def __len__(self) -> int:
        return len(self._data) - self._pos

    def __bytes__(self) -> bytes:
        return self._data[self._pos:]

    def __repr__(self) -> str:
        return f"ReadBuffer({bytes(self)!r})"

    def next(self, n: int) -> bytes:
        """Take the next n bytes."""
        if n < 0 or n > len(self):
            raise BufferError(
                f"invalid message format; need {n} bytes, have {len(self)}"
            )
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def int32(self) -> int:
        """Take a signed 32-bit integer."""
        return struct.unpack(">i", self.next(4))[0]

    def int16(self) -> int:
        """Take an unsigned 16-bit integer."""
        return struct.unpack(">H", self.next(2))[0]

    def oid(self) -> int:
        """Take an unsigned 32-bit object identifier."""
        return struct.unpack(">I", self.next(4))[0]

    def string(self) -> str:
        """Take a NUL-terminated string."""
        end = self._data.find(b"\x00", self._pos)
        if end < 0:
            raise BufferError("invalid message format; expected string terminator")
        text = self._data[self._pos:end]
        self._pos = end + 1
        return text.decode("utf-8", "surrogateescape")

    def byte(self) -> int:
        """Take one byte."""
        return self.next(1)[0]


class WriteBuffer:
    """Builds one or more length-prefixed messages.

    A buffer starts with a type byte and room for the length; ``next``
    closes the current message and starts another. Startup-style packets,
    which carry no type byte, use type 0 and drop the first byte of ``wrap()``.
    """

    def __init__(self, kind=0):
        self._buf = bytearray((_kind_byte(kind), 0, 0, 0, 0))
        self._pos = 1

    def int32(self, n: int) -> None:
        self._buf += struct.pack(">I", n & 0xFFFFFFFF)

    def int16(self, n: int) -> None:
        self._buf += struct.pack(">H", n & 0xFFFF)

    def string(self, s: str) -> None:
        self._buf += s.encode("utf-8", "surrogateescape") + b"\x00"

    def byte(self, c) -> None:
        self._buf.append(_kind_byte(c))

    def bytes(self, v) -> None:
        self._buf += v

    def _patch_length(self) -> None:
        struct.pack_into(">I", self._buf, self._pos, len(self._buf) - self._pos)

    def wrap(self) -> bytes:
        """Fill in the length of the current message and return all bytes."""
        self._patch_length()
        return bytes(self._buf)

    def next(self, c) -> None:
        """Close the current message and start one of type c."""
        self._patch_length()
        self._pos = len(self._buf) + 1
        self._buf += bytes((_kind_byte(c), 0, 0, 0, 0))