"""
Borsh binary writer/reader.

Every protocol value on the wire (transactions, receipts, blocks and the RPC
request/response bodies) uses Borsh:

- integers are fixed width, little-endian (u8/u16/u32/u64/u128)
- bool is a single byte, 0 or 1
- Vec<T>, bytes and String carry a u32 length prefix
- Option<T> is a u8 tag (0 = None, 1 = Some) followed by the value
- enums are a u8 variant index followed by the variant's fields
- maps and sets are a u32 count followed by their entries

The same writer/reader pair is what contract authors use to pack call
arguments and unpack return values:

    w = BinaryWriter()
    w.write_u64(42).write_string("hello")
    args = [w.to_bytes()]

    r = BinaryReader(receipt.return_values)
    count = r.read_u32()
"""

from __future__ import annotations

import struct
from typing import Callable, List, Optional, TypeVar

from ..errors import CodecError
from .bytes import BytesLike

T = TypeVar("T")

_U_FORMATS = {1: "<B", 2: "<H", 4: "<I", 8: "<Q"}


class BinaryWriter:
    """Append-only Borsh encoder. Every write returns the writer for chaining."""

    __slots__ = ("_buf",)

    def __init__(self) -> None:
        self._buf = bytearray()

    def _uint(self, width: int, value: int) -> "BinaryWriter":
        if not isinstance(value, int) or isinstance(value, bool):
            raise CodecError(f"u{width * 8} expects an int, got {type(value).__name__}")
        if value < 0 or value >= 1 << (width * 8):
            raise CodecError(f"value {value} out of range for u{width * 8}")
        self._buf += struct.pack(_U_FORMATS[width], value)
        return self

    def write_u8(self, value: int) -> "BinaryWriter":
        return self._uint(1, value)

    def write_u16(self, value: int) -> "BinaryWriter":
        return self._uint(2, value)

    def write_u32(self, value: int) -> "BinaryWriter":
        return self._uint(4, value)

    def write_u64(self, value: int) -> "BinaryWriter":
        return self._uint(8, value)

    def write_u128(self, value: int) -> "BinaryWriter":
        if not isinstance(value, int) or value < 0 or value >= 1 << 128:
            raise CodecError(f"value {value!r} out of range for u128")
        self._buf += value.to_bytes(16, "little")
        return self

    def write_bool(self, value: bool) -> "BinaryWriter":
        self._buf.append(1 if value else 0)
        return self

    def write_fixed(self, data: BytesLike, length: int) -> "BinaryWriter":
        """Raw bytes with no prefix; *length* is enforced."""
        b = bytes(data)
        if len(b) != length:
            raise CodecError(f"expected {length} bytes, got {len(b)}")
        self._buf += b
        return self

    def write_bytes(self, data: BytesLike) -> "BinaryWriter":
        """Vec<u8>: u32 length prefix then the bytes."""
        b = bytes(data)
        self.write_u32(len(b))
        self._buf += b
        return self

    def write_string(self, value: str) -> "BinaryWriter":
        return self.write_bytes(value.encode("utf-8"))

    def write_option(
        self, value: Optional[T], write: Callable[["BinaryWriter", T], object]
    ) -> "BinaryWriter":
        if value is None:
            self._buf.append(0)
        else:
            self._buf.append(1)
            write(self, value)
        return self

    def write_vec(
        self, items: List[T], write: Callable[["BinaryWriter", T], object]
    ) -> "BinaryWriter":
        self.write_u32(len(items))
        for item in items:
            write(self, item)
        return self

    def to_bytes(self) -> bytes:
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)


class BinaryReader:
    """Cursor-based Borsh decoder over an immutable buffer."""

    __slots__ = ("b", "i", "n")

    def __init__(self, data: BytesLike) -> None:
        self.b = bytes(data)
        self.i = 0
        self.n = len(self.b)

    def read(self, n: int) -> bytes:
        if self.i + n > self.n:
            raise CodecError(
                f"truncated input: need {n} bytes at offset {self.i}, have {self.n - self.i}"
            )
        s = self.b[self.i : self.i + n]
        self.i += n
        return s

    def _uint(self, width: int) -> int:
        return struct.unpack(_U_FORMATS[width], self.read(width))[0]

    def read_u8(self) -> int:
        return self._uint(1)

    def read_u16(self) -> int:
        return self._uint(2)

    def read_u32(self) -> int:
        return self._uint(4)

    def read_u64(self) -> int:
        return self._uint(8)

    def read_u128(self) -> int:
        return int.from_bytes(self.read(16), "little")

    def read_bool(self) -> bool:
        v = self.read_u8()
        if v > 1:
            raise CodecError(f"invalid bool byte {v} at offset {self.i - 1}")
        return v == 1

    def read_fixed(self, length: int) -> bytes:
        return self.read(length)

    def read_bytes(self) -> bytes:
        return self.read(self.read_u32())

    def read_string(self) -> str:
        raw = self.read_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CodecError("invalid UTF-8 string") from e

    def read_option(self, read: Callable[["BinaryReader"], T]) -> Optional[T]:
        tag = self.read_u8()
        if tag == 0:
            return None
        if tag == 1:
            return read(self)
        raise CodecError(f"invalid option tag {tag} at offset {self.i - 1}")

    def read_vec(self, read: Callable[["BinaryReader"], T]) -> List[T]:
        count = self.read_u32()
        return [read(self) for _ in range(count)]

    @property
    def remaining(self) -> int:
        return self.n - self.i

    def finish(self) -> None:
        """Fail if any bytes are left unread."""
        if self.i != self.n:
            raise CodecError(f"extra trailing bytes: {self.n - self.i}")


def decode_exact(data: BytesLike, read: Callable[[BinaryReader], T]) -> T:
    """Decode one value with *read* and require the whole buffer to be consumed."""
    r = BinaryReader(data)
    out = read(r)
    r.finish()
    return out


__all__ = ["BinaryWriter", "BinaryReader", "decode_exact"]
