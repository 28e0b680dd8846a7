"""Big-endian data reader and writer used by generated codecs."""

from __future__ import annotations

import struct as _struct
from typing import TYPE_CHECKING

from .serialization import SerializationError

if TYPE_CHECKING:
    from .runtime import TypeRegistry

_SHORT_RANGE = (-0x8000, 0xFFFF)
_INT_RANGE = (-0x80000000, 0xFFFFFFFF)
_LONG_RANGE = (-0x8000000000000000, 0xFFFFFFFFFFFFFFFF)

# Maximum number of payload bits carried by each var-length encoding
_VAR_SHORT_BITS = 16
_VAR_INT_BITS = 32
_VAR_LONG_BITS = 64


def _check_range(value: int, bounds: tuple[int, int], kind: str) -> None:
    low, high = bounds
    if not low <= value <= high:
        raise SerializationError(f"{value} is out of range for {kind}")


def _to_signed(value: int, bits: int) -> int:
    if value >= 1 << (bits - 1):
        return value - (1 << bits)
    return value


class DataWriter:
    """Accumulates values into a byte buffer.

    Integers accept both their signed and unsigned range and are written as
    two's complement, so ``write_short(-1)`` and ``write_short(0xFFFF)`` produce
    the same bytes.
    """

    def __init__(self) -> None:
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def write_bytes(self, data: bytes | bytearray | memoryview) -> None:
        self._buf.extend(data)

    def write_boolean(self, value: bool) -> None:
        self._buf.append(1 if value else 0)

    def write_byte(self, value: int) -> None:
        _check_range(value, (-0x80, 0xFF), "byte")
        self._buf.append(value & 0xFF)

    def write_short(self, value: int) -> None:
        _check_range(value, _SHORT_RANGE, "short")
        self._buf.extend(_struct.pack(">H", value & 0xFFFF))

    def write_int(self, value: int) -> None:
        _check_range(value, _INT_RANGE, "int")
        self._buf.extend(_struct.pack(">I", value & 0xFFFFFFFF))

    def write_unsigned_int(self, value: int) -> None:
        _check_range(value, (0, 0xFFFFFFFF), "unsigned int")
        self._buf.extend(_struct.pack(">I", value))

    def write_float(self, value: float) -> None:
        self._buf.extend(_struct.pack(">f", value))

    def write_double(self, value: float) -> None:
        self._buf.extend(_struct.pack(">d", value))

    def write_utf(self, value: str) -> None:
        encoded = value.encode("utf-8")
        if len(encoded) > 0xFFFF:
            raise SerializationError("string exceeds 65535 encoded bytes")
        self._buf.extend(_struct.pack(">H", len(encoded)))
        self._buf.extend(encoded)

    def write_var_short(self, value: int) -> None:
        _check_range(value, _SHORT_RANGE, "var short")
        self._write_var(value & 0xFFFF)

    def write_var_int(self, value: int) -> None:
        _check_range(value, _INT_RANGE, "var int")
        self._write_var(value & 0xFFFFFFFF)

    def write_var_long(self, value: int) -> None:
        _check_range(value, _LONG_RANGE, "var long")
        self._write_var(value & 0xFFFFFFFFFFFFFFFF)

    def _write_var(self, value: int) -> None:
        # 7 bits per byte, least significant group first, high bit = continue
        while True:
            chunk = value & 0x7F
            value >>= 7
            if value:
                self._buf.append(chunk | 0x80)
            else:
                self._buf.append(chunk)
                return


class DataReader:
    """Reads values written by :class:`DataWriter`.

    Args:
        data: The bytes to read from.
        offset: Starting offset in data.
        types: Registry used to resolve polymorphic fields by type id.
    """

    def __init__(
        self,
        data: bytes | bytearray | memoryview,
        offset: int = 0,
        types: TypeRegistry | None = None,
    ) -> None:
        self._data = memoryview(bytes(data))
        self._o = offset
        self._types = types

    @property
    def offset(self) -> int:
        return self._o

    @property
    def remaining(self) -> int:
        return len(self._data) - self._o

    @property
    def types(self) -> TypeRegistry:
        if self._types is None:
            raise SerializationError("no type registry bound to reader for polymorphic field")
        return self._types

    def _take(self, size: int) -> memoryview:
        if size < 0 or self._o + size > len(self._data):
            raise SerializationError(
                f"unexpected end of data: need {size} bytes at offset {self._o}, "
                f"have {self.remaining}"
            )
        chunk = self._data[self._o : self._o + size]
        self._o += size
        return chunk

    def _unpack(self, fmt: str, size: int) -> int | float:
        return _struct.unpack(fmt, self._take(size))[0]

    def read_bytes(self, size: int) -> bytes:
        return bytes(self._take(size))

    def read_boolean(self) -> bool:
        return self._take(1)[0] != 0

    def read_byte(self) -> int:
        return int(self._unpack(">b", 1))

    def read_unsigned_byte(self) -> int:
        return int(self._unpack(">B", 1))

    def read_short(self) -> int:
        return int(self._unpack(">h", 2))

    def read_unsigned_short(self) -> int:
        return int(self._unpack(">H", 2))

    def read_int(self) -> int:
        return int(self._unpack(">i", 4))

    def read_unsigned_int(self) -> int:
        return int(self._unpack(">I", 4))

    def read_float(self) -> float:
        return float(self._unpack(">f", 4))

    def read_double(self) -> float:
        return float(self._unpack(">d", 8))

    def read_utf(self) -> str:
        size = self.read_unsigned_short()
        return bytes(self._take(size)).decode("utf-8")

    def read_var_short(self) -> int:
        return _to_signed(self._read_var(_VAR_SHORT_BITS), _VAR_SHORT_BITS)

    def read_var_uh_short(self) -> int:
        return self._read_var(_VAR_SHORT_BITS)

    def read_var_int(self) -> int:
        return _to_signed(self._read_var(_VAR_INT_BITS), _VAR_INT_BITS)

    def read_var_uh_int(self) -> int:
        return self._read_var(_VAR_INT_BITS)

    def read_var_long(self) -> int:
        return _to_signed(self._read_var(_VAR_LONG_BITS), _VAR_LONG_BITS)

    def read_var_uh_long(self) -> int:
        return self._read_var(_VAR_LONG_BITS)

    def _read_var(self, bits: int) -> int:
        value = 0
        shift = 0
        while shift < bits:
            byte = self._take(1)[0]
            value |= (byte & 0x7F) << shift
            shift += 7
            if not byte & 0x80:
                return value & ((1 << bits) - 1)
        raise SerializationError(f"var-length value exceeds {bits} bits")
