"""Byte order conversion helpers."""

from __future__ import annotations

import struct
from enum import Enum

_U16 = 0xFFFF
_U32 = 0xFFFFFFFF
_U64 = 0xFFFFFFFFFFFFFFFF

_PROBE_BYTES = bytes([0x12, 0x34, 0x56, 0x78, 0x9A, 0xBC, 0xDE, 0xF0])
_BIG_ENDIAN_VALUE = 0x123456789ABCDEF0
_LITTLE_ENDIAN_VALUE = 0xF0DEBC9A78563412


class InvalidArgumentError(ValueError):
    """Raised when a swap is requested with an unusable group size."""

    pass


class EndianType(Enum):
    """Byte order of the machine."""

    NONE = "none"
    LITTLE_ENDIAN = "little"
    BIG_ENDIAN = "big"


def swap_u16(value: int) -> int:
    """Swap the two bytes of an unsigned 16-bit value."""
    value &= _U16
    return (value >> 8) | ((value & 0xFF) << 8)


def swap_u32(value: int) -> int:
    """Reverse the four bytes of an unsigned 32-bit value."""
    value &= _U32
    return (
        (value >> 24)
        | ((value >> 8) & 0xFF00)
        | ((value & 0xFF00) << 8)
        | ((value & 0xFF) << 24)
    )


def swap_u64(value: int) -> int:
    """Reverse the eight bytes of an unsigned 64-bit value."""
    value &= _U64
    return (
        (value >> 56)
        | ((value >> 40) & 0xFF00)
        | ((value >> 24) & 0xFF0000)
        | ((value >> 8) & 0xFF000000)
        | ((value & 0xFF000000) << 8)
        | ((value & 0xFF0000) << 24)
        | ((value & 0xFF00) << 40)
        | ((value & 0xFF) << 56)
    )


def swap_buffer(data: bytes | bytearray | memoryview, group_size: int) -> bytes:
    """Reverse the byte order inside each ``group_size``-byte group of ``data``.

    Groups keep their position. When ``len(data)`` is not a multiple of
    ``group_size`` the trailing bytes form a shorter group that is
    reversed the same way. The input is left untouched.

    Args:
        data: Bytes to convert.
        group_size: Width of one value in bytes, at least 2.

    Returns:
        A new bytes object of the same length.

    Raises:
        InvalidArgumentError: If ``group_size`` is less than 2.
    """
    if group_size < 2:
        raise InvalidArgumentError(f"group_size must be at least 2, got {group_size}")
    src = bytes(data)
    result = bytearray(len(src))
    for start in range(0, len(src), group_size):
        group = src[start:start + group_size]
        result[start:start + len(group)] = group[::-1]
    return bytes(result)


def machine_endian() -> EndianType:
    """Detect the byte order by reading a known pattern as a native 64-bit value."""
    (value,) = struct.unpack("=Q", _PROBE_BYTES)
    if value == _LITTLE_ENDIAN_VALUE:
        return EndianType.LITTLE_ENDIAN
    if value == _BIG_ENDIAN_VALUE:
        return EndianType.BIG_ENDIAN
    return EndianType.NONE
