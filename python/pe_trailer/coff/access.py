"""
Bounds-checked little-endian integer access over an image buffer.

All offset arithmetic elsewhere in the package goes through these helpers
so that a truncated or malformed file surfaces as OutOfBoundsError rather
than a struct.error or a silently short slice.
"""

import struct

from .errors import OutOfBoundsError
from .types import UINT32_MAX

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


def _check_bounds(data: bytes | bytearray, offset: int, width: int) -> None:
    if offset < 0 or offset + width > len(data):
        raise OutOfBoundsError(
            f"Access of {width} bytes at offset 0x{offset:x} exceeds "
            f"image size {len(data)}"
        )


def read_u8(data: bytes | bytearray, offset: int) -> int:
    """Read an unsigned 8-bit integer."""
    _check_bounds(data, offset, _U8.size)
    return _U8.unpack_from(data, offset)[0]


def read_u16(data: bytes | bytearray, offset: int) -> int:
    """Read an unsigned little-endian 16-bit integer."""
    _check_bounds(data, offset, _U16.size)
    return _U16.unpack_from(data, offset)[0]


def read_u32(data: bytes | bytearray, offset: int) -> int:
    """Read an unsigned little-endian 32-bit integer."""
    _check_bounds(data, offset, _U32.size)
    return _U32.unpack_from(data, offset)[0]


def write_u32(data: bytearray, offset: int, value: int) -> None:
    """Overwrite 4 bytes in place with a little-endian 32-bit integer.

    The buffer is never resized; the target range must already exist.

    Raises:
        OutOfBoundsError: If the write would run past the end of the buffer
        ValueError: If value does not fit in 32 bits
    """
    if value < 0 or value > UINT32_MAX:
        raise ValueError(f"Value {value:#x} does not fit in a uint32")
    _check_bounds(data, offset, _U32.size)
    _U32.pack_into(data, offset, value)


def pack_u32(value: int) -> bytes:
    """Encode a uint32 as 4 little-endian bytes."""
    if value < 0 or value > UINT32_MAX:
        raise ValueError(f"Value {value:#x} does not fit in a uint32")
    return _U32.pack(value)
