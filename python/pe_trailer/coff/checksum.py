"""
PE image checksum (the CheckSum field of the optional header).

This is the additive checksum computed by IMAGEHLP's CheckSumMappedFile,
not a cryptographic hash. The Windows loader only enforces it for drivers
and a few system DLLs, and Authenticode excludes the field from the
signed digest, so it can be rewritten freely after appending data.

The whole image is summed, including whatever stale value currently sits
in the CheckSum field. For an image whose field was zero beforehand this
matches CheckSumMappedFile; after a rewrite the field is simply treated
as data like any other word.

Algorithm reference:
https://stackoverflow.com/questions/6429779/can-anyone-define-the-windows-pe-checksum-algorithm
"""

import logging
import struct

from .access import read_u32, write_u32
from .types import HeaderLocation

logger = logging.getLogger(__name__)

_CARRY_LIMIT = 1 << 32
_WORD = struct.Struct("<I")


def _add_with_carry(checksum: int, value: int) -> int:
    checksum += value
    if checksum >= _CARRY_LIMIT:
        checksum = (checksum % _CARRY_LIMIT) + (checksum // _CARRY_LIMIT)
    return checksum


def compute_checksum(data: bytes | bytearray) -> int:
    """Compute the PE checksum of an image.

    Args:
        data: Full image contents

    Returns:
        Checksum value as stored in the optional header
    """
    size = len(data)
    aligned = size - (size % 4)

    checksum = 0
    for (word,) in _WORD.iter_unpack(data[:aligned]):
        checksum = _add_with_carry(checksum, word)

    if size % 4:
        # Zero-pad the 1-3 trailing bytes to a full word
        tail = bytes(data[aligned:]).ljust(4, b"\x00")
        checksum = _add_with_carry(checksum, _WORD.unpack(tail)[0])

    checksum = (checksum >> 16) + (checksum & 0xFFFF)
    checksum = (checksum >> 16) + (checksum & 0xFFFF)

    return (checksum & 0xFFFF) + size


def read_checksum(data: bytes | bytearray, location: HeaderLocation) -> int:
    """Read the checksum currently stored in the optional header."""
    return read_u32(data, location.checksum_offset)


def write_checksum(data: bytearray, location: HeaderLocation) -> int:
    """Recompute the checksum over the whole image and store it.

    Returns:
        The checksum that was written
    """
    checksum = compute_checksum(data)
    write_u32(data, location.checksum_offset, checksum)
    logger.debug(
        "Wrote checksum 0x%08x at 0x%x (%d byte image)",
        checksum,
        location.checksum_offset,
        len(data),
    )
    return checksum
