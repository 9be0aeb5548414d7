"""
Locate the PE signature and optional header inside an image.

The checks run in a fixed order and are repeated on every append, so an
image that was corrupted between two appends is caught before it is
touched again.
"""

import logging

from .access import read_u16, read_u32
from .errors import (
    InvalidPEHeaderError,
    MissingOptionalHeaderError,
    UnsupportedPEFormatError,
)
from .types import (
    COFF_SIZE_OF_OPTIONAL_HEADER_OFFSET,
    IMAGE_NT_OPTIONAL_HDR32_MAGIC,
    IMAGE_NT_OPTIONAL_HDR64_MAGIC,
    PE_SIGNATURE,
    PE_SIGNATURE_OFFSET_LOCATION,
    PE_SIGNATURE_SIZE,
    HeaderLocation,
)

logger = logging.getLogger(__name__)


def locate_headers(data: bytes | bytearray) -> HeaderLocation:
    """Validate the PE32 headers and return their location.

    Args:
        data: Full image contents

    Returns:
        HeaderLocation for the image

    Raises:
        InvalidPEHeaderError: If e_lfanew does not point at "PE\\0\\0"
            inside the image
        MissingOptionalHeaderError: If SizeOfOptionalHeader is zero
        UnsupportedPEFormatError: If the optional header is not PE32
        OutOfBoundsError: If any header field lies past the end of the image
    """
    pe_offset = read_u32(data, PE_SIGNATURE_OFFSET_LOCATION)
    location = HeaderLocation(pe_offset=pe_offset)

    # e_lfanew pointing outside the image is a bad header, not truncation
    if pe_offset + PE_SIGNATURE_SIZE > len(data):
        raise InvalidPEHeaderError(
            f"No valid PE header found: e_lfanew 0x{pe_offset:x} points past "
            f"end of image ({len(data)} bytes)"
        )

    signature = read_u32(data, pe_offset)
    if signature != PE_SIGNATURE:
        raise InvalidPEHeaderError(
            f"No valid PE header found at offset 0x{pe_offset:x} "
            f"(signature 0x{signature:08X}, expected 0x{PE_SIGNATURE:08X})"
        )

    optional_size = read_u16(data, pe_offset + COFF_SIZE_OF_OPTIONAL_HEADER_OFFSET)
    if optional_size == 0:
        raise MissingOptionalHeaderError("No optional COFF header found")

    magic = read_u16(data, location.optional_header_offset)
    if magic != IMAGE_NT_OPTIONAL_HDR32_MAGIC:
        kind = "PE32+" if magic == IMAGE_NT_OPTIONAL_HDR64_MAGIC else "unknown"
        raise UnsupportedPEFormatError(
            f"PE format is not PE32 (magic: 0x{magic:04X}, {kind}; "
            f"expected 0x{IMAGE_NT_OPTIONAL_HDR32_MAGIC:04X})"
        )

    logger.debug(
        "PE header at 0x%x, optional header at 0x%x (%d bytes)",
        pe_offset,
        location.optional_header_offset,
        optional_size,
    )
    return location
