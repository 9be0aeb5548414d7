"""
Certificate table length bookkeeping.

The size of the Authenticode certificate table is stored twice: in the
security data directory of the optional header and in the dwLength field
of the WIN_CERTIFICATE header at the start of the table. Neither location
is covered by the Authenticode hash, so bytes appended after the table can
be folded into it by growing both lengths by the same amount.
"""

import logging

from .access import read_u32, write_u32
from .errors import CertLengthMismatchError
from .types import CertificateDirectory, HeaderLocation

logger = logging.getLogger(__name__)


def read_certificate_directory(
    data: bytes | bytearray, location: HeaderLocation
) -> CertificateDirectory | None:
    """Read the security data directory.

    Returns:
        CertificateDirectory, or None if the image has no certificate table
        (offset field is zero)
    """
    offset = read_u32(data, location.certificate_directory_offset)
    if offset == 0:
        return None
    length = read_u32(data, location.certificate_length_offset)
    return CertificateDirectory(offset=offset, length=length)


def read_certificate_table_length(
    data: bytes | bytearray, directory: CertificateDirectory
) -> int:
    """Read dwLength from the start of the certificate table itself."""
    return read_u32(data, directory.offset)


def check_certificate_lengths(
    data: bytes | bytearray, directory: CertificateDirectory
) -> None:
    """Ensure the two certificate length fields agree.

    Raises:
        CertLengthMismatchError: If the table's dwLength differs from the
            data directory size
        OutOfBoundsError: If the table offset lies past the end of the image
    """
    table_length = read_certificate_table_length(data, directory)
    if table_length != directory.length:
        raise CertLengthMismatchError(
            f"Certificate length does not match COFF header: table at "
            f"0x{directory.offset:x} declares {table_length} bytes, "
            f"data directory declares {directory.length}"
        )


def update_certificate_lengths(
    data: bytearray,
    location: HeaderLocation,
    directory: CertificateDirectory,
    delta: int,
) -> int:
    """Grow both certificate length fields by delta.

    Callers must run check_certificate_lengths first; this only writes.

    Returns:
        The new certificate table length
    """
    new_length = directory.length + delta
    write_u32(data, location.certificate_length_offset, new_length)
    write_u32(data, directory.offset, new_length)
    logger.debug(
        "Certificate table at 0x%x grown from %d to %d bytes",
        directory.offset,
        directory.length,
        new_length,
    )
    return new_length
