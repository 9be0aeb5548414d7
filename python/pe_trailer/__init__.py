"""
pe-trailer: Append data to signed Windows executables.

This package appends arbitrary payloads to PE32 executables without
invalidating an embedded Authenticode signature. Each payload is followed
by a 4-byte marker holding the file size before the append, so the newest
payload can always be found from the last four bytes of the file.

    from pe_trailer import TrailerSurgery, read_last_payload

    surgery = TrailerSurgery.load(Path("setup.exe"))
    surgery.append(b"installer config")
    surgery.save()

    payload = read_last_payload(Path("setup.exe").read_bytes())

For the individual building blocks (header location, certificate table
bookkeeping, checksum), use the coff subpackage directly.
"""

from .coff import (
    ErrorKind,
    TrailerError,
    InvalidPEHeaderError,
    MissingOptionalHeaderError,
    UnsupportedPEFormatError,
    CertLengthMismatchError,
    OutOfBoundsError,
    TrailerSurgery,
    AppendResult,
    TrailerPayload,
    read_last_payload,
    iter_payloads,
    compute_checksum,
    CoffVerifier,
)
from .verify import VerificationResult

__all__ = [
    # Errors
    "ErrorKind",
    "TrailerError",
    "InvalidPEHeaderError",
    "MissingOptionalHeaderError",
    "UnsupportedPEFormatError",
    "CertLengthMismatchError",
    "OutOfBoundsError",
    # Appending
    "TrailerSurgery",
    "AppendResult",
    # Reading
    "TrailerPayload",
    "read_last_payload",
    "iter_payloads",
    # Checksum
    "compute_checksum",
    # Verification
    "CoffVerifier",
    "VerificationResult",
]
