"""
PE32 trailer surgery package for pe-trailer.

This package provides the pieces needed to append data to a signed PE32
image without invalidating its Authenticode signature:
- types: Header offsets and record types
- access: Bounds-checked little-endian integer access
- headers: PE signature / optional header location and validation
- certificate: Certificate table length bookkeeping
- checksum: PE image checksum
- surgery: High-level TrailerSurgery class
- trailer: Reading appended payloads back out
- verify: Structural verification utilities
"""

from .errors import (
    ErrorKind,
    TrailerError,
    InvalidPEHeaderError,
    MissingOptionalHeaderError,
    UnsupportedPEFormatError,
    CertLengthMismatchError,
    OutOfBoundsError,
)
from .access import read_u8, read_u16, read_u32, write_u32, pack_u32
from .headers import locate_headers
from .certificate import (
    read_certificate_directory,
    read_certificate_table_length,
    check_certificate_lengths,
    update_certificate_lengths,
)
from .checksum import compute_checksum, read_checksum, write_checksum
from .surgery import TrailerSurgery, AppendResult, Modification
from .trailer import (
    ZSTD_FRAME_MAGIC,
    TrailerPayload,
    read_marker,
    read_payload_ending_at,
    read_last_payload,
    iter_payloads,
    compress_payload,
    decompress_payload,
    is_compressed_payload,
)
from .verify import CoffVerifier, VerificationResult
from .types import (
    # Records
    HeaderLocation,
    CertificateDirectory,
    WinCertificateHeader,
    # DOS / PE
    DOS_MAGIC,
    PE_SIGNATURE,
    PE_SIGNATURE_BYTES,
    PE_SIGNATURE_OFFSET_LOCATION,
    # COFF / optional header
    COFF_SIZE_OF_OPTIONAL_HEADER_OFFSET,
    COFF_OPTIONAL_HEADER_OFFSET,
    IMAGE_NT_OPTIONAL_HDR32_MAGIC,
    IMAGE_NT_OPTIONAL_HDR64_MAGIC,
    OPTIONAL_HEADER_CHECKSUM_OFFSET,
    # Certificate directory
    CERTIFICATE_DIRECTORY_OFFSET,
    CERTIFICATE_LENGTH_OFFSET,
    WIN_CERT_REVISION_2_0,
    WIN_CERT_TYPE_PKCS_SIGNED_DATA,
    # Trailer
    TRAILER_MARKER_SIZE,
)

__all__ = [
    # Errors
    "ErrorKind",
    "TrailerError",
    "InvalidPEHeaderError",
    "MissingOptionalHeaderError",
    "UnsupportedPEFormatError",
    "CertLengthMismatchError",
    "OutOfBoundsError",
    # Byte access
    "read_u8",
    "read_u16",
    "read_u32",
    "write_u32",
    "pack_u32",
    # Headers
    "locate_headers",
    # Certificate table
    "read_certificate_directory",
    "read_certificate_table_length",
    "check_certificate_lengths",
    "update_certificate_lengths",
    # Checksum
    "compute_checksum",
    "read_checksum",
    "write_checksum",
    # High-level classes
    "TrailerSurgery",
    "AppendResult",
    "Modification",
    # Trailer reading
    "ZSTD_FRAME_MAGIC",
    "TrailerPayload",
    "read_marker",
    "read_payload_ending_at",
    "read_last_payload",
    "iter_payloads",
    "compress_payload",
    "decompress_payload",
    "is_compressed_payload",
    # Verification
    "CoffVerifier",
    "VerificationResult",
    # Records
    "HeaderLocation",
    "CertificateDirectory",
    "WinCertificateHeader",
    # Constants
    "DOS_MAGIC",
    "PE_SIGNATURE",
    "PE_SIGNATURE_BYTES",
    "PE_SIGNATURE_OFFSET_LOCATION",
    "COFF_SIZE_OF_OPTIONAL_HEADER_OFFSET",
    "COFF_OPTIONAL_HEADER_OFFSET",
    "IMAGE_NT_OPTIONAL_HDR32_MAGIC",
    "IMAGE_NT_OPTIONAL_HDR64_MAGIC",
    "OPTIONAL_HEADER_CHECKSUM_OFFSET",
    "CERTIFICATE_DIRECTORY_OFFSET",
    "CERTIFICATE_LENGTH_OFFSET",
    "WIN_CERT_REVISION_2_0",
    "WIN_CERT_TYPE_PKCS_SIGNED_DATA",
    "TRAILER_MARKER_SIZE",
]
