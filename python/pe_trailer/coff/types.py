"""
PE32 header layout constants and record types used by the trailer engine.

Only the handful of fields that matter for appending a trailer are modelled:
the DOS pointer to the PE signature, the COFF optional header size, the
optional header magic and checksum, the certificate (security) data
directory, and the WIN_CERTIFICATE header at the start of the certificate
table.

References:
- Microsoft PE/COFF Specification
- https://learn.microsoft.com/en-us/windows/win32/debug/pe-format
- https://learn.microsoft.com/en-us/windows/win32/api/wintrust/ns-wintrust-win_certificate
"""

import struct
from dataclasses import dataclass
from typing import ClassVar

# =============================================================================
# Constants
# =============================================================================

# DOS header
DOS_MAGIC = 0x5A4D  # "MZ" in little-endian
PE_SIGNATURE_OFFSET_LOCATION = 0x3C  # e_lfanew

# PE signature
PE_SIGNATURE = 0x00004550  # "PE\0\0" read as a little-endian uint32
PE_SIGNATURE_BYTES = b"PE\x00\x00"
PE_SIGNATURE_SIZE = 4

# COFF file header (offsets relative to the PE signature)
COFF_HEADER_SIZE = 20
COFF_SIZE_OF_OPTIONAL_HEADER_OFFSET = 20
COFF_OPTIONAL_HEADER_OFFSET = PE_SIGNATURE_SIZE + COFF_HEADER_SIZE  # 24

# Optional header (offsets relative to the optional header start)
IMAGE_NT_OPTIONAL_HDR32_MAGIC = 0x10B  # PE32
IMAGE_NT_OPTIONAL_HDR64_MAGIC = 0x20B  # PE32+
OPTIONAL_HEADER_CHECKSUM_OFFSET = 64
OPTIONAL_HEADER32_DATA_DIRECTORY_OFFSET = 96

# Certificate data directory (offsets relative to the optional header start)
IMAGE_DIRECTORY_ENTRY_SECURITY = 4
DATA_DIRECTORY_SIZE = 8
CERTIFICATE_DIRECTORY_OFFSET = (
    OPTIONAL_HEADER32_DATA_DIRECTORY_OFFSET
    + IMAGE_DIRECTORY_ENTRY_SECURITY * DATA_DIRECTORY_SIZE
)  # 128
CERTIFICATE_LENGTH_OFFSET = CERTIFICATE_DIRECTORY_OFFSET + 4  # 132

# WIN_CERTIFICATE
WIN_CERT_REVISION_1_0 = 0x0100
WIN_CERT_REVISION_2_0 = 0x0200
WIN_CERT_TYPE_X509 = 0x0001
WIN_CERT_TYPE_PKCS_SIGNED_DATA = 0x0002

# Trailer
TRAILER_MARKER_SIZE = 4
UINT32_MAX = 0xFFFFFFFF


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class HeaderLocation:
    """File offsets derived from the DOS and COFF headers.

    Only pe_offset is read from the file; everything else is fixed
    arithmetic from it. Never cached across appends.
    """

    pe_offset: int

    @property
    def coff_header_offset(self) -> int:
        """Offset of the COFF file header (right after the signature)."""
        return self.pe_offset + PE_SIGNATURE_SIZE

    @property
    def optional_header_offset(self) -> int:
        return self.pe_offset + COFF_OPTIONAL_HEADER_OFFSET

    @property
    def checksum_offset(self) -> int:
        return self.optional_header_offset + OPTIONAL_HEADER_CHECKSUM_OFFSET

    @property
    def certificate_directory_offset(self) -> int:
        """Offset of the certificate table file-offset field."""
        return self.optional_header_offset + CERTIFICATE_DIRECTORY_OFFSET

    @property
    def certificate_length_offset(self) -> int:
        """Offset of the certificate table length field."""
        return self.optional_header_offset + CERTIFICATE_LENGTH_OFFSET


@dataclass
class CertificateDirectory:
    """Security data directory entry (IMAGE_DATA_DIRECTORY at index 4).

    Unlike every other data directory, the "VirtualAddress" of the security
    entry is a plain file offset.
    """

    offset: int  # File offset of the certificate table
    length: int  # Declared size of the certificate table

    STRUCT_FMT: ClassVar[str] = "<II"
    SIZE: ClassVar[int] = 8

    @property
    def end_offset(self) -> int:
        """File offset one past the declared end of the table."""
        return self.offset + self.length


@dataclass
class WinCertificateHeader:
    """WIN_CERTIFICATE header at the start of the certificate table.

    dwLength mirrors the security directory size and includes this header.
    """

    dwLength: int
    wRevision: int
    wCertificateType: int

    STRUCT_FMT: ClassVar[str] = "<IHH"
    SIZE: ClassVar[int] = 8

    @classmethod
    def from_bytes(
        cls, data: bytes | bytearray, offset: int = 0
    ) -> "WinCertificateHeader":
        """Parse WIN_CERTIFICATE header from binary data."""
        if offset < 0 or len(data) < offset + cls.SIZE:
            raise ValueError(
                f"Data too short for WIN_CERTIFICATE header: "
                f"{len(data)} < {offset + cls.SIZE}"
            )
        fields = struct.unpack_from(cls.STRUCT_FMT, data, offset)
        return cls(*fields)

    def to_bytes(self) -> bytes:
        """Serialize WIN_CERTIFICATE header to binary data."""
        return struct.pack(
            self.STRUCT_FMT, self.dwLength, self.wRevision, self.wCertificateType
        )

    @property
    def is_pkcs_signed_data(self) -> bool:
        """Check if the entry holds an Authenticode PKCS#7 blob."""
        return self.wCertificateType == WIN_CERT_TYPE_PKCS_SIGNED_DATA
