"""Tests for PE32 layout constants, records and byte access."""

import pytest
import struct

from pe_trailer.coff import (
    CertificateDirectory,
    ErrorKind,
    HeaderLocation,
    OutOfBoundsError,
    TrailerError,
    WinCertificateHeader,
    pack_u32,
    read_u8,
    read_u16,
    read_u32,
    write_u32,
)
from pe_trailer.coff.types import (
    CERTIFICATE_DIRECTORY_OFFSET,
    CERTIFICATE_LENGTH_OFFSET,
    COFF_OPTIONAL_HEADER_OFFSET,
    OPTIONAL_HEADER_CHECKSUM_OFFSET,
    PE_SIGNATURE,
    PE_SIGNATURE_BYTES,
    WIN_CERT_TYPE_PKCS_SIGNED_DATA,
    WIN_CERT_TYPE_X509,
)


class TestLayoutConstants:
    """The fixed offsets must match the PE/COFF specification."""

    def test_optional_header_follows_coff_header(self):
        assert COFF_OPTIONAL_HEADER_OFFSET == 24

    def test_checksum_offset(self):
        assert OPTIONAL_HEADER_CHECKSUM_OFFSET == 64

    def test_certificate_directory_offsets(self):
        assert CERTIFICATE_DIRECTORY_OFFSET == 128
        assert CERTIFICATE_LENGTH_OFFSET == 132

    def test_signature_value_matches_bytes(self):
        assert struct.unpack("<I", PE_SIGNATURE_BYTES)[0] == PE_SIGNATURE


class TestHeaderLocation:
    """Tests for derived header offsets."""

    def test_derived_offsets(self):
        location = HeaderLocation(pe_offset=0x80)
        assert location.coff_header_offset == 0x84
        assert location.optional_header_offset == 0x98
        assert location.checksum_offset == 0x98 + 64
        assert location.certificate_directory_offset == 0x98 + 128
        assert location.certificate_length_offset == 0x98 + 132

    def test_is_immutable(self):
        location = HeaderLocation(pe_offset=0x80)
        with pytest.raises(AttributeError):
            location.pe_offset = 0x100


class TestCertificateRecords:
    """Tests for certificate directory and WIN_CERTIFICATE records."""

    def test_directory_end_offset(self):
        directory = CertificateDirectory(offset=0x400, length=0x28)
        assert directory.end_offset == 0x428

    def test_parse_win_certificate(self):
        data = bytearray(16)
        struct.pack_into("<IHH", data, 8, 0x1234, 0x0200, WIN_CERT_TYPE_PKCS_SIGNED_DATA)

        header = WinCertificateHeader.from_bytes(data, 8)
        assert header.dwLength == 0x1234
        assert header.wRevision == 0x0200
        assert header.is_pkcs_signed_data

    def test_win_certificate_to_bytes(self):
        header = WinCertificateHeader(
            dwLength=40, wRevision=0x0200, wCertificateType=WIN_CERT_TYPE_X509
        )
        assert header.to_bytes() == struct.pack("<IHH", 40, 0x0200, 1)
        assert not header.is_pkcs_signed_data

    def test_win_certificate_too_short_raises(self):
        with pytest.raises(ValueError, match="Data too short"):
            WinCertificateHeader.from_bytes(bytes(6))


class TestByteAccess:
    """Tests for bounds-checked little-endian access."""

    def test_read_little_endian(self):
        data = bytes([0x01, 0x02, 0x03, 0x04, 0x05])
        assert read_u8(data, 4) == 0x05
        assert read_u16(data, 0) == 0x0201
        assert read_u32(data, 1) == 0x05040302

    def test_read_at_exact_end(self):
        data = bytes(8)
        assert read_u32(data, 4) == 0
        assert read_u16(data, 6) == 0
        assert read_u8(data, 7) == 0

    @pytest.mark.parametrize(
        "reader,offset",
        [(read_u8, 8), (read_u16, 7), (read_u32, 5), (read_u32, -1)],
    )
    def test_read_out_of_bounds_raises(self, reader, offset):
        with pytest.raises(OutOfBoundsError) as excinfo:
            reader(bytes(8), offset)
        assert excinfo.value.kind is ErrorKind.OUT_OF_BOUNDS

    def test_write_in_place(self):
        data = bytearray(8)
        write_u32(data, 2, 0xDEADBEEF)
        assert data == bytearray(b"\x00\x00\xef\xbe\xad\xde\x00\x00")
        assert len(data) == 8

    def test_write_does_not_grow_buffer(self):
        data = bytearray(6)
        with pytest.raises(OutOfBoundsError):
            write_u32(data, 4, 1)
        assert data == bytearray(6)

    def test_write_rejects_oversized_value(self):
        with pytest.raises(ValueError, match="does not fit"):
            write_u32(bytearray(4), 0, 1 << 32)

    def test_out_of_bounds_is_a_value_error(self):
        """Callers catching ValueError also see structural errors."""
        assert issubclass(OutOfBoundsError, TrailerError)
        assert issubclass(TrailerError, ValueError)

    def test_pack_u32(self):
        assert pack_u32(0x400) == b"\x00\x04\x00\x00"
        with pytest.raises(ValueError):
            pack_u32(-1)
