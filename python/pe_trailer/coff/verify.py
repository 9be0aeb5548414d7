"""
Structural verification of patched PE32 images.

The CoffVerifier class checks the invariants an append relies on and
preserves: valid PE32 headers, a CheckSum that agrees with the image,
agreeing certificate length fields, a certificate table that lies inside
the file, and a well-formed trailer marker chain.

It does not verify the Authenticode signature itself.
"""

from pathlib import Path
from typing import Callable

from ..verify import VerificationResult
from .access import write_u32
from .certificate import read_certificate_directory, read_certificate_table_length
from .checksum import compute_checksum, read_checksum
from .errors import TrailerError
from .headers import locate_headers
from .trailer import iter_payloads, read_last_payload
from .types import HeaderLocation, WinCertificateHeader


class CoffVerifier:
    """Verification of a PE32 image that may carry appended trailers.

    Usage:
        result = CoffVerifier.verify(Path("setup.exe"), base_size=81920)
        if not result.passed:
            print(result)
    """

    def __init__(self, data: bytes | bytearray, base_size: int | None = None):
        """Initialize with image data.

        Args:
            data: Image contents
            base_size: Image size before the first append. When given, the
                whole marker chain is checked instead of just the last one.
        """
        self._data = data
        self._base_size = base_size

    @classmethod
    def verify(cls, path: Path, base_size: int | None = None) -> VerificationResult:
        """Verify a PE file on disk."""
        return cls(path.read_bytes(), base_size).run_all_checks()

    @classmethod
    def verify_data(
        cls, data: bytes | bytearray, base_size: int | None = None
    ) -> VerificationResult:
        """Verify PE data in memory."""
        return cls(data, base_size).run_all_checks()

    def run_all_checks(self) -> VerificationResult:
        """Run all structural checks.

        Header validation runs first; the remaining checks need the header
        location and are skipped if it fails.
        """
        result = VerificationResult()

        try:
            location = locate_headers(self._data)
        except TrailerError as e:
            result.add_error(f"{e.kind.value}: {e}")
            return result

        checks: list[Callable[[HeaderLocation], VerificationResult]] = [
            self.check_checksum,
            self.check_certificate_lengths,
            self.check_certificate_bounds,
            self.check_trailer_markers,
        ]
        for check in checks:
            try:
                result.merge(check(location))
            except TrailerError as e:
                result.add_error(f"{check.__name__}: {e}")

        return result

    # =========================================================================
    # Structural Checks
    # =========================================================================

    def check_checksum(self, location: HeaderLocation) -> VerificationResult:
        """Check the stored CheckSum against one recomputed with the field zeroed.

        This is how CheckSumMappedFile verifies an image. Appends sum the
        image with the previous CheckSum still in place, so only an image
        whose field was zero before its last append is expected to agree;
        disagreement is reported as a warning.
        """
        result = VerificationResult()
        stored = read_checksum(self._data, location)
        if stored == 0:
            result.add_warning("Optional header CheckSum is zero")
            return result

        zeroed = bytearray(self._data)
        write_u32(zeroed, location.checksum_offset, 0)
        expected = compute_checksum(zeroed)
        if stored != expected:
            result.add_warning(
                f"Optional header CheckSum 0x{stored:08x} does not match "
                f"recomputed 0x{expected:08x}"
            )
        return result

    def check_certificate_lengths(
        self, location: HeaderLocation
    ) -> VerificationResult:
        """Check the data directory and WIN_CERTIFICATE lengths agree."""
        result = VerificationResult()
        directory = read_certificate_directory(self._data, location)
        if directory is None:
            return result

        try:
            table_length = read_certificate_table_length(self._data, directory)
        except TrailerError as e:
            result.add_error(f"Certificate table unreadable: {e}")
            return result

        if table_length != directory.length:
            result.add_error(
                f"Certificate length mismatch: directory declares "
                f"{directory.length}, table at 0x{directory.offset:x} "
                f"declares {table_length}"
            )
        return result

    def check_certificate_bounds(self, location: HeaderLocation) -> VerificationResult:
        """Check the certificate table lies within the file.

        Signing tools place the table at the very end of the file. After
        appends it must still end exactly at end-of-file, since the trailer
        is folded into it.
        """
        result = VerificationResult()
        directory = read_certificate_directory(self._data, location)
        if directory is None:
            return result

        if directory.end_offset > len(self._data):
            result.add_error(
                f"Certificate table [0x{directory.offset:x}, "
                f"0x{directory.end_offset:x}) extends past end of file "
                f"(0x{len(self._data):x})"
            )
            return result

        if directory.end_offset != len(self._data):
            result.add_warning(
                f"Certificate table ends at 0x{directory.end_offset:x}, "
                f"not at end of file (0x{len(self._data):x})"
            )

        try:
            header = WinCertificateHeader.from_bytes(self._data, directory.offset)
        except ValueError as e:
            result.add_error(f"Certificate header unreadable: {e}")
            return result

        if not header.is_pkcs_signed_data:
            result.add_warning(
                f"Certificate type 0x{header.wCertificateType:04x} is not "
                "PKCS#7 signed data"
            )
        return result

    def check_trailer_markers(self, location: HeaderLocation) -> VerificationResult:
        """Check the trailer marker(s) point inside the file.

        Without base_size only the newest marker can be checked, and an
        unpatched image will typically fail it; callers verifying unpatched
        images should pass base_size=len(data).
        """
        result = VerificationResult()

        if self._base_size is not None:
            try:
                count = sum(1 for _ in iter_payloads(self._data, self._base_size))
            except ValueError as e:
                result.add_error(f"Broken trailer chain: {e}")
                return result
            if count == 0:
                result.add_warning("No trailers appended")
            return result

        try:
            payload = read_last_payload(self._data)
        except ValueError as e:
            result.add_error(f"Invalid trailer marker: {e}")
            return result

        if payload.offset < location.optional_header_offset:
            result.add_error(
                f"Trailer marker points into the PE headers (0x{payload.offset:x})"
            )
        return result
