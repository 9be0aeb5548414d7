"""
High-level interface for appending trailers to signed PE32 images.

The TrailerSurgery class owns an in-memory copy of a PE file and appends
payloads to it without breaking an embedded Authenticode signature.

Design principles:
- Parse once, modify in memory, write once
- Re-validate the headers on every append; nothing is cached
- Fail before mutating: all structural checks run before the first write
- Track all modifications for verification

Authenticode hashes the whole file except the optional header CheckSum,
the security data directory entry and the certificate table. An append
therefore only has to grow the certificate table's declared length (in
both places it is stored) so the new bytes fall inside the excluded
region, and then refresh the checksum.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .access import pack_u32
from .certificate import (
    check_certificate_lengths,
    read_certificate_directory,
    update_certificate_lengths,
)
from .checksum import write_checksum
from .headers import locate_headers
from .types import TRAILER_MARKER_SIZE, UINT32_MAX, HeaderLocation

logger = logging.getLogger(__name__)


@dataclass
class Modification:
    """Record of a modification made to the PE image."""

    operation: str  # e.g., "append_trailer", "update_checksum"
    file_offset: int
    size: int
    description: str


@dataclass
class AppendResult:
    """Result of appending one payload."""

    payload_offset: int  # Where the payload starts (== previous image size)
    payload_size: int
    new_size: int
    checksum: int
    certificate_length: int | None = None  # None if the image is unsigned

    @property
    def marker_offset(self) -> int:
        """File offset of the 4-byte size marker."""
        return self.payload_offset + self.payload_size

    @property
    def bytes_added(self) -> int:
        """Payload plus marker."""
        return self.payload_size + TRAILER_MARKER_SIZE


class TrailerSurgery:
    """Append payloads to a PE32 image without invalidating its signature.

    Usage:
        surgery = TrailerSurgery.load(Path("setup.exe"))

        result = surgery.append(b"installer config")
        print(result.payload_offset, result.checksum)

        surgery.save()  # Overwrites setup.exe
        surgery.save(Path("setup-patched.exe"))

    Not thread-safe: callers must serialize access to one instance.
    """

    def __init__(self, data: bytearray, path: Path | None = None):
        """Initialize with image data.

        Prefer using TrailerSurgery.load() for most use cases. No header
        parsing happens here; every append validates the image afresh.

        Args:
            data: Mutable PE image data (owned by this instance from now on)
            path: Original file path, used as the default save target
        """
        self._data = data
        self._path = path
        self._modifications: list[Modification] = []

    @classmethod
    def load(cls, path: Path) -> "TrailerSurgery":
        """Load a PE image from file.

        Args:
            path: Path to PE image

        Returns:
            TrailerSurgery instance ready for appends
        """
        data = bytearray(path.read_bytes())
        return cls(data, path)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def data(self) -> bytearray:
        """Access to raw image data (mutable)."""
        return self._data

    @property
    def path(self) -> Path | None:
        """Path the image was loaded from, if any."""
        return self._path

    @property
    def size(self) -> int:
        """Current image size in bytes."""
        return len(self._data)

    @property
    def modifications(self) -> list[Modification]:
        """List of modifications made."""
        return self._modifications

    # =========================================================================
    # Append
    # =========================================================================

    def locate_headers(self) -> HeaderLocation:
        """Validate the headers of the current image and locate them."""
        return locate_headers(self._data)

    def append(self, payload: bytes) -> AppendResult:
        """Append a payload followed by a 4-byte size marker.

        The marker holds the image size before this append, so a reader can
        find the payload from the last four bytes of the file.

        Steps:
        1. Validate PE signature, optional header presence and PE32 magic
        2. If a certificate table exists, check both length fields agree
        3. Grow both certificate length fields by the trailer size
        4. Append payload + marker
        5. Recompute and store the checksum

        Args:
            payload: Bytes to append (may be empty)

        Returns:
            AppendResult describing the new layout

        Raises:
            InvalidPEHeaderError, MissingOptionalHeaderError,
            UnsupportedPEFormatError, CertLengthMismatchError,
            OutOfBoundsError: On structural problems. The image is left
                unchanged.
            ValueError: If the image would outgrow 32-bit size fields
        """
        payload = bytes(payload)
        original_size = len(self._data)
        trailer = payload + pack_u32(original_size)

        location = locate_headers(self._data)
        directory = read_certificate_directory(self._data, location)
        if directory is not None:
            check_certificate_lengths(self._data, directory)
            if directory.length + len(trailer) > UINT32_MAX:
                raise ValueError(
                    f"Certificate table would exceed 4 GiB: "
                    f"{directory.length} + {len(trailer)} bytes"
                )

        # Validation done; everything below mutates the image
        certificate_length = None
        if directory is not None:
            certificate_length = update_certificate_lengths(
                self._data, location, directory, len(trailer)
            )
            self._modifications.append(
                Modification(
                    operation="update_certificate_length",
                    file_offset=location.certificate_length_offset,
                    size=4,
                    description=(
                        f"certificate table length {directory.length} -> "
                        f"{certificate_length} (directory and table at "
                        f"0x{directory.offset:x})"
                    ),
                )
            )

        self._data.extend(trailer)
        self._modifications.append(
            Modification(
                operation="append_trailer",
                file_offset=original_size,
                size=len(trailer),
                description=f"append {len(payload)} byte payload + size marker",
            )
        )

        checksum = write_checksum(self._data, location)
        self._modifications.append(
            Modification(
                operation="update_checksum",
                file_offset=location.checksum_offset,
                size=4,
                description=f"checksum 0x{checksum:08x}",
            )
        )

        logger.debug(
            "Appended %d byte payload at 0x%x (image %d -> %d bytes)",
            len(payload),
            original_size,
            original_size,
            len(self._data),
        )

        return AppendResult(
            payload_offset=original_size,
            payload_size=len(payload),
            new_size=len(self._data),
            checksum=checksum,
            certificate_length=certificate_length,
        )

    # =========================================================================
    # File Operations
    # =========================================================================

    def save(self, path: Path | None = None) -> Path:
        """Write the image verbatim.

        Args:
            path: Output file path. Defaults to the path the image was
                loaded from (overwriting it).

        Returns:
            The path written

        Raises:
            ValueError: If no path is given and the image was not loaded
                from a file
        """
        target = path if path is not None else self._path
        if target is None:
            raise ValueError("No output path given and image has no source path")
        target.write_bytes(self._data)
        logger.debug("Wrote %d bytes to %s", len(self._data), target)
        return target

    def save_preserving_mode(
        self, path: Path | None = None, mode: int | None = None
    ) -> Path:
        """Save the image, optionally setting file mode.

        Args:
            path: Output file path (see save())
            mode: File mode to set. If None, does not set mode.
        """
        target = self.save(path)
        if mode is not None:
            os.chmod(target, mode)
        return target
