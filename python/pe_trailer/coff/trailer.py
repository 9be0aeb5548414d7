"""
Reading trailers back out of a patched image.

Each append leaves `<payload><uint32 LE previous image size>` at the end of
the file, so the newest payload starts at the offset stored in the last
four bytes. Older payloads are found by following the marker chain back
until the size of the unpatched image is reached.

Payloads may optionally be zstd-compressed before they are appended; the
helpers here detect the zstd frame magic when decompressing.
"""

from dataclasses import dataclass
from typing import Iterator

import zstandard as zstd

from .access import read_u32
from .types import TRAILER_MARKER_SIZE

ZSTD_FRAME_MAGIC = b"\x28\xb5\x2f\xfd"


@dataclass
class TrailerPayload:
    """One appended payload located by its marker."""

    offset: int  # File offset where the payload starts
    marker_offset: int  # File offset of the 4-byte size marker
    data: bytes

    @property
    def size(self) -> int:
        """Payload size, excluding the marker."""
        return len(self.data)

    @property
    def end_offset(self) -> int:
        """File offset one past the marker."""
        return self.marker_offset + TRAILER_MARKER_SIZE


def read_marker(data: bytes | bytearray, end: int | None = None) -> int:
    """Read the size marker ending at `end` (default: end of image).

    Raises:
        OutOfBoundsError: If fewer than four bytes precede `end`
    """
    if end is None:
        end = len(data)
    return read_u32(data, end - TRAILER_MARKER_SIZE)


def read_payload_ending_at(data: bytes | bytearray, end: int) -> TrailerPayload:
    """Read the payload whose marker ends at file offset `end`.

    Raises:
        ValueError: If the marker points past its own position
    """
    marker_offset = end - TRAILER_MARKER_SIZE
    start = read_marker(data, end)
    if start > marker_offset:
        raise ValueError(
            f"Trailer marker at 0x{marker_offset:x} points to 0x{start:x}, "
            f"past the marker itself"
        )
    return TrailerPayload(
        offset=start,
        marker_offset=marker_offset,
        data=bytes(data[start:marker_offset]),
    )


def read_last_payload(data: bytes | bytearray) -> TrailerPayload:
    """Read the most recently appended payload."""
    return read_payload_ending_at(data, len(data))


def iter_payloads(
    data: bytes | bytearray, base_size: int
) -> Iterator[TrailerPayload]:
    """Iterate appended payloads, newest first.

    Args:
        data: Patched image
        base_size: Size of the image before the first append

    Yields:
        TrailerPayload for each append, stopping at base_size

    Raises:
        ValueError: If the marker chain skips over base_size
    """
    end = len(data)
    while end > base_size:
        payload = read_payload_ending_at(data, end)
        if payload.offset < base_size:
            raise ValueError(
                f"Trailer marker at 0x{payload.marker_offset:x} points to "
                f"0x{payload.offset:x}, before the original image end "
                f"0x{base_size:x}"
            )
        yield payload
        end = payload.offset


def compress_payload(payload: bytes, level: int = 3) -> bytes:
    """Compress a payload into a single zstd frame."""
    cctx = zstd.ZstdCompressor(level=level, write_content_size=True)
    return cctx.compress(payload)


def is_compressed_payload(payload: bytes) -> bool:
    """Check whether a payload starts with a zstd frame."""
    return payload[: len(ZSTD_FRAME_MAGIC)] == ZSTD_FRAME_MAGIC


def decompress_payload(payload: bytes) -> bytes:
    """Decompress a zstd-framed payload.

    Raises:
        ValueError: If the payload is not a zstd frame or is corrupt
    """
    if not is_compressed_payload(payload):
        raise ValueError("Payload is not zstd-compressed (bad frame magic)")

    dctx = zstd.ZstdDecompressor()
    try:
        return dctx.decompress(payload)
    except zstd.ZstdError as e:
        raise ValueError(f"Decompression failed: {e}") from e
