#!/usr/bin/env python3
"""
Extract appended payloads from a patched PE executable.

By default the newest payload is written to stdout (or --output). With
--base-size, every payload in the marker chain is listed, newest first.

Usage:
    python -m pe_trailer.tools.read_payload <binary> [-o OUT] [--zstd]
    python -m pe_trailer.tools.read_payload <binary> --base-size N
"""

import argparse
import logging
import sys
from pathlib import Path

from pe_trailer.coff import (
    TrailerError,
    decompress_payload,
    iter_payloads,
    read_last_payload,
)


def list_payloads(data: bytes, base_size: int) -> None:
    """Print one line per payload in the marker chain."""
    for i, payload in enumerate(iter_payloads(data, base_size)):
        print(
            f"  [{i}] offset 0x{payload.offset:x}, {payload.size:,} bytes"
            f" (marker at 0x{payload.marker_offset:x})"
        )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Extract data appended to a PE executable"
    )
    parser.add_argument("binary", type=Path, help="Path to patched executable")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write the newest payload here (default: stdout)",
    )
    parser.add_argument(
        "--zstd",
        action="store_true",
        help="Decompress a zstd-compressed payload",
    )
    parser.add_argument(
        "--base-size",
        type=int,
        default=None,
        help="Size of the unpatched executable; lists all payloads",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging",
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if not args.binary.exists():
        print(f"Error: {args.binary} does not exist", file=sys.stderr)
        return 1

    data = args.binary.read_bytes()

    try:
        if args.base_size is not None:
            print(f"Payloads in {args.binary}:")
            list_payloads(data, args.base_size)
            return 0

        content = read_last_payload(data).data
        if args.zstd:
            content = decompress_payload(content)
    except TrailerError as e:
        print(f"Error ({e.kind.value}): {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output is not None:
        args.output.write_bytes(content)
        print(f"Wrote {len(content):,} bytes to {args.output}")
    else:
        sys.stdout.buffer.write(content)
        sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
