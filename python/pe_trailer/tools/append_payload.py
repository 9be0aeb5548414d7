#!/usr/bin/env python3
"""
Append a payload file to a (signed) PE32 executable.

The certificate table lengths and the optional header checksum are updated
so an existing Authenticode signature stays valid.

Usage:
    python -m pe_trailer.tools.append_payload <binary> <payload> [-o OUT]
        [--zstd] [--verify] [--verbose]
"""

import argparse
import logging
import sys
from pathlib import Path

from pe_trailer.coff import (
    CoffVerifier,
    TrailerError,
    TrailerSurgery,
    compress_payload,
)


def append_payload(
    binary: Path,
    payload_path: Path,
    output: Path | None = None,
    compress: bool = False,
    verify: bool = False,
) -> int:
    """Append one payload file and write the result.

    Args:
        binary: PE32 image to patch
        payload_path: File whose contents are appended
        output: Output path (default: overwrite binary)
        compress: zstd-compress the payload before appending
        verify: Run structural verification on the result

    Returns:
        Process exit code
    """
    payload = payload_path.read_bytes()
    if compress:
        raw_size = len(payload)
        payload = compress_payload(payload)
        print(f"Compressed payload: {raw_size:,} -> {len(payload):,} bytes")

    surgery = TrailerSurgery.load(binary)
    original_mode = binary.stat().st_mode
    result = surgery.append(payload)
    target = surgery.save_preserving_mode(output, original_mode)

    print(f"Appended {result.payload_size:,} bytes to {target}")
    print(f"  Payload offset: 0x{result.payload_offset:x}")
    print(f"  New size:       {result.new_size:,} bytes")
    print(f"  Checksum:       0x{result.checksum:08x}")
    if result.certificate_length is None:
        print("  Certificate:    none (unsigned image)")
    else:
        print(f"  Certificate:    {result.certificate_length:,} bytes")

    if verify:
        verification = CoffVerifier.verify(target)
        print(verification)
        if not verification.passed:
            return 1

    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Append data to a PE32 executable without breaking its signature"
    )
    parser.add_argument("binary", type=Path, help="Path to PE32 executable")
    parser.add_argument("payload", type=Path, help="File whose contents to append")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write the patched executable here instead of overwriting",
    )
    parser.add_argument(
        "--zstd",
        action="store_true",
        help="Compress the payload with zstd before appending",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Run structural verification on the patched executable",
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

    for path in (args.binary, args.payload):
        if not path.exists():
            print(f"Error: {path} does not exist", file=sys.stderr)
            return 1

    try:
        return append_payload(
            args.binary, args.payload, args.output, args.zstd, args.verify
        )
    except TrailerError as e:
        print(f"Error ({e.kind.value}): {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
