"""Tests for the append_payload and read_payload command line tools."""

import struct
from pathlib import Path

import pytest

from pe_trailer.coff import CoffVerifier, read_last_payload
from pe_trailer.tools import append_payload, read_payload
from pe_trailer.verify import VerificationResult

from pe_test_utils import certificate_fields


@pytest.fixture
def payload_file(tmp_path: Path) -> Path:
    path = tmp_path / "payload.bin"
    path.write_bytes(b"tool payload " * 20)
    return path


class TestAppendPayloadTool:
    """Tests for python -m pe_trailer.tools.append_payload."""

    def test_overwrites_in_place(self, signed_pe32_file: Path, payload_file: Path):
        original_size = signed_pe32_file.stat().st_size

        rc = append_payload.main([str(signed_pe32_file), str(payload_file)])

        assert rc == 0
        data = signed_pe32_file.read_bytes()
        assert len(data) == original_size + len(payload_file.read_bytes()) + 4
        assert read_last_payload(data).data == payload_file.read_bytes()

    def test_output_path(
        self, pe32_file: Path, payload_file: Path, tmp_path: Path, capsys
    ):
        original = pe32_file.read_bytes()
        output = tmp_path / "out.exe"

        rc = append_payload.main(
            [str(pe32_file), str(payload_file), "-o", str(output), "--verify"]
        )

        assert rc == 0
        assert pe32_file.read_bytes() == original
        assert struct.unpack("<I", output.read_bytes()[-4:])[0] == len(original)
        out = capsys.readouterr().out
        assert "none (unsigned image)" in out
        assert "Verification PASSED" in out

    def test_zstd_roundtrip(
        self, signed_pe32_file: Path, payload_file: Path, tmp_path: Path
    ):
        assert append_payload.main(
            [str(signed_pe32_file), str(payload_file), "--zstd"]
        ) == 0

        extracted = tmp_path / "extracted.bin"
        rc = read_payload.main(
            [str(signed_pe32_file), "--zstd", "-o", str(extracted)]
        )

        assert rc == 0
        assert extracted.read_bytes() == payload_file.read_bytes()
        _, directory_length, table_length = certificate_fields(
            signed_pe32_file.read_bytes()
        )
        assert directory_length == table_length

    def test_structural_error_exit_code(
        self, tmp_path: Path, payload_file: Path, capsys
    ):
        not_pe = tmp_path / "not_pe.exe"
        not_pe.write_bytes(bytes(0x100))

        rc = append_payload.main([str(not_pe), str(payload_file)])

        assert rc == 1
        assert "invalid_pe_header" in capsys.readouterr().err
        assert not_pe.read_bytes() == bytes(0x100)

    def test_verify_failure_exit_code(
        self, pe32_file: Path, payload_file: Path, monkeypatch, capsys
    ):
        failed = VerificationResult()
        failed.add_error("Certificate length mismatch")
        monkeypatch.setattr(
            CoffVerifier,
            "verify",
            classmethod(lambda cls, path, base_size=None: failed),
        )

        rc = append_payload.main([str(pe32_file), str(payload_file), "--verify"])

        assert rc == 1
        assert "Verification FAILED" in capsys.readouterr().out

    def test_missing_input(self, tmp_path: Path, payload_file: Path, capsys):
        rc = append_payload.main([str(tmp_path / "nope.exe"), str(payload_file)])
        assert rc == 1
        assert "does not exist" in capsys.readouterr().err


class TestReadPayloadTool:
    """Tests for python -m pe_trailer.tools.read_payload."""

    def test_list_payloads(self, pe32_file: Path, payload_file: Path, capsys):
        base_size = pe32_file.stat().st_size
        append_payload.main([str(pe32_file), str(payload_file)])
        append_payload.main([str(pe32_file), str(payload_file)])
        capsys.readouterr()

        rc = read_payload.main([str(pe32_file), "--base-size", str(base_size)])

        assert rc == 0
        out = capsys.readouterr().out
        assert "[0]" in out and "[1]" in out
        assert f"offset 0x{base_size:x}" in out

    def test_decompress_plain_payload_fails(
        self, pe32_file: Path, payload_file: Path, capsys
    ):
        append_payload.main([str(pe32_file), str(payload_file)])
        capsys.readouterr()

        rc = read_payload.main([str(pe32_file), "--zstd"])

        assert rc == 1
        assert "not zstd-compressed" in capsys.readouterr().err

    def test_newest_payload_to_output_file(
        self, pe32_file: Path, payload_file: Path, tmp_path: Path, capsys
    ):
        second = tmp_path / "second.bin"
        second.write_bytes(b"second payload")
        append_payload.main([str(pe32_file), str(payload_file)])
        append_payload.main([str(pe32_file), str(second)])
        capsys.readouterr()

        output = tmp_path / "newest.bin"
        rc = read_payload.main([str(pe32_file), "--output", str(output)])

        assert rc == 0
        assert output.read_bytes() == b"second payload"
        assert f"Wrote 14 bytes to {output}" in capsys.readouterr().out
