import pytest
import pathlib

from pe_test_utils import add_certificate_table, build_pe32_image


@pytest.fixture
def pe32_image() -> bytearray:
    """Minimal unsigned PE32 image (no certificate table)."""
    return build_pe32_image()


@pytest.fixture
def signed_pe32_image() -> bytearray:
    """Minimal PE32 image with a WIN_CERTIFICATE table at the end."""
    return add_certificate_table(build_pe32_image())


@pytest.fixture
def pe32_file(tmp_path: pathlib.Path, pe32_image: bytearray) -> pathlib.Path:
    """Unsigned PE32 image written to disk."""
    path = tmp_path / "unsigned.exe"
    path.write_bytes(pe32_image)
    return path


@pytest.fixture
def signed_pe32_file(
    tmp_path: pathlib.Path, signed_pe32_image: bytearray
) -> pathlib.Path:
    """Signed PE32 image written to disk."""
    path = tmp_path / "signed.exe"
    path.write_bytes(signed_pe32_image)
    return path
