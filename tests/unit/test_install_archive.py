from __future__ import annotations

import io
import tarfile

import pytest

from services.install import ExtractionError
from services.install.archive import extract_binary
from tests.unit.install_test_utils import VITALS_SCRIPT, build_release_archive


def test_extract_binary_from_top_level_entry() -> None:
    archive = build_release_archive({"vitals": VITALS_SCRIPT, "LICENSE": b"MIT"})

    assert extract_binary(archive) == VITALS_SCRIPT


def test_extract_binary_from_single_directory() -> None:
    archive = build_release_archive({"vitals-linux-amd64/vitals": VITALS_SCRIPT})

    assert extract_binary(archive) == VITALS_SCRIPT


def test_extract_binary_requires_expected_entry() -> None:
    archive = build_release_archive({"README.md": b"docs"})

    with pytest.raises(ExtractionError, match="did not contain"):
        extract_binary(archive)


def test_extract_binary_rejects_ambiguous_archives() -> None:
    archive = build_release_archive({"vitals": VITALS_SCRIPT, "bin/vitals": b"other"})

    with pytest.raises(ExtractionError, match="several"):
        extract_binary(archive)


def test_extract_binary_ignores_deeply_nested_matches() -> None:
    archive = build_release_archive({"vitals": VITALS_SCRIPT, "share/doc/vitals": b"notes"})

    assert extract_binary(archive) == VITALS_SCRIPT


def test_extract_binary_from_directory_named_after_binary() -> None:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as bundle:
        directory = tarfile.TarInfo("vitals")
        directory.type = tarfile.DIRTYPE
        directory.mode = 0o755
        bundle.addfile(directory)
        binary = tarfile.TarInfo("vitals/vitals")
        binary.size = len(VITALS_SCRIPT)
        binary.mode = 0o755
        bundle.addfile(binary, io.BytesIO(VITALS_SCRIPT))

    assert extract_binary(buffer.getvalue()) == VITALS_SCRIPT


def test_extract_binary_ignores_lone_directory_entry() -> None:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as bundle:
        directory = tarfile.TarInfo("vitals")
        directory.type = tarfile.DIRTYPE
        bundle.addfile(directory)

    with pytest.raises(ExtractionError, match="did not contain"):
        extract_binary(buffer.getvalue())


def test_extract_binary_rejects_malformed_archive() -> None:
    with pytest.raises(ExtractionError):
        extract_binary(b"this is not a tarball")


def test_extract_binary_rejects_symlink_entry() -> None:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as bundle:
        info = tarfile.TarInfo("vitals")
        info.type = tarfile.SYMTYPE
        info.linkname = "/bin/sh"
        bundle.addfile(info)

    with pytest.raises(ExtractionError, match="regular file"):
        extract_binary(buffer.getvalue())


def test_extract_binary_rejects_parent_traversal() -> None:
    archive = build_release_archive({"../vitals": VITALS_SCRIPT})

    with pytest.raises(ExtractionError, match="unsafe"):
        extract_binary(archive)
