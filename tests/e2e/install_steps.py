from __future__ import annotations

import os
import subprocess

from pytest_bdd import given, parsers, then, when

from app import cli
from tests.e2e.install_fixtures import ReleaseMirror
from tests.unit.install_test_utils import digest_of, publish_release, write_manifest


@given(parsers.parse('a release mirror publishing vitals "{version}" for "{tag}"'))
def publish_to_mirror(release_mirror: ReleaseMirror, version: str, tag: str) -> None:
    release_mirror.base_url = publish_release(release_mirror.root, version, tag, release_mirror.archive)
    release_mirror.checksums[version] = {tag: digest_of(release_mirror.archive)}
    write_manifest(release_mirror.manifest_path, release_mirror.checksums)


@given(parsers.parse('the manifest lists a different checksum for "{tag}"'))
def tamper_with_checksum(release_mirror: ReleaseMirror, tag: str) -> None:
    for entries in release_mirror.checksums.values():
        entries[tag] = digest_of(b"someone else's archive")
    write_manifest(release_mirror.manifest_path, release_mirror.checksums)


@given(parsers.parse('the manifest lists "{value}" for "{tag}"'))
def replace_checksum(release_mirror: ReleaseMirror, value: str, tag: str) -> None:
    for entries in release_mirror.checksums.values():
        entries[tag] = value
    write_manifest(release_mirror.manifest_path, release_mirror.checksums)


@when(parsers.parse('the user installs vitals "{version}" for "{os_name}" "{arch}"'))
def run_installer(release_mirror: ReleaseMirror, version: str, os_name: str, arch: str) -> None:
    exit_code = cli.main(
        [
            "install",
            version,
            "--os",
            os_name,
            "--arch",
            arch,
            "--manifest",
            str(release_mirror.manifest_path),
            "--base-url",
            release_mirror.base_url,
            "--bin-dir",
            str(release_mirror.bin_dir),
        ]
    )
    release_mirror.exit_codes.append(exit_code)


@then(parsers.parse("the installer exits with code {code:d}"))
def installer_exit_code(release_mirror: ReleaseMirror, code: int) -> None:
    assert release_mirror.exit_codes, "the installer was never run"
    assert all(actual == code for actual in release_mirror.exit_codes), release_mirror.exit_codes


@then(parsers.parse('the binary directory contains an executable "{name}"'))
def binary_is_executable(release_mirror: ReleaseMirror, name: str) -> None:
    target = release_mirror.bin_dir / name
    assert target.is_file()
    assert os.access(target, os.X_OK)


@then(parsers.parse('the binary directory only contains "{name}"'))
def binary_directory_is_clean(release_mirror: ReleaseMirror, name: str) -> None:
    assert sorted(path.name for path in release_mirror.bin_dir.iterdir()) == [name]


@then(parsers.parse('the binary directory does not contain "{name}"'))
def binary_is_absent(release_mirror: ReleaseMirror, name: str) -> None:
    assert not (release_mirror.bin_dir / name).exists()


@then(parsers.parse('the installed binary prints "{text}" for "{flag}"'))
def installed_binary_output(release_mirror: ReleaseMirror, text: str, flag: str) -> None:
    completed = subprocess.run(
        [str(release_mirror.bin_dir / "vitals"), flag],
        capture_output=True,
        text=True,
        check=False,
        timeout=10,
    )
    assert text in completed.stdout


@then("no download was attempted")
def no_download(release_mirror: ReleaseMirror) -> None:
    assert release_mirror.download_urls == []
