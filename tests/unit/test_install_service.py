from __future__ import annotations

from pathlib import Path

import pytest

from services.install import (
    BinaryInstaller,
    ChecksumManifest,
    ExtractionError,
    InstallService,
    IntegrityMismatch,
    MissingChecksum,
    Platform,
    SmokeTestFailed,
    UnsupportedPlatform,
)
from tests.unit.install_test_utils import (
    SILENT_SCRIPT,
    VITALS_SCRIPT,
    RecordingInstaller,
    build_release_archive,
    digest_of,
    manifest_for,
    publish_release,
)

_LINUX = Platform("linux", "amd64")


def _service(
    tmp_path: Path,
    archive: bytes,
    *,
    checksum: str | None = None,
    version: str = "0.1.0",
    installer=None,  # type: ignore[no-untyped-def]
) -> InstallService:
    base_url = publish_release(tmp_path / "mirror", version, "linux-amd64", archive)
    manifest = manifest_for(version, {"linux-amd64": checksum or digest_of(archive)})
    return InstallService(
        manifest,
        installer or BinaryInstaller(tmp_path / "bin"),
        base_url=base_url,
    )


def test_run_installs_verified_binary(tmp_path: Path) -> None:
    archive = build_release_archive()
    service = _service(tmp_path, archive)

    result = service.run("0.1.0", _LINUX)

    target = tmp_path / "bin" / "vitals"
    assert result.succeeded
    assert result.binary.path == target
    assert target.read_bytes() == VITALS_SCRIPT
    assert result.descriptor.asset_name == "vitals-linux-amd64.tar.gz"
    assert result.smoke_test is not None and result.smoke_test.passed


def test_run_twice_leaves_identical_install(tmp_path: Path) -> None:
    service = _service(tmp_path, build_release_archive())

    first = service.run("0.1.0", _LINUX)
    second = service.run("0.1.0", _LINUX)

    assert first.binary == second.binary
    assert sorted(path.name for path in (tmp_path / "bin").iterdir()) == ["vitals"]


def test_run_accepts_v_prefixed_version(tmp_path: Path) -> None:
    service = _service(tmp_path, build_release_archive())

    result = service.run("v0.1.0", _LINUX, run_smoke_test=False)

    assert result.descriptor.version == "0.1.0"
    assert result.smoke_test is None


def test_integrity_mismatch_installs_nothing(tmp_path: Path) -> None:
    service = _service(tmp_path, build_release_archive(), checksum="0" * 64)

    with pytest.raises(IntegrityMismatch):
        service.run("0.1.0", _LINUX)

    assert not (tmp_path / "bin" / "vitals").exists()


def test_placeholder_checksum_fails_before_download(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    service = _service(tmp_path, build_release_archive(), checksum="PLACEHOLDER")

    def unexpected(*args, **kwargs):  # type: ignore[no-untyped-def]
        raise AssertionError("network should not be touched")

    monkeypatch.setattr("services.install.download.urlopen", unexpected)

    with pytest.raises(MissingChecksum):
        service.run("0.1.0", _LINUX)
    assert not (tmp_path / "bin").exists()


def test_unsupported_platform_fails_before_download(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    service = _service(tmp_path, build_release_archive())
    monkeypatch.setattr(
        "services.install.download.urlopen",
        lambda *a, **k: pytest.fail("network should not be touched"),
    )

    with pytest.raises(UnsupportedPlatform):
        service.run("0.1.0", Platform("windows", "amd64"))


def test_archive_without_binary_raises_extraction_error(tmp_path: Path) -> None:
    archive = build_release_archive({"README.md": b"docs"})
    service = _service(tmp_path, archive)

    with pytest.raises(ExtractionError):
        service.run("0.1.0", _LINUX)
    assert not (tmp_path / "bin" / "vitals").exists()


def test_failed_smoke_test_is_reported_but_binary_kept(tmp_path: Path) -> None:
    service = _service(tmp_path, build_release_archive({"vitals": SILENT_SCRIPT}))

    result = service.run("0.1.0", _LINUX)

    assert not result.succeeded
    assert result.smoke_test is not None and not result.smoke_test.passed
    assert (tmp_path / "bin" / "vitals").exists()


def test_strict_smoke_test_raises(tmp_path: Path) -> None:
    service = _service(tmp_path, build_release_archive({"vitals": SILENT_SCRIPT}))

    with pytest.raises(SmokeTestFailed) as excinfo:
        service.run("0.1.0", _LINUX, strict_smoke_test=True)

    assert excinfo.value.result is not None
    assert not excinfo.value.result.passed
    assert (tmp_path / "bin" / "vitals").exists()


def test_resolve_defaults_to_newest_manifest_version(tmp_path: Path) -> None:
    manifest = ChecksumManifest.from_mapping(
        {"versions": {"0.1.0": {"linux-amd64": "a" * 64}, "0.2.0": {"linux-amd64": "b" * 64}}}
    )
    service = InstallService(manifest, RecordingInstaller(tmp_path / "vitals"))

    descriptor = service.resolve(platform=_LINUX)

    assert descriptor.version == "0.2.0"
    assert descriptor.expected_checksum == "b" * 64


def test_resolve_detects_host_platform(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "services.install.service.detect_platform", lambda: Platform("macos", "arm64")
    )
    manifest = manifest_for("0.1.0", {"darwin-arm64": "c" * 64})
    service = InstallService(manifest, RecordingInstaller(tmp_path / "vitals"))

    descriptor = service.resolve("0.1.0")

    assert descriptor.platform == Platform("macos", "arm64")
    assert descriptor.download_url.endswith("/v0.1.0/vitals-darwin-arm64.tar.gz")


def test_install_hands_extracted_binary_to_installer(tmp_path: Path) -> None:
    archive = build_release_archive({"vitals-0.1.0/vitals": VITALS_SCRIPT})
    installer = RecordingInstaller(tmp_path / "vitals")
    service = _service(tmp_path, archive, installer=installer)
    descriptor = service.resolve("0.1.0", _LINUX)

    binary = service.install(service.fetch_and_verify(descriptor), descriptor)

    assert installer.installed == [(VITALS_SCRIPT, "0.1.0", _LINUX)]
    assert binary.sha256 == digest_of(VITALS_SCRIPT)


def test_run_logs_each_stage(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    service = _service(tmp_path, build_release_archive())

    with caplog.at_level("INFO", logger="services.install"):
        service.run("0.1.0", _LINUX)

    messages = [record.getMessage() for record in caplog.records]
    for prefix in ("Resolved", "Downloading", "Verified", "Installed", "Smoke test passed"):
        assert any(message.startswith(prefix) for message in messages), prefix
