"""Data models and errors used by the install service."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from services.install.constants import PLATFORM_TAGS


@dataclass(frozen=True)
class Platform:
    """Host operating system and CPU architecture pair."""

    os: str
    arch: str

    @property
    def tag(self) -> str | None:
        """Return the asset filename suffix, or ``None`` when unsupported."""

        return PLATFORM_TAGS.get((self.os, self.arch))

    @property
    def is_supported(self) -> bool:
        return self.tag is not None

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


@dataclass(frozen=True)
class ArtifactDescriptor:
    """Where to download a release archive and the digest it must match."""

    version: str
    platform: Platform
    download_url: str
    expected_checksum: str
    asset_name: str


@dataclass(frozen=True)
class InstalledBinary:
    """The executable placed into the binary directory."""

    path: Path
    version: str
    platform: Platform
    sha256: str
    size_bytes: int


@dataclass(frozen=True)
class SmokeTestResult:
    """Outcome of invoking the installed binary once."""

    passed: bool
    command: Tuple[str, ...]
    output: str = ""
    returncode: int | None = None
    reason: str | None = None


@dataclass(frozen=True)
class InstallResult:
    """Everything produced by a complete pipeline run."""

    descriptor: ArtifactDescriptor
    binary: InstalledBinary
    smoke_test: SmokeTestResult | None = None

    @property
    def succeeded(self) -> bool:
        return self.smoke_test is None or self.smoke_test.passed


class InstallError(RuntimeError):
    """Raised when a release cannot be resolved, downloaded, verified or installed."""


class ConfigurationError(InstallError):
    """Raised for problems detectable without any network access."""


class InvalidVersion(ConfigurationError):
    """The requested release version is not a semantic version."""


class UnsupportedPlatform(ConfigurationError):
    """No release artifact exists for the host platform."""


class MissingChecksum(ConfigurationError):
    """The checksum manifest has no usable digest for the requested artifact."""


class DownloadFailed(InstallError):
    """The artifact could not be fetched from the release host."""


class IntegrityMismatch(InstallError):
    """The downloaded bytes do not match the expected digest."""


class ExtractionError(InstallError):
    """The archive is malformed or does not contain the expected executable."""


class InstallPermissionDenied(InstallError):
    """The binary directory is not writable."""


class SmokeTestFailed(InstallError):
    """The installed binary did not identify itself when invoked."""

    def __init__(self, message: str, result: SmokeTestResult) -> None:
        super().__init__(message)
        self.result = result
