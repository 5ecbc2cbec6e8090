"""Public API for the install service package."""

from __future__ import annotations

from services.install.builder import build_install_service
from services.install.constants import (
    BASE_URL_ENV,
    BIN_DIR_ENV,
    BINARY_NAME,
    CHECKSUM_PLACEHOLDER,
    GITHUB_REPO,
    MANIFEST_ENV,
    PLATFORM_TAGS,
    RELEASE_BASE_URL,
    RELEASE_URL_TEMPLATE,
    TIMEOUT_ENV,
)
from services.install.download import fetch_and_verify
from services.install.installers import BinaryInstaller, Installer
from services.install.manifest import ChecksumManifest, load_bundled_manifest, load_manifest
from services.install.models import (
    ArtifactDescriptor,
    ConfigurationError,
    DownloadFailed,
    ExtractionError,
    InstallError,
    InstalledBinary,
    InstallPermissionDenied,
    InstallResult,
    IntegrityMismatch,
    InvalidVersion,
    MissingChecksum,
    Platform,
    SmokeTestFailed,
    SmokeTestResult,
    UnsupportedPlatform,
)
from services.install.platforms import detect_platform, parse_platform
from services.install.resolver import resolve
from services.install.service import InstallService
from services.install.smoke import smoke_test

__all__ = [
    "BASE_URL_ENV",
    "BIN_DIR_ENV",
    "BINARY_NAME",
    "CHECKSUM_PLACEHOLDER",
    "GITHUB_REPO",
    "MANIFEST_ENV",
    "PLATFORM_TAGS",
    "RELEASE_BASE_URL",
    "RELEASE_URL_TEMPLATE",
    "TIMEOUT_ENV",
    "ArtifactDescriptor",
    "BinaryInstaller",
    "ChecksumManifest",
    "ConfigurationError",
    "DownloadFailed",
    "ExtractionError",
    "InstallError",
    "InstallPermissionDenied",
    "InstallResult",
    "InstallService",
    "InstalledBinary",
    "Installer",
    "IntegrityMismatch",
    "InvalidVersion",
    "MissingChecksum",
    "Platform",
    "SmokeTestFailed",
    "SmokeTestResult",
    "UnsupportedPlatform",
    "build_install_service",
    "detect_platform",
    "fetch_and_verify",
    "load_bundled_manifest",
    "load_manifest",
    "parse_platform",
    "resolve",
    "smoke_test",
]
