"""Helpers for constructing the install service from configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from app.config import InstallerConfig, get_app_config
from services.install.constants import (
    BASE_URL_ENV,
    BIN_DIR_ENV,
    MANIFEST_ENV,
    TIMEOUT_ENV,
)
from services.install.installers import BinaryInstaller, Installer
from services.install.manifest import (
    ChecksumManifest,
    fetch_remote_manifest,
    load_bundled_manifest,
    load_manifest,
)
from services.install.models import ConfigurationError
from services.install.service import InstallService


_LOGGER = logging.getLogger(__name__)


def resolve_bin_dir(config: InstallerConfig, override: Path | str | None = None) -> Path:
    if override:
        return Path(override).expanduser()
    env_dir = os.environ.get(BIN_DIR_ENV)
    if env_dir:
        _LOGGER.debug("Using binary directory from %s: %s", BIN_DIR_ENV, env_dir)
        return Path(env_dir).expanduser()
    return config.install.bin_dir


def resolve_base_url(config: InstallerConfig, override: str | None = None) -> str:
    if override:
        return override.rstrip("/")
    env_url = os.environ.get(BASE_URL_ENV)
    if env_url:
        _LOGGER.debug("Using release host from %s: %s", BASE_URL_ENV, env_url)
        return env_url.rstrip("/")
    return config.release.base_url


def resolve_timeout(config: InstallerConfig, override: float | None = None) -> float:
    if override is not None:
        if override <= 0:
            raise ConfigurationError(f"Download timeout must be positive, got {override}")
        return float(override)
    env_timeout = os.environ.get(TIMEOUT_ENV)
    if env_timeout:
        try:
            value = float(env_timeout)
        except ValueError:
            _LOGGER.warning("Ignoring non-numeric %s value %r", TIMEOUT_ENV, env_timeout)
        else:
            if value > 0:
                return value
            _LOGGER.warning("Ignoring non-positive %s value %r", TIMEOUT_ENV, env_timeout)
    return config.network.timeout_seconds


def load_checksum_manifest(
    *,
    manifest_path: Path | str | None = None,
    manifest_url: str | None = None,
    version: str | None = None,
    timeout: float,
) -> ChecksumManifest:
    """Pick the manifest source: explicit file, environment, remote list or bundled."""

    if manifest_path is None and manifest_url is None:
        env_path = os.environ.get(MANIFEST_ENV)
        if env_path:
            _LOGGER.info("Using checksum manifest from %s: %s", MANIFEST_ENV, env_path)
            manifest_path = env_path

    if manifest_path is not None:
        return load_manifest(Path(manifest_path), version=version)
    if manifest_url is not None:
        if version is None:
            raise ConfigurationError("A remote checksum list requires an explicit version")
        return fetch_remote_manifest(manifest_url, version, timeout=timeout)
    _LOGGER.debug("Using bundled checksum manifest")
    return load_bundled_manifest()


def build_install_service(
    config: InstallerConfig | None = None,
    *,
    installer: Installer | None = None,
    bin_dir: Path | str | None = None,
    manifest_path: Path | str | None = None,
    manifest_url: str | None = None,
    version: str | None = None,
    base_url: str | None = None,
    timeout: float | None = None,
) -> InstallService:
    """Construct an :class:`InstallService` for the current environment.

    Explicit arguments win over environment variables, which win over the
    bundled configuration.
    """

    config = config or get_app_config()
    effective_timeout = resolve_timeout(config, timeout)
    manifest = load_checksum_manifest(
        manifest_path=manifest_path,
        manifest_url=manifest_url,
        version=version,
        timeout=effective_timeout,
    )
    if installer is None:
        installer = BinaryInstaller(
            resolve_bin_dir(config, bin_dir), binary_name=config.release.binary_name
        )
    return InstallService(
        manifest,
        installer,
        base_url=resolve_base_url(config, base_url),
        binary_name=config.release.binary_name,
        timeout=effective_timeout,
        smoke_test_flag=config.smoke_test.flag,
        smoke_test_expected=config.smoke_test.expected_output,
        smoke_test_timeout=config.smoke_test.timeout_seconds,
    )


__all__ = [
    "build_install_service",
    "load_checksum_manifest",
    "resolve_base_url",
    "resolve_bin_dir",
    "resolve_timeout",
]
