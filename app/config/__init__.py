"""Installer configuration loaded from JSON resources."""

from __future__ import annotations

import json
from dataclasses import dataclass
from importlib import resources
from math import isfinite
from pathlib import Path
from typing import Any, Mapping

_CONFIG_RESOURCE = "app.json"
_APP_CONFIG_CACHE: InstallerConfig | None = None

_DEFAULT_BASE_URL = "https://github.com/onuroluc/vitals"
_DEFAULT_BINARY_NAME = "vitals"
_DEFAULT_BIN_DIR = "~/.local/bin"
_DEFAULT_TIMEOUT = 60.0
_DEFAULT_SMOKE_FLAG = "--help"
_DEFAULT_SMOKE_TIMEOUT = 10.0


@dataclass(frozen=True)
class ReleaseConfig:
    """Where release archives are published."""

    base_url: str
    binary_name: str


@dataclass(frozen=True)
class InstallTargetConfig:
    """Where the executable is installed."""

    bin_dir: Path


@dataclass(frozen=True)
class NetworkConfig:
    timeout_seconds: float


@dataclass(frozen=True)
class SmokeTestConfig:
    """How the installed binary is exercised after installation."""

    flag: str
    expected_output: str
    timeout_seconds: float


@dataclass(frozen=True)
class InstallerConfig:
    """Structured configuration values for the installer."""

    release: ReleaseConfig
    install: InstallTargetConfig
    network: NetworkConfig
    smoke_test: SmokeTestConfig


def get_app_config() -> InstallerConfig:
    """Return the cached installer configuration."""

    global _APP_CONFIG_CACHE
    if _APP_CONFIG_CACHE is None:
        _APP_CONFIG_CACHE = load_app_config()
    return _APP_CONFIG_CACHE


def reset_app_config_cache() -> None:
    """Reset the cached configuration for subsequent reloads."""

    global _APP_CONFIG_CACHE
    _APP_CONFIG_CACHE = None


def load_app_config(path: str | Path | None = None) -> InstallerConfig:
    """Load configuration from ``path`` or the bundled JSON resource."""

    data = _read_config_data(path)
    release = _parse_release_section(_section(data, "release"))
    install = _parse_install_section(_section(data, "install"))
    network = _parse_network_section(_section(data, "network"))
    smoke_test = _parse_smoke_test_section(_section(data, "smoke_test"), release)
    return InstallerConfig(release=release, install=install, network=network, smoke_test=smoke_test)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any] | None:
    section = data.get(name) if isinstance(data, Mapping) else None
    return section if isinstance(section, Mapping) else None


def _read_config_data(path: str | Path | None) -> Mapping[str, Any]:
    if path is not None:
        return _load_json_from_path(Path(path).expanduser())
    return _load_default_config_data()


def _load_json_from_path(path: Path) -> Mapping[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    return _parse_json(raw)


def _load_default_config_data() -> Mapping[str, Any]:
    try:
        resource = resources.files(__package__).joinpath(_CONFIG_RESOURCE)
        raw = resource.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return {}
    return _parse_json(raw)


def _parse_json(raw: str) -> Mapping[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    if isinstance(parsed, Mapping):
        return parsed
    return {}


def _parse_release_section(section: Mapping[str, Any] | None) -> ReleaseConfig:
    if section is None:
        return ReleaseConfig(base_url=_DEFAULT_BASE_URL, binary_name=_DEFAULT_BINARY_NAME)
    base_url = _coerce_text(section.get("base_url"), default=_DEFAULT_BASE_URL).rstrip("/")
    binary_name = _coerce_text(section.get("binary_name"), default=_DEFAULT_BINARY_NAME)
    return ReleaseConfig(base_url=base_url, binary_name=binary_name)


def _parse_install_section(section: Mapping[str, Any] | None) -> InstallTargetConfig:
    raw = _DEFAULT_BIN_DIR if section is None else section.get("bin_dir")
    bin_dir = _coerce_text(raw, default=_DEFAULT_BIN_DIR)
    return InstallTargetConfig(bin_dir=Path(bin_dir).expanduser())


def _parse_network_section(section: Mapping[str, Any] | None) -> NetworkConfig:
    if section is None:
        return NetworkConfig(timeout_seconds=_DEFAULT_TIMEOUT)
    timeout = _coerce_positive_float(section.get("timeout_seconds"), default=_DEFAULT_TIMEOUT)
    return NetworkConfig(timeout_seconds=timeout)


def _parse_smoke_test_section(
    section: Mapping[str, Any] | None, release: ReleaseConfig
) -> SmokeTestConfig:
    if section is None:
        return SmokeTestConfig(
            flag=_DEFAULT_SMOKE_FLAG,
            expected_output=release.binary_name,
            timeout_seconds=_DEFAULT_SMOKE_TIMEOUT,
        )
    flag = _coerce_text(section.get("flag"), default=_DEFAULT_SMOKE_FLAG)
    expected = _coerce_text(section.get("expected_output"), default=release.binary_name)
    timeout = _coerce_positive_float(section.get("timeout_seconds"), default=_DEFAULT_SMOKE_TIMEOUT)
    return SmokeTestConfig(flag=flag, expected_output=expected, timeout_seconds=timeout)


def _coerce_text(value: Any, *, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _coerce_positive_float(value: Any, *, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        candidate = float(value)
    elif isinstance(value, str):
        try:
            candidate = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    if not isfinite(candidate) or candidate <= 0:
        return default
    return candidate
