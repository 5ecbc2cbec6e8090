from __future__ import annotations

"""Installer version helpers."""

from functools import lru_cache
import os
from importlib import metadata, resources

_FALLBACK_VERSION = "0.0.0-dev"
_DISTRIBUTION = "vitals-installer"


def _read_version_file() -> str | None:
    try:
        text = resources.files(__package__).joinpath("VERSION").read_text(encoding="utf-8")
    except (FileNotFoundError, ModuleNotFoundError, TypeError):
        return None
    version = text.strip()
    return version or None


def _version_from_env() -> str | None:
    env_version = os.environ.get("VITALS_INSTALLER_VERSION")
    if not env_version:
        return None
    return _normalize(env_version)


def _version_from_metadata() -> str | None:
    try:
        return metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return None


def _normalize(raw_version: str) -> str:
    version = raw_version.strip()
    if version.startswith("v"):
        version = version[1:]
    return version


@lru_cache(maxsize=1)
def get_app_version() -> str:
    """Return the installer version.

    The order of precedence is:
    1. The ``VITALS_INSTALLER_VERSION`` environment variable.
    2. Embedded ``VERSION`` file packaged with the app.
    3. Installed distribution metadata.
    4. A fallback development version string.
    """

    for resolver in (_version_from_env, _read_version_file, _version_from_metadata):
        version = resolver()
        if version:
            return version
    return _FALLBACK_VERSION


__all__ = ["get_app_version"]
