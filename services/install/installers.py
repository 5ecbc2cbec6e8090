"""Installer implementations that place the executable on disk."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from services.install.constants import (
    BINARY_NAME,
    EXECUTABLE_MODE,
    TEMP_FILE_PREFIX,
    TEMP_FILE_SUFFIX,
)
from services.install.hashing import sha256_bytes
from services.install.models import (
    InstallError,
    InstalledBinary,
    InstallPermissionDenied,
    Platform,
)

_LOGGER = logging.getLogger(__name__)


class Installer(Protocol):
    """Protocol describing how an extracted executable is put in place."""

    def install(self, payload: bytes, version: str, platform: Platform) -> InstalledBinary:
        """Install ``payload`` and return the resulting :class:`InstalledBinary`."""


class BinaryInstaller:
    """Atomically replace ``<bin_dir>/<binary_name>`` with a new executable.

    The payload is written to a temporary file in the target directory and
    renamed over the final path, so an interrupted install leaves the
    previous binary untouched.  Concurrent installs race on the rename and
    the last one to finish wins.
    """

    def __init__(self, bin_dir: Path, *, binary_name: str = BINARY_NAME) -> None:
        self._bin_dir = Path(bin_dir).expanduser()
        self._binary_name = binary_name

    @property
    def target_path(self) -> Path:
        return self._bin_dir / self._binary_name

    def install(self, payload: bytes, version: str, platform: Platform) -> InstalledBinary:
        target = self.target_path
        _LOGGER.info("Installing %s %s to %s", self._binary_name, version, target)
        try:
            self._bin_dir.mkdir(parents=True, exist_ok=True)
            self._write_atomically(payload, target)
        except PermissionError as exc:
            raise InstallPermissionDenied(
                f"Cannot write to binary directory {self._bin_dir}: {exc}"
            ) from exc
        except OSError as exc:
            raise InstallError(f"Failed to install {target}: {exc}") from exc

        installed = InstalledBinary(
            path=target,
            version=version,
            platform=platform,
            sha256=sha256_bytes(payload),
            size_bytes=len(payload),
        )
        _LOGGER.info("Installed %s %s (%s bytes)", self._binary_name, version, installed.size_bytes)
        return installed

    def _write_atomically(self, payload: bytes, target: Path) -> None:
        fd, temp_name = tempfile.mkstemp(
            prefix=TEMP_FILE_PREFIX, suffix=TEMP_FILE_SUFFIX, dir=str(self._bin_dir)
        )
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as destination:
                destination.write(payload)
                destination.flush()
                os.fsync(destination.fileno())
            os.chmod(temp_path, EXECUTABLE_MODE)
            os.replace(temp_path, target)
        except BaseException:
            _discard(temp_path)
            raise
        _LOGGER.debug("Renamed %s to %s", temp_path, target)
        _sync_directory(self._bin_dir)


def _sync_directory(directory: Path) -> None:
    """Flush the directory entry so the rename survives a power loss (POSIX only)."""

    flag = getattr(os, "O_DIRECTORY", None)
    if flag is None:
        return
    try:
        fd = os.open(directory, os.O_RDONLY | flag)
    except OSError:
        _LOGGER.warning("Unable to open %s to flush the install", directory, exc_info=True)
        return
    try:
        os.fsync(fd)
    except OSError:
        _LOGGER.warning("Unable to flush directory %s", directory, exc_info=True)
    finally:
        os.close(fd)


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError:
        _LOGGER.debug("Unable to remove temporary file %s", path, exc_info=True)
