"""Checksum manifests mapping release versions to per-platform digests."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from http.client import HTTPException
from typing import Any, Mapping
from urllib.error import URLError
from urllib.request import urlopen

from services.install.constants import ARCHIVE_SUFFIX, BINARY_NAME
from services.install.hashing import normalise_digest, parse_hash_text
from services.install.models import (
    ConfigurationError,
    DownloadFailed,
    InvalidVersion,
    MissingChecksum,
)
from services.install.versioning import newest_version, normalise_version


_LOGGER = logging.getLogger(__name__)

_BUNDLED_PACKAGE = "app.config"
_BUNDLED_RESOURCE = "checksums.json"

__all__ = [
    "ChecksumManifest",
    "fetch_remote_manifest",
    "load_bundled_manifest",
    "load_manifest",
    "manifest_from_checksum_text",
]


@dataclass(frozen=True)
class ChecksumManifest:
    """Release-provided digests keyed by version then platform tag.

    Raw values are kept exactly as supplied; validation happens on
    :meth:`lookup` so placeholders fail loudly instead of disappearing.
    """

    versions: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    source: str = "<memory>"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, source: str = "<memory>") -> "ChecksumManifest":
        section = data.get("versions") if isinstance(data, Mapping) else None
        if not isinstance(section, Mapping):
            raise ConfigurationError(f"Checksum manifest {source} has no 'versions' table")

        versions: dict[str, dict[str, str]] = {}
        for raw_version, entries in section.items():
            try:
                version = normalise_version(str(raw_version))
            except InvalidVersion:
                _LOGGER.warning(
                    "Ignoring manifest entry with invalid version %r in %s", raw_version, source
                )
                continue
            if not isinstance(entries, Mapping):
                _LOGGER.warning(
                    "Ignoring manifest entry for version %s in %s: expected a table", version, source
                )
                continue
            versions[version] = {
                str(tag): "" if value is None else str(value) for tag, value in entries.items()
            }
        return cls(versions=versions, source=source)

    def has_version(self, version: str) -> bool:
        return version in self.versions

    def latest_version(self) -> str:
        latest = newest_version(self.versions)
        if latest is None:
            raise MissingChecksum(f"Checksum manifest {self.source} lists no releases")
        return latest

    def lookup(self, version: str, tag: str) -> str:
        """Return the validated SHA-256 digest for ``version`` on ``tag``."""

        entries = self.versions.get(version)
        if entries is None:
            raise MissingChecksum(
                f"Checksum manifest {self.source} has no entry for version {version}"
            )
        if tag not in entries:
            raise MissingChecksum(
                f"Checksum manifest {self.source} has no {tag} digest for version {version}"
            )
        return normalise_digest(entries[tag], context=f"{BINARY_NAME} {version} ({tag})")


def load_manifest(path: Path, *, version: str | None = None) -> ChecksumManifest:
    """Load a JSON manifest or a ``SHA256SUMS`` text file from ``path``."""

    path = Path(path).expanduser()
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read checksum manifest {path}: {exc}") from exc

    if path.suffix.lower() == ".json" or raw.lstrip().startswith("{"):
        _LOGGER.debug("Parsing JSON checksum manifest %s", path)
        return _manifest_from_json(raw, source=str(path))

    if version is None:
        raise ConfigurationError(
            f"Checksum list {path} does not name a release; pass an explicit version"
        )
    _LOGGER.debug("Parsing checksum list %s for version %s", path, version)
    return manifest_from_checksum_text(raw, version, source=str(path))


def load_bundled_manifest() -> ChecksumManifest:
    """Return the manifest shipped alongside the application configuration."""

    try:
        raw = resources.files(_BUNDLED_PACKAGE).joinpath(_BUNDLED_RESOURCE).read_text(
            encoding="utf-8"
        )
    except (FileNotFoundError, ModuleNotFoundError, OSError) as exc:
        raise ConfigurationError(f"Bundled checksum manifest is unavailable: {exc}") from exc
    return _manifest_from_json(raw, source=f"{_BUNDLED_PACKAGE}/{_BUNDLED_RESOURCE}")


def fetch_remote_manifest(url: str, version: str, *, timeout: float) -> ChecksumManifest:
    """Download a ``SHA256SUMS`` list published next to the release assets."""

    _LOGGER.info("Downloading checksum list for version %s from %s", version, url)
    try:
        with urlopen(url, timeout=timeout) as response:  # nosec - release host over HTTPS
            text = response.read().decode("utf-8")
    except (HTTPException, OSError, URLError, UnicodeDecodeError) as exc:
        raise DownloadFailed(f"Failed to download checksum list {url}: {exc}") from exc
    return manifest_from_checksum_text(text, version, source=url)


def manifest_from_checksum_text(
    text: str, version: str, *, source: str = "<memory>"
) -> ChecksumManifest:
    version = normalise_version(version)
    prefix = f"{BINARY_NAME}-"
    entries: dict[str, str] = {}
    for filename, digest in parse_hash_text(text).items():
        if not (filename.startswith(prefix) and filename.endswith(ARCHIVE_SUFFIX)):
            continue
        tag = filename[len(prefix) : -len(ARCHIVE_SUFFIX)]
        entries[tag] = digest
    if not entries:
        _LOGGER.warning("Checksum list %s did not mention any %s archives", source, BINARY_NAME)
    return ChecksumManifest(versions={version: entries}, source=source)


def _manifest_from_json(raw: str, *, source: str) -> ChecksumManifest:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Checksum manifest {source} is not valid JSON: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Checksum manifest {source} must be a JSON object")
    return ChecksumManifest.from_mapping(data, source=source)
