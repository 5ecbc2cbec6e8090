"""Utilities for acquiring and verifying release archives."""

from __future__ import annotations

import logging
from http.client import HTTPException
from urllib.error import HTTPError, URLError
from urllib.request import urlopen

from services.install.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    DOWNLOAD_CHUNK_SIZE,
    MAX_ARCHIVE_DOWNLOAD_BYTES,
)
from services.install.hashing import normalise_digest, sha256_bytes
from services.install.models import ArtifactDescriptor, DownloadFailed, IntegrityMismatch


_LOGGER = logging.getLogger(__name__)

__all__ = ["download_artifact", "fetch_and_verify"]


def download_artifact(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    max_bytes: int = MAX_ARCHIVE_DOWNLOAD_BYTES,
) -> bytes:
    """Return the body served at ``url``.

    Any HTTP status error, connection problem or timeout raises
    :class:`DownloadFailed`.
    """

    chunks: list[bytes] = []
    received = 0
    try:
        with urlopen(url, timeout=timeout) as response:  # nosec - release host over HTTPS
            for chunk in iter(lambda: response.read(DOWNLOAD_CHUNK_SIZE), b""):
                received += len(chunk)
                if received > max_bytes:
                    raise DownloadFailed(
                        f"Artifact at {url} exceeded the {max_bytes} byte download limit"
                    )
                chunks.append(chunk)
    except HTTPError as exc:
        raise DownloadFailed(f"Release host returned HTTP {exc.code} for {url}") from exc
    except (HTTPException, OSError, URLError, ValueError) as exc:
        raise DownloadFailed(f"Failed to download {url}: {exc}") from exc
    _LOGGER.debug("Downloaded %s bytes from %s", received, url)
    return b"".join(chunks)


def fetch_and_verify(
    descriptor: ArtifactDescriptor, *, timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> bytes:
    """Download the archive for ``descriptor`` and check its SHA-256 digest.

    Nothing is written to disk; the verified bytes are returned so that a
    corrupt download can never reach the installer.
    """

    expected = normalise_digest(
        descriptor.expected_checksum, context=descriptor.asset_name
    )
    _LOGGER.info(
        "Downloading %s for version %s from %s",
        descriptor.asset_name,
        descriptor.version,
        descriptor.download_url,
    )
    payload = download_artifact(descriptor.download_url, timeout=timeout)
    actual = sha256_bytes(payload)
    if actual != expected:
        raise IntegrityMismatch(
            f"Archive hash mismatch for {descriptor.asset_name}: expected {expected} but received {actual}"
        )
    _LOGGER.info("Verified %s (sha256 %s)", descriptor.asset_name, actual)
    return payload
