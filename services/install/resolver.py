"""Map a release version and platform onto a concrete download descriptor."""

from __future__ import annotations

import logging

from services.install.constants import BINARY_NAME, RELEASE_BASE_URL, RELEASE_URL_TEMPLATE
from services.install.manifest import ChecksumManifest
from services.install.models import ArtifactDescriptor, Platform, UnsupportedPlatform
from services.install.versioning import normalise_version


_LOGGER = logging.getLogger(__name__)

__all__ = ["build_download_url", "resolve"]


def build_download_url(
    version: str, tag: str, *, base_url: str = RELEASE_BASE_URL, binary_name: str = BINARY_NAME
) -> str:
    return RELEASE_URL_TEMPLATE.format(
        base=base_url.rstrip("/"), version=version, binary=binary_name, tag=tag
    )


def resolve(
    version: str,
    platform: Platform,
    manifest: ChecksumManifest,
    *,
    base_url: str = RELEASE_BASE_URL,
    binary_name: str = BINARY_NAME,
) -> ArtifactDescriptor:
    """Return the :class:`ArtifactDescriptor` for ``version`` on ``platform``.

    Performs no I/O.  Raises :class:`InvalidVersion`, :class:`UnsupportedPlatform`
    or :class:`MissingChecksum`, all of which are detectable before any
    network access.
    """

    version = normalise_version(version)
    tag = platform.tag
    if tag is None:
        raise UnsupportedPlatform(
            f"No {binary_name} release artifact is published for {platform}"
        )

    checksum = manifest.lookup(version, tag)
    url = build_download_url(version, tag, base_url=base_url, binary_name=binary_name)
    descriptor = ArtifactDescriptor(
        version=version,
        platform=platform,
        download_url=url,
        expected_checksum=checksum,
        asset_name=url.rsplit("/", 1)[-1],
    )
    _LOGGER.debug("Resolved %s %s for %s to %s", binary_name, version, platform, url)
    return descriptor
