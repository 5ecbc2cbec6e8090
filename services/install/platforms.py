"""Detection and normalisation of the host platform."""

from __future__ import annotations

import logging
import platform as _platform

from services.install.constants import ARCH_ALIASES, OS_ALIASES, PLATFORM_TAGS
from services.install.models import Platform


_LOGGER = logging.getLogger(__name__)

__all__ = [
    "detect_platform",
    "normalise_arch",
    "normalise_os",
    "parse_platform",
    "supported_platforms",
]


def normalise_os(raw: str) -> str:
    lowered = raw.strip().lower()
    return OS_ALIASES.get(lowered, lowered)


def normalise_arch(raw: str) -> str:
    lowered = raw.strip().lower()
    if lowered.startswith("armv8") and lowered not in ARCH_ALIASES:
        return "arm64"
    return ARCH_ALIASES.get(lowered, lowered)


def parse_platform(os_name: str, arch: str) -> Platform:
    """Build a :class:`Platform` from loosely formatted ``os_name`` and ``arch``."""

    return Platform(os=normalise_os(os_name), arch=normalise_arch(arch))


def detect_platform() -> Platform:
    """Return the normalised platform of the running host.

    Unknown systems are returned verbatim (lowercased) so that resolution can
    reject them explicitly instead of guessing a fallback.
    """

    system = _platform.system()
    machine = _platform.machine()
    detected = parse_platform(system, machine)
    _LOGGER.debug(
        "Detected host platform %s (system=%s, machine=%s)", detected, system, machine
    )
    return detected


def supported_platforms() -> list[Platform]:
    return [Platform(os=os_name, arch=arch) for os_name, arch in PLATFORM_TAGS]
