"""Helpers for validating and ordering release versions."""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Iterable

from packaging.version import InvalidVersion as _PackagingInvalidVersion
from packaging.version import Version

from services.install.models import InvalidVersion


__all__ = [
    "compare_versions",
    "newest_version",
    "normalise_version",
]

_SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


def normalise_version(raw: str | None) -> str:
    """Return ``raw`` without surrounding whitespace or a leading ``v``.

    Raises :class:`InvalidVersion` unless the result is a semantic version.
    """

    if raw is None:
        raise InvalidVersion("Release version is required")
    version = raw.strip()
    if version[:1] in {"v", "V"}:
        version = version[1:]
    if not version:
        raise InvalidVersion("Release version is required")
    if not _SEMVER_PATTERN.match(version):
        raise InvalidVersion(f"Release version is not a semantic version: {raw!r}")
    return version


def compare_versions(current_version: str, candidate: str) -> int:
    """Compare ``candidate`` against ``current_version``.

    Returns ``1`` when ``candidate`` is newer, ``-1`` when it is older and ``0``
    when the versions are equivalent.  Semantic versions that ``packaging``
    cannot parse are compared token by token.
    """

    if candidate == current_version:
        return 0

    try:
        candidate_version = Version(candidate)
        current_version_parsed = Version(current_version)
    except _PackagingInvalidVersion:
        return _fallback_compare(current_version, candidate)

    if candidate_version == current_version_parsed:
        return 0
    if candidate_version > current_version_parsed:
        return 1
    return -1


def newest_version(versions: Iterable[str]) -> str | None:
    """Return the newest entry of ``versions`` or ``None`` when empty."""

    ordered = sorted(versions, key=cmp_to_key(lambda a, b: compare_versions(b, a)))
    if not ordered:
        return None
    return ordered[-1]


def _fallback_compare(current_version: str, candidate: str) -> int:
    def tokenize(version: str) -> list[tuple[int, object]]:
        core, _, prerelease = version.split("+", 1)[0].partition("-")
        tokens: list[tuple[int, object]] = []
        for raw in core.split("."):
            tokens.append((0, int(raw)) if raw.isdigit() else (1, raw.lower()))
        # A release sorts after any of its pre-releases.
        tokens.append((2, "") if not prerelease else (1, ""))
        for raw in prerelease.split(".") if prerelease else []:
            tokens.append((0, int(raw)) if raw.isdigit() else (1, raw.lower()))
        return tokens

    current_tokens = tokenize(current_version)
    candidate_tokens = tokenize(candidate)
    length = max(len(current_tokens), len(candidate_tokens))
    for index in range(length):
        current_token = current_tokens[index] if index < len(current_tokens) else (-1, 0)
        candidate_token = candidate_tokens[index] if index < len(candidate_tokens) else (-1, 0)
        if candidate_token != current_token:
            return 1 if candidate_token > current_token else -1
    return 0
