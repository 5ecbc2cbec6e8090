"""Hashing helpers for artifact verification."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

from services.install.models import MissingChecksum


_SHA256_PATTERN = re.compile(r"[0-9a-f]{64}")


def sha256_bytes(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()


def is_valid_sha256(value: str | None) -> bool:
    if not isinstance(value, str):
        return False
    return bool(_SHA256_PATTERN.fullmatch(value))


def normalise_digest(value: object, *, context: str = "artifact") -> str:
    """Return ``value`` as a lowercase SHA-256 hex digest.

    Accepts an optional ``sha256:`` prefix.  Empty values, placeholders and
    anything that is not 64 hex characters raise :class:`MissingChecksum`.
    """

    if not isinstance(value, str) or not value.strip():
        raise MissingChecksum(f"No SHA-256 digest recorded for {context}")
    candidate = value.strip()
    algorithm, separator, remainder = candidate.partition(":")
    if separator:
        if algorithm.strip().lower() != "sha256":
            raise MissingChecksum(
                f"Unsupported digest algorithm '{algorithm.strip()}' for {context}"
            )
        candidate = remainder.strip()
    candidate = candidate.lower()
    if not is_valid_sha256(candidate):
        raise MissingChecksum(
            f"Recorded digest for {context} is not a SHA-256 hex string: {value.strip()!r}"
        )
    return candidate


def parse_hash_text(text: str) -> dict[str, str]:
    """Parse ``SHA256SUMS`` style text into ``{filename: digest}``.

    Each non-empty line is ``<digest> <filename>``; a ``*`` binary marker in
    front of the filename is ignored.  Lines starting with ``#`` are skipped.
    """

    entries: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        parts = stripped.split(None, 1)
        if len(parts) != 2:
            continue
        digest, filename = parts
        filename = filename.strip().lstrip("*").strip()
        if filename:
            entries[Path(filename).name] = digest.strip()
    return entries
