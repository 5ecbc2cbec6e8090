"""Archive handling helpers for the install service."""

from __future__ import annotations

import io
import logging
import tarfile
from pathlib import PurePosixPath

from services.install import constants
from services.install.models import ExtractionError


_LOGGER = logging.getLogger(__name__)

__all__ = ["extract_binary"]


def extract_binary(archive: bytes, binary_name: str = constants.BINARY_NAME) -> bytes:
    """Return the contents of the single ``binary_name`` entry in ``archive``.

    The entry may sit at the top level or inside one directory.  Missing,
    duplicated, oversized or non-regular entries raise :class:`ExtractionError`.
    """

    try:
        with tarfile.open(fileobj=io.BytesIO(archive), mode="r:gz") as bundle:
            member = _locate_member(bundle, binary_name)
            source = bundle.extractfile(member)
            if source is None:
                raise ExtractionError(f"Archive entry {member.name} could not be read")
            with source:
                payload = source.read()
    except (tarfile.TarError, EOFError, OSError) as exc:
        raise ExtractionError(f"Failed to read release archive: {exc}") from exc

    if len(payload) != member.size:
        raise ExtractionError(f"Archive entry {member.name} was truncated")
    _LOGGER.info("Extracted %s (%s bytes) from release archive", member.name, len(payload))
    return payload


def _locate_member(bundle: tarfile.TarFile, binary_name: str) -> tarfile.TarInfo:
    candidates: list[tarfile.TarInfo] = []
    processed_entries = 0
    for member in bundle:
        processed_entries += 1
        if processed_entries > constants.MAX_ARCHIVE_ENTRIES:
            _LOGGER.error(
                "Archive entry count %s exceeded limit %s",
                processed_entries,
                constants.MAX_ARCHIVE_ENTRIES,
            )
            raise ExtractionError("Release archive contained too many entries")
        path = PurePosixPath(member.name)
        parts = [part for part in path.parts if part not in {"", "."}]
        if member.isdir() or not parts or parts[-1] != binary_name or len(parts) > 2:
            continue
        if path.is_absolute() or ".." in parts:
            raise ExtractionError(f"Release archive contained an unsafe path {member.name!r}")
        candidates.append(member)

    if not candidates:
        raise ExtractionError(f"Release archive did not contain a {binary_name} executable")
    if len(candidates) > 1:
        names = ", ".join(member.name for member in candidates)
        raise ExtractionError(f"Release archive contained several {binary_name} entries: {names}")

    member = candidates[0]
    if not member.isfile():
        raise ExtractionError(f"Archive entry {member.name} is not a regular file")
    if member.size > constants.MAX_BINARY_BYTES:
        _LOGGER.error(
            "Archive member %s exceeded file size limit (%s > %s)",
            member.name,
            member.size,
            constants.MAX_BINARY_BYTES,
        )
        raise ExtractionError("Release archive contained an oversized executable")
    _LOGGER.debug("Located archive entry %s", member.name)
    return member
