"""Lockfile typed model."""

from __future__ import annotations

from dataclasses import dataclass

LOCKFILE_HEADER = "# dockpin apt lock file v1"
BASE_IMAGE_KEY = "base-image"


@dataclass(frozen=True, slots=True)
class AcquisitionRecord:
    """One pinned .deb: where to download it and what it must hash to."""

    url: str
    filename: str
    size: int
    md5: str


@dataclass(frozen=True, slots=True)
class LockDocument:
    records: tuple[AcquisitionRecord, ...] = ()
    base_image: str | None = None


def is_bare_filename(name: str) -> bool:
    """True when *name* can be joined to a directory without escaping it."""
    if not name or name in (".", ".."):
        return False
    return "/" not in name and "\\" not in name and "\x00" not in name
