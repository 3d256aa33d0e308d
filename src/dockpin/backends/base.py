"""Protocols for the external tools dockpin delegates to."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol


class PackageResolver(Protocol):
    name: str

    def resolve_uris(self, base_image: str, packages: Sequence[str]) -> str:
        """Return apt's ``--print-uris`` output for *packages* inside *base_image*."""


class DigestResolver(Protocol):
    name: str

    def resolve_digest(self, reference: str) -> str:
        """Return the current content digest (``sha256:...``) for *reference*."""


class PackageInstaller(Protocol):
    name: str

    def install(self, paths: Sequence[Path]) -> None:
        """Install the given local package files in one invocation."""
