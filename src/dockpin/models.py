"""Typed results returned by the pin/install/check workflows."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from dockpin.lockfile.model import LockDocument


@dataclass(frozen=True, slots=True)
class PackagePinResult:
    lock_path: Path
    base_image: str
    base_image_inferred: bool
    document: LockDocument


@dataclass(frozen=True, slots=True)
class PackageInstallResult:
    installed: tuple[Path, ...] = ()

    @property
    def skipped(self) -> bool:
        return not self.installed


@dataclass(frozen=True, slots=True)
class ImagePinResult:
    digests: dict[str, str]
    text: str


@dataclass(frozen=True, slots=True)
class ImageCheckResult:
    digests: dict[str, str]
    stale: tuple[str, ...] = field(default_factory=tuple)

    @property
    def up_to_date(self) -> bool:
        return not self.stale
