"""In-process backends for testing and development.

Return scripted output instead of invoking docker or dpkg, and record every
call so tests can assert on what would have been executed.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from dockpin.errors import InstallerError, ResolverError


@dataclass(slots=True)
class ScriptedAptResolver:
    """Package resolver that replays a fixed ``--print-uris`` output."""

    output: str = ""
    name: str = "scripted_apt"
    calls: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)

    def resolve_uris(self, base_image: str, packages: Sequence[str]) -> str:
        self.calls.append((base_image, tuple(packages)))
        return self.output


@dataclass(slots=True)
class ScriptedDigestResolver:
    """Digest resolver backed by a name -> digest table."""

    digests: Mapping[str, str] = field(default_factory=dict)
    name: str = "scripted_registry"
    calls: list[str] = field(default_factory=list)

    def resolve_digest(self, reference: str) -> str:
        self.calls.append(reference)
        try:
            return self.digests[reference]
        except KeyError as exc:
            raise ResolverError(
                f"Failed to resolve digest of {reference}.",
                context={"backend": self.name, "reference": reference},
            ) from exc


@dataclass(slots=True)
class RecordingInstaller:
    """Installer that records the files it was given, optionally failing."""

    fail: bool = False
    name: str = "recording"
    installs: list[tuple[Path, ...]] = field(default_factory=list)
    seen_contents: list[dict[str, bytes]] = field(default_factory=list)

    def install(self, paths: Sequence[Path]) -> None:
        self.installs.append(tuple(paths))
        self.seen_contents.append({path.name: path.read_bytes() for path in paths})
        if self.fail:
            raise InstallerError(
                "Scripted installer failure.",
                context={"backend": self.name, "operation": "install"},
            )
