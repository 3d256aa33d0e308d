"""Docker-backed resolvers.

Package URIs are resolved by running apt inside a throwaway container of the
target base image, so the dependency set matches what the image will install.
Digests are looked up in the registry through ``docker buildx imagetools``.
"""

from __future__ import annotations

import json
import shlex
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

from dockpin.errors import ResolverError

APT_PRINT_URIS_SCRIPT = (
    "apt-get update >&2 && "
    "echo Determining dependencies... >&2 && "
    "apt-get install --print-uris -qq --no-install-recommends"
)


@dataclass(slots=True)
class DockerAptResolver:
    name: str = "docker_apt"
    docker_bin: str = "docker"

    def build_command(self, base_image: str, packages: Sequence[str]) -> list[str]:
        script = " ".join([APT_PRINT_URIS_SCRIPT, *(shlex.quote(p) for p in packages)])
        return [self.docker_bin, "run", "--rm", base_image, "bash", "-c", script]

    def resolve_uris(self, base_image: str, packages: Sequence[str]) -> str:
        self._ensure_docker()
        cmd = self.build_command(base_image, packages)
        # stderr is inherited so apt's progress stays visible to the user.
        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            raise ResolverError(
                "apt failed to resolve package URIs.",
                hint="Check the apt output above; package names must exist in the base image.",
                context={
                    "backend": self.name,
                    "operation": "resolve_uris",
                    "base_image": base_image,
                    "returncode": str(result.returncode),
                },
            )
        return result.stdout

    def _ensure_docker(self) -> None:
        if shutil.which(self.docker_bin) is None:
            raise ResolverError(
                f"`{self.docker_bin}` is not available in PATH.",
                hint="Install Docker or pass --base-image on a host that has it.",
                context={"backend": self.name, "operation": "prepare"},
            )


@dataclass(slots=True)
class DockerDigestResolver:
    name: str = "docker_registry"
    docker_bin: str = "docker"

    def build_command(self, reference: str) -> list[str]:
        return [
            self.docker_bin,
            "buildx",
            "imagetools",
            "inspect",
            reference,
            "--format",
            "{{json .Manifest}}",
        ]

    def resolve_digest(self, reference: str) -> str:
        if shutil.which(self.docker_bin) is None:
            raise ResolverError(
                f"`{self.docker_bin}` is not available in PATH.",
                hint="Install Docker with the buildx plugin.",
                context={"backend": self.name, "operation": "prepare"},
            )
        result = subprocess.run(
            self.build_command(reference),
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            raise ResolverError(
                f"Failed to resolve digest of {reference}.",
                hint="Check that the image exists and the registry is reachable.",
                context={
                    "backend": self.name,
                    "operation": "resolve_digest",
                    "reference": reference,
                    "returncode": str(result.returncode),
                    "stderr": result.stderr[-2000:] if result.stderr else "",
                },
            )
        return _digest_from_manifest(reference, result.stdout)


def _digest_from_manifest(reference: str, raw: str) -> str:
    try:
        manifest = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ResolverError(
            f"Registry returned an unreadable manifest for {reference}.",
            context={"operation": "resolve_digest", "reference": reference},
        ) from exc
    digest = manifest.get("digest") if isinstance(manifest, dict) else None
    if not isinstance(digest, str) or not digest:
        raise ResolverError(
            f"Registry manifest for {reference} has no digest.",
            context={"operation": "resolve_digest", "reference": reference},
        )
    return digest
