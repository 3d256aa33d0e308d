"""Resolver and installer backends."""

from .base import DigestResolver, PackageInstaller, PackageResolver
from .docker import DockerAptResolver, DockerDigestResolver
from .dpkg import DpkgInstaller
from .inprocess import RecordingInstaller, ScriptedAptResolver, ScriptedDigestResolver

__all__ = [
    "DigestResolver",
    "DockerAptResolver",
    "DockerDigestResolver",
    "DpkgInstaller",
    "PackageInstaller",
    "PackageResolver",
    "RecordingInstaller",
    "ScriptedAptResolver",
    "ScriptedDigestResolver",
]
