"""Install fetched .deb files with dpkg."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from dockpin.errors import InstallerError


@dataclass(slots=True)
class DpkgInstaller:
    name: str = "dpkg"
    dpkg_bin: str = "dpkg"

    def build_command(self, paths: Sequence[Path]) -> list[str]:
        return [self.dpkg_bin, "-i", *(str(path) for path in paths)]

    def install(self, paths: Sequence[Path]) -> None:
        if shutil.which(self.dpkg_bin) is None:
            raise InstallerError(
                f"`{self.dpkg_bin}` is not available in PATH.",
                hint="Run `dockpin apt install` inside a Debian-based image.",
                context={"backend": self.name, "operation": "prepare"},
            )
        # stdout/stderr are inherited from the calling process.
        result = subprocess.run(self.build_command(paths), check=False)
        if result.returncode != 0:
            raise InstallerError(
                "dpkg failed to install the pinned packages.",
                hint="Check the dpkg output above for details.",
                context={
                    "backend": self.name,
                    "operation": "install",
                    "returncode": str(result.returncode),
                },
            )
