"""Run configuration threaded explicitly into every workflow."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from dockpin.errors import FileAccessError
from dockpin.fetch.http import DEFAULT_CACHE_DIR

STDIO_PATH = "-"
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"
DEFAULT_DOCKERFILE = "Dockerfile"
DEFAULT_LOCK_FILE = "dockpin-apt.lock"
DEFAULT_SELECTION_FILE = "dockpin-apt.pkgs"


@dataclass(frozen=True, slots=True)
class DockpinConfig:
    dockerfile: str = DEFAULT_DOCKERFILE
    lock_file: str = DEFAULT_LOCK_FILE
    selection_file: str = DEFAULT_SELECTION_FILE
    base_image: str | None = None
    cache_dir: Path = DEFAULT_CACHE_DIR


def read_text(path: str, *, stdin: TextIO | None = None, purpose: str = "input") -> str:
    """Read *path*, where ``-`` means standard input.

    Undecodable bytes are kept as surrogates so they round-trip through
    ``write_text`` unchanged.
    """
    if path == STDIO_PATH:
        if stdin is not None:
            return stdin.read()
        return sys.stdin.buffer.read().decode(ENCODING, errors=ENCODING_ERRORS)
    try:
        with Path(path).open(encoding=ENCODING, errors=ENCODING_ERRORS, newline="") as handle:
            return handle.read()
    except OSError as exc:
        raise FileAccessError(
            f"Failed to read {purpose} {path!r}.",
            context={"path": path, "error": str(exc)},
        ) from exc


def write_text(path: str, content: str, *, stdout: TextIO | None = None) -> None:
    """Write *content* to *path*, where ``-`` means standard output."""
    if path == STDIO_PATH:
        if stdout is not None:
            stdout.write(content)
            stdout.flush()
            return
        sys.stdout.flush()
        sys.stdout.buffer.write(content.encode(ENCODING, errors=ENCODING_ERRORS))
        sys.stdout.buffer.flush()
        return
    try:
        with Path(path).open(
            "w", encoding=ENCODING, errors=ENCODING_ERRORS, newline=""
        ) as handle:
            handle.write(content)
    except OSError as exc:
        raise FileAccessError(
            f"Failed to write {path!r}.",
            context={"path": path, "error": str(exc)},
        ) from exc
