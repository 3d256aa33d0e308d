"""Lockfile parser and serializer.

The record lines are the verbatim output of ``apt-get install --print-uris``,
so the serializer reproduces apt's own shape (including the literal quotes
around the URL) rather than any shell quoting.
"""

from __future__ import annotations

import re
from pathlib import Path

from dockpin.errors import FileAccessError, LockfileError
from dockpin.lockfile.model import (
    BASE_IMAGE_KEY,
    LOCKFILE_HEADER,
    AcquisitionRecord,
    LockDocument,
    is_bare_filename,
)

RECORD_PATTERN = re.compile(r"^'([^']+)'\s+(\S+)\s+(\d+)\s+MD5Sum:([0-9a-f]{32})")


def serialize_lockfile(document: LockDocument) -> str:
    lines = [LOCKFILE_HEADER]
    if document.base_image is not None:
        if "\n" in document.base_image or "\r" in document.base_image:
            raise LockfileError(
                "Base image metadata must fit on one line.",
                context={"base_image": document.base_image},
            )
        lines.append(f"{BASE_IMAGE_KEY}={document.base_image}")
    lines.append("")
    lines.extend(format_record(record) for record in document.records)
    return "\n".join(lines) + "\n"


def format_record(record: AcquisitionRecord) -> str:
    """Render *record* as an apt URI line, refusing records that would not parse back."""
    line = f"'{record.url}' {record.filename} {record.size} MD5Sum:{record.md5}"
    try:
        if "\n" in line or "\r" in line:
            raise LockfileError("Record spans more than one line.")
        parsed = _parse_record(line)
    except LockfileError as exc:
        raise LockfileError(
            f"Record cannot be written to a lockfile: {line!r}.",
            hint="URLs must not contain quotes; sizes must be non-negative; MD5 sums must be "
            "32 lowercase hex digits; file names must be bare and contain no whitespace.",
            context={"line": line, "filename": record.filename},
        ) from exc
    if parsed != record:
        raise LockfileError(
            f"Record does not survive a round trip through the lockfile format: {line!r}.",
            context={"line": line},
        )
    return line


def parse_lockfile(raw: str) -> LockDocument:
    records: list[AcquisitionRecord] = []
    base_image: str | None = None
    for line in raw.split("\n"):
        if not line or line.startswith("#"):
            continue
        if line.startswith(f"{BASE_IMAGE_KEY}="):
            base_image = line[len(BASE_IMAGE_KEY) + 1 :]
            continue
        records.append(_parse_record(line))
    return LockDocument(records=tuple(records), base_image=base_image)


def read_lockfile(path: str | Path) -> LockDocument:
    lock_path = Path(path)
    try:
        raw = lock_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise LockfileError(
            "Lockfile is not valid UTF-8.",
            hint="Regenerate it with `dockpin apt pin`.",
            context={"path": str(lock_path), "error": str(exc)},
        ) from exc
    except FileNotFoundError as exc:
        raise LockfileError(
            "Lockfile does not exist.",
            hint="Run `dockpin apt pin` to create it.",
            context={"path": str(lock_path)},
        ) from exc
    except OSError as exc:
        raise FileAccessError(
            "Failed to read lockfile.",
            context={"path": str(lock_path), "error": str(exc)},
        ) from exc
    try:
        return parse_lockfile(raw)
    except LockfileError as exc:
        raise LockfileError(
            f"Failed to parse lockfile: {exc.args[0]}",
            hint=exc.hint,
            context={"path": str(lock_path), **exc.context},
        ) from exc


def write_lockfile(document: LockDocument, path: str | Path) -> Path:
    """Write a hand-built *document* to *path*.

    `dockpin apt pin` stores the resolver output verbatim instead; this is for
    library callers that assemble records themselves. Every record is checked
    to parse back unchanged before anything is written.
    """
    lock_path = Path(path)
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock_path.write_text(serialize_lockfile(document), encoding="utf-8")
    except OSError as exc:
        raise FileAccessError(
            "Failed to write lockfile.",
            context={"path": str(lock_path), "error": str(exc)},
        ) from exc
    return lock_path


def _parse_record(line: str) -> AcquisitionRecord:
    match = RECORD_PATTERN.match(line)
    if match is None:
        raise LockfileError(
            f"Failed to parse line {line!r}.",
            hint="Expected `'<url>' <filename> <size> MD5Sum:<32 hex digits>`.",
            context={"line": line},
        )
    url, filename, size, md5 = match.groups()
    if not is_bare_filename(filename):
        raise LockfileError(
            f"Unsafe file name in line {line!r}.",
            hint="Package file names must not contain path separators.",
            context={"line": line, "filename": filename},
        )
    return AcquisitionRecord(url=url, filename=filename, size=int(size), md5=md5)
