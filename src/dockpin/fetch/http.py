"""Integrity-enforced package download into the apt archive cache."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import BinaryIO
from urllib.error import HTTPError, URLError
from urllib.request import urlopen

from dockpin.errors import (
    FetchError,
    FetchInProgressError,
    HttpStatusError,
    IntegrityError,
    SizeMismatchError,
    ValidationError,
)
from dockpin.lockfile.model import AcquisitionRecord, is_bare_filename
from dockpin.observability import StructuredLogger, format_iec_bytes

DEFAULT_CACHE_DIR = Path("/var/cache/apt/archives")
PARTIAL_DIRNAME = "partial"
CHUNK_SIZE = 64 * 1024


def cache_path_for(record: AcquisitionRecord, cache_dir: str | Path) -> Path:
    """Return the canonical cache location for *record*."""
    if not is_bare_filename(record.filename):
        raise ValidationError(
            "Package file name must be a bare file name.",
            hint="Regenerate the lockfile; file names must not contain path separators.",
            context={"operation": "fetch", "filename": record.filename},
        )
    return Path(cache_dir) / record.filename


def fetch_package(
    record: AcquisitionRecord,
    *,
    cache_dir: str | Path = DEFAULT_CACHE_DIR,
    logger: StructuredLogger | None = None,
) -> Path:
    """Download *record* and return a path whose content matches its size and MD5.

    An existing file at the canonical location is trusted as-is: only
    verified downloads are ever renamed into place.
    """
    target = cache_path_for(record, cache_dir)
    if target.exists():
        return target

    partial_dir = Path(cache_dir) / PARTIAL_DIRNAME
    partial_dir.mkdir(parents=True, exist_ok=True)
    partial_path = partial_dir / record.filename
    try:
        handle = partial_path.open("xb")
    except FileExistsError as exc:
        raise FetchInProgressError(
            "Another download of this package is in progress.",
            hint="Remove the partial file if no other dockpin process is running.",
            context={"operation": "fetch", "url": record.url, "path": str(partial_path)},
        ) from exc

    if logger is not None:
        logger.log(
            operation="fetch",
            subject=record.filename,
            message=f"Downloading {record.url}... ({format_iec_bytes(record.size)})",
            extra={"url": record.url, "size": record.size},
        )

    try:
        with handle:
            written, actual_md5 = _download(record.url, handle)
        _verify(record, written=written, actual_md5=actual_md5)
        os.replace(partial_path, target)
    except BaseException:
        partial_path.unlink(missing_ok=True)
        raise
    return target


def _download(url: str, handle: BinaryIO) -> tuple[int, str]:
    digest = hashlib.md5()  # noqa: S324 - apt publishes MD5 sums in --print-uris
    written = 0
    try:
        with urlopen(url) as response:  # noqa: S310 - integrity check is mandatory below
            status = getattr(response, "status", None)
            if status is not None and status != 200:
                raise HttpStatusError(
                    f"Failed to download {url!r}: HTTP {status}.",
                    context={"operation": "fetch", "url": url, "status": str(status)},
                )
            while chunk := response.read(CHUNK_SIZE):
                handle.write(chunk)
                digest.update(chunk)
                written += len(chunk)
    except HTTPError as exc:
        raise HttpStatusError(
            f"Failed to download {url!r}: HTTP {exc.code} {exc.reason}.",
            context={"operation": "fetch", "url": url, "status": str(exc.code)},
        ) from exc
    except (URLError, OSError) as exc:
        raise FetchError(
            f"Failed to download {url!r}: {exc}.",
            context={"operation": "fetch", "url": url},
        ) from exc
    return written, digest.hexdigest()


def _verify(record: AcquisitionRecord, *, written: int, actual_md5: str) -> None:
    if written != record.size:
        raise SizeMismatchError(
            f"Size mismatch for {record.url!r}: {written} instead of {record.size}.",
            hint="The mirror content changed since pinning; re-run `dockpin apt pin`.",
            context={
                "operation": "fetch",
                "url": record.url,
                "expected": str(record.size),
                "actual": str(written),
            },
        )
    if actual_md5 != record.md5:
        raise IntegrityError(
            f"Hash mismatch for {record.url!r}: {actual_md5!r} instead of {record.md5!r}.",
            hint="The mirror content changed since pinning; re-run `dockpin apt pin`.",
            context={
                "operation": "fetch",
                "url": record.url,
                "expected": record.md5,
                "actual": actual_md5,
            },
        )
