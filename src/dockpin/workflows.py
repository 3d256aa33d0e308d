"""Pin/install/check workflows.

Every workflow is sequential: resolutions and downloads happen one at a time
in file order, and any failure aborts the whole run.
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

from dockpin.backends.base import DigestResolver, PackageInstaller, PackageResolver
from dockpin.config import DockpinConfig, read_text, write_text
from dockpin.errors import ConsistencyError, LockfileError, StaleImageError, ValidationError
from dockpin.fetch.http import fetch_package
from dockpin.lockfile import LockDocument, parse_lockfile, read_lockfile, serialize_lockfile
from dockpin.models import ImageCheckResult, ImagePinResult, PackageInstallResult, PackagePinResult
from dockpin.observability import StructuredLogger
from dockpin.references import (
    BaseImageReference,
    distinct_names,
    find_last_reference,
    is_pinned_to,
    rewrite_references,
    scan_references,
)


def parse_selection(raw: str) -> list[str]:
    """Package names, one per line; blank lines are ignored."""
    return [line.strip() for line in raw.split("\n") if line.strip()]


def pin_packages(
    config: DockpinConfig,
    *,
    resolver: PackageResolver,
    logger: StructuredLogger | None = None,
    stdin: TextIO | None = None,
) -> PackagePinResult:
    """Resolve the selected packages inside the base image and write the lockfile."""
    logger = logger if logger is not None else StructuredLogger()
    packages = parse_selection(read_text(config.selection_file, purpose="selection file"))

    base_image = config.base_image
    inferred = False
    if not base_image:
        base_image = _infer_base_image(config, stdin=stdin)
        inferred = True
        logger.log(
            operation="apt_pin",
            subject=base_image,
            message=(
                "Based on your Dockerfile, it looks like you'll use dockpin in an image "
                f"based on {base_image}. Pass --base-image if that's incorrect."
            ),
        )

    header = serialize_lockfile(LockDocument(base_image=base_image))
    raw = header + resolver.resolve_uris(base_image, packages)
    try:
        document = parse_lockfile(raw)
    except LockfileError as exc:
        raise ConsistencyError(
            "Bug: lock file generated from the resolver is invalid.",
            hint="Please report this together with the resolver output.",
            context={"operation": "apt_pin", "backend": resolver.name, **exc.context},
        ) from exc

    write_text(config.lock_file, raw)
    logger.log(
        operation="apt_pin",
        subject=config.lock_file,
        message=f"Pinned {len(document.records)} package file(s) to {config.lock_file}.",
        level="debug",
        extra={"packages": packages},
    )
    return PackagePinResult(
        lock_path=Path(config.lock_file),
        base_image=base_image,
        base_image_inferred=inferred,
        document=document,
    )


def install_packages(
    config: DockpinConfig,
    *,
    installer: PackageInstaller,
    logger: StructuredLogger | None = None,
) -> PackageInstallResult:
    """Fetch every pinned package, verify it, and install them in one go."""
    logger = logger if logger is not None else StructuredLogger()
    document = read_lockfile(config.lock_file)
    if not document.records:
        logger.log(
            operation="apt_install",
            subject=config.lock_file,
            message="No packages in the lock file, nothing to be done",
        )
        return PackageInstallResult()

    fetched: list[Path] = []
    try:
        for record in document.records:
            fetched.append(fetch_package(record, cache_dir=config.cache_dir, logger=logger))
        installer.install(fetched)
    finally:
        for path in fetched:
            path.unlink(missing_ok=True)
    return PackageInstallResult(installed=tuple(fetched))


def pin_images(
    config: DockpinConfig,
    *,
    resolver: DigestResolver,
    logger: StructuredLogger | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> ImagePinResult:
    """Rewrite every ``FROM`` line to carry the current digest of its image."""
    logger = logger if logger is not None else StructuredLogger()
    text = read_text(config.dockerfile, stdin=stdin, purpose="Dockerfile")
    digests = _resolve_digests(scan_references(text), resolver=resolver, logger=logger)
    pinned = rewrite_references(text, digests)
    write_text(config.dockerfile, pinned, stdout=stdout)
    return ImagePinResult(digests=digests, text=pinned)


def check_images(
    config: DockpinConfig,
    *,
    resolver: DigestResolver,
    logger: StructuredLogger | None = None,
    stdin: TextIO | None = None,
    strict: bool = True,
) -> ImageCheckResult:
    """Report images whose recorded digest is missing or not the current one.

    With ``strict`` (the default) any stale image raises ``StaleImageError``.
    """
    logger = logger if logger is not None else StructuredLogger()
    text = read_text(config.dockerfile, stdin=stdin, purpose="Dockerfile")
    references = scan_references(text)
    digests = _resolve_digests(references, resolver=resolver, logger=logger)

    stale: list[str] = []
    for reference in references:
        current = digests[reference.name]
        if is_pinned_to(reference, current):
            continue
        logger.log(
            operation="docker_check",
            subject=reference.name,
            level="warning",
            message=f"{reference.name} is not at its latest!",
            extra={
                "line": reference.line_index + 1,
                "recorded": reference.digest,
                "current": current,
            },
        )
        if reference.name not in stale:
            stale.append(reference.name)

    if stale and strict:
        raise StaleImageError(
            "Some image(s) are not pinned to their latest digest.",
            hint="Run `dockpin docker pin` to update the digests.",
            context={"path": config.dockerfile, "images": ", ".join(stale)},
        )
    return ImageCheckResult(digests=digests, stale=tuple(stale))


def resolve_image(reference: str, *, resolver: DigestResolver) -> str:
    """Return ``reference@digest`` for the current digest of *reference*."""
    name = reference.split("@", 1)[0]
    return f"{name}@{resolver.resolve_digest(name)}"


def _infer_base_image(config: DockpinConfig, *, stdin: TextIO | None) -> str:
    text = read_text(
        config.dockerfile,
        stdin=stdin,
        purpose="Dockerfile (needed to determine your base image)",
    )
    reference = find_last_reference(text)
    if reference is None:
        raise ValidationError(
            "No images found in your Dockerfile.",
            hint="Pass --base-image to name the image dockpin will run in.",
            context={"operation": "apt_pin", "path": config.dockerfile},
        )
    return reference.pinned


def _resolve_digests(
    references: list[BaseImageReference],
    *,
    resolver: DigestResolver,
    logger: StructuredLogger,
) -> dict[str, str]:
    digests: dict[str, str] = {}
    for name in distinct_names(references):
        logger.log(
            operation="resolve_digest",
            subject=name,
            message=f"Resolving digest of {name}...",
        )
        digests[name] = resolver.resolve_digest(name)
    return digests
