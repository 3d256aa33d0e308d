"""Public package entrypoint for dockpin."""

__version__ = "0.1.0"

from .config import DockpinConfig  # noqa: E402
from .errors import (  # noqa: E402
    ConsistencyError,
    DockpinError,
    FetchError,
    FileAccessError,
    HttpStatusError,
    InstallerError,
    IntegrityError,
    LockfileError,
    ResolverError,
    SizeMismatchError,
    StaleImageError,
    ValidationError,
)
from .lockfile import AcquisitionRecord, LockDocument  # noqa: E402
from .references import BaseImageReference  # noqa: E402
from .workflows import (  # noqa: E402
    check_images,
    install_packages,
    pin_images,
    pin_packages,
    resolve_image,
)

__all__ = [
    "AcquisitionRecord",
    "BaseImageReference",
    "ConsistencyError",
    "DockpinConfig",
    "DockpinError",
    "FetchError",
    "FileAccessError",
    "HttpStatusError",
    "InstallerError",
    "IntegrityError",
    "LockDocument",
    "LockfileError",
    "ResolverError",
    "SizeMismatchError",
    "StaleImageError",
    "ValidationError",
    "__version__",
    "check_images",
    "install_packages",
    "pin_images",
    "pin_packages",
    "resolve_image",
]
