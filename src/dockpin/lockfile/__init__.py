"""apt lockfile model and codec."""

from .io import (
    format_record,
    parse_lockfile,
    read_lockfile,
    serialize_lockfile,
    write_lockfile,
)
from .model import (
    LOCKFILE_HEADER,
    AcquisitionRecord,
    LockDocument,
    is_bare_filename,
)

__all__ = [
    "LOCKFILE_HEADER",
    "AcquisitionRecord",
    "LockDocument",
    "format_record",
    "is_bare_filename",
    "parse_lockfile",
    "read_lockfile",
    "serialize_lockfile",
    "write_lockfile",
]
