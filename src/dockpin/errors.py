"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across workflows and the CLI."""

    VALIDATION = "E_VALIDATION"
    IO = "E_IO"
    LOCKFILE = "E_LOCKFILE"
    RESOLVER = "E_RESOLVER"
    CONSISTENCY = "E_CONSISTENCY"
    FETCH = "E_FETCH"
    FETCH_IN_PROGRESS = "E_FETCH_IN_PROGRESS"
    HTTP_STATUS = "E_HTTP_STATUS"
    SIZE_MISMATCH = "E_SIZE_MISMATCH"
    INTEGRITY = "E_INTEGRITY"
    INSTALLER = "E_INSTALLER"
    STALE_IMAGE = "E_STALE_IMAGE"


class DockpinError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(DockpinError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class FileAccessError(DockpinError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.IO, hint=hint, context=context)


class LockfileError(DockpinError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.LOCKFILE, hint=hint, context=context)


class ResolverError(DockpinError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.RESOLVER, hint=hint, context=context)


class ConsistencyError(DockpinError):
    """Raised when dockpin's own output fails its own checks (a bug, not bad input)."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.CONSISTENCY, hint=hint, context=context)


class FetchError(DockpinError):
    """Transport-level download failure. Subclasses narrow the failing gate."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
        code: ErrorCode = ErrorCode.FETCH,
    ) -> None:
        super().__init__(message, code=code, hint=hint, context=context)


class FetchInProgressError(FetchError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message, hint=hint, context=context, code=ErrorCode.FETCH_IN_PROGRESS
        )


class HttpStatusError(FetchError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, hint=hint, context=context, code=ErrorCode.HTTP_STATUS)


class SizeMismatchError(FetchError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, hint=hint, context=context, code=ErrorCode.SIZE_MISMATCH)


class IntegrityError(FetchError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, hint=hint, context=context, code=ErrorCode.INTEGRITY)


class InstallerError(DockpinError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.INSTALLER, hint=hint, context=context)


class StaleImageError(DockpinError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.STALE_IMAGE, hint=hint, context=context)


__all__ = [
    "ConsistencyError",
    "DockpinError",
    "ErrorCode",
    "FetchError",
    "FetchInProgressError",
    "FileAccessError",
    "HttpStatusError",
    "InstallerError",
    "IntegrityError",
    "LockfileError",
    "ResolverError",
    "SizeMismatchError",
    "StaleImageError",
    "ValidationError",
]
