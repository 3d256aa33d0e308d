"""Structured logging and observability helpers."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

_IEC_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB")


@dataclass(slots=True)
class StructuredLogger:
    """Collects operation records and optionally echoes messages to *stream*.

    The CLI passes ``sys.stderr`` so progress notices reach the user while
    stdout stays reserved for payloads (a rewritten Dockerfile, a digest).
    """

    stream: TextIO | None = None
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        message: str,
        subject: str | None = None,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "subject": subject,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)
        if self.stream is not None:
            print(message, file=self.stream)

    def records_for_operation(self, operation: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("operation") == operation]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path


def format_iec_bytes(size: int) -> str:
    """Render a byte count with binary prefixes, e.g. ``1.5 KiB``."""
    if size < 10:
        return f"{size} B"
    exponent = 0
    while exponent < len(_IEC_UNITS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = math.floor(size / 1024**exponent * 10 + 0.5) / 10
    if value < 10:
        return f"{value:.1f} {_IEC_UNITS[exponent]}"
    return f"{value:.0f} {_IEC_UNITS[exponent]}"
