"""Test doubles shared across test modules."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from urllib.error import HTTPError


class FakeResponse(io.BytesIO):
    def __init__(self, payload: bytes, status: int = 200) -> None:
        super().__init__(payload)
        self.status = status


@dataclass(slots=True)
class FakeServer:
    """Stands in for ``urlopen``: serves payloads by URL and counts requests."""

    payloads: dict[str, bytes] = field(default_factory=dict)
    statuses: dict[str, int] = field(default_factory=dict)
    requests: list[str] = field(default_factory=list)

    def serve(self, url: str, payload: bytes, status: int = 200) -> None:
        self.payloads[url] = payload
        self.statuses[url] = status

    def urlopen(self, url: str) -> FakeResponse:
        self.requests.append(url)
        status = self.statuses.get(url, 404)
        if status >= 400:
            raise HTTPError(url, status, "Not Found", hdrs=None, fp=None)  # type: ignore[arg-type]
        return FakeResponse(self.payloads[url], status=status)
