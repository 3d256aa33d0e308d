"""Shared test fixtures."""

from __future__ import annotations

import hashlib
from collections.abc import Callable

import pytest

from dockpin.backends import RecordingInstaller, ScriptedAptResolver
from dockpin.lockfile import AcquisitionRecord
from fakes import FakeServer


@pytest.fixture
def fake_server(monkeypatch: pytest.MonkeyPatch) -> FakeServer:
    server = FakeServer()
    monkeypatch.setattr("dockpin.fetch.http.urlopen", server.urlopen)
    return server


@pytest.fixture
def make_record() -> Callable[..., AcquisitionRecord]:
    def _make(
        payload: bytes,
        *,
        filename: str = "hello_2.10-3_amd64.deb",
        url: str | None = None,
    ) -> AcquisitionRecord:
        return AcquisitionRecord(
            url=url or f"http://deb.example.invalid/pool/main/h/hello/{filename}",
            filename=filename,
            size=len(payload),
            md5=hashlib.md5(payload).hexdigest(),
        )

    return _make


@pytest.fixture
def apt_resolver() -> ScriptedAptResolver:
    return ScriptedAptResolver()


@pytest.fixture
def installer() -> RecordingInstaller:
    return RecordingInstaller()
