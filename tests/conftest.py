"""Shared test fixtures for httpdiag.

Provides downstream transports built on :class:`httpx.MockTransport`, an
in-memory sink, and environment isolation so tests never pick up a
developer's ``HTTPDIAG_*`` settings or ``./httpdiag.json``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import httpx
import pytest

from httpdiag.models import DiagnosticsConfig
from httpdiag.sinks import MemorySink


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear httpdiag env vars and run every test from an empty directory."""
    for var in [
        "HTTPDIAG_LOGGER",
        "HTTPDIAG_LEVEL",
        "HTTPDIAG_CAPTURE_HEADERS",
        "HTTPDIAG_CAPTURE_CONTENT",
        "HTTPDIAG_MAX_CONTENT_CHARS",
        "HTTPDIAG_FORMAT",
        "NO_COLOR",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Sinks and config
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_sink() -> MemorySink:
    """A fresh in-memory sink."""
    return MemorySink()


@pytest.fixture
def capture_config() -> DiagnosticsConfig:
    """Config with header and content capture switched on."""
    return DiagnosticsConfig(capture_headers=True, capture_content=True, max_content_chars=64)


# ---------------------------------------------------------------------------
# Downstream transports
# ---------------------------------------------------------------------------


@pytest.fixture
def raising_transport() -> Callable[[BaseException], httpx.MockTransport]:
    """Factory for a downstream transport that raises *error* on every call."""

    def factory(error: BaseException) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            raise error

        return httpx.MockTransport(handler)

    return factory
