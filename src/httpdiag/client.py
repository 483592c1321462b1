"""Factories for ``httpx`` clients with the diagnostics transport installed.

Both helpers mirror the usual wiring -- a client whose transport is the
interceptor, which in turn wraps the real network transport::

    from httpdiag.client import create_client

    with create_client() as client:
        client.get("https://api.duckduckgo.com/?q=apple&format=json")

Any keyword accepted by :class:`httpx.Client` / :class:`httpx.AsyncClient`
may be passed through, except ``mounts``: mounted transports are chosen by
URL pattern ahead of the default transport and would bypass the
interceptor.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from httpdiag.exceptions import ConfigError
from httpdiag.models import DiagnosticsConfig
from httpdiag.sinks.base import DiagnosticsSink
from httpdiag.transport import AsyncDiagnosticsTransport, DiagnosticsTransport


def _check_client_kwargs(client_kwargs: dict[str, Any]) -> None:
    if "mounts" in client_kwargs:
        raise ConfigError("'mounts' is not supported: mounted transports bypass diagnostics")


def create_client(
    *,
    transport: Optional[httpx.BaseTransport] = None,
    sink: Optional[DiagnosticsSink] = None,
    config: Optional[DiagnosticsConfig] = None,
    **client_kwargs: Any,
) -> httpx.Client:
    """Build an :class:`httpx.Client` whose requests pass through :class:`DiagnosticsTransport`.

    Args:
        transport: Downstream transport. Defaults to :class:`httpx.HTTPTransport`.
        sink: Outcome sink. Defaults to a :class:`~httpdiag.sinks.LoggingSink`.
        config: Diagnostics settings.
        **client_kwargs: Forwarded to :class:`httpx.Client`.

    Raises:
        ConfigError: If ``mounts`` is given.
    """
    _check_client_kwargs(client_kwargs)
    diagnostics = DiagnosticsTransport(transport, sink=sink, config=config)
    return httpx.Client(transport=diagnostics, **client_kwargs)


def create_async_client(
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sink: Optional[DiagnosticsSink] = None,
    config: Optional[DiagnosticsConfig] = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """Build an :class:`httpx.AsyncClient` whose requests pass through :class:`AsyncDiagnosticsTransport`.

    Args:
        transport: Downstream transport. Defaults to :class:`httpx.AsyncHTTPTransport`.
        sink: Outcome sink. Defaults to a :class:`~httpdiag.sinks.LoggingSink`.
        config: Diagnostics settings.
        **client_kwargs: Forwarded to :class:`httpx.AsyncClient`.

    Raises:
        ConfigError: If ``mounts`` is given.
    """
    _check_client_kwargs(client_kwargs)
    diagnostics = AsyncDiagnosticsTransport(transport, sink=sink, config=config)
    return httpx.AsyncClient(transport=diagnostics, **client_kwargs)
