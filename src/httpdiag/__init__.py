"""httpdiag -- request/response diagnostics for ``httpx`` clients.

The package provides an interceptor transport that sits between an
``httpx`` client and its real network transport. Every call is timed and
produces exactly one structured log entry (method, URI, status or failure
kind, duration); the response or exception reaches the caller untouched.

Typical usage::

    import httpx
    from httpdiag import DiagnosticsTransport

    client = httpx.Client(transport=DiagnosticsTransport())
    client.get("https://api.duckduckgo.com/?q=apple&format=json")

Modules:
    transport: Sync and async interceptor transports.
    sinks: Logging, console, in-memory and fan-out sinks.
    models: Pydantic records and configuration.
    failures: Exception-to-failure-kind classification.
    config: Configuration file/environment resolution.
    client: ``httpx`` client factories.
    exceptions: Library exception hierarchy.
"""

from httpdiag.client import create_async_client, create_client
from httpdiag.failures import classify_failure
from httpdiag.models import DiagnosticsConfig, FailureKind, OutcomeRecord, RequestRecord
from httpdiag.sinks import ConsoleSink, DiagnosticsSink, LoggingSink, MemorySink, MultiSink
from httpdiag.transport import AsyncDiagnosticsTransport, DiagnosticsTransport

__version__ = "0.1.0"

__all__ = [
    "AsyncDiagnosticsTransport",
    "DiagnosticsTransport",
    "DiagnosticsConfig",
    "FailureKind",
    "OutcomeRecord",
    "RequestRecord",
    "DiagnosticsSink",
    "LoggingSink",
    "ConsoleSink",
    "MemorySink",
    "MultiSink",
    "classify_failure",
    "create_client",
    "create_async_client",
]
