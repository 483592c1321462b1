"""Diagnostics transports -- the interceptor wrapped around a downstream transport.

An ``httpx`` transport is the client's "send(request) -> response" capability.
:class:`DiagnosticsTransport` and :class:`AsyncDiagnosticsTransport` wrap
another transport (the downstream sender) and, for every call:

1. stamp a :class:`~httpdiag.models.RequestRecord` with the start time,
2. invoke the downstream transport exactly once,
3. stop the clock when it returns or raises,
4. hand exactly one :class:`~httpdiag.models.OutcomeRecord` to the sink,
5. return the downstream response, or re-raise the downstream exception
   object unchanged.

No retries are attempted and the request is never modified. Cancellation
(:class:`asyncio.CancelledError`) is observed like any other failure and
reported with :attr:`~httpdiag.models.FailureKind.CANCELLED`.

Example::

    transport = AsyncDiagnosticsTransport(httpx.AsyncHTTPTransport(retries=1))
    async with httpx.AsyncClient(transport=transport) as client:
        await client.get("https://api.duckduckgo.com/?q=apple&format=json")
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Optional

import httpx

from httpdiag.failures import classify_failure
from httpdiag.models import REDACTED, DiagnosticsConfig, OutcomeRecord, RequestRecord
from httpdiag.sinks.base import DiagnosticsSink
from httpdiag.sinks.log_sink import LoggingSink

logger = logging.getLogger(__name__)

_TRUNCATED = "...[truncated]"


class _DiagnosticsObserver:
    """State and helpers shared by the sync and async transports.

    Only configuration and the sink live on the instance; everything about
    an individual call stays in its local :class:`RequestRecord`.
    """

    def __init__(
        self,
        sink: Optional[DiagnosticsSink],
        config: Optional[DiagnosticsConfig],
    ) -> None:
        self._config = config or DiagnosticsConfig()
        self._sink = sink if sink is not None else LoggingSink(config=self._config)

    @property
    def sink(self) -> DiagnosticsSink:
        return self._sink

    @property
    def config(self) -> DiagnosticsConfig:
        return self._config

    def _begin(self, request: httpx.Request) -> RequestRecord:
        headers = None
        content = None
        if self._config.capture_headers:
            headers = _capture_headers(request.headers, self._config.redact_headers)
        if self._config.capture_content:
            content = _capture_request_content(request, self._config.max_content_chars)
        return RequestRecord.start(request, headers=headers, content=content)

    def _response_headers(self, response: httpx.Response) -> Optional[dict[str, str]]:
        if not self._config.capture_headers:
            return None
        return _capture_headers(response.headers, self._config.redact_headers)

    def _completed(
        self,
        record: RequestRecord,
        response: httpx.Response,
        elapsed_ms: float,
        raw: Optional[bytes] = None,
    ) -> OutcomeRecord:
        content = None
        if raw is not None:
            content = _decode_preview(response, raw, self._config.max_content_chars)
        return record.finish(
            response,
            elapsed_ms=elapsed_ms,
            response_headers=self._response_headers(response),
            response_content=content,
        )

    def _failed(
        self,
        record: RequestRecord,
        error: BaseException,
        elapsed_ms: float,
        response: Optional[httpx.Response] = None,
    ) -> OutcomeRecord:
        return record.finish(
            response,
            elapsed_ms=elapsed_ms,
            failure=classify_failure(error),
            error=error,
            response_headers=self._response_headers(response) if response is not None else None,
        )

    def _emit(self, outcome: OutcomeRecord) -> None:
        # A broken sink must not change what the caller sees.
        try:
            self._sink.emit(outcome)
        except Exception:
            logger.warning(
                "Diagnostics sink %s failed for %s %s",
                type(self._sink).__name__,
                outcome.method,
                outcome.uri,
                exc_info=True,
            )


class DiagnosticsTransport(_DiagnosticsObserver, httpx.BaseTransport):
    """Synchronous interceptor for :class:`httpx.Client`.

    Args:
        transport: The downstream transport. Defaults to a new
            :class:`httpx.HTTPTransport`.
        sink: Where outcome records go. Defaults to a
            :class:`~httpdiag.sinks.LoggingSink` built from *config*.
        config: Capture and level settings. Defaults to
            :class:`~httpdiag.models.DiagnosticsConfig`.
    """

    def __init__(
        self,
        transport: Optional[httpx.BaseTransport] = None,
        *,
        sink: Optional[DiagnosticsSink] = None,
        config: Optional[DiagnosticsConfig] = None,
    ) -> None:
        super().__init__(sink, config)
        self._transport = transport if transport is not None else httpx.HTTPTransport()

    @property
    def transport(self) -> httpx.BaseTransport:
        """The wrapped downstream transport."""
        return self._transport

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        record = self._begin(request)
        try:
            response = self._transport.handle_request(request)
        except BaseException as exc:
            self._emit(self._failed(record, exc, record.elapsed_ms()))
            raise

        elapsed_ms = record.elapsed_ms()
        if not self._config.capture_content:
            self._emit(self._completed(record, response, elapsed_ms))
            return response

        try:
            raw = _buffer_response(response)
        except BaseException as exc:
            self._emit(self._failed(record, exc, elapsed_ms, response))
            raise
        self._emit(self._completed(record, response, elapsed_ms, raw))
        return response

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> DiagnosticsTransport:
        self._transport.__enter__()
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]] = None,
        exc_value: Optional[BaseException] = None,
        traceback: Optional[TracebackType] = None,
    ) -> None:
        self._transport.__exit__(exc_type, exc_value, traceback)


class AsyncDiagnosticsTransport(_DiagnosticsObserver, httpx.AsyncBaseTransport):
    """Asynchronous interceptor for :class:`httpx.AsyncClient`.

    Behaves identically to :class:`DiagnosticsTransport`. The only
    suspension point is the ``await`` on the downstream transport (plus the
    body read when content capture is on); cancellation arriving there is
    recorded as ``cancelled`` and the :class:`asyncio.CancelledError` is
    re-raised.

    Args:
        transport: The downstream transport. Defaults to a new
            :class:`httpx.AsyncHTTPTransport`.
        sink: Where outcome records go.
        config: Capture and level settings.
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        *,
        sink: Optional[DiagnosticsSink] = None,
        config: Optional[DiagnosticsConfig] = None,
    ) -> None:
        super().__init__(sink, config)
        self._transport = transport if transport is not None else httpx.AsyncHTTPTransport()

    @property
    def transport(self) -> httpx.AsyncBaseTransport:
        """The wrapped downstream transport."""
        return self._transport

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        record = self._begin(request)
        try:
            response = await self._transport.handle_async_request(request)
        except BaseException as exc:
            self._emit(self._failed(record, exc, record.elapsed_ms()))
            raise

        elapsed_ms = record.elapsed_ms()
        if not self._config.capture_content:
            self._emit(self._completed(record, response, elapsed_ms))
            return response

        try:
            raw = await _abuffer_response(response)
        except BaseException as exc:
            self._emit(self._failed(record, exc, elapsed_ms, response))
            raise
        self._emit(self._completed(record, response, elapsed_ms, raw))
        return response

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> AsyncDiagnosticsTransport:
        await self._transport.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]] = None,
        exc_value: Optional[BaseException] = None,
        traceback: Optional[TracebackType] = None,
    ) -> None:
        await self._transport.__aexit__(exc_type, exc_value, traceback)


# ------------------------------------------------------------------ #
# Capture helpers
# ------------------------------------------------------------------ #


def _capture_headers(headers: httpx.Headers, redact: list[str]) -> dict[str, str]:
    """Copy *headers* into a plain dict, masking the names listed in *redact*."""
    return {
        name: REDACTED if name.lower() in redact else value
        for name, value in headers.items()
    }


def _capture_request_content(request: httpx.Request, limit: int) -> Optional[str]:
    """Return the request body as text, or ``None`` for empty or streaming bodies."""
    try:
        body = request.content
    except httpx.RequestNotRead:
        return None
    if not body:
        return None
    return _truncate(body.decode("utf-8", errors="replace"), limit)


def _buffer_response(response: httpx.Response) -> bytes:
    """Read the raw body and put an equivalent in-memory stream back on *response*.

    The caller then reads the same bytes through the normal client path,
    so decoding, ``elapsed`` and event hooks behave as without capture.
    """
    stream = response.stream
    try:
        raw = b"".join(stream)
    finally:
        stream.close()
    response.stream = httpx.ByteStream(raw)
    return raw


async def _abuffer_response(response: httpx.Response) -> bytes:
    """Async counterpart of :func:`_buffer_response`."""
    stream = response.stream
    try:
        raw = b"".join([chunk async for chunk in stream])
    finally:
        await stream.aclose()
    response.stream = httpx.ByteStream(raw)
    return raw


def _decode_preview(response: httpx.Response, raw: bytes, limit: int) -> Optional[str]:
    """Decode a captured body (undoing Content-Encoding) for the log entry."""
    if not raw:
        return None
    try:
        decoded = httpx.Response(response.status_code, headers=response.headers, content=raw)
        text = decoded.content.decode(decoded.encoding or "utf-8", errors="replace")
    except (httpx.DecodingError, LookupError):
        text = raw.decode("utf-8", errors="replace")
    return _truncate(text, limit)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + _TRUNCATED
