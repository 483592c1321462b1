"""Canonical Pydantic models shared across all httpdiag modules.

The models fall into two groups:

**Per-call records** -- created and consumed by the diagnostics transports:
    :class:`FailureKind`, :class:`RequestRecord` and :class:`OutcomeRecord`.
    A :class:`RequestRecord` lives only for the duration of one intercepted
    call; finishing it yields exactly one :class:`OutcomeRecord`, which is
    handed to a sink and then dropped.

**Configuration models** -- loaded by :mod:`httpdiag.config`:
    :class:`OutputFormat`, :class:`ConsoleConfig` and
    :class:`DiagnosticsConfig`.
"""

from __future__ import annotations

import enum
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

REDACTED = "[REDACTED]"
"""Placeholder written in place of sensitive header values."""

DEFAULT_REDACT_HEADERS = [
    "authorization",
    "cookie",
    "set-cookie",
    "proxy-authorization",
    "x-api-key",
]


# --- Failure taxonomy ---


class FailureKind(str, enum.Enum):
    """Category of a failed call, as reported in the outcome record.

    See :func:`~httpdiag.failures.classify_failure` for how exceptions map
    onto these values.
    """

    NETWORK = "network"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    UNEXPECTED = "unexpected"


# --- Per-call records ---


class OutcomeRecord(BaseModel):
    """Result of one intercepted call, passed once to a sink.

    Exactly one of two shapes is produced:

    * **completed** -- ``status`` is set and ``failure`` is ``None``. A 4xx
      or 5xx status is still a completed call; the transport does not treat
      HTTP error codes as failures.
    * **failed** -- ``failure`` and ``error`` are set. ``status`` is only
      present when the failure happened after the response headers arrived
      (e.g. while reading a captured body).
    """

    model_config = ConfigDict(frozen=True)

    request_id: str
    method: str
    uri: str
    started_at: datetime
    status: Optional[int] = None
    reason_phrase: Optional[str] = None
    http_version: Optional[str] = None
    duration_ms: float = Field(ge=0)
    failure: Optional[FailureKind] = None
    error: Optional[str] = None
    request_headers: Optional[dict[str, str]] = None
    request_content: Optional[str] = None
    response_headers: Optional[dict[str, str]] = None
    response_content: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        """True when a response arrived with a status below 400."""
        return self.failure is None and self.status is not None and self.status < 400

    def to_log_dict(self) -> dict[str, Any]:
        """Return the JSON-safe structure attached to log entries.

        ``None`` fields are omitted, so a successful call carries no
        ``error`` key and a transport failure carries no ``status`` key.
        """
        return self.model_dump(mode="json", exclude_none=True)


class RequestRecord(BaseModel):
    """Start-of-call snapshot owned by a single interceptor invocation."""

    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    method: str
    uri: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    start_counter: float = Field(default_factory=time.perf_counter, exclude=True)
    request_headers: Optional[dict[str, str]] = None
    request_content: Optional[str] = None

    @classmethod
    def start(
        cls,
        request: httpx.Request,
        headers: Optional[dict[str, str]] = None,
        content: Optional[str] = None,
    ) -> RequestRecord:
        """Create a record for *request*, stamping wall-clock and monotonic start times."""
        return cls(
            method=request.method.upper(),
            uri=_safe_uri(request.url),
            request_headers=headers,
            request_content=content,
        )

    def elapsed_ms(self) -> float:
        """Milliseconds since :meth:`start`, measured on the monotonic clock."""
        return max(0.0, (time.perf_counter() - self.start_counter) * 1000.0)

    def finish(
        self,
        response: Optional[httpx.Response] = None,
        *,
        elapsed_ms: Optional[float] = None,
        failure: Optional[FailureKind] = None,
        error: Optional[BaseException] = None,
        response_headers: Optional[dict[str, str]] = None,
        response_content: Optional[str] = None,
    ) -> OutcomeRecord:
        """Build the :class:`OutcomeRecord` for this call.

        Args:
            response: The downstream response, if one was received.
            elapsed_ms: Duration to report. Defaults to the time elapsed
                up to this call.
            failure: Failure category when the call raised.
            error: The raised exception, rendered as ``"Type: message"``.
            response_headers: Captured (already redacted) response headers.
            response_content: Captured response body text.
        """
        if elapsed_ms is None:
            elapsed_ms = self.elapsed_ms()
        return OutcomeRecord(
            request_id=self.request_id,
            method=self.method,
            uri=self.uri,
            started_at=self.started_at,
            status=response.status_code if response is not None else None,
            reason_phrase=response.reason_phrase if response is not None else None,
            http_version=response.http_version if response is not None else None,
            duration_ms=elapsed_ms,
            failure=failure,
            error=_describe_error(error) if error is not None else None,
            request_headers=self.request_headers,
            request_content=self.request_content,
            response_headers=response_headers,
            response_content=response_content,
        )


def _safe_uri(url: httpx.URL) -> str:
    """Render *url* without any userinfo so credentials never reach a sink."""
    if url.userinfo:
        url = url.copy_with(username=None, password=None)
    return str(url)


def _describe_error(error: BaseException) -> str:
    message = str(error)
    name = type(error).__name__
    return f"{name}: {message}" if message else name


# --- Configuration ---


class OutputFormat(str, enum.Enum):
    """Rendering formats supported by :class:`~httpdiag.sinks.ConsoleSink`.

    ``AUTO`` resolves to ``RICH`` when stderr is an interactive TTY and
    colour is not disabled, or to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class ConsoleConfig(BaseModel):
    """Settings for the Rich console sink."""

    format: OutputFormat = Field(default=OutputFormat.AUTO, description="auto, rich, plain, json")
    no_color: bool = Field(default=False, description="Disable colour and Rich markup")
    quiet: bool = Field(default=False, description="Only render failed or 4xx/5xx calls")


class DiagnosticsConfig(BaseModel):
    """Behaviour of the diagnostics transports and their default logging sink.

    Example::

        DiagnosticsConfig(
            success_level="DEBUG",
            capture_headers=True,
            redact_headers=["authorization", "x-session"],
        )
    """

    logger_name: str = Field(default="httpdiag", description="Logger used by LoggingSink")
    success_level: str = Field(default="INFO", description="Level for responses below 400")
    http_error_level: str = Field(default="WARNING", description="Level for 4xx/5xx responses")
    failure_level: str = Field(default="ERROR", description="Level for raised failures")
    capture_headers: bool = Field(default=False, description="Record request/response headers")
    capture_content: bool = Field(
        default=False,
        description=(
            "Record request/response bodies. The whole response body is read into "
            "memory before it is returned, including for client.stream(); "
            "max_content_chars only truncates the recorded preview"
        ),
    )
    max_content_chars: int = Field(default=2048, ge=0, description="Truncate captured bodies")
    redact_headers: list[str] = Field(default_factory=lambda: list(DEFAULT_REDACT_HEADERS))
    console: ConsoleConfig = Field(default_factory=ConsoleConfig)

    @field_validator("success_level", "http_error_level", "failure_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        name = str(value).upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"unknown logging level: {value!r}")
        return name

    @field_validator("redact_headers")
    @classmethod
    def _lower_headers(cls, value: list[str]) -> list[str]:
        return [h.lower() for h in value]

    def level_for(self, outcome: OutcomeRecord) -> int:
        """Return the numeric logging level an outcome should be logged at."""
        if outcome.failure is not None:
            name = self.failure_level
        elif outcome.status is not None and outcome.status >= 400:
            name = self.http_error_level
        else:
            name = self.success_level
        return logging.getLevelName(name)
