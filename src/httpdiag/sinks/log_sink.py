"""Sink that writes outcomes to the standard :mod:`logging` module.

Each outcome becomes exactly one :class:`logging.LogRecord`. The human
readable message summarises the call, and the full structure from
:meth:`~httpdiag.models.OutcomeRecord.to_log_dict` is attached under the
``http`` attribute of the record so structured handlers and formatters can
pick it up (``record.http["status"]``, ``record.http["duration_ms"]``...).

This module never configures handlers; where the records end up is the
application's choice.
"""

from __future__ import annotations

import logging
from typing import Optional

from httpdiag.models import DiagnosticsConfig, OutcomeRecord
from httpdiag.sinks.base import DiagnosticsSink


def format_outcome(outcome: OutcomeRecord) -> str:
    """Render a one-line summary of *outcome*.

    Examples::

        GET https://api.example.com/users -> 200 OK in 120.4ms
        GET https://api.example.com/users failed (timeout) after 5000.2ms: ReadTimeout: timed out
    """
    target = f"{outcome.method} {outcome.uri}"
    if outcome.failure is not None:
        line = f"{target} failed ({outcome.failure.value}) after {outcome.duration_ms:.1f}ms"
        if outcome.status is not None:
            line += f" [status {outcome.status}]"
        if outcome.error:
            line += f": {outcome.error}"
        return line
    status = f"{outcome.status} {outcome.reason_phrase}".rstrip() if outcome.reason_phrase else str(outcome.status)
    return f"{target} -> {status} in {outcome.duration_ms:.1f}ms"


class LoggingSink(DiagnosticsSink):
    """Emits one log record per outcome.

    Levels come from *config*: ``success_level`` for statuses below 400,
    ``http_error_level`` for 4xx/5xx and ``failure_level`` for raised
    failures. A single :meth:`logging.Logger.log` call is made per outcome;
    standard handlers serialise ``emit`` under their own lock, so entries
    from concurrent calls are never interleaved.

    Args:
        logger: Logger to write to. Defaults to
            ``logging.getLogger(config.logger_name)``.
        config: Level configuration. Defaults to :class:`DiagnosticsConfig`.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        *,
        config: Optional[DiagnosticsConfig] = None,
    ) -> None:
        self._config = config or DiagnosticsConfig()
        self._logger = logger or logging.getLogger(self._config.logger_name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def emit(self, outcome: OutcomeRecord) -> None:
        level = self._config.level_for(outcome)
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, format_outcome(outcome), extra={"http": outcome.to_log_dict()})
