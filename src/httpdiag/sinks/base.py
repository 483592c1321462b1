"""Abstract sink interface and the fan-out sink.

Every sink must subclass :class:`DiagnosticsSink` and implement
:meth:`~DiagnosticsSink.emit`. The diagnostics transports call ``emit``
exactly once per intercepted call, possibly from several threads or tasks
at once, so implementations must be safe for concurrent use.

Example:
    Minimal sink implementation::

        class PrintSink(DiagnosticsSink):
            def emit(self, outcome):
                print(outcome.method, outcome.uri, outcome.status)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from httpdiag.exceptions import SinkError
from httpdiag.models import OutcomeRecord


class DiagnosticsSink(ABC):
    """Base class for all outcome sinks.

    The sink lifecycle is:

    1. Construction -- usually by the caller, or by the transport when no
       sink is supplied (a :class:`~httpdiag.sinks.LoggingSink`).
    2. :meth:`emit` -- called once per intercepted call.
    3. :meth:`close` -- called by the owner when the sink is no longer
       needed. Transports do not close the sink they were given.
    """

    @abstractmethod
    def emit(self, outcome: OutcomeRecord) -> None:
        """Deliver one outcome record.

        Args:
            outcome: The completed or failed call to record.
        """
        ...

    def close(self) -> None:
        """Release sink resources. Default is a no-op."""


class MultiSink(DiagnosticsSink):
    """Delivers each outcome to several sinks in registration order.

    A failing sink does not stop delivery to the sinks after it. Once every
    sink has been tried, any failures are raised together as a
    :class:`~httpdiag.exceptions.SinkError`.
    """

    def __init__(self, sinks: Iterable[DiagnosticsSink]) -> None:
        self._sinks = list(sinks)

    @property
    def sinks(self) -> list[DiagnosticsSink]:
        return list(self._sinks)

    def emit(self, outcome: OutcomeRecord) -> None:
        errors: list[Exception] = []
        for sink in self._sinks:
            try:
                sink.emit(outcome)
            except Exception as exc:
                errors.append(exc)
        if errors:
            raise SinkError(
                f"{len(errors)} of {len(self._sinks)} sinks failed: {errors[0]}",
                errors=errors,
            ) from errors[0]

    def close(self) -> None:
        for sink in self._sinks:
            sink.close()
