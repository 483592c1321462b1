"""Destinations for outcome records.

Classes:
    :class:`DiagnosticsSink` -- abstract base every sink implements.
    :class:`LoggingSink` -- one :mod:`logging` record per outcome (the default).
    :class:`ConsoleSink` -- Rich-rendered lines on stderr.
    :class:`MemorySink` -- thread-safe in-memory log with JSON export.
    :class:`MultiSink` -- fan-out to several sinks.
"""

from httpdiag.sinks.base import DiagnosticsSink, MultiSink
from httpdiag.sinks.console import ConsoleSink
from httpdiag.sinks.log_sink import LoggingSink, format_outcome
from httpdiag.sinks.memory import MemorySink

__all__ = [
    "DiagnosticsSink",
    "MultiSink",
    "LoggingSink",
    "ConsoleSink",
    "MemorySink",
    "format_outcome",
]
