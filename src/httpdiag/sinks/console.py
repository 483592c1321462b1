"""Console sink rendering outcomes on stderr.

Follows `clig.dev <https://clig.dev/>`_ conventions: diagnostics go to
stderr only, so they never contaminate the data a program writes to
stdout.

* **TTY detection** -- Rich markup when the stream is an interactive
  terminal, plain text otherwise.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb`` and
  :attr:`~httpdiag.models.ConsoleConfig.no_color`.
* **JSON lines** -- :attr:`~httpdiag.models.OutputFormat.JSON` writes the
  structured outcome, one object per line.
"""

from __future__ import annotations

import json
import os
import sys
import threading
from typing import Optional, TextIO

from rich.console import Console
from rich.markup import escape

from httpdiag.models import ConsoleConfig, OutcomeRecord, OutputFormat
from httpdiag.sinks.base import DiagnosticsSink
from httpdiag.sinks.log_sink import format_outcome


class ConsoleSink(DiagnosticsSink):
    """Renders one line per outcome to stderr (or another text stream).

    Writes happen under a lock so that lines from concurrent calls are
    never interleaved.

    Args:
        config: Format, colour and quiet preferences.
        file: Destination stream. Defaults to ``sys.stderr`` resolved at
            construction time.
    """

    def __init__(
        self,
        config: Optional[ConsoleConfig] = None,
        file: Optional[TextIO] = None,
    ) -> None:
        self._config = config or ConsoleConfig()
        self._file = file if file is not None else sys.stderr
        self._no_color = self._config.no_color or _should_disable_color()
        self._lock = threading.Lock()

        # Resolve format: AUTO picks RICH for interactive TTY, PLAIN otherwise
        if self._config.format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty(self._file) and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = self._config.format

        self._console = Console(
            file=self._file,
            no_color=self._no_color,
            highlight=False,
            soft_wrap=True,
        )

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    @property
    def is_quiet(self) -> bool:
        """Whether successful calls are suppressed."""
        return self._config.quiet

    def emit(self, outcome: OutcomeRecord) -> None:
        if self._config.quiet and outcome.success:
            return

        with self._lock:
            if self._format == OutputFormat.JSON:
                self._write_line(json.dumps(outcome.to_log_dict(), ensure_ascii=False))
            elif self._format == OutputFormat.PLAIN or self._no_color:
                self._write_line(format_outcome(outcome))
            else:
                self._console.print(_rich_line(outcome))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _write_line(self, text: str) -> None:
        print(text, file=self._file, flush=True)


def _rich_line(outcome: OutcomeRecord) -> str:
    """Build a Rich markup line for *outcome*."""
    target = f"[bold]{escape(outcome.method)}[/bold] {escape(outcome.uri)}"
    duration = f"[dim]{outcome.duration_ms:.1f}ms[/dim]"
    if outcome.failure is not None:
        detail = f": {escape(outcome.error)}" if outcome.error else ""
        return f"[bold red]{outcome.failure.value}[/bold red] {target} {duration}{detail}"
    style = "green" if outcome.success else "yellow"
    status = escape(f"{outcome.status} {outcome.reason_phrase or ''}".rstrip())
    return f"[{style}]{status}[/{style}] {target} {duration}"


def _is_tty(stream: TextIO) -> bool:
    """Check if *stream* is a TTY."""
    return hasattr(stream, "isatty") and stream.isatty()


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False
