"""In-memory sink keeping outcome records for later inspection or export."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from collections import deque
from pathlib import Path
from typing import Optional, Union

from httpdiag.models import OutcomeRecord
from httpdiag.sinks.base import DiagnosticsSink


class MemorySink(DiagnosticsSink):
    """Thread-safe in-memory request log.

    Args:
        maxlen: Keep only the most recent *maxlen* outcomes. ``None`` keeps
            everything.

    Example::

        sink = MemorySink()
        with create_client(sink=sink) as client:
            client.get("https://api.example.com/users")
        sink.save("request_log.json")
    """

    def __init__(self, maxlen: Optional[int] = None) -> None:
        self._records: deque[OutcomeRecord] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def emit(self, outcome: OutcomeRecord) -> None:
        with self._lock:
            self._records.append(outcome)

    def records(self) -> list[OutcomeRecord]:
        """Return a snapshot of the stored outcomes, oldest first."""
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def save(self, path: Union[str, Path]) -> Path:
        """Write the stored outcomes to *path* as a JSON array.

        The file is replaced atomically, so readers never observe a
        partially written log.

        Returns:
            The path written to.
        """
        target = Path(path)
        data = [record.to_log_dict() for record in self.records()]
        _atomic_write(target, json.dumps(data, indent=2) + "\n")
        return target


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise
