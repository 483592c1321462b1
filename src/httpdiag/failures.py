"""Failure taxonomy for intercepted calls.

:func:`classify_failure` maps whatever the downstream transport raised onto
a :class:`~httpdiag.models.FailureKind`. Classification only labels the
exception for the log entry; the caller still receives the original object.
"""

from __future__ import annotations

import asyncio

import httpx

from httpdiag.models import FailureKind

# Checked in order; TimeoutError subclasses OSError so timeouts come first.
_CANCELLED: tuple[type[BaseException], ...] = (asyncio.CancelledError, KeyboardInterrupt)
_TIMEOUT: tuple[type[BaseException], ...] = (httpx.TimeoutException, TimeoutError)
_NETWORK: tuple[type[BaseException], ...] = (httpx.TransportError, OSError)


def classify_failure(error: BaseException) -> FailureKind:
    """Return the failure category for *error*.

    * ``cancelled`` -- :class:`asyncio.CancelledError` or
      :class:`KeyboardInterrupt` interrupted the call.
    * ``timeout`` -- any :class:`httpx.TimeoutException` (connect, read,
      write, pool) or the builtin :class:`TimeoutError`.
    * ``network`` -- any other :class:`httpx.TransportError` (connect and
      read errors, protocol and proxy errors) or an :class:`OSError`.
    * ``unexpected`` -- everything else.

    Args:
        error: The exception raised by the downstream transport.

    Returns:
        The matching :class:`~httpdiag.models.FailureKind`.
    """
    if isinstance(error, _CANCELLED):
        return FailureKind.CANCELLED
    if isinstance(error, _TIMEOUT):
        return FailureKind.TIMEOUT
    if isinstance(error, _NETWORK):
        return FailureKind.NETWORK
    return FailureKind.UNEXPECTED
