"""Exception hierarchy for httpdiag.

All exceptions inherit from :class:`HttpDiagError`. They describe problems
with the library's own configuration or sinks; failures raised by the
wrapped transport are never converted into these types and always reach
the caller unchanged.

Subclass hierarchy::

    HttpDiagError
    +-- ConfigError
    +-- SinkError
"""


class HttpDiagError(Exception):
    """Base exception for all httpdiag errors.

    Args:
        message: Human-readable error description.
    """

    def __init__(self, message: str):
        super().__init__(message)


class ConfigError(HttpDiagError):
    """Raised for configuration problems (invalid JSON, bad env values, invalid factory arguments)."""


class SinkError(HttpDiagError):
    """Raised when one or more sinks in a :class:`~httpdiag.sinks.MultiSink` fail.

    Args:
        message: Description of the failure.
        errors: Every exception raised by member sinks, in delivery order.
    """

    def __init__(self, message: str, errors: list[Exception] | None = None):
        super().__init__(message)
        self.errors: list[Exception] = list(errors or [])
