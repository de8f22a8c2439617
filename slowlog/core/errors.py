"""
Error types raised by the slow query core.

The HTTP layer maps them to status codes in ``slowlog.main``; nothing in the
core logs or retries them.
"""


class SlowLogError(Exception):
    """Base class for every error the core raises."""


class InvalidArgument(SlowLogError):
    """A request parameter is outside its accepted domain.

    Raised before any database call, so the caller can always recover by
    resubmitting corrected parameters.
    """

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"invalid {field}: {value}")


class ExecutionError(SlowLogError):
    """A statement could not be executed (connectivity, syntax, constraint, timeout)."""


class RowsError(ExecutionError):
    """The result cursor failed while its rows were being consumed."""
