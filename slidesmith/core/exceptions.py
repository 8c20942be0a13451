"""
Error taxonomy for the SlideSmith pipeline.

Retryable errors are consumed by :func:`slidesmith.remote.retry.retry_with_backoff`;
everything else is terminal for the step that raised it.
"""

from __future__ import annotations


def format_seconds(seconds: float) -> str:
    """Render a duration the way it appears in the run log (``90``, ``2.5``)."""
    return f"{seconds:g}"


class SlideSmithError(Exception):
    """Base class for all pipeline errors."""

    # Prefix used when narrating the failure in the run log
    kind = "Error"

    @property
    def message(self) -> str:
        return str(self)


class RetryableError(SlideSmithError):
    """A failed attempt that may succeed if repeated."""


class RemoteTimeoutError(RetryableError):
    """The remote endpoint did not answer within the configured deadline."""

    def __init__(self, timeout: float) -> None:
        super().__init__(
            f"Timeout: La operación tardó más de {format_seconds(timeout)} segundos"
        )
        self.timeout = timeout


class TransportError(RetryableError):
    """Network or HTTP level failure (connection refused, DNS, non-2xx)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ApplicationError(RetryableError):
    """The endpoint answered 2xx but the body carries an ``error`` field."""

    kind = "Error servidor"


class PersistenceError(RetryableError):
    """A create/update against the record store failed."""

    kind = "Error en BD"


class ExhaustionError(SlideSmithError):
    """Every attempt for one operation failed."""

    def __init__(self, attempts: int, last_error: SlideSmithError) -> None:
        super().__init__(
            f"{last_error.kind} después de {attempts} intentos: {last_error.message}"
        )
        self.attempts = attempts
        self.last_error = last_error


class MalformedResponseError(SlideSmithError):
    """A successful response whose payload does not match the expected shape."""


class BatchPartialFailure(SlideSmithError):
    """No item of a fan-out batch succeeded."""

    def __init__(self, total: int) -> None:
        super().__init__("No se pudo generar ninguna imagen")
        self.total = total


class UserInputError(SlideSmithError):
    """Invalid request from the caller; never changes run state."""


class PipelineStepFailedError(SlideSmithError):
    """Raised by the step runner once a step has been marked as ``error``."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(message)
        self.step = step
