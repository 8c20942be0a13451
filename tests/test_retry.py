"""
Unit tests for the retry helpers.
"""

from unittest.mock import AsyncMock

import pytest

from slidesmith.configs.config import RetryPolicy
from slidesmith.core.exceptions import (
    ApplicationError,
    ExhaustionError,
    MalformedResponseError,
    PersistenceError,
    RemoteTimeoutError,
)
from slidesmith.remote.retry import RetryingInvoker, backoff_delay, retry_with_backoff


def test_backoff_delay_grows_linearly():
    assert [backoff_delay(k, 5) for k in (1, 2, 3)] == [5, 10, 15]


class TestRetryWithBackoff:
    """Attempt accounting and run log narration."""

    @pytest.mark.asyncio
    async def test_always_failing_operation_is_tried_max_attempts(self, sleep):
        logs: list[str] = []
        operation = AsyncMock(side_effect=RemoteTimeoutError(90))

        with pytest.raises(ExhaustionError) as exc_info:
            await retry_with_backoff(
                operation,
                policy=RetryPolicy(max_attempts=3, timeout=90),
                label="Analizando transcript",
                log=logs.append,
                sleep=sleep,
            )

        assert operation.await_count == 3
        assert sleep.delays == [5, 10]
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_error, RemoteTimeoutError)
        assert logs == [
            "Analizando transcript (intento 1/3, timeout: 90s)...",
            "Error: Timeout: La operación tardó más de 90 segundos. "
            "Reintentando en 5s...",
            "Analizando transcript (intento 2/3, timeout: 90s)...",
            "Error: Timeout: La operación tardó más de 90 segundos. "
            "Reintentando en 10s...",
            "Analizando transcript (intento 3/3, timeout: 90s)...",
        ]

    @pytest.mark.asyncio
    async def test_single_failure_produces_one_retry_line(self, sleep):
        logs: list[str] = []
        operation = AsyncMock(side_effect=[PersistenceError("lock timeout"), "ok"])

        result = await retry_with_backoff(
            operation,
            policy=RetryPolicy(max_attempts=3),
            label="Guardando slides",
            log=logs.append,
            sleep=sleep,
        )

        assert result == "ok"
        assert sleep.delays == [5]
        assert [line for line in logs if "Reintentando" in line] == [
            "Error en BD: lock timeout. Reintentando en 5s..."
        ]
        assert logs[0] == "Guardando slides (intento 1/3)..."

    @pytest.mark.asyncio
    async def test_terminal_errors_are_not_retried(self, sleep):
        operation = AsyncMock(side_effect=MalformedResponseError("bad payload"))

        with pytest.raises(MalformedResponseError):
            await retry_with_backoff(
                operation,
                policy=RetryPolicy(max_attempts=3, timeout=90),
                label="Creando outline",
                log=lambda _: None,
                sleep=sleep,
            )

        assert operation.await_count == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_exhaustion_message_uses_last_error_kind(self, sleep):
        with pytest.raises(ExhaustionError) as exc_info:
            await retry_with_backoff(
                AsyncMock(side_effect=ApplicationError("quota exceeded")),
                policy=RetryPolicy(max_attempts=2, timeout=90, backoff_step=1.5),
                label="Generando slide 1/3",
                log=lambda _: None,
                sleep=sleep,
            )

        assert str(exc_info.value) == (
            "Error servidor después de 2 intentos: quota exceeded"
        )
        assert sleep.delays == [1.5]


class TestRetryingInvoker:
    """Edge function calls with retries."""

    @pytest.mark.asyncio
    async def test_error_field_counts_as_failed_attempt(self, sleep):
        client = AsyncMock()
        client.call = AsyncMock(
            side_effect=[{"error": "model overloaded"}, {"analysis": "ok"}]
        )
        logs: list[str] = []
        invoker = RetryingInvoker(client, logs.append, sleep)

        data = await invoker.invoke(
            "analyze-transcript",
            {"transcript": "t"},
            RetryPolicy(max_attempts=3, timeout=90),
            "Analizando transcript",
        )

        assert data == {"analysis": "ok"}
        assert client.call.await_count == 2
        client.call.assert_awaited_with("analyze-transcript", {"transcript": "t"}, 90)
        assert "Error servidor: model overloaded. Reintentando en 5s..." in logs

    @pytest.mark.asyncio
    async def test_invoke_requires_a_deadline(self, sleep):
        invoker = RetryingInvoker(AsyncMock(), lambda _: None, sleep)

        with pytest.raises(ValueError):
            await invoker.invoke("create-pdf", {}, RetryPolicy(max_attempts=1), "PDF")
