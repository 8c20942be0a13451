"""
Retry with linear backoff, narrated to the run log.

One abstraction serves every unreliable dependency of the pipeline: edge
function calls (through :class:`RetryingInvoker`) and record store writes
(by passing the write itself as the operation).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger

from slidesmith.configs.config import RetryPolicy
from slidesmith.core.exceptions import (
    ApplicationError,
    ExhaustionError,
    RetryableError,
    format_seconds,
)

from .client import EdgeFunctionClient

T = TypeVar("T")

LogFunc = Callable[[str], Any]
SleepFunc = Callable[[float], Awaitable[Any]]


def backoff_delay(attempt: int, backoff_step: float) -> float:
    """Delay slept after failed attempt ``attempt`` (1-based): 5s, 10s, 15s..."""
    return attempt * backoff_step


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    label: str,
    log: LogFunc,
    sleep: SleepFunc = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or ``policy.max_attempts`` is spent.

    Only :class:`RetryableError` failures are retried; any other exception
    propagates immediately.

    Args:
        operation: Zero-argument coroutine factory performing one attempt
        policy: Attempt budget, per-attempt timeout (for narration) and backoff step
        label: Human-readable name of the operation for the run log
        log: Run log sink
        sleep: Awaitable sleep, injectable for tests

    Raises:
        ExhaustionError: when the last attempt fails
    """
    max_attempts = max(1, policy.max_attempts)
    for attempt in range(1, max_attempts + 1):
        if policy.timeout is not None:
            log(
                f"{label} (intento {attempt}/{max_attempts}, "
                f"timeout: {format_seconds(policy.timeout)}s)..."
            )
        else:
            log(f"{label} (intento {attempt}/{max_attempts})...")

        try:
            return await operation()
        except RetryableError as e:
            if attempt == max_attempts:
                logger.warning(f"{label}: giving up after {attempt} attempts: {e}")
                raise ExhaustionError(max_attempts, e) from e
            delay = backoff_delay(attempt, policy.backoff_step)
            log(f"{e.kind}: {e.message}. Reintentando en {format_seconds(delay)}s...")
            await sleep(delay)

    # max_attempts >= 1 guarantees the loop either returned or raised
    raise AssertionError("unreachable")


class RetryingInvoker:
    """Edge function calls wrapped in :func:`retry_with_backoff`."""

    def __init__(
        self,
        client: EdgeFunctionClient,
        log: LogFunc,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.client = client
        self.log = log
        self.sleep = sleep

    async def invoke(
        self,
        function_name: str,
        body: dict[str, Any],
        policy: RetryPolicy,
        label: str,
    ) -> dict[str, Any]:
        """Call ``function_name`` with retries; returns the decoded success body."""
        if policy.timeout is None:
            raise ValueError("Remote calls need a timeout")
        timeout = policy.timeout

        async def _attempt() -> dict[str, Any]:
            data = await self.client.call(function_name, body, timeout)
            server_error = data.get("error")
            if server_error:
                raise ApplicationError(str(server_error))
            return data

        return await retry_with_backoff(
            _attempt, policy=policy, label=label, log=self.log, sleep=self.sleep
        )
