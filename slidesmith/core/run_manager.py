"""
Run management module for SlideSmith.

Keeps the pipelines started through the API in memory, keyed by run id, and
holds references to their background tasks until they finish. Runs are not
persisted; only the presentations they produce are.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from slidesmith.pipeline.coordinator import PresentationPipeline


class RunManager:
    """Local registry of pipeline runs and their background tasks."""

    def __init__(self, max_runs: int = 200) -> None:
        self.max_runs = max_runs
        self.runs: OrderedDict[str, PresentationPipeline] = OrderedDict()
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def register(self, pipeline: PresentationPipeline) -> str:
        run_id = pipeline.run_id
        if not run_id:
            raise ValueError("Pipeline has no run id")
        self.runs[run_id] = pipeline
        self._evict()
        return run_id

    def get(self, run_id: str) -> PresentationPipeline | None:
        return self.runs.get(run_id)

    def is_running(self, run_id: str) -> bool:
        task = self._tasks.get(run_id)
        return task is not None and not task.done()

    def launch(self, run_id: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Schedule work for a registered run on the running event loop."""
        if self.is_running(run_id):
            coro.close()
            raise RuntimeError(f"Run {run_id} already has work in progress")
        task = asyncio.create_task(coro, name=f"slidesmith-run-{run_id}")
        self._tasks[run_id] = task
        task.add_done_callback(lambda t: self._on_done(run_id, t))
        return task

    def _on_done(self, run_id: str, task: asyncio.Task[Any]) -> None:
        if self._tasks.get(run_id) is task:
            del self._tasks[run_id]
        if task.cancelled():
            logger.warning(f"Run {run_id} task was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"Run {run_id} crashed: {exc}")

    async def shutdown(self) -> None:
        """Cancel in-flight runs; their presentations stay in the store."""
        tasks = [task for task in self._tasks.values() if not task.done()]
        if tasks:
            logger.info(f"Cancelling {len(tasks)} in-flight run(s)")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _evict(self) -> None:
        while len(self.runs) > self.max_runs:
            oldest = next(
                (rid for rid in self.runs if not self.is_running(rid)), None
            )
            if oldest is None:
                return
            del self.runs[oldest]


# Global run manager instance
run_manager = RunManager()
