"""
Base pipeline coordinator for SlideSmith processing.

This module provides the per-step state machine shared by pipelines:
``pending -> processing -> completed | error``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger

from slidesmith.core.exceptions import PipelineStepFailedError
from slidesmith.core.state_manager import RunStateManager

T = TypeVar("T")


class BasePipeline(ABC):
    """Abstract base class for all pipelines."""

    def __init__(self, state_manager: RunStateManager) -> None:
        self.state_manager = state_manager

    @property
    def run_id(self) -> str | None:
        return self.state_manager.state.run_id

    async def _execute_step(
        self,
        step_name: str,
        step_func: Callable[..., Awaitable[T]],
        *args: Any,
    ) -> T:
        """Execute a single pipeline step with proper status management.

        Raises:
            PipelineStepFailedError: the step failed and has been marked ``error``
        """
        self.state_manager.update_step_status(step_name, "processing")
        display_name = self.get_step_display_name(step_name)
        logger.info(f"=== Run {self.run_id} - Executing: {display_name} ===")

        try:
            result = await step_func(*args)
        except Exception as e:
            message = self.describe_failure(step_name, e)
            logger.error(f"Step {step_name} failed: {message}")
            self.state_manager.add_log(f"ERROR: {message}")
            self.state_manager.update_step_status(step_name, "error", message)
            raise PipelineStepFailedError(step_name, message) from e

        self.state_manager.update_step_status(step_name, "completed")
        return result

    def describe_failure(self, step_name: str, error: Exception) -> str:
        """Message stored on the failed step; subclasses may add context."""
        return str(error) or error.__class__.__name__

    @abstractmethod
    def get_step_display_name(self, step_name: str) -> str:
        """Get the display name for a step."""
        pass
