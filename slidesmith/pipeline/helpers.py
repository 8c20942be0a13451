"""
Shared helpers for pipeline step execution.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from slidesmith.configs.config import Config, RetryPolicy, config
from slidesmith.core.state_manager import RunStateManager
from slidesmith.remote.retry import RetryingInvoker, SleepFunc
from slidesmith.repository.presentation import PresentationStore


@dataclass
class PipelineContext:
    """Collaborators shared by every step of one run."""

    state_manager: RunStateManager
    invoker: RetryingInvoker
    store: PresentationStore
    sleep: SleepFunc = asyncio.sleep
    settings: Config = field(default_factory=lambda: config)

    def log(self, message: str) -> str:
        return self.state_manager.add_log(message)

    def policy(self, step_name: str) -> RetryPolicy:
        return self.settings.policy_for(step_name)
