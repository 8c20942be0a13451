"""
State management module for SlideSmith.

A :class:`RunStateManager` owns the mutable state of a single pipeline run and
is the only object allowed to change it. Observers (API pollers, the CLI live
view) subscribe to receive read-only snapshots after every mutation.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger

from slidesmith.core.run_state import RunState, validate_step_status

StateListener = Callable[[dict[str, Any]], None]


class RunStateManager:
    """Owner of one run's step statuses, log, slide progress and artifact id."""

    def __init__(self, run_id: str | None = None) -> None:
        self._state = RunState(run_id)
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> RunState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self._state.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning(f"State listener {listener!r} raised: {e}")

    def reset(self) -> None:
        """Discard the previous run's state; the run id is kept."""
        self._state = RunState(self._state.run_id)
        self._notify()

    def add_log(self, message: str) -> str:
        """Append a timestamped entry to the run log and return it."""
        entry = f"[{datetime.now().strftime('%H:%M:%S')}] {message}"
        self._state.logs.append(entry)
        logger.info(entry)
        self._notify()
        return entry

    def update_step_status(
        self, step_name: str, status: str, error_message: str | None = None
    ) -> None:
        """Transition a step, enforcing that only one step is processing."""
        step = self._state.get_step(step_name)
        validate_step_status(status)
        if status == "processing":
            current = self._state.current_step
            if current is not None and current != step_name:
                raise RuntimeError(
                    f"Cannot start step {step_name} while {current} is processing"
                )
        step.status = status
        step.error_message = error_message if step.status == "error" else None
        self._notify()

    def set_slide_progress(self, completed: int, total: int) -> None:
        self._state.slide_progress["completed"] = completed
        self._state.slide_progress["total"] = total
        self._notify()

    def set_last_artifact_id(self, artifact_id: str | None) -> None:
        self._state.last_artifact_id = artifact_id
        self._notify()

    def set_pdf_url(self, pdf_url: str | None) -> None:
        self._state.pdf_url = pdf_url
        self._notify()

    def set_processing(self, is_processing: bool) -> None:
        self._state.is_processing = is_processing
        self._notify()
