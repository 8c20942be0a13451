"""
Unit tests for the run state and its manager.
"""

import re

import pytest

from slidesmith.core.run_state import (
    STEP_ORDER,
    RunState,
    StepSnapshot,
    validate_step_status,
)
from slidesmith.core.state_manager import RunStateManager


class TestRunState:
    """Derived views over a run."""

    def test_new_run_has_every_step_pending(self):
        state = RunState("run-1")

        assert list(state.steps) == STEP_ORDER
        assert all(step.status == "pending" for step in state.steps.values())
        assert state.status == "pending"
        assert state.current_step is None
        assert state.is_complete is False
        assert state.can_retry_render is False

    def test_unknown_step_is_rejected(self):
        with pytest.raises(ValueError):
            RunState().get_step("translate")

    def test_can_retry_render_requires_failed_render_and_artifact(self):
        state = RunState()
        state.get_step("render").status = "error"
        assert state.can_retry_render is False

        state.last_artifact_id = "pres-1"
        assert state.can_retry_render is True

        state.is_processing = True
        assert state.can_retry_render is False

    def test_to_dict_lists_steps_in_order(self):
        payload = RunState("run-1").to_dict()

        assert [step["id"] for step in payload["steps"]] == STEP_ORDER
        assert payload["steps"][0]["label"] == "Analizando contenido"
        assert payload["slide_progress"] == {"completed": 0, "total": 0}
        assert payload["run_id"] == "run-1"

    @pytest.mark.parametrize("status", ["running", "failed", "complted", ""])
    def test_unknown_step_status_is_rejected(self, status):
        with pytest.raises(ValueError):
            validate_step_status(status)

        with pytest.raises(ValueError):
            StepSnapshot("images", {"status": status})

    def test_step_snapshot_defaults(self):
        step = StepSnapshot("images")
        assert step.status == "pending"
        assert step.error_message is None
        assert step["label"] == "Generando imágenes"


class TestRunStateManager:
    """Mutations and observer notifications."""

    @pytest.fixture
    def manager(self):
        return RunStateManager("run-1")

    def test_add_log_prefixes_timestamp(self, manager):
        entry = manager.add_log("Paso 1: Analizando transcript...")

        assert re.fullmatch(r"\[\d{2}:\d{2}:\d{2}\] Paso 1: .*", entry)
        assert manager.state.logs == [entry]

    def test_only_one_step_may_be_processing(self, manager):
        manager.update_step_status("understand", "processing")

        with pytest.raises(RuntimeError):
            manager.update_step_status("outline", "processing")

        manager.update_step_status("understand", "completed")
        manager.update_step_status("outline", "processing")
        assert manager.state.current_step == "outline"

    def test_error_message_only_kept_on_error(self, manager):
        manager.update_step_status("render", "error", "HTTP 500")
        assert manager.state.get_step("render").error_message == "HTTP 500"

        manager.update_step_status("render", "completed", "ignored")
        assert manager.state.get_step("render").error_message is None

    def test_status_aliases_cannot_bypass_the_processing_guard(self, manager):
        manager.update_step_status("understand", "processing")

        with pytest.raises(ValueError):
            manager.update_step_status("outline", "running")

        assert manager.state.get_step("outline").status == "pending"
        assert manager.state.current_step == "understand"

    def test_misspelled_status_keeps_the_step_unchanged(self, manager):
        manager.update_step_status("understand", "completed")

        with pytest.raises(ValueError):
            manager.update_step_status("understand", "complted")

        assert manager.state.get_step("understand").status == "completed"

    def test_reset_keeps_run_id(self, manager):
        manager.add_log("hola")
        manager.set_last_artifact_id("pres-1")

        manager.reset()

        assert manager.state.run_id == "run-1"
        assert manager.state.logs == []
        assert manager.state.last_artifact_id is None

    def test_subscribers_receive_independent_snapshots(self, manager):
        received = []
        unsubscribe = manager.subscribe(received.append)

        manager.set_slide_progress(1, 3)
        received[-1]["slide_progress"]["completed"] = 99
        received[-1]["steps"][0]["status"] = "completed"

        assert manager.state.slide_progress["completed"] == 1
        assert manager.state.get_step("understand").status == "pending"

        unsubscribe()
        manager.set_pdf_url("https://cdn.example.com/deck.pdf")
        assert len(received) == 1

    def test_failing_listener_does_not_break_mutation(self, manager):
        def broken(snapshot):
            raise RuntimeError("listener bug")

        received = []
        manager.subscribe(broken)
        manager.subscribe(received.append)

        manager.set_processing(True)

        assert manager.state.is_processing is True
        assert received[-1]["is_processing"] is True
