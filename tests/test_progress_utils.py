"""
Unit tests for progress percentage computation.
"""

from slidesmith.core.progress_utils import compute_step_percentage
from slidesmith.core.state_manager import RunStateManager


def test_empty_state_is_zero():
    assert compute_step_percentage(None) == 0
    assert compute_step_percentage({"steps": []}) == 0


def test_counts_completed_steps_of_a_snapshot():
    manager = RunStateManager("run-1")
    manager.update_step_status("understand", "completed")
    manager.update_step_status("outline", "completed")
    manager.update_step_status("persist", "error", "boom")

    assert compute_step_percentage(manager.state.snapshot()) == 40


def test_accepts_mapping_of_steps():
    steps = {"a": {"status": "completed"}, "b": {"status": "pending"}}
    assert compute_step_percentage({"steps": steps}) == 50
