from typing import Any


def compute_step_percentage(state: dict[str, Any] | None) -> int:
    """Compute overall completion percentage from a run snapshot.

    Counts every step as total and 'completed' steps as done.
    Returns an integer 0-100.
    """
    if not state:
        return 0
    steps = state.get("steps") if isinstance(state, dict) else None
    if isinstance(steps, dict):
        steps = list(steps.values())
    if not isinstance(steps, list) or not steps:
        return 0
    completed = sum(
        1 for s in steps if isinstance(s, dict) and s.get("status") == "completed"
    )
    return int((completed / len(steps)) * 100)
