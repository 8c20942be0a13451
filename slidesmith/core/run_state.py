"""
Typed helpers for the in-memory state of one pipeline run.

These objects behave like ordinary dict structures so they serialize straight
into API payloads, while exposing convenience accessors for the step statuses,
the run log and the slide progress counters.
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any

STEP_ORDER = ["understand", "outline", "persist", "images", "render"]

STEP_LABELS = {
    "understand": "Analizando contenido",
    "outline": "Creando outline",
    "persist": "Guardando estructura",
    "images": "Generando imágenes",
    "render": "Compilando PDF",
}

STEP_DESCRIPTIONS = {
    "understand": "Procesando transcript y prompts con IA",
    "outline": "Generando estructura y contenido de diapositivas",
    "persist": "Almacenando descripciones en base de datos",
    "images": "Creando visuales para cada diapositiva",
    "render": "Unificando todas las diapositivas en un documento",
}

STEP_STATUSES = ("pending", "processing", "completed", "error")


def validate_step_status(status: str) -> str:
    """Return ``status`` if it is one of :data:`STEP_STATUSES`."""
    if status not in STEP_STATUSES:
        raise ValueError(f"Unknown step status: {status!r}")
    return status


class StepSnapshot(dict):
    """Structured view of a single pipeline step (dict-compatible)."""

    __slots__ = ("name",)

    def __init__(self, name: str, payload: Mapping[str, Any] | None = None) -> None:
        super().__init__(payload or {})
        self.name = name
        self.setdefault("id", name)
        self.setdefault("label", STEP_LABELS.get(name, name))
        self.setdefault("description", STEP_DESCRIPTIONS.get(name, ""))
        self["status"] = validate_step_status(self.get("status", "pending"))
        self.setdefault("error_message", None)

    @property
    def status(self) -> str:
        return str(self.get("status", "pending"))

    @status.setter
    def status(self, value: str) -> None:
        self["status"] = validate_step_status(value)

    @property
    def error_message(self) -> str | None:
        return self.get("error_message")

    @error_message.setter
    def error_message(self, value: str | None) -> None:
        self["error_message"] = value

    def as_dict(self) -> dict[str, Any]:
        return dict(self)


class SlideProgress(dict):
    """``{completed, total}`` counters for the image fan-out (dict-compatible)."""

    __slots__ = ()

    def __init__(self, completed: int = 0, total: int = 0) -> None:
        super().__init__(completed=completed, total=total)

    @property
    def completed(self) -> int:
        return int(self["completed"])

    @property
    def total(self) -> int:
        return int(self["total"])


class RunState:
    """Mutable state of one run, owned by :class:`RunStateManager`."""

    def __init__(self, run_id: str | None = None) -> None:
        self.run_id = run_id
        self.steps: dict[str, StepSnapshot] = {
            name: StepSnapshot(name) for name in STEP_ORDER
        }
        self.logs: list[str] = []
        self.slide_progress = SlideProgress()
        self.last_artifact_id: str | None = None
        self.pdf_url: str | None = None
        self.is_processing = False

    def get_step(self, name: str) -> StepSnapshot:
        try:
            return self.steps[name]
        except KeyError:
            raise ValueError(f"Unknown pipeline step: {name}") from None

    @property
    def current_step(self) -> str | None:
        for name, snapshot in self.steps.items():
            if snapshot.status == "processing":
                return name
        return None

    @property
    def failed_step(self) -> str | None:
        for name, snapshot in self.steps.items():
            if snapshot.status == "error":
                return name
        return None

    @property
    def is_complete(self) -> bool:
        return all(s.status == "completed" for s in self.steps.values())

    @property
    def can_retry_render(self) -> bool:
        return (
            not self.is_processing
            and bool(self.last_artifact_id)
            and self.steps["render"].status == "error"
        )

    @property
    def status(self) -> str:
        """Coarse run status derived from the step statuses."""
        if self.is_complete:
            return "completed"
        if self.failed_step is not None:
            return "error"
        if self.is_processing:
            return "processing"
        return "pending"

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "status": self.status,
            "current_step": self.current_step,
            "steps": [self.steps[name].as_dict() for name in STEP_ORDER],
            "logs": list(self.logs),
            "slide_progress": dict(self.slide_progress),
            "last_artifact_id": self.last_artifact_id,
            "pdf_url": self.pdf_url,
            "is_processing": self.is_processing,
            "is_complete": self.is_complete,
            "can_retry_render": self.can_retry_render,
        }

    def snapshot(self) -> dict[str, Any]:
        """Deep copy handed to observers so they can never mutate the run."""
        return deepcopy(self.to_dict())
