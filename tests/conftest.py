"""
Shared fakes for the pipeline tests: a scripted edge function client, an
in-memory presentation store and a sleep that only records its delays.
"""

from __future__ import annotations

import copy
import os
import sys
from collections.abc import Callable, Sequence
from typing import Any

import pytest

# Make the repository root importable for server, cli and scripts
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from slidesmith.configs.config import Config  # noqa: E402
from slidesmith.core.exceptions import PersistenceError  # noqa: E402
from slidesmith.pipeline import PresentationPipeline  # noqa: E402
from slidesmith.schemas.presentation import PresentationRequest  # noqa: E402

TRANSCRIPT = (
    "Reunión semanal del equipo de producto. Se revisó el roadmap del trimestre, "
    "se acordó priorizar la integración de pagos y se asignaron responsables "
    "para la migración de la base de datos."
)

OUTLINE = {
    "title": "Resumen de la reunión",
    "slides": [
        {"title": "Roadmap", "content": ["Q3"], "description": "Timeline visual"},
        {"title": "Pagos", "content": "Integración", "description": "Flujo de pagos"},
        {"title": "Migración", "content": ["BD"], "description": "Diagrama de BD"},
    ],
}


class RecordingSleep:
    """Awaitable replacement for asyncio.sleep that never waits."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


Response = dict[str, Any] | Exception
Handler = Sequence[Response] | Callable[[dict[str, Any]], Response]


class FakeEdgeClient:
    """Scripted stand-in for EdgeFunctionClient.

    Each function maps to either a list of responses (consumed in order, the
    last one repeats) or a callable receiving the request body. Exceptions are
    raised instead of returned.
    """

    def __init__(self, handlers: dict[str, Handler] | None = None) -> None:
        self.handlers: dict[str, Handler] = dict(handlers or {})
        self.calls: list[tuple[str, dict[str, Any], float]] = []
        self._positions: dict[str, int] = {}

    def set(self, function_name: str, handler: Handler) -> None:
        self.handlers[function_name] = handler
        self._positions.pop(function_name, None)

    def calls_to(self, function_name: str) -> list[dict[str, Any]]:
        return [body for name, body, _ in self.calls if name == function_name]

    async def call(
        self, function_name: str, body: dict[str, Any], timeout: float
    ) -> dict[str, Any]:
        self.calls.append((function_name, copy.deepcopy(body), timeout))
        handler = self.handlers[function_name]
        if callable(handler):
            result = handler(body)
        else:
            position = self._positions.get(function_name, 0)
            result = handler[min(position, len(handler) - 1)]
            self._positions[function_name] = position + 1
        if isinstance(result, Exception):
            raise result
        return copy.deepcopy(result)

    async def upload(
        self,
        function_name: str,
        filename: str,
        data: bytes,
        content_type: str | None,
        timeout: float,
    ) -> dict[str, Any]:
        return await self.call(
            function_name,
            {"filename": filename, "size": len(data), "content_type": content_type},
            timeout,
        )

    async def aclose(self) -> None:
        pass


class InMemoryStore:
    """PresentationStore kept in dictionaries, with failure injection."""

    def __init__(self) -> None:
        self.presentations: dict[str, dict[str, Any]] = {}
        self.slides: dict[str, list[dict[str, Any]]] = {}
        self.fail_presentation_creates = 0
        self.fail_slide_creates = 0
        self.fail_updates = False
        self.create_presentation_calls = 0
        self.create_slides_calls = 0
        self._next_id = 1

    async def create_presentation(self, data: dict[str, Any]) -> dict[str, Any]:
        self.create_presentation_calls += 1
        if self.fail_presentation_creates > 0:
            self.fail_presentation_creates -= 1
            raise PersistenceError("connection reset by peer")
        presentation_id = f"pres-{self._next_id}"
        self._next_id += 1
        row = {**data, "id": presentation_id, "pdf_url": data.get("pdf_url")}
        self.presentations[presentation_id] = row
        return dict(row)

    async def create_slides(
        self, presentation_id: str, slides: Sequence[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        self.create_slides_calls += 1
        if self.fail_slide_creates > 0:
            self.fail_slide_creates -= 1
            raise PersistenceError("deadlock detected")
        rows = [dict(slide) for slide in slides]
        self.slides[presentation_id] = rows
        return rows

    async def get_presentation(self, presentation_id: str) -> dict[str, Any] | None:
        row = self.presentations.get(presentation_id)
        return dict(row) if row else None

    async def get_slides(self, presentation_id: str) -> list[dict[str, Any]]:
        return list(self.slides.get(presentation_id, []))

    async def update_presentation(
        self, presentation_id: str, **fields: Any
    ) -> dict[str, Any] | None:
        if self.fail_updates:
            raise PersistenceError("database is read-only")
        row = self.presentations.get(presentation_id)
        if row is None:
            return None
        row.update(fields)
        return dict(row)


def happy_handlers(outline: dict[str, Any] | None = None) -> dict[str, Handler]:
    return {
        "analyze-transcript": [{"analysis": "El equipo revisó el roadmap."}],
        "create-outline": [{"outline": copy.deepcopy(outline or OUTLINE)}],
        "generate-single-slide": lambda body: {
            "imageUrl": f"https://cdn.example.com/{body['slideNumber']}.png"
        },
        "create-pdf": [{"pdfUrl": "https://cdn.example.com/deck.pdf"}],
    }


@pytest.fixture
def settings() -> Config:
    """Config with the default budgets regardless of the environment."""
    cfg = Config()
    cfg.analyze_timeout = 90.0
    cfg.outline_timeout = 90.0
    cfg.slide_image_timeout = 90.0
    cfg.render_timeout = 120.0
    cfg.remote_max_attempts = 3
    cfg.db_max_attempts = 3
    cfg.retry_backoff_step = 5.0
    cfg.slide_pacing_delay = 5.0
    return cfg


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def edge_client() -> FakeEdgeClient:
    return FakeEdgeClient(happy_handlers())


@pytest.fixture
def request_payload() -> PresentationRequest:
    return PresentationRequest(
        transcript=TRANSCRIPT,
        systemPrompt="Eres un analista",
        userPrompt="Resume la reunión",
        stylePrompt="Minimalista azul",
    )


@pytest.fixture
def make_pipeline(edge_client, store, sleep, settings):
    def _make(**kwargs: Any) -> PresentationPipeline:
        kwargs.setdefault("run_id", "run-1")
        return PresentationPipeline(
            kwargs.pop("client", edge_client),
            kwargs.pop("store", store),
            sleep=sleep,
            settings=settings,
            **kwargs,
        )

    return _make
