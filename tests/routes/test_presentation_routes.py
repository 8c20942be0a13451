"""
Tests for the presentation API routes.
"""

import time

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from slidesmith.core.exceptions import TransportError
from slidesmith.core.rate_limit import add_rate_limiting, limiter
from slidesmith.core.run_manager import RunManager
from slidesmith.routes.dependencies import (
    get_edge_client,
    get_pipeline_factory,
    get_run_manager,
)
from slidesmith.routes.presentation_routes import router

TRANSCRIPT = (
    "Acta de la reunión de planificación: el equipo acordó lanzar la beta en "
    "septiembre, revisar los costes de infraestructura y contratar a dos personas."
)


@pytest.fixture
def runs() -> RunManager:
    return RunManager()


@pytest.fixture
def client(monkeypatch, edge_client, make_pipeline, runs):
    monkeypatch.setattr(limiter, "enabled", False)
    app = FastAPI()
    add_rate_limiting(app)
    app.include_router(router)
    app.dependency_overrides[get_edge_client] = lambda: edge_client
    app.dependency_overrides[get_run_manager] = lambda: runs
    app.dependency_overrides[get_pipeline_factory] = lambda: (
        lambda: make_pipeline(run_id=None)
    )
    with TestClient(app) as test_client:
        yield test_client


def _wait_for(runs: RunManager, run_id: str) -> None:
    deadline = time.monotonic() + 5
    while runs.is_running(run_id):
        if time.monotonic() > deadline:
            raise AssertionError(f"run {run_id} did not finish")
        time.sleep(0.01)


def _start_run(client, runs) -> str:
    response = client.post(
        "/api/presentations",
        json={"transcript": TRANSCRIPT, "stylePrompt": "Corporativo"},
    )
    assert response.status_code == 202
    run_id = response.json()["run_id"]
    _wait_for(runs, run_id)
    return run_id


class TestPresentationRoutes:
    def test_create_presentation_runs_in_background(self, client, runs, store):
        run_id = _start_run(client, runs)

        payload = client.get(f"/api/runs/{run_id}").json()
        assert payload["status"] == "completed"
        assert payload["progress"] == 100
        assert payload["pdf_url"] == "https://cdn.example.com/deck.pdf"
        assert [step["status"] for step in payload["steps"]] == ["completed"] * 5
        assert store.presentations[payload["last_artifact_id"]]["style_prompt"] == (
            "Corporativo"
        )

    def test_invalid_transcript_is_rejected(self, client):
        response = client.post("/api/presentations", json={"transcript": "corto"})
        assert response.status_code == 422

    def test_unknown_run_is_404(self, client):
        assert client.get("/api/runs/missing").status_code == 404

    def test_retry_render_after_failure(self, client, runs, edge_client):
        edge_client.set("create-pdf", [TransportError("HTTP 500: boom", 500)])
        run_id = _start_run(client, runs)
        failed = client.get(f"/api/runs/{run_id}").json()
        assert failed["can_retry_render"] is True
        assert failed["steps"][-1]["status"] == "error"

        edge_client.set("create-pdf", [{"pdfUrl": "https://cdn.example.com/v2.pdf"}])
        response = client.post(
            f"/api/runs/{run_id}/retry-render", json={"selectedSlides": [3, 1]}
        )
        assert response.status_code == 202
        _wait_for(runs, run_id)

        payload = client.get(f"/api/runs/{run_id}").json()
        assert payload["pdf_url"] == "https://cdn.example.com/v2.pdf"
        assert payload["is_complete"] is True
        assert edge_client.calls_to("create-pdf")[-1]["selectedSlides"] == [1, 3]

    def test_retry_render_without_artifact_is_400(
        self, client, runs, make_pipeline, edge_client
    ):
        run_id = runs.register(make_pipeline(run_id="run-empty"))

        response = client.post(f"/api/runs/{run_id}/retry-render")

        assert response.status_code == 400
        assert edge_client.calls == []

    def test_render_stored_presentation(self, client, runs, store, edge_client):
        store.presentations["pres-9"] = {"id": "pres-9", "status": "processing"}

        response = client.post("/api/presentations/pres-9/render")

        assert response.status_code == 202
        run_id = response.json()["run_id"]
        _wait_for(runs, run_id)
        assert store.presentations["pres-9"]["status"] == "completed"
        assert edge_client.calls_to("create-pdf") == [{"presentationId": "pres-9"}]

    def test_render_unknown_presentation_is_404(self, client):
        response = client.post("/api/presentations/nope/render")
        assert response.status_code == 404


class TestDocumentExtraction:
    def test_extracts_text(self, client, edge_client):
        edge_client.set("parse-document", [{"text": "Texto del acta"}])

        response = client.post(
            "/api/documents/extract",
            files={"file": ("acta.txt", b"hola", "text/plain")},
        )

        assert response.status_code == 200
        assert response.json() == {
            "filename": "acta.txt",
            "text": "Texto del acta",
            "length": 14,
        }

    def test_unsupported_file_is_400(self, client):
        response = client.post(
            "/api/documents/extract",
            files={"file": ("deck.pptx", b"x", "application/octet-stream")},
        )
        assert response.status_code == 400

    def test_service_failure_is_502(self, client, edge_client):
        edge_client.set("parse-document", [{"error": "No se pudo leer el archivo"}])

        response = client.post(
            "/api/documents/extract",
            files={"file": ("acta.pdf", b"%PDF", "application/pdf")},
        )

        assert response.status_code == 502
        assert response.json()["detail"] == "No se pudo leer el archivo"
