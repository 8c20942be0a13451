"""
Presentation routes for starting runs and following their progress.

A run is started in the background and identified by its run id; clients
poll ``GET /api/runs/{run_id}`` for the step statuses and the run log.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, UploadFile
from loguru import logger

from slidesmith.core.exceptions import SlideSmithError, UserInputError
from slidesmith.core.progress_utils import compute_step_percentage
from slidesmith.core.rate_limit import EXTRACT_LIMIT, RUN_LIMIT, limiter
from slidesmith.core.run_manager import RunManager
from slidesmith.document import extract_document_text
from slidesmith.pipeline import PresentationPipeline
from slidesmith.remote.client import EdgeFunctionClient
from slidesmith.schemas.presentation import (
    PresentationRequest,
    RenderRequest,
    normalize_selected_slides,
)

from .dependencies import (
    PipelineFactory,
    get_edge_client,
    get_pipeline_factory,
    get_run_manager,
)

router = APIRouter(prefix="/api", tags=["presentations"])

ClientDep = Annotated[EdgeFunctionClient, Depends(get_edge_client)]
FactoryDep = Annotated[PipelineFactory, Depends(get_pipeline_factory)]
RunsDep = Annotated[RunManager, Depends(get_run_manager)]


def _run_payload(pipeline: PresentationPipeline) -> dict[str, Any]:
    snapshot = pipeline.state.snapshot()
    snapshot["progress"] = compute_step_percentage(snapshot)
    return snapshot


def _get_pipeline(runs: RunManager, run_id: str) -> PresentationPipeline:
    pipeline = runs.get(run_id)
    if pipeline is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return pipeline


@router.post("/presentations", status_code=202)
@limiter.limit(RUN_LIMIT)
async def create_presentation(
    request: Request,
    payload: PresentationRequest,
    new_pipeline: FactoryDep,
    runs: RunsDep,
) -> dict[str, Any]:
    """Start a new run for a transcript and return its run id."""
    pipeline = new_pipeline()
    run_id = runs.register(pipeline)
    runs.launch(run_id, pipeline.create_presentation(payload))
    logger.info(f"Launched presentation run {run_id}")
    return {"run_id": run_id, "status": "processing"}


@router.get("/runs/{run_id}")
async def get_run(run_id: str, runs: RunsDep) -> dict[str, Any]:
    """Snapshot of a run: step statuses, log lines and overall progress."""
    return _run_payload(_get_pipeline(runs, run_id))


@router.post("/runs/{run_id}/retry-render", status_code=202)
@limiter.limit(RUN_LIMIT)
async def retry_render(
    request: Request,
    run_id: str,
    runs: RunsDep,
    body: Annotated[RenderRequest | None, Body()] = None,
) -> dict[str, Any]:
    """Re-run only the PDF step of a run."""
    pipeline = _get_pipeline(runs, run_id)
    body = body or RenderRequest()
    try:
        presentation_id = await pipeline.resolve_retry_target(body.artifact_id)
    except UserInputError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    try:
        runs.launch(
            run_id,
            pipeline.render_artifact(
                presentation_id, normalize_selected_slides(body.selected_slides)
            ),
        )
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return {"run_id": run_id, "presentation_id": presentation_id}


@router.post("/presentations/{presentation_id}/render", status_code=202)
@limiter.limit(RUN_LIMIT)
async def render_presentation(
    request: Request,
    presentation_id: str,
    new_pipeline: FactoryDep,
    runs: RunsDep,
    body: Annotated[RenderRequest | None, Body()] = None,
) -> dict[str, Any]:
    """Render a stored presentation from an earlier session in a new run."""
    pipeline = new_pipeline()
    try:
        await pipeline.resolve_retry_target(presentation_id)
    except UserInputError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    run_id = runs.register(pipeline)
    selected = normalize_selected_slides(body.selected_slides) if body else None
    runs.launch(run_id, pipeline.render_artifact(presentation_id, selected))
    return {"run_id": run_id, "presentation_id": presentation_id}


@router.post("/documents/extract")
@limiter.limit(EXTRACT_LIMIT)
async def extract_document(
    request: Request, file: UploadFile, client: ClientDep
) -> dict[str, Any]:
    """Extract plain text from an uploaded document to use as transcript."""
    data = await file.read()
    filename = file.filename or ""
    try:
        text = await extract_document_text(client, filename, data, file.content_type)
    except UserInputError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except SlideSmithError as e:
        logger.error(f"Document extraction failed for {filename}: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e

    return {"filename": filename, "text": text, "length": len(text)}
