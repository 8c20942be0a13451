"""
Persistence step for SlideSmith.

Writes the presentation row and then its slide rows. The two writes have
independent retry budgets and no shared transaction: if the slide batch is
exhausted the presentation row stays behind without slides.
"""

from typing import Any

from loguru import logger

from slidesmith.pipeline.helpers import PipelineContext
from slidesmith.remote.retry import retry_with_backoff
from slidesmith.schemas.presentation import Outline, PresentationRequest


def build_slide_rows(presentation_id: str, outline: Outline) -> list[dict[str, Any]]:
    """Derive one slide row per outline entry, numbered 1..N."""
    return [
        {
            "presentation_id": presentation_id,
            "slide_number": index,
            "description": slide.description,
        }
        for index, slide in enumerate(outline.slides, start=1)
    ]


async def persist_step(
    ctx: PipelineContext, request: PresentationRequest, outline: Outline
) -> str:
    """
    Store the presentation and its slides; returns the presentation id.

    The id is published to the run state as soon as the presentation row
    exists so a later render retry can find it.
    """
    ctx.log("Paso 3: Guardando en base de datos...")
    policy = ctx.policy("persist")

    async def _create_presentation() -> dict[str, Any]:
        return await ctx.store.create_presentation(
            {
                "system_prompt": request.system_prompt,
                "user_prompt": request.user_prompt,
                "style_prompt": request.style_prompt,
                "transcript": request.transcript,
                "outline": outline.to_payload(),
                "status": "processing",
                "user_id": request.user_id,
            }
        )

    presentation = await retry_with_backoff(
        _create_presentation,
        policy=policy,
        label="Guardando presentación",
        log=ctx.log,
        sleep=ctx.sleep,
    )
    presentation_id = str(presentation["id"])
    ctx.log(f"Presentación guardada con ID: {presentation_id}")
    ctx.state_manager.set_last_artifact_id(presentation_id)

    slide_rows = build_slide_rows(presentation_id, outline)

    async def _create_slides() -> list[dict[str, Any]]:
        return await ctx.store.create_slides(presentation_id, slide_rows)

    slides = await retry_with_backoff(
        _create_slides,
        policy=policy,
        label="Guardando slides",
        log=ctx.log,
        sleep=ctx.sleep,
    )
    ctx.log(f"{len(slides)} diapositivas guardadas en BD")
    logger.info(f"Persisted presentation {presentation_id} with {len(slides)} slides")
    return presentation_id


__all__ = ["build_slide_rows", "persist_step"]
