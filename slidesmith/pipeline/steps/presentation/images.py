"""
Slide image generation step for SlideSmith.

Slides are generated strictly one after another with a fixed pause between
them so the image provider never sees a burst. A slide whose retries are
exhausted is logged and skipped; the batch only fails when no slide at all
could be generated.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from slidesmith.core.exceptions import (
    BatchPartialFailure,
    ExhaustionError,
    format_seconds,
)
from slidesmith.pipeline.helpers import PipelineContext
from slidesmith.schemas.presentation import SlideDescriptor

SLIDE_IMAGE_FUNCTION = "generate-single-slide"


@dataclass
class ImageBatchResult:
    completed: int
    total: int
    failed_slide_numbers: list[int] = field(default_factory=list)


async def generate_images_step(
    ctx: PipelineContext,
    presentation_id: str,
    slides: Sequence[SlideDescriptor],
    style_prompt: str,
) -> ImageBatchResult:
    """
    Generate an image for every slide, in slide order.

    Args:
        ctx: Shared pipeline collaborators
        presentation_id: Owning presentation
        slides: Outline slide descriptors; slide N is ``slides[N - 1]``
        style_prompt: Style directive shared by every slide

    Raises:
        BatchPartialFailure: not a single slide succeeded
    """
    ctx.log("Paso 4: Generando imágenes...")
    total = len(slides)
    policy = ctx.policy("images")
    pacing_delay = ctx.settings.slide_pacing_delay
    result = ImageBatchResult(completed=0, total=total)

    ctx.state_manager.set_slide_progress(0, total)
    ctx.log(f"Generando {total} diapositivas...")

    for index, slide in enumerate(slides):
        slide_number = index + 1

        if index > 0:
            ctx.log(
                f"Esperando {format_seconds(pacing_delay)}s antes de siguiente slide..."
            )
            await ctx.sleep(pacing_delay)

        try:
            await ctx.invoker.invoke(
                SLIDE_IMAGE_FUNCTION,
                {
                    "presentationId": presentation_id,
                    "slideNumber": slide_number,
                    "title": slide.title,
                    "content": slide.content,
                    "description": slide.description,
                    "stylePrompt": style_prompt,
                },
                policy,
                f"Generando slide {slide_number}/{total}",
            )
        except ExhaustionError as e:
            result.failed_slide_numbers.append(slide_number)
            ctx.state_manager.set_slide_progress(result.completed, total)
            ctx.log(
                f"✗ Slide {slide_number} falló después de {e.attempts} intentos"
            )
            logger.warning(f"Slide {slide_number} of {presentation_id} failed: {e}")
            continue

        result.completed += 1
        ctx.state_manager.set_slide_progress(result.completed, total)
        ctx.log(f"✓ Slide {slide_number} completada ({result.completed}/{total})")

    if result.completed == 0:
        raise BatchPartialFailure(total)

    summary = f"Imágenes generadas: {result.completed}/{total}"
    if result.failed_slide_numbers:
        failed = ", ".join(str(n) for n in result.failed_slide_numbers)
        summary += f" (fallaron: {failed})"
    ctx.log(summary)
    logger.info(
        f"Generated {result.completed}/{total} slide images for {presentation_id}"
    )
    return result


__all__ = ["ImageBatchResult", "generate_images_step"]
