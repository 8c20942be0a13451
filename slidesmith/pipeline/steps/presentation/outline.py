"""
Outline generation step for SlideSmith.

The outline service is responsible for turning model output into JSON; this
step only accepts a well-formed outline and never tries to repair one.
"""

from loguru import logger
from pydantic import ValidationError

from slidesmith.core.exceptions import MalformedResponseError
from slidesmith.pipeline.helpers import PipelineContext
from slidesmith.schemas.presentation import Outline

OUTLINE_FUNCTION = "create-outline"


def parse_outline(payload: object) -> Outline:
    """Validate the ``outline`` field of a create-outline response."""
    if not isinstance(payload, dict):
        raise MalformedResponseError("La respuesta no contiene un outline válido")
    try:
        return Outline.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = first.get("msg", str(e))
        raise MalformedResponseError(
            f"Outline inválido ({location}): {detail}" if location else detail
        ) from e


async def outline_step(
    ctx: PipelineContext, analysis: str, style_prompt: str
) -> Outline:
    """Generate the deck outline from the analysis text."""
    ctx.log("Paso 2: Creando outline de presentación...")
    data = await ctx.invoker.invoke(
        OUTLINE_FUNCTION,
        {"analysis": analysis, "stylePrompt": style_prompt},
        ctx.policy("outline"),
        "Creando outline",
    )

    outline = parse_outline(data.get("outline"))
    ctx.log(f"Outline creado con {len(outline.slides)} diapositivas")
    logger.info(f"Outline '{outline.title}' has {len(outline.slides)} slides")
    return outline


__all__ = ["outline_step", "parse_outline"]
