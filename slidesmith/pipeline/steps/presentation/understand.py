"""
Transcript analysis step for SlideSmith.

Sends the transcript and both prompts to the analysis endpoint and returns the
free-form analysis text used to build the outline.
"""

from loguru import logger

from slidesmith.core.exceptions import MalformedResponseError
from slidesmith.pipeline.helpers import PipelineContext
from slidesmith.schemas.presentation import PresentationRequest

ANALYZE_FUNCTION = "analyze-transcript"


async def understand_step(ctx: PipelineContext, request: PresentationRequest) -> str:
    """
    Analyze the transcript.

    Args:
        ctx: Shared pipeline collaborators
        request: Validated run input

    Returns:
        The analysis text

    Raises:
        ExhaustionError: every attempt failed
        MalformedResponseError: the endpoint answered without an analysis
    """
    ctx.log("Paso 1: Analizando transcript...")
    data = await ctx.invoker.invoke(
        ANALYZE_FUNCTION,
        {
            "systemPrompt": request.system_prompt,
            "userPrompt": request.user_prompt,
            "transcript": request.transcript,
        },
        ctx.policy("understand"),
        "Analizando transcript",
    )

    analysis = data.get("analysis")
    if not isinstance(analysis, str) or not analysis.strip():
        raise MalformedResponseError("La respuesta del análisis no contiene texto")

    ctx.log("Análisis completado exitosamente")
    ctx.log(f"Longitud del análisis: {len(analysis)} caracteres")
    logger.info(f"Transcript analysis produced {len(analysis)} characters")
    return analysis


__all__ = ["understand_step"]
