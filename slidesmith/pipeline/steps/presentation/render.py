"""
PDF assembly step for SlideSmith.

Asks the render endpoint to compile the stored slides into a PDF and writes
the resulting URL back onto the presentation. The write-back is a single
best-effort update: if it fails the step still counts as completed.
"""

from loguru import logger

from slidesmith.core.exceptions import MalformedResponseError
from slidesmith.pipeline.helpers import PipelineContext
from slidesmith.schemas.presentation import normalize_selected_slides

RENDER_FUNCTION = "create-pdf"


async def render_step(
    ctx: PipelineContext,
    presentation_id: str,
    selected_slides: list[int] | None = None,
) -> str:
    """Render the presentation to PDF and return the PDF URL."""
    body: dict[str, object] = {"presentationId": presentation_id}
    selection = normalize_selected_slides(selected_slides)
    if selection:
        body["selectedSlides"] = selection

    data = await ctx.invoker.invoke(
        RENDER_FUNCTION, body, ctx.policy("render"), "Generando PDF"
    )
    pdf_url = data.get("pdfUrl")
    if not isinstance(pdf_url, str) or not pdf_url:
        raise MalformedResponseError("La respuesta del PDF no contiene pdfUrl")

    try:
        updated = await ctx.store.update_presentation(
            presentation_id, pdf_url=pdf_url, status="completed"
        )
    except Exception as e:
        logger.error(f"Could not store pdf_url for {presentation_id}: {e}")
        ctx.log(f"Advertencia: no se pudo actualizar la presentación: {e}")
    else:
        if updated is None:
            logger.warning(f"Presentation {presentation_id} vanished before update")
            ctx.log("Advertencia: la presentación no existe en la base de datos")

    ctx.state_manager.set_pdf_url(pdf_url)
    ctx.log(f"PDF disponible en: {pdf_url}")
    return pdf_url


__all__ = ["render_step"]
