"""
Presentation pipeline coordinator for SlideSmith.

Sequences the five steps of a run:

1. understand - analyze the transcript
2. outline    - turn the analysis into a structured outline
3. persist    - store the presentation and its slides
4. images     - generate one image per slide (sequential fan-out)
5. render     - compile the PDF and store its URL

The first terminal failure stops the run. Nothing already written is rolled
back; instead :meth:`PresentationPipeline.retry_pdf_only` can resume the
final step against the stored presentation.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Sequence

from loguru import logger

from slidesmith.configs.config import Config, config
from slidesmith.core.exceptions import PipelineStepFailedError, UserInputError
from slidesmith.core.run_state import STEP_LABELS, RunState
from slidesmith.core.state_manager import RunStateManager
from slidesmith.remote.client import EdgeFunctionClient
from slidesmith.remote.retry import RetryingInvoker, SleepFunc
from slidesmith.repository.presentation import PresentationStore
from slidesmith.schemas.presentation import PresentationRequest

from .base import BasePipeline
from .helpers import PipelineContext
from .steps.presentation import (
    generate_images_step,
    outline_step,
    persist_step,
    render_step,
    understand_step,
)

# Context prepended to the failure message of a step
STEP_ERROR_PREFIXES = {
    "understand": "Error al analizar el transcript: ",
    "outline": "Error al crear el outline: ",
    "persist": "Error al guardar en base de datos: ",
}

NO_ARTIFACT_MESSAGE = "No hay presentación para reintentar"


class PresentationPipeline(BasePipeline):
    """Orchestrator for one transcript-to-PDF run and its render retries."""

    def __init__(
        self,
        client: EdgeFunctionClient,
        store: PresentationStore,
        *,
        run_id: str | None = None,
        state_manager: RunStateManager | None = None,
        sleep: SleepFunc = asyncio.sleep,
        settings: Config | None = None,
    ) -> None:
        super().__init__(state_manager or RunStateManager(run_id or str(uuid.uuid4())))
        self.store = store
        self.invoker = RetryingInvoker(client, self.state_manager.add_log, sleep)
        self.ctx = PipelineContext(
            state_manager=self.state_manager,
            invoker=self.invoker,
            store=store,
            sleep=sleep,
            settings=settings or config,
        )

    # Read-only views ---------------------------------------------------------
    @property
    def state(self) -> RunState:
        return self.state_manager.state

    @property
    def is_complete(self) -> bool:
        return self.state.is_complete

    @property
    def can_retry_render(self) -> bool:
        return self.state.can_retry_render

    @property
    def last_artifact_id(self) -> str | None:
        return self.state.last_artifact_id

    def get_step_display_name(self, step_name: str) -> str:
        return STEP_LABELS.get(step_name, step_name)

    def describe_failure(self, step_name: str, error: Exception) -> str:
        message = super().describe_failure(step_name, error)
        return STEP_ERROR_PREFIXES.get(step_name, "") + message

    # Operations --------------------------------------------------------------
    async def create_presentation(self, request: PresentationRequest) -> bool:
        """
        Run the whole pipeline for one transcript.

        Returns:
            True when every step completed; False when a step failed (the
            failure is recorded on the step and in the run log)

        Raises:
            UserInputError: a run is already in progress on this pipeline
        """
        if self.state.is_processing:
            raise UserInputError("Ya hay una presentación en proceso")

        self.state_manager.reset()
        self.state_manager.set_processing(True)
        self.state_manager.add_log("Iniciando proceso de creación de presentación...")
        logger.info(f"Starting presentation run {self.run_id}")

        try:
            analysis = await self._execute_step(
                "understand", understand_step, self.ctx, request
            )
            outline = await self._execute_step(
                "outline", outline_step, self.ctx, analysis, request.style_prompt
            )
            presentation_id = await self._execute_step(
                "persist", persist_step, self.ctx, request, outline
            )
            await self._execute_step(
                "images",
                generate_images_step,
                self.ctx,
                presentation_id,
                outline.slides,
                request.style_prompt,
            )
            self.state_manager.add_log("Paso 5: Compilando PDF...")
            await self._execute_step("render", render_step, self.ctx, presentation_id)
        except PipelineStepFailedError as e:
            logger.error(f"Run {self.run_id} stopped at step {e.step}: {e}")
            return False
        finally:
            self.state_manager.set_processing(False)

        self.state_manager.add_log("¡Proceso completado exitosamente!")
        logger.info(f"Run {self.run_id} completed: {self.state.pdf_url}")
        return True

    async def retry_pdf_only(
        self,
        artifact_id: str | None = None,
        selected_slides: Sequence[int] | None = None,
    ) -> bool:
        """
        Re-run only the render step against an already stored presentation.

        Args:
            artifact_id: Presentation to render; defaults to this run's artifact
            selected_slides: Optional subset of slide numbers to include

        Returns:
            True when the PDF was rendered

        Raises:
            UserInputError: nothing to retry; run state is left untouched
        """
        presentation_id = await self.resolve_retry_target(artifact_id)
        return await self.render_artifact(presentation_id, selected_slides)

    async def render_artifact(
        self,
        presentation_id: str,
        selected_slides: Sequence[int] | None = None,
    ) -> bool:
        """Render a target already checked by :meth:`resolve_retry_target`."""
        self.state_manager.set_processing(True)
        self.state_manager.add_log("Reintentando generación de PDF...")
        try:
            await self._execute_step(
                "render",
                render_step,
                self.ctx,
                presentation_id,
                list(selected_slides) if selected_slides else None,
            )
        except PipelineStepFailedError as e:
            logger.error(f"Render retry for {presentation_id} failed: {e}")
            return False
        finally:
            self.state_manager.set_processing(False)

        self.state_manager.add_log("¡PDF generado exitosamente!")
        return True

    async def resolve_retry_target(self, artifact_id: str | None = None) -> str:
        """
        Check that a render retry is allowed and return the presentation id.

        Raises:
            UserInputError: a run is in progress or there is nothing to render
        """
        if self.state.is_processing:
            raise UserInputError("Ya hay una presentación en proceso")

        own_id = self.state.last_artifact_id
        if artifact_id is None or artifact_id == own_id:
            if not own_id:
                raise UserInputError(NO_ARTIFACT_MESSAGE)
            if self.state.get_step("render").status not in ("error", "completed"):
                raise UserInputError(
                    "La generación de PDF todavía no se ha ejecutado "
                    "para esta presentación"
                )
            return own_id

        # Explicit id from an earlier run: it must exist in the store
        if await self.store.get_presentation(artifact_id) is None:
            raise UserInputError(NO_ARTIFACT_MESSAGE)
        self.state_manager.set_last_artifact_id(artifact_id)
        return artifact_id


__all__ = ["PresentationPipeline"]
