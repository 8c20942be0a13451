"""
Pydantic models for presentation creation and outline payloads.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from slidesmith.configs.config import config
from slidesmith.core.exceptions import UserInputError

ALLOWED_FILE_TYPES = {
    "text/plain",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

ALLOWED_EXTENSIONS = (".txt", ".doc", ".docx", ".pdf")


class PresentationRequest(BaseModel):
    """Input of one run: the transcript plus the three prompts."""

    model_config = ConfigDict(populate_by_name=True)

    transcript: str = Field(..., description="Meeting transcript to summarize")
    system_prompt: str = Field(
        default="", alias="systemPrompt", description="System prompt for analysis"
    )
    user_prompt: str = Field(
        default="", alias="userPrompt", description="User prompt for analysis"
    )
    style_prompt: str = Field(
        default="", alias="stylePrompt", description="Shared visual style directive"
    )
    user_id: str | None = Field(
        default=None, alias="userId", description="Owner of the presentation"
    )

    @field_validator("transcript")
    @classmethod
    def validate_transcript(cls, v: str) -> str:
        """Trim and enforce the transcript length limits."""
        text = (v or "").strip()
        if len(text) < config.transcript_min_chars:
            raise ValueError(
                f"Transcript must be at least {config.transcript_min_chars} characters"
            )
        if len(text) > config.transcript_max_chars:
            raise ValueError(
                "Transcript must be less than "
                f"{config.transcript_max_chars:,} characters"
            )
        return text


class SlideDescriptor(BaseModel):
    """One slide of a generated outline."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    slide_number: int | None = Field(default=None, alias="slideNumber")
    title: str = ""
    content: str | list[str] = ""
    description: str

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Slide description is required")
        return v

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Outline(BaseModel):
    """Deck title plus ordered slide descriptors."""

    model_config = ConfigDict(extra="allow")

    title: str = ""
    slides: list[SlideDescriptor] = Field(..., min_length=1)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class RenderRequest(BaseModel):
    """Optional body of a render retry."""

    model_config = ConfigDict(populate_by_name=True)

    artifact_id: str | None = Field(default=None, alias="presentationId")
    selected_slides: list[int] | None = Field(default=None, alias="selectedSlides")


def normalize_selected_slides(selected: list[int] | None) -> list[int] | None:
    """Sort and de-duplicate a slide selection; empty means "all slides"."""
    if not selected:
        return None
    return sorted(set(selected))


def validate_upload(
    filename: str, size_bytes: int, content_type: str | None = None
) -> None:
    """Check an uploaded document before it is sent for text extraction.

    Raises:
        UserInputError: unsupported type or file too large
    """
    extension = Path(filename or "").suffix.lower()
    if extension not in ALLOWED_EXTENSIONS and content_type not in ALLOWED_FILE_TYPES:
        raise UserInputError(
            f"Only {', '.join(ALLOWED_EXTENSIONS)} files are supported"
        )
    if size_bytes > config.max_upload_bytes:
        raise UserInputError(
            f"File exceeds {config.max_upload_mb}MB limit. Please use a smaller file."
        )
