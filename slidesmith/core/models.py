"""
Database models for SlideSmith.

This module contains the SQLAlchemy models used by the application.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# JSONB on Postgres, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")

PRESENTATION_STATUSES = ("draft", "processing", "completed", "error")


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class PresentationRow(Base):
    __tablename__ = "presentations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    system_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    style_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    transcript: Mapped[str | None] = mapped_column(Text, nullable=True)
    outline: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="draft", index=True)
    pdf_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.now, onupdate=datetime.now
    )

    slides: Mapped[list[SlideRow]] = relationship(
        "SlideRow",
        back_populates="presentation",
        cascade="all, delete-orphan",
        order_by="SlideRow.slide_number",
    )


class SlideRow(Base):
    __tablename__ = "slides"
    __table_args__ = (
        UniqueConstraint(
            "presentation_id", "slide_number", name="uq_slides_presentation_number"
        ),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    presentation_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("presentations.id", ondelete="CASCADE"), index=True
    )
    slide_number: Mapped[int] = mapped_column(Integer)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.now
    )

    presentation: Mapped[PresentationRow] = relationship(
        "PresentationRow", back_populates="slides"
    )
