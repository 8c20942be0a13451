"""
Presentation repository backed by Postgres.

Persists presentations and their slides via SQLAlchemy. Every function is one
atomic unit of work; nothing here spans a transaction across calls, so callers
must tolerate a presentation that exists without its slides.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from slidesmith.configs.db import get_session
from slidesmith.core.exceptions import PersistenceError
from slidesmith.core.models import PresentationRow, SlideRow


class PresentationStore(Protocol):
    """Record store operations the pipeline depends on."""

    async def create_presentation(self, data: dict[str, Any]) -> dict[str, Any]: ...

    async def create_slides(
        self, presentation_id: str, slides: Sequence[dict[str, Any]]
    ) -> list[dict[str, Any]]: ...

    async def get_presentation(self, presentation_id: str) -> dict[str, Any] | None: ...

    async def get_slides(self, presentation_id: str) -> list[dict[str, Any]]: ...

    async def update_presentation(
        self, presentation_id: str, **fields: Any
    ) -> dict[str, Any] | None: ...


_UPDATABLE_FIELDS = {"pdf_url", "status", "outline"}


def _serialize_presentation(row: PresentationRow) -> dict[str, Any]:
    return {
        "id": row.id,
        "user_id": row.user_id,
        "system_prompt": row.system_prompt,
        "user_prompt": row.user_prompt,
        "style_prompt": row.style_prompt,
        "transcript": row.transcript,
        "outline": row.outline,
        "status": row.status,
        "pdf_url": row.pdf_url,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }


def _serialize_slide(row: SlideRow) -> dict[str, Any]:
    return {
        "id": row.id,
        "presentation_id": row.presentation_id,
        "slide_number": row.slide_number,
        "description": row.description,
        "image_url": row.image_url,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }


async def insert_presentation(data: dict[str, Any]) -> dict[str, Any]:
    """Create a presentation row and return it with its assigned id."""
    try:
        async with get_session() as s:
            now = datetime.now()
            row = PresentationRow(
                id=str(data.get("id") or uuid.uuid4()),
                user_id=data.get("user_id"),
                system_prompt=data.get("system_prompt"),
                user_prompt=data.get("user_prompt"),
                style_prompt=data.get("style_prompt"),
                transcript=data.get("transcript"),
                outline=data.get("outline"),
                status=data.get("status") or "draft",
                pdf_url=data.get("pdf_url"),
                created_at=now,
                updated_at=now,
            )
            s.add(row)
            await s.commit()
            await s.refresh(row)
            return _serialize_presentation(row)
    except SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e


async def insert_slides(
    presentation_id: str, slides: Sequence[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Insert all slide rows of a presentation in a single transaction."""
    try:
        async with get_session() as s:
            now = datetime.now()
            rows = [
                SlideRow(
                    id=str(uuid.uuid4()),
                    presentation_id=presentation_id,
                    slide_number=int(slide["slide_number"]),
                    description=slide.get("description"),
                    image_url=slide.get("image_url"),
                    created_at=now,
                )
                for slide in slides
            ]
            s.add_all(rows)
            await s.commit()
            return [_serialize_slide(row) for row in rows]
    except SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e


async def get_presentation(presentation_id: str) -> dict[str, Any] | None:
    """Fetch a single presentation by id; None when not found."""
    try:
        async with get_session() as s:
            row = await s.get(PresentationRow, presentation_id)
            return _serialize_presentation(row) if row else None
    except SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e


async def list_slides(presentation_id: str) -> list[dict[str, Any]]:
    """Return the slides of a presentation ordered by slide_number."""
    try:
        async with get_session() as s:
            result = await s.execute(
                select(SlideRow)
                .where(SlideRow.presentation_id == presentation_id)
                .order_by(SlideRow.slide_number.asc())
            )
            return [_serialize_slide(row) for row in result.scalars().all()]
    except SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e


async def update_presentation(
    presentation_id: str, **fields: Any
) -> dict[str, Any] | None:
    """Update pdf_url/status/outline on a presentation; None when not found."""
    unknown = set(fields) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unsupported presentation fields: {sorted(unknown)}")
    try:
        async with get_session() as s:
            row = await s.get(PresentationRow, presentation_id)
            if row is None:
                return None
            for key, value in fields.items():
                setattr(row, key, value)
            row.updated_at = datetime.now()
            await s.commit()
            return _serialize_presentation(row)
    except SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e


async def list_presentations(
    *,
    limit: int = 50,
    offset: int = 0,
    status: str | None = None,
    user_id: str | None = None,
) -> dict[str, Any]:
    """List presentations newest first with optional status/owner filters."""
    try:
        async with get_session() as s:
            filters = []
            if status:
                filters.append(PresentationRow.status == status)
            if user_id:
                filters.append(PresentationRow.user_id == user_id)

            count_stmt = select(func.count()).select_from(PresentationRow)
            stmt = select(PresentationRow)
            if filters:
                count_stmt = count_stmt.where(*filters)
                stmt = stmt.where(*filters)
            total = int((await s.execute(count_stmt)).scalar_one() or 0)

            result = await s.execute(
                stmt.order_by(PresentationRow.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
            return {
                "presentations": [
                    _serialize_presentation(row) for row in result.scalars().all()
                ],
                "total": total,
                "limit": limit,
                "offset": offset,
            }
    except SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e


class SqlPresentationStore:
    """:class:`PresentationStore` implementation over the module functions."""

    async def create_presentation(self, data: dict[str, Any]) -> dict[str, Any]:
        return await insert_presentation(data)

    async def create_slides(
        self, presentation_id: str, slides: Sequence[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        return await insert_slides(presentation_id, slides)

    async def get_presentation(self, presentation_id: str) -> dict[str, Any] | None:
        return await get_presentation(presentation_id)

    async def get_slides(self, presentation_id: str) -> list[dict[str, Any]]:
        return await list_slides(presentation_id)

    async def update_presentation(
        self, presentation_id: str, **fields: Any
    ) -> dict[str, Any] | None:
        return await update_presentation(presentation_id, **fields)
