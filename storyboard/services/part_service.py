"""
Storyboard Backend — Part Service (Persistent Store)
=====================================================

What:  Durable storage and ordered retrieval of parts.
How:   SQLAlchemy 2.0 statements on the request's AsyncSession. Writes are
       flushed here and committed by get_db_session when the request ends.
Who:   Called by the /api/parts route handlers.

Operations:
    list_all   SELECT ... ORDER BY order_index ASC, id ASC
    get_by_id  SELECT ... WHERE id = :id              → NotFoundError
    create     order_index = COALESCE(MAX(order_index), 0) + 1, INSERT
    update     UPDATE title/image_path/movement_description/content/updated_at
    delete     best-effort image removal, then DELETE
    reorder    all-or-nothing batch of UPDATE ... SET order_index

Error Handling Strategy:
    Domain errors (ValidationError, NotFoundError) propagate unchanged.
    SQLAlchemy errors are logged with context and wrapped in DatabaseError,
    which the global handler reports as a generic 500.
"""

import logging
from typing import List, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storyboard.exceptions import DatabaseError, NotFoundError, ValidationError
from storyboard.models.part import Part, utc_now
from storyboard.schemas.part import (
    SQL_INTEGER_MAX,
    SQL_INTEGER_MIN,
    PartPayload,
    PartResponse,
    ReorderItem,
)
from storyboard.services.file_service import file_service

logger = logging.getLogger(__name__)


def _require_text(value, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(
            message="Title and content are required",
            field=field,
        )
    return value


class PartService:
    """
    Store operations for parts.

    Stateless: every method receives the session of the current request,
    so a whole request (in particular one reorder batch) is one transaction.
    """

    def validate_payload(self, payload: PartPayload) -> dict:
        """
        Normalize a create/update body into column values.

        Raises:
            ValidationError: title or content missing or blank (→ 400)
        """
        return {
            "title": _require_text(payload.title, "title"),
            "content": _require_text(payload.content, "content"),
            "image_path": payload.image_path or None,
            "movement_description": payload.movement_description or "",
        }

    async def list_all(self, db: AsyncSession) -> List[PartResponse]:
        """Every part, ascending by order_index (ties by id). No pagination."""
        try:
            result = await db.execute(
                select(Part).order_by(Part.order_index.asc(), Part.id.asc())
            )
            parts = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing parts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch parts",
                context={"error_type": type(e).__name__},
            )
        return [PartResponse.model_validate(part) for part in parts]

    async def _load(self, db: AsyncSession, part_id: int) -> Part:
        # No stored row can carry an id outside the column range
        if not SQL_INTEGER_MIN <= part_id <= SQL_INTEGER_MAX:
            raise NotFoundError(resource="Part", resource_id=str(part_id))
        try:
            result = await db.execute(select(Part).where(Part.id == part_id))
            part = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching part %s: %s", part_id, str(e))
            raise DatabaseError(
                message="Failed to fetch part",
                context={"part_id": part_id},
            )
        if part is None:
            raise NotFoundError(resource="Part", resource_id=str(part_id))
        return part

    async def get_by_id(self, db: AsyncSession, part_id: int) -> PartResponse:
        """
        Raises:
            NotFoundError: no part with this id (→ 404)
        """
        part = await self._load(db, part_id)
        return PartResponse.model_validate(part)

    async def create(self, db: AsyncSession, payload: PartPayload) -> PartResponse:
        """
        Insert a new part at the end of the list.

        order_index is MAX(order_index) + 1, or 1 for an empty table.
        """
        values = self.validate_payload(payload)
        try:
            max_order = await db.scalar(select(func.max(Part.order_index)))
            now = utc_now()
            part = Part(
                order_index=(max_order or 0) + 1,
                created_at=now,
                updated_at=now,
                **values,
            )
            db.add(part)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating part: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to create part",
                context={"error_type": type(e).__name__},
            )

        logger.info("Part %s created at order_index=%d", part.id, part.order_index)
        return PartResponse.model_validate(part)

    async def update(
        self, db: AsyncSession, part_id: int, payload: PartPayload
    ) -> PartResponse:
        """
        Replace the editable fields of a part and refresh updated_at.

        order_index, id and created_at are never touched here.
        """
        values = self.validate_payload(payload)
        part = await self._load(db, part_id)
        try:
            for column, value in values.items():
                setattr(part, column, value)
            part.updated_at = utc_now()
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating part %s: %s", part_id, str(e))
            raise DatabaseError(
                message="Failed to update part",
                context={"part_id": part_id},
            )

        logger.info("Part %s updated", part_id)
        return PartResponse.model_validate(part)

    async def delete(self, db: AsyncSession, part_id: int) -> None:
        """
        Delete a part and, best-effort, its uploaded image.

        The file goes first. A missing file is fine and a failed removal is
        logged and ignored, so the row is deleted either way.
        """
        part = await self._load(db, part_id)

        if part.image_path:
            await file_service.remove_public_file(part.image_path)

        try:
            await db.delete(part)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting part %s: %s", part_id, str(e))
            raise DatabaseError(
                message="Failed to delete part",
                context={"part_id": part_id},
            )

        logger.info("Part %s deleted", part_id)

    async def reorder(
        self, db: AsyncSession, items: Sequence[ReorderItem]
    ) -> List[PartResponse]:
        """
        Apply a batch of order_index assignments as one unit.

        Every id is checked before the first UPDATE, so an unknown id fails
        the batch with nothing written. A storage failure part-way through
        rolls the session back. order_index values are taken as given:
        neither density nor uniqueness is enforced.

        Returns:
            The full list in its new order.
        """
        ids = [item.id for item in items]
        if ids:
            try:
                result = await db.execute(select(Part.id).where(Part.id.in_(ids)))
                existing = set(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error("Database error preparing reorder: %s", str(e))
                raise DatabaseError(message="Failed to reorder parts")

            missing = [part_id for part_id in ids if part_id not in existing]
            if missing:
                raise NotFoundError(
                    resource="Part",
                    resource_id=str(missing[0]),
                    context={"missing_ids": missing},
                )

            try:
                for item in items:
                    await db.execute(
                        update(Part)
                        .where(Part.id == item.id)
                        .values(order_index=item.order_index)
                    )
                await db.flush()
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(
                    "Database error during reorder, batch rolled back: %s",
                    str(e),
                    exc_info=True,
                )
                raise DatabaseError(
                    message="Failed to reorder parts",
                    context={"part_ids": ids},
                )

            logger.info("Reordered %d parts", len(ids))

        return await self.list_all(db)


# ── Singleton Instance ────────────────────────────────────────────────────
part_service = PartService()
