"""
Storyboard Backend — Part Service Tests
========================================

What:  PartService against a real SQLite database (plus mocked sessions for
       storage failures).

What we test:
    ✅ Creation appends at MAX(order_index) + 1
    ✅ Listing is ordered by order_index, ties by id
    ✅ Validation of title/content, normalization of optional fields
    ✅ Update leaves order_index and created_at alone
    ✅ Reorder applies the batch as given and is all-or-nothing
    ✅ Delete removes the uploaded image
"""

from datetime import timedelta

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from storyboard.database import async_session_factory
from storyboard.exceptions import DatabaseError, NotFoundError, ValidationError
from storyboard.models.part import Part
from storyboard.schemas.part import PartPayload, ReorderItem
from storyboard.services.part_service import PartService


def _payload(title="Intro", content="Scene one", **extra) -> PartPayload:
    return PartPayload(title=title, content=content, **extra)


class TestPartServiceCreate:

    def setup_method(self):
        self.service = PartService()

    @pytest.mark.asyncio
    async def test_first_part_gets_order_one(self, db_session):
        part = await self.service.create(db_session, _payload())

        assert part.order_index == 1
        assert part.title == "Intro"
        assert part.image_path is None
        assert part.movement_description == ""
        assert part.created_at == part.updated_at

    @pytest.mark.asyncio
    async def test_appends_after_highest_order(self, db_session):
        first = await self.service.create(db_session, _payload("A"))
        await db_session.execute(
            update(Part).where(Part.id == first.id).values(order_index=7)
        )

        second = await self.service.create(db_session, _payload("B"))
        assert second.order_index == 8

    @pytest.mark.asyncio
    async def test_ids_are_not_reused(self, db_session):
        first = await self.service.create(db_session, _payload("A"))
        await self.service.delete(db_session, first.id)

        second = await self.service.create(db_session, _payload("B"))
        assert second.id > first.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "title,content",
        [(None, "body"), ("", "body"), ("Title", None), ("Title", ""), ("   ", "body")],
    )
    async def test_title_and_content_required(self, db_session, title, content):
        with pytest.raises(ValidationError, match="Title and content are required"):
            await self.service.create(db_session, PartPayload(title=title, content=content))

        assert await self.service.list_all(db_session) == []

    @pytest.mark.asyncio
    async def test_empty_image_path_is_stored_as_null(self, db_session):
        part = await self.service.create(db_session, _payload(image_path=""))
        assert part.image_path is None


class TestPartServiceQueries:

    def setup_method(self):
        self.service = PartService()

    @pytest.mark.asyncio
    async def test_list_all_orders_by_order_index_then_id(self, db_session):
        a = await self.service.create(db_session, _payload("A"))
        b = await self.service.create(db_session, _payload("B"))
        c = await self.service.create(db_session, _payload("C"))
        # Duplicate order_index values are tolerated; ties fall back to id
        await self.service.reorder(
            db_session,
            [
                ReorderItem(id=c.id, order_index=1),
                ReorderItem(id=a.id, order_index=2),
                ReorderItem(id=b.id, order_index=2),
            ],
        )

        titles = [p.title for p in await self.service.list_all(db_session)]
        assert titles == ["C", "A", "B"]

    @pytest.mark.asyncio
    async def test_get_by_id_unknown_raises(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_by_id(db_session, 999)


class TestPartServiceUpdate:

    def setup_method(self):
        self.service = PartService()

    @pytest.mark.asyncio
    async def test_update_replaces_fields_only(self, db_session):
        await self.service.create(db_session, _payload("A"))
        part = await self.service.create(db_session, _payload("B"))

        updated = await self.service.update(
            db_session,
            part.id,
            _payload("B2", "New body", image_path="/uploads/x.png", movement_description="Pan left"),
        )

        assert updated.id == part.id
        assert updated.order_index == part.order_index
        assert updated.created_at == part.created_at
        assert updated.updated_at >= part.updated_at
        assert updated.title == "B2"
        assert updated.image_path == "/uploads/x.png"
        assert updated.movement_description == "Pan left"

    @pytest.mark.asyncio
    async def test_update_unknown_raises(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.update(db_session, 42, _payload())

    @pytest.mark.asyncio
    async def test_update_validation_runs_first(self, db_session):
        part = await self.service.create(db_session, _payload())
        with pytest.raises(ValidationError):
            await self.service.update(db_session, part.id, _payload(title=""))

        assert (await self.service.get_by_id(db_session, part.id)).title == "Intro"


class TestPartServiceReorder:

    def setup_method(self):
        self.service = PartService()

    @pytest.mark.asyncio
    async def test_reorder_applies_permutation(self, db_session):
        a = await self.service.create(db_session, _payload("A"))
        b = await self.service.create(db_session, _payload("B"))
        c = await self.service.create(db_session, _payload("C"))

        result = await self.service.reorder(
            db_session,
            [
                ReorderItem(id=c.id, order_index=1),
                ReorderItem(id=a.id, order_index=2),
                ReorderItem(id=b.id, order_index=3),
            ],
        )

        assert [(p.title, p.order_index) for p in result] == [("C", 1), ("A", 2), ("B", 3)]

    @pytest.mark.asyncio
    async def test_reorder_does_not_touch_updated_at(self, db_session):
        a = await self.service.create(db_session, _payload("A"))
        b = await self.service.create(db_session, _payload("B"))

        result = await self.service.reorder(
            db_session,
            [ReorderItem(id=b.id, order_index=1), ReorderItem(id=a.id, order_index=2)],
        )

        by_id = {p.id: p for p in result}
        assert by_id[a.id].updated_at == a.updated_at
        assert by_id[b.id].updated_at == b.updated_at

    @pytest.mark.asyncio
    async def test_empty_batch_is_a_no_op(self, db_session):
        await self.service.create(db_session, _payload("A"))
        result = await self.service.reorder(db_session, [])
        assert [p.order_index for p in result] == [1]

    @pytest.mark.asyncio
    async def test_unknown_id_fails_whole_batch(self, db_session):
        a = await self.service.create(db_session, _payload("A"))
        b = await self.service.create(db_session, _payload("B"))

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.reorder(
                db_session,
                [
                    ReorderItem(id=b.id, order_index=1),
                    ReorderItem(id=a.id, order_index=2),
                    ReorderItem(id=999, order_index=3),
                ],
            )

        assert exc_info.value.context["missing_ids"] == [999]
        titles = [p.title for p in await self.service.list_all(db_session)]
        assert titles == ["A", "B"]

    @pytest.mark.asyncio
    async def test_storage_failure_rolls_back(self, mock_db_session):
        existing = MagicMock()
        existing.scalars.return_value.all.return_value = [1, 2]
        mock_db_session.execute = AsyncMock(
            side_effect=[existing, MagicMock(), OperationalError("UPDATE", {}, Exception("locked"))]
        )

        with pytest.raises(DatabaseError):
            await self.service.reorder(
                mock_db_session,
                [ReorderItem(id=1, order_index=2), ReorderItem(id=2, order_index=1)],
            )

        mock_db_session.rollback.assert_awaited_once()


class TestPartServiceDelete:

    def setup_method(self):
        self.service = PartService()

    @pytest.mark.asyncio
    async def test_delete_removes_row_and_image(self, db_session, upload_dir):
        image = upload_dir / "abc.png"
        image.write_bytes(b"png")
        part = await self.service.create(db_session, _payload(image_path="/uploads/abc.png"))

        await self.service.delete(db_session, part.id)

        assert not image.exists()
        with pytest.raises(NotFoundError):
            await self.service.get_by_id(db_session, part.id)

    @pytest.mark.asyncio
    async def test_delete_succeeds_when_image_already_gone(self, db_session, upload_dir):
        part = await self.service.create(db_session, _payload(image_path="/uploads/gone.png"))
        await self.service.delete(db_session, part.id)
        assert await self.service.list_all(db_session) == []

    @pytest.mark.asyncio
    async def test_delete_proceeds_when_removal_fails(self, db_session, upload_dir):
        image = upload_dir / "locked.png"
        image.write_bytes(b"png")
        part = await self.service.create(db_session, _payload(image_path="/uploads/locked.png"))

        with patch("storyboard.services.file_service.os.remove", side_effect=PermissionError("denied")):
            await self.service.delete(db_session, part.id)

        assert await self.service.list_all(db_session) == []

    @pytest.mark.asyncio
    async def test_delete_unknown_raises(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.delete(db_session, 12345)


class TestPartTimestamps:

    def setup_method(self):
        self.service = PartService()

    @pytest.mark.asyncio
    async def test_reloaded_timestamps_are_utc_aware(self, db_session):
        created = await self.service.create(db_session, _payload())
        await db_session.commit()

        async with async_session_factory() as fresh:
            loaded = await self.service.get_by_id(fresh, created.id)

        assert loaded.created_at.tzinfo is not None
        assert loaded.created_at.utcoffset() == timedelta(0)
        assert loaded.created_at == created.created_at
        assert loaded.updated_at == created.updated_at
