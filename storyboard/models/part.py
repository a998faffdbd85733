"""
Storyboard Backend — Part SQLAlchemy Model
===========================================

What:  ORM model representing the `parts` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Used by PartService for CRUD and reordering.

Table Design:
    - Integer AUTOINCREMENT primary key: ids are never reused, even after
      the highest row is deleted
    - order_index: display position; indexed, deliberately NOT unique
      (duplicates are tolerated, the client always submits 1..N)
    - image_path: public URL of an uploaded file (/uploads/<name>) or NULL
    - created_at / updated_at: assigned by the application in UTC and
      always read back timezone-aware (SQLite drops the offset on storage)
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import Mapped, mapped_column

from storyboard.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    DateTime stored as UTC and loaded as an aware UTC datetime.

    PostgreSQL keeps the offset itself; SQLite returns naive values, which
    are UTC by construction and get tzinfo attached here.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Part(Base):
    """
    One ordered entry of the storyboard.

    Lifecycle:
        1. Created with order_index = MAX(order_index) + 1
        2. Edited in place (everything except id, order_index, created_at)
        3. Repositioned by batch reorder (order_index only)
        4. Deleted together with its uploaded image
    """

    __tablename__ = "parts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    order_index: Mapped[int] = mapped_column(Integer, nullable=False)

    title: Mapped[str] = mapped_column(Text, nullable=False)

    image_path: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)

    movement_description: Mapped[str | None] = mapped_column(Text, nullable=True, default="")

    content: Mapped[str] = mapped_column(Text, nullable=False)

    # No onupdate: a reorder must leave updated_at alone, so
    # PartService.update sets it explicitly
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
    )

    __table_args__ = (
        Index("idx_parts_order_index", "order_index"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Part(id={self.id}, order_index={self.order_index}, title='{self.title}')>"
