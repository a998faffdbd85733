"""Create parts table

Revision ID: 001
Revises: None
Create Date: 2026-01-15 00:00:00.000000+00:00

What:  Creates the `parts` table and its order_index index.
How:   Portable column types, so the same revision runs on SQLite and
       PostgreSQL. Timestamps are written by the application.

Rollback: downgrade() drops the table and every part in it.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "parts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        # Display position, ascending; not unique
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        # Public path /uploads/<file>, NULL when the part has no image
        sa.Column("image_path", sa.String(255), nullable=True),
        sa.Column("movement_description", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    # Every read is ORDER BY order_index
    op.create_index("idx_parts_order_index", "parts", ["order_index"])


def downgrade() -> None:
    op.drop_index("idx_parts_order_index", table_name="parts")
    op.drop_table("parts")
