from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "0001_create_presentations_and_slides"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "presentations",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("system_prompt", sa.Text(), nullable=True),
        sa.Column("user_prompt", sa.Text(), nullable=True),
        sa.Column("style_prompt", sa.Text(), nullable=True),
        sa.Column("transcript", sa.Text(), nullable=True),
        sa.Column(
            "outline",
            sa.dialects.postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
        ),
        sa.Column(
            "status", sa.String(length=32), nullable=False, server_default="draft"
        ),
        sa.Column("pdf_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_presentations_user_id", "presentations", ["user_id"], unique=False
    )
    op.create_index("ix_presentations_status", "presentations", ["status"])
    op.create_index("ix_presentations_created_at", "presentations", ["created_at"])

    op.create_table(
        "slides",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column(
            "presentation_id",
            sa.String(length=64),
            sa.ForeignKey("presentations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("slide_number", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "presentation_id", "slide_number", name="uq_slides_presentation_number"
        ),
    )
    op.create_index("ix_slides_presentation_id", "slides", ["presentation_id"])


def downgrade() -> None:
    op.drop_index("ix_slides_presentation_id", table_name="slides")
    op.drop_table("slides")
    op.drop_index("ix_presentations_created_at", table_name="presentations")
    op.drop_index("ix_presentations_status", table_name="presentations")
    op.drop_index("ix_presentations_user_id", table_name="presentations")
    op.drop_table("presentations")
