"""create submissions"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the submissions table and its lookup indexes."""
    json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")
    op.create_table(
        "submissions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("fields", json_type, nullable=False),
        sa.Column(
            "email_key", sa.String(length=254), nullable=False, server_default=""
        ),
        sa.Column(
            "brand_key", sa.String(length=120), nullable=False, server_default=""
        ),
        sa.Column("edit_token", sa.String(length=36), nullable=True),
        sa.Column(
            "edit_token_expires_at", sa.DateTime(timezone=True), nullable=True
        ),
        sa.Column("history", json_type, nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("edit_token", name="uq_submissions_edit_token"),
    )
    op.create_index(
        "ix_submissions_duplicate_keys", "submissions", ["email_key", "brand_key"]
    )
    op.create_index("ix_submissions_created_at", "submissions", ["created_at"])


def downgrade() -> None:
    """Drop the submissions table."""
    op.drop_index("ix_submissions_created_at", table_name="submissions")
    op.drop_index("ix_submissions_duplicate_keys", table_name="submissions")
    op.drop_table("submissions")
