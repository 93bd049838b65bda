"""create rate limit counters"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create per-window request counters."""
    op.create_table(
        "rate_limits",
        sa.Column("caller_id", sa.String(length=64), nullable=False),
        sa.Column("endpoint", sa.String(length=64), nullable=False),
        sa.Column("window_start", sa.BigInteger(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint(
            "caller_id", "endpoint", "window_start", name="pk_rate_limits"
        ),
    )
    op.create_index(
        "ix_rate_limits_window_start", "rate_limits", ["window_start"]
    )


def downgrade() -> None:
    """Drop per-window request counters."""
    op.drop_index("ix_rate_limits_window_start", table_name="rate_limits")
    op.drop_table("rate_limits")
