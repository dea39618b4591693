"""Initial schema with queue_items table

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "queue_items",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("queue_name", sa.String(255), nullable=False),
        sa.Column("data", sa.LargeBinary, nullable=False),
        sa.Column("processed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("token", sa.String(40), nullable=True),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Serves the claim: oldest unclaimed row of a queue
    op.create_index(
        "ix_queue_items_claim",
        "queue_items",
        ["queue_name", "processed", "token", "id"],
    )

    # Serves cleanup of stale processed rows
    op.create_index(
        "ix_queue_items_cleanup",
        "queue_items",
        ["processed", "updated_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_queue_items_cleanup", table_name="queue_items")
    op.drop_index("ix_queue_items_claim", table_name="queue_items")
    op.drop_table("queue_items")
