"""
SQLAlchemy database models.
Defines the queue_items table, the only persisted entity.
"""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Index,
    Integer,
    LargeBinary,
    String,
    false,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.constants import QUEUE_NAME_MAX_LENGTH, TOKEN_LENGTH


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class QueueItem(Base):
    """
    A single queued payload.

    Rows move through three states:
    - unclaimed: token IS NULL, processed = false
    - claimed: token set by exactly one winning dequeue attempt
    - processed: processed = true, eligible for cleanup once stale

    Key constraints:
    - id order is FIFO order within a queue_name
    - processed implies token IS NOT NULL
    """

    __tablename__ = "queue_items"

    # SQLite only autoincrements INTEGER PRIMARY KEY columns
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    queue_name: Mapped[str] = mapped_column(
        String(QUEUE_NAME_MAX_LENGTH),
        nullable=False,
    )

    # Codec-encoded payload
    data: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
    )

    processed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    # Claim tracking
    token: Mapped[str | None] = mapped_column(
        String(TOKEN_LENGTH),
        nullable=True,
    )
    claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        # Index for the claim: oldest unclaimed row of a queue
        Index(
            "ix_queue_items_claim",
            "queue_name",
            "processed",
            "token",
            "id",
        ),
        # Index for cleanup of stale processed rows
        Index(
            "ix_queue_items_cleanup",
            "processed",
            "updated_at",
        ),
    )

    @property
    def is_claimed(self) -> bool:
        """Check if a consumer has claimed this item."""
        return self.token is not None

    def __repr__(self) -> str:
        return (
            f"QueueItem(id={self.id}, queue={self.queue_name}, "
            f"processed={self.processed}, claimed={self.is_claimed})"
        )
