"""
Module: studio_kernel.models.activity_log
Responsibility: ORM persistence for the activity log written by the
    collection listeners in ``studio_kernel.db.activity``.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from studio_kernel.db.base import Base


class ActivityAction(str, Enum):
    """Record lifecycle actions that are logged."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ActivityLog(Base):
    """
    One create/update/delete on a watched collection.

    ``actor_id`` is None when the change was made without a bound actor
    (maintenance scripts, tests).
    """

    __tablename__ = "activity_logs"

    __table_args__ = (
        Index("idx_activity_record", "collection", "record_id"),
        Index("idx_activity_occurred", "occurred_at"),
    )

    actor_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    action: Mapped[str] = mapped_column(String(10), nullable=False)
    collection: Mapped[str] = mapped_column(String(50), nullable=False)
    record_id: Mapped[str] = mapped_column(String(36), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ActivityLog {self.action} {self.collection}/{self.record_id}>"
