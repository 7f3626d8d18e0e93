"""
Module: studio_kernel.models.project
Responsibility: ORM persistence for studio projects.  Only the fields the
    activity log and project listings read are mapped; projects carry no
    termin milestones.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from decimal import Decimal

from sqlalchemy import Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from studio_kernel.db.base import TrackedBase


class ProjectRecord(TrackedBase):
    """A design or build project for a client."""

    __tablename__ = "projects"

    __table_args__ = (
        Index("idx_project_status", "status"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="todo")
    client_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    value: Mapped[Decimal] = mapped_column(
        Numeric(20, 4),
        nullable=False,
        default=Decimal("0"),
    )

    def __repr__(self) -> str:
        return f"<ProjectRecord {self.title!r} {self.type}>"
