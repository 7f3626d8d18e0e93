"""
Module: studio_kernel.db.base
Responsibility: The declarative base every studio table derives from.
    Fixes the primary key convention (uuid4, stored as text so SQLite and
    PostgreSQL hold it identically) and the column types used for money
    and timestamps.
Architecture position: Kernel > DB.  Imports nothing from the kernel;
    models/ builds on top of it.

Invariants enforced:
    - Every row is identified by a uuid4.
    - Monetary columns are Numeric(20, 4); floats never reach storage.
    - Timestamps are timezone-aware.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID held in a 36-character string column."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, PyUUID):
            return value
        return PyUUID(value)


class Base(DeclarativeBase):
    """Root of the studio ORM mapping."""

    type_annotation_map: ClassVar[dict] = {
        PyUUID: UUIDString(),
        Decimal: Numeric(20, 4),
        datetime: DateTime(timezone=True),
    }

    id: Mapped[PyUUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Adds created_at/updated_at to a table.

    Both default to the database clock on insert.  updated_at follows the
    database clock on update unless the writer sets it, which is how the
    document service stamps edits with its injected clock.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )


UUID = PyUUID
