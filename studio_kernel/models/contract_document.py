"""
Module: studio_kernel.models.contract_document
Responsibility: ORM persistence for invoices and quotations, the two
    collections that carry termin milestones.
Architecture position: Kernel > Models.  May import from db/base.py only.

Milestones are stored as a JSON list of milestone records (see
``Milestone.to_record``); they have no identity of their own and are
always rewritten as a whole on save.
"""

from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from studio_kernel.db.base import TrackedBase


class DocumentKind(str, Enum):
    """Record collections holding contract documents."""

    INVOICE = "invoices"
    QUOTATION = "quotations"


class _ContractDocumentRecord(TrackedBase):
    """Columns shared by every contract document collection."""

    __abstract__ = True

    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    client_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="IDR")

    total_value: Mapped[Decimal] = mapped_column(
        Numeric(20, 4),
        nullable=False,
        default=Decimal("0"),
    )
    area: Mapped[Decimal | None] = mapped_column(Numeric(20, 4), nullable=True)
    unit_price: Mapped[Decimal | None] = mapped_column(Numeric(20, 4), nullable=True)

    milestones: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    active_milestone_index: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )


class InvoiceRecord(_ContractDocumentRecord):
    """An issued invoice."""

    __tablename__ = "invoices"

    __table_args__ = (
        Index("idx_invoice_category", "category"),
    )

    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<InvoiceRecord {self.invoice_number} {self.category}>"


class QuotationRecord(_ContractDocumentRecord):
    """A quotation sent to a prospective client."""

    __tablename__ = "quotations"

    __table_args__ = (
        Index("idx_quotation_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<QuotationRecord {self.title!r} {self.category}>"


RECORD_CLASSES: dict[DocumentKind, type[_ContractDocumentRecord]] = {
    DocumentKind.INVOICE: InvoiceRecord,
    DocumentKind.QUOTATION: QuotationRecord,
}
