"""
studio_services.documents -- Persistence and editing workflow for invoices
and quotations.

Responsibility:
    Maps contract document records to the kernel's ``ContractDocument``,
    creates documents from their category template, applies editing
    operations, stamps modification times from the injected clock, and
    reports realized revenue per period.

Architecture position:
    Services -- stateful orchestration over engines + kernel.
    Composes the pure studio_engines functions with the SQLAlchemy session.

Invariants enforced:
    - Every persisted document has been fully recalculated by the engines.
    - Saves are explicit; the record store is last-write-wins.
    - The acting user is bound to ``session.info["actor_id"]`` for the
      activity-log listeners, never held in a module global.
    - ``updated_at`` comes from the injected Clock, never the wall clock.

Failure modes:
    - DocumentNotFoundError: record id missing from its collection.
    - InvalidMilestoneRecordError / InvalidMilestoneStatusError: stored
      milestone data is malformed.
    - Errors raised by the editing operations propagate unchanged.

Usage:
    from studio_services.documents import ContractDocumentService

    with session_scope(actor_id=user_id) as session:
        service = ContractDocumentService(session, policy, SystemClock())
        record_id, doc = service.create_invoice("INV-001", "civil",
                                                total_value=Decimal("100000000"))
        doc = service.edit(DocumentKind.INVOICE, record_id, mark_paid, 0, date(2025, 3, 1))
"""

from __future__ import annotations

import inspect
import json
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from studio_engines.editing import mark_paid as mark_milestone_paid
from studio_engines.editing import new_document
from studio_engines.settlement import (
    PeriodKind,
    PeriodRevenue,
    ReportingPeriod,
    aggregate_by_period,
    realized_documents,
)
from studio_kernel.domain.clock import Clock, SystemClock
from studio_kernel.domain.contract import (
    DEFAULT_POLICY,
    Category,
    ContractDocument,
    Milestone,
    TerminPolicy,
)
from studio_kernel.exceptions import DocumentNotFoundError
from studio_kernel.logging_config import LogContext, get_logger
from studio_kernel.models.contract_document import (
    RECORD_CLASSES,
    DocumentKind,
    InvoiceRecord,
    QuotationRecord,
    _ContractDocumentRecord,
)

logger = get_logger("services.documents")


def _decode_milestones(raw: Any) -> tuple[Milestone, ...]:
    # Older records stored the milestone list as a JSON string.
    if isinstance(raw, str):
        raw = json.loads(raw) if raw.strip() else []
    return tuple(Milestone.from_record(item) for item in raw or ())


def record_to_document(record: _ContractDocumentRecord) -> ContractDocument:
    """Decode a stored record into a ContractDocument."""
    return ContractDocument(
        category=record.category,
        total_value=record.total_value if record.total_value is not None else Decimal("0"),
        milestones=_decode_milestones(record.milestones),
        active_milestone_index=record.active_milestone_index or 0,
        area=record.area,
        unit_price=record.unit_price,
        currency=record.currency,
        updated_at=record.updated_at,
        document_id=str(record.id) if record.id is not None else None,
    )


def apply_document(record: _ContractDocumentRecord, document: ContractDocument) -> None:
    """Copy a ContractDocument onto a record (milestones rewritten as a whole)."""
    record.category = document.category.value
    record.currency = document.currency
    record.total_value = document.total_value
    record.area = document.area
    record.unit_price = document.unit_price
    record.milestones = [m.to_record() for m in document.milestones]
    record.active_milestone_index = document.active_milestone_index


class ContractDocumentService:
    """
    Document workflow over one session.

    Contract:
        The caller owns the transaction (``session_scope``); the service
        only flushes.

    Non-goals:
        - Does NOT render documents or resolve clients and projects.
        - Does NOT lock records; concurrent edits are last-write-wins.
    """

    def __init__(
        self,
        session: Session,
        policy: TerminPolicy = DEFAULT_POLICY,
        clock: Clock | None = None,
        actor_id: str | None = None,
    ):
        self.session = session
        self.policy = policy
        self.clock = clock or SystemClock()
        self.actor_id = actor_id
        if actor_id is not None:
            session.info["actor_id"] = actor_id

    # =========================================================================
    # Creation
    # =========================================================================

    def create_invoice(
        self,
        invoice_number: str,
        category: Category | str,
        *,
        title: str = "",
        client_name: str | None = None,
        total_value: Decimal = Decimal("0"),
        area: Decimal | None = None,
        unit_price: Decimal | None = None,
    ) -> tuple[str, ContractDocument]:
        """Create an invoice from its category template."""
        record = InvoiceRecord(
            invoice_number=invoice_number,
            title=title,
            client_name=client_name,
        )
        return self._create(record, category, total_value, area, unit_price)

    def create_quotation(
        self,
        title: str,
        category: Category | str,
        *,
        client_name: str | None = None,
        total_value: Decimal = Decimal("0"),
        area: Decimal | None = None,
        unit_price: Decimal | None = None,
    ) -> tuple[str, ContractDocument]:
        """Create a quotation from its category template."""
        record = QuotationRecord(title=title, client_name=client_name)
        return self._create(record, category, total_value, area, unit_price)

    def _create(
        self,
        record: _ContractDocumentRecord,
        category: Category | str,
        total_value: Decimal,
        area: Decimal | None,
        unit_price: Decimal | None,
    ) -> tuple[str, ContractDocument]:
        document = new_document(
            category,
            total_value=total_value,
            area=area,
            unit_price=unit_price,
            policy=self.policy,
        )
        apply_document(record, document)
        record.updated_at = self.clock.now()
        self.session.add(record)
        self.session.flush()

        record_id = str(record.id)
        logger.info("document_created", extra={
            "collection": record.__tablename__,
            "record_id": record_id,
            "category": document.category.value,
            "total_value": str(document.total_value),
            "milestone_count": len(document.milestones),
        })
        return record_id, record_to_document(record)

    # =========================================================================
    # Load / save / delete
    # =========================================================================

    def _get_record(self, kind: DocumentKind | str, record_id: str) -> _ContractDocumentRecord:
        kind = DocumentKind(kind)
        model = RECORD_CLASSES[kind]
        try:
            key = UUID(str(record_id))
        except ValueError:
            raise DocumentNotFoundError(kind.value, str(record_id)) from None
        record = self.session.get(model, key)
        if record is None:
            raise DocumentNotFoundError(kind.value, str(record_id))
        return record

    def load(self, kind: DocumentKind | str, record_id: str) -> ContractDocument:
        """Load one document.

        Raises:
            DocumentNotFoundError: If no record has this id.
        """
        return record_to_document(self._get_record(kind, record_id))

    def save(
        self,
        kind: DocumentKind | str,
        record_id: str,
        document: ContractDocument,
    ) -> ContractDocument:
        """Persist a document, stamping ``updated_at`` from the clock."""
        record = self._get_record(kind, record_id)
        apply_document(record, document)
        record.updated_at = self.clock.now()
        self.session.flush()

        with LogContext.bind(document_id=str(record_id)):
            logger.info("document_saved", extra={
                "collection": record.__tablename__,
                "total_value": str(document.total_value),
                "paid_count": sum(1 for m in document.milestones if m.is_paid),
            })
        return record_to_document(record)

    def edit(
        self,
        kind: DocumentKind | str,
        record_id: str,
        operation: Callable[..., ContractDocument],
        *args: Any,
        **kwargs: Any,
    ) -> ContractDocument:
        """
        Load a document, apply an editing operation and save the result.

        ``operation`` is one of the ``studio_engines.editing`` functions;
        the service policy is passed to operations that accept one.
        """
        document = self.load(kind, record_id)
        if "policy" in inspect.signature(operation).parameters:
            kwargs.setdefault("policy", self.policy)
        updated = operation(document, *args, **kwargs)
        return self.save(kind, record_id, updated)

    def mark_paid(
        self,
        kind: DocumentKind | str,
        record_id: str,
        index: int,
        payment_date: date | None = None,
    ) -> ContractDocument:
        """Mark a milestone paid, dated today by the service clock unless given."""
        day = payment_date or self.clock.today()
        return self.edit(kind, record_id, mark_milestone_paid, index, day)

    def delete(self, kind: DocumentKind | str, record_id: str) -> None:
        record = self._get_record(kind, record_id)
        self.session.delete(record)
        self.session.flush()
        logger.info("document_deleted", extra={
            "collection": record.__tablename__,
            "record_id": str(record_id),
        })

    # =========================================================================
    # Queries
    # =========================================================================

    def list_documents(
        self,
        kind: DocumentKind | str,
        category: Category | str | None = None,
    ) -> list[ContractDocument]:
        """All documents of a collection, most recently updated first."""
        model = RECORD_CLASSES[DocumentKind(kind)]
        stmt = select(model).order_by(model.updated_at.desc())
        if category is not None:
            stmt = stmt.where(model.category == Category.parse(category).value)
        return [record_to_document(r) for r in self.session.scalars(stmt)]

    def reporting_period(
        self,
        kind: PeriodKind | str = PeriodKind.ALL,
        start: date | None = None,
        end: date | None = None,
    ) -> ReportingPeriod:
        """Build a reporting period relative to the service clock."""
        return ReportingPeriod(PeriodKind(kind), as_of=self.clock.today(), start=start, end=end)

    def revenue_report(
        self,
        kind: DocumentKind | str,
        period: ReportingPeriod,
    ) -> PeriodRevenue:
        """Realized revenue of one collection within ``period``."""
        documents = self.list_documents(kind)
        report = aggregate_by_period(documents, period, currency=self.policy.currency)
        logger.info("revenue_report_built", extra={
            "collection": DocumentKind(kind).value,
            "period": period.kind.value,
            "total": str(report.total.amount),
            "document_count": report.document_count,
        })
        return report

    def realized(
        self,
        kind: DocumentKind | str,
        period: ReportingPeriod,
        limit: int | None = None,
    ) -> list[ContractDocument]:
        """Documents settled within ``period``, latest first."""
        documents = realized_documents(self.list_documents(kind), period)
        return documents[:limit] if limit is not None else documents
