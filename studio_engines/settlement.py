"""
Module: studio_engines.settlement
Responsibility:
    Track how much of a contract document has been paid and roll paid
    milestones up into realized revenue per reporting period.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import studio_kernel.domain (and sibling engine modules).

Invariants enforced:
    - paid_total is the exact sum of the amounts of paid milestones.
    - remaining = total - paid_total, never floored; a negative remaining
      amount means the document is overpaid.
    - Engines never read the wall clock: relative periods ("this month")
      are evaluated against an explicit ``as_of`` date.
    - A paid milestone without a payment date is dated by the document's
      last-modified timestamp; with neither it belongs to no period.

Failure modes:
    - CurrencyMismatchError when aggregating documents in different
      currencies.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from studio_engines.reconciliation import effective_total
from studio_kernel.domain.contract import (
    DEFAULT_POLICY,
    Category,
    ContractDocument,
    Milestone,
    TerminPolicy,
)
from studio_kernel.domain.values import Money


@dataclass(frozen=True)
class SettlementSummary:
    """Paid versus outstanding amounts of one document."""

    total: Money
    paid_total: Money
    paid_count: int
    unpaid_count: int

    @property
    def remaining(self) -> Money:
        return self.total - self.paid_total

    @property
    def is_overpaid(self) -> bool:
        return self.remaining.is_negative

    @property
    def is_settled(self) -> bool:
        return self.unpaid_count == 0 and self.paid_count > 0


def summarize(
    document: ContractDocument, policy: TerminPolicy = DEFAULT_POLICY
) -> SettlementSummary:
    """Summarize payment progress against the document's effective total."""
    paid = Money.zero(document.currency)
    paid_count = 0
    for milestone in document.milestones:
        if milestone.is_paid:
            paid = paid + Money.of(milestone.amount, document.currency)
            paid_count += 1

    return SettlementSummary(
        total=Money.of(effective_total(document, policy), document.currency),
        paid_total=paid,
        paid_count=paid_count,
        unpaid_count=len(document.milestones) - paid_count,
    )


def effective_payment_date(milestone: Milestone, document: ContractDocument) -> date | None:
    """Payment date of a milestone, falling back to the document's update time."""
    if milestone.payment_date is not None:
        return milestone.payment_date
    if document.updated_at is not None:
        return document.updated_at.date()
    return None


def last_settled_date(document: ContractDocument) -> date | None:
    """Effective date of the last paid milestone in document order."""
    for milestone in reversed(document.milestones):
        if milestone.is_paid:
            return effective_payment_date(milestone, document)
    return None


# ============================================================================
# Reporting periods
# ============================================================================


class PeriodKind(str, Enum):
    ALL = "all"
    THIS_MONTH = "this_month"
    THIS_YEAR = "this_year"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ReportingPeriod:
    """
    A date window for revenue reporting.

    ``this_month`` and ``this_year`` are relative to ``as_of``.  A custom
    period missing either bound includes every dated payment.
    """

    kind: PeriodKind = PeriodKind.ALL
    as_of: date | None = None
    start: date | None = None
    end: date | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", PeriodKind(self.kind))
        if self.kind in (PeriodKind.THIS_MONTH, PeriodKind.THIS_YEAR) and self.as_of is None:
            raise ValueError(f"{self.kind.value} period requires an as_of date")

    @classmethod
    def all_time(cls) -> ReportingPeriod:
        return cls(PeriodKind.ALL)

    @classmethod
    def this_month(cls, as_of: date) -> ReportingPeriod:
        return cls(PeriodKind.THIS_MONTH, as_of=as_of)

    @classmethod
    def this_year(cls, as_of: date) -> ReportingPeriod:
        return cls(PeriodKind.THIS_YEAR, as_of=as_of)

    @classmethod
    def custom(cls, start: date | None, end: date | None) -> ReportingPeriod:
        return cls(PeriodKind.CUSTOM, start=start, end=end)

    def contains(self, day: date | None) -> bool:
        if day is None:
            return False
        if self.kind is PeriodKind.THIS_MONTH:
            return (day.year, day.month) == (self.as_of.year, self.as_of.month)
        if self.kind is PeriodKind.THIS_YEAR:
            return day.year == self.as_of.year
        if self.kind is PeriodKind.CUSTOM:
            if self.start is None or self.end is None:
                return True
            return self.start <= day <= self.end
        return True


@dataclass(frozen=True)
class PeriodRevenue:
    """Realized revenue of a set of documents within one period."""

    total: Money
    by_category: dict[Category, Money] = field(default_factory=dict)
    document_count: int = 0


def _paid_in_period(
    document: ContractDocument, period: ReportingPeriod
) -> list[Milestone]:
    return [
        m
        for m in document.milestones
        if m.is_paid and period.contains(effective_payment_date(m, document))
    ]


def aggregate_by_period(
    documents: Iterable[ContractDocument],
    period: ReportingPeriod,
    currency: str = DEFAULT_POLICY.currency,
) -> PeriodRevenue:
    """
    Sum paid milestone amounts whose effective date falls in ``period``.

    Args:
        documents: Documents to aggregate; all must share ``currency``.
        period: Reporting window.
        currency: Currency of the report.

    Returns:
        PeriodRevenue with the grand total, per-category totals and the
        number of documents that contributed at least one milestone.

    Raises:
        CurrencyMismatchError: If a document uses another currency.
    """
    total = Money.zero(currency)
    by_category: dict[Category, Money] = {}
    contributing = 0

    for document in documents:
        paid = _paid_in_period(document, period)
        if not paid:
            continue
        contributing += 1
        for milestone in paid:
            amount = Money.of(milestone.amount, document.currency)
            total = total + amount
            by_category[document.category] = (
                by_category.get(document.category, Money.zero(currency)) + amount
            )

    return PeriodRevenue(total=total, by_category=by_category, document_count=contributing)


def aggregate_by_month(
    documents: Iterable[ContractDocument],
    currency: str = DEFAULT_POLICY.currency,
) -> dict[tuple[int, int], Money]:
    """Paid amounts keyed by ``(year, month)`` of their effective date, sorted."""
    months: dict[tuple[int, int], Money] = defaultdict(lambda: Money.zero(currency))
    for document in documents:
        for milestone in document.milestones:
            if not milestone.is_paid:
                continue
            day = effective_payment_date(milestone, document)
            if day is None:
                continue
            months[(day.year, day.month)] = months[(day.year, day.month)] + Money.of(
                milestone.amount, document.currency
            )
    return dict(sorted(months.items()))


def realized_documents(
    documents: Iterable[ContractDocument], period: ReportingPeriod
) -> list[ContractDocument]:
    """Documents whose last paid milestone settled within ``period``, latest first."""
    realized: list[tuple[date, ContractDocument]] = []
    for document in documents:
        settled = last_settled_date(document)
        if period.contains(settled):
            realized.append((settled, document))
    realized.sort(key=lambda pair: pair[0], reverse=True)
    return [document for _, document in realized]
