"""
Module: studio_engines.reconciliation
Responsibility:
    Recompute every milestone amount of a contract document from its total
    and milestone specs, in document order, and report how the total was
    allocated.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import studio_kernel.domain (and sibling engine modules).

Invariants enforced:
    - Order: milestones are resolved strictly in document order with a
      running sum; the settlement milestone absorbs what precedes it.
    - Full recalculation: every call starts from a zero running sum; there
      is no incremental update.
    - Purity and idempotence: inputs are never mutated; recalculating the
      output again yields the same output.
    - Only ``amount`` changes; label, spec, status and payment date pass
      through untouched.

Failure modes:
    - None for milestone content (see studio_engines.distribution).

Usage:
    from studio_engines.reconciliation import recalculate, reconcile

    milestones = recalculate(template_for(Category.CIVIL), Decimal("100000000"), Category.CIVIL)
    result = reconcile(document)
    result.unallocated   # Decimal, negative when over-allocated
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal

from studio_engines.distribution import PreservedReason, Resolution, resolve_amount
from studio_engines.tracer import traced_engine
from studio_kernel.domain.contract import (
    DEFAULT_POLICY,
    Category,
    ContractDocument,
    Milestone,
    TerminPolicy,
)
from studio_kernel.domain.currency import CurrencyRegistry
from studio_kernel.logging_config import get_logger

logger = get_logger("engines.reconciliation")

_ZERO = Decimal("0")


@dataclass(frozen=True)
class ReconciliationResult:
    """
    Outcome of recalculating one document.

    ``preserved`` lists ``(index, reason)`` for every milestone whose stored
    amount was kept, so typos can be surfaced instead of silently freezing
    an amount.
    """

    document: ContractDocument
    total: Decimal
    allocated_total: Decimal
    preserved: tuple[tuple[int, PreservedReason], ...]
    tolerance: Decimal

    @property
    def milestones(self) -> tuple[Milestone, ...]:
        return self.document.milestones

    @property
    def unallocated(self) -> Decimal:
        """Total minus allocated; negative when the milestones exceed it."""
        return self.total - self.allocated_total

    @property
    def is_balanced(self) -> bool:
        return abs(self.unallocated) <= self.tolerance

    @property
    def unparseable_indices(self) -> tuple[int, ...]:
        return tuple(
            i for i, reason in self.preserved if reason is PreservedReason.UNPARSEABLE
        )


def derive_total_value(
    category: Category,
    entered_total: Decimal,
    area: Decimal | None = None,
    unit_price: Decimal | None = None,
    policy: TerminPolicy = DEFAULT_POLICY,
) -> Decimal:
    """
    Effective contract total.

    Design documents with a positive area derive it as ``area * unit_price``
    (unit price defaulting to the policy's), rounded to a whole unit.
    Otherwise the entered total is authoritative.
    """
    if category is Category.DESIGN and area is not None and area > _ZERO:
        price = unit_price if unit_price is not None else policy.default_unit_price
        quantum = CurrencyRegistry.get_quantum(policy.currency)
        return (area * price).quantize(quantum, rounding=ROUND_HALF_UP)
    return entered_total


def effective_total(document: ContractDocument, policy: TerminPolicy = DEFAULT_POLICY) -> Decimal:
    """Effective total of a document (see ``derive_total_value``)."""
    return derive_total_value(
        document.category,
        document.total_value,
        area=document.area,
        unit_price=document.unit_price,
        policy=policy,
    )


def _resolve_all(
    milestones: Sequence[Milestone],
    total: Decimal,
    category: Category,
    policy: TerminPolicy,
) -> tuple[tuple[Milestone, ...], tuple[Resolution, ...]]:
    running_sum = _ZERO
    rate_before = _ZERO
    updated: list[Milestone] = []
    resolutions: list[Resolution] = []
    # Remainders and percentage slices both depend on the milestones before them.
    for milestone in milestones:
        resolution = resolve_amount(
            milestone, total, category, running_sum, policy, rate_before=rate_before
        )
        running_sum += resolution.amount
        rate_before += resolution.rate
        resolutions.append(resolution)
        if resolution.amount == milestone.amount:
            updated.append(milestone)
        else:
            updated.append(replace(milestone, amount=resolution.amount))
    return tuple(updated), tuple(resolutions)


@traced_engine("termin_recalculate", "1.0", fingerprint_fields=("total", "category"))
def recalculate(
    milestones: Sequence[Milestone],
    total: Decimal,
    category: Category,
    policy: TerminPolicy = DEFAULT_POLICY,
) -> tuple[Milestone, ...]:
    """
    Recompute every milestone amount in document order.

    Args:
        milestones: Ordered milestones of one document.
        total: Effective contract total.
        category: Document category (decides whether "DP" is fixed).
        policy: Down payment amount and currency.

    Returns:
        A new tuple of milestones; only ``amount`` differs from the input.
    """
    updated, _ = _resolve_all(milestones, total, Category.parse(category), policy)
    return updated


@traced_engine("termin_reconcile", "1.0", fingerprint_fields=("document",))
def reconcile(
    document: ContractDocument,
    policy: TerminPolicy = DEFAULT_POLICY,
) -> ReconciliationResult:
    """
    Recalculate a document against its effective total.

    The returned document carries the effective total in ``total_value``
    and the recalculated milestones.
    """
    total = effective_total(document, policy)
    milestones, resolutions = _resolve_all(document.milestones, total, document.category, policy)
    allocated = sum((m.amount for m in milestones), _ZERO)
    preserved = tuple(
        (i, r.preserved_reason) for i, r in enumerate(resolutions) if r.preserved
    )

    result = ReconciliationResult(
        document=replace(document, total_value=total, milestones=milestones),
        total=total,
        allocated_total=allocated,
        preserved=preserved,
        tolerance=CurrencyRegistry.get_rounding_tolerance(document.currency),
    )

    if result.unparseable_indices:
        logger.debug(
            "termin_spec_unparseable",
            extra={
                "document_id": document.document_id,
                "indices": list(result.unparseable_indices),
            },
        )
    return result
