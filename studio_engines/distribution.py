"""
Module: studio_engines.distribution
Responsibility:
    Turn one milestone's parsed spec into a concrete amount, given the
    contract total, the document category and the running sum of the
    milestones before it.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import studio_kernel.domain (and sibling engine modules).

Invariants enforced:
    - Decimal-only arithmetic.  Percentages are rounded half-up to the
      currency's smallest unit on the cumulative share, so a run of
      percentage milestones sums to within one unit of the exact share.
    - A settlement (remainder) milestone is never negative.
    - Never raises for user input: anything that cannot be resolved keeps
      the stored amount, and the Resolution says why.

Resolution rules, in order:
    1. DP token on a design document   -> policy.down_payment_amount
    2. Remainder token                 -> max(0, total - running_sum)
    3. Percentage and total > 0        -> q(total * (before + rate) / 100)
                                          - q(total * before / 100)
    4. Anything else                   -> stored amount kept

``before`` is the sum of the rates of the percentage milestones already
resolved in the document and ``q`` rounds to the currency unit.  A rate so
large that the amount cannot be represented is treated as unparseable.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, DecimalException
from enum import Enum

from studio_kernel.domain.contract import (
    DEFAULT_POLICY,
    Category,
    DownPaymentSpec,
    ManualSpec,
    Milestone,
    PercentageSpec,
    RemainderSpec,
    TerminPolicy,
)
from studio_kernel.domain.currency import CurrencyRegistry

_HUNDRED = Decimal("100")
_ZERO = Decimal("0")


class PreservedReason(str, Enum):
    """Why a milestone kept its stored amount."""

    MANUAL = "manual"  # empty spec, amount typed by hand
    UNPARSEABLE = "unparseable"
    NO_TOTAL = "no_total"  # percentage with total <= 0
    DOWN_PAYMENT_OUTSIDE_DESIGN = "down_payment_outside_design"


@dataclass(frozen=True)
class Resolution:
    """
    Amount computed for one milestone.

    ``rate`` is the percentage this milestone consumed; the caller adds it
    to the cumulative rate passed to the next milestone.
    """

    amount: Decimal
    preserved_reason: PreservedReason | None = None
    rate: Decimal = _ZERO

    @property
    def preserved(self) -> bool:
        return self.preserved_reason is not None


def percentage_of(total: Decimal, rate: Decimal, currency: str = "IDR") -> Decimal:
    """``total * rate / 100`` rounded to the currency's smallest unit."""
    quantum = CurrencyRegistry.get_quantum(currency)
    return (total * rate / _HUNDRED).quantize(quantum, rounding=ROUND_HALF_UP)


def percentage_share(
    total: Decimal,
    rate: Decimal,
    rate_before: Decimal = _ZERO,
    currency: str = "IDR",
) -> Decimal:
    """
    The slice of ``total`` between ``rate_before`` and ``rate_before + rate``.

    Both bounds are rounded, not the slice, so the slices of one document
    add up to the rounded cumulative share.

    Raises:
        decimal.DecimalException: the share exceeds Decimal precision.
    """
    upper = percentage_of(total, rate_before + rate, currency)
    return upper - percentage_of(total, rate_before, currency)


def resolve_amount(
    milestone: Milestone,
    total: Decimal,
    category: Category,
    running_sum: Decimal,
    policy: TerminPolicy = DEFAULT_POLICY,
    rate_before: Decimal = _ZERO,
) -> Resolution:
    """
    Resolve the amount of a single milestone.

    Args:
        milestone: The milestone; its ``parsed_spec`` drives the branch.
        total: Effective contract total.
        category: Category of the owning document.
        running_sum: Sum of the amounts already resolved before it.
        policy: Supplies the down payment amount and currency.
        rate_before: Sum of the percentages already resolved before it.

    Returns:
        Resolution with the new amount, or the stored amount and the
        reason it was kept.
    """
    spec = milestone.parsed_spec

    if isinstance(spec, DownPaymentSpec):
        if category is Category.DESIGN:
            return Resolution(policy.down_payment_amount)
        return Resolution(milestone.amount, PreservedReason.DOWN_PAYMENT_OUTSIDE_DESIGN)

    if isinstance(spec, RemainderSpec):
        return Resolution(max(_ZERO, total - running_sum))

    if isinstance(spec, PercentageSpec):
        if total <= _ZERO:
            return Resolution(milestone.amount, PreservedReason.NO_TOTAL)
        try:
            amount = percentage_share(total, spec.rate, rate_before, policy.currency)
        except DecimalException:
            return Resolution(milestone.amount, PreservedReason.UNPARSEABLE)
        return Resolution(amount, rate=spec.rate)

    if isinstance(spec, ManualSpec):
        return Resolution(milestone.amount, PreservedReason.MANUAL)

    return Resolution(milestone.amount, PreservedReason.UNPARSEABLE)
