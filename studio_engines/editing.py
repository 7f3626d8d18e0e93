"""
Module: studio_engines.editing
Responsibility:
    The edits a user makes to a contract document, each returning a new,
    fully recalculated document.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import studio_kernel.domain (and sibling engine modules).

Invariants enforced:
    - Every edit that can change an amount (total, area, unit price, spec,
      manual amount, category, template reset) reruns the full
      reconciliation from scratch.
    - Templates are applied only at creation, on category change and on an
      explicit reset -- never as a side effect of other edits.
    - Status edits never touch amounts.

Failure modes:
    - MilestoneIndexError for an index outside the milestone list.
    - DerivedTotalError when the total is edited on the wrong side of the
      design-area derivation.
    - InvalidContractValueError for negative totals, areas or unit prices.
    - UnknownCategoryError from ``new_document``/``change_category``.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

from studio_engines.reconciliation import reconcile
from studio_engines.templates import template_for
from studio_kernel.domain.contract import (
    DEFAULT_POLICY,
    Category,
    ContractDocument,
    Milestone,
    MilestoneStatus,
    TerminPolicy,
)
from studio_kernel.exceptions import (
    DerivedTotalError,
    InvalidContractValueError,
    MilestoneIndexError,
)

_ZERO = Decimal("0")


def _recalculated(document: ContractDocument, policy: TerminPolicy) -> ContractDocument:
    return reconcile(document, policy=policy).document


def _check_index(document: ContractDocument, index: int) -> None:
    if not 0 <= index < len(document.milestones):
        raise MilestoneIndexError(index, len(document.milestones))


def _check_non_negative(field: str, value: Decimal | None) -> None:
    if value is not None and value < _ZERO:
        raise InvalidContractValueError(field, value)


def _with_milestone(document: ContractDocument, index: int, milestone: Milestone) -> ContractDocument:
    milestones = list(document.milestones)
    milestones[index] = milestone
    return replace(document, milestones=tuple(milestones))


def new_document(
    category: Category | str,
    *,
    total_value: Decimal = _ZERO,
    area: Decimal | None = None,
    unit_price: Decimal | None = None,
    currency: str | None = None,
    policy: TerminPolicy = DEFAULT_POLICY,
) -> ContractDocument:
    """Create a document from its category template and recalculate it."""
    resolved = Category.parse(category)
    _check_non_negative("total_value", total_value)
    _check_non_negative("area", area)
    _check_non_negative("unit_price", unit_price)
    if resolved is Category.DESIGN and unit_price is None:
        unit_price = policy.default_unit_price

    document = ContractDocument(
        category=resolved,
        total_value=total_value,
        milestones=template_for(resolved, policy.template_overrides),
        area=area,
        unit_price=unit_price,
        currency=currency or policy.currency,
    )
    return _recalculated(document, policy)


def set_total_value(
    document: ContractDocument, value: Decimal, policy: TerminPolicy = DEFAULT_POLICY
) -> ContractDocument:
    """Enter the contract total directly."""
    _check_non_negative("total_value", value)
    if document.category is Category.DESIGN and document.area and document.area > _ZERO:
        raise DerivedTotalError(
            document.category.value, "total is derived from area and unit price"
        )
    return _recalculated(replace(document, total_value=value), policy)


def set_area(
    document: ContractDocument, area: Decimal | None, policy: TerminPolicy = DEFAULT_POLICY
) -> ContractDocument:
    """Change the project area of a design document."""
    if document.category is not Category.DESIGN:
        raise DerivedTotalError(document.category.value, "only design totals derive from area")
    _check_non_negative("area", area)
    return _recalculated(replace(document, area=area), policy)


def set_unit_price(
    document: ContractDocument, unit_price: Decimal, policy: TerminPolicy = DEFAULT_POLICY
) -> ContractDocument:
    """Change the price per square metre of a design document."""
    if document.category is not Category.DESIGN:
        raise DerivedTotalError(document.category.value, "only design totals use a unit price")
    _check_non_negative("unit_price", unit_price)
    return _recalculated(replace(document, unit_price=unit_price), policy)


def set_milestone_spec(
    document: ContractDocument, index: int, spec: str, policy: TerminPolicy = DEFAULT_POLICY
) -> ContractDocument:
    """Change one milestone's spec string and recalculate all milestones."""
    _check_index(document, index)
    milestone = replace(document.milestones[index], spec=spec)
    return _recalculated(_with_milestone(document, index, milestone), policy)


def set_milestone_amount(
    document: ContractDocument, index: int, amount: Decimal, policy: TerminPolicy = DEFAULT_POLICY
) -> ContractDocument:
    """
    Type an amount by hand.

    The amount sticks only where the spec cannot be resolved (empty or
    unparseable spec, or no total yet); otherwise recalculation overwrites it.
    """
    _check_index(document, index)
    milestone = replace(document.milestones[index], amount=amount)
    return _recalculated(_with_milestone(document, index, milestone), policy)


def set_milestone_label(document: ContractDocument, index: int, label: str) -> ContractDocument:
    _check_index(document, index)
    return _with_milestone(document, index, replace(document.milestones[index], label=label))


def change_category(
    document: ContractDocument, category: Category | str, policy: TerminPolicy = DEFAULT_POLICY
) -> ContractDocument:
    """Switch business line; milestones reset to the new category's template."""
    resolved = Category.parse(category)
    unit_price = document.unit_price
    if resolved is Category.DESIGN and unit_price is None:
        unit_price = policy.default_unit_price
    changed = replace(
        document,
        category=resolved,
        unit_price=unit_price,
        milestones=template_for(resolved, policy.template_overrides),
        active_milestone_index=0,
    )
    return _recalculated(changed, policy)


def reset_to_template(
    document: ContractDocument, policy: TerminPolicy = DEFAULT_POLICY
) -> ContractDocument:
    """Discard the current milestones in favour of the category template."""
    reset = replace(
        document,
        milestones=template_for(document.category, policy.template_overrides),
        active_milestone_index=0,
    )
    return _recalculated(reset, policy)


def mark_paid(document: ContractDocument, index: int, payment_date: date) -> ContractDocument:
    """Mark one milestone as paid on ``payment_date``."""
    _check_index(document, index)
    milestone = replace(
        document.milestones[index],
        status=MilestoneStatus.SUCCESS,
        payment_date=payment_date,
    )
    return _with_milestone(document, index, milestone)


def mark_unpaid(document: ContractDocument, index: int) -> ContractDocument:
    """Revert a paid milestone. The payment date is kept."""
    _check_index(document, index)
    milestone = replace(document.milestones[index], status=MilestoneStatus.UNSET)
    return _with_milestone(document, index, milestone)


def set_active_milestone(document: ContractDocument, index: int) -> ContractDocument:
    """Choose the milestone shown as "in progress"."""
    _check_index(document, index)
    return replace(document, active_milestone_index=index)
