"""
Module: studio_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the termin
    calculation engines.  This is the canonical import surface for
    studio_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import studio_kernel.domain (and sibling engine modules).
    MUST NOT import studio_services or studio_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates are passed in explicitly; services own the clock.
    - Decimal-only arithmetic; floats are never used for amounts.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Recalculations are traced via ``@traced_engine`` (see
    ``studio_engines.tracer``), emitting STUDIO_ENGINE_TRACE log records.

Usage:
    from studio_engines import new_document, set_total_value, summarize
"""

from studio_kernel.logging_config import get_logger

logger = get_logger("engines")

from studio_engines.distribution import (
    PreservedReason,
    Resolution,
    percentage_of,
    percentage_share,
    resolve_amount,
)
from studio_engines.editing import (
    change_category,
    mark_paid,
    mark_unpaid,
    new_document,
    reset_to_template,
    set_active_milestone,
    set_area,
    set_milestone_amount,
    set_milestone_label,
    set_milestone_spec,
    set_total_value,
    set_unit_price,
)
from studio_engines.reconciliation import (
    ReconciliationResult,
    derive_total_value,
    effective_total,
    recalculate,
    reconcile,
)
from studio_engines.settlement import (
    PeriodKind,
    PeriodRevenue,
    ReportingPeriod,
    SettlementSummary,
    aggregate_by_month,
    aggregate_by_period,
    effective_payment_date,
    last_settled_date,
    realized_documents,
    summarize,
)
from studio_engines.templates import (
    BUILT_IN_TEMPLATES,
    milestone_label,
    template_for,
)
from studio_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Distribution
    "PreservedReason",
    "Resolution",
    "percentage_of",
    "percentage_share",
    "resolve_amount",
    # Editing
    "change_category",
    "mark_paid",
    "mark_unpaid",
    "new_document",
    "reset_to_template",
    "set_active_milestone",
    "set_area",
    "set_milestone_amount",
    "set_milestone_label",
    "set_milestone_spec",
    "set_total_value",
    "set_unit_price",
    # Reconciliation
    "ReconciliationResult",
    "derive_total_value",
    "effective_total",
    "recalculate",
    "reconcile",
    # Settlement
    "PeriodKind",
    "PeriodRevenue",
    "ReportingPeriod",
    "SettlementSummary",
    "aggregate_by_month",
    "aggregate_by_period",
    "effective_payment_date",
    "last_settled_date",
    "realized_documents",
    "summarize",
    # Templates
    "BUILT_IN_TEMPLATES",
    "milestone_label",
    "template_for",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
]
