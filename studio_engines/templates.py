"""
Module: studio_engines.templates
Responsibility:
    Supply the initial ordered milestones ("termin") of a new contract
    document for its category.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import studio_kernel.domain (and sibling engine modules).

Invariants enforced:
    - Purity: a fresh tuple is built on every call; templates are never
      shared or mutated.
    - Every template milestone starts at amount 0, unset status, no date.

Failure modes:
    - None raised.  An unknown category token yields a single empty
      milestone and a ``termin_template_fallback`` warning.

Usage:
    from studio_engines.templates import template_for
    from studio_kernel.domain.contract import Category

    milestones = template_for(Category.DESIGN)
    # Termin 1 "DP", Termin 2 "50%", Termin 3 "30%", Termin 4 "Pelunasan"
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from studio_kernel.domain.contract import Category, Milestone
from studio_kernel.exceptions import UnknownCategoryError
from studio_kernel.logging_config import get_logger

logger = get_logger("engines.templates")


BUILT_IN_TEMPLATES: dict[Category, tuple[str, ...]] = {
    Category.DESIGN: ("DP", "50%", "30%", "Pelunasan"),
    Category.CIVIL: ("20%", "25%", "25%", "20%", "10%"),
    Category.INTERIOR: ("40%", "30%", "30%"),
}


def milestone_label(position: int) -> str:
    """Display label of the milestone at a zero-based position."""
    return f"Termin {position + 1}"


def _build(lines: Sequence[tuple[str, str]]) -> tuple[Milestone, ...]:
    return tuple(Milestone(label=label, spec=spec) for label, spec in lines)


def template_for(
    category: Category | str,
    overrides: Mapping[Category, Sequence[tuple[str, str]]] | None = None,
) -> tuple[Milestone, ...]:
    """
    Return a fresh milestone skeleton for ``category``.

    Args:
        category: A Category or a raw category token.
        overrides: Per-category ``(label, spec)`` lines replacing the
            built-in template (from ``TerminPolicy.template_overrides``).

    Returns:
        Milestones with zero amounts, unset status and no payment date.
    """
    try:
        resolved = Category.parse(category)
    except UnknownCategoryError:
        logger.warning("termin_template_fallback", extra={"category": str(category)})
        return (Milestone(label=milestone_label(0), spec=""),)

    if overrides and resolved in overrides:
        return _build(overrides[resolved])

    specs = BUILT_IN_TEMPLATES[resolved]
    return _build([(milestone_label(i), spec) for i, spec in enumerate(specs)])
