"""
Termin configuration schema.

Defines the human-authored, reviewable configuration of the termin engine.
YAML files are parsed into these types by the loader; the bridge converts
them into the kernel's ``TerminPolicy``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class TemplateLineDef:
    """One milestone of a category template."""

    label: str
    spec: str


@dataclass(frozen=True)
class TemplateDef:
    """Milestone template overriding the built-in one for a category."""

    category: str
    lines: tuple[TemplateLineDef, ...]


@dataclass(frozen=True)
class TerminConfig:
    """Complete termin configuration set."""

    config_id: str
    version: int
    currency: str
    down_payment_amount: Decimal
    default_unit_price: Decimal
    templates: tuple[TemplateDef, ...] = ()
    checksum: str = ""
