"""
Config -> Kernel Bridges.

Functions that convert a TerminConfig into kernel-compatible inputs. These
live in studio_config (the producer) because the kernel must NEVER import
studio_config.

Usage:
    from studio_config import get_active_config
    from studio_config.bridges import build_termin_policy

    policy = build_termin_policy(get_active_config())
"""

from __future__ import annotations

from studio_config.schema import TerminConfig
from studio_kernel.domain.contract import Category, TerminPolicy
from studio_kernel.domain.currency import CurrencyRegistry


def build_termin_policy(config: TerminConfig) -> TerminPolicy:
    """Build the engine's TerminPolicy from a configuration set.

    Raises:
        InvalidCurrencyError: If the configured currency is unsupported.
        UnknownCategoryError: If a template names an unknown category.
    """
    overrides = {
        Category.parse(template.category): tuple(
            (line.label, line.spec) for line in template.lines
        )
        for template in config.templates
    }
    return TerminPolicy(
        currency=CurrencyRegistry.validate(config.currency),
        down_payment_amount=config.down_payment_amount,
        default_unit_price=config.default_unit_price,
        template_overrides=overrides,
    )
