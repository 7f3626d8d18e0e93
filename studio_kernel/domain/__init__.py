"""
Pure domain layer.

Immutable, deterministic domain objects with NO dependencies on the ORM,
the database, the clock (except SystemClock) or other I/O.
"""

from studio_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from studio_kernel.domain.contract import (
    DEFAULT_POLICY,
    Category,
    ContractDocument,
    DownPaymentSpec,
    ManualSpec,
    Milestone,
    MilestoneSpec,
    MilestoneStatus,
    PercentageSpec,
    RemainderSpec,
    TerminPolicy,
    UnparseableSpec,
    parse_spec,
)
from studio_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from studio_kernel.domain.values import Currency, Money

__all__ = [
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Values
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Money",
    # Contract
    "Category",
    "ContractDocument",
    "DEFAULT_POLICY",
    "Milestone",
    "MilestoneStatus",
    "TerminPolicy",
    # Spec variants
    "MilestoneSpec",
    "PercentageSpec",
    "DownPaymentSpec",
    "RemainderSpec",
    "ManualSpec",
    "UnparseableSpec",
    "parse_spec",
]
