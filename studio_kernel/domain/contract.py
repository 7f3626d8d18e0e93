"""
Contract -- Domain types for contract documents and their payment milestones.

Responsibility:
    Defines the immutable data carried by an invoice or quotation: its
    category, its contract total and its ordered milestones ("termin").
    Milestone spec strings are parsed here, once, into a tagged variant so
    the calculation engines never sniff strings.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by studio_engines, studio_config (bridges) and studio_services.

Invariants enforced:
    - Milestone amounts are Decimal, never float.
    - Milestone order is preserved exactly as given (tuples only).
    - Category and status tokens are validated at the record boundary.

Failure modes:
    - UnknownCategoryError for an unrecognised category token.
    - InvalidMilestoneStatusError for a status other than unset/success.
    - InvalidMilestoneRecordError for malformed amount or date fields.
    - parse_spec never raises; malformed specs become UnparseableSpec.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Union

from studio_kernel.exceptions import (
    InvalidMilestoneRecordError,
    InvalidMilestoneStatusError,
    UnknownCategoryError,
)


class Category(str, Enum):
    """Business line of a contract document."""

    DESIGN = "design"
    CIVIL = "civil"
    INTERIOR = "interior"

    @classmethod
    def parse(cls, token: str | Category) -> Category:
        """Parse a category token, accepting the legacy aliases.

        Raises:
            UnknownCategoryError: If the token names no known category.
        """
        if isinstance(token, Category):
            return token
        normalized = str(token or "").strip().lower()
        normalized = _CATEGORY_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise UnknownCategoryError(str(token)) from None


_CATEGORY_ALIASES: dict[str, str] = {
    "sipil": "civil",
    "architecture": "design",
    "arsitektur": "design",
}


class MilestoneStatus(str, Enum):
    """Payment state of a single milestone."""

    UNSET = ""
    SUCCESS = "success"

    @classmethod
    def parse(cls, token: str | MilestoneStatus | None) -> MilestoneStatus:
        """Parse a stored status; legacy records use "Success".

        Raises:
            InvalidMilestoneStatusError: For any other value.
        """
        if isinstance(token, MilestoneStatus):
            return token
        normalized = str(token or "").strip().lower()
        if normalized in ("", "unset"):
            return cls.UNSET
        if normalized == "success":
            return cls.SUCCESS
        raise InvalidMilestoneStatusError(str(token))


# ============================================================================
# Milestone spec variants
# ============================================================================

DOWN_PAYMENT_TOKENS: frozenset[str] = frozenset({"dp"})
REMAINDER_TOKENS: frozenset[str] = frozenset({"pelunasan", "remainder"})

# Leading decimal number; whatever follows it is ignored ("50 persen" is 50).
_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class PercentageSpec:
    """A share of the contract total, in percent (``50`` means 50%)."""

    rate: Decimal


@dataclass(frozen=True)
class DownPaymentSpec:
    """The fixed down payment of a design contract."""


@dataclass(frozen=True)
class RemainderSpec:
    """Settlement milestone: whatever the preceding milestones left over."""


@dataclass(frozen=True)
class ManualSpec:
    """No spec entered; the amount is typed by hand."""


@dataclass(frozen=True)
class UnparseableSpec:
    """A spec that is neither a reserved token nor a number."""

    text: str


MilestoneSpec = Union[
    PercentageSpec, DownPaymentSpec, RemainderSpec, ManualSpec, UnparseableSpec
]


def parse_spec(text: str | None) -> MilestoneSpec:
    """Parse a free-form milestone spec string.

    Normalization: surrounding whitespace is trimmed, one trailing ``%`` is
    stripped, and reserved tokens are compared case-insensitively.  Any
    other spec is read as the number it starts with, so ``"50 persen"``
    and ``"50%%"`` are both 50 percent.

    Never raises: partially typed input becomes ``UnparseableSpec``.
    """
    cleaned = str(text or "").strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1].strip()
    token = cleaned.lower()

    if not token:
        return ManualSpec()
    if token in DOWN_PAYMENT_TOKENS:
        return DownPaymentSpec()
    if token in REMAINDER_TOKENS:
        return RemainderSpec()

    number = _LEADING_NUMBER.match(cleaned)
    if number is None:
        return UnparseableSpec(text=str(text))
    return PercentageSpec(rate=Decimal(number.group()))


# ============================================================================
# Record field decoding
# ============================================================================


def _decode_amount(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, bool):
        raise InvalidMilestoneRecordError("amount", value, "boolean is not an amount")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidMilestoneRecordError("amount", value, "not a number") from None
    if not amount.is_finite():
        raise InvalidMilestoneRecordError("amount", value, "not a finite number")
    return amount


def _decode_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        # Datetime strings from the record store carry a time part.
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise InvalidMilestoneRecordError("paymentDate", value, "not an ISO date") from None


# ============================================================================
# Milestone and document
# ============================================================================


@dataclass(frozen=True)
class Milestone:
    """
    One payment tranche ("termin") within a contract document.

    Contract:
        ``amount`` is derived by the reconciliation engine except where the
        spec cannot be resolved, in which case the stored amount is kept.
        ``parsed_spec`` is computed from ``spec`` on construction.
    """

    label: str
    spec: str = ""
    amount: Decimal = Decimal("0")
    status: MilestoneStatus = MilestoneStatus.UNSET
    payment_date: date | None = None
    parsed_spec: MilestoneSpec = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", _decode_amount(self.amount))
        if not isinstance(self.status, MilestoneStatus):
            object.__setattr__(self, "status", MilestoneStatus.parse(self.status))
        object.__setattr__(self, "parsed_spec", parse_spec(self.spec))

    @property
    def is_paid(self) -> bool:
        return self.status is MilestoneStatus.SUCCESS

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Milestone:
        """Decode a stored milestone record.

        Accepts the legacy ``name``/``percent`` keys when ``label``/``spec``
        are absent.
        """
        label = record.get("label", record.get("name", ""))
        spec = record.get("spec", record.get("percent", ""))
        return cls(
            label=str(label or ""),
            spec=str(spec or ""),
            amount=_decode_amount(record.get("amount")),
            status=MilestoneStatus.parse(record.get("status")),
            payment_date=_decode_date(record.get("paymentDate")),
        )

    def to_record(self) -> dict[str, Any]:
        """Encode for the record store (JSON-safe)."""
        if self.amount == self.amount.to_integral_value():
            amount: int | str = int(self.amount)
        else:
            amount = str(self.amount)
        return {
            "label": self.label,
            "spec": self.spec,
            "amount": amount,
            "status": self.status.value,
            "paymentDate": self.payment_date.isoformat() if self.payment_date else "",
        }


@dataclass(frozen=True)
class ContractDocument:
    """
    An invoice or quotation as seen by the termin engine.

    ``total_value`` is the entered total; for design documents with an area
    the effective total is derived (see ``studio_engines.reconciliation``).
    ``active_milestone_index`` is display emphasis only.
    """

    category: Category
    total_value: Decimal = Decimal("0")
    milestones: tuple[Milestone, ...] = ()
    active_milestone_index: int = 0
    area: Decimal | None = None
    unit_price: Decimal | None = None
    currency: str = "IDR"
    updated_at: datetime | None = None
    document_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", Category.parse(self.category))
        object.__setattr__(self, "milestones", tuple(self.milestones))
        if not isinstance(self.total_value, Decimal):
            object.__setattr__(self, "total_value", Decimal(str(self.total_value)))


@dataclass(frozen=True)
class TerminPolicy:
    """
    Runtime parameters of the termin engine.

    Built from configuration by ``studio_config.bridges``; the defaults
    match the shipped configuration.
    """

    currency: str = "IDR"
    down_payment_amount: Decimal = Decimal("2500000")
    default_unit_price: Decimal = Decimal("200000")
    template_overrides: Mapping[Category, tuple[tuple[str, str], ...]] = field(
        default_factory=dict
    )


DEFAULT_POLICY = TerminPolicy()
