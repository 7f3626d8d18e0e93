"""
Values -- Currency and Money, the amounts settlement and revenue report in.

Invariants enforced:
    - Amounts are Decimal; ints and strings are converted, floats are
      converted through ``str`` so no binary noise leaks in.
    - A Currency only exists for a supported code.
    - Money of different currencies never combine; CurrencyMismatchError.
    - Nothing rounds implicitly.  ``Money.round`` quantizes on request.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from studio_kernel.domain.currency import CurrencyRegistry
from studio_kernel.exceptions import CurrencyMismatchError


@dataclass(frozen=True, slots=True)
class Currency:
    """A supported ISO 4217 code, uppercased."""

    code: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", CurrencyRegistry.validate(self.code))

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def rounding_tolerance(self) -> Decimal:
        return CurrencyRegistry.get_rounding_tolerance(self.code)

    def __str__(self) -> str:
        return self.code


def _to_decimal(raw: object) -> Decimal:
    if isinstance(raw, Decimal):
        return raw
    try:
        return Decimal(str(raw))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {raw!r}") from exc


def _as_currency(raw: Currency | str) -> Currency:
    if isinstance(raw, Currency):
        return raw
    if isinstance(raw, str):
        return Currency(raw)
    raise TypeError(f"currency must be Currency or str, got {type(raw).__name__}")


def _same_currency(op: Callable[[Decimal, Decimal], object]) -> Callable:
    """Lift a Decimal binary operator to Money, enforcing one currency."""

    def method(self: Money, other: object):
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)
        result = op(self.amount, other.amount)
        if isinstance(result, Decimal):
            return Money(result, self.currency)
        return result

    method.__name__ = f"__{op.__name__}__"
    return method


@dataclass(frozen=True, slots=True)
class Money:
    """
    A Decimal amount in a Currency.

    Money is hashable and may be built with a plain currency code:
    ``Money(Decimal("1500000"), "IDR")`` or ``Money.of("1500000", "IDR")``.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _to_decimal(self.amount))
        object.__setattr__(self, "currency", _as_currency(self.currency))

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        return cls(amount, currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(Decimal(0), currency)

    @property
    def is_zero(self) -> bool:
        return self.amount.is_zero()

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Quantize to the currency's smallest unit."""
        quantum = CurrencyRegistry.get_quantum(self.currency.code)
        return Money(self.amount.quantize(quantum, rounding=rounding), self.currency)

    __add__ = _same_currency(operator.add)
    __sub__ = _same_currency(operator.sub)
    __lt__ = _same_currency(operator.lt)
    __le__ = _same_currency(operator.le)
    __gt__ = _same_currency(operator.gt)
    __ge__ = _same_currency(operator.ge)

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __abs__(self) -> Money:
        return Money(abs(self.amount), self.currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"
