"""
Currency -- the currencies a contract document may be issued in.

Precision drives rounding everywhere: percentage amounts are quantized to
the currency's smallest unit, and "balanced" means within one such unit.
Rupiah is billed in whole units; sen never appear on studio documents.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from studio_kernel.exceptions import InvalidCurrencyError


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    decimal_places: int
    name: str

    @property
    def quantum(self) -> Decimal:
        """Smallest unit, usable with ``Decimal.quantize``."""
        return Decimal(1).scaleb(-self.decimal_places)

    @property
    def rounding_tolerance(self) -> Decimal:
        return self.quantum


class CurrencyRegistry:
    """
    Lookup table of supported ISO 4217 codes.

    Lookups normalize case and whitespace.  Unknown codes fall back to
    whole-unit precision; ``validate`` is the strict entry point.
    """

    _BY_CODE: ClassVar[dict[str, CurrencyInfo]] = {
        info.code: info
        for info in (
            CurrencyInfo("IDR", 0, "Indonesian Rupiah"),
            CurrencyInfo("USD", 2, "US Dollar"),
            CurrencyInfo("EUR", 2, "Euro"),
            CurrencyInfo("SGD", 2, "Singapore Dollar"),
            CurrencyInfo("JPY", 0, "Japanese Yen"),
        )
    }

    _FALLBACK: ClassVar[CurrencyInfo] = CurrencyInfo("", 0, "unknown")

    @staticmethod
    def _normalize(code: object) -> str:
        return code.strip().upper() if isinstance(code, str) else ""

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        return cls._BY_CODE.get(cls._normalize(code))

    @classmethod
    def _info_or_fallback(cls, code: str) -> CurrencyInfo:
        return cls.get_info(code) or cls._FALLBACK

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return cls.get_info(code) is not None

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        return cls._info_or_fallback(code).decimal_places

    @classmethod
    def get_quantum(cls, code: str) -> Decimal:
        return cls._info_or_fallback(code).quantum

    @classmethod
    def get_rounding_tolerance(cls, code: str) -> Decimal:
        return cls._info_or_fallback(code).rounding_tolerance

    @classmethod
    def validate(cls, code: str) -> str:
        """
        Return the normalized code.

        Raises:
            InvalidCurrencyError: ``code`` is empty, not a string or unsupported.
        """
        normalized = cls._normalize(code)
        if normalized not in cls._BY_CODE:
            raise InvalidCurrencyError(code if normalized else repr(code))
        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._BY_CODE)
