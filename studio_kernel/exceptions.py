"""
Typed exception hierarchy for the studio kernel.

Every error has a typed class (catch by type, not by message), a ``code``
class attribute (machine-readable, API-safe) and carries its context as
attributes rather than only inside the message string.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StudioKernelError (base)
    |
    +-- ContractError
    |   +-- UnknownCategoryError
    |   +-- InvalidMilestoneStatusError
    |   +-- InvalidMilestoneRecordError
    |   +-- MilestoneIndexError
    |   +-- DerivedTotalError
    |   +-- InvalidContractValueError
    |
    +-- DocumentError
    |   +-- DocumentNotFoundError
    |
    +-- CurrencyError
        +-- InvalidCurrencyError
        +-- CurrencyMismatchError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                      | When Raised
-----------|---------------------------|------------------------------------------
Contract   | UNKNOWN_CATEGORY          | Category token is not design/civil/interior
           | INVALID_MILESTONE_STATUS  | Stored status is neither "" nor "success"
           | INVALID_MILESTONE_RECORD  | Milestone record has a malformed field
           | MILESTONE_INDEX           | Edit addressed a milestone that doesn't exist
           | DERIVED_TOTAL             | Total edited on the wrong side of derivation
           | INVALID_CONTRACT_VALUE    | Negative area, unit price or total
-----------|---------------------------|------------------------------------------
Document   | DOCUMENT_NOT_FOUND        | Record id doesn't exist in its collection
-----------|---------------------------|------------------------------------------
Currency   | INVALID_CURRENCY          | Not a supported ISO 4217 code
           | CURRENCY_MISMATCH         | Mixed currencies in one operation

Note that the termin calculation itself never raises for unparseable
milestone specs, non-positive totals or a DP token outside the design
category; those cases preserve the stored amount. Overpayment is reported
as a negative remaining balance, never as an exception.
"""


class StudioKernelError(Exception):
    """
    Base exception for all studio kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STUDIO_KERNEL_ERROR"


# Contract-related exceptions


class ContractError(StudioKernelError):
    """Base exception for contract document errors."""

    code: str = "CONTRACT_ERROR"


class UnknownCategoryError(ContractError):
    """Category token does not name a known business line."""

    code: str = "UNKNOWN_CATEGORY"

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Unknown contract category: {token!r}")


class InvalidMilestoneStatusError(ContractError):
    """Milestone status is not one of the supported states."""

    code: str = "INVALID_MILESTONE_STATUS"

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Invalid milestone status: {status!r}")


class InvalidMilestoneRecordError(ContractError):
    """A stored milestone record could not be decoded."""

    code: str = "INVALID_MILESTONE_RECORD"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid milestone field {field}={value!r}: {reason}")


class MilestoneIndexError(ContractError):
    """An edit addressed a milestone position that does not exist."""

    code: str = "MILESTONE_INDEX"

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(
            f"Milestone index {index} out of range for {count} milestone(s)"
        )


class DerivedTotalError(ContractError):
    """Total value edited in a way its category does not allow."""

    code: str = "DERIVED_TOTAL"

    def __init__(self, category: str, reason: str):
        self.category = category
        self.reason = reason
        super().__init__(f"Cannot edit total for {category} document: {reason}")


class InvalidContractValueError(ContractError):
    """A contract input value is out of range."""

    code: str = "INVALID_CONTRACT_VALUE"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"{field} must be non-negative, got {value}")


# Document-related exceptions


class DocumentError(StudioKernelError):
    """Base exception for record store errors."""

    code: str = "DOCUMENT_ERROR"


class DocumentNotFoundError(DocumentError):
    """Document with given id was not found."""

    code: str = "DOCUMENT_NOT_FOUND"

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} record not found: {record_id}")


# Currency-related exceptions


class CurrencyError(StudioKernelError):
    """Base exception for currency errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not supported."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid currency code: {currency}")


class CurrencyMismatchError(CurrencyError):
    """Operation mixes different currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(f"Currency mismatch: {left} vs {right}")
