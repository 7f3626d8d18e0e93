"""
studio_services -- stateful orchestration over the termin engines.

Services own the session, the clock and the acting user; the engines
below them stay pure.
"""

from studio_services.documents import (
    ContractDocumentService,
    apply_document,
    record_to_document,
)

__all__ = [
    "ContractDocumentService",
    "apply_document",
    "record_to_document",
]
