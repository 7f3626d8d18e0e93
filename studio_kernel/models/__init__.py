"""ORM models for the studio record store."""

from studio_kernel.models.activity_log import ActivityAction, ActivityLog
from studio_kernel.models.contract_document import (
    RECORD_CLASSES,
    DocumentKind,
    InvoiceRecord,
    QuotationRecord,
)
from studio_kernel.models.project import ProjectRecord

__all__ = [
    "ActivityAction",
    "ActivityLog",
    "DocumentKind",
    "InvoiceRecord",
    "ProjectRecord",
    "QuotationRecord",
    "RECORD_CLASSES",
]
