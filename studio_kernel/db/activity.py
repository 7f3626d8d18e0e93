"""
ORM-level activity logging for the watched collections.

===============================================================================
HOW IT WORKS
===============================================================================

SQLAlchemy fires mapper events around each row operation of a flush.  We
attach listeners to the invoice, quotation and project models that append one
ActivityLog row per operation, on the same connection and therefore in the
same transaction:

    session.flush()
         |
         +--[after_insert]---> _log_create() --> INSERT activity_logs
         +--[after_update]---> _log_update() --> INSERT activity_logs
         +--[before_delete]--> _log_delete() --> INSERT activity_logs
                                (before, so the record's fields are still known)

The acting user is read from ``session.info["actor_id"]``.  Callers bind it
explicitly (``session_scope(actor_id=...)`` or the document service); there
is no process-wide "current user".

===============================================================================
WATCHED COLLECTIONS
===============================================================================

Collection  | Description format
------------|-------------------------------------
invoices    | "<action> invoice #<invoice_number>"
quotations  | "<action> quotation: <title>"
projects    | "<action> project: <type>"
"""

from uuid import uuid4

from sqlalchemy import event, insert
from sqlalchemy.orm import object_session

from studio_kernel.logging_config import get_logger
from studio_kernel.models.activity_log import ActivityAction, ActivityLog
from studio_kernel.models.contract_document import InvoiceRecord, QuotationRecord
from studio_kernel.models.project import ProjectRecord

logger = get_logger("db.activity")

WATCHED_MODELS = (InvoiceRecord, QuotationRecord, ProjectRecord)


def describe(action: ActivityAction, target) -> str:
    """Human-readable description of an action on a watched record."""
    if isinstance(target, InvoiceRecord):
        return f"{action.value} invoice #{target.invoice_number}"
    if isinstance(target, QuotationRecord):
        return f"{action.value} quotation: {target.title}"
    if isinstance(target, ProjectRecord):
        return f"{action.value} project: {target.type}"
    return f"{action.value.upper()} on {target.__tablename__}"


def _write_activity(connection, target, action: ActivityAction) -> None:
    session = object_session(target)
    actor_id = session.info.get("actor_id") if session is not None else None
    description = describe(action, target)

    connection.execute(
        insert(ActivityLog.__table__).values(
            id=str(uuid4()),
            actor_id=actor_id,
            action=action.value,
            collection=target.__tablename__,
            record_id=str(target.id),
            description=description,
        )
    )
    logger.info(
        "activity_logged",
        extra={
            "action": action.value,
            "collection": target.__tablename__,
            "record_id": str(target.id),
            "actor": actor_id,
        },
    )


def _log_create(mapper, connection, target):
    _write_activity(connection, target, ActivityAction.CREATE)


def _log_update(mapper, connection, target):
    _write_activity(connection, target, ActivityAction.UPDATE)


def _log_delete(mapper, connection, target):
    _write_activity(connection, target, ActivityAction.DELETE)


_LISTENERS = (
    ("after_insert", _log_create),
    ("after_update", _log_update),
    ("before_delete", _log_delete),
)


def register_activity_listeners() -> None:
    """
    Register the activity-log listeners on every watched model.

    Idempotent: listeners already attached are left alone.
    """
    for model in WATCHED_MODELS:
        for event_name, listener_fn in _LISTENERS:
            if not event.contains(model, event_name, listener_fn):
                event.listen(model, event_name, listener_fn)


def unregister_activity_listeners() -> None:
    """Remove the activity-log listeners (tests and bulk imports)."""
    for model in WATCHED_MODELS:
        for event_name, listener_fn in _LISTENERS:
            if event.contains(model, event_name, listener_fn):
                event.remove(model, event_name, listener_fn)
