"""
Structured JSON logging for the studio kernel.

Every log line is one JSON object: timestamp, level, logger, message, the
request-scoped fields from LogContext and any ``extra`` passed by the
caller.  All loggers live under the ``studio_kernel`` namespace so a single
call to ``configure_logging`` wires the whole system.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar, Token
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

_NAMESPACE = "studio_kernel"

# ---------------------------------------------------------------------------
# Request-scoped context
# ---------------------------------------------------------------------------

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"studio_log_{name}", default=None)
    for name in ("correlation_id", "actor_id", "document_id", "trace_id")
}


class LogContext:
    """
    Fields attached to every log line emitted in the current context.

    Backed by contextvars, so values follow the thread or task that set
    them.  Supported fields: correlation_id, actor_id, document_id,
    trace_id.
    """

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set context fields. ``None`` values are ignored."""
        for name, value in fields.items():
            if value is not None:
                _CONTEXT_VARS[name].set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        """Return the fields that currently have a value."""
        return {
            name: var.get()
            for name, var in _CONTEXT_VARS.items()
            if var.get() is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _CONTEXT_VARS.values():
            var.set(None)

    @staticmethod
    def bind(**fields: str | None) -> "_BoundContext":
        """Set fields for the duration of a ``with`` block."""
        return _BoundContext(fields)


class _BoundContext:

    def __init__(self, fields: dict[str, str | None]):
        self._fields = fields
        self._tokens: list[tuple[ContextVar[str | None], Token]] = []

    def __enter__(self) -> type[LogContext]:
        for name, value in self._fields.items():
            var = _CONTEXT_VARS.get(name)
            if var is not None and value is not None:
                self._tokens.append((var, var.set(value)))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


# ---------------------------------------------------------------------------
# JSON formatting
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else came from ``extra``.
_RESERVED = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (UUID, Decimal)):
        return str(obj)
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """Render a LogRecord as a single line of JSON."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and key not in line:
                line[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            line.update(self._exception_fields(record))

        return json.dumps(line, default=_json_default)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # StudioKernelError subclasses keep their context as attributes.
        for name, value in vars(exc).items():
            if not name.startswith("_") and name not in ("args", "code"):
                fields[f"exc_{name}"] = value
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under the studio_kernel namespace."""
    return logging.getLogger(f"{_NAMESPACE}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the studio_kernel logger.

    Only the first call has an effect; later calls return immediately.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())

    root = logging.getLogger(_NAMESPACE)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(target)


def reset_logging() -> None:
    """Undo ``configure_logging``. Tests only."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_NAMESPACE)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.propagate = True
