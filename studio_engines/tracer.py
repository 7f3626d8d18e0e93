"""
studio_engines.tracer -- STUDIO_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` wraps a pure calculation and logs one structured
    record per call: which engine ran, at what version, a short hash of
    the inputs that determine its output, and how long it took.  Two calls
    with equal fingerprints and equal versions must produce equal results,
    which makes the trace usable for replay checks.

Architecture position:
    Engines -- support code for the pure calculation layer.  The wrapper
    reads arguments and writes a log record; it performs no other I/O.

Invariants enforced:
    - Fingerprints are stable across runs: mappings are key-sorted,
      enums reduce to their value, dataclasses to their fields.
    - Positional and keyword arguments fingerprint the same way.
    - Arguments are never mutated.
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

_logger = logging.getLogger("studio_kernel.engines.tracer")

_FINGERPRINT_LENGTH = 16


def _canonical(value: Any) -> str:
    match value:
        case None:
            return "null"
        case Enum():
            return str(value.value)
        case str():
            return value
        case Mapping():
            pairs = sorted((str(k), _canonical(v)) for k, v in value.items())
            return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"
        case list() | tuple():
            return "[" + ",".join(_canonical(item) for item in value) + "]"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _canonical(
            {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        )
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """
    Hash the named arguments into a 16-character hex digest.

    A field absent from ``arguments`` hashes as null.
    """
    payload = "|".join(
        f"{name}={_canonical(arguments.get(name))}" for name in fingerprint_fields
    )
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return digest[:_FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorate a pure engine function with STUDIO_ENGINE_TRACE logging.

    Args:
        engine_name: Identifier recorded in the trace, e.g. "termin_recalculate".
        engine_version: Version of the calculation rules.
        fingerprint_fields: Parameter names hashed into input_fingerprint.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        def _fingerprint(args: tuple, kwargs: dict) -> str:
            if not fingerprint_fields:
                return ""
            try:
                bound = signature.bind_partial(*args, **kwargs)
            except TypeError:
                # Let the call itself raise the argument error.
                return ""
            return compute_input_fingerprint(fingerprint_fields, bound.arguments)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = _fingerprint(args, kwargs)
            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed = time.perf_counter() - started

            _logger.info(
                "STUDIO_ENGINE_TRACE",
                extra={
                    "trace_type": "STUDIO_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round(elapsed * 1000, 2),
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
