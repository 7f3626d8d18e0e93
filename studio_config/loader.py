"""
Configuration Loader (``studio_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into typed
``studio_config.schema`` dataclass instances.  The single public entry
point for runtime config is ``studio_config.get_active_config()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  It has no dependency on
kernel, engines or services.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* Parsing yields frozen ``schema.py`` dataclasses only.
* The checksum is SHA-256 over key-sorted JSON, so two files with the
  same content always report the same config identity.

Failure modes
-------------
* No such file: ``FileNotFoundError``.
* Unparseable YAML: ``yaml.YAMLError``.
* A required key absent: ``KeyError`` naming the key.
* An amount that is not a finite non-negative number: ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from studio_config.schema import TemplateDef, TemplateLineDef, TerminConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Read ``path`` as YAML.  An empty file reads as an empty dict."""
    with open(path, encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def parse_amount(value: Any, field_name: str) -> Decimal:
    """
    Parse a non-negative whole-or-decimal amount from YAML.

    Floats are converted through ``str`` so ``2500000.0`` stays exact.

    Raises:
        ValueError: if ``value`` is not a finite, non-negative number.
    """
    if isinstance(value, bool):
        raise ValueError(f"{field_name}: expected a number, got {value!r}")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{field_name}: expected a number, got {value!r}") from None
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"{field_name}: must be a non-negative number, got {value!r}")
    return amount


def parse_template_line(data: Any, position: int) -> TemplateLineDef:
    """
    Parse one template line.

    Accepts a mapping with ``spec`` (and optional ``label``) or a bare
    spec string; missing labels default to ``Termin <n>``.
    """
    if isinstance(data, str):
        return TemplateLineDef(label=f"Termin {position + 1}", spec=data)
    if not isinstance(data, dict):
        raise ValueError(f"template line {position}: expected a mapping or string")
    return TemplateLineDef(
        label=str(data.get("label") or f"Termin {position + 1}"),
        spec=str(data["spec"]),
    )


def parse_template(category: str, data: Any) -> TemplateDef:
    """Parse the template of one category from a list of lines."""
    if not isinstance(data, list) or not data:
        raise ValueError(f"template '{category}': expected a non-empty list of lines")
    return TemplateDef(
        category=str(category).strip().lower(),
        lines=tuple(parse_template_line(line, i) for i, line in enumerate(data)),
    )


def parse_termin_config(data: dict[str, Any]) -> TerminConfig:
    """
    Parse a ``TerminConfig`` from a dict.

    Required keys: ``config_id``, ``version``, ``currency``,
    ``down_payment_amount``, ``default_unit_price``.  ``templates`` is
    optional and maps category tokens to lists of lines.

    Raises:
        KeyError: if a required key is missing.
        ValueError: if a value is malformed.
    """
    templates = data.get("templates") or {}
    if not isinstance(templates, dict):
        raise ValueError("templates: expected a mapping of category to lines")

    return TerminConfig(
        config_id=str(data["config_id"]),
        version=int(data["version"]),
        currency=str(data["currency"]).strip().upper(),
        down_payment_amount=parse_amount(data["down_payment_amount"], "down_payment_amount"),
        default_unit_price=parse_amount(data["default_unit_price"], "default_unit_price"),
        templates=tuple(
            parse_template(category, lines) for category, lines in sorted(templates.items())
        ),
        checksum=compute_checksum(data),
    )


def load_termin_config(path: Path) -> TerminConfig:
    """Load and parse a configuration file."""
    return parse_termin_config(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """Hex SHA-256 of ``data`` rendered as key-sorted JSON."""
    payload = json.dumps(data, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()
