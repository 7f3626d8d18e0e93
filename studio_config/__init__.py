"""
studio_config -- single public entrypoint for termin configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    directly.  Returns a frozen ``TerminConfig``; ``bridges`` converts it
    into the kernel's ``TerminPolicy``.

Architecture position:
    Configuration -- YAML-driven.  Sits above ``studio_kernel`` and below
    ``studio_services``.  The kernel MUST NEVER import from
    ``studio_config``.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``KeyError`` / ``ValueError`` -- missing or malformed settings.
    - ``yaml.YAMLError`` -- the file is not valid YAML.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``STUDIO_CONFIG_TRACE`` log entry with the config id, version and
    checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from studio_config.loader import load_termin_config
from studio_config.schema import TemplateDef, TemplateLineDef, TerminConfig

_logger = logging.getLogger("studio_kernel.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
DEFAULT_CONFIG_PATH = _DEFAULT_CONFIG_DIR / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> TerminConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a YAML configuration file.
            Defaults to studio_config/sets/default.yaml.

    Returns:
        The parsed, frozen TerminConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        KeyError: If a required key is missing.
        ValueError: If a value is malformed.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = load_termin_config(path)

    _logger.info(
        "STUDIO_CONFIG_TRACE",
        extra={
            "trace_type": "STUDIO_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "currency": config.currency,
            "template_count": len(config.templates),
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "TemplateDef",
    "TemplateLineDef",
    "TerminConfig",
    "get_active_config",
]
