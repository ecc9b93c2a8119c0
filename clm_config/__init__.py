"""
clm_config -- single public entrypoint for runtime settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_config()``.  No other component reads configuration
    files or environment variables directly.

Architecture position:
    Configuration -- sits above ``clm_engines`` and below
    ``clm_services`` / ``scripts``.  The kernel and the engines MUST NEVER
    import from ``clm_config``; services pass the relevant settings into
    engine calls.

Environment:
    - ``CLM_CONFIG_PATH``: YAML file overlaid on the packaged defaults.
    - ``DATABASE_URL``: overrides ``database.url``.

Failure modes:
    - ``FileNotFoundError`` -- CLM_CONFIG_PATH names a missing file.
    - ``ValueError`` -- unknown keys, wrong types, invalid thresholds.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``CLM_CONFIG_TRACE`` log entry with the settings source and checksum.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from clm_config.loader import load_settings
from clm_config.schema import (
    DashboardWindows,
    DatabaseSettings,
    EngineSettings,
    RollupSettings,
)

_logger = logging.getLogger("clm_kernel.config")

CONFIG_PATH_ENV = "CLM_CONFIG_PATH"
DATABASE_URL_ENV = "DATABASE_URL"


def get_active_config(config_path: Path | str | None = None) -> EngineSettings:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override file.  Defaults to ``$CLM_CONFIG_PATH``, or
            the packaged defaults alone when that is unset.

    Returns:
        EngineSettings -- frozen, fully validated.

    Raises:
        FileNotFoundError: If the override file does not exist.
        ValueError: If the settings fail validation.
    """
    path = config_path or os.environ.get(CONFIG_PATH_ENV) or None
    settings = load_settings(Path(path) if path else None)

    database_url = os.environ.get(DATABASE_URL_ENV)
    if database_url:
        settings = replace(settings, database=replace(settings.database, url=database_url))

    _logger.info(
        "CLM_CONFIG_TRACE",
        extra={
            "trace_type": "CLM_CONFIG_TRACE",
            "source": settings.source,
            "checksum": settings.checksum,
            "database_url_override": bool(database_url),
        },
    )
    return settings


__all__ = [
    "DashboardWindows",
    "DatabaseSettings",
    "EngineSettings",
    "RollupSettings",
    "get_active_config",
    "load_settings",
]
