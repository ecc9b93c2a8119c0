"""
Configuration Loader (``clm_config.loader``).

Responsibility
--------------
Loads YAML settings files and parses them into the typed
``clm_config.schema`` dataclasses.  The runtime entry point is
``clm_config.get_active_config()``; this module is its tooling and is
also used directly by tests.

Architecture position
---------------------
**Config layer** -- sits above ``clm_engines`` (whose threshold types it
builds) and below ``clm_services`` / ``scripts``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Keys missing from an override file fall back to the packaged defaults;
  unknown keys and wrongly-typed values raise ``ValueError``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  merged settings for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section/key, wrong type, invalid threshold ordering
  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from clm_config.schema import (
    DashboardWindows,
    DatabaseSettings,
    EngineSettings,
    RollupSettings,
)
from clm_engines.expiry import ExpiryThresholds
from clm_engines.health import HealthThresholds

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

_SECTIONS: dict[str, type] = {
    "expiry": ExpiryThresholds,
    "windows": DashboardWindows,
    "health": HealthThresholds,
    "rollup": RollupSettings,
    "database": DatabaseSettings,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def merge_settings(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Section-wise merge: override keys replace base keys, others survive."""
    merged = {k: dict(v or {}) for k, v in base.items()}
    for section, values in override.items():
        if section not in _SECTIONS:
            raise ValueError(f"Unknown settings section: {section}")
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Settings section {section} must be a mapping")
        merged.setdefault(section, {}).update(values)
    return merged


def _coerce(section: str, key: str, expected: Any, value: Any) -> Any:
    where = f"{section}.{key}"
    if expected in (int, "int"):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{where} must be an integer, got {value!r}")
        return value
    if expected in (bool, "bool"):
        if not isinstance(value, bool):
            raise ValueError(f"{where} must be a boolean, got {value!r}")
        return value
    if expected in (str, "str"):
        if not isinstance(value, str):
            raise ValueError(f"{where} must be a string, got {value!r}")
        return value
    if expected in (Decimal, "Decimal"):
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError(f"{where} must be a number, got {value!r}")
        try:
            return Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"{where} must be a number, got {value!r}") from exc
    return value


def parse_section(section: str, data: dict[str, Any]) -> Any:
    """Parse one settings section into its dataclass."""
    cls = _SECTIONS[section]
    known = {f.name: f.type for f in fields(cls)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ValueError(f"Unknown keys in {section}: {', '.join(unknown)}")
    kwargs = {k: _coerce(section, k, known[k], v) for k, v in data.items()}
    return cls(**kwargs)


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a settings mapping."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def load_settings(path: Path | None = None) -> EngineSettings:
    """
    Load the packaged defaults, overlaid with ``path`` when given.

    Args:
        path: Optional override file.

    Returns:
        A fully-populated ``EngineSettings``.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    source = str(DEFAULTS_PATH)
    if path is not None:
        data = merge_settings(data, load_yaml_file(Path(path)))
        source = str(path)

    sections = {name: parse_section(name, data.get(name) or {}) for name in _SECTIONS}
    return EngineSettings(
        **sections,
        source=source,
        checksum=compute_checksum(data),
    )
