"""
clm_engines.tracer -- Engine invocation tracer emitting CLM_ENGINE_TRACE.

Responsibility:
    ``@traced_engine`` wraps a pure derivation function and, after each
    call, logs which engine ran, a fingerprint of the inputs it was given,
    how many records it saw and how long it took.  Two calls with the same
    contracts and reference date produce the same fingerprint, which makes
    a reported figure traceable to the snapshot it was computed from.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Emits a log record only; never touches the store.

Invariants enforced:
    - Fingerprints are deterministic: records are canonicalized field by
      field in declaration order, enums by value, Decimals normalized,
      mappings by sorted key.  The hash is SHA-256 truncated to 16 hex chars.
    - Positional and keyword spellings of the same call fingerprint alike.
    - One-shot iterators are never consumed by the tracer; they are left
      out of the fingerprint.

Usage:
    @traced_engine("expiry", "1.0", fingerprint_fields=("contracts", "as_of"))
    def analyze_expiry(contracts, as_of=None):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping, Sized
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from clm_kernel.logging_config import get_logger

logger = get_logger("engines.tracer")


def _canonicalize(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return str(value.normalize())
    if isinstance(value, (bool, int, float, str, UUID)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        inner = ",".join(
            f"{f.name}:{_canonicalize(getattr(value, f.name))}"
            for f in dataclasses.fields(value)
        )
        return f"{type(value).__name__}({inner})"
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: dict[str, Any],
) -> str:
    """16-hex-char SHA-256 of the named arguments; absent ones hash as null."""
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def _replayable(value: Any) -> bool:
    # Iterators and generators are not Sized; reading them would empty them.
    if value is None or dataclasses.is_dataclass(value):
        return True
    return isinstance(value, (Sized, Decimal, date, int, float, Enum))


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorator that emits CLM_ENGINE_TRACE for each call of a pure engine.

    Args:
        engine_name: Engine identifier, e.g. ``"expiry"``.
        engine_version: Bumped when the engine's results change meaning.
        fingerprint_fields: Parameter names hashed into ``input_fingerprint``.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            bound = signature.bind(*args, **kwargs)
            arguments = {k: v for k, v in bound.arguments.items() if _replayable(v)}
            contracts = arguments.get("contracts")

            started = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - started) * 1000, 2)

            logger.info(
                "CLM_ENGINE_TRACE",
                extra={
                    "trace_type": "CLM_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": (
                        compute_input_fingerprint(fingerprint_fields, arguments)
                        if fingerprint_fields else ""
                    ),
                    "record_count": len(contracts) if isinstance(contracts, Sized) else None,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
