"""
Values -- coercion of raw store values into engine-safe domain values.

Responsibility:
    Converts loosely-typed amounts, dates and text coming from the store,
    CSV/XLSX sources or user input into ``Decimal``, ``date`` and stripped
    ``str`` values. Provides the guarded percentage helper every engine uses.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Amounts are always finite ``Decimal`` values. Absent, blank,
      unparseable, NaN and infinite inputs coerce to ``ZERO``; floats never
      reach engine arithmetic.
    - ``percentage`` returns ``ZERO`` whenever the denominator is zero, so
      no ratio can become NaN or Infinity.
    - Unparseable dates become ``None``, never an exception.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
HUNDRED = Decimal("100")

_NON_NUMERIC = re.compile(r"[^\d.,\-]")
_DAY_FIRST = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})$")


def _normalize_number_text(text: str) -> str:
    """
    Reduce a formatted number to a plain decimal literal.

    Handles currency symbols and both separator conventions: when ``.`` and
    ``,`` both appear the rightmost one is the decimal separator
    (``"R$ 1.234,56"`` -> ``"1234.56"``, ``"1,234.56"`` -> ``"1234.56"``); a
    lone ``,`` is a decimal separator; repeated lone ``.`` are thousands.
    """
    cleaned = _NON_NUMERIC.sub("", text)
    if "," in cleaned and "." in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        if cleaned.count(",") > 1:
            cleaned = cleaned.replace(",", "")
        else:
            cleaned = cleaned.replace(",", ".")
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")
    return cleaned


def to_amount(value: Any) -> Decimal:
    """
    Coerce any raw value to a finite Decimal amount, defaulting to zero.

    Postconditions:
        Returns a finite ``Decimal``. Never raises.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        return Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    else:
        text = _normalize_number_text(str(value).strip())
        if not text or text in {"-", ".", "-."}:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            return ZERO
    if not result.is_finite():
        return ZERO
    return result


def to_date(value: Any) -> date | None:
    """
    Parse a calendar date from a store/CSV value.

    Accepts ``date``/``datetime`` objects, ISO strings (a time part or
    timezone suffix is ignored), and day-first ``DD/MM/YYYY`` or
    ``DD-MM-YYYY`` strings. Anything else yields ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    match = _DAY_FIRST.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None
    return None


def to_text(value: Any) -> str | None:
    """Strip a raw value to text; blank and ``None`` become ``None``."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def percentage(numerator: Decimal, denominator: Decimal) -> Decimal:
    """``numerator / denominator * 100``, or ``ZERO`` when the denominator is zero."""
    if denominator == ZERO:
        return ZERO
    return numerator / denominator * HUNDRED
