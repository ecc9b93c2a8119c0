"""
CSV export of contracts and the blank import template.

Files are UTF-8 with a BOM so spreadsheet programs detect the encoding,
use the store's column names as the header, and quote every value.
Amounts are written as plain decimal literals and dates as ISO strings,
both of which the importer reads back unchanged.
"""

from __future__ import annotations

import csv
import io
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from clm_kernel.domain.contract import ContractRecord, UserRole
from clm_kernel.domain.mapping import CONTRACT_COLUMNS, contract_to_row
from clm_kernel.domain.session import SessionContext, require_role
from clm_kernel.logging_config import get_logger

logger = get_logger("ingestion.export_service")

BOM = "\ufeff"
EXPORT_COLUMNS: tuple[str, ...] = tuple(CONTRACT_COLUMNS.values())


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _writer(buffer: io.StringIO) -> csv.writer:
    return csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")


def render_contracts_csv(contracts: Iterable[ContractRecord]) -> str:
    """Render contracts as CSV text (BOM included)."""
    buffer = io.StringIO()
    writer = _writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for contract in contracts:
        row = contract_to_row(contract)
        writer.writerow([_cell(row.get(column)) for column in EXPORT_COLUMNS])
    return BOM + buffer.getvalue()


def export_contracts_csv(
    contracts: Iterable[ContractRecord],
    path: Path,
    ctx: SessionContext | None = None,
) -> int:
    """
    Write contracts to ``path``. Returns the number of contracts written.

    Raises:
        AccessDeniedError: ``ctx`` is not a manager.
    """
    if ctx is not None:
        require_role(ctx, (UserRole.MANAGER,), "export contracts")
    contracts = list(contracts)
    path = Path(path)
    path.write_text(render_contracts_csv(contracts), encoding="utf-8", newline="")
    logger.info("contracts_exported", extra={"path": str(path), "count": len(contracts)})
    return len(contracts)


def write_template(path: Path) -> None:
    """Write a header-only import template to ``path``."""
    buffer = io.StringIO()
    _writer(buffer).writerow(EXPORT_COLUMNS)
    path = Path(path)
    path.write_text(BOM + buffer.getvalue(), encoding="utf-8", newline="")
    logger.info("import_template_written", extra={"path": str(path)})
