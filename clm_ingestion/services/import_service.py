"""
Contract import service: read a CSV/XLSX file, coerce each row, bulk insert.

Flow: pick adapter by file suffix -> read rows -> check the header carries
the required columns -> coerce every row through the kernel mapping
boundary -> reject rows missing a required value or carrying an unknown
status -> ``ContractService.bulk_create`` the rest in one flush.

Coercion is best-effort: amounts accept pt-BR and en-US formatting
("R$ 1.234,56"), dates accept ISO and DD/MM/YYYY, unparseable values
become 0 / None rather than failing the row.

Uses structured logging (LogContext, get_logger("ingestion.*")).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping
from uuid import uuid4

from sqlalchemy.orm import Session

from clm_kernel.domain.contract import ContractRecord, UserRole
from clm_kernel.domain.mapping import CONTRACT_COLUMNS, contract_from_row, parse_status
from clm_kernel.domain.session import SessionContext, require_role
from clm_kernel.domain.values import to_text
from clm_kernel.exceptions import (
    MissingColumnsError,
    NoValidRowsError,
    UnsupportedSourceError,
)
from clm_kernel.logging_config import LogContext, get_logger
from clm_kernel.services.contract_service import REQUIRED_FIELDS, ContractService

from clm_ingestion.adapters.base import SourceAdapter
from clm_ingestion.adapters.csv_adapter import CsvSourceAdapter
from clm_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

logger = get_logger("ingestion.import_service")

REQUIRED_COLUMNS: tuple[str, ...] = tuple(CONTRACT_COLUMNS[f] for f in REQUIRED_FIELDS)

# Store-managed columns an exported file may carry; never imported.
_IGNORED_COLUMNS = frozenset({"id", "created_at", "updated_at"})


@dataclass(frozen=True)
class RejectedRow:
    """A source row left out of the import, with the reason."""

    row_number: int
    reason: str


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one import run."""

    batch_id: str
    total_rows: int
    contracts: tuple[ContractRecord, ...] = ()
    rejected: tuple[RejectedRow, ...] = field(default_factory=tuple)

    @property
    def imported(self) -> int:
        return len(self.contracts)

    def summary(self) -> str:
        return f"{self.imported} de {self.total_rows} contratos importados"


def _normalize_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Lower-case, trimmed keys; store-managed columns dropped."""
    row: dict[str, Any] = {}
    for key, value in raw.items():
        if key is None:
            continue
        column = " ".join(str(key).split()).lower()
        if column not in _IGNORED_COLUMNS:
            row[column] = value
    return row


def _default_adapters() -> dict[str, SourceAdapter]:
    return {
        ".csv": CsvSourceAdapter(),
        ".xlsx": XlsxSourceAdapter(),
    }


class ContractImportService:
    """
    Import contracts from spreadsheet files into the store.

    Flush-only: the caller's ``session_scope()`` decides whether the
    batch commits.
    """

    def __init__(
        self,
        session: Session,
        adapters: Mapping[str, SourceAdapter] | None = None,
    ):
        self._session = session
        self._contracts = ContractService(session)
        self._adapters = dict(adapters) if adapters is not None else _default_adapters()

    def read_rows(self, source_path: Path, options: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Read a source file into raw row dicts (no coercion)."""
        source_path = Path(source_path)
        adapter = self._adapters.get(source_path.suffix.lower())
        if adapter is None:
            raise UnsupportedSourceError(source_path.name)
        return list(adapter.read(source_path, options or {}))

    def import_file(
        self,
        source_path: Path,
        ctx: SessionContext | None = None,
        options: dict[str, Any] | None = None,
    ) -> ImportResult:
        """
        Import every valid row of ``source_path``.

        Raises:
            UnsupportedSourceError: No adapter for the file suffix.
            MissingColumnsError: Header lacks contrato/cliente/analista_responsavel.
            NoValidRowsError: The file is empty or no row is valid.
            AccessDeniedError: ``ctx`` is not a manager.
        """
        if ctx is not None:
            require_role(ctx, (UserRole.MANAGER,), "import contracts")
        source_path = Path(source_path)
        rows = self.read_rows(source_path, options)
        logger.info(
            "import_file_read",
            extra={"source_filename": source_path.name, "total_rows": len(rows)},
        )
        return self.import_rows(rows, ctx)

    def import_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        ctx: SessionContext | None = None,
    ) -> ImportResult:
        """Coerce and insert already-read rows keyed by store column names."""
        rows = [_normalize_keys(row) for row in rows]
        batch_id = str(uuid4())

        with LogContext.bind(
            import_batch_id=batch_id,
            actor_id=ctx.email if ctx else None,
            actor_role=ctx.role.value if ctx else None,
        ):
            if not rows:
                logger.warning("import_empty_source")
                raise NoValidRowsError(0)

            columns = set().union(*(row.keys() for row in rows))
            missing = [c for c in REQUIRED_COLUMNS if c not in columns]
            if missing:
                logger.warning("import_missing_columns", extra={"missing": missing})
                raise MissingColumnsError(missing)

            records: list[ContractRecord] = []
            rejected: list[RejectedRow] = []
            for row_number, raw in enumerate(rows, start=1):
                record, reason = self._coerce_row(raw)
                if record is None:
                    rejected.append(RejectedRow(row_number, reason))
                else:
                    records.append(record)

            if rejected:
                logger.info(
                    "import_rows_rejected",
                    extra={
                        "rejected": len(rejected),
                        "first_rows": [r.row_number for r in rejected[:10]],
                    },
                )
            if not records:
                raise NoValidRowsError(len(rows))

            created = self._contracts.bulk_create(records, ctx)
            result = ImportResult(
                batch_id=batch_id,
                total_rows=len(rows),
                contracts=tuple(created),
                rejected=tuple(rejected),
            )
            logger.info(
                "import_completed",
                extra={
                    "total_rows": result.total_rows,
                    "imported": result.imported,
                    "rejected": len(result.rejected),
                },
            )
            return result

    @staticmethod
    def _coerce_row(row: dict[str, Any]) -> tuple[ContractRecord | None, str]:
        blank = [c for c in REQUIRED_COLUMNS if to_text(row.get(c)) is None]
        if blank:
            return None, f"missing {', '.join(blank)}"

        status_column = CONTRACT_COLUMNS["status"]
        if to_text(row.get(status_column)) is None:
            row.pop(status_column, None)
        elif parse_status(row[status_column]) is None:
            return None, f"unknown status {row[status_column]!r}"

        return contract_from_row(row), ""
