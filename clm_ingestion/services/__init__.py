"""Ingestion services: contract import and CSV export."""

from clm_ingestion.services.export_service import (
    export_contracts_csv,
    render_contracts_csv,
    write_template,
)
from clm_ingestion.services.import_service import (
    ContractImportService,
    ImportResult,
    RejectedRow,
)

__all__ = [
    "ContractImportService",
    "ImportResult",
    "RejectedRow",
    "export_contracts_csv",
    "render_contracts_csv",
    "write_template",
]
