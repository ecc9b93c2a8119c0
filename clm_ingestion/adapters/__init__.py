"""Source adapters for contract ingestion (file I/O only, no DB)."""

from clm_ingestion.adapters.base import SourceAdapter, SourcePreview
from clm_ingestion.adapters.csv_adapter import CsvSourceAdapter
from clm_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourcePreview",
    "CsvSourceAdapter",
    "XlsxSourceAdapter",
]
