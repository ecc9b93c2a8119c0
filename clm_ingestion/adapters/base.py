"""
Source adapter protocol and preview DTO.

Contract:
    SourceAdapter.read() yields one dict per source row, keyed by the
    normalized header (stripped, lower-case).
    SourceAdapter.preview() returns a quick snapshot: row count, columns, sample rows.

Architecture: clm_ingestion/adapters. File I/O only, no DB or kernel imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading spreadsheet files into row dicts."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        """Yield one dict per source row."""
        ...

    def preview(self, source_path: Path, options: dict[str, Any]) -> "SourcePreview":
        """Quick preview: row count, detected columns, sample rows."""
        ...


@dataclass(frozen=True)
class SourcePreview:
    """Result of probing a source file (row count, columns, first N rows)."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[dict[str, Any], ...]
    encoding: str | None = None
    detected_delimiter: str | None = None


def normalize_header(value: Any) -> str:
    """Header cell -> dict key: stripped, lower-case, inner whitespace collapsed."""
    if value is None:
        return ""
    return " ".join(str(value).split()).lower()
