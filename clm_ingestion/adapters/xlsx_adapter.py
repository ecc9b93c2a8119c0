"""
XLSX source adapter for contract spreadsheets.

The first row of the sheet (after ``skip_rows``) is the header. Cell values
keep their native types where the kernel coercion understands them
(numbers, dates); strings are stripped and empty cells become "".
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterator

import openpyxl

from clm_ingestion.adapters.base import SourcePreview, normalize_header


def _cell_value(value: Any) -> Any:
    """Normalize one openpyxl cell value."""
    if value is None:
        return ""
    if isinstance(value, float):
        if value == int(value):
            return int(value)
        return value
    if isinstance(value, (int, date, datetime)):
        return value
    return str(value).strip()


def _headers(row: tuple[Any, ...]) -> list[str]:
    headers: list[str] = []
    for c, v in enumerate(row):
        key = normalize_header(v) or f"column_{c + 1}"
        base = key
        cnt = 0
        while key in headers:
            cnt += 1
            key = f"{base}_{cnt}"
        headers.append(key)
    return headers


class XlsxSourceAdapter:
    """
    Read .xlsx files as one dict per row.

    source_options:
      sheet: 0-based sheet index (int) or sheet name (str). Default: active sheet.
      skip_rows: number of rows to skip at top of sheet before the header. Default: 0.
    """

    def _get_sheet(self, wb: Any, options: dict[str, Any]) -> Any:
        sheet_ref = options.get("sheet")
        if sheet_ref is None:
            return wb.active
        if isinstance(sheet_ref, int):
            return wb.worksheets[sheet_ref]
        return wb[sheet_ref]

    def _rows(self, wb: Any, options: dict[str, Any]) -> Iterator[tuple[Any, ...]]:
        sheet = self._get_sheet(wb, options)
        skip_rows = int(options.get("skip_rows", 0))
        yield from sheet.iter_rows(min_row=1 + skip_rows, values_only=True)

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            rows = self._rows(wb, options)
            header = next(rows, None)
            if header is None:
                return
            headers = _headers(header)
            for row in rows:
                vals = [_cell_value(v) for v in row[: len(headers)]]
                if not any(v != "" for v in vals):
                    continue
                yield dict(zip(headers, vals))
        finally:
            wb.close()

    def preview(self, source_path: Path, options: dict[str, Any]) -> SourcePreview:
        sample_size = 5
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            rows = self._rows(wb, options)
            header = next(rows, None)
            if header is None:
                return SourcePreview(row_count=0, columns=(), sample_rows=())
            headers = _headers(header)
            sample: list[dict[str, Any]] = []
            count = 0
            for row in rows:
                vals = [_cell_value(v) for v in row[: len(headers)]]
                if not any(v != "" for v in vals):
                    continue
                count += 1
                if len(sample) < sample_size:
                    sample.append(dict(zip(headers, vals)))
            return SourcePreview(row_count=count, columns=tuple(headers), sample_rows=tuple(sample))
        finally:
            wb.close()
