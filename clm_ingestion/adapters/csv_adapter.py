"""
CSV source adapter.

Uses csv.DictReader. Configurable: delimiter, encoding, skip_rows. A BOM is
stripped via utf-8-sig when encoding is utf-8 (exports always carry one).
When no delimiter is given it is detected from the header line: spreadsheet
programs in pt-BR locales save with ``;``.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterator

from clm_ingestion.adapters.base import SourcePreview, normalize_header

_CANDIDATE_DELIMITERS = (",", ";", "\t")


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() in ("utf-8", "utf8"):
        return "utf-8-sig"
    return enc


def detect_delimiter(header_line: str) -> str:
    """The candidate delimiter occurring most often in the header line."""
    counts = {d: header_line.count(d) for d in _CANDIDATE_DELIMITERS}
    best = max(_CANDIDATE_DELIMITERS, key=lambda d: counts[d])
    return best if counts[best] else ","


class CsvSourceAdapter:
    """Read CSV files as one dict per row. Streams; does not load entire file."""

    def _open(self, source_path: Path, options: dict[str, Any]):
        encoding = _get_encoding(options)
        skip_rows = int(options.get("skip_rows", 0))
        f = source_path.open("r", encoding=encoding, newline="")
        for _ in range(skip_rows):
            next(f, None)
        return f, encoding

    def _reader(self, f, options: dict[str, Any]) -> tuple[list[str], str] | None:
        header_line = f.readline()
        if not header_line.strip():
            return None
        delimiter = options.get("delimiter") or detect_delimiter(header_line)
        header = next(csv.reader([header_line], delimiter=delimiter))
        return header, delimiter

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        f, _ = self._open(source_path, options)
        with f:
            parsed = self._reader(f, options)
            if parsed is None:
                return
            header, delimiter = parsed
            columns = [normalize_header(h) for h in header]
            for row in csv.reader(f, delimiter=delimiter):
                if not any(cell.strip() for cell in row):
                    continue
                yield dict(zip(columns, row))

    def preview(self, source_path: Path, options: dict[str, Any]) -> SourcePreview:
        sample_size = 5
        f, encoding = self._open(source_path, options)
        with f:
            parsed = self._reader(f, options)
            if parsed is None:
                return SourcePreview(row_count=0, columns=(), sample_rows=(), encoding=encoding)
            header, delimiter = parsed
            columns = tuple(normalize_header(h) for h in header)
            sample: list[dict[str, Any]] = []
            count = 0
            for row in csv.reader(f, delimiter=delimiter):
                if not any(cell.strip() for cell in row):
                    continue
                count += 1
                if len(sample) < sample_size:
                    sample.append(dict(zip(columns, row)))

        return SourcePreview(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            encoding=encoding,
            detected_delimiter=delimiter,
        )
