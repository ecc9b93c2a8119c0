"""
Tests for the CSV and XLSX source adapters.
"""

from datetime import datetime

import openpyxl

from clm_ingestion.adapters import CsvSourceAdapter, SourceAdapter, XlsxSourceAdapter
from clm_ingestion.adapters.csv_adapter import detect_delimiter


class TestCsvSourceAdapter:
    """Tests for CsvSourceAdapter."""

    def test_reads_with_bom_and_normalized_headers(self, tmp_path):
        path = tmp_path / "c.csv"
        path.write_text("\ufeffContrato, Cliente \nCT-1,Alfa\n", encoding="utf-8")

        rows = list(CsvSourceAdapter().read(path, {}))

        assert rows == [{"contrato": "CT-1", "cliente": "Alfa"}]

    def test_semicolon_detected(self, tmp_path):
        path = tmp_path / "c.csv"
        path.write_text("contrato;valor_contrato\nCT-1;1.234,56\n", encoding="utf-8")

        rows = list(CsvSourceAdapter().read(path, {}))

        assert rows == [{"contrato": "CT-1", "valor_contrato": "1.234,56"}]

    def test_blank_lines_skipped(self, tmp_path):
        path = tmp_path / "c.csv"
        path.write_text("contrato\nA\n\n , \nB\n", encoding="utf-8")

        rows = list(CsvSourceAdapter().read(path, {}))

        assert [r["contrato"] for r in rows] == ["A", "B"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "c.csv"
        path.write_text("", encoding="utf-8")

        assert list(CsvSourceAdapter().read(path, {})) == []

    def test_preview(self, tmp_path):
        path = tmp_path / "c.csv"
        path.write_text("contrato;cliente\n" + "".join(f"CT-{i};X\n" for i in range(8)), encoding="utf-8")

        preview = CsvSourceAdapter().preview(path, {})

        assert preview.row_count == 8
        assert preview.columns == ("contrato", "cliente")
        assert len(preview.sample_rows) == 5
        assert preview.detected_delimiter == ";"

    def test_detect_delimiter(self):
        assert detect_delimiter('"a","b","c"\n') == ","
        assert detect_delimiter("a;b;c\n") == ";"
        assert detect_delimiter("single\n") == ","

    def test_satisfies_protocol(self):
        assert isinstance(CsvSourceAdapter(), SourceAdapter)
        assert isinstance(XlsxSourceAdapter(), SourceAdapter)


class TestXlsxSourceAdapter:
    """Tests for XlsxSourceAdapter."""

    def test_reads_typed_cells(self, tmp_path):
        path = tmp_path / "c.xlsx"
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["Contrato", "Valor_Contrato", "Data_Fim_Efetividade", None])
        ws.append(["CT-1", 1500.0, datetime(2026, 12, 31), None])
        ws.append([None, None, None, None])
        ws.append(["CT-2", 10.5, None, None])
        wb.save(path)

        rows = list(XlsxSourceAdapter().read(path, {}))

        assert len(rows) == 2
        assert rows[0]["contrato"] == "CT-1"
        assert rows[0]["valor_contrato"] == 1500
        assert rows[0]["data_fim_efetividade"] == datetime(2026, 12, 31)
        assert rows[1]["valor_contrato"] == 10.5
        assert rows[1]["data_fim_efetividade"] == ""

    def test_preview(self, tmp_path):
        path = tmp_path / "c.xlsx"
        wb = openpyxl.Workbook()
        wb.active.append(["contrato"])
        wb.active.append(["CT-1"])
        wb.save(path)

        preview = XlsxSourceAdapter().preview(path, {})

        assert preview.row_count == 1
        assert preview.columns[0] == "contrato"
