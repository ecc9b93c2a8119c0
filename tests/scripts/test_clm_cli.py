"""
End-to-end tests for scripts/clm_cli.py against a file-backed SQLite database.
"""

import importlib.util
import json
from pathlib import Path

import pytest

from clm_kernel.db.engine import reset_engine

CLI_PATH = Path(__file__).resolve().parents[2] / "scripts" / "clm_cli.py"

MANAGER = ["--email", "gestor@example.com", "--password", "segredo"]


def _load_cli():
    module_spec = importlib.util.spec_from_file_location("clm_cli", CLI_PATH)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


@pytest.fixture
def cli(tmp_path, monkeypatch):
    monkeypatch.delenv("CLM_CONFIG_PATH", raising=False)
    module = _load_cli()
    db_url = f"sqlite:///{tmp_path / 'clm.db'}"

    def run(*argv: str) -> int:
        return module.main(["--db-url", db_url, *argv])

    assert run("init-db") == 0
    assert run(
        "create-user",
        "--new-email", "gestor@example.com",
        "--full-name", "Gestor",
        "--role", "GESTOR",
        "--new-password", "segredo",
    ) == 0
    yield run
    reset_engine()


def test_second_user_requires_manager_login(cli, capsys):
    code = cli(
        "create-user",
        "--new-email", "ana@example.com",
        "--full-name", "Ana Silva",
        "--role", "ANALISTA",
        "--new-password", "x",
    )

    assert code == 1
    assert "--email/--password" in capsys.readouterr().err


def test_manager_creates_analyst(cli, capsys):
    code = cli(
        "create-user",
        *MANAGER,
        "--new-email", "ana@example.com",
        "--full-name", "Ana Silva",
        "--role", "ANALISTA",
        "--new-password", "x",
    )

    assert code == 0
    assert "ANALISTA account ana@example.com" in capsys.readouterr().out


def test_wrong_password_reports_error_code(cli, capsys):
    code = cli("report", "--email", "gestor@example.com", "--password", "errada")

    assert code == 1
    assert "ERROR [" in capsys.readouterr().err


def test_import_then_report(cli, tmp_path, capsys):
    source = tmp_path / "contratos.csv"
    source.write_text(
        "contrato;cliente;analista_responsavel;status;valor_contrato;"
        "valor_faturado;data_fim_efetividade\n"
        "CT-1;Cliente A;Ana Silva;Ativo;1.000,00;500,00;2026-02-01\n"
        "CT-2;Cliente B;Ana Silva;;2000;0;2026-12-31\n"
        ";Cliente B;Ana Silva;Ativo;10;0;\n",
        encoding="utf-8",
    )

    assert cli("import", str(source), *MANAGER) == 0
    out = capsys.readouterr().out
    assert "2 de 3 contratos importados" in out
    assert "Row 3" in out

    assert cli("report", *MANAGER, "--as-of", "2026-01-15", "--contracts") == 0
    report = json.loads(capsys.readouterr().out)
    assert report["role"] == "GESTOR"
    assert report["dashboard"]["active_contracts"] == 2
    assert {c["contract"] for c in report["contracts"]} == {"CT-1", "CT-2"}
    assert "portfolio" in report


def test_export_and_template(cli, tmp_path):
    export_path = tmp_path / "export.csv"
    template_path = tmp_path / "template.csv"

    assert cli("export", str(export_path), *MANAGER) == 0
    assert cli("template", str(template_path)) == 0

    assert export_path.read_text(encoding="utf-8-sig") == template_path.read_text(
        encoding="utf-8-sig"
    )
