#!/usr/bin/env python3
"""
Command-line entry point for the contract lifecycle kernel.

Usage:
    python3 scripts/clm_cli.py <command> [options]

Commands:
    init-db                         Create the tables.
    create-user                     Create an account (managers only, except
                                    the very first account).
    import FILE                     Import contracts from CSV/XLSX.
    export FILE                     Export the visible contracts to CSV.
    template FILE                   Write a header-only import template.
    report                          Print the analysis snapshot as JSON.

Privileged commands authenticate with --email/--password.  The database
URL comes from the active config (DATABASE_URL overrides it) unless
--db-url is given.

Examples:
    python3 scripts/clm_cli.py init-db
    python3 scripts/clm_cli.py create-user --new-email gestor@example.com \\
        --full-name "Gestor" --role GESTOR --new-password secret
    python3 scripts/clm_cli.py import contratos.csv --email gestor@example.com --password secret
    python3 scripts/clm_cli.py report --email gestor@example.com --password secret --as-of 2026-01-31
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from clm_config import get_active_config
from clm_ingestion.services import (
    ContractImportService,
    export_contracts_csv,
    write_template,
)
from clm_kernel.db.engine import create_tables, init_engine_from_url, session_scope
from clm_kernel.domain.contract import UserRole
from clm_kernel.exceptions import ClmKernelError
from clm_kernel.logging_config import configure_logging
from clm_kernel.selectors.contract_selector import ContractSelector
from clm_kernel.selectors.user_selector import UserSelector
from clm_kernel.services.auth_service import AuthService
from clm_kernel.services.user_service import UserService
from clm_services.analysis_service import AnalysisSnapshot, ContractAnalysisService


def _add_credentials(parser: argparse.ArgumentParser, required: bool = True) -> None:
    parser.add_argument("--email", required=required, help="Login email.")
    parser.add_argument("--password", required=required, help="Login password.")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Contract lifecycle management: store, import/export and analysis.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--db-url", default=None, help="Database URL (default: active config).")
    parser.add_argument("--config", type=Path, default=None, help="Settings override YAML file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Emit structured logs to stderr.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the tables.")

    p = sub.add_parser("create-user", help="Create an account.")
    _add_credentials(p, required=False)
    p.add_argument("--new-email", required=True)
    p.add_argument("--full-name", required=True)
    p.add_argument("--role", required=True, choices=[r.value for r in UserRole])
    p.add_argument("--new-password", required=True)
    p.add_argument("--client-name", default=None, help="Required for CLIENTE accounts.")

    p = sub.add_parser("import", help="Import contracts from CSV/XLSX.")
    p.add_argument("file", type=Path)
    p.add_argument("--delimiter", default=None, help="CSV delimiter (default: auto-detect).")
    p.add_argument("--sheet", default=None, help="XLSX sheet name.")
    _add_credentials(p)

    p = sub.add_parser("export", help="Export contracts to CSV.")
    p.add_argument("file", type=Path)
    _add_credentials(p)

    p = sub.add_parser("template", help="Write a blank import template.")
    p.add_argument("file", type=Path)

    p = sub.add_parser("report", help="Print the analysis snapshot as JSON.")
    p.add_argument(
        "--as-of",
        type=lambda s: date.fromisoformat(s),
        default=None,
        help="Reference date (YYYY-MM-DD). Default: today.",
    )
    p.add_argument("--contracts", action="store_true", help="Include enriched contract rows.")
    _add_credentials(p)

    return parser.parse_args(argv)


def _snapshot_json(snap: AnalysisSnapshot, include_contracts: bool) -> dict[str, Any]:
    report: dict[str, Any] = {
        "as_of": snap.as_of,
        "role": snap.role.value,
        "dashboard": asdict(snap.dashboard),
        "financials": asdict(snap.financials),
        "expiry": {
            "counts": snap.expiry.counts(),
            "without_end_date": snap.expiry.without_end_date,
        },
    }
    if snap.stage_control is not None:
        report["stage_control"] = {
            "on_time": len(snap.stage_control.on_time),
            "late": [
                {
                    "contract": e.contract.contract_number,
                    "current_stage": e.check.current_stage,
                    "expected_stage": e.check.expected_stage,
                    "days_until_expiry": e.check.days_until_expiry,
                }
                for e in snap.stage_control.late
            ],
            "not_applicable": snap.stage_control.not_applicable,
        }
    if snap.portfolio is not None:
        report["portfolio"] = {
            "top_clients": [asdict(r) for r in snap.portfolio.top_clients],
            "top_profitability": [asdict(r) for r in snap.portfolio.top_profitability],
            "health": asdict(snap.portfolio.health),
            "rating": {k: v.value for k, v in asdict(snap.portfolio.rating).items()},
        }
    if include_contracts:
        report["contracts"] = [
            {
                "contract": item.contract.contract_number,
                "client": item.contract.client_name,
                "status": item.contract.status.value if item.contract.status else None,
                "end_date": item.contract.end_date,
                "days_until_expiry": item.days_until_expiry,
                "expiry_bucket": item.expiry_bucket.value if item.expiry_bucket else None,
                "expected_stage": item.expected_stage,
                "is_on_time": item.is_on_time,
            }
            for item in snap.contracts
        ]
    return report


def _create_user(session, args: argparse.Namespace) -> int:
    ctx = None
    if UserSelector(session).list(limit=1):
        if not (args.email and args.password):
            print("ERROR: --email/--password of a manager are required.", file=sys.stderr)
            return 1
        ctx = AuthService(session).login(args.email, args.password)
    user = UserService(session).create_user(
        email=args.new_email,
        full_name=args.full_name,
        role=args.role,
        password=args.new_password,
        client_name=args.client_name,
        ctx=ctx,
    )
    print(f"Created {user.role.value} account {user.email} (id={user.id})")
    return 0


def _run(args: argparse.Namespace) -> int:
    if args.command == "template":
        write_template(args.file)
        print(f"Template written to {args.file}")
        return 0

    settings = get_active_config(args.config)
    init_engine_from_url(args.db_url or settings.database.url, echo=settings.database.echo)

    if args.command == "init-db":
        create_tables()
        print("Tables created.")
        return 0

    with session_scope() as session:
        if args.command == "create-user":
            return _create_user(session, args)

        ctx = AuthService(session).login(args.email, args.password)

        if args.command == "import":
            source = args.file.resolve()
            if not source.is_file():
                print(f"ERROR: File not found: {source}", file=sys.stderr)
                return 1
            options = {k: v for k, v in (("delimiter", args.delimiter), ("sheet", args.sheet)) if v}
            result = ContractImportService(session).import_file(source, ctx, options)
            print(result.summary())
            for rejected in result.rejected[:10]:
                print(f"  Row {rejected.row_number}: {rejected.reason}")
            if len(result.rejected) > 10:
                print(f"  ... and {len(result.rejected) - 10} more rejected rows.")
            return 0

        if args.command == "export":
            contracts = ContractSelector(session).list_for_session(ctx)
            count = export_contracts_csv(contracts, args.file, ctx)
            print(f"Exported {count} contracts to {args.file}")
            return 0

        if args.command == "report":
            snap = ContractAnalysisService(session, settings=settings).snapshot(ctx, args.as_of)
            print(json.dumps(_snapshot_json(snap, args.contracts), indent=2, default=str, ensure_ascii=False))
            return 0

    return 1


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.verbose:
        configure_logging()
    try:
        return _run(args)
    except ClmKernelError as e:
        print(f"ERROR [{e.code}]: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
