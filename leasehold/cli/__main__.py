# leasehold/cli/__main__.py
from __future__ import annotations

import argparse
import json
from decimal import Decimal

from leasehold.cli.seed_demo import seed_demo
from leasehold.db import SessionLocal, init_db
from leasehold.domain import reports
from leasehold.domain.clock import system_clock
from leasehold.logging_config import configure_logging


def _cmd_seed_demo(args: argparse.Namespace) -> dict:
    db = SessionLocal()
    try:
        out = seed_demo(
            db,
            city=args.city,
            monthly_rent=Decimal(args.monthly_rent),
            activate=not args.no_activate,
        )
    finally:
        db.close()
    return {
        "ok": True,
        "owner_id": out.owner_id,
        "tenant_id": out.tenant_id,
        "property_id": out.property_id,
        "agreement_id": out.agreement_id,
        "agreement_status": out.agreement_status.value,
    }


def _cmd_report(args: argparse.Namespace) -> dict:
    db = SessionLocal()
    try:
        if args.kind == "dashboard":
            return reports.dashboard(db, clock=system_clock)
        fn = {
            "properties": reports.property_report,
            "agreements": reports.agreement_report,
            "tenants": reports.tenant_report,
            "users": reports.user_report,
        }[args.kind]
        return fn(db).as_dict()
    finally:
        db.close()


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(prog="leasehold")
    p.add_argument("--log-level", default=None)
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("seed-demo", help="create a demo owner, tenant, listing and agreement")
    s.add_argument("--city", default="Springfield")
    s.add_argument("--monthly-rent", default="2000.00")
    s.add_argument("--no-activate", action="store_true")
    s.set_defaults(func=_cmd_seed_demo)

    r = sub.add_parser("report", help="print an admin report as JSON")
    r.add_argument(
        "kind",
        nargs="?",
        default="dashboard",
        choices=["dashboard", "properties", "agreements", "tenants", "users"],
    )
    r.set_defaults(func=_cmd_report)

    args = p.parse_args(argv)
    configure_logging(args.log_level)
    init_db()
    print(json.dumps(args.func(args), indent=2, default=str))


if __name__ == "__main__":
    main()
