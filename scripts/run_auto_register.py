#!/usr/bin/env python3
"""Run today's fixed-expense auto-registration against the local database."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from household_budget import config, db
from household_budget.auto_register import AutoRegistrar
from household_budget.marker_store import JsonMarkerStore


def main(user_id: str) -> int:
    config.configure_logging()
    config.ensure_data_directories()
    db.init_db()

    registrar = AutoRegistrar(JsonMarkerStore())
    report = asyncio.run(registrar.run_with_report(
        db.fetch_recurring_expenses(),
        db.fetch_transactions(),
        user_id,
        db.persist_transaction,
    ))

    if report.already_checked:
        print(f"Already checked for {report.date}.")
        return 0

    for outcome in report.succeeded:
        print(f"Registered {outcome.expense.name}: {outcome.transaction.amount:,}")
    for outcome in report.failed:
        print(f"Failed {outcome.expense.name}: {outcome.error}")
    print(f"{report.registered_count} registered, {len(report.failed)} failed on {report.date}.")
    return 1 if report.failed else 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Register fixed expenses due today.')
    parser.add_argument('--user', required=True, help='User id recorded on the generated transactions')
    args = parser.parse_args()
    raise SystemExit(main(args.user))
