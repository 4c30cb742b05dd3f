#!/usr/bin/env python3
"""Print the monthly statistics for the local database."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from household_budget import db
from household_budget.config import DEFAULT_TREND_MONTHS
from household_budget.dates import today
from household_budget.statistics import MonthlyStatistics


def main(year: int, month: int, trend_months: int) -> None:
    db.init_db()
    stats = MonthlyStatistics(db.fetch_transactions(), db.fetch_recurring_expenses())

    summary = stats.summary(year, month, skip_materialized=True)
    print(f"{year}-{month:02d}")
    print(f"  Income:   {summary.income:>12,}")
    print(f"  Spending: {summary.net_expense:>12,}")
    print(f"  Saving:   {summary.saving:>12,}")

    changes = stats.month_over_month(year, month)
    print("\nVs. previous month:")
    for label, value in changes.items():
        print(f"  {label:<8} {value:+.1f}%")

    breakdown = stats.category_breakdown(year, month, skip_materialized=True)
    if not breakdown.empty:
        print("\nBy category:")
        print(breakdown.to_string())

    members = stats.member_breakdown(year, month)
    if members:
        print("\nBy member:")
        for user, amount in members.items():
            print(f"  {user:<10} {amount:>12,}")

    print("\nTrend:")
    print(stats.trailing_trend(year, month, trend_months).to_string(index=False))


if __name__ == '__main__':
    current = today()
    parser = argparse.ArgumentParser(description='Show monthly income/expense statistics.')
    parser.add_argument('--year', type=int, default=current.year)
    parser.add_argument('--month', type=int, default=current.month)
    parser.add_argument('--trend-months', type=int, default=DEFAULT_TREND_MONTHS, help='How many months the trend table covers')
    args = parser.parse_args()
    main(args.year, args.month, args.trend_months)
