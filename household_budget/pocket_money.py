"""Personal pocket-money ledger statistics.

The ledger keeps a running balance that is topped up by hand.  Whatever was
spent before the viewed month is deducted to give the carried-over balance,
and the month's own spending is deducted from that.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, Optional

from .dates import days_in_month, month_bounds, parse_date, today as default_today
from .models import Transaction


def pocket_money_summary(
    transactions: Iterable[Transaction],
    balance: int,
    year: int,
    month: int,
    today: Optional[date] = None,
) -> Dict[str, float]:
    now = today or default_today()
    first, last = month_bounds(year, month)

    spent_before = 0
    month_amounts = []
    for tx in transactions:
        tx_date = parse_date(tx.date)
        if tx_date is None:
            continue
        if tx_date < first:
            spent_before += tx.amount
        elif tx_date <= last:
            month_amounts.append(tx.amount)

    carried_over = balance - spent_before
    spent = sum(month_amounts)
    remaining = carried_over - spent

    total_days = days_in_month(first)
    is_current_month = (now.year, now.month) == (year, month)
    days_elapsed = now.day if is_current_month else total_days

    return {
        'carried_over': carried_over,
        'spent': spent,
        'remaining': remaining,
        'remaining_percentage': (remaining / carried_over * 100) if carried_over > 0 else 0.0,
        'average_daily': (spent / days_elapsed) if days_elapsed > 0 else 0.0,
        'max_spending': max(month_amounts) if month_amounts else 0,
        'transaction_count': len(month_amounts),
        'days_elapsed': days_elapsed,
        'days_remaining': total_days - days_elapsed,
    }
