"""Monthly income/expense/saving statistics.

This module turns the flat transaction list and the recurring expense
definitions into the figures shown on the statistics and calendar views:
monthly totals, category and per-member breakdowns, month-over-month
changes and a trailing trend table.

Savings are recorded as an expense category.  They count towards the gross
expense total but are subtracted again for the "this month's spending"
figure (``net_expense``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .categories import CategoryBudget, resolve_category_name
from .config import DEFAULT_TREND_MONTHS, SAVINGS_CATEGORY_ID
from .dates import format_date, mid_month, month_bounds, month_label, parse_date, shift_month, trailing_months
from .models import EXPENSE, INCOME, TRANSACTION_KIND, FixedOccurrence, Occurrence, RecurringExpense, Transaction
from .recurrence import compute_escalated_amount, is_in_window

CategoryResolver = Callable[[Optional[str], str], str]

FRAME_COLUMNS = [
    'id', 'type', 'category', 'subcategory', 'amount', 'date', 'user_id',
    'fixed_expense_id', 'is_auto_registered',
]


def percent_change(current: float, previous: float) -> float:
    """Relative change in percent; 0 when there is no previous value."""
    if not previous:
        return 0.0
    return float((current - previous) / previous * 100)


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Build a DataFrame with a parsed ``Transaction Date`` column."""
    rows = [
        {
            'id': tx.id,
            'type': tx.type,
            'category': tx.category,
            'subcategory': tx.subcategory,
            'amount': tx.amount,
            'date': tx.date,
            'user_id': tx.user_id,
            'fixed_expense_id': tx.fixed_expense_id,
            'is_auto_registered': tx.is_auto_registered,
        }
        for tx in transactions
    ]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df['amount'] = pd.to_numeric(df['amount'], errors='coerce').fillna(0).astype('int64')
    # Parse field-by-field so non-padded dates such as 2025-3-1 still match
    df['Transaction Date'] = pd.to_datetime(df['date'].map(parse_date), errors='coerce')
    return df


def fixed_occurrences_for_month(
    recurring_expenses: Iterable[RecurringExpense],
    year: int,
    month: int,
) -> List[FixedOccurrence]:
    """Active recurring expenses that fall inside the month, with escalated amounts.

    Eligibility and escalation are both evaluated at the mid-month
    representative day, so a bound that falls strictly inside the month is
    approximated.
    """
    representative = format_date(mid_month(year, month))
    occurrences = []
    for expense in recurring_expenses:
        if not expense.is_active:
            continue
        if not is_in_window(expense, representative):
            continue
        occurrences.append(FixedOccurrence(
            expense_id=expense.id,
            name=expense.name,
            category=expense.category,
            amount=compute_escalated_amount(expense, representative),
            day=expense.auto_register_date,
        ))
    return occurrences


def fixed_expense_overview(
    recurring_expenses: Iterable[RecurringExpense],
    year: int,
    month: int,
) -> Dict[str, int]:
    expenses = list(recurring_expenses)
    active = [expense for expense in expenses if expense.is_active]
    occurrences = fixed_occurrences_for_month(active, year, month)
    return {
        'active_count': len(active),
        'inactive_count': len(expenses) - len(active),
        'monthly_total': int(sum(occurrence.amount for occurrence in occurrences)),
    }


def day_net(items: Iterable[Occurrence]) -> int:
    """Income minus spending for one calendar day's entries."""
    total = 0
    for item in items:
        if item.kind == TRANSACTION_KIND and item.type == INCOME:
            total += item.amount
        else:
            total -= item.amount
    return total


@dataclass
class MonthlySummary:
    year: int
    month: int
    income: int
    saving: int
    gross_expense: int
    net_expense: int
    transaction_count: int
    fixed_count: int = 0

    @property
    def balance(self) -> int:
        return self.income - self.gross_expense

    @property
    def saving_rate(self) -> float:
        return (self.balance / self.income * 100) if self.income > 0 else 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            'income': self.income,
            'saving': self.saving,
            'gross_expense': self.gross_expense,
            'net_expense': self.net_expense,
            'balance': self.balance,
            'saving_rate': self.saving_rate,
            'transaction_count': self.transaction_count,
            'fixed_count': self.fixed_count,
        }


class MonthlyStatistics:
    """Monthly aggregation over a snapshot of transactions and fixed expenses."""

    def __init__(
        self,
        transactions: Iterable[Transaction],
        recurring_expenses: Iterable[RecurringExpense] = (),
        savings_category: str = SAVINGS_CATEGORY_ID,
        category_resolver: CategoryResolver = resolve_category_name,
    ):
        self.transactions = list(transactions)
        self.data = transactions_frame(self.transactions)
        self.recurring_expenses = list(recurring_expenses)
        self.savings_category = savings_category
        self.category_resolver = category_resolver

    def month_transactions(self, year: int, month: int) -> pd.DataFrame:
        first, last = month_bounds(year, month)
        dates = self.data['Transaction Date']
        mask = (dates >= pd.Timestamp(first)) & (dates <= pd.Timestamp(last))
        return self.data[mask].copy()

    def fixed_occurrences(self, year: int, month: int, skip_materialized: bool = False) -> List[FixedOccurrence]:
        """Fixed-expense projections for the month.

        With ``skip_materialized`` the projection of an expense that already
        produced a transaction during the month is left out.
        """
        occurrences = fixed_occurrences_for_month(self.recurring_expenses, year, month)
        if not skip_materialized:
            return occurrences
        monthly = self.month_transactions(year, month)
        registered = set(monthly['fixed_expense_id'].dropna())
        return [occurrence for occurrence in occurrences if occurrence.expense_id not in registered]

    def calendar_days(
        self,
        year: int,
        month: int,
        skip_materialized: bool = False,
    ) -> Dict[int, List[Occurrence]]:
        """Transactions and fixed-expense projections keyed by day of month.

        Days without entries are omitted.  A fixed expense set to a day the
        month does not have is left out.
        """
        first, last = month_bounds(year, month)
        days: Dict[int, List[Occurrence]] = {}
        for tx in self.transactions:
            tx_date = parse_date(tx.date)
            if tx_date is not None and first <= tx_date <= last:
                days.setdefault(tx_date.day, []).append(tx)
        for occurrence in self.fixed_occurrences(year, month, skip_materialized):
            if occurrence.day <= last.day:
                days.setdefault(occurrence.day, []).append(occurrence)
        return dict(sorted(days.items()))

    def _expense_rows(self, df: pd.DataFrame) -> pd.DataFrame:
        return df[df['type'] == EXPENSE]

    def _income_rows(self, df: pd.DataFrame) -> pd.DataFrame:
        return df[df['type'] == INCOME]

    def summary(
        self,
        year: int,
        month: int,
        include_fixed: bool = True,
        skip_materialized: bool = False,
    ) -> MonthlySummary:
        monthly = self.month_transactions(year, month)
        expenses = self._expense_rows(monthly)
        fixed = self.fixed_occurrences(year, month, skip_materialized) if include_fixed else []

        income = int(self._income_rows(monthly)['amount'].sum())
        fixed_total = sum(occurrence.amount for occurrence in fixed)
        fixed_saving = sum(o.amount for o in fixed if o.category == self.savings_category)
        saving = int(expenses.loc[expenses['category'] == self.savings_category, 'amount'].sum()) + fixed_saving
        gross = int(expenses['amount'].sum()) + fixed_total

        return MonthlySummary(
            year=year,
            month=month,
            income=income,
            saving=int(saving),
            gross_expense=int(gross),
            net_expense=int(gross - saving),
            transaction_count=len(monthly),
            fixed_count=len(fixed),
        )

    def category_breakdown(
        self,
        year: int,
        month: int,
        include_fixed: bool = True,
        skip_materialized: bool = False,
    ) -> pd.Series:
        """Expense totals per category display name, largest first."""
        expenses = self._expense_rows(self.month_transactions(year, month))
        parts = [expenses[['category', 'amount']]]
        if include_fixed:
            fixed = self.fixed_occurrences(year, month, skip_materialized)
            if fixed:
                parts.append(pd.DataFrame(
                    [{'category': o.category, 'amount': o.amount} for o in fixed]
                ))
        combined = pd.concat(parts, ignore_index=True)
        if combined.empty:
            return pd.Series(dtype='int64', name='amount')
        combined['name'] = combined['category'].map(lambda c: self.category_resolver(c, EXPENSE))
        breakdown = combined.groupby('name')['amount'].sum().astype('int64')
        breakdown.index.name = None
        return breakdown.sort_values(ascending=False)

    def member_breakdown(self, year: int, month: int) -> Dict[str, int]:
        """Expense totals per user, only when several members spent this month."""
        expenses = self._expense_rows(self.month_transactions(year, month))
        if expenses['user_id'].nunique() <= 1:
            return {}
        totals = expenses.groupby('user_id')['amount'].sum()
        return {str(user): int(amount) for user, amount in totals.items()}

    def month_over_month(self, year: int, month: int) -> Dict[str, float]:
        """Percentage change against the previous month, transactions only.

        The expense figure is the gross total, savings included.
        """
        current = self.summary(year, month, include_fixed=False)
        previous = self.summary(*shift_month(year, month, -1), include_fixed=False)
        return {
            'income': percent_change(current.income, previous.income),
            'expense': percent_change(current.gross_expense, previous.gross_expense),
            'saving': percent_change(current.saving, previous.saving),
        }

    def trailing_trend(self, year: int, month: int, months: int = DEFAULT_TREND_MONTHS) -> pd.DataFrame:
        """Income, expense and saving for the trailing months, oldest first.

        Historical months already hold their auto-registered transactions,
        so fixed-expense projections are not added here.
        """
        rows = []
        for y, m in trailing_months(year, month, months):
            summary = self.summary(y, m, include_fixed=False)
            rows.append({
                'Month': month_label(y, m),
                'Income': summary.income,
                'Expenses': summary.net_expense,
                'Saving': summary.saving,
                'Gross Expenses': summary.gross_expense,
            })
        trend = pd.DataFrame(rows, columns=['Month', 'Income', 'Expenses', 'Saving', 'Gross Expenses'])
        trend['Net'] = trend['Income'] - trend['Gross Expenses']
        trend['Direction'] = np.where(trend['Net'] >= 0, 'surplus', 'deficit')
        return trend

    def budget_status(
        self,
        year: int,
        month: int,
        budget: CategoryBudget,
        include_fixed: bool = True,
    ) -> pd.DataFrame:
        """Spending against the configured category limits."""
        expenses = self._expense_rows(self.month_transactions(year, month))
        spent = {key: int(value) for key, value in expenses.groupby('category')['amount'].sum().items()}
        if include_fixed:
            # Expenses already registered this month are counted once
            for occurrence in self.fixed_occurrences(year, month, skip_materialized=True):
                spent[occurrence.category] = spent.get(occurrence.category, 0) + occurrence.amount

        rows = []
        for category_id, limit in budget.categories.items():
            used = int(spent.get(category_id, 0))
            rows.append({
                'Category': self.category_resolver(category_id, EXPENSE),
                'Budget': limit,
                'Spent': used,
                'Remaining': limit - used,
                'Percent Used': (used / limit * 100) if limit > 0 else 0.0,
            })
        if budget.monthly > 0:
            total = sum(spent.values())
            rows.append({
                'Category': 'Total',
                'Budget': budget.monthly,
                'Spent': total,
                'Remaining': budget.monthly - total,
                'Percent Used': total / budget.monthly * 100,
            })
        frame = pd.DataFrame(rows, columns=['Category', 'Budget', 'Spent', 'Remaining', 'Percent Used'])
        frame['Over Budget'] = frame['Remaining'] < 0
        return frame
