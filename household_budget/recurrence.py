"""Helpers for turning recurring fixed expenses into concrete transactions.

A :class:`~household_budget.models.RecurringExpense` is due on the day of
month given by ``auto_register_date``.  Expenses set to 29, 30 or 31 simply
have no eligible day in shorter months; nothing is back-filled.

Amounts may escalate: ``monthly_increase`` is added once for every calendar
month elapsed since ``base_date``.  The escalated figure is always derived on
demand and only frozen into the materialized transaction.
"""

from __future__ import annotations

import time
import uuid
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from .config import AUTO_REGISTER_MEMO_PREFIX
from .dates import format_date, months_between
from .models import EXPENSE, RecordId, RecurringExpense, Transaction


def generate_transaction_id() -> str:
    """Millisecond timestamp plus a random suffix, unique within the process."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}"


def is_in_window(expense: RecurringExpense, date_str: str) -> bool:
    """Apply the start/end bounds of a time-limited expense.

    Unlimited expenses (``is_unlimited`` True or unset) are always in window,
    and so is a time-limited expense with neither bound set.
    """
    if not expense.is_time_bounded:
        return True
    if expense.start_date and date_str < expense.start_date:
        return False
    if expense.end_date and date_str > expense.end_date:
        return False
    return True


def is_due_today(expense: RecurringExpense, today: Union[date, datetime]) -> bool:
    if not expense.is_active:
        return False
    if today.day != expense.auto_register_date:
        return False
    if not expense.is_time_bounded:
        return True
    return is_in_window(expense, format_date(today))


def _escalate(expense: RecurringExpense, months_elapsed: int) -> int:
    # Dates before the base date get the base amount, never a reduction
    return expense.amount + (expense.monthly_increase or 0) * max(0, months_elapsed)


def compute_escalated_amount(expense: RecurringExpense, target_date_str: str) -> int:
    return _escalate(expense, months_between(expense.base_date, target_date_str))


def _auto_memo(expense: RecurringExpense) -> str:
    memo = f"{AUTO_REGISTER_MEMO_PREFIX} {expense.name}"
    if expense.memo:
        memo += f" - {expense.memo}"
    return memo


def materialize(
    expense: RecurringExpense,
    user_id: str,
    target_date_str: str,
    months_elapsed: Optional[int] = None,
) -> Transaction:
    """Build the transaction an expense produces on ``target_date_str``.

    ``months_elapsed`` defaults to the months since the expense's base date.
    """
    if months_elapsed is None:
        months_elapsed = months_between(expense.base_date, target_date_str)
    return Transaction(
        id=generate_transaction_id(),
        type=EXPENSE,
        category=expense.category,
        subcategory=expense.subcategory,
        amount=_escalate(expense, months_elapsed),
        date=target_date_str,
        user_id=user_id,
        payment_method=expense.payment_method,
        memo=_auto_memo(expense),
        fixed_expense_id=expense.id,
        is_auto_registered=True,
    )


def registration_key(record: Union[Transaction, Mapping[str, Any]]) -> Tuple[Optional[RecordId], str]:
    """The ``(fixed_expense_id, date)`` pair of a transaction or raw document.

    Raw documents are not validated, so a record the model would reject
    still counts towards the duplicate check.
    """
    if isinstance(record, Transaction):
        return record.fixed_expense_id, record.date
    return record.get('fixedExpenseId'), record.get('date') or ''


def is_already_registered(
    transactions: Iterable[Union[Transaction, Mapping[str, Any]]],
    expense_id: RecordId,
    date_str: str,
) -> bool:
    return any(registration_key(tx) == (expense_id, date_str) for tx in transactions)
