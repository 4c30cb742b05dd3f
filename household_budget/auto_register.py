"""Daily auto-registration of recurring fixed expenses.

Once per calendar day the :class:`AutoRegistrar` walks every recurring
expense definition, materializes a transaction for each one due today and
hands it to an injected ``persist`` callable.  Persist calls are awaited one
after another, never concurrently.

Two guards prevent double registration:

* the last-check marker short-circuits repeated passes on the same day;
* an expense already represented by a transaction with the same
  ``fixed_expense_id`` and today's date is skipped.

The marker has no cross-process lock, so the second guard is what actually
protects two simultaneous passes.

Example
-------
>>> registrar = AutoRegistrar(InMemoryMarkerStore())
>>> count = asyncio.run(registrar.run(expenses, transactions, 'user1', persist))
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

from .config import LAST_CHECK_KEY
from .dates import format_date, months_between, today as default_clock
from .marker_store import MarkerStore
from .models import RecurringExpense, Transaction
from .recurrence import is_already_registered, is_due_today, materialize

logger = logging.getLogger(__name__)

PersistCallback = Callable[[Transaction, str], Union[Awaitable[None], None]]
ExpenseInput = Union[RecurringExpense, Dict[str, Any]]
TransactionInput = Union[Transaction, Dict[str, Any]]


def _coerce_expenses(items: Iterable[ExpenseInput]) -> List[RecurringExpense]:
    return [item if isinstance(item, RecurringExpense) else RecurringExpense.from_dict(item) for item in items]


async def _call_persist(persist: PersistCallback, transaction: Transaction, date_str: str) -> None:
    result = persist(transaction, date_str)
    if inspect.isawaitable(result):
        await result


@dataclass
class PersistOutcome:
    """Result of persisting one materialized transaction."""

    expense: RecurringExpense
    transaction: Transaction
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RegistrationReport:
    date: str
    already_checked: bool = False
    outcomes: List[PersistOutcome] = field(default_factory=list)
    skipped_already_registered: List[RecurringExpense] = field(default_factory=list)

    @property
    def succeeded(self) -> List[PersistOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> List[PersistOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def registered_count(self) -> int:
        return len(self.succeeded)


class AutoRegistrar:
    """Materializes due recurring expenses at most once per day."""

    def __init__(
        self,
        marker_store: MarkerStore,
        clock: Callable[[], date] = default_clock,
        marker_key: Optional[str] = None,
    ):
        self.marker_store = marker_store
        self.clock = clock
        self.marker_key = marker_key

    def _key_for(self, user_id: str) -> str:
        if self.marker_key:
            return self.marker_key
        return f"{LAST_CHECK_KEY}:{user_id}" if user_id else LAST_CHECK_KEY

    async def run(
        self,
        recurring_expenses: Iterable[ExpenseInput],
        existing_transactions: Iterable[TransactionInput],
        user_id: str,
        persist: PersistCallback,
    ) -> int:
        """Register today's due expenses; return how many were persisted."""
        report = await self.run_with_report(recurring_expenses, existing_transactions, user_id, persist)
        return report.registered_count

    async def run_with_report(
        self,
        recurring_expenses: Iterable[ExpenseInput],
        existing_transactions: Iterable[TransactionInput],
        user_id: str,
        persist: PersistCallback,
    ) -> RegistrationReport:
        now = self.clock()
        today_str = format_date(now)
        key = self._key_for(user_id)
        report = RegistrationReport(date=today_str)

        if self.marker_store.get(key) == today_str:
            logger.debug("Auto-registration already checked for %s", today_str)
            report.already_checked = True
            return report

        expenses = _coerce_expenses(recurring_expenses)
        # Only the fixed-expense id and date of each record are read
        snapshot = list(existing_transactions)
        logger.info("Checking %d recurring expenses for %s", len(expenses), today_str)

        for expense in expenses:
            if not is_due_today(expense, now):
                continue
            if is_already_registered(snapshot, expense.id, today_str):
                logger.info("'%s' already registered for %s", expense.name, today_str)
                report.skipped_already_registered.append(expense)
                continue

            months_elapsed = months_between(expense.base_date, today_str)
            transaction = materialize(expense, user_id, today_str, months_elapsed)
            try:
                await _call_persist(persist, transaction, today_str)
            except Exception as exc:
                logger.exception("Failed to auto-register '%s'", expense.name)
                report.outcomes.append(PersistOutcome(expense, transaction, exc))
                continue
            logger.info("Auto-registered '%s' (%d)", expense.name, transaction.amount)
            report.outcomes.append(PersistOutcome(expense, transaction))

        self.marker_store.set(key, today_str)
        if report.registered_count:
            logger.info("Registered %d recurring expenses", report.registered_count)
        else:
            logger.info("No recurring expenses to register today")
        return report

    async def register_manually(
        self,
        expense: ExpenseInput,
        user_id: str,
        persist: PersistCallback,
        existing_transactions: Iterable[TransactionInput] = (),
        date_str: Optional[str] = None,
    ) -> Optional[Transaction]:
        """Register one expense for an explicit date, ignoring the daily marker.

        Returns None when a transaction for the same expense and date already
        exists.  Persist errors propagate to the caller.
        """
        expense = _coerce_expenses([expense])[0]
        target = date_str or format_date(self.clock())
        if is_already_registered(list(existing_transactions), expense.id, target):
            logger.info("'%s' already registered for %s", expense.name, target)
            return None
        transaction = materialize(expense, user_id, target)
        await _call_persist(persist, transaction, target)
        logger.info("Manually registered '%s' for %s", expense.name, target)
        return transaction
