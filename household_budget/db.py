from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, List, Optional

from .config import get_db_path
from .models import RecordId, RecurringExpense, Transaction

logger = logging.getLogger(__name__)

DB_PATH_STR = get_db_path()

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY,
    type TEXT NOT NULL,
    category TEXT,
    subcategory TEXT,
    amount INTEGER NOT NULL,
    date TEXT NOT NULL,
    user_id TEXT,
    payment_method TEXT,
    memo TEXT,
    fixed_expense_id TEXT,
    is_auto_registered INTEGER NOT NULL DEFAULT 0,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_txn_date ON transactions (date);
CREATE INDEX IF NOT EXISTS ix_txn_fixed ON transactions (fixed_expense_id, date);
CREATE INDEX IF NOT EXISTS ix_txn_user ON transactions (user_id);

CREATE TABLE IF NOT EXISTS recurring_expenses (
    id TEXT PRIMARY KEY,
    document TEXT NOT NULL,
    updated_at TEXT
);
"""

TRANSACTION_COLUMNS = (
    "id, type, category, subcategory, amount, date, user_id, payment_method, memo, "
    "fixed_expense_id, is_auto_registered"
)


def _ensure_dirs() -> None:
    Path(DB_PATH_STR).parent.mkdir(parents=True, exist_ok=True)


# Ids are stored JSON-encoded so integer and string ids read back unchanged
def _encode_id(value: Optional[RecordId]) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value)


def _decode_id(value: Optional[str]) -> Optional[RecordId]:
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


@contextmanager
def connect() -> Iterator[sqlite3.Connection]:
    _ensure_dirs()
    conn = sqlite3.connect(DB_PATH_STR)
    try:
        yield conn
    finally:
        conn.close()


def init_db() -> None:
    with connect() as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()


def _row_to_transaction(row: tuple) -> Transaction:
    return Transaction(
        id=_decode_id(row[0]),
        type=row[1],
        category=row[2] or '',
        subcategory=row[3] or '',
        amount=int(row[4]),
        date=row[5],
        user_id=row[6] or '',
        payment_method=row[7] or '',
        memo=row[8] or '',
        fixed_expense_id=_decode_id(row[9]),
        is_auto_registered=bool(row[10]),
    )


def insert_transaction(transaction: Transaction) -> None:
    """Store a transaction; raises ``sqlite3.IntegrityError`` on a duplicate id."""
    record = (
        _encode_id(transaction.id),
        transaction.type,
        transaction.category,
        transaction.subcategory,
        transaction.amount,
        transaction.date,
        transaction.user_id,
        transaction.payment_method,
        transaction.memo,
        _encode_id(transaction.fixed_expense_id),
        int(transaction.is_auto_registered),
        datetime.now(timezone.utc).isoformat(),
    )
    with connect() as conn:
        conn.execute(
            f"INSERT INTO transactions ({TRANSACTION_COLUMNS}, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            record,
        )
        conn.commit()


async def persist_transaction(transaction: Transaction, date_str: str) -> None:
    """Persist callback for :class:`~household_budget.auto_register.AutoRegistrar`."""
    await asyncio.to_thread(insert_transaction, transaction)
    logger.debug("Stored transaction %s for %s", transaction.id, date_str)


def fetch_transactions(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    user_id: Optional[str] = None,
) -> List[Transaction]:
    where: List[str] = []
    params: List[Any] = []

    if start_date:
        where.append("date >= ?")
        params.append(start_date)
    if end_date:
        where.append("date <= ?")
        params.append(end_date)
    if user_id:
        where.append("user_id = ?")
        params.append(user_id)

    sql = f"SELECT {TRANSACTION_COLUMNS} FROM transactions"
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY date ASC, created_at ASC"

    with connect() as conn:
        rows = conn.execute(sql, params).fetchall()
    return [_row_to_transaction(row) for row in rows]


def delete_transaction(transaction_id: RecordId) -> bool:
    with connect() as conn:
        cursor = conn.execute("DELETE FROM transactions WHERE id = ?", (_encode_id(transaction_id),))
        conn.commit()
        return cursor.rowcount > 0


def upsert_recurring_expense(expense: RecurringExpense) -> None:
    with connect() as conn:
        conn.execute(
            "INSERT INTO recurring_expenses (id, document, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET document = excluded.document, updated_at = excluded.updated_at",
            (_encode_id(expense.id), json.dumps(expense.to_dict()), datetime.now(timezone.utc).isoformat()),
        )
        conn.commit()


def fetch_recurring_expenses(active_only: bool = False) -> List[RecurringExpense]:
    with connect() as conn:
        rows = conn.execute("SELECT document FROM recurring_expenses ORDER BY rowid ASC").fetchall()
    expenses = [RecurringExpense.from_dict(json.loads(row[0])) for row in rows]
    if active_only:
        expenses = [expense for expense in expenses if expense.is_active]
    return expenses


def delete_recurring_expense(expense_id: RecordId) -> bool:
    """Remove a definition; transactions it generated are kept."""
    with connect() as conn:
        cursor = conn.execute("DELETE FROM recurring_expenses WHERE id = ?", (_encode_id(expense_id),))
        conn.commit()
        return cursor.rowcount > 0
