"""Transaction creation, editing and filtering helpers."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .dates import DateLike, parse_date
from .models import EXPENSE, RecordId, Transaction, _as_int
from .recurrence import generate_transaction_id

_EDITABLE_FIELDS = {
    'type', 'category', 'subcategory', 'amount', 'date', 'payment_method', 'memo', 'user_id',
}


def create_transaction(form: Mapping[str, Any], user_id: str, id: Optional[RecordId] = None) -> Transaction:
    """Build a user-entered transaction from submitted form values.

    Non-numeric amounts are stored as 0, mirroring the entry form.
    """
    return Transaction(
        id=id if id is not None else generate_transaction_id(),
        type=form.get('type') or EXPENSE,
        category=form.get('category') or '',
        subcategory=form.get('subcategory') or '',
        amount=_as_int(form.get('amount')),
        date=form.get('date') or '',
        user_id=user_id,
        payment_method=form.get('payment_method') or form.get('paymentMethod') or '',
        memo=form.get('memo') or '',
    )


def update_transaction(transaction: Transaction, changes: Mapping[str, Any]) -> Transaction:
    """Return a copy of ``transaction`` with the editable fields replaced."""
    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot edit fields: {', '.join(sorted(unknown))}")
    updates = dict(changes)
    if 'amount' in updates:
        updates['amount'] = _as_int(updates['amount'])
    return replace(transaction, **updates)


def filter_transactions(
    transactions: Iterable[Transaction],
    start: DateLike = None,
    end: DateLike = None,
    category: Optional[str] = None,
    user_id: Optional[str] = None,
    type_: Optional[str] = None,
    keyword: Optional[str] = None,
) -> List[Transaction]:
    """Filter by inclusive date range, category, member, type and memo keyword."""
    start_date = parse_date(start)
    end_date = parse_date(end)
    needle = keyword.strip().lower() if keyword else ''

    result = []
    for tx in transactions:
        if start_date or end_date:
            tx_date = parse_date(tx.date)
            if tx_date is None:
                continue
            if start_date and tx_date < start_date:
                continue
            if end_date and tx_date > end_date:
                continue
        if category and tx.category != category:
            continue
        if user_id and tx.user_id != user_id:
            continue
        if type_ and tx.type != type_:
            continue
        if needle and needle not in (tx.memo or '').lower():
            continue
        result.append(tx)
    return result


def calculate_total(transactions: Iterable[Transaction]) -> int:
    return sum(tx.amount for tx in transactions)


def stats_by_category(transactions: Iterable[Transaction]) -> Dict[str, Dict[str, int]]:
    stats: Dict[str, Dict[str, int]] = {}
    for tx in transactions:
        entry = stats.setdefault(tx.category, {'count': 0, 'total': 0})
        entry['count'] += 1
        entry['total'] += tx.amount
    return stats
