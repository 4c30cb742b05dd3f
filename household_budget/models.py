"""Data objects shared by the recurrence, registration and statistics modules.

Records arrive from the document store as camelCase dictionaries.  The
``from_dict``/``to_dict`` helpers translate between that wire shape and the
snake_case dataclasses used throughout the package.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

EXPENSE = 'expense'
INCOME = 'income'
TRANSACTION_TYPES = (EXPENSE, INCOME)

TRANSACTION_KIND = 'transaction'
FIXED_KIND = 'fixed'

RecordId = Union[str, int, float]


def _as_int(value: Any, default: int = 0) -> int:
    """Coerce form/document values to whole currency units."""
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def _as_optional_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    return bool(value)


@dataclass
class RecurringExpense:
    """A fixed expense definition that materializes once a month."""

    id: RecordId
    name: str
    category: str
    amount: int
    auto_register_date: int
    monthly_increase: int = 0
    base_date: Optional[str] = None
    is_active: bool = True
    is_unlimited: Optional[bool] = None  # None behaves as True
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    subcategory: str = ''
    payment_method: str = ''
    memo: str = ''

    @property
    def is_time_bounded(self) -> bool:
        return self.is_unlimited is False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecurringExpense':
        return cls(
            id=data.get('id'),
            name=data.get('name') or '',
            category=data.get('category') or '',
            amount=_as_int(data.get('amount')),
            auto_register_date=_as_int(data.get('autoRegisterDate'), default=1),
            monthly_increase=_as_int(data.get('monthlyIncrease')),
            base_date=data.get('baseDate') or None,
            is_active=bool(data.get('isActive', False)),  # absent flag never registers
            is_unlimited=_as_optional_bool(data.get('isUnlimited')),
            start_date=data.get('startDate') or None,
            end_date=data.get('endDate') or None,
            subcategory=data.get('subcategory') or '',
            payment_method=data.get('paymentMethod') or '',
            memo=data.get('memo') or '',
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'subcategory': self.subcategory,
            'amount': self.amount,
            'autoRegisterDate': self.auto_register_date,
            'monthlyIncrease': self.monthly_increase,
            'baseDate': self.base_date,
            'isActive': self.is_active,
            'startDate': self.start_date,
            'endDate': self.end_date,
            'paymentMethod': self.payment_method,
            'memo': self.memo,
        }
        if self.is_unlimited is not None:
            payload['isUnlimited'] = self.is_unlimited
        return payload


@dataclass
class Transaction:
    """A concrete income or expense record, user-entered or auto-generated."""

    id: RecordId
    type: str               # 'income' | 'expense'
    category: str
    amount: int
    date: str               # 'YYYY-MM-DD'
    user_id: str = ''
    subcategory: str = ''
    payment_method: str = ''
    memo: str = ''
    fixed_expense_id: Optional[RecordId] = None
    is_auto_registered: bool = False
    kind: str = field(default=TRANSACTION_KIND, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.type not in TRANSACTION_TYPES:
            raise ValueError(f"Transaction type must be one of {TRANSACTION_TYPES}, got {self.type!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        return cls(
            id=data.get('id'),
            type=data.get('type') or EXPENSE,
            category=data.get('category') or '',
            amount=_as_int(data.get('amount')),
            date=data.get('date') or '',
            user_id=data.get('userId') or '',
            subcategory=data.get('subcategory') or '',
            payment_method=data.get('paymentMethod') or '',
            memo=data.get('memo') or '',
            fixed_expense_id=data.get('fixedExpenseId'),
            is_auto_registered=bool(data.get('isAutoRegistered', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'type': self.type,
            'category': self.category,
            'subcategory': self.subcategory,
            'amount': self.amount,
            'date': self.date,
            'userId': self.user_id,
            'paymentMethod': self.payment_method,
            'memo': self.memo,
        }
        if self.fixed_expense_id is not None:
            payload['fixedExpenseId'] = self.fixed_expense_id
            payload['isAutoRegistered'] = self.is_auto_registered
        return payload


@dataclass(frozen=True)
class FixedOccurrence:
    """Projection of a recurring expense onto a viewed month (never persisted)."""

    expense_id: RecordId
    name: str
    category: str
    amount: int
    day: int
    type: str = EXPENSE
    kind: str = field(default=FIXED_KIND, init=False)


Occurrence = Union[Transaction, FixedOccurrence]
