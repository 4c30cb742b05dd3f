"""Category catalogue, display-name resolution and per-category budgets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .config import OTHER_CATEGORY_NAME, SAVINGS_CATEGORY_ID
from .models import EXPENSE, INCOME, _as_int


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    subcategories: tuple = ()


CATEGORIES: Dict[str, List[Category]] = {
    EXPENSE: [
        Category('food', 'Food', ('Dining out', 'Groceries', 'Delivery')),
        Category('transport', 'Transport', ('Public transit', 'Fuel', 'Taxi')),
        Category('living', 'Household', ('Mart', 'Pharmacy', 'Cleaning')),
        Category('medical', 'Medical', ('Hospital', 'Medicine', 'Checkup')),
        Category('culture', 'Culture', ('Movies', 'Books', 'Hobbies')),
        Category('fashion', 'Clothing & Beauty', ('Clothes', 'Cosmetics', 'Salon')),
        Category('communication', 'Communication', ('Mobile', 'Internet')),
        Category('gift', 'Allowance & Gifts'),
        Category(SAVINGS_CATEGORY_ID, 'Savings', ('Deposit', 'Installment savings', 'Investment')),
        Category('other', OTHER_CATEGORY_NAME),
    ],
    INCOME: [
        Category('salary', 'Salary'),
        Category('side', 'Side income', ('Investment', 'Side job')),
        Category('other', OTHER_CATEGORY_NAME),
    ],
}

PAYMENT_METHODS: Dict[str, str] = {
    'cash': 'Cash',
    'credit': 'Credit card',
    'debit': 'Debit card',
    'transfer': 'Bank transfer',
    'other': 'Other',
}


def categories_for(type_: str) -> List[Category]:
    return CATEGORIES.get(type_, [])


def get_category(type_: str, category_id: Optional[str]) -> Optional[Category]:
    for category in categories_for(type_):
        if category.id == category_id:
            return category
    return None


def resolve_category_name(category_id: Optional[str], type_: str = EXPENSE) -> str:
    """Map a category id to its display name; unknown ids resolve to "Other"."""
    category = get_category(type_, category_id)
    return category.name if category else OTHER_CATEGORY_NAME


def expense_category_ids() -> List[str]:
    return [category.id for category in categories_for(EXPENSE)]


@dataclass
class CategoryBudget:
    """Monthly spending limits keyed by expense category id.

    Unknown category ids are rejected at construction time.
    """

    monthly: int = 0
    categories: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        allowed = set(expense_category_ids())
        unknown = sorted(set(self.categories) - allowed)
        if unknown:
            raise ValueError(f"Unknown budget categories: {', '.join(unknown)}")
        self.monthly = _as_int(self.monthly)
        self.categories = {key: _as_int(value) for key, value in self.categories.items()}
        negatives = sorted(key for key, value in self.categories.items() if value < 0)
        if self.monthly < 0 or negatives:
            raise ValueError("Budget amounts must not be negative")

    @classmethod
    def from_settings(cls, settings: Mapping[str, object]) -> 'CategoryBudget':
        """Build from the stored settings document (``{'monthly': .., 'categories': {..}}``)."""
        budget = settings.get('budget', settings) if isinstance(settings, Mapping) else {}
        categories = budget.get('categories') or {}
        # Blank form fields are stored as empty strings; skip them
        cleaned = {key: value for key, value in categories.items() if value not in ('', None)}
        return cls(monthly=budget.get('monthly') or 0, categories=cleaned)

    def limit_for(self, category_id: str) -> Optional[int]:
        return self.categories.get(category_id)
