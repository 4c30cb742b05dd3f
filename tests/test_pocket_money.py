from datetime import date

import pytest

from household_budget.models import Transaction
from household_budget.pocket_money import pocket_money_summary


def _spend(id, amount, day):
    return Transaction(id=id, type='expense', category='other', amount=amount, date=day)


@pytest.fixture
def spending():
    return [
        _spend(1, 100, '2025-02-20'),
        _spend(2, 50, '2025-03-02'),
        _spend(3, 150, '2025-03-09'),
        _spend(4, 999, '2025-04-01'),
    ]


def test_current_month_uses_days_so_far(spending):
    summary = pocket_money_summary(spending, 1000, 2025, 3, today=date(2025, 3, 10))

    assert summary['carried_over'] == 900
    assert summary['spent'] == 200
    assert summary['remaining'] == 700
    assert summary['remaining_percentage'] == pytest.approx(700 / 900 * 100)
    assert summary['average_daily'] == pytest.approx(20.0)
    assert summary['max_spending'] == 150
    assert summary['transaction_count'] == 2
    assert summary['days_elapsed'] == 10
    assert summary['days_remaining'] == 21


def test_past_month_counts_every_day(spending):
    summary = pocket_money_summary(spending, 1000, 2025, 2, today=date(2025, 3, 10))

    assert summary['carried_over'] == 1000
    assert summary['days_elapsed'] == 28
    assert summary['days_remaining'] == 0


def test_overspent_balance_reports_zero_percentage(spending):
    summary = pocket_money_summary(spending, 50, 2025, 3, today=date(2025, 3, 10))
    assert summary['carried_over'] == -50
    assert summary['remaining_percentage'] == 0.0
