import pandas as pd
import pytest

from household_budget.categories import CategoryBudget
from household_budget.models import RecurringExpense, Transaction
from household_budget.statistics import (
    MonthlyStatistics,
    day_net,
    fixed_expense_overview,
    fixed_occurrences_for_month,
    percent_change,
)


def _tx(id, amount, date, category='food', type='expense', user_id='user1', **extra):
    return Transaction(id=id, type=type, category=category, amount=amount, date=date, user_id=user_id, **extra)


def _fixed(id='fx-1', **overrides):
    values = dict(id=id, name='Rent', category='living', amount=1000, auto_register_date=5)
    values.update(overrides)
    return RecurringExpense(**values)


def test_percent_change_handles_missing_previous():
    assert percent_change(150, 100) == pytest.approx(50.0)
    assert percent_change(50, 100) == pytest.approx(-50.0)
    assert percent_change(123, 0) == 0
    assert percent_change(0, 0) == 0


def test_savings_are_split_from_spending():
    stats = MonthlyStatistics([
        _tx(1, 500, '2025-03-02', category='savings'),
        _tx(2, 300, '2025-03-03', category='food'),
        _tx(3, 2000, '2025-03-25', category='salary', type='income'),
    ])

    summary = stats.summary(2025, 3, include_fixed=True)

    assert summary.saving == 500
    assert summary.gross_expense == 800
    assert summary.net_expense == 300
    assert summary.income == 2000
    assert summary.balance == 1200
    assert summary.saving_rate == pytest.approx(60.0)
    assert summary.transaction_count == 3


def test_saving_rate_is_zero_without_income():
    stats = MonthlyStatistics([_tx(1, 300, '2025-03-03')])
    assert stats.summary(2025, 3).saving_rate == 0.0


def test_month_filter_accepts_unpadded_dates_and_skips_other_months():
    stats = MonthlyStatistics([
        _tx(1, 100, '2025-3-1'),
        _tx(2, 200, '2025-03-31'),
        _tx(3, 400, '2025-04-01'),
        _tx(4, 800, '2025-02-28'),
        _tx(5, 1600, 'garbage'),
    ])

    summary = stats.summary(2025, 3, include_fixed=False)

    assert summary.gross_expense == 300
    assert summary.transaction_count == 2


def test_fixed_occurrences_use_mid_month_window_and_escalation():
    expenses = [
        _fixed('rent', monthly_increase=100, base_date='2025-01-10'),
        _fixed('ended', is_unlimited=False, end_date='2025-03-10'),
        _fixed('late-start', is_unlimited=False, start_date='2025-03-20'),
        _fixed('running', is_unlimited=False, start_date='2025-03-01', end_date='2025-03-31'),
        _fixed('off', is_active=False),
    ]

    occurrences = fixed_occurrences_for_month(expenses, 2025, 3)

    assert [o.expense_id for o in occurrences] == ['rent', 'running']
    assert occurrences[0].amount == 1200
    assert occurrences[0].kind == 'fixed'
    assert occurrences[0].day == 5


def test_fixed_expense_overview_counts():
    overview = fixed_expense_overview([_fixed('a'), _fixed('b', amount=250), _fixed('c', is_active=False)], 2025, 3)
    assert overview == {'active_count': 2, 'inactive_count': 1, 'monthly_total': 1250}


def test_summary_adds_fixed_projections():
    stats = MonthlyStatistics(
        [_tx(1, 300, '2025-03-03')],
        [_fixed('rent'), _fixed('fund', category='savings', amount=200)],
    )

    with_fixed = stats.summary(2025, 3)
    without = stats.summary(2025, 3, include_fixed=False)

    assert with_fixed.gross_expense == 1500
    assert with_fixed.saving == 200
    assert with_fixed.net_expense == 1300
    assert with_fixed.fixed_count == 2
    assert without.gross_expense == 300


def test_skip_materialized_avoids_double_counting():
    registered = _tx(1, 1000, '2025-03-05', category='living', fixed_expense_id='rent', is_auto_registered=True)
    stats = MonthlyStatistics([registered], [_fixed('rent')])

    assert stats.summary(2025, 3).gross_expense == 2000
    assert stats.summary(2025, 3, skip_materialized=True).gross_expense == 1000
    assert stats.fixed_occurrences(2025, 3, skip_materialized=True) == []


def test_category_breakdown_uses_display_names():
    stats = MonthlyStatistics(
        [
            _tx(1, 300, '2025-03-03', category='food'),
            _tx(2, 50, '2025-03-04', category='food'),
            _tx(3, 70, '2025-03-05', category='mystery'),
            _tx(4, 999, '2025-03-05', category='salary', type='income'),
        ],
        [_fixed('rent', amount=1000)],
    )

    breakdown = stats.category_breakdown(2025, 3)

    assert breakdown.to_dict() == {'Household': 1000, 'Food': 350, 'Other': 70}
    assert list(breakdown.index) == ['Household', 'Food', 'Other']


def test_category_breakdown_empty_month():
    breakdown = MonthlyStatistics([]).category_breakdown(2025, 3)
    assert isinstance(breakdown, pd.Series)
    assert breakdown.empty


def test_member_breakdown_needs_more_than_one_member():
    single = MonthlyStatistics([_tx(1, 100, '2025-03-01'), _tx(2, 50, '2025-03-02')])
    assert single.member_breakdown(2025, 3) == {}

    shared = MonthlyStatistics([
        _tx(1, 100, '2025-03-01', user_id='alice'),
        _tx(2, 50, '2025-03-02', user_id='bob'),
        _tx(3, 25, '2025-03-03', user_id='alice'),
        _tx(4, 999, '2025-03-03', user_id='carol', type='income', category='salary'),
    ])
    assert shared.member_breakdown(2025, 3) == {'alice': 125, 'bob': 50}


def test_month_over_month_compares_with_previous_month():
    stats = MonthlyStatistics(
        [
            _tx(1, 1000, '2025-02-25', category='salary', type='income'),
            _tx(2, 200, '2025-02-10'),
            _tx(3, 1500, '2025-03-25', category='salary', type='income'),
            _tx(4, 100, '2025-03-10'),
            _tx(5, 300, '2025-03-11', category='savings'),
        ],
        [_fixed('rent', amount=5000)],
    )

    changes = stats.month_over_month(2025, 3)

    assert changes['income'] == pytest.approx(50.0)
    assert changes['expense'] == pytest.approx(100.0)
    assert changes['saving'] == 0


def test_month_over_month_wraps_the_year():
    stats = MonthlyStatistics([
        _tx(1, 100, '2024-12-10'),
        _tx(2, 300, '2025-01-10'),
    ])
    assert stats.month_over_month(2025, 1)['expense'] == pytest.approx(200.0)


def test_trailing_trend_is_oldest_first():
    stats = MonthlyStatistics([
        _tx(1, 1000, '2025-01-25', category='salary', type='income'),
        _tx(2, 1200, '2025-01-10'),
        _tx(3, 1000, '2025-03-25', category='salary', type='income'),
        _tx(4, 100, '2025-03-10', category='savings'),
    ])

    trend = stats.trailing_trend(2025, 3, months=3)

    assert list(trend['Month']) == ['2025-01', '2025-02', '2025-03']
    assert list(trend['Income']) == [1000, 0, 1000]
    assert list(trend['Expenses']) == [1200, 0, 0]
    assert list(trend['Saving']) == [0, 0, 100]
    assert list(trend['Net']) == [-200, 0, 900]
    assert list(trend['Direction']) == ['deficit', 'surplus', 'surplus']


def test_budget_status_counts_unregistered_fixed_expenses():
    stats = MonthlyStatistics(
        [
            _tx(1, 400, '2025-03-03', category='food'),
            _tx(2, 1000, '2025-03-05', category='living', fixed_expense_id='rent'),
        ],
        [_fixed('rent'), _fixed('phone', category='communication', amount=80)],
    )
    budget = CategoryBudget(monthly=1400, categories={'food': 300, 'living': 1500})

    status = stats.budget_status(2025, 3, budget).set_index('Category')

    assert status.loc['Food', 'Spent'] == 400
    assert bool(status.loc['Food', 'Over Budget'])
    assert status.loc['Household', 'Spent'] == 1000
    assert status.loc['Household', 'Remaining'] == 500
    assert status.loc['Total', 'Spent'] == 1480
    assert bool(status.loc['Total', 'Over Budget'])


def test_budget_status_without_total_row():
    stats = MonthlyStatistics([_tx(1, 150, '2025-03-03')])
    status = stats.budget_status(2025, 3, CategoryBudget(categories={'food': 300}))

    assert list(status['Category']) == ['Food']
    assert status.loc[0, 'Percent Used'] == pytest.approx(50.0)
    assert not status.loc[0, 'Over Budget']


def test_calendar_days_merge_transactions_and_projections():
    stats = MonthlyStatistics(
        [
            _tx(1, 2000, '2025-02-5', category='salary', type='income'),
            _tx(2, 300, '2025-02-05'),
            _tx(3, 999, '2025-03-05'),
        ],
        [_fixed('rent'), _fixed('late', auto_register_date=30), _fixed('off', is_active=False)],
    )

    days = stats.calendar_days(2025, 2)

    assert list(days) == [5]
    assert [item.kind for item in days[5]] == ['transaction', 'transaction', 'fixed']
    assert days[5][2].expense_id == 'rent'


def test_day_net_dispatches_on_kind():
    stats = MonthlyStatistics(
        [_tx(1, 2000, '2025-03-05', category='salary', type='income'), _tx(2, 300, '2025-03-05')],
        [_fixed('rent')],
    )
    assert day_net(stats.calendar_days(2025, 3)[5]) == 700
    assert day_net([]) == 0


def test_month_over_month_expense_uses_gross_spending():
    stats = MonthlyStatistics([
        _tx(1, 1000, '2025-02-10', category='savings'),
        _tx(2, 100, '2025-02-11'),
        _tx(3, 2000, '2025-03-10', category='savings'),
        _tx(4, 100, '2025-03-11'),
    ])

    changes = stats.month_over_month(2025, 3)

    assert changes['expense'] == pytest.approx(1000 / 1100 * 100)
    assert changes['saving'] == pytest.approx(100.0)
