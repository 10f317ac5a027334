"""
Tests for the aggregation queries and the person filter.
"""

import pytest
from datetime import date
from decimal import Decimal

from finplan.filters import ALL_PERSONS, FilterState
from finplan.models import Expense, Income
from finplan.queries import (
    collect_persons,
    filter_by_persons,
    group_by_category,
    household_summary,
    household_totals,
    monthly_trend,
    person_summary,
    sum_active_monthly,
    sum_monthly_income,
)


@pytest.fixture
def expenses():
    return [
        Expense(id=1, person="Alex", name="Rent", category="Housing", amount=Decimal("1000")),
        Expense(id=2, person="Alex", name="Gym", category="Healthcare", amount=Decimal("50"),
                active=False),
        Expense(id=3, person="Sam", name="Car", category="Transportation",
                amount=Decimal("600"), frequency="quarterly"),
        Expense(id=4, person="", name="Shared", category="Housing", amount=Decimal("100")),
    ]


@pytest.fixture
def incomes():
    return [
        Income(id=10, person="Alex", source="Job", amount=Decimal("4000")),
        Income(id=11, person="Sam", source="Freelance", amount=Decimal("1000"),
               is_gross=False, active=False),
    ]


class TestPersonFilter:
    """Tests for filter_by_persons."""

    def test_all_returns_everything(self, expenses):
        assert len(filter_by_persons(expenses, ALL_PERSONS)) == 4

    def test_single_person_string(self, expenses):
        """A plain name other than 'all' selects that one person."""
        assert [e.id for e in filter_by_persons(expenses, "Sam")] == [3]

    def test_explicit_set(self, expenses):
        assert [e.id for e in filter_by_persons(expenses, ["Alex", "Sam"])] == [1, 2, 3]

    def test_unlabelled_records_never_match_explicit(self, expenses):
        """Records without a person only appear under 'all'."""
        assert all(e.person for e in filter_by_persons(expenses, ["Alex", "Sam", ""]))

    def test_unknown_person(self, expenses):
        assert filter_by_persons(expenses, ["Nobody"]) == []


class TestSums:
    """Tests for the normalised sums."""

    def test_inactive_expenses_excluded(self, expenses):
        """Inactive expenses contribute nothing to the monthly total."""
        # 1000 + 600/3 + 100; the inactive gym membership is skipped
        assert sum_active_monthly(expenses) == pytest.approx(1300.0)

    def test_empty_sum_is_zero(self):
        assert sum_active_monthly([]) == 0.0
        assert sum_monthly_income([]) == 0.0

    def test_income_ignores_active_flag(self, incomes):
        """Income totals count inactive incomes too."""
        assert sum_monthly_income(incomes) == pytest.approx(3000.0 + 1000.0)

    def test_income_custom_default_rate(self, incomes):
        assert sum_monthly_income(incomes[:1], default_tax_rate=0.5) == pytest.approx(2000.0)


class TestGroupByCategory:
    """Tests for category grouping."""

    def test_groups_monthly_amounts(self, expenses):
        groups = group_by_category(expenses)
        assert groups == {
            "Housing": pytest.approx(1100.0),
            "Transportation": pytest.approx(200.0),
        }

    def test_first_seen_order(self, expenses):
        assert list(group_by_category(expenses)) == ["Housing", "Transportation"]

    def test_inactive_only_category_absent(self, expenses):
        assert "Healthcare" not in group_by_category(expenses)


class TestMonthlyTrend:
    """Tests for the calendar-month spending trend."""

    def test_buckets_and_labels(self):
        """The window ends at the reference month, oldest first."""
        trend = monthly_trend([], month_count=3, reference_date=date(2024, 2, 10))
        assert [p.label for p in trend] == ["Dec 23", "Jan 24", "Feb 24"]
        assert [(p.year, p.month) for p in trend] == [(2023, 12), (2024, 1), (2024, 2)]
        assert all(p.total == 0 for p in trend)

    def test_sums_raw_amounts(self):
        """Dated expenses add their raw amount, not the monthly rate."""
        expenses = [
            Expense(amount=Decimal("1200"), frequency="annually", date="2024-02-03"),
            Expense(amount=Decimal("30"), frequency="daily", date="2024-02-20T08:00:00Z"),
            Expense(amount=Decimal("75"), date="2024-01-31"),
        ]
        trend = monthly_trend(expenses, month_count=2, reference_date=date(2024, 2, 28))
        assert trend[0].total == pytest.approx(75.0)
        assert trend[1].total == pytest.approx(1230.0)

    def test_ignores_undated_inactive_and_out_of_window(self):
        expenses = [
            Expense(amount=Decimal("10")),
            Expense(amount=Decimal("20"), date="2024-02-01", active=False),
            Expense(amount=Decimal("40"), date="2023-01-01"),
        ]
        trend = monthly_trend(expenses, month_count=6, reference_date=date(2024, 2, 1))
        assert sum(p.total for p in trend) == 0

    def test_non_positive_month_count(self):
        assert monthly_trend([], month_count=0) == []

    def test_default_window_length(self):
        assert len(monthly_trend([])) == 6


class TestPersonSummary:
    """Tests for per-person summaries."""

    def test_person_summary_values(self):
        """Income 4000 gross, expense 1200 monthly: net 3000, balance 1800."""
        expenses = [Expense(person="Alex", category="Housing", amount=Decimal("1200"))]
        incomes = [Income(person="Alex", source="Job", amount=Decimal("4000"))]

        summary = person_summary("Alex", expenses, incomes)

        assert summary.income == pytest.approx(3000.0)
        assert summary.expenses == pytest.approx(1200.0)
        assert summary.balance == pytest.approx(1800.0)
        assert summary.expenses_by_category == {"Housing": pytest.approx(1200.0)}

    def test_inactive_income_still_counts(self, expenses, incomes):
        summary = person_summary("Sam", expenses, incomes)
        assert summary.income == pytest.approx(1000.0)
        assert summary.expenses == pytest.approx(200.0)

    def test_unknown_person_is_zero(self, expenses, incomes):
        summary = person_summary("Nobody", expenses, incomes)
        assert summary.balance == 0.0
        assert summary.expenses_by_category == {}

    def test_collect_persons(self, expenses, incomes):
        """Distinct, non-empty, expenses first."""
        assert collect_persons(expenses, incomes) == ["Alex", "Sam"]

    def test_household_summary(self, expenses, incomes):
        summaries = household_summary(expenses, incomes)
        assert list(summaries) == ["Alex", "Sam"]
        assert summaries["Alex"].balance == pytest.approx(3000.0 - 1000.0)

    def test_household_totals(self, expenses, incomes):
        totals = household_totals(expenses, incomes)
        assert totals.monthly_income == pytest.approx(4000.0)
        assert totals.monthly_expenses == pytest.approx(1300.0)
        assert totals.monthly_balance == pytest.approx(2700.0)
        assert totals.annual_balance == pytest.approx(2700.0 * 12)
        assert totals.savings_rate == pytest.approx(2700.0 / 4000.0)

    def test_household_totals_without_income(self):
        totals = household_totals([Expense(amount=10)], [])
        assert totals.savings_rate == 0.0


class TestFilterState:
    """Tests for the person selection state machine."""

    def test_starts_on_all(self):
        state = FilterState()
        assert state.is_all
        assert state.selected_persons == ALL_PERSONS

    def test_toggle_from_all_selects_only_that_person(self):
        state = FilterState()
        state.toggle("Alex")
        assert state.selected_persons == ("Alex",)
        assert not state.is_all

    def test_toggle_adds_and_removes(self):
        state = FilterState()
        state.toggle("Alex")
        state.toggle("Sam")
        assert state.selected_persons == ("Alex", "Sam")
        state.toggle("Alex")
        assert state.selected_persons == ("Sam",)

    def test_last_person_cannot_be_removed(self):
        """The selection never becomes empty."""
        state = FilterState()
        state.toggle("Alex")
        state.toggle("Alex")
        assert state.selected_persons == ("Alex",)

    def test_toggle_all_resets(self):
        """Never 'all' and an explicit set at the same time."""
        state = FilterState()
        state.toggle("Alex")
        state.toggle(ALL_PERSONS)
        assert state.selected_persons == ALL_PERSONS

        state.toggle("Sam")
        state.select_all()
        assert state.is_all

    def test_blank_person_ignored(self):
        state = FilterState()
        state.toggle("")
        assert state.is_all

    def test_is_selected(self):
        state = FilterState()
        assert state.is_selected("Anyone")
        state.toggle("Alex")
        assert state.is_selected("Alex")
        assert not state.is_selected("Sam")

    def test_filter_records(self, expenses):
        state = FilterState()
        assert len(state.filter(expenses)) == 4
        state.toggle("Sam")
        assert [e.id for e in state.filter(expenses)] == [3]

    def test_repr(self):
        assert "all" in repr(FilterState())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
