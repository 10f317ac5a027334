"""Aggregation queries over expense and income records."""

from finplan.queries.aggregator import (
    ALL_PERSONS,
    PersonSelection,
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

__all__ = [
    "ALL_PERSONS",
    "PersonSelection",
    "collect_persons",
    "filter_by_persons",
    "group_by_category",
    "household_summary",
    "household_totals",
    "monthly_trend",
    "person_summary",
    "sum_active_monthly",
    "sum_monthly_income",
]
