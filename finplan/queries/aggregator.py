"""
Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and pure.
Every function takes the records it needs as arguments, never mutates them,
and returns plain numbers or mappings ready to bind to a chart or table.

Two asymmetries are deliberate and must be kept:
- The monthly trend sums RAW amounts of dated expenses ("money that left the
  account that month"); every other aggregate uses normalised monthly rates.
- Income totals do not consult the income's `active` flag, while expense
  totals only count active expenses.
"""

from datetime import date
from typing import Iterable, Optional, Sequence, TypeVar, Union

from finplan.calculations.frequency import to_monthly
from finplan.calculations.net_income import DEFAULT_TAX_RATE, net_monthly
from finplan.models.records import Expense, Income, MoneyRecord
from finplan.models.summaries import HouseholdTotals, PersonSummary, TrendPoint


ALL_PERSONS = "all"

PersonSelection = Union[str, Iterable[str]]

RecordT = TypeVar("RecordT", bound=MoneyRecord)


def filter_by_persons(
    records: Sequence[RecordT],
    selection: PersonSelection,
) -> list[RecordT]:
    """
    Keep only the records belonging to the selected persons.

    The ALL_PERSONS sentinel returns every record. Records without a person
    label never match an explicit selection.
    """
    if isinstance(selection, str):
        if selection == ALL_PERSONS:
            return list(records)
        selected = {selection}
    else:
        selected = set(selection)

    return [
        record for record in records
        if record.person and record.person in selected
    ]


def sum_active_monthly(expenses: Iterable[Expense]) -> float:
    """Total monthly rate of the active expenses; inactive ones contribute 0."""
    return sum(
        (to_monthly(expense.amount, expense.frequency)
         for expense in expenses if expense.active),
        0.0,
    )


def sum_monthly_income(
    incomes: Iterable[Income],
    default_tax_rate: float = DEFAULT_TAX_RATE,
) -> float:
    """Total monthly take-home income, active flag not consulted."""
    return sum(
        (net_monthly(income, default_tax_rate) for income in incomes),
        0.0,
    )


def group_by_category(expenses: Iterable[Expense]) -> dict[str, float]:
    """Monthly rate per category over active expenses, in first-seen order."""
    groups: dict[str, float] = {}

    for expense in expenses:
        if not expense.active:
            continue
        monthly = to_monthly(expense.amount, expense.frequency)
        groups[expense.category] = groups.get(expense.category, 0.0) + monthly

    return groups


def _month_buckets(reference_date: date, month_count: int) -> list[TrendPoint]:
    """`month_count` consecutive calendar months ending at the reference month."""
    buckets = []
    reference_index = reference_date.year * 12 + (reference_date.month - 1)

    for offset in range(month_count - 1, -1, -1):
        year, month_zero = divmod(reference_index - offset, 12)
        first_day = date(year, month_zero + 1, 1)
        buckets.append(TrendPoint(
            label=first_day.strftime("%b %y"),
            year=year,
            month=month_zero + 1,
        ))

    return buckets


def monthly_trend(
    expenses: Iterable[Expense],
    month_count: int = 6,
    reference_date: Optional[date] = None,
) -> list[TrendPoint]:
    """
    Spending per calendar month over the last `month_count` months.

    Each active expense whose date falls inside the window adds its raw
    amount (not the normalised rate) to that month. Undated expenses are
    ignored.
    """
    if month_count <= 0:
        return []

    reference_date = reference_date or date.today()
    buckets = _month_buckets(reference_date, month_count)
    index = {(point.year, point.month): point for point in buckets}

    for expense in expenses:
        if not expense.active or expense.spent_on is None:
            continue
        point = index.get((expense.spent_on.year, expense.spent_on.month))
        if point is not None:
            point.total += float(expense.amount)

    return buckets


def person_summary(
    person: str,
    expenses: Sequence[Expense],
    incomes: Sequence[Income],
    default_tax_rate: float = DEFAULT_TAX_RATE,
) -> PersonSummary:
    """
    Monthly income, expenses and balance for one household member.

    Income includes every income of the person regardless of `active`.
    """
    person_expenses = [e for e in expenses if e.person == person]
    person_incomes = [i for i in incomes if i.person == person]

    income_total = sum_monthly_income(person_incomes, default_tax_rate)
    expense_total = sum_active_monthly(person_expenses)

    return PersonSummary(
        person=person,
        income=income_total,
        expenses=expense_total,
        balance=income_total - expense_total,
        expenses_by_category=group_by_category(person_expenses),
    )


def collect_persons(
    expenses: Iterable[Expense],
    incomes: Iterable[Income],
) -> list[str]:
    """Distinct non-empty person labels, expenses first, in first-seen order."""
    seen: dict[str, None] = {}
    for record in [*expenses, *incomes]:
        if record.person:
            seen.setdefault(record.person, None)
    return list(seen)


def household_summary(
    expenses: Sequence[Expense],
    incomes: Sequence[Income],
    default_tax_rate: float = DEFAULT_TAX_RATE,
) -> dict[str, PersonSummary]:
    """PersonSummary for every person appearing in either collection."""
    return {
        person: person_summary(person, expenses, incomes, default_tax_rate)
        for person in collect_persons(expenses, incomes)
    }


def household_totals(
    expenses: Iterable[Expense],
    incomes: Iterable[Income],
    default_tax_rate: float = DEFAULT_TAX_RATE,
) -> HouseholdTotals:
    """Normalised household-wide monthly totals."""
    income_total = sum_monthly_income(incomes, default_tax_rate)
    expense_total = sum_active_monthly(expenses)

    return HouseholdTotals(
        monthly_income=income_total,
        monthly_expenses=expense_total,
        monthly_balance=income_total - expense_total,
    )
