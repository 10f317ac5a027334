"""
Frequency Normalisation

Converts an (amount, frequency) pair to its monthly or annual equivalent.

DESIGN DECISION: An unrecognised frequency is NOT an error. It is treated as
a monthly amount so that one malformed record never breaks a dashboard total.

Weekly and bi-weekly use 52.14 weeks / 12 months (4.345 and 2.17) rather than
a flat 4 and 2, which would under-count every year. No rounding happens here;
round only when formatting for display.
"""

from decimal import Decimal
from typing import Optional, Union

from finplan.models.records import Frequency


Number = Union[int, float, Decimal]


MONTHLY_FACTORS: dict[Frequency, float] = {
    Frequency.DAILY: 30.0,
    Frequency.WEEKLY: 4.345,
    Frequency.BIWEEKLY: 2.17,
    Frequency.MONTHLY: 1.0,
    Frequency.QUARTERLY: 1.0 / 3.0,
    Frequency.ANNUALLY: 1.0 / 12.0,
}

ANNUAL_FACTORS: dict[Frequency, float] = {
    Frequency.DAILY: 365.0,
    Frequency.WEEKLY: 52.0,
    Frequency.BIWEEKLY: 26.0,
    Frequency.MONTHLY: 12.0,
    Frequency.QUARTERLY: 4.0,
    Frequency.ANNUALLY: 1.0,
}


def parse_frequency(value: Optional[Union[str, Frequency]]) -> Optional[Frequency]:
    """Return the matching Frequency, or None for anything unrecognised."""
    if value is None:
        return None
    try:
        return Frequency(value)
    except (ValueError, TypeError):
        return None


def to_monthly(amount: Number, frequency: Optional[Union[str, Frequency]]) -> float:
    """
    Monthly equivalent of an amount billed at the given frequency.

    Quarterly and annual amounts are divided (by 3 and 12) rather than
    multiplied by a rounded fraction so that exact inputs stay exact.
    """
    value = float(amount)
    parsed = parse_frequency(frequency)

    if parsed == Frequency.QUARTERLY:
        return value / 3
    if parsed == Frequency.ANNUALLY:
        return value / 12
    if parsed is None:
        return value
    return value * MONTHLY_FACTORS[parsed]


def to_annual(amount: Number, frequency: Optional[Union[str, Frequency]]) -> float:
    """Annual equivalent of an amount billed at the given frequency."""
    parsed = parse_frequency(frequency)
    factor = ANNUAL_FACTORS[parsed] if parsed is not None else ANNUAL_FACTORS[Frequency.MONTHLY]
    return float(amount) * factor


def format_amount(value: Number, currency_symbol: str = "$") -> str:
    """Display formatting only: two decimals and thousands separators."""
    number = float(value)
    sign = "-" if number < 0 else ""
    return f"{sign}{currency_symbol}{abs(number):,.2f}"
