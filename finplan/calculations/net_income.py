"""
Net Income

Applies a flat tax rate to gross income. The rate is not range-checked here:
a rate above 1 yields a negative net amount, which is mathematically
consistent and left for the form layer to prevent.
"""

from finplan.calculations.frequency import to_monthly
from finplan.models.records import Income


DEFAULT_TAX_RATE = 0.25


def effective_tax_rate(income: Income, default_tax_rate: float = DEFAULT_TAX_RATE) -> float:
    """The rate deducted from this income; 0 for net (non-gross) amounts."""
    if not income.is_gross:
        return 0.0
    if income.tax_rate is None:
        return default_tax_rate
    return income.tax_rate


def net_monthly(income: Income, default_tax_rate: float = DEFAULT_TAX_RATE) -> float:
    """Monthly take-home amount of one income."""
    monthly = to_monthly(income.amount, income.frequency)
    return monthly * (1 - effective_tax_rate(income, default_tax_rate))


def net_annual(income: Income, default_tax_rate: float = DEFAULT_TAX_RATE) -> float:
    return net_monthly(income, default_tax_rate) * 12
