"""Frequency normalisation and net income calculations."""

from finplan.calculations.frequency import (
    ANNUAL_FACTORS,
    MONTHLY_FACTORS,
    format_amount,
    parse_frequency,
    to_annual,
    to_monthly,
)
from finplan.calculations.net_income import (
    DEFAULT_TAX_RATE,
    effective_tax_rate,
    net_annual,
    net_monthly,
)

__all__ = [
    "ANNUAL_FACTORS",
    "DEFAULT_TAX_RATE",
    "MONTHLY_FACTORS",
    "effective_tax_rate",
    "format_amount",
    "net_annual",
    "net_monthly",
    "parse_frequency",
    "to_annual",
    "to_monthly",
]
