"""Read-side result models returned by the aggregator."""

from typing import Optional, Union

from pydantic import BaseModel, Field


class PersonSummary(BaseModel):
    """Monthly income/expense picture for one household member."""

    person: str
    income: float = 0.0
    expenses: float = 0.0
    balance: float = 0.0
    expenses_by_category: dict[str, float] = Field(default_factory=dict)


class TrendPoint(BaseModel):
    """One calendar-month bucket of the spending trend."""

    label: str = Field(..., description="Short month label, e.g. 'Mar 24'")
    year: int
    month: int = Field(..., ge=1, le=12)
    total: float = 0.0


class HouseholdTotals(BaseModel):
    """Household-wide normalised totals."""

    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    monthly_balance: float = 0.0

    @property
    def annual_income(self) -> float:
        return self.monthly_income * 12

    @property
    def annual_expenses(self) -> float:
        return self.monthly_expenses * 12

    @property
    def annual_balance(self) -> float:
        return self.monthly_balance * 12

    @property
    def savings_rate(self) -> float:
        """Share of income left over each month; 0 when there is no income."""
        if self.monthly_income <= 0:
            return 0.0
        return self.monthly_balance / self.monthly_income


class DashboardView(BaseModel):
    """Everything the dashboard renders for the current person selection."""

    selected_persons: Union[str, list[str]] = "all"
    totals: HouseholdTotals = Field(default_factory=HouseholdTotals)
    expenses_by_category: dict[str, float] = Field(default_factory=dict)
    trend: list[TrendPoint] = Field(default_factory=list)
    persons: dict[str, PersonSummary] = Field(default_factory=dict)
    online: bool = True
    source: str = "primary"
    error_message: Optional[str] = None
    currency_symbol: str = "$"
