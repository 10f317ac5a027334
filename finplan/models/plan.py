"""
Plan and Projection Models

A plan is a named, frozen snapshot of the household's expenses and incomes
in which every entry can be switched on or off independently of the live
record's own `active` flag.

CRITICAL: Plan entries are COPIES. Nothing in a plan references a live
record object, so later edits to live records never leak into a plan.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from finplan.models.records import Expense, Income


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordKind(str, Enum):
    """Which snapshot list a plan entry lives in."""
    EXPENSE = "expense"
    INCOME = "income"


class PlanExpense(Expense):
    """Snapshot of an expense inside a plan."""

    enabled: bool = Field(
        default=True,
        description="Whether the plan keeps this expense"
    )

    @property
    def effectively_included(self) -> bool:
        """Counted toward the plan only if enabled AND active at snapshot time."""
        return self.enabled and self.active


class PlanIncome(Income):
    """Snapshot of an income inside a plan."""

    enabled: bool = Field(
        default=True,
        description="Whether the plan keeps this income"
    )

    @property
    def effectively_included(self) -> bool:
        return self.enabled


PlanEntry = Union[PlanExpense, PlanIncome]


class Plan(BaseModel):
    """
    A named what-if scenario.

    Created atomically with a full snapshot; there is no draft state.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique plan ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
    )
    description: str = Field(
        default="",
        max_length=1000,
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        alias="createdAt",
    )
    expenses: list[PlanExpense] = Field(default_factory=list)
    incomes: list[PlanIncome] = Field(default_factory=list)

    def entries(self, kind: RecordKind) -> list:
        """The snapshot list for one record kind."""
        if kind == RecordKind.EXPENSE:
            return self.expenses
        return self.incomes

    @property
    def persons(self) -> list[str]:
        """Distinct non-empty person labels in the plan, first-seen order."""
        seen: dict[str, None] = {}
        for entry in [*self.expenses, *self.incomes]:
            if entry.person:
                seen.setdefault(entry.person, None)
        return list(seen)


class PlanImpact(BaseModel):
    """
    Monthly/annual delta between a plan and the live baseline.

    `plan_found` is False for the zeroed result returned for unknown plan ids;
    callers must not read that as a neutral scenario.
    """

    plan_found: bool = True

    current_monthly_expenses: float = 0.0
    current_monthly_income: float = 0.0
    current_monthly_balance: float = 0.0

    plan_monthly_expenses: float = 0.0
    plan_monthly_income: float = 0.0
    plan_monthly_balance: float = 0.0

    monthly_savings: float = 0.0
    annual_savings: float = 0.0

    @classmethod
    def not_found(cls) -> "PlanImpact":
        return cls(plan_found=False)
