"""
Core Record Models for the Finance Planner

These models define the canonical shapes of the records the core consumes.
They are designed to:
1. Normalise the several historical record shapes into one
2. Keep aggregation total (unknown frequencies are accepted, not rejected)
3. Be serializable losslessly for backups
4. Accept the camelCase keys used by the REST backend and older backups

DESIGN DECISION: `active` is mandatory on both expenses and incomes and
defaults to True. Older income records without the flag are treated as active
before they ever reach the calculations.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


RecordId = Union[int, str]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Frequency(str, Enum):
    """
    Billing / recurrence cadence of a record.

    Records may still carry values outside this set; those are normalised
    as monthly amounts rather than rejected.
    """
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class ExpenseCategory(str, Enum):
    """Categories offered by the expense form. Stored categories are free text."""
    HOUSING = "Housing"
    TRANSPORTATION = "Transportation"
    SUBSCRIPTIONS = "Subscriptions"
    UTILITIES = "Utilities"
    HEALTHCARE = "Healthcare"
    OTHER = "Other"
    FOOD = "Food"
    ENTERTAINMENT = "Entertainment"


class GoalPriority(str, Enum):
    """Savings goal priority."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _new_record_id() -> str:
    return str(uuid4())


# =============================================================================
# MONEY RECORDS
# =============================================================================

class MoneyRecord(BaseModel):
    """
    Shape shared by expenses and incomes.

    `person` is a free-text label, not a foreign key. Matching is by exact
    string equality and an empty label only ever shows up under "all".
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: RecordId = Field(
        default_factory=_new_record_id,
        description="Opaque unique identifier, never reused"
    )
    person: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Household member the record belongs to"
    )
    name: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Display label"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Nominal amount per billing cycle"
    )
    frequency: str = Field(
        default=Frequency.MONTHLY.value,
        description="Billing cadence; unknown values normalise as monthly"
    )
    active: bool = Field(
        default=True,
        description="Inactive records are kept for history but not aggregated"
    )

    @field_validator('frequency', mode='before')
    @classmethod
    def coerce_frequency(cls, v: Any) -> Any:
        """Missing frequency means monthly; enum members are stored by value."""
        if v is None or v == "":
            return Frequency.MONTHLY.value
        if isinstance(v, Frequency):
            return v.value
        return v

    @field_validator('active', mode='before')
    @classmethod
    def coerce_missing_active(cls, v: Any) -> Any:
        """Older records carry an explicit null for the flag."""
        return True if v is None else v


class Expense(MoneyRecord):
    """A recurring (or one-off dated) household expense."""

    category: str = Field(
        default=ExpenseCategory.OTHER.value,
        max_length=100,
        description="Grouping label"
    )
    title: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Legacy display label used by older records"
    )
    spent_on: Optional[date] = Field(
        default=None,
        alias="date",
        description="When the money actually left the account"
    )

    @field_validator('category', mode='before')
    @classmethod
    def coerce_category(cls, v: Any) -> Any:
        if v is None or v == "":
            return ExpenseCategory.OTHER.value
        if isinstance(v, ExpenseCategory):
            return v.value
        return v

    @field_validator('spent_on', mode='before')
    @classmethod
    def strip_time_component(cls, v: Any) -> Any:
        """The backend sends full ISO timestamps; only the calendar day matters."""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v

    @property
    def label(self) -> str:
        return self.title or self.name or "Unnamed Expense"


class Income(MoneyRecord):
    """
    An income source.

    `tax_rate` of None means "use the default flat rate"; an explicit 0 is
    a real zero rate.
    """

    source: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Employer or origin of the income"
    )
    is_gross: bool = Field(
        default=True,
        alias="isGross",
        description="Whether the amount is before tax"
    )
    tax_rate: Optional[float] = Field(
        default=None,
        alias="taxRate",
        description="Flat rate deducted from gross income"
    )


# =============================================================================
# SUPPORTING ENTITIES (carried for backups)
# =============================================================================

class Person(BaseModel):
    """A household member as managed by the person screen."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: RecordId = Field(default_factory=_new_record_id)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    is_active: bool = Field(default=True, alias="isActive")
    description: Optional[str] = Field(default=None, max_length=1000)


class Goal(BaseModel):
    """A savings goal."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: RecordId = Field(default_factory=_new_record_id)
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
    )
    target_amount: Decimal = Field(..., ge=0, alias="targetAmount")
    current_amount: Decimal = Field(default=Decimal("0"), ge=0, alias="currentAmount")
    priority: GoalPriority = Field(default=GoalPriority.MEDIUM)

    @property
    def progress(self) -> float:
        """Fraction of the target reached, capped at 1."""
        if self.target_amount == 0:
            return 1.0
        return min(float(self.current_amount / self.target_amount), 1.0)

    @property
    def remaining_amount(self) -> Decimal:
        return max(self.target_amount - self.current_amount, Decimal("0"))
