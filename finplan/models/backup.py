"""
Backup and Validation Models

A backup bundle carries everything the application exports so that an
import reproduces the same household exactly. Validation results describe
why a raw import payload was accepted or rejected.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from finplan.models.plan import Plan
from finplan.models.records import Expense, Goal, Income, Person


BACKUP_FORMAT_VERSION = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BackupBundle(BaseModel):
    """Everything needed to restore a household."""
    model_config = ConfigDict(populate_by_name=True)

    version: int = Field(default=BACKUP_FORMAT_VERSION, ge=1)
    exported_at: datetime = Field(
        default_factory=_utcnow,
        alias="exportedAt",
    )
    expenses: list[Expense] = Field(default_factory=list)
    incomes: list[Income] = Field(default_factory=list)
    persons: list[Person] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    plans: list[Plan] = Field(default_factory=list)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Location of the issue, e.g. 'expenses[2].amount'"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage backup validation.

    Stage 1: Structure (arrays present, ids, amounts, names)
    Stage 2: Semantics (duplicates, suspicious values)
    """

    validated_at: datetime = Field(default_factory=_utcnow)

    structure_valid: bool
    semantic_valid: bool
    is_valid: bool

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def errors(self) -> list[str]:
        """Error messages only, in the order they were found."""
        return [issue.message for issue in self.issues if issue.severity == "error"]

    def first_error(self) -> Optional[str]:
        errors = self.errors
        return errors[0] if errors else None
