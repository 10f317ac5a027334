"""
Data Models Package

This package contains all Pydantic models used by the Finance Planner.
All records reaching the calculations must conform to these schemas.
"""

from finplan.models.records import (
    Expense,
    ExpenseCategory,
    Frequency,
    Goal,
    GoalPriority,
    Income,
    MoneyRecord,
    Person,
    RecordId,
)
from finplan.models.plan import (
    Plan,
    PlanEntry,
    PlanExpense,
    PlanImpact,
    PlanIncome,
    RecordKind,
)
from finplan.models.summaries import (
    DashboardView,
    HouseholdTotals,
    PersonSummary,
    TrendPoint,
)
from finplan.models.backup import (
    BACKUP_FORMAT_VERSION,
    BackupBundle,
    ValidationIssue,
    ValidationResult,
)
from finplan.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "Expense",
    "ExpenseCategory",
    "Frequency",
    "Goal",
    "GoalPriority",
    "Income",
    "MoneyRecord",
    "Person",
    "RecordId",
    # Plan models
    "Plan",
    "PlanEntry",
    "PlanExpense",
    "PlanImpact",
    "PlanIncome",
    "RecordKind",
    # Summaries
    "DashboardView",
    "HouseholdTotals",
    "PersonSummary",
    "TrendPoint",
    # Backup models
    "BACKUP_FORMAT_VERSION",
    "BackupBundle",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
