"""
Tests for the Finance Planner models

Test strategy:
1. Unit tests for individual components (models, calculations, validators)
2. Integration tests for flows (with in-memory storage)
3. No real backend calls in tests (use in-memory sources)
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from finplan.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Expense,
    ExpenseCategory,
    Frequency,
    Goal,
    Income,
    Person,
    Plan,
    PlanExpense,
    PlanImpact,
    PlanIncome,
    RecordKind,
    ValidationIssue,
    ValidationResult,
)


class TestRecordModels:
    """Tests for expense and income models."""

    def test_expense_creation(self):
        """Test Expense model creation with defaults."""
        expense = Expense(id=1, name="Rent", amount=Decimal("1200"))
        assert expense.amount == Decimal("1200")
        assert expense.frequency == "monthly"
        assert expense.category == "Other"
        assert expense.active is True

    def test_expense_strips_whitespace(self):
        """Test that whitespace is stripped from person labels."""
        expense = Expense(person="  Alex  ", amount=10)
        assert expense.person == "Alex"

    def test_expense_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Expense(name="Test", amount=Decimal("-1"))

    def test_missing_frequency_defaults_to_monthly(self):
        """Test that null or empty frequencies become monthly."""
        assert Expense(amount=1, frequency=None).frequency == "monthly"
        assert Income(amount=1, frequency="").frequency == "monthly"

    def test_enum_frequency_stored_by_value(self):
        """Test that Frequency members are stored as plain strings."""
        expense = Expense(amount=1, frequency=Frequency.WEEKLY)
        assert expense.frequency == "weekly"

    def test_unknown_frequency_is_accepted(self):
        """Test that frequencies outside the enum are kept, not rejected."""
        expense = Expense(amount=1, frequency="fortnightly-ish")
        assert expense.frequency == "fortnightly-ish"

    def test_null_active_means_active(self):
        """Test that an explicit null active flag is read as True."""
        assert Expense(amount=1, active=None).active is True

    def test_category_enum_and_blank(self):
        """Test category coercion."""
        assert Expense(amount=1, category=ExpenseCategory.HOUSING).category == "Housing"
        assert Expense(amount=1, category="").category == "Other"

    def test_expense_date_from_iso_timestamp(self):
        """Test that full timestamps keep only the calendar day."""
        expense = Expense(amount=1, date="2024-03-15T10:30:00.000Z")
        assert expense.spent_on == date(2024, 3, 15)

    def test_expense_date_from_datetime(self):
        """Test that datetime values keep only the calendar day."""
        expense = Expense(amount=1, spent_on=datetime(2024, 5, 2, 23, 0))
        assert expense.spent_on == date(2024, 5, 2)

    def test_expense_label_prefers_title(self):
        """Test the display label fallback chain."""
        assert Expense(amount=1, title="T", name="N").label == "T"
        assert Expense(amount=1, name="N").label == "N"
        assert Expense(amount=1).label == "Unnamed Expense"

    def test_income_wire_aliases(self):
        """Test camelCase keys are accepted and emitted."""
        income = Income.model_validate(
            {"id": 7, "source": "Job", "amount": 1000, "isGross": False, "taxRate": 0.3}
        )
        assert income.is_gross is False
        assert income.tax_rate == 0.3

        dumped = income.model_dump(by_alias=True)
        assert dumped["isGross"] is False
        assert dumped["taxRate"] == 0.3

    def test_income_defaults(self):
        """Test Income defaults: gross, no explicit rate."""
        income = Income(source="Job", amount=100)
        assert income.is_gross is True
        assert income.tax_rate is None

    def test_generated_ids_are_unique(self):
        """Test that records without ids receive distinct ids."""
        assert Expense(amount=1).id != Expense(amount=1).id


class TestSupportingModels:
    """Tests for persons and goals."""

    def test_person_alias(self):
        """Test Person accepts isActive."""
        person = Person.model_validate({"id": 1, "name": "Alex", "isActive": False})
        assert person.is_active is False

    def test_person_requires_name(self):
        """Test that a blank person name is rejected."""
        with pytest.raises(ValueError):
            Person(name="   ")

    def test_goal_progress(self):
        """Test goal progress and remaining amount."""
        goal = Goal(name="Car", target_amount=Decimal("1000"), current_amount=Decimal("250"))
        assert goal.progress == pytest.approx(0.25)
        assert goal.remaining_amount == Decimal("750")

    def test_goal_progress_capped(self):
        """Test progress never exceeds 1 and remaining never goes negative."""
        goal = Goal(name="Trip", target_amount=Decimal("100"), current_amount=Decimal("150"))
        assert goal.progress == 1.0
        assert goal.remaining_amount == Decimal("0")


class TestPlanModels:
    """Tests for plan snapshot models."""

    def test_plan_expense_inclusion_needs_enabled_and_active(self):
        """Test the derived inclusion flag for expenses."""
        assert PlanExpense(amount=1, enabled=True, active=True).effectively_included
        assert not PlanExpense(amount=1, enabled=True, active=False).effectively_included
        assert not PlanExpense(amount=1, enabled=False, active=True).effectively_included

    def test_plan_income_inclusion_ignores_active(self):
        """Test the derived inclusion flag for incomes."""
        assert PlanIncome(amount=1, enabled=True, active=False).effectively_included
        assert not PlanIncome(amount=1, enabled=False).effectively_included

    def test_plan_requires_name(self):
        """Test that a plan cannot be nameless."""
        with pytest.raises(ValueError):
            Plan(name="")

    def test_plan_created_at_is_utc(self):
        """Test the creation timestamp is timezone-aware."""
        plan = Plan(name="Lean year")
        assert plan.created_at.tzinfo is not None
        assert plan.created_at.utcoffset() == timezone.utc.utcoffset(None)

    def test_plan_entries_by_kind(self):
        """Test entries() returns the matching snapshot list."""
        plan = Plan(
            name="P",
            expenses=[PlanExpense(id=1, amount=1)],
            incomes=[PlanIncome(id=2, amount=1)],
        )
        assert plan.entries(RecordKind.EXPENSE)[0].id == 1
        assert plan.entries(RecordKind.INCOME)[0].id == 2

    def test_plan_persons_first_seen_order(self):
        """Test persons are distinct, non-empty, in first-seen order."""
        plan = Plan(
            name="P",
            expenses=[
                PlanExpense(amount=1, person="Sam"),
                PlanExpense(amount=1, person=""),
                PlanExpense(amount=1, person="Alex"),
            ],
            incomes=[PlanIncome(amount=1, person="Sam"), PlanIncome(amount=1, person="Kim")],
        )
        assert plan.persons == ["Sam", "Alex", "Kim"]

    def test_plan_impact_not_found(self):
        """Test the zeroed impact for unknown plans is distinguishable."""
        impact = PlanImpact.not_found()
        assert impact.plan_found is False
        assert impact.monthly_savings == 0.0
        assert PlanImpact().plan_found is True


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.PLAN_CREATED,
            description="Plan created",
        )
        assert event.event_type == AuditEventType.PLAN_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.BACKUP_EXPORTED,
            description="Backup exported",
            details={"expenses": 3},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "backup_exported"
        assert log_dict["details"]["expenses"] == 3
        assert log_dict["entity_id"] is None

    def test_audit_event_builder_plan_created(self):
        """Test AuditEventBuilder.plan_created."""
        plan_id = uuid4()
        event = AuditEventBuilder.plan_created(plan_id, "Lean year", 4, 2)

        assert event.event_type == AuditEventType.PLAN_CREATED
        assert event.entity_id == plan_id
        assert event.details["expense_count"] == 4
        assert event.is_user_action is True

    def test_audit_event_builder_fallback_is_warning(self):
        """Test the record-source fallback event severity."""
        event = AuditEventBuilder.record_source_fallback("load_records", "timeout")
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "timeout"
        assert event.is_user_action is False

    def test_creation_failure_truncates_long_names(self):
        """Test that very long names still fit the description limit."""
        event = AuditEventBuilder.plan_creation_failed("x" * 1000, "too long")
        assert len(event.description) <= 500


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            structure_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="expenses",
                    issue_type="missing",
                    message="Missing expenses data",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.first_error() == "Missing expenses data"

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            structure_valid=True,
            semantic_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="expenses[0].frequency",
                    issue_type="unknown_value",
                    message="Unknown frequency",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0
        assert result.first_error() is None

    def test_issue_severity_pattern(self):
        """Test that unknown severities are rejected."""
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
