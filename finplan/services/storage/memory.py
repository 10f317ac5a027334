"""
In-Memory Storage Implementations

Used by tests and as the default when no storage is configured. Every value
goes in and comes out as a deep copy so callers never share objects with the
store.
"""

from typing import Optional
from uuid import UUID

from finplan.models.audit import AuditEvent
from finplan.models.plan import Plan
from finplan.models.records import Expense, Income, RecordId
from finplan.services.storage.interface import (
    AuditStorageInterface,
    PlanStorageInterface,
    RecordSourceInterface,
)


class InMemoryPlanStorage(PlanStorageInterface):
    """Plans kept in a dict keyed by plan id (insertion ordered)."""

    def __init__(self, plans: Optional[list[Plan]] = None):
        self._plans: dict[UUID, Plan] = {}
        for plan in plans or []:
            self.save_plan(plan)

    def save_plan(self, plan: Plan) -> bool:
        self._plans[plan.id] = plan.model_copy(deep=True)
        return True

    def get_plan(self, plan_id: UUID) -> Optional[Plan]:
        plan = self._plans.get(plan_id)
        return plan.model_copy(deep=True) if plan else None

    def list_plans(self) -> list[Plan]:
        return [plan.model_copy(deep=True) for plan in self._plans.values()]

    def delete_plan(self, plan_id: UUID) -> bool:
        return self._plans.pop(plan_id, None) is not None


class InMemoryRecordSource(RecordSourceInterface):
    """Live records kept in two insertion-ordered dicts."""

    def __init__(
        self,
        expenses: Optional[list[Expense]] = None,
        incomes: Optional[list[Income]] = None,
    ):
        self._expenses: dict[RecordId, Expense] = {}
        self._incomes: dict[RecordId, Income] = {}
        for expense in expenses or []:
            self.save_expense(expense)
        for income in incomes or []:
            self.save_income(income)

    def list_expenses(self) -> list[Expense]:
        return [e.model_copy(deep=True) for e in self._expenses.values()]

    def list_incomes(self) -> list[Income]:
        return [i.model_copy(deep=True) for i in self._incomes.values()]

    def save_expense(self, expense: Expense) -> Expense:
        self._expenses[expense.id] = expense.model_copy(deep=True)
        return expense.model_copy(deep=True)

    def save_income(self, income: Income) -> Income:
        self._incomes[income.id] = income.model_copy(deep=True)
        return income.model_copy(deep=True)

    def delete_expense(self, expense_id: RecordId) -> bool:
        return self._expenses.pop(expense_id, None) is not None

    def delete_income(self, income_id: RecordId) -> bool:
        return self._incomes.pop(income_id, None) is not None

    def replace_all(self, expenses: list[Expense], incomes: list[Income]) -> None:
        """Overwrite both collections, e.g. to mirror the primary source."""
        self._expenses = {e.id: e.model_copy(deep=True) for e in expenses}
        self._incomes = {i.id: i.model_copy(deep=True) for i in incomes}


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event.model_copy(deep=True))
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        return [
            event.model_copy(deep=True)
            for event in self._events
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        if limit <= 0:
            return []
        return [event.model_copy(deep=True) for event in reversed(self._events[-limit:])]
