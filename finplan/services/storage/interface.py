"""
Abstract Storage Interfaces

DESIGN DECISION: We define abstract interfaces for everything the core
persists or reads. This allows us to:
1. Swap the local JSON files for the REST backend or a database
2. Use in-memory storage for testing
3. Keep plan logic decoupled from where plans live

The interfaces are intentionally small: only the operations the planner
actually performs. All calls are synchronous.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from finplan.models.audit import AuditEvent
from finplan.models.plan import Plan
from finplan.models.records import Expense, Income, RecordId


class PlanStorageInterface(ABC):
    """
    Abstract interface for plan storage.

    Implementations store and return COPIES; a caller mutating a returned
    plan must save it again for the change to stick.
    """

    @abstractmethod
    def save_plan(self, plan: Plan) -> bool:
        """
        Insert or replace a plan.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def get_plan(self, plan_id: UUID) -> Optional[Plan]:
        """
        Retrieve a plan by ID.

        Returns:
            The plan if found, None otherwise
        """
        pass

    @abstractmethod
    def list_plans(self) -> list[Plan]:
        """All plans in the order they were first saved."""
        pass

    @abstractmethod
    def delete_plan(self, plan_id: UUID) -> bool:
        """
        Delete a plan by ID.

        Returns:
            True if a plan was removed, False if it did not exist
        """
        pass


class RecordSourceInterface(ABC):
    """
    Abstract interface for the live expense and income records.

    The REST backend and the local fallback store both implement this.
    """

    @abstractmethod
    def list_expenses(self) -> list[Expense]:
        pass

    @abstractmethod
    def list_incomes(self) -> list[Income]:
        pass

    @abstractmethod
    def save_expense(self, expense: Expense) -> Expense:
        """
        Insert or replace an expense.

        Returns:
            The stored expense

        Raises:
            ConnectionError: If the source cannot be reached
        """
        pass

    @abstractmethod
    def save_income(self, income: Income) -> Income:
        pass

    @abstractmethod
    def delete_expense(self, expense_id: RecordId) -> bool:
        pass

    @abstractmethod
    def delete_income(self, income_id: RecordId) -> bool:
        pass

    @abstractmethod
    def replace_all(self, expenses: list[Expense], incomes: list[Income]) -> None:
        """Overwrite both collections (used to mirror another source)."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """Events for one entity in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """The most recent events, newest first."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
