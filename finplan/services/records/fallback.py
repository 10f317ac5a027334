"""
Record Source with Local Fallback

DESIGN DECISION: Connectivity is reported per call, not kept in a
process-wide "API available" flag. Every operation returns a result that
says which source answered and whether the primary was reachable, so callers
can show an offline banner without any hidden cross-call coupling.

Flow for every call:
1. Ask the injected connectivity checker (if any); offline -> local store
2. Call the primary source, retrying on ConnectionError
3. On success, mirror the change into the local store
4. On failure, serve from / write to the local store and report offline
"""

from typing import Any, Callable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finplan.audit import AuditLogger
from finplan.models.records import Expense, Income, RecordId
from finplan.services.storage import ConnectionError, RecordSourceInterface


logger = structlog.get_logger(__name__)

ConnectivityChecker = Callable[[], bool]

PRIMARY = "primary"
FALLBACK = "fallback"


class SourceResult(BaseModel):
    """Outcome of one record-source call, including connectivity."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: Any = None
    source: str = Field(..., pattern="^(primary|fallback)$")
    online: bool
    error_message: Optional[str] = None


class RecordSnapshot(BaseModel):
    """Both live collections as loaded in one call."""

    expenses: list[Expense] = Field(default_factory=list)
    incomes: list[Income] = Field(default_factory=list)
    source: str = Field(..., pattern="^(primary|fallback)$")
    online: bool
    error_message: Optional[str] = None


class FallbackRecordSource:
    """
    Composes the primary record source (the REST backend) with a local store.

    The local store always ends up with the latest known state: successful
    primary reads are mirrored into it and writes are applied to it too.
    """

    def __init__(
        self,
        primary: RecordSourceInterface,
        fallback: RecordSourceInterface,
        connectivity_checker: Optional[ConnectivityChecker] = None,
        audit_logger: Optional[AuditLogger] = None,
        retry_attempts: int = 2,
        retry_max_wait_seconds: float = 1.0,
    ):
        self._primary = primary
        self._fallback = fallback
        self._connectivity_checker = connectivity_checker
        self._audit_logger = audit_logger
        self._call_primary = retry(
            stop=stop_after_attempt(retry_attempts),
            wait=wait_exponential(multiplier=0.1, max=retry_max_wait_seconds),
            retry=retry_if_exception_type(ConnectionError),
            reraise=True,
        )(self._invoke)

    @staticmethod
    def _invoke(operation: Callable[..., Any], *args: Any) -> Any:
        return operation(*args)

    def _primary_reachable(self) -> bool:
        if self._connectivity_checker is None:
            return True
        try:
            return bool(self._connectivity_checker())
        except ConnectionError:
            return False

    def _went_offline(self, operation: str, error_message: Optional[str]) -> None:
        logger.warning(
            "record_source_fallback",
            operation=operation,
            error=error_message,
        )
        if self._audit_logger:
            self._audit_logger.log_record_source_fallback(operation, error_message)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def load_records(self) -> RecordSnapshot:
        """Load expenses and incomes together from the best available source."""
        error_message = None

        if self._primary_reachable():
            try:
                expenses = self._call_primary(self._primary.list_expenses)
                incomes = self._call_primary(self._primary.list_incomes)
            except ConnectionError as e:
                error_message = str(e)
            else:
                self._fallback.replace_all(expenses, incomes)
                return RecordSnapshot(
                    expenses=expenses,
                    incomes=incomes,
                    source=PRIMARY,
                    online=True,
                )
        else:
            error_message = "Connectivity check failed"

        self._went_offline("load_records", error_message)
        return RecordSnapshot(
            expenses=self._fallback.list_expenses(),
            incomes=self._fallback.list_incomes(),
            source=FALLBACK,
            online=False,
            error_message=error_message,
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _write(
        self,
        operation: str,
        primary_call: Callable[..., Any],
        fallback_call: Callable[..., Any],
        *args: Any,
    ) -> SourceResult:
        error_message = None

        if self._primary_reachable():
            try:
                data = self._call_primary(primary_call, *args)
            except ConnectionError as e:
                error_message = str(e)
            else:
                fallback_call(*args)
                return SourceResult(data=data, source=PRIMARY, online=True)
        else:
            error_message = "Connectivity check failed"

        self._went_offline(operation, error_message)
        return SourceResult(
            data=fallback_call(*args),
            source=FALLBACK,
            online=False,
            error_message=error_message,
        )

    def save_expense(self, expense: Expense) -> SourceResult:
        return self._write(
            "save_expense", self._primary.save_expense, self._fallback.save_expense, expense
        )

    def save_income(self, income: Income) -> SourceResult:
        return self._write(
            "save_income", self._primary.save_income, self._fallback.save_income, income
        )

    def delete_expense(self, expense_id: RecordId) -> SourceResult:
        return self._write(
            "delete_expense", self._primary.delete_expense, self._fallback.delete_expense, expense_id
        )

    def delete_income(self, income_id: RecordId) -> SourceResult:
        return self._write(
            "delete_income", self._primary.delete_income, self._fallback.delete_income, income_id
        )

    def replace_all(self, expenses: list[Expense], incomes: list[Income]) -> SourceResult:
        """Overwrite both collections, e.g. when restoring a backup."""
        return self._write(
            "replace_all", self._primary.replace_all, self._fallback.replace_all, expenses, incomes
        )
