"""
Main Orchestrator for the Finance Planner

This module ties the components together and defines the end-to-end flows
the presentation layer drives:
1. Records (record source -> cache -> person filter -> aggregator -> dashboard)
2. Plans (live records -> snapshot -> toggle -> impact -> comparison)
3. Backups (collections -> JSON, JSON -> validate -> restore)

DESIGN DECISION: State is held by one plain service object with its
collaborators injected. There are no module-level flags; connectivity is
whatever the last record-source call reported.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence, Union
from uuid import UUID

import structlog

from finplan.audit import AuditLogger, configure_log_level
from finplan.calculations.frequency import format_amount
from finplan.calculations.net_income import DEFAULT_TAX_RATE
from finplan.config import Settings, get_settings
from finplan.filters import FilterState
from finplan.models.backup import BackupBundle
from finplan.models.plan import Plan, PlanImpact
from finplan.models.records import Expense, Goal, Income, Person, RecordId
from finplan.models.summaries import DashboardView
from finplan.plans import ScenarioEngine
from finplan.queries.aggregator import (
    group_by_category,
    household_summary,
    household_totals,
    monthly_trend,
)
from finplan.services.backup import export_backup, import_backup
from finplan.services.records import (
    PRIMARY,
    ConnectivityChecker,
    FallbackRecordSource,
    RecordSnapshot,
    SourceResult,
)
from finplan.services.storage import (
    InMemoryAuditStorage,
    InMemoryPlanStorage,
    InMemoryRecordSource,
    JsonFilePlanStorage,
    JsonFileRecordSource,
    PlanStorageInterface,
    RecordSourceInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


class FinanceService:
    """
    Session-level service behind every screen.

    Keeps the last loaded records, the person filter and the scenario engine
    together so views never reach into storage directly.
    """

    def __init__(
        self,
        record_source: FallbackRecordSource,
        scenario_engine: Optional[ScenarioEngine] = None,
        filter_state: Optional[FilterState] = None,
        audit_logger: Optional[AuditLogger] = None,
        default_tax_rate: float = DEFAULT_TAX_RATE,
        trend_months: int = 6,
        currency_symbol: str = "$",
    ):
        self._record_source = record_source
        self._audit_logger = audit_logger
        self._engine = scenario_engine or ScenarioEngine(
            audit_logger=audit_logger,
            default_tax_rate=default_tax_rate,
        )
        self._filter_state = filter_state or FilterState()
        self._default_tax_rate = default_tax_rate
        self._trend_months = trend_months
        self._currency_symbol = currency_symbol

        self._expenses: list[Expense] = []
        self._incomes: list[Income] = []
        self._persons: list[Person] = []
        self._goals: list[Goal] = []
        self._last_snapshot: Optional[RecordSnapshot] = None

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def engine(self) -> ScenarioEngine:
        return self._engine

    @property
    def filter_state(self) -> FilterState:
        return self._filter_state

    @property
    def audit_logger(self) -> Optional[AuditLogger]:
        return self._audit_logger

    @property
    def expenses(self) -> list[Expense]:
        return list(self._expenses)

    @property
    def incomes(self) -> list[Income]:
        return list(self._incomes)

    @property
    def persons(self) -> list[Person]:
        return list(self._persons)

    @property
    def goals(self) -> list[Goal]:
        return list(self._goals)

    @property
    def online(self) -> bool:
        """Whether the last record load reached the primary source."""
        return self._last_snapshot is None or self._last_snapshot.online

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def refresh(self) -> RecordSnapshot:
        """Reload both live collections from the record source."""
        snapshot = self._record_source.load_records()
        self._expenses = list(snapshot.expenses)
        self._incomes = list(snapshot.incomes)
        self._last_snapshot = snapshot
        logger.info(
            "records_loaded",
            source=snapshot.source,
            expenses=len(snapshot.expenses),
            incomes=len(snapshot.incomes),
        )
        return snapshot

    @staticmethod
    def _upsert(records: list, record: Any) -> None:
        for index, existing in enumerate(records):
            if existing.id == record.id:
                records[index] = record
                return
        records.append(record)

    def save_expense(self, expense: Expense) -> SourceResult:
        result = self._record_source.save_expense(expense)
        self._upsert(self._expenses, result.data if result.data is not None else expense)
        return result

    def save_income(self, income: Income) -> SourceResult:
        result = self._record_source.save_income(income)
        self._upsert(self._incomes, result.data if result.data is not None else income)
        return result

    def delete_expense(self, expense_id: RecordId) -> SourceResult:
        result = self._record_source.delete_expense(expense_id)
        self._expenses = [e for e in self._expenses if e.id != expense_id]
        return result

    def delete_income(self, income_id: RecordId) -> SourceResult:
        result = self._record_source.delete_income(income_id)
        self._incomes = [i for i in self._incomes if i.id != income_id]
        return result

    # -------------------------------------------------------------------------
    # Person filter and dashboard
    # -------------------------------------------------------------------------

    def toggle_person(self, person: str) -> None:
        self._filter_state.toggle(person)

    def select_all_persons(self) -> None:
        self._filter_state.select_all()

    def dashboard(self, reference_date: Optional[date] = None) -> DashboardView:
        """Aggregates for the current person selection."""
        expenses = self._filter_state.filter(self._expenses)
        incomes = self._filter_state.filter(self._incomes)
        selection = self._filter_state.selected_persons

        snapshot = self._last_snapshot
        return DashboardView(
            selected_persons=selection if isinstance(selection, str) else list(selection),
            totals=household_totals(expenses, incomes, self._default_tax_rate),
            expenses_by_category=group_by_category(expenses),
            trend=monthly_trend(expenses, self._trend_months, reference_date),
            persons=household_summary(expenses, incomes, self._default_tax_rate),
            online=self.online,
            source=snapshot.source if snapshot else PRIMARY,
            error_message=snapshot.error_message if snapshot else None,
            currency_symbol=self._currency_symbol,
        )

    def format_amount(self, value: Union[int, float, Decimal]) -> str:
        """Display string for an amount in the configured currency."""
        return format_amount(value, self._currency_symbol)

    # -------------------------------------------------------------------------
    # Plans (always against the unfiltered live records)
    # -------------------------------------------------------------------------

    def create_plan(self, name: str, description: str = "") -> UUID:
        return self._engine.create_plan(name, description, self._expenses, self._incomes)

    def plan_impact(self, plan_id: UUID) -> PlanImpact:
        return self._engine.compute_impact(plan_id, self._expenses, self._incomes)

    def compare_plans(
        self,
        active_plan_ids: Optional[Sequence[UUID]] = None,
    ) -> list[tuple[Plan, PlanImpact]]:
        return self._engine.compare_plans(self._expenses, self._incomes, active_plan_ids)

    # -------------------------------------------------------------------------
    # Backups
    # -------------------------------------------------------------------------

    def export_backup(self) -> str:
        bundle = BackupBundle(
            expenses=self._expenses,
            incomes=self._incomes,
            persons=self._persons,
            goals=self._goals,
            plans=self._engine.list_plans(),
        )
        return export_backup(bundle, audit_logger=self._audit_logger)

    def import_backup(self, raw: Union[str, bytes, dict]) -> BackupBundle:
        """
        Validate and restore a backup, replacing records and adding its plans.

        Raises:
            BackupRejectedError: If the payload fails validation.
            StorageError: If the restored data cannot be written.
        """
        bundle = import_backup(raw, audit_logger=self._audit_logger)

        try:
            self._record_source.replace_all(bundle.expenses, bundle.incomes)
            for plan in bundle.plans:
                self._engine.storage.save_plan(plan)
        except StorageError as e:
            logger.error("backup_restore_failed", error=str(e))
            if self._audit_logger:
                self._audit_logger.log_error(
                    error_type="backup_restore_failed",
                    error_message=str(e),
                )
            raise

        self._expenses = list(bundle.expenses)
        self._incomes = list(bundle.incomes)
        self._persons = list(bundle.persons)
        self._goals = list(bundle.goals)
        return bundle


def create_app_components(
    settings: Optional[Settings] = None,
    primary: Optional[RecordSourceInterface] = None,
    connectivity_checker: Optional[ConnectivityChecker] = None,
) -> FinanceService:
    """
    Factory function to create a fully wired FinanceService.

    Args:
        settings: Settings to use (the cached process settings by default)
        primary: The backend record source. Without one, the local store
                 answers as the primary.
        connectivity_checker: Optional probe consulted before each primary call

    Returns:
        FinanceService with plan, record and audit storage chosen by settings
    """
    settings = settings or get_settings()
    configure_log_level(settings.app.log_level)

    storage_settings = settings.storage
    plan_storage: PlanStorageInterface
    local_records: RecordSourceInterface

    if storage_settings.backend == "json":
        plan_storage = JsonFilePlanStorage(storage_settings.plans_path)
        local_records = JsonFileRecordSource(storage_settings.records_path)
    else:
        plan_storage = InMemoryPlanStorage()
        local_records = InMemoryRecordSource()

    audit_logger = AuditLogger(InMemoryAuditStorage())
    analytics = settings.analytics
    source_settings = settings.record_source

    record_source = FallbackRecordSource(
        primary=primary or local_records,
        fallback=local_records,
        connectivity_checker=connectivity_checker,
        audit_logger=audit_logger,
        retry_attempts=source_settings.retry_attempts,
        retry_max_wait_seconds=source_settings.retry_max_wait_seconds,
    )
    engine = ScenarioEngine(
        storage=plan_storage,
        audit_logger=audit_logger,
        default_tax_rate=analytics.default_tax_rate,
    )

    return FinanceService(
        record_source=record_source,
        scenario_engine=engine,
        audit_logger=audit_logger,
        default_tax_rate=analytics.default_tax_rate,
        trend_months=analytics.trend_months,
        currency_symbol=analytics.currency_symbol,
    )
