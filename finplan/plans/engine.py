"""
Scenario Engine

Owns the lifecycle of "what-if" plans: create -> toggle -> rename -> delete.

CRITICAL GUARANTEES:
- A plan is created atomically with a full snapshot of the live records.
- Snapshots are copies. Later edits to live records never reach a plan.
- Only the toggle/rename operations below mutate a plan.
- compute_impact is pure: same inputs, same result, no hidden state.

Not-found cases are signalled through return values (False, 0, a zeroed
impact) and a warning log line, never as a fatal exception. Callers that want
a hard failure use require_plan / require_entry.
"""

from collections.abc import Mapping
from typing import Any, Optional, Sequence, Union
from uuid import UUID

import structlog
from pydantic import BaseModel, ValidationError

from finplan.audit import AuditLogger
from finplan.calculations.net_income import DEFAULT_TAX_RATE
from finplan.models.plan import (
    Plan,
    PlanEntry,
    PlanExpense,
    PlanImpact,
    PlanIncome,
    RecordKind,
)
from finplan.models.records import Expense, Income, RecordId
from finplan.plans.errors import (
    InvalidInputError,
    PlanCreationError,
    PlanNotFoundError,
    RecordNotFoundError,
)
from finplan.queries.aggregator import sum_active_monthly, sum_monthly_income
from finplan.services.storage import InMemoryPlanStorage, PlanStorageInterface


logger = structlog.get_logger(__name__)

RecordInput = Union[BaseModel, Mapping]


def _snapshot(record: RecordInput, model: type) -> PlanEntry:
    """Deep copy of a live record as an enabled plan entry."""
    if isinstance(record, BaseModel):
        data = record.model_dump()
    elif isinstance(record, Mapping):
        data = dict(record)
    else:
        raise PlanCreationError(
            f"Cannot snapshot {type(record).__name__}; expected a record"
        )
    data["enabled"] = True
    return model.model_validate(data)


def _parse_kind(kind: Union[RecordKind, str]) -> RecordKind:
    try:
        return RecordKind(kind)
    except ValueError:
        raise InvalidInputError(f"Unknown record kind: {kind!r}") from None


def project_impact(
    plan: Plan,
    live_expenses: Sequence[Expense],
    live_incomes: Sequence[Income],
    default_tax_rate: float = DEFAULT_TAX_RATE,
) -> PlanImpact:
    """
    Delta between a plan's projected balance and the live baseline.

    Baseline: active live expenses, all live incomes.
    Plan: only entries that are effectively included.
    """
    current_expenses = sum_active_monthly(live_expenses)
    current_income = sum_monthly_income(live_incomes, default_tax_rate)

    plan_expenses = sum_active_monthly(
        e for e in plan.expenses if e.effectively_included
    )
    plan_income = sum_monthly_income(
        (i for i in plan.incomes if i.effectively_included),
        default_tax_rate,
    )

    current_balance = current_income - current_expenses
    plan_balance = plan_income - plan_expenses
    monthly_savings = plan_balance - current_balance

    return PlanImpact(
        current_monthly_expenses=current_expenses,
        current_monthly_income=current_income,
        current_monthly_balance=current_balance,
        plan_monthly_expenses=plan_expenses,
        plan_monthly_income=plan_income,
        plan_monthly_balance=plan_balance,
        monthly_savings=monthly_savings,
        annual_savings=monthly_savings * 12,
    )


def derive_person_enabled(plan: Plan, person: str) -> bool:
    """
    Whether a person counts as "enabled" in a plan.

    Both kinds present: every expense AND every income must be enabled.
    One kind present: that kind alone decides. Neither: False.
    """
    expenses = [e for e in plan.expenses if e.person == person]
    incomes = [i for i in plan.incomes if i.person == person]

    if not expenses and not incomes:
        return False
    return all(e.enabled for e in expenses) and all(i.enabled for i in incomes)


class ScenarioEngine:
    """
    Creates, edits and evaluates plans.

    Plans live in a PlanStorageInterface (in-memory by default). The set of
    plans shown side by side for comparison is session state held here.
    """

    def __init__(
        self,
        storage: Optional[PlanStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        default_tax_rate: float = DEFAULT_TAX_RATE,
    ):
        self._storage = storage or InMemoryPlanStorage()
        self._audit_logger = audit_logger
        self._default_tax_rate = default_tax_rate
        self._active_plan_ids: list[UUID] = []

    @property
    def storage(self) -> PlanStorageInterface:
        return self._storage

    @property
    def active_plan_ids(self) -> list[UUID]:
        return list(self._active_plan_ids)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create_plan(
        self,
        name: str,
        description: str,
        live_expenses: Sequence[RecordInput],
        live_incomes: Sequence[RecordInput],
    ) -> UUID:
        """
        Snapshot every live expense and income into a new plan.

        Every entry starts enabled, whatever its `active` flag.

        Raises:
            PlanCreationError: If either collection is missing or not a
                list/tuple, the name is blank, or a record cannot be copied.
        """
        try:
            if not isinstance(live_expenses, (list, tuple)) or not isinstance(
                live_incomes, (list, tuple)
            ):
                raise PlanCreationError(
                    "Cannot create plan: expenses and incomes must be lists"
                )
            if not isinstance(name, str) or not name.strip():
                raise PlanCreationError("Cannot create plan: a name is required")

            plan = Plan(
                name=name,
                description=description or "",
                expenses=[_snapshot(e, PlanExpense) for e in live_expenses],
                incomes=[_snapshot(i, PlanIncome) for i in live_incomes],
            )
        except ValidationError as e:
            self._log_creation_failure(name, str(e))
            raise PlanCreationError(f"Cannot create plan: {e}") from e
        except PlanCreationError as e:
            self._log_creation_failure(name, str(e))
            raise

        self._storage.save_plan(plan)

        if self._audit_logger:
            self._audit_logger.log_plan_created(
                plan_id=plan.id,
                name=plan.name,
                expense_count=len(plan.expenses),
                income_count=len(plan.incomes),
            )

        return plan.id

    def _log_creation_failure(self, name: Any, reason: str) -> None:
        logger.warning("plan_creation_failed", name=str(name), reason=reason)
        if self._audit_logger:
            self._audit_logger.log_plan_creation_failed(str(name), reason)

    def get_plan(self, plan_id: UUID) -> Optional[Plan]:
        return self._storage.get_plan(plan_id)

    def require_plan(self, plan_id: UUID) -> Plan:
        """Like get_plan, but raises PlanNotFoundError."""
        plan = self._storage.get_plan(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        return plan

    def require_entry(
        self,
        plan_id: UUID,
        kind: Union[RecordKind, str],
        record_id: RecordId,
    ) -> PlanEntry:
        """One snapshot entry, raising if the plan or the entry is missing."""
        kind = _parse_kind(kind)
        plan = self.require_plan(plan_id)
        for entry in plan.entries(kind):
            if entry.id == record_id:
                return entry
        raise RecordNotFoundError(plan_id, kind.value, record_id)

    def list_plans(self) -> list[Plan]:
        return self._storage.list_plans()

    def rename_plan(
        self,
        plan_id: UUID,
        name: str,
        description: Optional[str] = None,
    ) -> bool:
        """
        Change a plan's name (and description, when given).

        Returns False if the plan does not exist.

        Raises:
            InvalidInputError: If the new name is blank, or the name or
                description is too long to be stored.
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("Plan name cannot be blank")

        plan = self._storage.get_plan(plan_id)
        if plan is None:
            logger.warning("plan_not_found", operation="rename", plan_id=str(plan_id))
            return False

        changes = {"name": name}
        if description is not None:
            changes["description"] = description
        try:
            renamed = Plan.model_validate({**plan.model_dump(), **changes})
        except ValidationError as e:
            logger.warning(
                "plan_rename_rejected",
                plan_id=str(plan_id),
                error_count=e.error_count(),
            )
            raise InvalidInputError(f"Cannot rename plan: {e}") from e

        self._storage.save_plan(renamed)

        if self._audit_logger:
            self._audit_logger.log_plan_renamed(plan.id, plan.name, renamed.name)

        return True

    def delete_plan(self, plan_id: UUID) -> bool:
        """
        Remove a plan and drop it from the comparison set.

        Idempotent. Returns True only if a plan was actually removed.
        """
        self._active_plan_ids = [pid for pid in self._active_plan_ids if pid != plan_id]
        removed = self._storage.delete_plan(plan_id)

        if removed and self._audit_logger:
            self._audit_logger.log_plan_deleted(plan_id)

        return removed

    # -------------------------------------------------------------------------
    # Toggles
    # -------------------------------------------------------------------------

    def toggle_record_enabled(
        self,
        plan_id: UUID,
        kind: Union[RecordKind, str],
        record_id: RecordId,
        enabled: bool,
    ) -> bool:
        """
        Set `enabled` on exactly one snapshot entry.

        Returns False (and changes nothing) if the plan or entry is missing.
        """
        kind = _parse_kind(kind)
        plan = self._storage.get_plan(plan_id)
        if plan is None:
            logger.warning("plan_not_found", operation="toggle_record", plan_id=str(plan_id))
            return False

        for entry in plan.entries(kind):
            if entry.id == record_id:
                entry.enabled = enabled
                self._storage.save_plan(plan)
                if self._audit_logger:
                    self._audit_logger.log_plan_record_toggled(
                        plan_id, kind.value, record_id, enabled
                    )
                return True

        logger.warning(
            "plan_entry_not_found",
            plan_id=str(plan_id),
            kind=kind.value,
            record_id=str(record_id),
        )
        return False

    def toggle_person_enabled(
        self,
        plan_id: UUID,
        person: str,
        enabled: bool,
    ) -> int:
        """
        Set `enabled` on every expense and income of one person.

        Returns the number of entries touched (0 if the plan is missing or
        the person has no entries).
        """
        plan = self._storage.get_plan(plan_id)
        if plan is None:
            logger.warning("plan_not_found", operation="toggle_person", plan_id=str(plan_id))
            return 0

        touched = 0
        for entry in [*plan.expenses, *plan.incomes]:
            if entry.person == person:
                entry.enabled = enabled
                touched += 1

        if touched:
            self._storage.save_plan(plan)
            if self._audit_logger:
                self._audit_logger.log_plan_person_toggled(
                    plan_id, person, enabled, touched
                )

        return touched

    def person_enabled(self, plan_id: UUID, person: str) -> bool:
        """Derived from the entries every time; False for unknown plans."""
        plan = self._storage.get_plan(plan_id)
        if plan is None:
            return False
        return derive_person_enabled(plan, person)

    def people_enabled_status(self, plan_id: UUID) -> dict[str, bool]:
        """Derived enabled state for every person in the plan."""
        plan = self._storage.get_plan(plan_id)
        if plan is None:
            return {}
        return {person: derive_person_enabled(plan, person) for person in plan.persons}

    # -------------------------------------------------------------------------
    # Projection and comparison
    # -------------------------------------------------------------------------

    def compute_impact(
        self,
        plan_id: UUID,
        live_expenses: Sequence[Expense],
        live_incomes: Sequence[Income],
    ) -> PlanImpact:
        """
        Impact of a plan against the live records.

        An unknown plan id yields a zeroed impact with plan_found=False.
        """
        plan = self._storage.get_plan(plan_id)
        if plan is None:
            return PlanImpact.not_found()
        return project_impact(plan, live_expenses, live_incomes, self._default_tax_rate)

    def toggle_plan_visibility(self, plan_id: UUID) -> bool:
        """
        Add or remove a plan from the comparison set.

        Returns whether the plan is shown after the call. Unknown plans are
        never added.
        """
        if plan_id in self._active_plan_ids:
            self._active_plan_ids.remove(plan_id)
            return False
        if self._storage.get_plan(plan_id) is None:
            logger.warning("plan_not_found", operation="toggle_visibility", plan_id=str(plan_id))
            return False
        self._active_plan_ids.append(plan_id)
        return True

    def get_active_plans(
        self,
        active_plan_ids: Optional[Sequence[UUID]] = None,
    ) -> list[Plan]:
        """
        Plans marked for comparison, in the order the ids are listed.

        Defaults to this engine's own comparison set. Unknown ids are skipped.
        """
        ids = self._active_plan_ids if active_plan_ids is None else active_plan_ids
        plans = []
        for plan_id in ids:
            plan = self._storage.get_plan(plan_id)
            if plan is not None:
                plans.append(plan)
        return plans

    def compare_plans(
        self,
        live_expenses: Sequence[Expense],
        live_incomes: Sequence[Income],
        active_plan_ids: Optional[Sequence[UUID]] = None,
    ) -> list[tuple[Plan, PlanImpact]]:
        """Each active plan paired with its impact, for side-by-side charts."""
        return [
            (plan, project_impact(plan, live_expenses, live_incomes, self._default_tax_rate))
            for plan in self.get_active_plans(active_plan_ids)
        ]
