"""
JSON File Storage Implementation

DESIGN DECISION: Plans and the offline copy of the live records are kept in
plain JSON files because:
1. They replace the browser's local storage with something inspectable
2. No database setup is needed for a single household
3. The files use the same camelCase shape as backups

TRADEOFFS:
- The whole file is rewritten on every save (fine for household volumes)
- No locking; one process owns the files

A file that cannot be read or parsed is treated as empty and logged, the
same way a corrupted local-storage key used to be discarded.
"""

import json
from pathlib import Path
from typing import Any, Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from finplan.models.plan import Plan
from finplan.models.records import Expense, Income, RecordId
from finplan.services.storage.interface import (
    PlanStorageInterface,
    RecordSourceInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


def _read_json(path: Path, empty: Any) -> Any:
    """Parse a JSON file, returning `empty` for missing, blank or corrupt files."""
    if not path.exists():
        return empty
    try:
        raw_text = path.read_text(encoding="utf-8").strip()
    except OSError as e:
        logger.warning("storage_file_unreadable", path=str(path), error=str(e))
        return empty
    if not raw_text:
        return empty
    try:
        return json.loads(raw_text)
    except json.JSONDecodeError as e:
        logger.warning("storage_file_corrupt", path=str(path), error=str(e))
        return empty


def _write_json(path: Path, payload: Any) -> None:
    """Write a JSON file, creating the parent directory if needed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(path)
    except OSError as e:
        raise StorageError(f"Failed to write {path}: {e}") from e


class JsonFilePlanStorage(PlanStorageInterface):
    """
    Plans stored as a JSON array in a single file.

    Entries that fail validation are skipped with a warning rather than
    making every other plan unreadable.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[Plan]:
        raw = _read_json(self._path, [])
        if not isinstance(raw, list):
            logger.warning("plan_file_not_a_list", path=str(self._path))
            return []

        plans = []
        for index, item in enumerate(raw):
            try:
                plans.append(Plan.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "plan_entry_invalid",
                    path=str(self._path),
                    index=index,
                    error_count=e.error_count(),
                )
        return plans

    def _dump(self, plans: list[Plan]) -> None:
        _write_json(
            self._path,
            [plan.model_dump(mode="json", by_alias=True) for plan in plans],
        )

    def save_plan(self, plan: Plan) -> bool:
        plans = self._load()
        for index, existing in enumerate(plans):
            if existing.id == plan.id:
                plans[index] = plan
                break
        else:
            plans.append(plan)
        self._dump(plans)
        return True

    def get_plan(self, plan_id: UUID) -> Optional[Plan]:
        for plan in self._load():
            if plan.id == plan_id:
                return plan
        return None

    def list_plans(self) -> list[Plan]:
        return self._load()

    def delete_plan(self, plan_id: UUID) -> bool:
        plans = self._load()
        remaining = [plan for plan in plans if plan.id != plan_id]
        if len(remaining) == len(plans):
            return False
        self._dump(remaining)
        return True


class JsonFileRecordSource(RecordSourceInterface):
    """
    Local record store used when the backend is unreachable.

    File shape: {"expenses": [...], "incomes": [...]}
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, list]:
        raw = _read_json(self._path, {})
        if not isinstance(raw, dict):
            logger.warning("record_file_not_an_object", path=str(self._path))
            raw = {}
        return {
            "expenses": self._parse(raw.get("expenses") or [], Expense),
            "incomes": self._parse(raw.get("incomes") or [], Income),
        }

    def _parse(self, items: list, model: type) -> list:
        records = []
        for index, item in enumerate(items):
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "record_entry_invalid",
                    path=str(self._path),
                    kind=model.__name__.lower(),
                    index=index,
                    error_count=e.error_count(),
                )
        return records

    def _dump(self, data: dict[str, list]) -> None:
        _write_json(self._path, {
            key: [record.model_dump(mode="json", by_alias=True) for record in records]
            for key, records in data.items()
        })

    def _upsert(self, key: str, record: Union[Expense, Income]) -> None:
        data = self._load()
        records = data[key]
        for index, existing in enumerate(records):
            if existing.id == record.id:
                records[index] = record
                break
        else:
            records.append(record)
        self._dump(data)

    def _remove(self, key: str, record_id: RecordId) -> bool:
        data = self._load()
        before = len(data[key])
        data[key] = [r for r in data[key] if r.id != record_id]
        if len(data[key]) == before:
            return False
        self._dump(data)
        return True

    def list_expenses(self) -> list[Expense]:
        return self._load()["expenses"]

    def list_incomes(self) -> list[Income]:
        return self._load()["incomes"]

    def save_expense(self, expense: Expense) -> Expense:
        self._upsert("expenses", expense)
        return expense.model_copy(deep=True)

    def save_income(self, income: Income) -> Income:
        self._upsert("incomes", income)
        return income.model_copy(deep=True)

    def delete_expense(self, expense_id: RecordId) -> bool:
        return self._remove("expenses", expense_id)

    def delete_income(self, income_id: RecordId) -> bool:
        return self._remove("incomes", income_id)

    def replace_all(self, expenses: list[Expense], incomes: list[Income]) -> None:
        self._dump({"expenses": list(expenses), "incomes": list(incomes)})
