"""
Two-Stage Backup Validation

DESIGN DECISION: An imported backup is checked in two distinct stages
before any of it is turned into models:

STAGE 1 - STRUCTURE VALIDATION:
- Top-level object shape
- Required arrays (expenses, incomes, persons)
- Required fields per record (id, amount, name/title, source)
- Plan entries carry their `enabled` flag

STAGE 2 - SEMANTIC VALIDATION:
- Duplicate ids within a collection
- Negative or non-numeric amounts
- Unknown frequencies (accepted, but reported)
- Tax rates outside 0..1 (accepted, but reported)

Stage 2 only runs when stage 1 passes.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them and the import is refused on any error.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from finplan.calculations.frequency import parse_frequency
from finplan.models.backup import ValidationIssue, ValidationResult


def _missing(record: dict, key: str) -> bool:
    value = record.get(key)
    return value is None or value == ""


def _parse_amount(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


class BackupValidator:
    """
    Validates a parsed backup payload (the JSON object, not the models).

    Stage 1: Structure
    Stage 2: Semantics
    """

    REQUIRED_COLLECTIONS = ("expenses", "incomes", "persons")

    def _validate_structure(self, data: Any) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Structure validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not isinstance(data, dict):
            issues.append(ValidationIssue(
                field="backup",
                issue_type="invalid_format",
                message="Invalid data format: not a JSON object",
                severity="error",
            ))
            return False, issues

        for collection in self.REQUIRED_COLLECTIONS:
            value = data.get(collection)
            if value is None:
                issues.append(ValidationIssue(
                    field=collection,
                    issue_type="missing",
                    message=f"Missing {collection} data",
                    severity="error",
                ))
            elif not isinstance(value, list):
                issues.append(ValidationIssue(
                    field=collection,
                    issue_type="invalid_format",
                    message=f"{collection.capitalize()} must be an array",
                    severity="error",
                ))

        issues.extend(self._check_records(data.get("expenses"), "expenses", "Expense"))
        issues.extend(self._check_records(data.get("incomes"), "incomes", "Income"))
        issues.extend(self._check_persons(data.get("persons")))

        goals = data.get("goals")
        if goals is not None and not isinstance(goals, list):
            issues.append(ValidationIssue(
                field="goals",
                issue_type="invalid_format",
                message="Goals must be an array",
                severity="error",
            ))

        plans = data.get("plans")
        if plans is not None:
            if not isinstance(plans, list):
                issues.append(ValidationIssue(
                    field="plans",
                    issue_type="invalid_format",
                    message="Plans must be an array",
                    severity="error",
                ))
            else:
                for index, plan in enumerate(plans):
                    issues.extend(self._check_plan(plan, index))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _check_records(
        self,
        records: Any,
        collection: str,
        label: str,
    ) -> list[ValidationIssue]:
        issues = []
        if not isinstance(records, list):
            return issues

        for index, record in enumerate(records):
            where = f"{collection}[{index}]"
            number = f"{label} #{index + 1}"

            if not isinstance(record, dict):
                issues.append(ValidationIssue(
                    field=where,
                    issue_type="invalid_format",
                    message=f"{number} is not an object",
                    severity="error",
                ))
                continue

            if _missing(record, "id"):
                issues.append(ValidationIssue(
                    field=f"{where}.id",
                    issue_type="missing",
                    message=f"{number} is missing an ID",
                    severity="error",
                ))
            if record.get("amount") is None:
                issues.append(ValidationIssue(
                    field=f"{where}.amount",
                    issue_type="missing",
                    message=f"{number} is missing an amount",
                    severity="error",
                ))

            if collection == "expenses":
                if _missing(record, "title") and _missing(record, "name"):
                    issues.append(ValidationIssue(
                        field=f"{where}.title",
                        issue_type="missing",
                        message=f"{number} is missing a name/title",
                        severity="error",
                    ))
            elif _missing(record, "source"):
                issues.append(ValidationIssue(
                    field=f"{where}.source",
                    issue_type="missing",
                    message=f"{number} is missing a source",
                    severity="error",
                ))

        return issues

    def _check_persons(self, persons: Any) -> list[ValidationIssue]:
        issues = []
        if not isinstance(persons, list):
            return issues

        for index, person in enumerate(persons):
            where = f"persons[{index}]"
            if not isinstance(person, dict):
                issues.append(ValidationIssue(
                    field=where,
                    issue_type="invalid_format",
                    message=f"Person #{index + 1} is not an object",
                    severity="error",
                ))
                continue
            if _missing(person, "id"):
                issues.append(ValidationIssue(
                    field=f"{where}.id",
                    issue_type="missing",
                    message=f"Person #{index + 1} is missing an ID",
                    severity="error",
                ))
            if _missing(person, "name"):
                issues.append(ValidationIssue(
                    field=f"{where}.name",
                    issue_type="missing",
                    message=f"Person #{index + 1} is missing a name",
                    severity="error",
                ))
        return issues

    def _check_plan(self, plan: Any, index: int) -> list[ValidationIssue]:
        issues = []
        where = f"plans[{index}]"
        number = f"Plan #{index + 1}"

        if not isinstance(plan, dict):
            return [ValidationIssue(
                field=where,
                issue_type="invalid_format",
                message=f"{number} is not an object",
                severity="error",
            )]

        if _missing(plan, "id"):
            issues.append(ValidationIssue(
                field=f"{where}.id",
                issue_type="missing",
                message=f"{number} is missing an ID",
                severity="error",
            ))
        if _missing(plan, "name"):
            issues.append(ValidationIssue(
                field=f"{where}.name",
                issue_type="missing",
                message=f"{number} is missing a name",
                severity="error",
            ))

        for collection, label in (("expenses", "Expense"), ("incomes", "Income")):
            entries = plan.get(collection)
            if entries is None:
                issues.append(ValidationIssue(
                    field=f"{where}.{collection}",
                    issue_type="missing",
                    message=f"{number} is missing {collection} array",
                    severity="error",
                ))
                continue
            if not isinstance(entries, list):
                issues.append(ValidationIssue(
                    field=f"{where}.{collection}",
                    issue_type="invalid_format",
                    message=f"{number} has invalid {collection} format",
                    severity="error",
                ))
                continue

            for entry_index, entry in enumerate(entries):
                entry_where = f"{where}.{collection}[{entry_index}]"
                entry_number = f"{number}, {label} #{entry_index + 1}"
                if not isinstance(entry, dict):
                    issues.append(ValidationIssue(
                        field=entry_where,
                        issue_type="invalid_format",
                        message=f"{entry_number} is not an object",
                        severity="error",
                    ))
                    continue
                if _missing(entry, "id"):
                    issues.append(ValidationIssue(
                        field=f"{entry_where}.id",
                        issue_type="missing",
                        message=f"{entry_number} is missing an ID",
                        severity="error",
                    ))
                if "enabled" not in entry:
                    issues.append(ValidationIssue(
                        field=f"{entry_where}.enabled",
                        issue_type="missing",
                        message=f"{entry_number} is missing enabled status",
                        severity="error",
                    ))

        return issues

    def _validate_semantic(self, data: dict) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Assumes stage 1 passed, so every collection is a list of objects.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        for collection in ("expenses", "incomes", "persons", "goals", "plans"):
            seen = set()
            for index, record in enumerate(data.get(collection) or []):
                if not isinstance(record, dict):
                    continue
                record_id = record.get("id")
                if record_id is None:
                    continue
                key = str(record_id)
                if key in seen:
                    issues.append(ValidationIssue(
                        field=f"{collection}[{index}].id",
                        issue_type="duplicate",
                        message=f"Duplicate id {record_id!r} in {collection}",
                        severity="error",
                    ))
                seen.add(key)

        for collection in ("expenses", "incomes"):
            for index, record in enumerate(data.get(collection) or []):
                issues.extend(self._check_values(record, f"{collection}[{index}]"))

        for plan_index, plan in enumerate(data.get("plans") or []):
            for collection in ("expenses", "incomes"):
                for index, entry in enumerate(plan.get(collection) or []):
                    issues.extend(self._check_values(
                        entry, f"plans[{plan_index}].{collection}[{index}]"
                    ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _check_values(self, record: dict, where: str) -> list[ValidationIssue]:
        issues = []

        if "amount" in record:
            amount = _parse_amount(record["amount"])
            if amount is None or not amount.is_finite():
                issues.append(ValidationIssue(
                    field=f"{where}.amount",
                    issue_type="invalid_value",
                    message=f"Amount {record['amount']!r} at {where} is not a number",
                    severity="error",
                ))
            elif amount < 0:
                issues.append(ValidationIssue(
                    field=f"{where}.amount",
                    issue_type="invalid_value",
                    message=f"Amount at {where} is negative",
                    severity="error",
                ))

        frequency = record.get("frequency")
        if frequency not in (None, "") and parse_frequency(frequency) is None:
            issues.append(ValidationIssue(
                field=f"{where}.frequency",
                issue_type="unknown_value",
                message=f"Unknown frequency {frequency!r} at {where}; treated as monthly",
                severity="warning",
            ))

        tax_rate = record.get("taxRate", record.get("tax_rate"))
        if tax_rate is not None:
            try:
                rate = float(tax_rate)
            except (TypeError, ValueError):
                rate = None
            if rate is None or not 0 <= rate <= 1:
                issues.append(ValidationIssue(
                    field=f"{where}.taxRate",
                    issue_type="suspicious_value",
                    message=f"Tax rate {tax_rate!r} at {where} is outside 0..1",
                    severity="warning",
                ))

        return issues

    def validate(self, data: Any) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Args:
            data: The parsed backup payload

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        structure_valid, structure_issues = self._validate_structure(data)
        all_issues.extend(structure_issues)

        semantic_valid = False
        if structure_valid:
            semantic_valid, semantic_issues = self._validate_semantic(data)
            all_issues.extend(semantic_issues)

        return ValidationResult(
            structure_valid=structure_valid,
            semantic_valid=semantic_valid,
            is_valid=structure_valid and semantic_valid,
            issues=all_issues,
        )
