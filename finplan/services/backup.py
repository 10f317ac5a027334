"""
Backup Export / Import

A backup is one JSON document holding every collection the application
manages. The contract is round-trip fidelity: importing an exported backup
yields an equal bundle.

Import is validated in two stages (see finplan.validation) before any model
is built; a payload with errors is refused as a whole.
"""

import json
from typing import Any, Optional, Union

import structlog
from pydantic import ValidationError

from finplan.audit import AuditLogger
from finplan.models.backup import BackupBundle, ValidationIssue, ValidationResult
from finplan.services.storage import StorageError
from finplan.validation import BackupValidator


logger = structlog.get_logger(__name__)


class BackupRejectedError(StorageError):
    """Raised when an imported backup fails validation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        first = result.first_error() or "unknown error"
        super().__init__(
            f"Backup rejected with {result.error_count} error(s): {first}"
        )


def _counts(bundle: BackupBundle) -> dict[str, int]:
    return {
        "expenses": len(bundle.expenses),
        "incomes": len(bundle.incomes),
        "persons": len(bundle.persons),
        "goals": len(bundle.goals),
        "plans": len(bundle.plans),
    }


def _rejected(issue: ValidationIssue) -> ValidationResult:
    return ValidationResult(
        structure_valid=False,
        semantic_valid=False,
        is_valid=False,
        issues=[issue],
    )


def export_backup(
    bundle: BackupBundle,
    audit_logger: Optional[AuditLogger] = None,
    indent: Optional[int] = 2,
) -> str:
    """Serialise a bundle with the camelCase wire keys."""
    payload = bundle.model_dump_json(by_alias=True, indent=indent)
    if audit_logger:
        audit_logger.log_backup_exported(_counts(bundle))
    return payload


def import_backup(
    raw: Union[str, bytes, dict[str, Any]],
    validator: Optional[BackupValidator] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> BackupBundle:
    """
    Parse, validate and rebuild a backup.

    Args:
        raw: JSON text, or an already-parsed JSON object
        validator: Validator to use (a fresh BackupValidator by default)
        audit_logger: Records the import or the rejection, if given

    Raises:
        BackupRejectedError: If the payload is not JSON, fails validation,
            or cannot be turned into models.
    """
    validator = validator or BackupValidator()

    try:
        data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    except json.JSONDecodeError as e:
        result = _rejected(ValidationIssue(
            field="backup",
            issue_type="invalid_format",
            message=f"Invalid data format: {e.msg}",
            severity="error",
        ))
        _log_rejection(result, audit_logger)
        raise BackupRejectedError(result) from e

    result = validator.validate(data)
    if not result.is_valid:
        _log_rejection(result, audit_logger)
        raise BackupRejectedError(result)

    try:
        bundle = BackupBundle.model_validate(data)
    except ValidationError as e:
        result = _rejected(ValidationIssue(
            field="backup",
            issue_type="invalid_value",
            message=f"Backup could not be loaded: {e.error_count()} invalid field(s)",
            severity="error",
        ))
        _log_rejection(result, audit_logger)
        raise BackupRejectedError(result) from e

    for issue in result.issues:
        logger.info("backup_import_warning", field=issue.field, message=issue.message)

    if audit_logger:
        audit_logger.log_backup_imported(_counts(bundle))
    return bundle


def _log_rejection(result: ValidationResult, audit_logger: Optional[AuditLogger]) -> None:
    logger.warning("backup_rejected", errors=result.errors)
    if audit_logger:
        audit_logger.log_backup_rejected(result.errors)
