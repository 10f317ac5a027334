"""
Audit Logger

DESIGN DECISION: Every plan change, backup and storage fallback is logged.
This provides:
1. Traceability of how a plan reached its current state
2. Debugging capability when the backend is unreachable
3. A history the user can inspect

The audit logger:
- Never raises; a failing audit store must not break a plan edit
- Always writes a structured local log line, whether or not a store is set
"""

import logging
from typing import Optional
from uuid import UUID

import structlog

from finplan.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from finplan.services.storage import AuditStorageInterface, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_log_level(level: str = "INFO") -> None:
    """Route structlog output through stdlib logging at the given level."""
    logging.basicConfig(format="%(message)s", level=level.upper())
    logging.getLogger().setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store (for persistence and user visibility), if configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("finplan.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_plan_created(
        self,
        plan_id: UUID,
        name: str,
        expense_count: int,
        income_count: int,
    ) -> None:
        self.log(AuditEventBuilder.plan_created(
            plan_id=plan_id,
            name=name,
            expense_count=expense_count,
            income_count=income_count,
        ))

    def log_plan_creation_failed(self, name: str, reason: str) -> None:
        self.log(AuditEventBuilder.plan_creation_failed(name=name, reason=reason))

    def log_plan_renamed(self, plan_id: UUID, old_name: str, new_name: str) -> None:
        self.log(AuditEventBuilder.plan_renamed(
            plan_id=plan_id,
            old_name=old_name,
            new_name=new_name,
        ))

    def log_plan_record_toggled(
        self,
        plan_id: UUID,
        kind: str,
        record_id: object,
        enabled: bool,
    ) -> None:
        self.log(AuditEventBuilder.plan_record_toggled(
            plan_id=plan_id,
            kind=kind,
            record_id=record_id,
            enabled=enabled,
        ))

    def log_plan_person_toggled(
        self,
        plan_id: UUID,
        person: str,
        enabled: bool,
        entry_count: int,
    ) -> None:
        self.log(AuditEventBuilder.plan_person_toggled(
            plan_id=plan_id,
            person=person,
            enabled=enabled,
            entry_count=entry_count,
        ))

    def log_plan_deleted(self, plan_id: UUID) -> None:
        self.log(AuditEventBuilder.plan_deleted(plan_id))

    def log_backup_exported(self, counts: dict[str, int]) -> None:
        self.log(AuditEventBuilder.backup_exported(counts))

    def log_backup_imported(self, counts: dict[str, int]) -> None:
        self.log(AuditEventBuilder.backup_imported(counts))

    def log_backup_rejected(self, errors: list[str]) -> None:
        self.log(AuditEventBuilder.backup_rejected(errors))

    def log_record_source_fallback(
        self,
        operation: str,
        error_message: Optional[str],
    ) -> None:
        self.log(AuditEventBuilder.record_source_fallback(
            operation=operation,
            error_message=error_message,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
