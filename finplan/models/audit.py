"""
Audit Models for the Finance Planner

Every change to a plan, every backup import/export and every fallback to
local storage is recorded as an audit event. This provides:
1. Traceability of how a plan reached its current shape
2. Debugging information when the backend is unreachable
3. Ability to reconstruct history

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Plan lifecycle
    PLAN_CREATED = "plan_created"
    PLAN_CREATION_FAILED = "plan_creation_failed"
    PLAN_RENAMED = "plan_renamed"
    PLAN_RECORD_TOGGLED = "plan_record_toggled"
    PLAN_PERSON_TOGGLED = "plan_person_toggled"
    PLAN_DELETED = "plan_deleted"

    # Backups
    BACKUP_EXPORTED = "backup_exported"
    BACKUP_IMPORTED = "backup_imported"
    BACKUP_REJECTED = "backup_rejected"

    # Record source connectivity
    RECORD_SOURCE_FALLBACK = "record_source_fallback"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'plan', 'backup', 'record_source')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.plan_created(plan_id, name, 12, 3)
        event = AuditEventBuilder.plan_deleted(plan_id)
    """

    @staticmethod
    def plan_created(
        plan_id: UUID,
        name: str,
        expense_count: int,
        income_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLAN_CREATED,
            entity_type="plan",
            entity_id=plan_id,
            description=f"Plan created: {name}",
            details={
                "name": name,
                "expense_count": expense_count,
                "income_count": income_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def plan_creation_failed(name: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLAN_CREATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="plan",
            description=f"Plan could not be created: {name[:200]}",
            error_message=reason,
            details={"name": name[:200]},
            is_user_action=True,
        )

    @staticmethod
    def plan_renamed(
        plan_id: UUID,
        old_name: str,
        new_name: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLAN_RENAMED,
            entity_type="plan",
            entity_id=plan_id,
            description=f"Plan renamed: {old_name} -> {new_name}",
            details={
                "old_name": old_name,
                "new_name": new_name,
            },
            is_user_action=True,
        )

    @staticmethod
    def plan_record_toggled(
        plan_id: UUID,
        kind: str,
        record_id: Any,
        enabled: bool,
    ) -> AuditEvent:
        state = "enabled" if enabled else "disabled"
        return AuditEvent(
            event_type=AuditEventType.PLAN_RECORD_TOGGLED,
            entity_type="plan",
            entity_id=plan_id,
            description=f"Plan {kind} {record_id} {state}",
            details={
                "kind": kind,
                "record_id": str(record_id),
                "enabled": enabled,
            },
            is_user_action=True,
        )

    @staticmethod
    def plan_person_toggled(
        plan_id: UUID,
        person: str,
        enabled: bool,
        entry_count: int,
    ) -> AuditEvent:
        state = "enabled" if enabled else "disabled"
        return AuditEvent(
            event_type=AuditEventType.PLAN_PERSON_TOGGLED,
            entity_type="plan",
            entity_id=plan_id,
            description=f"All entries for {person} {state} ({entry_count})",
            details={
                "person": person,
                "enabled": enabled,
                "entry_count": entry_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def plan_deleted(plan_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLAN_DELETED,
            entity_type="plan",
            entity_id=plan_id,
            description="Plan deleted",
            is_user_action=True,
        )

    @staticmethod
    def backup_exported(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_EXPORTED,
            entity_type="backup",
            description="Backup exported",
            details=counts,
            is_user_action=True,
        )

    @staticmethod
    def backup_imported(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_IMPORTED,
            entity_type="backup",
            description="Backup imported",
            details=counts,
            is_user_action=True,
        )

    @staticmethod
    def backup_rejected(errors: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="backup",
            description=f"Backup rejected with {len(errors)} errors",
            details={"errors": errors},
            is_user_action=True,
        )

    @staticmethod
    def record_source_fallback(
        operation: str,
        error_message: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SOURCE_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="record_source",
            description=f"Primary record source unavailable for {operation}; using local store",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
