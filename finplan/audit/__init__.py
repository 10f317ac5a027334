"""Audit logging package."""

from finplan.audit.logger import AuditLogger, configure_log_level

__all__ = ["AuditLogger", "configure_log_level"]
