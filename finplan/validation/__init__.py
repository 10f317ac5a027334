"""Validation of imported backups."""

from finplan.validation.validator import BackupValidator

__all__ = ["BackupValidator"]
