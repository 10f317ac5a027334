"""
Services package.

Record access with fallback lives in finplan.services.records and backups
in finplan.services.backup; both depend on finplan.audit, which in turn
depends on storage, so only storage is re-exported here.
"""

from finplan.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    InMemoryAuditStorage,
    InMemoryPlanStorage,
    InMemoryRecordSource,
    JsonFilePlanStorage,
    JsonFileRecordSource,
    PlanStorageInterface,
    RecordSourceInterface,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "InMemoryAuditStorage",
    "InMemoryPlanStorage",
    "InMemoryRecordSource",
    "JsonFilePlanStorage",
    "JsonFileRecordSource",
    "PlanStorageInterface",
    "RecordSourceInterface",
    "StorageError",
]
