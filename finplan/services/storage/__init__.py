"""
Storage Services Package

Provides abstract interfaces and concrete implementations for plan, record
and audit storage. In-memory and JSON-file backends ship with the package;
the REST backend plugs in behind RecordSourceInterface.
"""

from finplan.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    PlanStorageInterface,
    RecordSourceInterface,
    StorageError,
)
from finplan.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryPlanStorage,
    InMemoryRecordSource,
)
from finplan.services.storage.json_file import (
    JsonFilePlanStorage,
    JsonFileRecordSource,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "PlanStorageInterface",
    "RecordSourceInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryPlanStorage",
    "InMemoryRecordSource",
    # JSON file implementation
    "JsonFilePlanStorage",
    "JsonFileRecordSource",
]
