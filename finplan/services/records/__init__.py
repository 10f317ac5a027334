"""Live record access with explicit connectivity state."""

from finplan.services.records.fallback import (
    FALLBACK,
    PRIMARY,
    ConnectivityChecker,
    FallbackRecordSource,
    RecordSnapshot,
    SourceResult,
)

__all__ = [
    "FALLBACK",
    "PRIMARY",
    "ConnectivityChecker",
    "FallbackRecordSource",
    "RecordSnapshot",
    "SourceResult",
]
