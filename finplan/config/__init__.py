"""Configuration package."""

from finplan.config.settings import (
    AnalyticsSettings,
    AppSettings,
    RecordSourceSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AnalyticsSettings",
    "AppSettings",
    "RecordSourceSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
