"""
Configuration Management for the Finance Planner

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Calculation modules take plain arguments (tax rate, month count); only the
orchestration layer reads settings and passes values down.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalyticsSettings(BaseSettings):
    """Defaults used by aggregation and scenario projection."""

    model_config = SettingsConfigDict(
        env_prefix="FINPLAN_",
        extra="ignore"
    )

    default_tax_rate: float = Field(
        default=0.25,
        ge=0.0,
        le=1.0,
        description="Flat tax rate applied to gross income without an explicit rate"
    )
    trend_months: int = Field(
        default=6,
        ge=1,
        le=60,
        description="Number of calendar months shown in the spending trend"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol used when formatting amounts for display"
    )


class StorageSettings(BaseSettings):
    """Local storage configuration for plans and fallback records."""

    model_config = SettingsConfigDict(
        env_prefix="FINPLAN_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="json",
        pattern="^(memory|json)$",
        description="Storage backend for plans and fallback records"
    )
    data_dir: str = Field(
        default="data",
        description="Directory holding the JSON storage files"
    )
    plans_filename: str = Field(
        default="financial_plans.json",
        description="File name for persisted plans"
    )
    records_filename: str = Field(
        default="records.json",
        description="File name for the local fallback record store"
    )

    @field_validator('plans_filename', 'records_filename')
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """File names must not smuggle in directories."""
        if Path(v).name != v:
            raise ValueError(f"Expected a bare file name, got: {v}")
        return v

    @property
    def plans_path(self) -> Path:
        return Path(self.data_dir) / self.plans_filename

    @property
    def records_path(self) -> Path:
        return Path(self.data_dir) / self.records_filename


class RecordSourceSettings(BaseSettings):
    """Primary record source (REST backend) behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="FINPLAN_SOURCE_",
        extra="ignore"
    )

    retry_attempts: int = Field(
        default=2,
        ge=1,
        le=10,
        description="Attempts against the primary source before falling back"
    )
    retry_max_wait_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Upper bound for the exponential wait between attempts"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local structured logs"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def analytics(self) -> AnalyticsSettings:
        return AnalyticsSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def record_source(self) -> RecordSourceSettings:
        return RecordSourceSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an
    "<name>_error" entry for every section that failed.
    """
    results = {}
    settings = get_settings()

    sections = {
        "analytics": lambda: settings.analytics,
        "storage": lambda: settings.storage,
        "record_source": lambda: settings.record_source,
        "app": lambda: settings.app,
    }

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
