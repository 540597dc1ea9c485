"""
Configuration Management for Hisaab

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Each concern gets its own settings class with its own env prefix, so a
missing value is reported against the component that needs it.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local JSON storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HISAAB_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the JSON collections"
    )

    # Collection file names within data_dir
    users_file: str = Field(
        default="users.json",
        description="File name of the users collection"
    )
    invoices_file: str = Field(
        default="invoices.json",
        description="File name of the invoices collection"
    )

    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a read or write before giving up"
    )

    @field_validator('users_file', 'invoices_file')
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """Collection names are plain file names, not paths."""
        if not v or Path(v).name != v:
            raise ValueError(f"Expected a plain file name, got: {v!r}")
        return v

    @property
    def users_path(self) -> Path:
        return self.data_dir / self.users_file

    @property
    def invoices_path(self) -> Path:
        return self.data_dir / self.invoices_file


class ExportSettings(BaseSettings):
    """PDF export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HISAAB_EXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    company_name: str = Field(
        default="Hisaab Kitaab",
        description="Title printed in the document header"
    )
    subtitle: str = Field(
        default="Medical Invoice",
        description="Line printed under the title"
    )
    currency_symbol: str = Field(
        default="Rs",
        max_length=5,
        description="Currency prefix for amounts"
    )
    footer_text: str = Field(
        default="All Rights Reserved",
        description="Footer printed on every page"
    )
    output_dir: Path = Field(
        default=Path("exports"),
        description="Directory PDFs are written to"
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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_json: bool = Field(
        default=False,
        description="Render log lines as JSON instead of console text"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def export(self) -> ExportSettings:
        return ExportSettings()

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

    for name in ("storage", "export", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
