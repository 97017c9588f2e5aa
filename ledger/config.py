"""
Centralized configuration management.
All environment variables and settings are defined here.
"""
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Ledger settings loaded from environment variables."""

    # Application
    app_name: str = Field(default="Personal Finance Ledger", alias="APP_NAME")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Import
    csv_delimiter: str = Field(default=";", alias="CSV_DELIMITER")
    auto_categorize: bool = Field(default=False, alias="AUTO_CATEGORIZE")

    # Recommendation
    fuzzy_max_distance: int = Field(default=2, alias="FUZZY_MAX_DISTANCE")

    # Storage
    database_path: str = Field(default="ledger.db", alias="DATABASE_PATH")
    owner_id: str = Field(default="local", alias="OWNER_ID")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v_upper

    @field_validator("csv_delimiter")
    @classmethod
    def validate_delimiter(cls, v):
        """Validate the delimiter is a single character."""
        if len(v) != 1:
            raise ValueError("CSV delimiter must be a single character")
        return v

    @field_validator("fuzzy_max_distance")
    @classmethod
    def validate_max_distance(cls, v):
        """Validate the edit-distance threshold used for fuzzy label matching."""
        if v < 0:
            raise ValueError("Fuzzy max distance cannot be negative")
        if v > 10:
            raise ValueError("Fuzzy max distance should not exceed 10")
        return v

    @field_validator("owner_id")
    @classmethod
    def validate_owner(cls, v):
        """Validate the owner id is not blank and strip it."""
        if not v.strip():
            raise ValueError("Owner id cannot be empty")
        return v.strip()

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"

    def ensure_directories(self) -> None:
        """Ensure the database parent directory exists."""
        Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get ledger settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.ensure_directories()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
