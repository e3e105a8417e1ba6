# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the campus
backend. Settings are loaded from environment variables with sensible
defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from campus.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Academic database configuration.

    The academic database stores:
    - Careers, cycles, students, subjects and academic periods
    - The enrollment ledger and subject seat quotas

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        url_override: Full connection URL, takes precedence over components.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        isolation_level: Transaction isolation level for PostgreSQL engines.
        echo: Log every SQL statement.
    """

    model_config = SettingsConfigDict(
        env_prefix="ACADEMIC_DB_",
        extra="ignore",
        populate_by_name=True,
    )

    user: str = "campus"
    password: SecretStr = SecretStr("campus_academic_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "university_academic"
    url_override: str | None = Field(
        default=None,
        validation_alias="ACADEMIC_DB_URL",
    )
    pool_size: int = 10
    max_overflow: int = 20
    isolation_level: Literal[
        "READ COMMITTED",
        "REPEATABLE READ",
        "SERIALIZABLE",
    ] = "READ COMMITTED"
    echo: bool = False

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class EnrollmentSettings(BaseSettings):
    """Enrollment ledger policy configuration.

    Attributes:
        revalidate_on_reassign: Require an active student and an active
            academic period when an enrollment changes subject.
        max_subject_quota: Upper bound for a subject's seat capacity.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENROLLMENT_",
        extra="ignore",
    )

    revalidate_on_reassign: bool = True
    max_subject_quota: int = 100


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Academic database settings.
        enrollment: Enrollment policy settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    enrollment: EnrollmentSettings = Field(default_factory=EnrollmentSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production" and self.database.url_override is None:
            default_password = "campus_academic_password"
            if self.database.password.get_secret_value() == default_password:
                raise ValueError(
                    "Academic database password must be changed from default in production. "
                    "Set ACADEMIC_DB_PASSWORD environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Mostly useful in tests that patch environment variables.
    """
    get_settings.cache_clear()
