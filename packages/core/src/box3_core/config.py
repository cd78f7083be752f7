"""Configuration for box3-core.

Pydantic Settings-based configuration with environment variable support.
The matching tolerances are fixed constants in ``box3_core.matcher`` and are
not configurable.

Usage:
    from box3_core.config import load_config, configure_logging

    config = load_config()
    configure_logging(config.log_level, config.log_format)

    if config.dedup.enable_cross_category:
        ...
"""

import logging
import sys
from typing import Optional

import structlog
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class DedupConfig(BaseSettings):
    """Deduplication run settings.

    Environment Variables:
        BOX3_DEDUP_ENABLE_CROSS_CATEGORY: Run the cross-category review pass
        BOX3_DEDUP_TAX_YEARS: JSON list of tax years, e.g. '["2022", "2023"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="BOX3_DEDUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enable_cross_category: bool = Field(
        default=True,
        description="Run the advisory cross-category pass after deduplication",
    )
    tax_years: list[str] = Field(
        default_factory=list,
        description="Tax years to consider; empty means every year found in the data",
    )

    @field_validator("tax_years", mode="before")
    @classmethod
    def validate_tax_years(cls, v):
        """Accept integer years and reject anything that is not a year."""
        if v is None:
            return []
        years = [str(year).strip() for year in v]
        for year in years:
            if not (year.isdigit() and len(year) == 4):
                raise ValueError(f"Invalid tax year: {year!r}")
        return years


class Box3Config(BaseSettings):
    """Root configuration.

    Environment Variables:
        BOX3_ENV: Environment name (development, staging, production, test)
        BOX3_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        BOX3_LOG_FORMAT: "console" or "json"
    """

    model_config = SettingsConfigDict(
        env_prefix="BOX3_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log renderer: console or json")

    dedup: DedupConfig = Field(default_factory=DedupConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower().strip()
        if v_lower not in {"console", "json"}:
            raise ValueError(f"Invalid log format: {v}. Must be 'console' or 'json'")
        return v_lower

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"


def load_config(**overrides) -> Box3Config:
    """Load configuration from the environment.

    Raises:
        ConfigurationError: If a setting is invalid.
    """
    try:
        return Box3Config(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first["loc"])
        raise ConfigurationError(
            f"Invalid configuration: {first['msg']}",
            config_key=key or None,
            actual=first.get("input"),
            details={"error_count": e.error_count()},
        ) from e


def configure_logging(level: str = "INFO", log_format: Optional[str] = "console") -> None:
    """Configure structlog for command-line use. Logs go to stderr."""
    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
