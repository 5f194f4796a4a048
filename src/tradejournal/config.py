"""
Configuration management for the trade journal.

Uses pydantic-settings to load configuration from environment variables and .env files.
Environment variables will override .env file settings.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tradejournal.analytics.periods import Period
from tradejournal.analytics.records import DateField


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and .env files.

    Attributes:
        database_url: SQLAlchemy URL of the journal database
        default_date_field: Date field used for bucketing when a caller does not pick one
        default_period: Look-back window for the performance view
        recent_trades_limit: Number of trades shown in the dashboard overview
        recent_strategies_limit: Number of strategies shown in the dashboard overview
        log_level: Root log level
        log_format: "console" for colored output, "json" for structured output
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database configuration
    database_url: str = Field(
        default="sqlite:///./data/tradejournal.db",
        description="Journal database connection URL. Defaults to SQLite in data/ directory.",
    )

    # Aggregation defaults
    default_date_field: DateField = Field(
        default=DateField.EXIT,
        description="Date field driving equity curve, drawdown and calendar bucketing. Default: exit",
    )
    default_period: Period = Field(
        default=Period.DAYS_30,
        description="Performance look-back window (7d, 30d, 90d, 1y). Default: 30d",
    )
    recent_trades_limit: int = Field(
        default=10,
        gt=0,
        description="Number of most recent trades returned with the overview",
    )
    recent_strategies_limit: int = Field(
        default=10,
        gt=0,
        description="Number of newest strategies returned with the overview",
    )

    # Logging
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING or ERROR")
    log_format: Literal["console", "json"] = Field(default="console")


# Global settings instance
settings = Settings()
