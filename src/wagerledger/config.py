"""Configuration management for wagerledger."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Log levels accepted from the environment."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class WagerLedgerConfig(BaseSettings):
    """Process-wide settings for wagerledger."""

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.WARNING,
        description="Root log level: 'DEBUG', 'INFO', 'WARNING' or 'ERROR'",
        alias="WAGERLEDGER_LOG_LEVEL",
    )

    verbose: bool = Field(
        default=False,
        description="Print run counters after processing",
        alias="WAGERLEDGER_VERBOSE",
    )

    # Input parsing
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of input and output files",
        alias="WAGERLEDGER_ENCODING",
    )

    delimiter: str = Field(
        default=",",
        description="Field delimiter of input records",
        alias="WAGERLEDGER_DELIMITER",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


# Global configuration instance
config = WagerLedgerConfig()


def get_config() -> WagerLedgerConfig:
    """Get the current configuration."""
    return config


def update_config(**kwargs) -> None:
    """Update configuration settings."""
    global config
    for key, value in kwargs.items():
        if hasattr(config, key):
            setattr(config, key, value)
        else:
            raise ValueError(f"Unknown configuration option: {key}")


def reset_config() -> None:
    """Reset configuration to defaults."""
    global config
    config = WagerLedgerConfig()
