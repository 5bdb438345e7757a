"""Pydantic Settings configuration models.

Config hierarchy (lowest to highest priority):
1. Pydantic defaults (in code below)
2. .env file (loaded by Pydantic Settings)
3. Environment variables (e.g., TRADEFLOW_SIMULATION__RISK_DESK_DELAY_MS=500)

The risk-rule table is fixed desk policy and lives in
tradeflow.risk.rules, not here.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
VALID_LOG_FORMATS = frozenset({"console", "json"})


class SimulationConfig(BaseModel):
    """Simulated desk timing. Delays only affect presentation pacing."""

    desk_name: str = Field(default="TRADEFLOW.SIM", min_length=1, max_length=40)
    risk_desk_delay_ms: int = Field(default=0, ge=0, le=10_000)
    staging_delay_ms: int = Field(default=0, ge=0, le=10_000)
    reject_delay_ms: int = Field(default=0, ge=0, le=10_000)


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Env var examples:
        TRADEFLOW_LOG_LEVEL=DEBUG
        TRADEFLOW_LOG_FORMAT=json
        TRADEFLOW_SIMULATION__STAGING_DELAY_MS=500
    """

    model_config = SettingsConfigDict(
        env_prefix="TRADEFLOW_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    simulation: SimulationConfig = SimulationConfig()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got {v}"
            )
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {sorted(VALID_LOG_FORMATS)}, got {v}"
            )
        return v
