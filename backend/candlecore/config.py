"""Pydantic Settings configuration models.

Config hierarchy (lowest to highest priority):
1. Pydantic defaults (in code below)
2. .env file (loaded by Pydantic Settings)
3. Environment variables (e.g., CANDLE_STOCHASTIC__BAR_COUNT=9)
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from candlecore.engine.candle_series import DEFAULT_MAX_BACKFILL, CandleSeries
from candlecore.engine.indicators import MAX_SCALE, VALID_ROUNDING_MODES
from candlecore.engine.types import GapPolicy
from candlecore.utils.time import is_whole_millis

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
VALID_LOG_FORMATS = frozenset({"console", "json"})


class StochasticConfig(BaseModel):
    """Stochastic oscillator parameters and Decimal rounding rule."""

    bar_count: int = Field(default=14, ge=1)
    smoothing_size: int = Field(default=3, ge=1)
    epsilon: Decimal = Field(default=Decimal("1E-8"), gt=Decimal("0"))
    scale: int = Field(default=8, ge=0, le=MAX_SCALE)
    rounding: str = "ROUND_HALF_EVEN"

    @field_validator("rounding")
    @classmethod
    def validate_rounding(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_ROUNDING_MODES:
            raise ValueError(
                f"rounding must be one of {sorted(VALID_ROUNDING_MODES)}, got {v}"
            )
        return v


class CoreConfig(BaseSettings):
    """Top-level candle core configuration.

    Env var examples:
        CANDLE_LOG_LEVEL=DEBUG
        CANDLE_BASE_RESOLUTION=60          (seconds, or ISO 8601 "PT1M")
        CANDLE_GAP_POLICY=backfill
        CANDLE_MAX_BACKFILL=60
        CANDLE_STOCHASTIC__SMOOTHING_SIZE=5
    """

    model_config = SettingsConfigDict(
        env_prefix="CANDLE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    base_resolution: timedelta = timedelta(minutes=1)
    gap_policy: GapPolicy = GapPolicy.DROP
    max_backfill: int = Field(default=DEFAULT_MAX_BACKFILL, ge=1)
    stochastic: StochasticConfig = StochasticConfig()

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

    @field_validator("base_resolution")
    @classmethod
    def validate_base_resolution(cls, v: timedelta) -> timedelta:
        if not is_whole_millis(v):
            raise ValueError(
                f"base_resolution must be a positive whole number of "
                f"milliseconds, got {v}"
            )
        return v

    def new_series(self, symbol: str | None = None) -> CandleSeries:
        """Empty CandleSeries with the configured resolution and gap handling."""
        return CandleSeries(
            self.base_resolution,
            symbol=symbol,
            gap_policy=self.gap_policy,
            max_backfill=self.max_backfill,
        )
