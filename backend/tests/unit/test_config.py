"""Tests for configuration system."""

from __future__ import annotations

import os
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from candlecore.config import CoreConfig, StochasticConfig
from candlecore.engine.types import GapPolicy


class TestDefaultConfig:
    """Test that default configuration loads correctly."""

    def test_default_config_loads(self) -> None:
        config = CoreConfig()
        assert config.log_level == "INFO"
        assert config.log_format == "console"
        assert config.base_resolution == timedelta(minutes=1)
        assert config.gap_policy is GapPolicy.DROP
        assert config.max_backfill == 1440

    def test_default_stochastic(self) -> None:
        config = CoreConfig()
        assert config.stochastic.bar_count == 14
        assert config.stochastic.smoothing_size == 3
        assert config.stochastic.epsilon == Decimal("1E-8")
        assert config.stochastic.scale == 8
        assert config.stochastic.rounding == "ROUND_HALF_EVEN"

    def test_epsilon_is_decimal(self) -> None:
        assert isinstance(CoreConfig().stochastic.epsilon, Decimal)


class TestStochasticValidation:
    """Test stochastic parameter bounds."""

    def test_bar_count_too_low(self) -> None:
        with pytest.raises(ValidationError):
            StochasticConfig(bar_count=0)

    def test_smoothing_size_too_low(self) -> None:
        with pytest.raises(ValidationError):
            StochasticConfig(smoothing_size=0)

    def test_epsilon_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            StochasticConfig(epsilon=Decimal("0"))

    def test_scale_bounds(self) -> None:
        with pytest.raises(ValidationError):
            StochasticConfig(scale=-1)
        with pytest.raises(ValidationError):
            StochasticConfig(scale=21)

    def test_rounding_is_normalized(self) -> None:
        assert StochasticConfig(rounding="round_down").rounding == "ROUND_DOWN"

    def test_invalid_rounding(self) -> None:
        with pytest.raises(ValidationError):
            StochasticConfig(rounding="ROUND_SIDEWAYS")


class TestCoreValidation:
    """Test top-level field validation."""

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            CoreConfig(log_level="TRACE")

    def test_valid_log_levels(self) -> None:
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            config = CoreConfig(log_level=level)
            assert config.log_level == level

    def test_invalid_log_format(self) -> None:
        with pytest.raises(ValidationError):
            CoreConfig(log_format="xml")

    def test_zero_resolution_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CoreConfig(base_resolution=timedelta(0))

    def test_sub_millisecond_resolution_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CoreConfig(base_resolution=timedelta(microseconds=10))

    def test_max_backfill_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            CoreConfig(max_backfill=0)

    def test_invalid_gap_policy(self) -> None:
        with pytest.raises(ValidationError):
            CoreConfig(gap_policy="ignore")


class TestEnvVarOverride:
    """Test environment variable override behavior."""

    def test_env_var_overrides_default(self) -> None:
        with patch.dict(os.environ, {"CANDLE_LOG_LEVEL": "DEBUG"}):
            assert CoreConfig().log_level == "DEBUG"

    def test_nested_env_var_override(self) -> None:
        with patch.dict(os.environ, {"CANDLE_STOCHASTIC__BAR_COUNT": "9"}):
            assert CoreConfig().stochastic.bar_count == 9

    def test_epsilon_env_var(self) -> None:
        with patch.dict(os.environ, {"CANDLE_STOCHASTIC__EPSILON": "0.0001"}):
            assert CoreConfig().stochastic.epsilon == Decimal("0.0001")

    def test_gap_policy_env_var(self) -> None:
        with patch.dict(os.environ, {"CANDLE_GAP_POLICY": "backfill"}):
            assert CoreConfig().gap_policy is GapPolicy.BACKFILL

    def test_resolution_env_var_iso8601(self) -> None:
        with patch.dict(os.environ, {"CANDLE_BASE_RESOLUTION": "PT5M"}):
            assert CoreConfig().base_resolution == timedelta(minutes=5)

    def test_max_backfill_env_var(self) -> None:
        with patch.dict(os.environ, {"CANDLE_MAX_BACKFILL": "60"}):
            assert CoreConfig().max_backfill == 60


class TestNewSeries:
    """Test building a series from config."""

    def test_uses_configured_resolution_and_policy(self) -> None:
        config = CoreConfig(
            base_resolution=timedelta(minutes=5),
            gap_policy=GapPolicy.RAISE,
        )
        series = config.new_series(symbol="ETHBTC")
        assert len(series) == 0
        assert series.base_resolution == timedelta(minutes=5)
        assert series.gap_policy is GapPolicy.RAISE
        assert series.max_backfill == 1440
        assert series.symbol == "ETHBTC"

    def test_passes_max_backfill(self) -> None:
        config = CoreConfig(gap_policy=GapPolicy.BACKFILL, max_backfill=60)
        assert config.new_series().max_backfill == 60
