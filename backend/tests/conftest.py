"""Shared test fixtures for candle-core."""

from __future__ import annotations

import pytest

from candlecore.engine.candle_series import CandleSeries
from candlecore.engine.stochastic import StochasticEngine
from tests.factories import make_series


@pytest.fixture
def engine() -> StochasticEngine:
    """StochasticEngine with default epsilon, scale and rounding."""
    return StochasticEngine()


@pytest.fixture
def five_bar_series() -> CandleSeries:
    """1-minute series with closes 10, 12, 11, 15, 14."""
    return make_series([10, 12, 11, 15, 14])
