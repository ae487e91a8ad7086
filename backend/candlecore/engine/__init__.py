"""Engine layer: series storage, resampling and stochastic indicators."""

from candlecore.engine.aggregator import TimeframeAggregator, resample
from candlecore.engine.candle_series import CandleSeries
from candlecore.engine.indicators import SMA
from candlecore.engine.merge import merge_candles
from candlecore.engine.stochastic import (
    IndicatorSeries,
    StochasticEngine,
    StochasticReading,
)
from candlecore.engine.types import AppendResult, GapPolicy

__all__ = [
    "SMA",
    "AppendResult",
    "CandleSeries",
    "GapPolicy",
    "IndicatorSeries",
    "StochasticEngine",
    "StochasticReading",
    "TimeframeAggregator",
    "merge_candles",
    "resample",
]
