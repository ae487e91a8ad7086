"""Resample a base-resolution CandleSeries to a coarser timeframe.

Buckets are exactly k = target_duration / base_resolution candles long and
are merged with merge_candles(). Only full buckets are emitted; an
incomplete trailing bucket would otherwise look like a finished bar.
"""

from __future__ import annotations

from datetime import timedelta

from candlecore.engine.candle_series import CandleSeries
from candlecore.engine.merge import merge_candles
from candlecore.errors import (
    InsufficientDataError,
    InvalidArgumentError,
    InvalidDurationError,
    SliceOutOfRangeError,
)
from candlecore.utils.logging import get_logger

logger = get_logger(__name__)


def bucket_size(base_resolution: timedelta, target_duration: timedelta) -> int:
    """Number of base candles per target candle. Must divide exactly."""
    if target_duration <= timedelta(0):
        raise InvalidDurationError(
            f"target_duration must be positive, got {target_duration}"
        )
    if target_duration % base_resolution != timedelta(0):
        raise InvalidDurationError(
            f"target_duration {target_duration} is not a multiple of "
            f"base resolution {base_resolution}"
        )
    return target_duration // base_resolution


def resample(
    series: CandleSeries,
    target_duration: timedelta,
    end_exclusive: int | None = None,
    window_size: int | None = None,
) -> CandleSeries:
    """Merge series[0, end_exclusive) into target_duration candles.

    Without window_size, buckets are cut left to right from index 0 and a
    trailing partial bucket is dropped. With window_size, only the last
    window_size * k candles before end_exclusive are used, so the newest
    target candle always ends at end_exclusive.

    Raises:
        InvalidDurationError: target_duration is not a positive multiple
            of the series' base resolution.
        SliceOutOfRangeError: end_exclusive is outside [0, len(series)].
        InvalidArgumentError: window_size < 1.
        InsufficientDataError: fewer than window_size full buckets exist.
    """
    k = bucket_size(series.base_resolution, target_duration)
    if end_exclusive is None:
        end_exclusive = len(series)
    if not 0 <= end_exclusive <= len(series):
        raise SliceOutOfRangeError(
            f"end_exclusive {end_exclusive} out of range for series of "
            f"length {len(series)}"
        )
    if window_size is not None and window_size < 1:
        raise InvalidArgumentError(f"window_size must be >= 1, got {window_size}")

    if window_size is None:
        start = 0
        count = end_exclusive // k
    else:
        needed = window_size * k
        if needed > end_exclusive:
            raise InsufficientDataError(
                required=window_size,
                available=end_exclusive // k,
                what="full buckets",
            )
        start = end_exclusive - needed
        count = window_size

    source = series.slice(start, start + count * k)
    if k == 1:
        return source

    candles = source.candles
    merged = [merge_candles(candles[i : i + k]) for i in range(0, count * k, k)]
    logger.debug(
        "resampled",
        symbol=series.symbol,
        target=str(target_duration),
        bucket_size=k,
        buckets=count,
        dropped_tail=end_exclusive - start - count * k,
    )
    return CandleSeries.from_contiguous(merged, target_duration, series.symbol)


class TimeframeAggregator:
    """resample() bound to one target timeframe.

    Strategies usually watch a fixed set of timeframes; holding one
    aggregator per timeframe keeps that choice in one place.
    """

    def __init__(self, target_duration: timedelta) -> None:
        if target_duration <= timedelta(0):
            raise InvalidDurationError(
                f"target_duration must be positive, got {target_duration}"
            )
        self.target_duration = target_duration

    def resample(
        self,
        series: CandleSeries,
        end_exclusive: int | None = None,
        window_size: int | None = None,
    ) -> CandleSeries:
        """See module-level resample()."""
        return resample(series, self.target_duration, end_exclusive, window_size)
