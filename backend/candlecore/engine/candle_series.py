"""Append-only, time-ordered store of base-resolution candles.

A CandleSeries has exactly one writer (the feed ingestion path). Readers
such as resample() and StochasticEngine only borrow it; concurrent append()
and reads on the same instance must be serialized by the caller.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta
from decimal import Decimal

from candlecore.engine.types import AppendResult, GapPolicy
from candlecore.errors import (
    CandleGapError,
    InvalidArgumentError,
    InvalidDurationError,
    SliceOutOfRangeError,
)
from candlecore.market.types import Candle
from candlecore.utils.logging import get_logger
from candlecore.utils.time import format_timestamp, is_whole_millis

DEFAULT_RESOLUTION = timedelta(minutes=1)
# One day of 1-minute bars
DEFAULT_MAX_BACKFILL = 1440


class CandleSeries:
    """Contiguous candles, ascending by open_time.

    append() either refreshes the still-forming last bar (same open_time),
    extends the series (open_time directly after the last close_time), or
    treats the candle as a gap according to gap_policy. Under BACKFILL, a
    gap wider than max_backfill bars is dropped instead of filled. Derived
    objects returned by slice() are independent copies.
    """

    def __init__(
        self,
        base_resolution: timedelta = DEFAULT_RESOLUTION,
        *,
        symbol: str | None = None,
        gap_policy: GapPolicy = GapPolicy.DROP,
        max_backfill: int = DEFAULT_MAX_BACKFILL,
    ) -> None:
        if not is_whole_millis(base_resolution):
            raise InvalidDurationError(
                f"base_resolution must be a positive whole number of "
                f"milliseconds, got {base_resolution}"
            )
        self.base_resolution = base_resolution
        self.symbol = symbol
        if max_backfill < 1:
            raise InvalidArgumentError(
                f"max_backfill must be >= 1, got {max_backfill}"
            )
        self.gap_policy = gap_policy
        self.max_backfill = max_backfill
        self._candles: list[Candle] = []
        self._dropped_count = 0
        self._backfilled_count = 0
        self._log = get_logger(
            __name__, symbol=symbol, resolution=str(base_resolution)
        )

    @classmethod
    def from_candles(
        cls,
        candles: Iterable[Candle],
        base_resolution: timedelta = DEFAULT_RESOLUTION,
        *,
        symbol: str | None = None,
        gap_policy: GapPolicy = GapPolicy.DROP,
        max_backfill: int = DEFAULT_MAX_BACKFILL,
    ) -> CandleSeries:
        """Bulk-load stored history. Every candle goes through append()."""
        series = cls(
            base_resolution,
            symbol=symbol,
            gap_policy=gap_policy,
            max_backfill=max_backfill,
        )
        for candle in candles:
            series.append(candle)
        return series

    @classmethod
    def from_contiguous(
        cls,
        candles: Iterable[Candle],
        base_resolution: timedelta,
        symbol: str | None = None,
    ) -> CandleSeries:
        """Wrap candles already known to be contiguous. No checks, no logging."""
        series = cls(base_resolution, symbol=symbol)
        series._candles = list(candles)
        return series

    # --- Mutation ---

    def append(self, candle: Candle) -> AppendResult:
        """Ingest one candle from the feed."""
        if not self._candles:
            self._candles.append(candle)
            return AppendResult.APPENDED

        last = self._candles[-1]
        if candle.open_time == last.open_time:
            self._candles[-1] = candle
            return AppendResult.REPLACED
        if candle.open_time == last.next_open_time:
            self._candles.append(candle)
            return AppendResult.APPENDED
        return self._handle_gap(candle)

    def _handle_gap(self, candle: Candle) -> AppendResult:
        last = self._candles[-1]
        expected = last.next_open_time

        if self.gap_policy is GapPolicy.RAISE:
            raise CandleGapError(expected=expected, received=candle.open_time)

        missing = candle.open_time - expected
        if (
            self.gap_policy is GapPolicy.BACKFILL
            and missing > timedelta(0)
            and missing % self.base_resolution == timedelta(0)
        ):
            count = missing // self.base_resolution
            if count > self.max_backfill:
                return self._drop(candle, expected, reason="gap_too_large")
            filler = last
            for _ in range(count):
                filler = filler.flat_successor(self.base_resolution)
                self._candles.append(filler)
            self._candles.append(candle)
            self._backfilled_count += count
            self._log.info(
                "candle_gap_backfilled",
                expected=format_timestamp(expected),
                received=format_timestamp(candle.open_time),
                backfilled=count,
            )
            return AppendResult.BACKFILLED

        return self._drop(candle, expected, reason="not_contiguous")

    def _drop(self, candle: Candle, expected: datetime, reason: str) -> AppendResult:
        self._dropped_count += 1
        self._log.warning(
            "candle_dropped",
            reason=reason,
            expected=format_timestamp(expected),
            received=format_timestamp(candle.open_time),
            dropped_total=self._dropped_count,
        )
        return AppendResult.DROPPED

    # --- Read accessors ---

    def __len__(self) -> int:
        return len(self._candles)

    def __iter__(self) -> Iterator[Candle]:
        return iter(tuple(self._candles))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CandleSeries):
            return NotImplemented
        return (
            self.base_resolution == other.base_resolution
            and self._candles == other._candles
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"CandleSeries(symbol={self.symbol!r}, "
            f"base_resolution={self.base_resolution!r}, length={len(self)})"
        )

    def at(self, index: int) -> Candle:
        """Candle at index, 0 <= index < len(self)."""
        if not 0 <= index < len(self._candles):
            raise SliceOutOfRangeError(
                f"index {index} out of range for series of length {len(self)}"
            )
        return self._candles[index]

    def slice(self, start: int, end: int) -> CandleSeries:
        """Independent copy of candles [start, end).

        Requires 0 <= start <= end <= len(self).
        """
        if not 0 <= start <= end <= len(self._candles):
            raise SliceOutOfRangeError(
                f"slice [{start}, {end}) out of range for series of "
                f"length {len(self)}"
            )
        return CandleSeries.from_contiguous(
            self._candles[start:end], self.base_resolution, self.symbol
        )

    @property
    def last(self) -> Candle | None:
        """Most recent candle, or None if empty."""
        return self._candles[-1] if self._candles else None

    @property
    def candles(self) -> tuple[Candle, ...]:
        """Snapshot of all candles."""
        return tuple(self._candles)

    def closes(self) -> tuple[Decimal, ...]:
        """Snapshot of close prices in series order."""
        return tuple(c.close for c in self._candles)

    @property
    def dropped_count(self) -> int:
        """Candles discarded as gaps or out-of-order under DROP/BACKFILL."""
        return self._dropped_count

    @property
    def backfilled_count(self) -> int:
        """Synthetic flat candles inserted under BACKFILL."""
        return self._backfilled_count
