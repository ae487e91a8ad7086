"""Stochastic oscillator (%K fast, %D slow) over candle close prices.

    %K = 100 * (last_close - min_close) / (max_close - min_close + epsilon)

epsilon keeps a perfectly flat window defined: %K is exactly 0 there
instead of a division by zero. Every division runs in a 28-digit decimal
context and is quantized to a fixed scale with a fixed rounding mode, so
identical input always produces identical Decimal output.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, localcontext
from typing import TYPE_CHECKING

from candlecore.engine.candle_series import CandleSeries
from candlecore.engine.indicators import (
    DECIMAL_PRECISION,
    MAX_SCALE,
    SMA,
    VALID_ROUNDING_MODES,
)
from candlecore.errors import InsufficientDataError, InvalidArgumentError
from candlecore.market.types import Candle

if TYPE_CHECKING:
    from candlecore.config import StochasticConfig

DEFAULT_EPSILON = Decimal("1E-8")
DEFAULT_SCALE = 8
_HUNDRED = Decimal("100")


class IndicatorSeries:
    """Lazy, finite, restartable sequence of indicator values.

    Length is known up front. Each iteration recomputes from the close
    prices captured when the series was created, so it is unaffected by
    later appends to the source CandleSeries.
    """

    __slots__ = ("_length", "_produce")

    def __init__(self, length: int, produce: Callable[[], Iterator[Decimal]]) -> None:
        self._length = length
        self._produce = produce

    def __len__(self) -> int:
        return self._length

    def __iter__(self) -> Iterator[Decimal]:
        return self._produce()

    def __repr__(self) -> str:
        return f"IndicatorSeries(length={self._length})"


@dataclass(frozen=True)
class StochasticReading:
    """Latest %K/%D plus the previous bar's values, for crossover checks.

    prev_* fields are None when the series is exactly one bar short of
    having them.
    """

    fast: Decimal
    slow: Decimal
    prev_fast: Decimal | None = None
    prev_slow: Decimal | None = None


def _closes(series: Iterable[Candle]) -> tuple[Decimal, ...]:
    if isinstance(series, CandleSeries):
        return series.closes()
    return tuple(c.close for c in series)


class StochasticEngine:
    """Computes %K and %D over a CandleSeries (or any Candle sequence).

    Stateless apart from its numeric settings; it never mutates the series
    it reads, so one engine can serve many series and threads.
    """

    def __init__(
        self,
        epsilon: Decimal = DEFAULT_EPSILON,
        scale: int = DEFAULT_SCALE,
        rounding: str = ROUND_HALF_EVEN,
    ) -> None:
        if epsilon <= 0:
            raise InvalidArgumentError(f"epsilon must be > 0, got {epsilon}")
        if not 0 <= scale <= MAX_SCALE:
            raise InvalidArgumentError(
                f"scale must be between 0 and {MAX_SCALE}, got {scale}"
            )
        if rounding not in VALID_ROUNDING_MODES:
            raise InvalidArgumentError(
                f"rounding must be one of {sorted(VALID_ROUNDING_MODES)}, "
                f"got {rounding!r}"
            )
        self.epsilon = epsilon
        self.scale = scale
        self.rounding = rounding
        self._quantum = Decimal(1).scaleb(-scale)

    @classmethod
    def from_config(cls, config: StochasticConfig) -> StochasticEngine:
        """Build an engine from the stochastic settings block."""
        return cls(
            epsilon=config.epsilon,
            scale=config.scale,
            rounding=config.rounding,
        )

    # --- Fast stochastic (%K) ---

    def fast_value(self, series: Iterable[Candle], bar_count: int) -> Decimal:
        """%K over the most recent bar_count candles."""
        closes = _closes(series)
        self._check_window(len(closes), bar_count)
        window = closes[-bar_count:]
        return self._k(window[-1], min(window), max(window))

    def fast_series(self, series: Iterable[Candle], bar_count: int) -> IndicatorSeries:
        """%K for every window start, oldest first.

        Length is len(series) - bar_count + 1.
        """
        closes = _closes(series)
        self._check_window(len(closes), bar_count)
        return IndicatorSeries(
            len(closes) - bar_count + 1,
            lambda: self._iter_fast(closes, bar_count),
        )

    # --- Slow stochastic (%D) ---

    def slow_value(
        self,
        series: Iterable[Candle],
        bar_count: int,
        smoothing_size: int,
    ) -> Decimal:
        """SMA of the last smoothing_size %K values."""
        closes = _closes(series)
        self._check_slow(len(closes), bar_count, smoothing_size)
        # Only the tail that feeds the last smoothing_size windows matters.
        tail = closes[len(closes) - (bar_count + smoothing_size - 1) :]
        sma = self._sma(smoothing_size)
        for k in self._iter_fast(tail, bar_count):
            sma.update(k)
        value = sma.value
        assert value is not None
        return value

    def slow_series(
        self,
        series: Iterable[Candle],
        bar_count: int,
        smoothing_size: int,
    ) -> IndicatorSeries:
        """Rolling SMA over fast_series(), oldest first.

        Length is len(fast_series) - smoothing_size + 1.
        """
        closes = _closes(series)
        fast_length = self._check_slow(len(closes), bar_count, smoothing_size)
        return IndicatorSeries(
            fast_length - smoothing_size + 1,
            lambda: self._iter_slow(closes, bar_count, smoothing_size),
        )

    def reading(
        self,
        series: Iterable[Candle],
        bar_count: int,
        smoothing_size: int,
    ) -> StochasticReading:
        """Current and previous %K/%D in one pass over the needed tail."""
        closes = _closes(series)
        self._check_slow(len(closes), bar_count, smoothing_size)
        tail = closes[max(0, len(closes) - (bar_count + smoothing_size)) :]
        fast = list(self._iter_fast(tail, bar_count))
        slow = list(self._iter_slow(tail, bar_count, smoothing_size))
        return StochasticReading(
            fast=fast[-1],
            slow=slow[-1],
            prev_fast=fast[-2] if len(fast) > 1 else None,
            prev_slow=slow[-2] if len(slow) > 1 else None,
        )

    # --- Internals ---

    def _k(self, last: Decimal, lowest: Decimal, highest: Decimal) -> Decimal:
        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            k = _HUNDRED * (last - lowest) / (highest - lowest + self.epsilon)
            return k.quantize(self._quantum, rounding=self.rounding)

    def _sma(self, period: int) -> SMA:
        return SMA(period, quantum=self._quantum, rounding=self.rounding)

    def _iter_fast(self, closes: Sequence[Decimal], bar_count: int) -> Iterator[Decimal]:
        # Monotonic deques of indices: front is the window max/min.
        highs: deque[int] = deque()
        lows: deque[int] = deque()
        for i, close in enumerate(closes):
            while highs and closes[highs[-1]] <= close:
                highs.pop()
            highs.append(i)
            while lows and closes[lows[-1]] >= close:
                lows.pop()
            lows.append(i)

            start = i - bar_count + 1
            if highs[0] < start:
                highs.popleft()
            if lows[0] < start:
                lows.popleft()
            if start >= 0:
                yield self._k(close, closes[lows[0]], closes[highs[0]])

    def _iter_slow(
        self,
        closes: Sequence[Decimal],
        bar_count: int,
        smoothing_size: int,
    ) -> Iterator[Decimal]:
        sma = self._sma(smoothing_size)
        for k in self._iter_fast(closes, bar_count):
            sma.update(k)
            value = sma.value
            if value is not None:
                yield value

    @staticmethod
    def _check_window(length: int, bar_count: int) -> None:
        if bar_count < 1:
            raise InvalidArgumentError(f"bar_count must be >= 1, got {bar_count}")
        if length < bar_count:
            raise InsufficientDataError(required=bar_count, available=length)

    def _check_slow(self, length: int, bar_count: int, smoothing_size: int) -> int:
        """Validate a %D request. Returns the number of %K values available."""
        if smoothing_size < 1:
            raise InvalidArgumentError(
                f"smoothing_size must be >= 1, got {smoothing_size}"
            )
        self._check_window(length, bar_count)
        fast_length = length - bar_count + 1
        if fast_length < smoothing_size:
            raise InsufficientDataError(
                required=smoothing_size,
                available=fast_length,
                what="fast stochastic values",
            )
        return fast_length
