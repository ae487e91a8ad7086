"""Rolling Decimal SMA used to smooth %K into %D.

A ring buffer with a running sum, O(1) per update. Decimal addition and
subtraction of fixed-scale values are exact, so the running sum never
drifts no matter how long the series runs.
"""

from __future__ import annotations

import decimal
from collections import deque
from decimal import ROUND_HALF_EVEN, Decimal, localcontext

from candlecore.errors import InvalidArgumentError

DECIMAL_PRECISION = 28

# Values reach 100, so three integer digits must fit beside the scale.
MAX_SCALE = 20
VALID_ROUNDING_MODES = frozenset(
    name for name in dir(decimal) if name.startswith("ROUND_")
)


class SMA:
    """Simple Moving Average over Decimal values.

    value is quantized to `quantum` with `rounding`; the running sum itself
    is kept unrounded.
    """

    __slots__ = ("_buf", "_period", "_quantum", "_rounding", "_sum")

    def __init__(
        self,
        period: int,
        quantum: Decimal = Decimal("1E-8"),
        rounding: str = ROUND_HALF_EVEN,
    ) -> None:
        if period < 1:
            raise InvalidArgumentError(f"SMA period must be >= 1, got {period}")
        self._period = period
        self._quantum = quantum
        self._rounding = rounding
        self._buf: deque[Decimal] = deque(maxlen=period)
        self._sum = Decimal("0")

    def update(self, value: Decimal) -> None:
        """Add a value. Evicts oldest if at capacity."""
        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            if len(self._buf) == self._period:
                self._sum -= self._buf[0]
            self._buf.append(value)
            self._sum += value

    @property
    def value(self) -> Decimal | None:
        """Current SMA, or None if not warm."""
        if len(self._buf) < self._period:
            return None
        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            return (self._sum / self._period).quantize(
                self._quantum, rounding=self._rounding
            )

    @property
    def is_warm(self) -> bool:
        """True when buffer has enough values for a valid SMA."""
        return len(self._buf) >= self._period

    @property
    def count(self) -> int:
        """Number of values currently in the buffer."""
        return len(self._buf)
