"""Market data value types.

Frozen dataclasses only. All prices and volumes use Decimal (never float).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from decimal import Decimal

from candlecore.utils.time import TIME_UNIT

_ZERO = Decimal("0")


@dataclass(frozen=True)
class Candle:
    """One fixed-duration OHLCV bar plus exchange bookkeeping fields.

    close_time is inclusive: a one-minute bar opening at 10:00:00.000
    closes at 10:00:59.999. OHLC consistency (low <= open/close <= high)
    is not validated here.
    """

    open_time: datetime
    close_time: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal = _ZERO
    quote_asset_volume: Decimal = _ZERO
    number_of_trades: int = 0
    taker_buy_base_asset_volume: Decimal = _ZERO
    taker_buy_quote_asset_volume: Decimal = _ZERO
    ignore: Decimal = _ZERO

    @property
    def duration(self) -> timedelta:
        """Bar length, derived from the inclusive close time."""
        return self.close_time - self.open_time + TIME_UNIT

    @property
    def next_open_time(self) -> datetime:
        """open_time of the bar that directly follows this one."""
        return self.close_time + TIME_UNIT

    def flat_successor(self, duration: timedelta | None = None) -> Candle:
        """A zero-volume bar following this one, priced at this close.

        Used to fill gaps in a series when no trades were reported.
        duration defaults to this bar's own duration.
        """
        open_time = self.next_open_time
        price = self.close
        return replace(
            self,
            open_time=open_time,
            close_time=open_time + (duration or self.duration) - TIME_UNIT,
            open=price,
            high=price,
            low=price,
            close=price,
            volume=_ZERO,
            quote_asset_volume=_ZERO,
            number_of_trades=0,
            taker_buy_base_asset_volume=_ZERO,
            taker_buy_quote_asset_volume=_ZERO,
            ignore=_ZERO,
        )
