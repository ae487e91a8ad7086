"""Merge a run of same-resolution candles into one coarser candle."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal, localcontext

from candlecore.engine.indicators import DECIMAL_PRECISION
from candlecore.errors import EmptyMergeError
from candlecore.market.types import Candle


def _total(candles: Sequence[Candle], field: str) -> Decimal:
    return sum((getattr(c, field) for c in candles), Decimal("0"))


def merge_candles(candles: Sequence[Candle]) -> Candle:
    """Combine an ordered, non-empty run of candles into one bar.

    Open/close come from the first/last candle, high/low are the extremes
    of the run, and every volume-like field plus number_of_trades is summed.
    Sums run in a fixed 28-digit context, whatever the caller's context is.
    """
    if not candles:
        raise EmptyMergeError("Cannot merge an empty run of candles")
    first = candles[0]
    last = candles[-1]
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return Candle(
            open_time=first.open_time,
            close_time=last.close_time,
            open=first.open,
            high=max(c.high for c in candles),
            low=min(c.low for c in candles),
            close=last.close,
            volume=_total(candles, "volume"),
            quote_asset_volume=_total(candles, "quote_asset_volume"),
            number_of_trades=sum(c.number_of_trades for c in candles),
            taker_buy_base_asset_volume=_total(
                candles, "taker_buy_base_asset_volume"
            ),
            taker_buy_quote_asset_volume=_total(
                candles, "taker_buy_quote_asset_volume"
            ),
            ignore=_total(candles, "ignore"),
        )
