"""Market layer: candle value type and exchange kline mappers."""

from candlecore.market.mappers import (
    candle_from_kline,
    candle_from_kline_event,
    candle_to_kline,
)
from candlecore.market.types import Candle

__all__ = [
    "Candle",
    "candle_from_kline",
    "candle_from_kline_event",
    "candle_to_kline",
]
