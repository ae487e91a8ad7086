"""Exchange kline payload to Candle converters.

All string/float-to-Decimal conversion happens here; this is the Decimal
boundary. Binance-style REST klines arrive as 12-element arrays with prices
as strings; websocket kline events carry the same fields under single-letter
keys. Nothing here performs I/O.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from candlecore.errors import KlineFormatError
from candlecore.market.types import Candle
from candlecore.utils.time import from_millis, to_millis

KLINE_ROW_LENGTH = 12

# Websocket kline key -> Candle field
_EVENT_FIELDS: dict[str, str] = {
    "o": "open",
    "h": "high",
    "l": "low",
    "c": "close",
    "v": "volume",
    "q": "quote_asset_volume",
    "V": "taker_buy_base_asset_volume",
    "Q": "taker_buy_quote_asset_volume",
}


def to_decimal(value: float | str | int) -> Decimal:
    """Convert a float, int or string to a finite Decimal safely.

    Strings (REST payloads) are parsed directly. Floats go through str()
    to avoid IEEE 754 artifacts such as 0.1 -> 0.1000000000000000055...
    NaN and infinities are rejected; they cannot be ordered.
    """
    if isinstance(value, bool):
        raise KlineFormatError(f"Expected a number, got bool {value!r}")
    try:
        result = Decimal(value if isinstance(value, (str, int)) else str(value))
    except InvalidOperation as e:
        raise KlineFormatError(f"Invalid decimal value: {value!r}") from e
    if not result.is_finite():
        raise KlineFormatError(f"Decimal value must be finite, got {value!r}")
    return result


def _to_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise KlineFormatError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise KlineFormatError(f"{name} must be an integer, got {value!r}") from e


def candle_from_kline(row: Sequence[Any]) -> Candle:
    """Convert a REST kline array to a Candle.

    Layout: [open_ms, open, high, low, close, volume, close_ms,
    quote_volume, trades, taker_base_volume, taker_quote_volume, ignore]
    """
    if len(row) != KLINE_ROW_LENGTH:
        raise KlineFormatError(
            f"Kline row must have {KLINE_ROW_LENGTH} fields, got {len(row)}"
        )
    return Candle(
        open_time=from_millis(_to_int(row[0], "open_time")),
        close_time=from_millis(_to_int(row[6], "close_time")),
        open=to_decimal(row[1]),
        high=to_decimal(row[2]),
        low=to_decimal(row[3]),
        close=to_decimal(row[4]),
        volume=to_decimal(row[5]),
        quote_asset_volume=to_decimal(row[7]),
        number_of_trades=_to_int(row[8], "number_of_trades"),
        taker_buy_base_asset_volume=to_decimal(row[9]),
        taker_buy_quote_asset_volume=to_decimal(row[10]),
        ignore=to_decimal(row[11]),
    )


def candle_from_kline_event(payload: Mapping[str, Any]) -> Candle:
    """Convert a websocket kline payload to a Candle.

    Accepts either the full event ({"e": "kline", "k": {...}}) or the inner
    kline object. The "B" (ignore) field is optional.
    """
    kline = payload.get("k", payload)
    if not isinstance(kline, Mapping):
        raise KlineFormatError("Kline event 'k' must be an object")
    try:
        values = {
            field: to_decimal(kline[key])
            for key, field in _EVENT_FIELDS.items()
        }
        values["ignore"] = to_decimal(kline.get("B", "0"))
        open_ms = _to_int(kline["t"], "open_time")
        close_ms = _to_int(kline["T"], "close_time")
        trades = _to_int(kline["n"], "number_of_trades")
    except KeyError as e:
        raise KlineFormatError(f"Kline event missing field {e.args[0]!r}") from e
    return Candle(
        open_time=from_millis(open_ms),
        close_time=from_millis(close_ms),
        number_of_trades=trades,
        **values,
    )


def candle_to_kline(candle: Candle) -> list[Any]:
    """Convert a Candle back to the REST kline array layout.

    Decimals are rendered as strings so no precision is lost on the way to
    storage.
    """
    return [
        to_millis(candle.open_time),
        str(candle.open),
        str(candle.high),
        str(candle.low),
        str(candle.close),
        str(candle.volume),
        to_millis(candle.close_time),
        str(candle.quote_asset_volume),
        candle.number_of_trades,
        str(candle.taker_buy_base_asset_volume),
        str(candle.taker_buy_quote_asset_volume),
        str(candle.ignore),
    ]
