"""Engine enums shared by the series, config and callers."""

from __future__ import annotations

from enum import Enum


class GapPolicy(str, Enum):
    """What a CandleSeries does with a non-contiguous incoming candle.

    DROP keeps the legacy control flow (no-op) but counts and logs the
    candle. RAISE rejects it with CandleGapError. BACKFILL synthesizes flat
    zero-volume bars for an aligned forward gap, then appends.
    """

    DROP = "drop"
    RAISE = "raise"
    BACKFILL = "backfill"


class AppendResult(str, Enum):
    """Outcome of CandleSeries.append()."""

    APPENDED = "appended"
    REPLACED = "replaced"
    BACKFILLED = "backfilled"
    DROPPED = "dropped"
