"""Candle core error hierarchy.

All exceptions raised by the core inherit from CandleCoreError. Precondition
violations also subclass ValueError so callers that already guard argument
errors keep working. Nothing is mutated before any of these is raised.
"""

from __future__ import annotations

from datetime import datetime


class CandleCoreError(Exception):
    """Base exception for all candle core errors."""


class PreconditionError(CandleCoreError, ValueError):
    """Caller passed arguments the operation cannot accept."""


class EmptyMergeError(PreconditionError):
    """merge_candles() was called with zero candles."""


class InvalidDurationError(PreconditionError):
    """Target duration is not a positive multiple of the base resolution."""


class InvalidArgumentError(PreconditionError):
    """Window, bar count or smoothing size is out of its valid range."""


class SliceOutOfRangeError(PreconditionError, IndexError):
    """Index or slice bounds fall outside the series."""


class InsufficientDataError(CandleCoreError):
    """Not enough history yet. Recoverable: wait for more bars.

    Stores how many items the operation needed and how many were available.
    """

    def __init__(self, required: int, available: int, what: str = "candles") -> None:
        self.required = required
        self.available = available
        self.what = what
        super().__init__(
            f"Insufficient data: need {required} {what}, have {available}"
        )


class CandleGapError(CandleCoreError):
    """Incoming candle is not contiguous with the end of the series."""

    def __init__(self, expected: datetime, received: datetime) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"Non-contiguous candle: expected open_time {expected.isoformat()}, "
            f"got {received.isoformat()}"
        )


class KlineFormatError(CandleCoreError, ValueError):
    """Exchange kline payload could not be decoded into a Candle."""
