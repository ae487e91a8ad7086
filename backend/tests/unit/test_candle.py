"""Tests for the Candle value type."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import timedelta
from decimal import Decimal

import pytest

from tests.factories import BASE_TIME, make_candle


class TestCandle:
    """Test Candle frozen dataclass."""

    def test_is_frozen(self) -> None:
        candle = make_candle()
        with pytest.raises(FrozenInstanceError):
            candle.close = Decimal("1")  # type: ignore[misc]

    def test_close_time_is_inclusive(self) -> None:
        candle = make_candle()
        assert candle.close_time == BASE_TIME + timedelta(seconds=59, milliseconds=999)

    def test_duration(self) -> None:
        assert make_candle().duration == timedelta(minutes=1)
        assert make_candle(duration=timedelta(minutes=15)).duration == timedelta(
            minutes=15,
        )

    def test_next_open_time(self) -> None:
        assert make_candle().next_open_time == BASE_TIME + timedelta(minutes=1)

    def test_volume_defaults_are_zero(self) -> None:
        from candlecore.market.types import Candle

        candle = Candle(
            open_time=BASE_TIME,
            close_time=BASE_TIME,
            open=Decimal("1"),
            high=Decimal("1"),
            low=Decimal("1"),
            close=Decimal("1"),
        )
        assert candle.volume == Decimal("0")
        assert candle.number_of_trades == 0


class TestFlatSuccessor:
    """Test the synthetic gap-filling candle."""

    def test_opens_after_and_is_flat_at_close(self) -> None:
        candle = make_candle(close=Decimal("152.25"))
        filler = candle.flat_successor()
        assert filler.open_time == candle.next_open_time
        assert filler.duration == candle.duration
        assert filler.open == filler.high == filler.low == filler.close
        assert filler.close == Decimal("152.25")

    def test_has_no_volume_or_trades(self) -> None:
        filler = make_candle().flat_successor()
        assert filler.volume == Decimal("0")
        assert filler.quote_asset_volume == Decimal("0")
        assert filler.taker_buy_base_asset_volume == Decimal("0")
        assert filler.taker_buy_quote_asset_volume == Decimal("0")
        assert filler.number_of_trades == 0

    def test_explicit_duration(self) -> None:
        filler = make_candle().flat_successor(timedelta(minutes=5))
        assert filler.duration == timedelta(minutes=5)
