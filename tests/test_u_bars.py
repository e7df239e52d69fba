"""
Unit tests for the Bar value type and frame conversion.
"""

from datetime import datetime, timezone

import pandas as pd
import polars as pl
import pytest

from patternscope.bars import Bar, bars_from_frame, bars_to_frame

from .utils import BASE_TIMESTAMP, make_bar, trending_bars


@pytest.mark.unit
class TestBar:
    """Test cases for derived bar properties."""

    def test_bullish_geometry(self):
        """Body, wicks and range of a bullish bar."""
        bar = make_bar(100.0, 103.0, 98.0, 102.0)

        assert bar.body_size == 2.0
        assert bar.upper_wick == 1.0
        assert bar.lower_wick == 2.0
        assert bar.total_range == 5.0
        assert bar.typical_price == pytest.approx(101.0)
        assert bar.is_bullish
        assert not bar.is_bearish

    def test_bearish_geometry(self):
        """Wicks are measured from the body edges regardless of color."""
        bar = make_bar(102.0, 103.0, 98.0, 100.0)

        assert bar.upper_wick == 1.0
        assert bar.lower_wick == 2.0
        assert bar.is_bearish
        assert not bar.is_bullish

    def test_doji_bar(self):
        """Open equal to close is neither bullish nor bearish."""
        bar = make_bar(100.0, 101.0, 99.0, 100.0)

        assert bar.is_doji
        assert not bar.is_bullish
        assert not bar.is_bearish

    def test_immutable(self):
        """Bars are frozen values."""
        bar = make_bar(100.0, 101.0, 99.0, 100.0)

        with pytest.raises(AttributeError):
            bar.close = 5.0

    def test_default_volume(self):
        """Volume defaults to 0."""
        assert Bar(timestamp=0, open=1.0, high=1.0, low=1.0, close=1.0).volume == 0.0


@pytest.mark.unit
class TestFrameConversion:
    """Test cases for bars_from_frame and bars_to_frame."""

    def test_round_trip(self):
        """Bars survive conversion to and from a Polars frame."""
        bars = trending_bars(5)

        frame = bars_to_frame(bars)

        assert frame.schema["timestamp"] == pl.Int64
        assert bars_from_frame(frame) == bars

    def test_datetime_timestamps(self):
        """Datetime timestamps become epoch milliseconds."""
        df = pl.DataFrame(
            {
                "timestamp": [datetime(2022, 1, 1, tzinfo=timezone.utc), datetime(2022, 1, 1, 0, 1, tzinfo=timezone.utc)],
                "open": [1.0, 2.0],
                "high": [1.5, 2.5],
                "low": [0.5, 1.5],
                "close": [1.2, 2.2],
                "volume": [10, 20],
            }
        )

        bars = bars_from_frame(df)

        assert [bar.timestamp for bar in bars] == [BASE_TIMESTAMP, BASE_TIMESTAMP + 60_000]
        assert bars[1].volume == 20.0

    def test_pandas_without_volume(self):
        """Pandas frames convert and a missing volume reads as 0."""
        df = pd.DataFrame(
            {
                "timestamp": [1, 2],
                "open": [1.0, 2.0],
                "high": [1.5, 2.5],
                "low": [0.5, 1.5],
                "close": [1.2, 2.2],
            }
        )

        bars = bars_from_frame(df)

        assert bars == [Bar(1, 1.0, 1.5, 0.5, 1.2, 0.0), Bar(2, 2.0, 2.5, 1.5, 2.2, 0.0)]

    def test_null_volume(self):
        """Null volumes read as 0."""
        df = bars_to_frame(trending_bars(2)).with_columns(pl.lit(None, dtype=pl.Float64).alias("volume"))

        assert [bar.volume for bar in bars_from_frame(df)] == [0.0, 0.0]
