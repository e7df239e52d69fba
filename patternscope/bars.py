"""
OHLC bar value objects.

Bars are immutable; every component reads sequences of them and never stores them beyond a single call.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from pandas import DataFrame as PandasDataFrame
from polars import DataFrame as PolarsDataFrame
from polars import Datetime, Float64, Int64, col, from_pandas, lit


@dataclass(frozen=True)
class Bar:
    """One period's open, high, low, close and volume."""

    timestamp: int  # epoch millis
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def body_size(self) -> float:
        return abs(self.close - self.open)

    @property
    def upper_wick(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_wick(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def total_range(self) -> float:
        return self.high - self.low

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open

    @property
    def is_doji(self) -> bool:
        return self.body_size < self.total_range * 0.1


def bars_from_frame(data: PolarsDataFrame | PandasDataFrame) -> list[Bar]:
    """
    Convert an OHLC DataFrame into a list of bars.

    Datetime timestamps are converted to epoch milliseconds. A missing or null
    volume is read as 0.

    Args:
        data: Polars or Pandas DataFrame with timestamp/open/high/low/close and optional volume

    Returns:
        List of Bar in frame row order
    """
    df = from_pandas(data) if isinstance(data, PandasDataFrame) else data

    if df.schema["timestamp"] == Datetime:
        timestamp = col("timestamp").dt.epoch(time_unit="ms")
    else:
        timestamp = col("timestamp").cast(Int64)

    volume = col("volume").cast(Float64).fill_null(0.0) if "volume" in df.columns else lit(0.0)

    rows = df.select(
        [
            timestamp.alias("timestamp"),
            col("open").cast(Float64),
            col("high").cast(Float64),
            col("low").cast(Float64),
            col("close").cast(Float64),
            volume.alias("volume"),
        ]
    ).iter_rows()

    return [Bar(*row) for row in rows]


def bars_to_frame(bars: Sequence[Bar]) -> PolarsDataFrame:
    """Build a Polars OHLCV frame from bars."""
    return PolarsDataFrame(
        {
            "timestamp": [bar.timestamp for bar in bars],
            "open": [bar.open for bar in bars],
            "high": [bar.high for bar in bars],
            "low": [bar.low for bar in bars],
            "close": [bar.close for bar in bars],
            "volume": [bar.volume for bar in bars],
        },
        schema={
            "timestamp": Int64,
            "open": Float64,
            "high": Float64,
            "low": Float64,
            "close": Float64,
            "volume": Float64,
        },
    )
