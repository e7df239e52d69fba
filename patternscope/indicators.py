"""
Classical technical indicators.

Every function is pure: it takes a sequence of closes or bars plus its lookback periods and returns a list
aligned to the last bar of each window. Inputs shorter than an indicator's warm-up return an empty list.
Windowed extremes, Bollinger statistics and cumulative indicators are vectorized with Polars; recursive smoothers
and exact fixed-window means run as plain loops.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from pandas import DataFrame as PandasDataFrame
from polars import DataFrame as PolarsDataFrame
from polars import Float64, Series, col, max_horizontal, when

from .bars import Bar, bars_from_frame, bars_to_frame
from .base import Component
from .schemas import IndicatorsConfig


@dataclass(frozen=True)
class MACDResult:
    macd: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class BollingerBand:
    upper: float
    middle: float
    lower: float


@dataclass(frozen=True)
class StochasticResult:
    k: float
    d: float


@dataclass(frozen=True)
class ADXResult:
    adx: float
    plus_di: float
    minus_di: float


# =============================================================================
# Moving averages
# =============================================================================


def sma(values: Sequence[float], period: int) -> list[float]:
    """Simple moving average of each full window; length ``n - period + 1``."""
    values = list(values)
    if period < 1 or len(values) < period:
        return []

    return [sum(values[i - period + 1 : i + 1]) / period for i in range(period - 1, len(values))]


def ema(values: Sequence[float], period: int) -> list[float]:
    """
    Exponential moving average seeded with the SMA of the first ``period`` values.

    Args:
        values: Input series
        period: Lookback period, smoothing factor is ``2 / (period + 1)``

    Returns:
        List of length ``n - period + 1``
    """
    values = list(values)
    if period < 1 or len(values) < period:
        return []

    multiplier = 2.0 / (period + 1)
    result = [sum(values[:period]) / period]
    for value in values[period:]:
        result.append(value * multiplier + result[-1] * (1 - multiplier))

    return result


# =============================================================================
# Oscillators
# =============================================================================


def rsi(closes: Sequence[float], period: int = 14) -> list[float]:
    """
    Relative Strength Index from EMA-smoothed gains and losses.

    Saturates at exactly 100 when the smoothed loss is zero.
    """
    closes = list(closes)
    if len(closes) < period + 1:
        return []

    changes = [current - previous for previous, current in zip(closes, closes[1:])]
    gains = [change if change > 0 else 0.0 for change in changes]
    losses = [-change if change < 0 else 0.0 for change in changes]

    avg_gains = ema(gains, period)
    avg_losses = ema(losses, period)

    result = []
    for avg_gain, avg_loss in zip(avg_gains, avg_losses):
        if avg_loss == 0.0:
            result.append(100.0)
        else:
            result.append(100.0 - 100.0 / (1.0 + avg_gain / avg_loss))

    return result


def macd(
    closes: Sequence[float], fast_period: int = 12, slow_period: int = 26, signal_period: int = 9
) -> list[MACDResult]:
    """
    Moving Average Convergence Divergence.

    The fast and slow EMAs are aligned on the tail of the shorter one, the signal line is the EMA
    of the MACD line, and each result carries ``histogram = macd - signal``.
    """
    fast_ema = ema(closes, fast_period)
    slow_ema = ema(closes, slow_period)
    if not fast_ema or not slow_ema:
        return []

    length = min(len(fast_ema), len(slow_ema))
    macd_line = [fast - slow for fast, slow in zip(fast_ema[-length:], slow_ema[-length:])]

    signal_line = ema(macd_line, signal_period)
    offset = len(macd_line) - len(signal_line)

    return [
        MACDResult(macd=macd_value, signal=signal_value, histogram=macd_value - signal_value)
        for macd_value, signal_value in zip(macd_line[offset:], signal_line)
    ]


def stochastic(bars: Sequence[Bar], k_period: int = 14, d_period: int = 3) -> list[StochasticResult]:
    """
    Stochastic oscillator.

    %K is 50 when the window's high-low range is zero; %D is the SMA of %K. Results are aligned to %D.
    """
    if k_period < 1 or len(bars) < k_period:
        return []

    highest_high = col("high").rolling_max(window_size=k_period)
    lowest_low = col("low").rolling_min(window_size=k_period)

    k_values = (
        bars_to_frame(bars)
        .select(
            when(highest_high != lowest_low)
            .then((col("close") - lowest_low) / (highest_high - lowest_low) * 100)
            .otherwise(50.0)
            .alias("k")
        )
        .slice(k_period - 1)
        .to_series()
        .to_list()
    )

    d_values = sma(k_values, d_period)
    offset = len(k_values) - len(d_values)

    return [StochasticResult(k=k, d=d) for k, d in zip(k_values[offset:], d_values)]


def williams_r(bars: Sequence[Bar], period: int = 14) -> list[float]:
    """Williams %R in ``[-100, 0]``; -50 when the window range is zero."""
    if period < 1 or len(bars) < period:
        return []

    highest_high = col("high").rolling_max(window_size=period)
    lowest_low = col("low").rolling_min(window_size=period)

    return (
        bars_to_frame(bars)
        .select(
            when(highest_high != lowest_low)
            .then((highest_high - col("close")) / (highest_high - lowest_low) * -100)
            .otherwise(-50.0)
            .alias("williams_r")
        )
        .slice(period - 1)
        .to_series()
        .to_list()
    )


def cci(bars: Sequence[Bar], period: int = 20) -> list[float]:
    """Commodity Channel Index over typical prices; 0 when the mean deviation is zero."""
    if period < 1 or len(bars) < period:
        return []

    typical_prices = [bar.typical_price for bar in bars]
    sma_typical = sma(typical_prices, period)

    result = []
    for i, sma_value in enumerate(sma_typical):
        window = typical_prices[i : i + period]
        mean_deviation = sum(abs(price - sma_value) for price in window) / period

        if mean_deviation != 0.0:
            result.append((window[-1] - sma_value) / (0.015 * mean_deviation))
        else:
            result.append(0.0)

    return result


# =============================================================================
# Volatility
# =============================================================================


def bollinger_bands(closes: Sequence[float], period: int = 20, std_dev: float = 2.0) -> list[BollingerBand]:
    """Bollinger Bands around the SMA using the window's population standard deviation."""
    if period < 1 or len(closes) < period:
        return []

    middle = col("close").rolling_mean(window_size=period)
    deviation = col("close").rolling_std(window_size=period, ddof=0)

    bands = (
        PolarsDataFrame({"close": list(closes)}, schema={"close": Float64})
        .select(
            (middle + deviation * std_dev).alias("upper"),
            middle.alias("middle"),
            (middle - deviation * std_dev).alias("lower"),
        )
        .slice(period - 1)
    )

    return [BollingerBand(**row) for row in bands.iter_rows(named=True)]


def true_range(bars: Sequence[Bar]) -> list[float]:
    """True range of every bar after the first, measured against the previous close."""
    if len(bars) < 2:
        return []

    previous_close = col("close").shift(1)

    return (
        bars_to_frame(bars)
        .select(
            max_horizontal(
                col("high") - col("low"),
                (col("high") - previous_close).abs(),
                (col("low") - previous_close).abs(),
            ).alias("true_range")
        )
        .slice(1)
        .to_series()
        .to_list()
    )


def atr(bars: Sequence[Bar], period: int = 14) -> list[float]:
    """Average True Range: SMA of true ranges, needs ``period + 1`` bars."""
    return sma(true_range(bars), period)


# =============================================================================
# Trend strength
# =============================================================================


def adx(bars: Sequence[Bar], period: int = 14) -> list[ADXResult]:
    """
    Average Directional Index with +DI and -DI.

    Directional movement only counts the larger, strictly positive move of each bar; DM and true range are
    EMA-smoothed, and ADX is the mean of the last ``period`` DX values once that many exist.
    """
    if len(bars) < period + 1:
        return []

    plus_dm = []
    minus_dm = []
    for previous, current in zip(bars, bars[1:]):
        up_move = current.high - previous.high
        down_move = previous.low - current.low

        plus_dm.append(up_move if up_move > down_move and up_move > 0 else 0.0)
        minus_dm.append(down_move if down_move > up_move and down_move > 0 else 0.0)

    smoothed_plus_dm = ema(plus_dm, period)
    smoothed_minus_dm = ema(minus_dm, period)
    smoothed_tr = ema(true_range(bars), period)

    result = []
    dx_values = []
    for plus, minus, tr in zip(smoothed_plus_dm, smoothed_minus_dm, smoothed_tr):
        if tr == 0.0:
            plus_di = minus_di = 0.0
        else:
            plus_di = plus / tr * 100
            minus_di = minus / tr * 100

        if plus_di + minus_di != 0.0:
            dx = abs(plus_di - minus_di) / (plus_di + minus_di) * 100
        else:
            dx = 0.0
        dx_values.append(dx)

        if len(dx_values) >= period:
            result.append(ADXResult(adx=sum(dx_values[-period:]) / period, plus_di=plus_di, minus_di=minus_di))

    return result


# =============================================================================
# Volume
# =============================================================================


def obv(bars: Sequence[Bar]) -> list[float]:
    """On Balance Volume starting at 0; unchanged when the close does not move."""
    if not bars:
        return []

    previous_close = col("close").shift(1)

    return (
        bars_to_frame(bars)
        .select(
            when(col("close") > previous_close)
            .then(col("volume"))
            .when(col("close") < previous_close)
            .then(-col("volume"))
            .otherwise(0.0)
            .cum_sum()
            .alias("obv")
        )
        .to_series()
        .to_list()
    )


def vwap(bars: Sequence[Bar]) -> list[float]:
    """Cumulative VWAP of typical prices; the bar's typical price while cumulative volume is zero."""
    if not bars:
        return []

    typical_price = (col("high") + col("low") + col("close")) / 3
    cumulative_volume = col("volume").cum_sum()

    return (
        bars_to_frame(bars)
        .select(
            when(cumulative_volume > 0)
            .then((typical_price * col("volume")).cum_sum() / cumulative_volume)
            .otherwise(typical_price)
            .alias("vwap")
        )
        .to_series()
        .to_list()
    )


# =============================================================================
# Frame component
# =============================================================================


def _right_align(values: list[float], length: int) -> list[float | None]:
    """Pad ``values`` with leading nulls so the last value lines up with the last bar."""
    return [None] * (length - len(values)) + values


class Indicators(Component):
    """
    Append the full indicator set to an OHLC DataFrame.

    Each indicator column is aligned to the bar that closes its window; warm-up rows are null.
    """

    # Type hints for commonly accessed attributes
    config: IndicatorsConfig

    def __init__(self, config: IndicatorsConfig | None = None):
        """
        Initialize indicators component with validated configuration.

        Args:
            config: Validated IndicatorsConfig with indicator periods (defaults if None)
        """
        super().__init__()

        self.config = config if config is not None else IndicatorsConfig()

    def process(self, data: PolarsDataFrame | PandasDataFrame) -> PolarsDataFrame:
        """
        Calculate all indicators for OHLC data.

        Args:
            data: Input DataFrame with OHLC data

        Returns:
            DataFrame with indicator columns added
        """
        self.validate_input(data)

        df = self._convert_to_polars(data)
        bars = bars_from_frame(df)

        columns = self.calculate(bars)

        return df.with_columns(
            [Series(name, _right_align(values, len(df)), dtype=Float64) for name, values in columns.items()]
        )

    def calculate(self, bars: Sequence[Bar]) -> dict[str, list[float]]:
        """
        Calculate every configured indicator for a bar sequence.

        Args:
            bars: Bars in chronological order

        Returns:
            Dictionary mapping output column name to its (unpadded) values
        """
        config = self.config
        closes = [bar.close for bar in bars]

        macd_values = macd(closes, config.macd_fast, config.macd_slow, config.macd_signal)
        bands = bollinger_bands(closes, config.bollinger_period, config.bollinger_std_dev)
        stoch_values = stochastic(bars, config.stochastic_k, config.stochastic_d)
        adx_values = adx(bars, config.adx_period)

        return {
            "sma": sma(closes, config.sma_period),
            "ema": ema(closes, config.ema_period),
            "rsi": rsi(closes, config.rsi_period),
            "macd": [value.macd for value in macd_values],
            "macd_signal": [value.signal for value in macd_values],
            "macd_histogram": [value.histogram for value in macd_values],
            "bb_upper": [band.upper for band in bands],
            "bb_middle": [band.middle for band in bands],
            "bb_lower": [band.lower for band in bands],
            "atr": atr(bars, config.atr_period),
            "stoch_k": [value.k for value in stoch_values],
            "stoch_d": [value.d for value in stoch_values],
            "adx": [value.adx for value in adx_values],
            "plus_di": [value.plus_di for value in adx_values],
            "minus_di": [value.minus_di for value in adx_values],
            "obv": obv(bars),
            "vwap": vwap(bars),
            "cci": cci(bars, config.cci_period),
            "williams_r": williams_r(bars, config.williams_period),
        }
