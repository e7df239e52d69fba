"""
Pydantic schema models for patternscope configuration validation.

This module provides the validated configuration for every component, plus the column schema of the
pattern DataFrame. Models use Pydantic v2 features for type safety and detailed error reporting.
"""

from typing import Any, Self

from polars import Float64, Int64, String
from pydantic import BaseModel, ConfigDict, Field, model_validator


class IndicatorsConfig(BaseModel):
    """Lookback periods for the Indicators component."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True, extra="forbid")

    sma_period: int = Field(default=20, ge=1, description="Simple moving average period")
    ema_period: int = Field(default=20, ge=1, description="Exponential moving average period")
    rsi_period: int = Field(default=14, ge=1, description="RSI smoothing period")
    macd_fast: int = Field(default=12, ge=1, description="MACD fast EMA period")
    macd_slow: int = Field(default=26, ge=1, description="MACD slow EMA period")
    macd_signal: int = Field(default=9, ge=1, description="MACD signal line EMA period")
    bollinger_period: int = Field(default=20, ge=1, description="Bollinger Bands SMA period")
    bollinger_std_dev: float = Field(
        default=2.0,
        gt=0,
        description="Band half-width in population standard deviations",
        examples=[1.5, 2.0, 2.5],
    )
    atr_period: int = Field(default=14, ge=1, description="Average True Range period")
    stochastic_k: int = Field(default=14, ge=1, description="Stochastic %K lookback")
    stochastic_d: int = Field(default=3, ge=1, description="Stochastic %D smoothing")
    adx_period: int = Field(default=14, ge=1, description="ADX smoothing and averaging period")
    cci_period: int = Field(default=20, ge=1, description="Commodity Channel Index period")
    williams_period: int = Field(default=14, ge=1, description="Williams %R lookback")

    @model_validator(mode="after")
    def validate_macd_periods(self) -> Self:
        """Fast MACD EMA must be shorter than the slow one."""
        if self.macd_fast >= self.macd_slow:
            raise ValueError("macd_fast must be less than macd_slow")
        return self


class ChartPatternConfig(BaseModel):
    """Windows and thresholds for chart-geometry detection."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True, extra="forbid")

    min_bars: int = Field(default=20, ge=2, description="Minimum bars before any chart pattern is scanned")
    double_window: int = Field(
        default=20,
        ge=1,
        description="Half-width of the neighborhood searched for double tops and bottoms",
        json_schema_extra={"impact": "Each scan position inspects 2 * double_window + 1 bars"},
    )
    min_peak_distance: int = Field(default=10, ge=1, description="Minimum bars between the two peaks or troughs")
    min_peak_valley_pct: float = Field(
        default=0.02,
        ge=0,
        description="Minimum peak-to-valley distance as a fraction of the peak",
        json_schema_extra={"unit": "decimal_percentage", "conversion": "0.02 = 2%"},
    )
    triangle_window: int = Field(default=30, ge=2, description="Bars per triangle window")
    triangle_tail: int = Field(default=10, ge=0, description="Bars left unscanned at the end for triangles")
    channel_window: int = Field(default=25, ge=2, description="Bars per channel window")
    channel_tail: int = Field(default=5, ge=0, description="Bars left unscanned at the end for channels")
    flat_slope: float = Field(
        default=0.001,
        ge=0,
        description="Slope magnitude below which a trend line counts as flat",
        json_schema_extra={"unit": "price per bar"},
    )
    parallel_tolerance: float = Field(
        default=0.0005,
        ge=0,
        description="Maximum high/low slope difference for a channel",
        json_schema_extra={"unit": "price per bar"},
    )


class ClassifierConfig(BaseModel):
    """Feature and threshold settings for classifier fusion."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True, extra="forbid")

    lookback: int = Field(default=50, ge=1, description="Number of trailing bars encoded in the feature vector")
    min_score: float = Field(
        default=0.7,
        ge=0,
        le=1,
        description="Arg-max score must exceed this to emit a classifier pattern",
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds to wait for an asynchronous classifier before treating it as unavailable",
    )


class SignalConfig(BaseModel):
    """Signal synthesis thresholds and sizing."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True, extra="forbid")

    min_confidence: float = Field(
        default=0.6, ge=0, le=1, description="Patterns must exceed this confidence to count toward a signal"
    )
    atr_period: int = Field(default=14, ge=1, description="ATR period used for stop and target sizing")
    atr_lookback: int = Field(default=20, ge=2, description="Trailing bars fed to the ATR")
    stop_atr_multiple: float = Field(default=2.0, gt=0, description="Stop distance in ATRs")
    target1_atr_multiple: float = Field(default=2.0, gt=0, description="First target distance in ATRs")
    target2_atr_multiple: float = Field(default=4.0, gt=0, description="Second target distance in ATRs")
    atr_fallback_pct: float = Field(
        default=0.02,
        gt=0,
        description="ATR substitute as a fraction of price when the ATR is unavailable",
        json_schema_extra={"unit": "decimal_percentage"},
    )
    position_size: float = Field(
        default=0.02, gt=0, le=1, description="Fixed fraction of capital risked per signal"
    )
    fallback_risk_reward: float = Field(
        default=2.0, ge=0, description="Risk/reward reported when the stop distance is zero"
    )
    default_duration: str = Field(default="3-8 candles", description="Expected duration if no pattern supplies one")


class EngineConfig(BaseModel):
    """Root configuration for PatternEngine."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True, extra="forbid")

    timeframe: str = Field(
        default="1m",
        min_length=1,
        description="Timeframe label attached to patterns produced by process()",
        examples=["1m", "5m", "1h", "1d"],
    )
    min_bars: int = Field(default=10, ge=1, description="Minimum bars required before any detection runs")
    min_confidence: float = Field(
        default=0.0,
        ge=0,
        le=1,
        description="Patterns below this confidence are dropped by analyze() before signal synthesis",
        json_schema_extra={"note": "0 keeps every pattern"},
    )
    chart_patterns: ChartPatternConfig = Field(default_factory=ChartPatternConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    signal: SignalConfig = Field(default_factory=SignalConfig)


# =============================================================================
# DataFrame Schema Models
# =============================================================================


class PatternSchema(BaseModel):
    """
    **Pattern Frame Schema**

    Defines every column of the DataFrame returned by PatternEngine.process() and patterns_to_frame().
    Field order is the column order.
    """

    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True, extra="forbid")

    kind: str = Field(
        description="Pattern kind identifier (PatternKind value)",
        json_schema_extra={"polars_dtype": String, "category": "identity"},
    )
    family: str = Field(
        description="Detector family: candlestick, chart, or classifier",
        json_schema_extra={"polars_dtype": String, "category": "identity"},
    )
    name: str = Field(
        description="Human-readable pattern name",
        json_schema_extra={"polars_dtype": String, "category": "identity"},
    )
    timeframe: str = Field(
        description="Bar period label of the analyzed sequence",
        json_schema_extra={"polars_dtype": String, "category": "identity"},
    )
    timestamp: int = Field(
        description="Timestamp of the triggering bar",
        json_schema_extra={"polars_dtype": Int64, "category": "location"},
    )
    start_index: int = Field(
        ge=0,
        description="First bar of the pattern (inclusive index into the input)",
        json_schema_extra={"polars_dtype": Int64, "category": "location"},
    )
    end_index: int = Field(
        ge=0,
        description="Last bar of the pattern (inclusive index into the input)",
        json_schema_extra={"polars_dtype": Int64, "category": "location"},
    )
    direction: str = Field(
        description="bullish, bearish, or neutral",
        json_schema_extra={"polars_dtype": String, "category": "identity"},
    )
    confidence: float = Field(
        ge=0,
        le=1,
        description="Detection strength score",
        json_schema_extra={"polars_dtype": Float64, "category": "scoring"},
    )
    probability: float = Field(
        ge=0,
        le=1,
        description="Static historical win rate for the pattern kind",
        json_schema_extra={"polars_dtype": Float64, "category": "scoring"},
    )
    risk_reward_ratio: float = Field(
        ge=0,
        description="Distance to first target over distance to stop",
        json_schema_extra={"polars_dtype": Float64, "category": "scoring"},
    )
    entry_price: float = Field(
        description="Suggested entry level",
        json_schema_extra={"polars_dtype": Float64, "category": "levels"},
    )
    stop_loss: float = Field(
        description="Invalidation level",
        json_schema_extra={"polars_dtype": Float64, "category": "levels"},
    )
    target1: float = Field(
        description="First profit target",
        json_schema_extra={"polars_dtype": Float64, "category": "levels"},
    )
    target2: float = Field(
        description="Second profit target",
        json_schema_extra={"polars_dtype": Float64, "category": "levels"},
    )
    expected_duration: str = Field(
        description="Human-readable bar-count range the pattern usually plays out over",
        json_schema_extra={"polars_dtype": String, "category": "scoring"},
    )

    @classmethod
    def get_column_descriptions(cls) -> dict[str, str]:
        """
        Get descriptions for all DataFrame columns.

        Returns:
            Dictionary mapping column names to their descriptions
        """
        return {name: info.description for name, info in cls.model_fields.items() if info.description}

    @classmethod
    def get_polars_dtypes(cls) -> dict[str, Any]:
        """
        Get Polars data types for all DataFrame columns.

        Returns:
            Dictionary mapping column names to their Polars data types, in column order
        """
        types = {}

        for field_name, field_info in cls.model_fields.items():
            json_extra = getattr(field_info, "json_schema_extra", {})
            if isinstance(json_extra, dict) and "polars_dtype" in json_extra:
                types[field_name] = json_extra["polars_dtype"]

        return types

    @classmethod
    def get_column_categories(cls) -> dict[str, list[str]]:
        """
        Get columns organized by functional categories.

        Returns:
            Dictionary mapping category names to sorted lists of column names
        """
        categories: dict[str, list[str]] = {}

        for field_name, field_info in cls.model_fields.items():
            json_extra = getattr(field_info, "json_schema_extra", {})
            if isinstance(json_extra, dict) and "category" in json_extra:
                categories.setdefault(json_extra["category"], []).append(field_name)

        for category in categories:
            categories[category].sort()

        return categories

    @classmethod
    def get_field_metadata(cls, field_name: str) -> dict[str, Any]:
        """
        Get json_schema_extra metadata for a field, safely handling missing data.

        Args:
            field_name: Name of the field to get metadata for

        Returns:
            Dictionary of metadata from json_schema_extra, empty dict if not found
        """
        field_info = cls.model_fields.get(field_name)
        if not field_info:
            return {}
        return getattr(field_info, "json_schema_extra", {}) or {}
