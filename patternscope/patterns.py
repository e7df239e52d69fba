"""
Pattern metadata for the patternscope detectors.

This module defines the closed set of pattern kinds, their static trading constants, and the immutable
Pattern value produced by every detector family.
"""

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from enum import Enum

from polars import DataFrame as PolarsDataFrame


class PatternFamily(Enum):
    """Detector family a pattern kind belongs to."""

    CANDLESTICK = "candlestick"
    CHART = "chart"
    CLASSIFIER = "classifier"


class PatternDirection(Enum):
    """Directional bias of a detected pattern."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class PatternKind(Enum):
    """Every pattern the engine can emit."""

    # Candlestick
    DOJI = "doji"
    HAMMER = "hammer"
    SHOOTING_STAR = "shooting_star"
    ENGULFING_BULLISH = "engulfing_bullish"
    ENGULFING_BEARISH = "engulfing_bearish"
    MORNING_STAR = "morning_star"
    EVENING_STAR = "evening_star"
    THREE_WHITE_SOLDIERS = "three_white_soldiers"
    THREE_BLACK_CROWS = "three_black_crows"

    # Chart geometry
    DOUBLE_TOP = "double_top"
    DOUBLE_BOTTOM = "double_bottom"
    ASCENDING_TRIANGLE = "ascending_triangle"
    DESCENDING_TRIANGLE = "descending_triangle"
    CHANNEL_UP = "channel_up"
    CHANNEL_DOWN = "channel_down"

    # Classifier
    ML_BULLISH = "ml_bullish"
    ML_BEARISH = "ml_bearish"
    ML_CONTINUATION = "ml_continuation"
    ML_REVERSAL = "ml_reversal"

    @property
    def family(self) -> PatternFamily:
        return PATTERNS[self]["family"]

    @property
    def direction(self) -> PatternDirection:
        return PATTERNS[self]["direction"]


# Static constants per pattern kind. These are design constants, not derived from data.
PATTERNS = {
    # Single-bar candlesticks
    PatternKind.DOJI: {
        "name": "Doji",
        "family": PatternFamily.CANDLESTICK,
        "direction": PatternDirection.NEUTRAL,
        "bar_count": 1,
        "expected_duration": "1-3 candles",
        "probability": 0.5,
        "risk_reward_ratio": 2.0,
        "description": "Open and close nearly equal; indecision",
    },
    PatternKind.HAMMER: {
        "name": "Hammer",
        "family": PatternFamily.CANDLESTICK,
        "direction": PatternDirection.BULLISH,
        "bar_count": 1,
        "expected_duration": "2-5 candles",
        "probability": 0.65,
        "risk_reward_ratio": 2.5,
        "description": "Small body with a long lower wick",
    },
    PatternKind.SHOOTING_STAR: {
        "name": "Shooting Star",
        "family": PatternFamily.CANDLESTICK,
        "direction": PatternDirection.BEARISH,
        "bar_count": 1,
        "expected_duration": "2-5 candles",
        "probability": 0.65,
        "risk_reward_ratio": 2.5,
        "description": "Small body with a long upper wick",
    },
    # Two-bar candlesticks
    PatternKind.ENGULFING_BULLISH: {
        "name": "Bullish Engulfing",
        "family": PatternFamily.CANDLESTICK,
        "direction": PatternDirection.BULLISH,
        "bar_count": 2,
        "expected_duration": "3-8 candles",
        "probability": 0.72,
        "risk_reward_ratio": 3.0,
        "description": "Bullish body engulfs the prior bearish body",
    },
    PatternKind.ENGULFING_BEARISH: {
        "name": "Bearish Engulfing",
        "family": PatternFamily.CANDLESTICK,
        "direction": PatternDirection.BEARISH,
        "bar_count": 2,
        "expected_duration": "3-8 candles",
        "probability": 0.72,
        "risk_reward_ratio": 3.0,
        "description": "Bearish body engulfs the prior bullish body",
    },
    # Three-bar candlesticks
    PatternKind.MORNING_STAR: {
        "name": "Morning Star",
        "family": PatternFamily.CANDLESTICK,
        "direction": PatternDirection.BULLISH,
        "bar_count": 3,
        "expected_duration": "5-12 candles",
        "probability": 0.78,
        "risk_reward_ratio": 3.5,
        "description": "Bearish bar, small-body bar, bullish recovery past the first midpoint",
    },
    PatternKind.EVENING_STAR: {
        "name": "Evening Star",
        "family": PatternFamily.CANDLESTICK,
        "direction": PatternDirection.BEARISH,
        "bar_count": 3,
        "expected_duration": "5-12 candles",
        "probability": 0.78,
        "risk_reward_ratio": 3.5,
        "description": "Bullish bar, small-body bar, bearish drop past the first midpoint",
    },
    PatternKind.THREE_WHITE_SOLDIERS: {
        "name": "Three White Soldiers",
        "family": PatternFamily.CANDLESTICK,
        "direction": PatternDirection.BULLISH,
        "bar_count": 3,
        "expected_duration": "5-15 candles",
        "probability": 0.75,
        "risk_reward_ratio": 4.0,
        "description": "Three strong bullish bars with rising closes",
    },
    PatternKind.THREE_BLACK_CROWS: {
        "name": "Three Black Crows",
        "family": PatternFamily.CANDLESTICK,
        "direction": PatternDirection.BEARISH,
        "bar_count": 3,
        "expected_duration": "5-15 candles",
        "probability": 0.75,
        "risk_reward_ratio": 4.0,
        "description": "Three strong bearish bars with falling closes",
    },
    # Chart geometry
    PatternKind.DOUBLE_TOP: {
        "name": "Double Top",
        "family": PatternFamily.CHART,
        "direction": PatternDirection.BEARISH,
        "bar_count": 41,
        "expected_duration": "10-30 candles",
        "probability": 0.68,
        "risk_reward_ratio": 2.8,
        "description": "Two equal highs at least 10 bars apart over a valley",
    },
    PatternKind.DOUBLE_BOTTOM: {
        "name": "Double Bottom",
        "family": PatternFamily.CHART,
        "direction": PatternDirection.BULLISH,
        "bar_count": 41,
        "expected_duration": "10-30 candles",
        "probability": 0.68,
        "risk_reward_ratio": 2.8,
        "description": "Two equal lows at least 10 bars apart under a ridge",
    },
    PatternKind.ASCENDING_TRIANGLE: {
        "name": "Ascending Triangle",
        "family": PatternFamily.CHART,
        "direction": PatternDirection.BULLISH,
        "bar_count": 30,
        "expected_duration": "5-20 candles",
        "probability": 0.72,
        "risk_reward_ratio": 2.5,
        "description": "Flat resistance with rising support",
    },
    PatternKind.DESCENDING_TRIANGLE: {
        "name": "Descending Triangle",
        "family": PatternFamily.CHART,
        "direction": PatternDirection.BEARISH,
        "bar_count": 30,
        "expected_duration": "5-20 candles",
        "probability": 0.72,
        "risk_reward_ratio": 2.5,
        "description": "Falling resistance with flat support",
    },
    PatternKind.CHANNEL_UP: {
        "name": "Rising Channel",
        "family": PatternFamily.CHART,
        "direction": PatternDirection.BULLISH,
        "bar_count": 25,
        "expected_duration": "8-25 candles",
        "probability": 0.65,
        "risk_reward_ratio": 2.2,
        "description": "Parallel rising highs and lows",
    },
    PatternKind.CHANNEL_DOWN: {
        "name": "Falling Channel",
        "family": PatternFamily.CHART,
        "direction": PatternDirection.BEARISH,
        "bar_count": 25,
        "expected_duration": "8-25 candles",
        "probability": 0.65,
        "risk_reward_ratio": 2.2,
        "description": "Parallel falling highs and lows",
    },
    # Classifier output; probability is the classifier score at detection time
    PatternKind.ML_BULLISH: {
        "name": "ML Pattern: ML_BULLISH",
        "family": PatternFamily.CLASSIFIER,
        "direction": PatternDirection.BULLISH,
        "bar_count": 50,
        "expected_duration": "3-10 candles",
        "probability": None,
        "risk_reward_ratio": 2.5,
        "description": "Classifier predicts bullish continuation",
    },
    PatternKind.ML_BEARISH: {
        "name": "ML Pattern: ML_BEARISH",
        "family": PatternFamily.CLASSIFIER,
        "direction": PatternDirection.BEARISH,
        "bar_count": 50,
        "expected_duration": "3-10 candles",
        "probability": None,
        "risk_reward_ratio": 2.5,
        "description": "Classifier predicts bearish continuation",
    },
    PatternKind.ML_CONTINUATION: {
        "name": "ML Pattern: ML_CONTINUATION",
        "family": PatternFamily.CLASSIFIER,
        "direction": PatternDirection.NEUTRAL,
        "bar_count": 50,
        "expected_duration": "3-10 candles",
        "probability": None,
        "risk_reward_ratio": 2.5,
        "description": "Classifier predicts trend continuation",
    },
    PatternKind.ML_REVERSAL: {
        "name": "ML Pattern: ML_REVERSAL",
        "family": PatternFamily.CLASSIFIER,
        "direction": PatternDirection.NEUTRAL,
        "bar_count": 50,
        "expected_duration": "3-10 candles",
        "probability": None,
        "risk_reward_ratio": 2.5,
        "description": "Classifier predicts trend reversal",
    },
}


@dataclass(frozen=True)
class Pattern:
    """A single detection, produced once per detector call and never mutated."""

    kind: PatternKind
    name: str
    timeframe: str
    timestamp: int  # of the triggering bar
    confidence: float
    start_index: int
    end_index: int
    direction: PatternDirection
    entry_price: float
    stop_loss: float
    target1: float
    target2: float
    expected_duration: str
    probability: float
    risk_reward_ratio: float

    @classmethod
    def create(
        cls,
        kind: PatternKind,
        *,
        timeframe: str,
        timestamp: int,
        confidence: float,
        start_index: int,
        end_index: int,
        entry_price: float,
        stop_loss: float,
        target1: float,
        target2: float,
        probability: float | None = None,
    ) -> "Pattern":
        """
        Build a pattern filling name, direction, duration, probability and risk/reward from PATTERNS.

        Args:
            kind: Pattern kind to look up
            probability: Overrides the static probability (required for classifier kinds)

        Returns:
            Pattern instance
        """
        metadata = PATTERNS[kind]
        if probability is None:
            probability = metadata["probability"]
        if probability is None:
            raise ValueError(f"Pattern kind {kind.name} has no static probability; pass one explicitly")

        return cls(
            kind=kind,
            name=metadata["name"],
            timeframe=timeframe,
            timestamp=timestamp,
            confidence=confidence,
            start_index=start_index,
            end_index=end_index,
            direction=metadata["direction"],
            entry_price=entry_price,
            stop_loss=stop_loss,
            target1=target1,
            target2=target2,
            expected_duration=metadata["expected_duration"],
            probability=probability,
            risk_reward_ratio=metadata["risk_reward_ratio"],
        )

    @property
    def family(self) -> PatternFamily:
        return self.kind.family

    def to_dict(self) -> dict:
        """Serialize to a flat dict with enum values as strings."""
        data = asdict(self)
        data["kind"] = self.kind.value
        data["direction"] = self.direction.value
        data["family"] = self.family.value
        return data


def patterns_to_frame(patterns: Sequence[Pattern]) -> PolarsDataFrame:
    """
    Convert patterns to a Polars DataFrame following PatternSchema.

    Args:
        patterns: Patterns in the order they should appear

    Returns:
        DataFrame with one row per pattern and PatternSchema dtypes (empty frame when no patterns)
    """
    from .schemas import PatternSchema

    schema = PatternSchema.get_polars_dtypes()
    rows = [pattern.to_dict() for pattern in patterns]

    return PolarsDataFrame({name: [row[name] for row in rows] for name in schema}, schema=schema)
