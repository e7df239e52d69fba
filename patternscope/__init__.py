"""
patternscope Python Module

Technical indicators and candlestick, chart-geometry and classifier pattern detection over OHLCV bars,
with signal synthesis from the detected patterns.
"""

from .bars import Bar, bars_from_frame, bars_to_frame
from .base import Component
from .classifier import FEATURE_VECTOR_LENGTH, Classifier, ClassifierAdapter, build_features
from .engine import Analysis, PatternEngine
from .factory import Factory
from .indicators import ADXResult, BollingerBand, Indicators, MACDResult, StochasticResult
from .patterns import PATTERNS, Pattern, PatternDirection, PatternFamily, PatternKind, patterns_to_frame
from .schemas import (
    ChartPatternConfig,
    ClassifierConfig,
    EngineConfig,
    IndicatorsConfig,
    PatternSchema,
    SignalConfig,
)
from .signals import Signal, SignalAction, generate_signal

try:
    from importlib.metadata import version

    __version__ = version("patternscope")
except Exception:
    # Fallback if package not found (development mode)
    __version__ = "ERROR: VERSION NOT FOUND"
__all__ = [
    "Factory",
    "Component",
    "Indicators",
    "PatternEngine",
    "Analysis",
    "Bar",
    "bars_from_frame",
    "bars_to_frame",
    "MACDResult",
    "BollingerBand",
    "StochasticResult",
    "ADXResult",
    "Pattern",
    "PatternKind",
    "PatternFamily",
    "PatternDirection",
    "PATTERNS",
    "patterns_to_frame",
    "Classifier",
    "ClassifierAdapter",
    "FEATURE_VECTOR_LENGTH",
    "build_features",
    "Signal",
    "SignalAction",
    "generate_signal",
    "IndicatorsConfig",
    "ChartPatternConfig",
    "ClassifierConfig",
    "SignalConfig",
    "EngineConfig",
    "PatternSchema",
]
