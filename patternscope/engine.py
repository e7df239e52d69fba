"""
Pattern detection engine.

PatternEngine runs the candlestick, chart-geometry and classifier detector families over a bar sequence,
merges their results by confidence, and synthesizes a trade signal from them.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from pandas import DataFrame as PandasDataFrame
from polars import DataFrame as PolarsDataFrame

from .bars import Bar, bars_from_frame
from .base import Component
from .candlesticks import scan_candlesticks
from .classifier import Classifier, ClassifierAdapter, Scores
from .geometry import scan_chart_patterns
from .patterns import Pattern, patterns_to_frame
from .schemas import EngineConfig
from .signals import Signal, generate_signal


@dataclass
class Analysis:
    """Patterns detected on a bar sequence together with the signal synthesized from them."""

    patterns: list[Pattern] = field(default_factory=list)
    signal: Signal | None = None


class PatternEngine(Component):
    """
    Detect patterns across all families and synthesize signals.

    The engine holds only its configuration and the optional classifier; it is safe to share.
    """

    # Type hints for commonly accessed attributes
    config: EngineConfig
    classifier: ClassifierAdapter

    def __init__(
        self,
        config: EngineConfig | None = None,
        classifier: Classifier | Callable[[Sequence[float]], Scores] | None = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Validated EngineConfig (defaults if None)
            classifier: Optional classifier object or callable returning four class scores
        """
        super().__init__()

        self.config = config if config is not None else EngineConfig()
        self.classifier = ClassifierAdapter(classifier, self.config.classifier)

    def process(self, data: PolarsDataFrame | PandasDataFrame) -> PolarsDataFrame:
        """
        Detect patterns on an OHLC DataFrame.

        Args:
            data: Input DataFrame with timestamp/open/high/low/close and optional volume

        Returns:
            Pattern DataFrame following PatternSchema, one row per pattern by descending confidence
        """
        self.validate_input(data)

        bars = bars_from_frame(self._convert_to_polars(data))
        return patterns_to_frame(self.detect_patterns(bars, self.config.timeframe))

    def detect_patterns(self, bars: Sequence[Bar], timeframe: str) -> list[Pattern]:
        """
        Run every detector family over the bars.

        Args:
            bars: Bars in chronological order
            timeframe: Timeframe label attached to every pattern

        Returns:
            All patterns sorted by descending confidence, ties kept in detection order; empty when fewer than
            ``config.min_bars`` bars are given
        """
        if len(bars) < self.config.min_bars:
            return []

        candlesticks, charts = self._scan(bars, timeframe)
        return self._merge(candlesticks, charts, self.classifier.detect(bars, timeframe))

    async def detect_patterns_async(self, bars: Sequence[Bar], timeframe: str) -> list[Pattern]:
        """Same as detect_patterns, awaiting an asynchronous classifier."""
        if len(bars) < self.config.min_bars:
            return []

        candlesticks, charts = self._scan(bars, timeframe)
        return self._merge(candlesticks, charts, await self.classifier.detect_async(bars, timeframe))

    def generate_signal(self, patterns: Sequence[Pattern], bars: Sequence[Bar], timeframe: str) -> Signal | None:
        """Synthesize a signal from patterns using the engine's signal configuration."""
        return generate_signal(patterns, bars, timeframe, self.config.signal)

    def analyze(self, bars: Sequence[Bar], timeframe: str) -> Analysis:
        """
        Detect patterns and synthesize a signal in one call.

        Patterns with confidence below ``config.min_confidence`` are dropped before synthesis.

        Args:
            bars: Bars in chronological order
            timeframe: Timeframe label

        Returns:
            Analysis with the kept patterns and the signal (None when there is none)
        """
        patterns = [
            pattern
            for pattern in self.detect_patterns(bars, timeframe)
            if pattern.confidence >= self.config.min_confidence
        ]
        return Analysis(patterns=patterns, signal=self.generate_signal(patterns, bars, timeframe))

    def _scan(self, bars: Sequence[Bar], timeframe: str) -> tuple[list[Pattern], list[Pattern]]:
        return scan_candlesticks(bars, timeframe), scan_chart_patterns(bars, timeframe, self.config.chart_patterns)

    @staticmethod
    def _merge(candlesticks: list[Pattern], charts: list[Pattern], predicted: list[Pattern]) -> list[Pattern]:
        logging.debug(
            f"Detected {len(candlesticks)} candlestick, {len(charts)} chart and {len(predicted)} classifier patterns"
        )
        return sorted([*candlesticks, *charts, *predicted], key=lambda pattern: pattern.confidence, reverse=True)
