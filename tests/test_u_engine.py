"""
Unit tests for PatternEngine.
"""

import asyncio

import pytest
from polars import DataFrame

from patternscope.bars import Bar, bars_to_frame
from patternscope.engine import Analysis, PatternEngine
from patternscope.patterns import PatternFamily, PatternKind
from patternscope.schemas import EngineConfig, PatternSchema
from patternscope.signals import SignalAction

from .utils import AsyncClassifier, FailingClassifier, FixedClassifier, double_top_bars, trending_bars

TIMEFRAME = "5m"


@pytest.mark.unit
class TestDetectPatterns:
    """Test cases for PatternEngine.detect_patterns."""

    def test_init_defaults(self):
        """Default configuration with no classifier."""
        engine = PatternEngine()

        assert engine.config == EngineConfig()
        assert engine.classifier.available is False

    def test_minimum_history(self):
        """Fewer than min_bars bars produce nothing."""
        engine = PatternEngine(classifier=FixedClassifier([0.9, 0.0, 0.0, 0.0]))

        assert engine.detect_patterns(trending_bars(9), TIMEFRAME) == []

    def test_sorted_by_confidence(self):
        """Results from every family are merged by descending confidence."""
        engine = PatternEngine(classifier=FixedClassifier([0.0, 0.0, 0.75, 0.0]))

        patterns = engine.detect_patterns(double_top_bars(), TIMEFRAME)

        confidences = [pattern.confidence for pattern in patterns]
        assert confidences == sorted(confidences, reverse=True)
        families = {pattern.family for pattern in patterns}
        assert families == {PatternFamily.CANDLESTICK, PatternFamily.CHART, PatternFamily.CLASSIFIER}

    def test_stable_for_equal_confidence(self):
        """Equal confidences keep detection order."""
        patterns = PatternEngine().detect_patterns(trending_bars(60), TIMEFRAME)

        channels = [pattern for pattern in patterns if pattern.kind == PatternKind.CHANNEL_UP]
        assert len(channels) == 30
        assert [pattern.end_index for pattern in channels] == list(range(25, 55))

    def test_classifier_failure_is_isolated(self):
        """A failing classifier leaves the other families untouched."""
        bars = double_top_bars()

        baseline = PatternEngine().detect_patterns(bars, TIMEFRAME)
        with_failure = PatternEngine(classifier=FailingClassifier()).detect_patterns(bars, TIMEFRAME)

        assert with_failure == baseline
        assert baseline

    def test_zero_price_bars_keep_other_families(self):
        """All-zero bars skip the chart detectors without losing the classifier result."""
        bars = [Bar(timestamp=i, open=0.0, high=0.0, low=0.0, close=0.0, volume=0.0) for i in range(60)]
        engine = PatternEngine(classifier=FixedClassifier([0.9, 0.0, 0.0, 0.0]))

        patterns = engine.detect_patterns(bars, TIMEFRAME)

        assert [pattern.kind for pattern in patterns] == [PatternKind.ML_BULLISH]

    def test_async_detection(self):
        """The async variant awaits the classifier and merges the same way."""
        bars = trending_bars(60)
        engine = PatternEngine(classifier=AsyncClassifier([0.9, 0.0, 0.0, 0.0]))

        patterns = asyncio.run(engine.detect_patterns_async(bars, TIMEFRAME))

        assert patterns[0].kind == PatternKind.ML_BULLISH
        assert patterns[1:] == PatternEngine().detect_patterns(bars, TIMEFRAME)

    def test_async_minimum_history(self):
        """The async variant honors min_bars too."""
        engine = PatternEngine(classifier=AsyncClassifier([0.9, 0.0, 0.0, 0.0]))

        assert asyncio.run(engine.detect_patterns_async(trending_bars(5), TIMEFRAME)) == []


@pytest.mark.unit
class TestSignalsAndAnalysis:
    """Test cases for generate_signal and analyze."""

    def test_generate_signal_uses_config(self):
        """The engine's signal configuration is applied."""
        bars = trending_bars(60)
        engine = PatternEngine(EngineConfig(signal={"min_confidence": 0.5}))

        signal = engine.generate_signal(engine.detect_patterns(bars, TIMEFRAME), bars, TIMEFRAME)

        assert signal.action == SignalAction.BUY
        assert signal.patterns == ["Rising Channel"] * 30

    def test_analyze_with_classifier(self):
        """A confident bullish classifier tips the analysis to BUY."""
        bars = trending_bars(60)
        engine = PatternEngine(classifier=FixedClassifier([0.9, 0.0, 0.0, 0.0]))

        analysis = engine.analyze(bars, TIMEFRAME)

        assert isinstance(analysis, Analysis)
        assert len(analysis.patterns) == 31
        assert analysis.signal.action == SignalAction.BUY
        assert analysis.signal.reasoning == "Detected 1 strong buy patterns: ML Pattern: ML_BULLISH"

    def test_analyze_filters_by_min_confidence(self):
        """Patterns under the engine's min_confidence are dropped."""
        engine = PatternEngine(EngineConfig(min_confidence=0.65))

        analysis = engine.analyze(trending_bars(60), TIMEFRAME)

        assert analysis.patterns == []
        assert analysis.signal is None

    def test_analyze_short_history(self):
        """Short history gives an empty analysis."""
        analysis = PatternEngine().analyze(trending_bars(3), TIMEFRAME)

        assert analysis == Analysis()


@pytest.mark.unit
class TestProcess:
    """Test cases for the DataFrame entry point."""

    def test_process_returns_pattern_frame(self):
        """Patterns come back as a frame following PatternSchema."""
        engine = PatternEngine(EngineConfig(timeframe="1h"))

        result = engine.process(bars_to_frame(trending_bars(60)))

        assert isinstance(result, DataFrame)
        assert result.columns == list(PatternSchema.model_fields)
        assert dict(result.schema) == PatternSchema.get_polars_dtypes()
        assert len(result) == 30
        assert result["kind"].unique().to_list() == ["channel_up"]
        assert result["timeframe"].unique().to_list() == ["1h"]

    def test_process_short_input(self):
        """Short input yields an empty frame with the full schema."""
        result = PatternEngine().process(bars_to_frame(trending_bars(5)))

        assert len(result) == 0
        assert result.columns == list(PatternSchema.model_fields)

    def test_process_pandas(self):
        """Pandas input is converted."""
        df = bars_to_frame(trending_bars(60)).to_pandas()

        result = PatternEngine().process(df)

        assert len(result) == 30

    def test_process_missing_columns(self):
        """Frames without OHLC columns are rejected."""
        df = bars_to_frame(trending_bars(20)).drop("close")

        with pytest.raises(ValueError, match="Missing required columns"):
            PatternEngine().process(df)
