"""
Unit tests for patternscope Factory.

Tests component creation and pattern metadata lookups.
"""

import pytest

from patternscope.engine import PatternEngine
from patternscope.factory import Factory
from patternscope.indicators import Indicators
from patternscope.patterns import PatternFamily, PatternKind
from patternscope.schemas import EngineConfig, IndicatorsConfig

from .utils import FixedClassifier


@pytest.mark.unit
class TestFactoryCreation:
    """Test cases for component creation."""

    def test_create_indicators(self):
        """Indicators receive the given configuration."""
        config = IndicatorsConfig(rsi_period=7)

        indicators = Factory.create_indicators(config)

        assert isinstance(indicators, Indicators)
        assert indicators.config.rsi_period == 7

    def test_create_indicators_default(self):
        """Configuration is optional."""
        assert Factory.create_indicators().config == IndicatorsConfig()

    def test_create_engine(self):
        """The engine receives its configuration and classifier."""
        engine = Factory.create_engine(EngineConfig(timeframe="5m"), FixedClassifier([0.9, 0.0, 0.0, 0.0]))

        assert isinstance(engine, PatternEngine)
        assert engine.config.timeframe == "5m"
        assert engine.classifier.available

    def test_create_all(self):
        """Both components are created together."""
        components = Factory.create_all(engine=EngineConfig(min_bars=30))

        assert set(components) == {"indicators", "engine"}
        assert isinstance(components["indicators"], Indicators)
        assert components["engine"].config.min_bars == 30
        assert not components["engine"].classifier.available


@pytest.mark.unit
class TestFactoryMetadata:
    """Test cases for pattern lookups."""

    def test_get_pattern_kinds(self):
        """All kinds in declaration order."""
        kinds = Factory.get_pattern_kinds()

        assert kinds == list(PatternKind)
        assert kinds[0] == PatternKind.DOJI

    def test_get_pattern_kinds_by_family(self):
        """Kinds can be filtered by family."""
        kinds = Factory.get_pattern_kinds(PatternFamily.CHART)

        assert kinds == [
            PatternKind.DOUBLE_TOP,
            PatternKind.DOUBLE_BOTTOM,
            PatternKind.ASCENDING_TRIANGLE,
            PatternKind.DESCENDING_TRIANGLE,
            PatternKind.CHANNEL_UP,
            PatternKind.CHANNEL_DOWN,
        ]

    def test_get_pattern_metadata(self):
        """Metadata is returned with string enum values."""
        metadata = Factory.get_pattern_metadata("morning_star")

        assert metadata["name"] == "Morning Star"
        assert metadata["family"] == "candlestick"
        assert metadata["direction"] == "bullish"
        assert metadata["probability"] == 0.78

    def test_get_pattern_metadata_accepts_kind(self):
        """PatternKind members are accepted directly."""
        assert Factory.get_pattern_metadata(PatternKind.CHANNEL_DOWN)["name"] == "Falling Channel"

    def test_unknown_pattern(self):
        """Unknown kinds raise ValueError."""
        with pytest.raises(ValueError, match="Unsupported pattern kind"):
            Factory.get_pattern_metadata("head_and_shoulders")
