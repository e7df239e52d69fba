"""
Factory pattern for patternscope component creation and configuration.

This module provides clean factory methods for creating and configuring
patternscope components with Pydantic schema validation.
"""

from collections.abc import Callable, Sequence
from functools import lru_cache
from typing import Any, TypedDict

from .classifier import Classifier, Scores
from .engine import PatternEngine
from .indicators import Indicators
from .patterns import PATTERNS, PatternFamily, PatternKind
from .schemas import EngineConfig, IndicatorsConfig


class ComponentDict(TypedDict):
    """Type definition for component dictionary returned by Factory.create_all()."""

    indicators: Indicators
    engine: PatternEngine


class Factory:
    """
    Factory class for creating patternscope components.

    Provides static methods for creating individual components and
    class methods for creating complete processing pipelines.
    All methods accept validated Pydantic configuration models.
    """

    @staticmethod
    def create_indicators(config: IndicatorsConfig | None = None) -> Indicators:
        """
        Create indicators component from validated configuration.

        Args:
            config: Validated IndicatorsConfig with indicator periods (defaults if None)

        Returns:
            Configured Indicators component

        Example:
            >>> from patternscope.schemas import IndicatorsConfig
            >>> indicators = Factory.create_indicators(IndicatorsConfig(rsi_period=7))
        """
        return Indicators(config)

    @staticmethod
    def create_engine(
        config: EngineConfig | None = None,
        classifier: Classifier | Callable[[Sequence[float]], Scores] | None = None,
    ) -> PatternEngine:
        """
        Create pattern engine from validated configuration.

        Args:
            config: Validated EngineConfig containing:
                - `timeframe`: Label used by process()
                - `min_bars`: Minimum history before detection
                - `chart_patterns`, `classifier`, `signal`: Nested detector settings
            classifier: Optional classifier object or callable

        Returns:
            Configured PatternEngine

        Example:
            >>> from patternscope.schemas import EngineConfig
            >>> engine = Factory.create_engine(EngineConfig(timeframe="5m"))
        """
        return PatternEngine(config, classifier)

    @classmethod
    def create_all(
        cls,
        indicators: IndicatorsConfig | None = None,
        engine: EngineConfig | None = None,
        classifier: Classifier | Callable[[Sequence[float]], Scores] | None = None,
    ) -> ComponentDict:
        """
        Create the indicators component and pattern engine together.

        Returns:
            Dictionary containing created components:
            {
                "indicators": Indicators,
                "engine": PatternEngine
            }
        """
        return {
            "indicators": cls.create_indicators(indicators),
            "engine": cls.create_engine(engine, classifier),
        }

    @staticmethod
    @lru_cache(maxsize=4)
    def get_pattern_kinds(family: PatternFamily | None = None) -> list[PatternKind]:
        """
        Get pattern kinds the engine can emit, in declaration order.

        Args:
            family: Restrict to one detector family (all kinds if None)

        Returns:
            List of PatternKind
        """
        return [kind for kind in PatternKind if family is None or kind.family == family]

    @staticmethod
    def get_pattern_metadata(kind: PatternKind | str) -> dict[str, Any]:
        """
        Get static metadata for a pattern kind.

        Args:
            kind: PatternKind or its string value

        Returns:
            Copy of the PATTERNS entry with enum values as strings

        Raises:
            ValueError: If kind is not a known pattern kind
        """
        try:
            kind = PatternKind(kind)
        except ValueError:
            raise ValueError(f"Unsupported pattern kind: {kind}") from None

        metadata = dict(PATTERNS[kind])
        metadata["family"] = metadata["family"].value
        metadata["direction"] = metadata["direction"].value
        return metadata
