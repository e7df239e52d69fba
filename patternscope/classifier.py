"""
Fusion of an external pattern classifier.

The classifier is an optional collaborator owned by the caller. This module builds its fixed-length feature
vector, invokes it, and turns a sufficiently confident prediction into a Pattern. Any failure of the
classifier is contained here: detection of the other pattern families never depends on it.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, runtime_checkable

from .bars import Bar
from .indicators import macd, rsi
from .patterns import Pattern, PatternDirection, PatternKind
from .schemas import ClassifierConfig

# 4 normalized OHLC values per bar plus RSI and MACD histogram
FEATURES_PER_BAR = 4
FEATURE_VECTOR_LENGTH = 50 * FEATURES_PER_BAR + 2

# Output class order of the classifier
CLASS_KINDS = (
    PatternKind.ML_BULLISH,
    PatternKind.ML_BEARISH,
    PatternKind.ML_CONTINUATION,
    PatternKind.ML_REVERSAL,
)

Scores = Sequence[float]


@runtime_checkable
class Classifier(Protocol):
    """Anything that maps a feature vector to four class scores (bullish, bearish, continuation, reversal)."""

    def classify(self, features: Sequence[float]) -> Scores | Awaitable[Scores]: ...


def build_features(bars: Sequence[Bar], lookback: int = 50) -> list[float]:
    """
    Build the classifier feature vector from the trailing ``lookback`` bars.

    Open, high, low and close of each bar are min-max scaled over the window's closes (0.5 when all closes
    are equal), followed by the latest RSI(14) / 100 and the latest MACD(12, 26, 9) histogram / 100. Missing
    indicator values default to an RSI of 50 and a histogram of 0.

    Args:
        bars: Bars in chronological order, at least one
        lookback: Number of trailing bars to encode

    Returns:
        ``lookback * 4 + 2`` floats
    """
    window = list(bars[-lookback:])
    closes = [bar.close for bar in window]
    min_price = min(closes)
    price_range = max(closes) - min_price

    features = []
    for bar in window:
        if price_range > 0:
            features.extend((price - min_price) / price_range for price in (bar.open, bar.high, bar.low, bar.close))
        else:
            features.extend([0.5] * FEATURES_PER_BAR)

    rsi_values = rsi(closes, 14)
    features.append((rsi_values[-1] if rsi_values else 50.0) / 100)

    macd_values = macd(closes, 12, 26, 9)
    features.append((macd_values[-1].histogram if macd_values else 0.0) / 100)

    return features


class ClassifierAdapter:
    """
    Wraps an optional classifier and converts its predictions into patterns.

    An absent classifier is a valid configuration: detection simply yields nothing. The classifier may be an
    object with a ``classify`` method or a plain callable, and may return its scores directly or as an
    awaitable.
    """

    def __init__(
        self,
        classifier: Classifier | Callable[[Sequence[float]], Scores] | None = None,
        config: ClassifierConfig | None = None,
    ):
        if classifier is None:
            self._classify = None
        elif isinstance(classifier, Classifier):
            self._classify = classifier.classify
        elif callable(classifier):
            self._classify = classifier
        else:
            raise TypeError(f"Unsupported classifier type: {type(classifier)}. Expected classify() or a callable")

        self.config = config if config is not None else ClassifierConfig()

    @property
    def available(self) -> bool:
        return self._classify is not None

    def detect(self, bars: Sequence[Bar], timeframe: str) -> list[Pattern]:
        """
        Run the classifier synchronously on the trailing bars.

        Awaitable results are resolved with ``asyncio.run`` and bounded by ``config.timeout`` if set; inside a running event loop use detect_async.

        Args:
            bars: Bars in chronological order
            timeframe: Timeframe label for the produced pattern

        Returns:
            A single classifier pattern, or an empty list when the classifier is absent, history is short,
            the best score is not above ``min_score``, or the classifier failed
        """
        features = self._prepare(bars)
        if features is None:
            return []

        try:
            scores = self._classify(features)
            if inspect.isawaitable(scores):
                scores = self._resolve(scores)
            return self._to_patterns(scores, bars, timeframe)
        except Exception as err:
            logging.warning(f"Classifier unavailable for this call: {err!r}")
            return []

    async def detect_async(self, bars: Sequence[Bar], timeframe: str) -> list[Pattern]:
        """Same as detect, awaiting an asynchronous classifier (bounded by ``config.timeout`` if set)."""
        features = self._prepare(bars)
        if features is None:
            return []

        try:
            scores = self._classify(features)
            if inspect.isawaitable(scores):
                scores = await asyncio.wait_for(scores, timeout=self.config.timeout)
            return self._to_patterns(scores, bars, timeframe)
        except Exception as err:
            logging.warning(f"Classifier unavailable for this call: {err!r}")
            return []

    def _prepare(self, bars: Sequence[Bar]) -> list[float] | None:
        if self._classify is None:
            return None

        if len(bars) < self.config.lookback:
            logging.debug(f"Skipping classifier: {len(bars)} bars, {self.config.lookback} required")
            return None

        return build_features(bars, self.config.lookback)

    def _resolve(self, result: Awaitable[Scores]) -> Scores:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(asyncio.wait_for(result, timeout=self.config.timeout))

        if inspect.iscoroutine(result):
            result.close()
        elif isinstance(result, asyncio.Future):
            result.cancel()
        raise RuntimeError("classifier returned an awaitable inside a running event loop; use detect_async")

    def _to_patterns(self, scores: Scores, bars: Sequence[Bar], timeframe: str) -> list[Pattern]:
        scores = [float(score) for score in scores]
        if len(scores) < len(CLASS_KINDS):
            raise ValueError(f"expected {len(CLASS_KINDS)} class scores, got {len(scores)}")

        # First class wins ties
        best = max(range(len(CLASS_KINDS)), key=lambda index: scores[index])
        score = scores[best]
        if not score > self.config.min_score:
            return []

        kind = CLASS_KINDS[best]
        last = bars[-1]
        bullish = kind.direction == PatternDirection.BULLISH

        return [
            Pattern.create(
                kind,
                timeframe=timeframe,
                timestamp=last.timestamp,
                confidence=score,
                start_index=max(len(bars) - 10, 0),
                end_index=len(bars) - 1,
                entry_price=last.close,
                stop_loss=last.low * 0.98 if bullish else last.high * 1.02,
                target1=last.close * (1.025 if bullish else 0.975),
                target2=last.close * (1.05 if bullish else 0.95),
                probability=score,
            )
        ]
