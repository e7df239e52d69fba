"""
Trading signal synthesis for patternscope.

This module turns a set of detected patterns into at most one directional signal by majority vote of the
strong patterns, sizing stops and targets from the Average True Range of the recent bars.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from .bars import Bar
from .indicators import atr
from .patterns import Pattern, PatternDirection
from .schemas import SignalConfig


class SignalAction(Enum):
    """Directional action of a signal."""

    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"  # represented by the absence of a signal


@dataclass
class Signal:
    """Synthesized trade suggestion."""

    # Direction and conviction
    action: SignalAction
    confidence: float  # mean confidence of the winning side
    probability: float

    # Price levels
    entry_price: float  # last close
    stop_loss: float
    target1: float
    target2: float

    # Context
    timeframe: str
    expected_duration: str
    position_size: float = 0.02  # fraction of capital
    risk_reward_ratio: float = 0.0
    reasoning: str = ""
    patterns: list[str] = field(default_factory=list)  # names of the contributing patterns

    def to_dict(self) -> dict:
        """Serialize to a flat dict with the action as a string."""
        return {
            "action": self.action.value,
            "confidence": self.confidence,
            "probability": self.probability,
            "entry_price": self.entry_price,
            "stop_loss": self.stop_loss,
            "target1": self.target1,
            "target2": self.target2,
            "timeframe": self.timeframe,
            "expected_duration": self.expected_duration,
            "position_size": self.position_size,
            "risk_reward_ratio": self.risk_reward_ratio,
            "reasoning": self.reasoning,
            "patterns": list(self.patterns),
        }


def generate_signal(
    patterns: Sequence[Pattern], bars: Sequence[Bar], timeframe: str, config: SignalConfig | None = None
) -> Signal | None:
    """
    Synthesize a signal from detected patterns.

    Patterns with confidence above ``config.min_confidence`` vote by direction; neutral patterns abstain.
    The side with strictly more votes wins, a tie (including no votes) produces no signal. Stops and targets
    are multiples of the latest ATR over the trailing ``atr_lookback`` bars, or of ``atr_fallback_pct`` of
    price when the ATR cannot be computed.

    Args:
        patterns: Detected patterns, in the order they were reported
        bars: Bars the patterns were detected on
        timeframe: Timeframe label for the signal
        config: Signal thresholds and sizing (defaults if None)

    Returns:
        A BUY or SELL signal, or None when there is nothing to act on
    """
    if not patterns or not bars:
        return None

    config = config or SignalConfig()
    strong = [pattern for pattern in patterns if pattern.confidence > config.min_confidence]
    bullish = [pattern for pattern in strong if pattern.direction == PatternDirection.BULLISH]
    bearish = [pattern for pattern in strong if pattern.direction == PatternDirection.BEARISH]

    if len(bullish) > len(bearish):
        action, winners = SignalAction.BUY, bullish
    elif len(bearish) > len(bullish):
        action, winners = SignalAction.SELL, bearish
    else:
        logging.debug(f"No signal: {len(bullish)} bullish vs {len(bearish)} bearish strong patterns")
        return None

    avg_confidence = sum(pattern.confidence for pattern in winners) / len(winners)
    price = bars[-1].close

    atr_values = atr(bars[-config.atr_lookback :], config.atr_period)
    current_atr = atr_values[-1] if atr_values else price * config.atr_fallback_pct

    # Buy levels sit above price for targets and below for the stop; sell mirrors
    side = 1 if action == SignalAction.BUY else -1
    stop_loss = price - side * config.stop_atr_multiple * current_atr
    target1 = price + side * config.target1_atr_multiple * current_atr
    target2 = price + side * config.target2_atr_multiple * current_atr

    risk = abs(price - stop_loss)
    risk_reward_ratio = abs(target1 - price) / risk if risk > 0 else config.fallback_risk_reward

    names = [pattern.name for pattern in winners]
    return Signal(
        action=action,
        confidence=avg_confidence,
        probability=avg_confidence,
        entry_price=price,
        stop_loss=stop_loss,
        target1=target1,
        target2=target2,
        timeframe=timeframe,
        expected_duration=winners[0].expected_duration or config.default_duration,
        position_size=config.position_size,
        risk_reward_ratio=risk_reward_ratio,
        reasoning=f"Detected {len(winners)} strong {action.value} patterns: {', '.join(names)}",
        patterns=names,
    )
