"""
Candlestick pattern detectors.

Each detector inspects the one to three most recent bars ending at a trigger index and returns at most one
Pattern. Entry, stop and target levels are fixed percentage offsets from the triggering bars.
"""

from collections.abc import Sequence

from .bars import Bar
from .patterns import PATTERNS, Pattern, PatternKind


def detect_doji(bar: Bar, index: int, timeframe: str) -> Pattern | None:
    """Doji: body under 10% of a non-zero range. Confidence grows as the body shrinks."""
    body_size = bar.body_size
    total_range = bar.total_range

    if not (body_size < total_range * 0.1 and total_range > 0):
        return None

    return Pattern.create(
        PatternKind.DOJI,
        timeframe=timeframe,
        timestamp=bar.timestamp,
        confidence=1.0 - body_size / total_range,
        start_index=index,
        end_index=index,
        entry_price=bar.close,
        stop_loss=bar.low * 0.98 if bar.is_bullish else bar.high * 1.02,
        target1=bar.close * (1.015 if bar.is_bullish else 0.985),
        target2=bar.close * (1.03 if bar.is_bullish else 0.97),
    )


def detect_hammer(bar: Bar, index: int, timeframe: str) -> Pattern | None:
    """Hammer: small body, lower wick over twice the body, upper wick under half the body."""
    body_size = bar.body_size
    total_range = bar.total_range

    if not (
        body_size < total_range * 0.3
        and bar.lower_wick > body_size * 2
        and bar.upper_wick < body_size * 0.5
        and total_range > 0
    ):
        return None

    return Pattern.create(
        PatternKind.HAMMER,
        timeframe=timeframe,
        timestamp=bar.timestamp,
        confidence=bar.lower_wick / total_range * 0.8 + 0.2,
        start_index=index,
        end_index=index,
        entry_price=bar.high * 1.001,  # just above the high
        stop_loss=bar.low * 0.995,
        target1=bar.close * 1.02,
        target2=bar.close * 1.04,
    )


def detect_shooting_star(bar: Bar, index: int, timeframe: str) -> Pattern | None:
    """Shooting Star: the Hammer with upper and lower wicks swapped."""
    body_size = bar.body_size
    total_range = bar.total_range

    if not (
        body_size < total_range * 0.3
        and bar.upper_wick > body_size * 2
        and bar.lower_wick < body_size * 0.5
        and total_range > 0
    ):
        return None

    return Pattern.create(
        PatternKind.SHOOTING_STAR,
        timeframe=timeframe,
        timestamp=bar.timestamp,
        confidence=bar.upper_wick / total_range * 0.8 + 0.2,
        start_index=index,
        end_index=index,
        entry_price=bar.low * 0.999,  # just below the low
        stop_loss=bar.high * 1.005,
        target1=bar.close * 0.98,
        target2=bar.close * 0.96,
    )


def detect_engulfing(current: Bar, previous: Bar, index: int, timeframe: str) -> Pattern | None:
    """
    Bullish or bearish engulfing.

    The current body must open beyond the prior close and close beyond the prior open, in the opposite
    direction of the prior bar. Confidence is half the body ratio, capped at 0.9.

    Args:
        current: Triggering bar at ``index``
        previous: Bar at ``index - 1``
        index: Trigger index into the analyzed sequence
        timeframe: Timeframe label

    Returns:
        ENGULFING_BULLISH or ENGULFING_BEARISH pattern, or None
    """
    if previous.is_bearish and current.is_bullish and current.open < previous.close and current.close > previous.open:
        return Pattern.create(
            PatternKind.ENGULFING_BULLISH,
            timeframe=timeframe,
            timestamp=current.timestamp,
            confidence=min(current.body_size / previous.body_size * 0.5, 0.9),
            start_index=index - 1,
            end_index=index,
            entry_price=current.close * 1.002,
            stop_loss=min(current.low, previous.low) * 0.98,
            target1=current.close * 1.025,
            target2=current.close * 1.05,
        )

    if previous.is_bullish and current.is_bearish and current.open > previous.close and current.close < previous.open:
        return Pattern.create(
            PatternKind.ENGULFING_BEARISH,
            timeframe=timeframe,
            timestamp=current.timestamp,
            confidence=min(current.body_size / previous.body_size * 0.5, 0.9),
            start_index=index - 1,
            end_index=index,
            entry_price=current.close * 0.998,
            stop_loss=max(current.high, previous.high) * 1.02,
            target1=current.close * 0.975,
            target2=current.close * 0.95,
        )

    return None


def _is_star(current: Bar, middle: Bar, first: Bar) -> bool:
    """Middle body under half of both neighbors."""
    return middle.body_size < first.body_size * 0.5 and middle.body_size < current.body_size * 0.5


def _star_confidence(current: Bar, first: Bar) -> float:
    return min(0.7 + current.body_size / first.body_size * 0.2, 0.95)


def detect_morning_star(current: Bar, middle: Bar, first: Bar, index: int, timeframe: str) -> Pattern | None:
    """Morning Star: bearish, small body, then a bullish close above the first bar's midpoint."""
    if not (
        first.is_bearish
        and current.is_bullish
        and _is_star(current, middle, first)
        and current.close > (first.open + first.close) / 2
    ):
        return None

    return Pattern.create(
        PatternKind.MORNING_STAR,
        timeframe=timeframe,
        timestamp=current.timestamp,
        confidence=_star_confidence(current, first),
        start_index=index - 2,
        end_index=index,
        entry_price=current.close * 1.005,
        stop_loss=min(first.low, middle.low, current.low) * 0.97,
        target1=current.close * 1.03,
        target2=current.close * 1.06,
    )


def detect_evening_star(current: Bar, middle: Bar, first: Bar, index: int, timeframe: str) -> Pattern | None:
    """Evening Star: bullish, small body, then a bearish close below the first bar's midpoint."""
    if not (
        first.is_bullish
        and current.is_bearish
        and _is_star(current, middle, first)
        and current.close < (first.open + first.close) / 2
    ):
        return None

    return Pattern.create(
        PatternKind.EVENING_STAR,
        timeframe=timeframe,
        timestamp=current.timestamp,
        confidence=_star_confidence(current, first),
        start_index=index - 2,
        end_index=index,
        entry_price=current.close * 0.995,
        stop_loss=max(first.high, middle.high, current.high) * 1.03,
        target1=current.close * 0.97,
        target2=current.close * 0.94,
    )


def _body_consistency(candles: Sequence[Bar]) -> float:
    """Mean body-to-range ratio."""
    return sum(candle.body_size / candle.total_range for candle in candles) / len(candles)


def detect_three_white_soldiers(candles: Sequence[Bar], index: int, timeframe: str) -> Pattern | None:
    """Three bullish bars with strictly rising closes, each body over 60% of its range."""
    if len(candles) != 3:
        return None

    first, second, third = candles
    if not (
        all(candle.is_bullish for candle in candles)
        and second.close > first.close
        and third.close > second.close
        and all(candle.body_size > candle.total_range * 0.6 for candle in candles)
    ):
        return None

    return Pattern.create(
        PatternKind.THREE_WHITE_SOLDIERS,
        timeframe=timeframe,
        timestamp=third.timestamp,
        confidence=_body_consistency(candles) * 0.8,
        start_index=index - 2,
        end_index=index,
        entry_price=third.close * 1.003,
        stop_loss=min(candle.low for candle in candles) * 0.975,
        target1=third.close * 1.04,
        target2=third.close * 1.08,
    )


def detect_three_black_crows(candles: Sequence[Bar], index: int, timeframe: str) -> Pattern | None:
    """Three bearish bars with strictly falling closes, each body over 60% of its range."""
    if len(candles) != 3:
        return None

    first, second, third = candles
    if not (
        all(candle.is_bearish for candle in candles)
        and second.close < first.close
        and third.close < second.close
        and all(candle.body_size > candle.total_range * 0.6 for candle in candles)
    ):
        return None

    return Pattern.create(
        PatternKind.THREE_BLACK_CROWS,
        timeframe=timeframe,
        timestamp=third.timestamp,
        confidence=_body_consistency(candles) * 0.8,
        start_index=index - 2,
        end_index=index,
        entry_price=third.close * 0.997,
        stop_loss=max(candle.high for candle in candles) * 1.025,
        target1=third.close * 0.96,
        target2=third.close * 0.92,
    )


def scan_candlesticks(bars: Sequence[Bar], timeframe: str) -> list[Pattern]:
    """
    Run every candlestick detector at every index with enough history.

    Single-bar detectors start at index 0, engulfing at 1 and three-bar detectors at 2. Detections from
    overlapping windows are kept as independent results.

    Args:
        bars: Bars in chronological order
        timeframe: Timeframe label for the produced patterns

    Returns:
        Patterns in scan order (by trigger index, then detector)
    """
    patterns = []

    for i, current in enumerate(bars):
        found = [
            detect_doji(current, i, timeframe),
            detect_hammer(current, i, timeframe),
            detect_shooting_star(current, i, timeframe),
        ]

        if i >= PATTERNS[PatternKind.ENGULFING_BULLISH]["bar_count"] - 1:
            found.append(detect_engulfing(current, bars[i - 1], i, timeframe))

        if i >= PATTERNS[PatternKind.MORNING_STAR]["bar_count"] - 1:
            window = bars[i - 2 : i + 1]
            found.extend(
                [
                    detect_morning_star(current, bars[i - 1], bars[i - 2], i, timeframe),
                    detect_evening_star(current, bars[i - 1], bars[i - 2], i, timeframe),
                    detect_three_white_soldiers(window, i, timeframe),
                    detect_three_black_crows(window, i, timeframe),
                ]
            )

        patterns.extend(pattern for pattern in found if pattern is not None)

    return patterns
