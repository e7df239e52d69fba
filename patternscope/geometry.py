"""
Chart-geometry pattern detectors.

Detectors slide a fixed window across the whole bar sequence and evaluate every position independently, so a
single formation may be reported at several neighboring positions.
"""

from collections.abc import Sequence

from .bars import Bar
from .patterns import Pattern, PatternKind
from .schemas import ChartPatternConfig


def trend_slope(values: Sequence[float]) -> float:
    """
    Ordinary least-squares slope of values against their index position.

    Returns:
        ``(nΣxy − ΣxΣy) / (nΣx² − (Σx)²)``, or 0.0 for fewer than two values
    """
    n = len(values)
    if n < 2:
        return 0.0

    sum_x = n * (n - 1) / 2
    sum_y = sum(values)
    sum_xy = sum(index * value for index, value in enumerate(values))
    sum_x2 = sum(index * index for index in range(n))

    return (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)


def detect_double_tops(
    bars: Sequence[Bar], timeframe: str, config: ChartPatternConfig | None = None
) -> list[Pattern]:
    """
    Detect double tops around every scan position.

    For each position ``i`` the neighborhood ``i ± double_window`` is searched for its highest high. When that
    high occurs at least twice, with the first and last occurrence ``min_peak_distance`` bars apart, and the
    lowest low between them sits more than ``min_peak_valley_pct`` below the peak, a bearish Double Top is
    anchored on the two peaks. Targets project the peak-to-valley height below the valley.

    Args:
        bars: Bars in chronological order
        timeframe: Timeframe label for the produced patterns
        config: Chart pattern thresholds (defaults if None)

    Returns:
        One pattern per qualifying scan position
    """
    config = config or ChartPatternConfig()
    window = config.double_window
    patterns = []

    for i in range(window, len(bars) - window):
        highs = [bar.high for bar in bars[i - window : i + window + 1]]
        resistance = max(highs)
        peak_offsets = [offset for offset, high in enumerate(highs) if high == resistance]
        if len(peak_offsets) < 2:
            continue

        first_peak = peak_offsets[0] + i - window
        second_peak = peak_offsets[-1] + i - window
        if second_peak - first_peak < config.min_peak_distance:
            continue

        support = min(bar.low for bar in bars[first_peak : second_peak + 1])
        if resistance <= 0:
            continue
        if (resistance - support) / resistance <= config.min_peak_valley_pct:
            continue

        height = resistance - support
        patterns.append(
            Pattern.create(
                PatternKind.DOUBLE_TOP,
                timeframe=timeframe,
                timestamp=bars[second_peak].timestamp,
                confidence=0.7,
                start_index=first_peak,
                end_index=second_peak,
                entry_price=support,
                stop_loss=resistance * 1.01,
                target1=support - height * 0.5,
                target2=support - height,
            )
        )

    return patterns


def detect_double_bottoms(
    bars: Sequence[Bar], timeframe: str, config: ChartPatternConfig | None = None
) -> list[Pattern]:
    """Mirror of detect_double_tops on lows: two equal troughs under a ridge, projected upward."""
    config = config or ChartPatternConfig()
    window = config.double_window
    patterns = []

    for i in range(window, len(bars) - window):
        lows = [bar.low for bar in bars[i - window : i + window + 1]]
        support = min(lows)
        trough_offsets = [offset for offset, low in enumerate(lows) if low == support]
        if len(trough_offsets) < 2:
            continue

        first_trough = trough_offsets[0] + i - window
        second_trough = trough_offsets[-1] + i - window
        if second_trough - first_trough < config.min_peak_distance:
            continue

        resistance = max(bar.high for bar in bars[first_trough : second_trough + 1])
        if resistance <= 0:
            continue
        if (resistance - support) / resistance <= config.min_peak_valley_pct:
            continue

        height = resistance - support
        patterns.append(
            Pattern.create(
                PatternKind.DOUBLE_BOTTOM,
                timeframe=timeframe,
                timestamp=bars[second_trough].timestamp,
                confidence=0.7,
                start_index=first_trough,
                end_index=second_trough,
                entry_price=resistance,
                stop_loss=support * 0.99,
                target1=resistance + height * 0.5,
                target2=resistance + height,
            )
        )

    return patterns


def detect_triangles(bars: Sequence[Bar], timeframe: str, config: ChartPatternConfig | None = None) -> list[Pattern]:
    """
    Classify ascending and descending triangles from the slopes of highs and lows.

    Each window covers the ``triangle_window`` bars before position ``i``; the pattern is stamped on bar ``i``.
    A flat high line over a rising low line is an Ascending Triangle, a falling high line over a flat low line
    is a Descending Triangle.
    """
    config = config or ChartPatternConfig()
    window = config.triangle_window
    flat = config.flat_slope
    patterns = []

    for i in range(window, len(bars) - config.triangle_tail):
        subset = bars[i - window : i]
        highs = [bar.high for bar in subset]
        lows = [bar.low for bar in subset]

        high_trend = trend_slope(highs)
        low_trend = trend_slope(lows)
        trigger = bars[i]

        if abs(high_trend) < flat and low_trend > flat:
            patterns.append(
                Pattern.create(
                    PatternKind.ASCENDING_TRIANGLE,
                    timeframe=timeframe,
                    timestamp=trigger.timestamp,
                    confidence=0.65,
                    start_index=i - window,
                    end_index=i,
                    entry_price=max(highs),
                    stop_loss=min(lows),
                    target1=trigger.close * 1.03,
                    target2=trigger.close * 1.06,
                )
            )

        if high_trend < -flat and abs(low_trend) < flat:
            patterns.append(
                Pattern.create(
                    PatternKind.DESCENDING_TRIANGLE,
                    timeframe=timeframe,
                    timestamp=trigger.timestamp,
                    confidence=0.65,
                    start_index=i - window,
                    end_index=i,
                    entry_price=min(lows),
                    stop_loss=max(highs),
                    target1=trigger.close * 0.97,
                    target2=trigger.close * 0.94,
                )
            )

    return patterns


def detect_channels(bars: Sequence[Bar], timeframe: str, config: ChartPatternConfig | None = None) -> list[Pattern]:
    """Detect rising and falling channels: parallel, non-flat high and low trend lines."""
    config = config or ChartPatternConfig()
    window = config.channel_window
    patterns = []

    for i in range(window, len(bars) - config.channel_tail):
        subset = bars[i - window : i]
        highs = [bar.high for bar in subset]
        lows = [bar.low for bar in subset]

        high_trend = trend_slope(highs)
        low_trend = trend_slope(lows)
        if not (abs(high_trend - low_trend) < config.parallel_tolerance and abs(high_trend) > config.flat_slope):
            continue

        trigger = bars[i]
        rising = high_trend > 0
        patterns.append(
            Pattern.create(
                PatternKind.CHANNEL_UP if rising else PatternKind.CHANNEL_DOWN,
                timeframe=timeframe,
                timestamp=trigger.timestamp,
                confidence=0.6,
                start_index=i - window,
                end_index=i,
                entry_price=trigger.close,
                stop_loss=min(lows) if rising else max(highs),
                target1=trigger.close * (1.02 if rising else 0.98),
                target2=trigger.close * (1.04 if rising else 0.96),
            )
        )

    return patterns


def scan_chart_patterns(
    bars: Sequence[Bar], timeframe: str, config: ChartPatternConfig | None = None
) -> list[Pattern]:
    """
    Run all chart-geometry detectors.

    Args:
        bars: Bars in chronological order
        timeframe: Timeframe label for the produced patterns
        config: Chart pattern thresholds (defaults if None)

    Returns:
        Double tops, double bottoms, triangles and channels, in that order; empty below ``config.min_bars``
    """
    config = config or ChartPatternConfig()
    if len(bars) < config.min_bars:
        return []

    return [
        *detect_double_tops(bars, timeframe, config),
        *detect_double_bottoms(bars, timeframe, config),
        *detect_triangles(bars, timeframe, config),
        *detect_channels(bars, timeframe, config),
    ]
