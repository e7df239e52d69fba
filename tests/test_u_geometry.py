"""
Unit tests for the chart-geometry detectors.
"""

import pytest

from patternscope.geometry import (
    detect_channels,
    detect_double_bottoms,
    detect_double_tops,
    detect_triangles,
    scan_chart_patterns,
    trend_slope,
)
from patternscope.patterns import PatternDirection, PatternFamily, PatternKind
from patternscope.schemas import ChartPatternConfig

from .utils import (
    ascending_triangle_bars,
    channel_bars,
    descending_triangle_bars,
    double_bottom_bars,
    double_top_bars,
    flat_bars,
    make_bar,
)

TIMEFRAME = "15m"


@pytest.mark.unit
class TestTrendSlope:
    """Test cases for the least-squares slope."""

    def test_linear_values(self):
        """A perfect line returns its slope."""
        assert trend_slope([1.0, 3.0, 5.0, 7.0]) == pytest.approx(2.0)

    def test_constant_values(self):
        """Constant values have zero slope."""
        assert trend_slope([5.0] * 10) == 0.0

    def test_short_input(self):
        """Fewer than two values have no slope."""
        assert trend_slope([]) == 0.0
        assert trend_slope([42.0]) == 0.0


@pytest.mark.unit
class TestDoubleTops:
    """Test cases for double top and double bottom detection."""

    def test_double_top_detected_at_every_position(self):
        """Each scan position that sees both peaks reports the formation."""
        bars = double_top_bars()

        patterns = detect_double_tops(bars, TIMEFRAME)

        assert len(patterns) == 20  # positions 20..39
        pattern = patterns[0]
        assert pattern.kind == PatternKind.DOUBLE_TOP
        assert pattern.family == PatternFamily.CHART
        assert pattern.direction == PatternDirection.BEARISH
        assert pattern.confidence == 0.7
        assert (pattern.start_index, pattern.end_index) == (20, 35)
        assert pattern.timestamp == bars[35].timestamp
        assert pattern.entry_price == 95.0
        assert pattern.stop_loss == pytest.approx(110.0 * 1.01)
        assert pattern.target1 == pytest.approx(87.5)
        assert pattern.target2 == pytest.approx(80.0)
        assert all(other == pattern for other in patterns)

    def test_peaks_too_close(self):
        """Peaks fewer than min_peak_distance bars apart are ignored."""
        bars = flat_bars(60)
        bars[20] = make_bar(105.0, 110.0, 104.0, 106.0, index=20)
        bars[25] = make_bar(105.0, 110.0, 104.0, 106.0, index=25)

        assert detect_double_tops(bars, TIMEFRAME) == []

    def test_shallow_valley(self):
        """A valley within min_peak_valley_pct of the peak is not a double top."""
        assert detect_double_tops(flat_bars(60), TIMEFRAME) == []

    def test_single_peak(self):
        """A lone highest high never qualifies."""
        assert detect_double_bottoms(double_top_bars(), TIMEFRAME) == []

    def test_config_relaxes_valley(self):
        """Lowering min_peak_valley_pct admits shallow ranges."""
        config = ChartPatternConfig(min_peak_valley_pct=0.01)

        patterns = detect_double_tops(flat_bars(60), TIMEFRAME, config)

        assert patterns
        assert all(pattern.entry_price == 99.0 for pattern in patterns)

    def test_double_bottom(self):
        """Two equal troughs under a ridge project upward."""
        patterns = detect_double_bottoms(double_bottom_bars(), TIMEFRAME)

        assert len(patterns) == 20
        pattern = patterns[-1]
        assert pattern.kind == PatternKind.DOUBLE_BOTTOM
        assert pattern.direction == PatternDirection.BULLISH
        assert (pattern.start_index, pattern.end_index) == (20, 35)
        assert pattern.entry_price == 105.0
        assert pattern.stop_loss == pytest.approx(90.0 * 0.99)
        assert pattern.target1 == pytest.approx(112.5)
        assert pattern.target2 == pytest.approx(120.0)


@pytest.mark.unit
class TestTriangles:
    """Test cases for triangle detection."""

    def test_ascending_triangle(self):
        """Flat highs over rising lows."""
        bars = ascending_triangle_bars()

        patterns = detect_triangles(bars, TIMEFRAME)

        assert len(patterns) == 10  # positions 30..39
        assert all(pattern.kind == PatternKind.ASCENDING_TRIANGLE for pattern in patterns)
        first = patterns[0]
        assert first.direction == PatternDirection.BULLISH
        assert first.confidence == 0.65
        assert (first.start_index, first.end_index) == (0, 30)
        assert first.timestamp == bars[30].timestamp
        assert first.entry_price == 101.0
        assert first.stop_loss == 90.0
        assert first.target1 == pytest.approx(100.0 * 1.03)
        assert first.target2 == pytest.approx(100.0 * 1.06)

    def test_descending_triangle(self):
        """Falling highs over flat lows."""
        patterns = detect_triangles(descending_triangle_bars(), TIMEFRAME)

        assert len(patterns) == 10
        first = patterns[0]
        assert first.kind == PatternKind.DESCENDING_TRIANGLE
        assert first.direction == PatternDirection.BEARISH
        assert first.entry_price == 90.0
        assert first.stop_loss == 110.0
        assert first.target1 == pytest.approx(100.0 * 0.97)

    def test_channel_is_not_triangle(self):
        """Parallel sloping lines are not triangles."""
        assert detect_triangles(channel_bars(50), TIMEFRAME) == []

    def test_short_input(self):
        """Windows that do not fit produce nothing."""
        assert detect_triangles(ascending_triangle_bars(40), TIMEFRAME) == []


@pytest.mark.unit
class TestChannels:
    """Test cases for channel detection."""

    def test_rising_channel(self):
        """Parallel rising highs and lows."""
        bars = channel_bars(40)

        patterns = detect_channels(bars, TIMEFRAME)

        assert len(patterns) == 10  # positions 25..34
        first = patterns[0]
        assert first.kind == PatternKind.CHANNEL_UP
        assert first.direction == PatternDirection.BULLISH
        assert first.confidence == 0.6
        assert (first.start_index, first.end_index) == (0, 25)
        assert first.entry_price == bars[25].close
        assert first.stop_loss == pytest.approx(99.0)
        assert first.target1 == pytest.approx(bars[25].close * 1.02)

    def test_falling_channel(self):
        """Parallel falling highs and lows."""
        patterns = detect_channels(channel_bars(40, step=-0.1), TIMEFRAME)

        assert len(patterns) == 10
        first = patterns[0]
        assert first.kind == PatternKind.CHANNEL_DOWN
        assert first.direction == PatternDirection.BEARISH
        assert first.stop_loss == pytest.approx(101.0)
        assert first.target2 == pytest.approx(first.entry_price * 0.96)

    def test_flat_range_is_not_channel(self):
        """Parallel but flat lines are a range, not a channel."""
        assert detect_channels(flat_bars(40), TIMEFRAME) == []

    def test_triangle_is_not_channel(self):
        """Converging lines are not a channel."""
        assert detect_channels(ascending_triangle_bars(), TIMEFRAME) == []


@pytest.mark.unit
class TestScanChartPatterns:
    """Test cases for the combined chart scan."""

    def test_minimum_history(self):
        """Below min_bars nothing is scanned."""
        config = ChartPatternConfig(min_bars=50)

        assert scan_chart_patterns(channel_bars(40), TIMEFRAME, config) == []
        assert len(scan_chart_patterns(channel_bars(40), TIMEFRAME)) == 10

    def test_double_tops_reported_first(self):
        """Detector results are concatenated in a fixed order."""
        bars = double_top_bars()

        patterns = scan_chart_patterns(bars, TIMEFRAME)

        assert patterns[:20] == detect_double_tops(bars, TIMEFRAME)

    def test_timeframe_propagates(self):
        """Every chart pattern carries the requested timeframe."""
        patterns = scan_chart_patterns(ascending_triangle_bars(), "1h")

        assert patterns
        assert all(pattern.timeframe == "1h" for pattern in patterns)

    def test_zero_price_bars(self):
        """All-zero bars produce no chart patterns instead of dividing by a zero peak."""
        bars = [make_bar(0.0, 0.0, 0.0, 0.0, index=i, volume=0.0) for i in range(60)]

        assert detect_double_tops(bars, TIMEFRAME) == []
        assert detect_double_bottoms(bars, TIMEFRAME) == []
        assert scan_chart_patterns(bars, TIMEFRAME) == []
