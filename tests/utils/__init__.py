"""Test utilities package."""

from .bar_builders import (
    BASE_TIMESTAMP,
    MINUTE_MS,
    REFERENCE_CLOSES,
    ascending_triangle_bars,
    bars_from_closes,
    channel_bars,
    descending_triangle_bars,
    double_bottom_bars,
    double_top_bars,
    flat_bars,
    make_bar,
    make_bars,
    reference_bars,
    trending_bars,
)
from .classifiers import AsyncClassifier, FailingClassifier, FixedClassifier

__all__ = [
    # Bar builders
    "BASE_TIMESTAMP",
    "MINUTE_MS",
    "REFERENCE_CLOSES",
    "make_bar",
    "make_bars",
    "bars_from_closes",
    "reference_bars",
    "trending_bars",
    "flat_bars",
    "double_top_bars",
    "double_bottom_bars",
    "ascending_triangle_bars",
    "descending_triangle_bars",
    "channel_bars",
    # Classifier doubles
    "FixedClassifier",
    "FailingClassifier",
    "AsyncClassifier",
]
