"""
Base component classes for the patternscope package.

This module provides the abstract base class and shared input handling for all patternscope components.
"""

from abc import ABC, abstractmethod

from pandas import DataFrame as PandasDataFrame
from polars import DataFrame as PolarsDataFrame
from polars import col, from_pandas

# Required columns for OHLC data
REQUIRED_COLUMNS = ["timestamp", "open", "high", "low", "close"]


class Component(ABC):
    """Base class for all patternscope components."""

    def __init__(self):
        """Initialize base component with metadata tracking."""
        from datetime import datetime

        self._created_at = datetime.now()

    @abstractmethod
    def process(self, data: PolarsDataFrame | PandasDataFrame) -> PolarsDataFrame:
        """
        Process data and return Polars DataFrame results.

        Args:
            data: Input DataFrame (Polars or Pandas)

        Returns:
            Processed PolarsDataFrame with results
        """
        pass

    def validate_input(self, data: PolarsDataFrame | PandasDataFrame) -> None:
        """
        Validate OHLC input data format.

        Args:
            data: Input DataFrame to validate

        Raises:
            ValueError: If data format is invalid, with specific error message
        """
        df = self._convert_to_polars(data)

        missing_cols = [name for name in REQUIRED_COLUMNS if name not in df.columns]
        if missing_cols:
            raise ValueError(f"Missing required columns: {missing_cols}")

        if len(df) == 0:
            return

        # Verify price data integrity
        checks = [
            (col("high") >= col("low")).all().alias("high >= low"),
            (col("high") >= col("open")).all().alias("high >= open"),
            (col("high") >= col("close")).all().alias("high >= close"),
            (col("low") <= col("open")).all().alias("low <= open"),
            (col("low") <= col("close")).all().alias("low <= close"),
        ]
        if "volume" in df.columns:
            checks.append((col("volume").fill_null(0) >= 0).all().alias("volume >= 0"))

        results = df.select(checks).row(0, named=True)
        failed_validations = [name for name, passed in results.items() if not passed]
        if failed_validations:
            raise ValueError(f"Invalid price data: failed validations: {failed_validations}")

    def _convert_to_polars(self, data: PolarsDataFrame | PandasDataFrame) -> PolarsDataFrame:
        """
        Convert input DataFrame to Polars if needed.

        Args:
            data: Input DataFrame (Polars or Pandas)

        Returns:
            PolarsDataFrame (converted if input was Pandas)
        """
        if isinstance(data, PandasDataFrame):
            return from_pandas(data)
        elif isinstance(data, PolarsDataFrame):
            return data
        else:
            raise TypeError(f"Unsupported data type: {type(data)}. Expected pandas.DataFrame or polars.DataFrame")
