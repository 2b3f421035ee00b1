"""
Base detector class for child screening methods.
"""

from abc import ABC, abstractmethod
import pandas as pd
from typing import Dict


class BaseDetector(ABC):
    """
    Abstract base class for screening methods over child records.

    A detector takes a DataFrame with one row per measurement (age_months,
    sex, height_cm, weight_kg, ...) and returns one boolean Series per
    requested column or measure, aligned with the DataFrame index, where True
    marks a row that needs attention. Rows whose values are missing or cannot
    be read as numbers are never flagged.

    Subclasses implement `detect` and `validate_config`; the base class
    provides column validation and numeric coercion.

    Example subclass implementation:
        class HeightFloorDetector(BaseDetector):
            def __init__(self, min_height: float = 40.0):
                self.min_height = min_height
                self.validate_config()

            def validate_config(self) -> None:
                if self.min_height <= 0:
                    raise ValueError("min_height must be positive")

            def detect(self, df: pd.DataFrame, columns: list[str]) -> Dict[str, pd.Series]:
                return {
                    col: (self._numeric_column(df, col) < self.min_height).rename(col)
                    for col in columns
                }
    """

    @abstractmethod
    def detect(self, df: pd.DataFrame, columns: list[str]) -> Dict[str, pd.Series]:
        """
        Flag rows for the requested columns.

        Args:
            df: Child records.
            columns: Measurement columns or Z-score measures to screen.

        Returns:
            Dictionary mapping each requested name to a boolean Series.
        """
        pass

    @abstractmethod
    def validate_config(self) -> None:
        """
        Validate method-specific configuration.

        Raises:
            ValueError: If configuration is invalid.
        """
        pass

    def _validate_column(self, df: pd.DataFrame, column: str) -> None:
        """
        Validate that a column exists in the DataFrame.

        Raises:
            ValueError: If column does not exist.
        """
        if column not in df.columns:
            raise ValueError(f"Column '{column}' does not exist in DataFrame")

    def _numeric_column(self, df: pd.DataFrame, column: str) -> pd.Series:
        """
        Measurement column as float64; unparseable entries (e.g. "12,5") become NaN.

        Raises:
            ValueError: If column does not exist.
        """
        self._validate_column(df, column)
        return pd.to_numeric(df[column], errors="coerce").astype("float64")
