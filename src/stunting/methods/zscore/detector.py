# ZScoreDetector class

"""
Z-score based screening of child records.

Flags children whose height-for-age, weight-for-age or weight-for-height
Z-score falls below a cutoff (default -2, the stunting/underweight/wasting
boundary) using the WHO reference table.
"""

from typing import Dict, List
import logging
import numpy as np
import pandas as pd
from pydantic import BaseModel, field_validator, ValidationError

from ..base import BaseDetector
from ...config import MAX_AGE_MONTHS, MODERATE_CUTOFF
from ...reference import DEFAULT_REFERENCE_TABLE, ReferenceTable
from ...zscores import calculate_growth_metrics


class ZScoreConfig(BaseModel):
    """
    Configuration for Z-score based screening.

    Attributes:
        age_col (str): Name of age column in months ('age_months' by default).
        sex_col (str): Name of sex column ('sex' by default). Expected values: 'male'/'female' or 'M'/'F'.
        height_col (str): Name of height column in cm ('height_cm' by default).
        weight_col (str): Name of weight column in kg ('weight_kg' by default).
        cutoff (float): Rows with a Z-score strictly below the cutoff are flagged. -2.0 by default.
        validate_age_units (bool): Warn when ages look like years or exceed 60 months. True by default.
    """

    age_col: str = "age_months"
    sex_col: str = "sex"
    height_col: str = "height_cm"
    weight_col: str = "weight_kg"
    cutoff: float = MODERATE_CUTOFF
    validate_age_units: bool = True

    @field_validator("age_col", "sex_col", "height_col", "weight_col")
    @classmethod
    def validate_column_names(cls, v: str) -> str:
        """Ensure column names are valid string identifiers."""
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Column name must be a non-empty string")
        return v

    @field_validator("cutoff")
    @classmethod
    def validate_cutoff(cls, v: float) -> float:
        """Cutoffs above zero would flag children above the reference mean."""
        if not np.isfinite(v) or v > 0:
            raise ValueError("Cutoff must be a finite value <= 0")
        return v


# Measure-to-metric mapping
MEASURE_METRIC_MAPPING = {
    "haz": "haz",  # Height-for-age → stunting
    "waz": "waz",  # Weight-for-age → underweight
    "whz": "whz",  # Weight-for-height → wasting
}


class ZScoreDetector(BaseDetector):
    """
    Z-score based detector for undernutrition.

    Flags, per requested measure:
    - 'haz': height-for-age Z-score < cutoff (stunting)
    - 'waz': weight-for-age Z-score < cutoff (underweight)
    - 'whz': weight-for-height Z-score < cutoff (wasting)

    Rows with missing or invalid measurements are never flagged.

    Usage:
        detector = ZScoreDetector(age_col='umur_bulan', sex_col='jenis_kelamin')
        flags = detector.detect(df, ['haz', 'whz'])

    Attributes:
        config (ZScoreConfig): Column mappings and cutoff.
        table (ReferenceTable): Reference table used for the Z-scores.
    """

    def __init__(
        self,
        age_col: str = "age_months",
        sex_col: str = "sex",
        height_col: str = "height_cm",
        weight_col: str = "weight_kg",
        cutoff: float = MODERATE_CUTOFF,
        validate_age_units: bool = True,
        table: ReferenceTable = DEFAULT_REFERENCE_TABLE,
    ):
        """
        Initialize ZScoreDetector with configurable column mappings.

        Raises:
            ValueError: If configuration is invalid per ZScoreConfig validation
        """
        try:
            self.config = ZScoreConfig(
                age_col=age_col,
                sex_col=sex_col,
                height_col=height_col,
                weight_col=weight_col,
                cutoff=cutoff,
                validate_age_units=validate_age_units,
            )
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

        self.table = table
        self.validate_config()

    def validate_config(self) -> None:
        """
        Validate detector configuration.

        Raises:
            ValueError: If two roles share a column name
        """
        columns = [
            self.config.age_col,
            self.config.sex_col,
            self.config.height_col,
            self.config.weight_col,
        ]
        if len(columns) != len(set(columns)):
            raise ValueError("Configuration must specify unique column names")

    def detect(self, df: pd.DataFrame, columns: List[str]) -> Dict[str, pd.Series]:
        """
        Flag rows whose Z-score for each requested measure is below the cutoff.

        Args:
            df: Child records with age, sex, height and weight columns
            columns: Measures to screen ('haz', 'waz', 'whz')

        Returns:
            Dict mapping each measure to a boolean Series aligned with df.index

        Raises:
            ValueError: If an unsupported measure is requested, required columns
                are missing, or the Z-score computation fails
        """
        for col in columns:
            if col not in MEASURE_METRIC_MAPPING:
                supported = list(MEASURE_METRIC_MAPPING.keys())
                raise ValueError(
                    f"Unsupported measure '{col}' for z-score detection. "
                    f"Supported measures: {supported}"
                )

        self._validate_required_columns(df)
        if self.config.validate_age_units:
            self._validate_age_units(df)

        if df.empty:
            return {col: pd.Series(dtype=bool, index=df.index, name=col) for col in columns}

        try:
            metrics = calculate_growth_metrics(
                agemos=self._numeric_column(df, self.config.age_col).to_numpy(),
                sex=df[self.config.sex_col].to_numpy(dtype=object),
                height=self._numeric_column(df, self.config.height_col).to_numpy(),
                weight=self._numeric_column(df, self.config.weight_col).to_numpy(),
                table=self.table,
            )
        except ValueError as e:
            raise ValueError(f"Z-score detection failed: {e}") from e

        results = {}
        for col in columns:
            scores = metrics[MEASURE_METRIC_MAPPING[col]]
            flags = np.where(np.isnan(scores), False, scores < self.config.cutoff)
            results[col] = pd.Series(flags.astype(bool), index=df.index, name=col)
        return results

    def _validate_required_columns(self, df: pd.DataFrame) -> None:
        """
        Validate that required columns exist in DataFrame.

        Raises:
            ValueError: If a configured column is missing
        """
        for column in (
            self.config.age_col,
            self.config.sex_col,
            self.config.height_col,
            self.config.weight_col,
        ):
            self._validate_column(df, column)

    def _validate_age_units(self, df: pd.DataFrame) -> None:
        """
        Warn about ages that look like years or exceed the under-five range.

        A maximum age of 5 or less across several children suggests ages were
        recorded in years instead of months.
        """
        ages = self._numeric_column(df, self.config.age_col)
        max_age = ages.max()

        if len(ages.dropna()) > 1 and pd.notna(max_age) and max_age <= 5:
            logging.warning(
                f"Maximum age {max_age:.1f} suggests ages may be in years "
                f"instead of months. Z-score calculations require ages in months."
            )

        if pd.notna(max_age) and max_age > MAX_AGE_MONTHS:
            logging.warning(
                f"Maximum age {max_age:.1f} months exceeds the WHO under-five limit "
                f"({MAX_AGE_MONTHS} months). Reference values are clamped for these children."
            )
