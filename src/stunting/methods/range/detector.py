from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import BaseModel, field_validator, StrictFloat, ValidationError

from stunting.config import DEFAULT_PLAUSIBLE_RANGES
from stunting.methods.base import BaseDetector


class AgeBracket(BaseModel):
    """
    Plausible measurement range for children within [min_age, max_age) months.
    """

    min_age: StrictFloat
    max_age: StrictFloat
    min: StrictFloat
    max: StrictFloat

    @field_validator("max_age", mode="after")
    @classmethod
    def min_age_lt_max_age(cls, v: float, info: Any) -> float:
        """Validate that min_age < max_age."""
        if info.data.get("min_age", float("inf")) >= v:
            raise ValueError("min_age must be < max_age")
        return v

    @field_validator("max", mode="after")
    @classmethod
    def min_lt_max(cls, v: float, info: Any) -> float:
        """Validate that min < max."""
        if info.data.get("min", float("inf")) >= v:
            raise ValueError("min must be < max")
        return v


class FlatRange(BaseModel):
    """
    Plausible measurement range independent of age.
    """

    min: StrictFloat
    max: StrictFloat

    @field_validator("max", mode="after")
    @classmethod
    def min_lt_max(cls, v: float, info: Any) -> float:
        """Validate that min < max."""
        if v <= info.data.get("min", float("inf")):
            raise ValueError("max must be > min")
        return v


class AgeDependentRange(BaseModel):
    """
    Age-bracketed plausible ranges for one measurement column.
    """

    age_col: str
    age_brackets: List[AgeBracket]

    @field_validator("age_brackets", mode="after")
    @classmethod
    def no_overlapping_brackets(cls, v: List[AgeBracket]) -> List[AgeBracket]:
        if not v:
            raise ValueError("At least one age bracket required")
        ordered = sorted(v, key=lambda b: b.min_age)
        for current, following in zip(ordered, ordered[1:]):
            if current.max_age > following.min_age:
                raise ValueError("Overlapping age brackets")
        return v


class RangeDetector(BaseDetector):
    """
    Detector for biologically implausible measurements.

    Flags heights and weights outside a plausible range before they reach the
    Z-score computer. Without a config the under-five defaults apply
    (height 38-130 cm, weight 0.9-35 kg).

    Config examples:

    Flat ranges:
        {
            "weight_kg": {"min": 0.9, "max": 35.0},
            "height_cm": {"min": 38.0, "max": 130.0}
        }

    Age-dependent:
        {
            "age_col": "age_months",
            "height_cm": {"age_brackets": [
                {"min_age": 0.0, "max_age": 24.0, "min": 38.0, "max": 100.0},
                {"min_age": 24.0, "max_age": 61.0, "min": 65.0, "max": 130.0}
            ]}
        }
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize with range configs.

        Raises:
            ValueError: If config is invalid.
        """
        if config is None:
            config = DEFAULT_PLAUSIBLE_RANGES
        if not isinstance(config, dict):
            raise ValueError("Config must be a dict")
        self.flat_configs: Dict[str, FlatRange] = {}
        self.age_configs: Dict[str, AgeDependentRange] = {}
        age_col = config.get("age_col")
        try:
            for col, params in config.items():
                if col == "age_col":
                    continue
                if not isinstance(params, dict):
                    raise ValueError(f"Config for column '{col}' must be a dict")
                if age_col is not None:
                    if "age_brackets" not in params or "min" in params or "max" in params:
                        raise ValueError(
                            f"For age-dependent config, column '{col}' must have only age_brackets"
                        )
                    self.age_configs[col] = AgeDependentRange(
                        age_col=age_col, age_brackets=params["age_brackets"]
                    )
                else:
                    if "min" not in params or "max" not in params or "age_brackets" in params:
                        raise ValueError(
                            f"Config for column '{col}' must have min and max for flat range"
                        )
                    self.flat_configs[col] = FlatRange(min=params["min"], max=params["max"])
        except ValidationError as e:
            raise ValueError(f"Invalid range configuration: {e}") from e
        self.validate_config()

    def validate_config(self) -> None:
        """Validate the detector configuration."""
        if not self.flat_configs and not self.age_configs:
            raise ValueError("Range configuration must cover at least one column")

    def detect(self, df: pd.DataFrame, columns: list[str]) -> Dict[str, pd.Series]:
        """Flag values outside the configured ranges. Missing values are not flagged.

        Args:
            df: Child records.
            columns: Measurement columns to check (must have configs).

        Returns:
            Dict of boolean Series, one per column, where True marks an implausible value.

        Raises:
            ValueError: If column not in df or no config for column.
        """
        results = {}
        for col in columns:
            values = self._numeric_column(df, col)
            if col in self.flat_configs:
                bounds = self.flat_configs[col]
                flags = (values < bounds.min) | (values > bounds.max)
            elif col in self.age_configs:
                age_dependent = self.age_configs[col]
                ages = self._numeric_column(df, age_dependent.age_col)
                flags = pd.Series(False, index=df.index, dtype=bool)
                for bracket in age_dependent.age_brackets:
                    mask = (ages >= bracket.min_age) & (ages < bracket.max_age)
                    if mask.any():
                        flags.loc[mask] = (values[mask] < bracket.min) | (
                            values[mask] > bracket.max
                        )
            else:
                raise ValueError(f"No range configuration found for column '{col}'")
            results[col] = flags.astype(bool).rename(col)
        return results
