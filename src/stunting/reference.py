"""
WHO Child Growth Standards reference table.

Holds the (age, sex) -> (mean, SD) samples for height and weight used by the
Z-score computer. The built-in samples come from the WHO Child Growth
Standards 2006 and are sparsely sampled across 0-60 months; tables can also be
loaded from CSV and injected wherever a table is accepted.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Union

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat


class Sex(str, Enum):
    """Sex of the child. Accepts 'male'/'female' as well as 'M'/'F'."""

    MALE = "male"
    FEMALE = "female"

    @classmethod
    def _missing_(cls, value: object) -> "Sex":
        if isinstance(value, str):
            normalized = value.strip().lower()
            aliases = {
                "m": cls.MALE,
                "l": cls.MALE,
                "laki-laki": cls.MALE,
                "f": cls.FEMALE,
                "p": cls.FEMALE,
                "perempuan": cls.FEMALE,
            }
            if normalized in aliases:
                return aliases[normalized]
            for member in cls:
                if member.value == normalized:
                    return member
        return None  # type: ignore[return-value]


class ReferenceSample(BaseModel):
    """
    One reference sample of the growth table.

    Attributes:
        age_months: Sampled age in whole months.
        sex: Sex the sample applies to.
        height_mean_cm: Mean height (cm) at this age.
        height_sd_cm: Standard deviation of height (cm).
        weight_mean_kg: Mean weight (kg) at this age.
        weight_sd_kg: Standard deviation of weight (kg).
    """

    model_config = ConfigDict(frozen=True)

    age_months: int = Field(ge=0)
    sex: Sex
    height_mean_cm: PositiveFloat
    height_sd_cm: PositiveFloat
    weight_mean_kg: PositiveFloat
    weight_sd_kg: PositiveFloat


STAT_FIELDS = ("height_mean_cm", "height_sd_cm", "weight_mean_kg", "weight_sd_kg")


def _sample(age: int, sex: str, h_mean: float, h_sd: float, w_mean: float, w_sd: float) -> ReferenceSample:
    return ReferenceSample(
        age_months=age,
        sex=Sex(sex),
        height_mean_cm=h_mean,
        height_sd_cm=h_sd,
        weight_mean_kg=w_mean,
        weight_sd_kg=w_sd,
    )


# WHO Child Growth Standards 2006, sampled at 0, 6, 12, 24, 36, 48 and 60 months
WHO_2006_SAMPLES = (
    _sample(0, "male", 49.9, 1.89, 3.3, 0.39),
    _sample(0, "female", 49.1, 1.86, 3.2, 0.38),
    _sample(6, "male", 67.6, 2.33, 7.9, 0.78),
    _sample(6, "female", 65.7, 2.24, 7.3, 0.74),
    _sample(12, "male", 75.7, 2.44, 9.6, 0.89),
    _sample(12, "female", 74.0, 2.36, 9.0, 0.85),
    _sample(24, "male", 87.1, 2.88, 12.2, 1.12),
    _sample(24, "female", 86.4, 2.85, 11.5, 1.08),
    _sample(36, "male", 96.1, 3.24, 14.3, 1.38),
    _sample(36, "female", 95.1, 3.20, 13.9, 1.35),
    _sample(48, "male", 103.3, 3.56, 16.3, 1.68),
    _sample(48, "female", 102.7, 3.58, 15.9, 1.66),
    _sample(60, "male", 110.0, 3.78, 18.3, 2.01),
    _sample(60, "female", 109.4, 3.81, 17.9, 2.03),
)


class ReferenceTable:
    """
    Immutable reference table indexed by sex.

    Samples for each sex are sorted by age once, at construction, and exposed
    as read-only numpy arrays so interpolation never re-sorts per call.

    Usage:
        table = ReferenceTable(WHO_2006_SAMPLES)
        arrays = table.arrays(Sex.MALE)
        arrays["age_months"], arrays["height_mean_cm"]

    Raises:
        ValueError: If a sex has no samples or an age is sampled twice.
    """

    def __init__(self, samples: Iterable[ReferenceSample]) -> None:
        self._samples = tuple(samples)
        self._arrays: Dict[Sex, Dict[str, np.ndarray]] = {}
        self.validate()
        for sex in Sex:
            rows = sorted(
                (s for s in self._samples if s.sex == sex), key=lambda s: s.age_months
            )
            columns = {"age_months": np.array([s.age_months for s in rows], dtype=np.float64)}
            for field in STAT_FIELDS:
                columns[field] = np.array([getattr(s, field) for s in rows], dtype=np.float64)
            for arr in columns.values():
                arr.flags.writeable = False
            self._arrays[sex] = columns

    def validate(self) -> None:
        """
        Check the table invariants.

        Raises:
            ValueError: If the table is empty for a sex or has duplicate ages.
        """
        for sex in Sex:
            ages = [s.age_months for s in self._samples if s.sex == sex]
            if not ages:
                raise ValueError(f"Reference table has no samples for sex '{sex.value}'")
            if len(ages) != len(set(ages)):
                duplicates = sorted({a for a in ages if ages.count(a) > 1})
                raise ValueError(
                    f"Reference table has duplicate ages for sex '{sex.value}': {duplicates}"
                )

    @property
    def samples(self) -> tuple:
        return self._samples

    def samples_for(self, sex: Union[Sex, str]) -> List[ReferenceSample]:
        """Samples for one sex, ascending by age."""
        sex = Sex(sex)
        return sorted(
            (s for s in self._samples if s.sex == sex), key=lambda s: s.age_months
        )

    def arrays(self, sex: Union[Sex, str]) -> Dict[str, np.ndarray]:
        """Per-column arrays (ascending by age) for one sex."""
        return self._arrays[Sex(sex)]

    def age_range(self, sex: Union[Sex, str]) -> tuple:
        ages = self.arrays(sex)["age_months"]
        return float(ages[0]), float(ages[-1])

    def to_frame(self) -> pd.DataFrame:
        """Table as a DataFrame with one row per sample."""
        records = [
            {**s.model_dump(), "sex": s.sex.value} for s in self._samples
        ]
        return pd.DataFrame.from_records(records).sort_values(["sex", "age_months"]).reset_index(drop=True)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "ReferenceTable":
        """
        Build a table from a DataFrame.

        Args:
            df: DataFrame with columns age_months, sex and the four statistics.

        Raises:
            ValueError: If required columns are missing or values are invalid.
        """
        required = ("age_months", "sex") + STAT_FIELDS
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise ValueError(f"Reference data is missing columns: {missing}")
        samples = [
            ReferenceSample(**{col: row[col] for col in required})
            for row in df.to_dict(orient="records")
        ]
        return cls(samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __repr__(self) -> str:
        return f"ReferenceTable({len(self._samples)} samples)"


def load_reference_table(path: Union[str, Path]) -> ReferenceTable:
    """
    Load a reference table from a CSV file.

    Args:
        path: CSV file with columns age_months, sex, height_mean_cm,
            height_sd_cm, weight_mean_kg, weight_sd_kg.

    Returns:
        Validated ReferenceTable.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file content is not a valid reference table.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Reference table file not found: {path}")
    df = pd.read_csv(path)
    return ReferenceTable.from_frame(df)


DEFAULT_REFERENCE_TABLE = ReferenceTable(WHO_2006_SAMPLES)
