"""
Single-child assessment: validated input in, Z-scores and advice out.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .age import DateLike, calculate_age, describe_age, parse_date
from .classification import PriorityLevel, ZScoreResult, priority_level
from .exceptions import InvalidMeasurement
from .recommendations import monitoring_schedule, recommend
from .reference import DEFAULT_REFERENCE_TABLE, ReferenceTable, Sex
from .zscores import _coerce_age, _coerce_positive, _coerce_sex, calculate_zscore, zscore_to_percentile


class MeasurementInput(BaseModel):
    """
    One anthropometric measurement of a child.

    Either birth_date or age_months must be given; when both are present the
    precomputed age_months wins.

    Attributes:
        height_cm (float): Height/length in cm, > 0.
        weight_kg (float): Weight in kg, > 0.
        sex (Sex): 'male'/'female' (also accepts 'M'/'F').
        birth_date (Optional[Union[str, date]]): ISO birth date.
        age_months (Optional[float]): Precomputed age in months, >= 0.
    """

    model_config = ConfigDict(frozen=True)

    height_cm: float
    weight_kg: float
    sex: Sex
    birth_date: Optional[Union[date, str]] = None
    age_months: Optional[float] = None

    @field_validator("height_cm", mode="before")
    @classmethod
    def validate_height(cls, v: Any) -> float:
        return _coerce_positive(v, "Height")

    @field_validator("weight_kg", mode="before")
    @classmethod
    def validate_weight(cls, v: Any) -> float:
        return _coerce_positive(v, "Weight")

    @field_validator("sex", mode="before")
    @classmethod
    def validate_sex(cls, v: Any) -> Sex:
        return _coerce_sex(v)

    @field_validator("age_months", mode="before")
    @classmethod
    def validate_age(cls, v: Any) -> Optional[float]:
        if v is None:
            return None
        return _coerce_age(v)

    @field_validator("birth_date", mode="before")
    @classmethod
    def validate_birth_date(cls, v: Any) -> Optional[date]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        parsed = parse_date(v)
        if parsed is None:
            raise ValueError(f"Birth date is not a valid ISO date: {v!r}")
        return parsed

    @model_validator(mode="after")
    def require_age_source(self) -> "MeasurementInput":
        if self.birth_date is None and self.age_months is None:
            raise ValueError("Either birth_date or age_months is required")
        return self

    def resolve_age(self, today: DateLike = None) -> float:
        """Age in months, from age_months or computed from birth_date."""
        if self.age_months is not None:
            return self.age_months
        return float(calculate_age(self.birth_date, today))


class Assessment(BaseModel):
    """Complete assessment of one measurement."""

    model_config = ConfigDict(frozen=True)

    result: ZScoreResult
    age_months: float
    age_text: str
    percentiles: Dict[str, float]
    priority: PriorityLevel
    recommendations: List[str]
    monitoring: List[str]


def _to_measurement(measurement: Union[MeasurementInput, Dict[str, Any]]) -> MeasurementInput:
    if isinstance(measurement, MeasurementInput):
        return measurement
    try:
        return MeasurementInput(**measurement)
    except ValidationError as e:
        raise InvalidMeasurement(f"Invalid measurement: {e}") from e


def assess(
    measurement: Union[MeasurementInput, Dict[str, Any]],
    today: Union[date, datetime, str, None] = None,
    table: ReferenceTable = DEFAULT_REFERENCE_TABLE,
) -> Assessment:
    """
    Assess one child: age, Z-scores, statuses, priority and advice.

    Args:
        measurement: MeasurementInput or dict of its fields
        today: Reference date for age calculation (defaults to today)
        table: Reference table

    Returns:
        Assessment

    Raises:
        InvalidMeasurement: If the measurement fails validation.
    """
    measurement = _to_measurement(measurement)
    age_months = measurement.resolve_age(today)

    result = calculate_zscore(
        measurement.height_cm,
        measurement.weight_kg,
        age_months,
        measurement.sex,
        table,
    )
    percentiles = {
        name: round(zscore_to_percentile(score), 1)
        for name, score in zip(
            ("height_for_age", "weight_for_age", "weight_for_height"), result.scores
        )
    }

    return Assessment(
        result=result,
        age_months=age_months,
        age_text=describe_age(int(age_months)),
        percentiles=percentiles,
        priority=priority_level(result),
        recommendations=recommend(result, age_months),
        monitoring=monitoring_schedule(result),
    )
