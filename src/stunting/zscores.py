"""
Z-Score Calculation Utilities for Child Growth

This module converts a child's height and weight into standard deviation
scores against the WHO Child Growth Standards reference table:

- height-for-age (HAZ) and weight-for-age (WAZ): (X - mean) / SD, with mean
  and SD linearly interpolated between the sampled reference ages.
- weight-for-height (WHZ): a proportional approximation. The expected weight
  for the child's height is weight_mean * (height / height_mean); the score is
  (weight - expected) / weight_SD. This is NOT the WHO weight-for-height
  standard, which uses its own height-indexed table.

Provides a scalar path (one child, returns ZScoreResult) and a vectorized path
(numpy arrays, used for batch screening).
"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, NamedTuple, Optional, Union

import numpy as np
from numba import jit
from scipy import stats

from .classification import (
    ZScoreResult,
    classify_height_for_age,
    classify_weight_for_age,
    classify_weight_for_height,
    is_stunted,
)
from .config import (
    MAX_AGE_MONTHS,
    MAX_MEAN_HEIGHT_CM,
    MAX_WEIGHT_KG,
    MIN_MEAN_HEIGHT_CM,
    MODERATE_CUTOFF,
    ZSCORE_DECIMALS,
)
from .exceptions import InvalidMeasurement
from .reference import DEFAULT_REFERENCE_TABLE, ReferenceTable, Sex


class GrowthStats(NamedTuple):
    """Interpolated reference statistics at one age."""

    height_mean: float
    height_sd: float
    weight_mean: float
    weight_sd: float


@jit(nopython=True, cache=True)
def sd_zscore(X: np.ndarray, M: np.ndarray, SD: np.ndarray) -> np.ndarray:
    """
    Calculate standard deviation scores z = (X - M) / SD element-wise.

    Rows with a non-finite value, non-finite mean or non-positive SD get NaN.

    Args:
        X: Observed values (cm/kg), 1D
        M: Reference means at the same rows
        SD: Reference standard deviations at the same rows

    Returns:
        Z-scores (0 at the mean, -2.0 two SDs below)
    """
    n = X.shape[0]
    z = np.full(n, np.nan, dtype=np.float64)
    for i in range(n):
        if np.isfinite(X[i]) and np.isfinite(M[i]) and SD[i] > 0:
            z[i] = (X[i] - M[i]) / SD[i]
    return z


def round_zscore(value: float, places: int = ZSCORE_DECIMALS) -> float:
    """
    Round a Z-score half away from zero.

    The shortest repr of the float is rounded as a decimal, so 2.125 rounds to
    2.13 and -2.125 to -2.13 regardless of binary representation error.
    """
    if value is None or not math.isfinite(value):
        raise InvalidMeasurement(f"Cannot round non-finite Z-score {value!r}")
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def _coerce_positive(value: Union[float, int, str], name: str) -> float:
    """Convert a measurement to a finite positive float."""
    if isinstance(value, bool):
        raise InvalidMeasurement(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidMeasurement(f"{name} is not a number: {value!r}") from None
    if not math.isfinite(number) or number <= 0:
        raise InvalidMeasurement(f"{name} must be a positive finite number, got {value!r}")
    return number


def _coerce_age(age_months: Union[float, int, str]) -> float:
    if isinstance(age_months, bool):
        raise InvalidMeasurement(f"Age must be a number, got {age_months!r}")
    try:
        age = float(age_months)
    except (TypeError, ValueError):
        raise InvalidMeasurement(f"Age is not a number: {age_months!r}") from None
    if not math.isfinite(age) or age < 0:
        raise InvalidMeasurement(f"Age must be a finite number >= 0, got {age_months!r}")
    return age


def _coerce_sex(sex: Union[Sex, str]) -> Sex:
    try:
        return Sex(sex)
    except ValueError:
        raise InvalidMeasurement(
            f"Sex must be 'male' or 'female', got {sex!r}"
        ) from None


def _warn_age_limit(age_months: float) -> None:
    if age_months > MAX_AGE_MONTHS:
        logging.warning(
            f"Age {age_months:g} months exceeds {MAX_AGE_MONTHS} months - the WHO under-five "
            "standard does not apply; reference values are clamped to the last sampled age"
        )


def interpolate_reference(
    age_months: float,
    sex: Union[Sex, str],
    table: ReferenceTable = DEFAULT_REFERENCE_TABLE,
) -> GrowthStats:
    """
    Interpolate reference statistics at an arbitrary age.

    Linear interpolation between the two sampled ages bracketing age_months.
    Ages at or below the first sample (or at or above the last) return that
    boundary sample unchanged; there is no extrapolation. Ages equal to a
    sampled age return the sample exactly.

    Args:
        age_months: Age in months
        sex: Sex of the child
        table: Reference table (defaults to WHO 2006 samples)

    Returns:
        GrowthStats with height_mean, height_sd, weight_mean, weight_sd
    """
    ref = table.arrays(sex)
    ages = ref["age_months"]
    stats_at_age = GrowthStats(
        height_mean=float(np.interp(age_months, ages, ref["height_mean_cm"])),
        height_sd=float(np.interp(age_months, ages, ref["height_sd_cm"])),
        weight_mean=float(np.interp(age_months, ages, ref["weight_mean_kg"])),
        weight_sd=float(np.interp(age_months, ages, ref["weight_sd_kg"])),
    )
    # Reference values are validated positive, so interpolations are too
    assert stats_at_age.height_mean > 0 and stats_at_age.height_sd > 0
    assert stats_at_age.weight_sd > 0
    return stats_at_age


def compute_zscores(
    height_cm: float,
    weight_kg: float,
    age_months: float,
    sex: Union[Sex, str],
    table: ReferenceTable = DEFAULT_REFERENCE_TABLE,
) -> Dict[str, float]:
    """
    Compute unrounded HAZ, WAZ and WHZ for one child.

    Args:
        height_cm: Height/length in cm
        weight_kg: Weight in kg
        age_months: Age in months
        sex: Sex of the child
        table: Reference table

    Returns:
        Dict with height_for_age, weight_for_age and weight_for_height
    """
    ref = interpolate_reference(age_months, sex, table)
    height_for_age = (height_cm - ref.height_mean) / ref.height_sd
    weight_for_age = (weight_kg - ref.weight_mean) / ref.weight_sd
    # Proportional approximation, not the WHO weight-for-height table
    expected_weight = ref.weight_mean * (height_cm / ref.height_mean)
    weight_for_height = (weight_kg - expected_weight) / ref.weight_sd
    return {
        "height_for_age": height_for_age,
        "weight_for_age": weight_for_age,
        "weight_for_height": weight_for_height,
    }


def build_result(
    height_for_age: float, weight_for_age: float, weight_for_height: float
) -> ZScoreResult:
    """Round raw scores to two decimals and classify the rounded values."""
    haz = round_zscore(height_for_age)
    waz = round_zscore(weight_for_age)
    whz = round_zscore(weight_for_height)
    return ZScoreResult(
        height_for_age=haz,
        weight_for_age=waz,
        weight_for_height=whz,
        stunting_status=classify_height_for_age(haz),
        underweight_status=classify_weight_for_age(waz),
        wasting_status=classify_weight_for_height(whz),
        is_stunted=is_stunted(haz),
    )


def calculate_zscore(
    height_cm: Union[float, str],
    weight_kg: Union[float, str],
    age_months: Union[float, int],
    sex: Union[Sex, str],
    table: ReferenceTable = DEFAULT_REFERENCE_TABLE,
) -> ZScoreResult:
    """
    Validate one measurement, compute its Z-scores and classify them.

    Args:
        height_cm: Height/length in cm (> 0)
        weight_kg: Weight in kg (> 0)
        age_months: Age in months (>= 0; > 60 is clamped with a warning)
        sex: 'male'/'female' (or 'M'/'F')
        table: Reference table

    Returns:
        ZScoreResult with rounded scores, statuses and is_stunted

    Raises:
        InvalidMeasurement: If any input is missing, non-numeric or out of domain.
    """
    height = _coerce_positive(height_cm, "Height")
    weight = _coerce_positive(weight_kg, "Weight")
    age = _coerce_age(age_months)
    sex = _coerce_sex(sex)
    _warn_age_limit(age)

    scores = compute_zscores(height, weight, age, sex, table)
    return build_result(**scores)


def zscore_to_percentile(z: float) -> float:
    """Percentile (0-100) of a Z-score under the standard normal distribution."""
    if z is None or math.isnan(z):
        raise InvalidMeasurement("Cannot convert a NaN Z-score to a percentile")
    return float(stats.norm.cdf(z) * 100.0)


def _validate_inputs(agemos: np.ndarray, sex: np.ndarray) -> None:
    """Validate age and sex arrays."""
    if len(agemos) == 0:
        raise ValueError("Age and sex arrays must not be empty")
    if len(agemos) != len(sex):
        raise ValueError("Age and sex arrays must have the same length")


def _normalize_sex(sex: np.ndarray) -> np.ndarray:
    """Sex codes as "male"/"female"; unknown or missing values become ""."""
    codes = []
    for s in sex:
        try:
            codes.append(_coerce_sex(s).value)
        except InvalidMeasurement:
            codes.append("")
    if "" in codes:
        logging.warning(
            f"{codes.count('')} rows have missing or unknown sex - Z-scores set to NaN"
        )
    return np.array(codes, dtype=object)


def _log_unit_warnings(height: Optional[np.ndarray], weight: Optional[np.ndarray]) -> None:
    """Log warnings for potential unit mismatches."""
    if height is not None and np.any(np.isfinite(height)):
        mean_height = np.nanmean(height)
        if mean_height < MIN_MEAN_HEIGHT_CM:
            logging.warning(
                "Height values have mean <20 - heights should be in cm but units are suspect"
            )
        elif mean_height > MAX_MEAN_HEIGHT_CM:
            logging.warning(
                "Height values have mean >150 - not consistent with children under five"
            )
    if weight is not None and np.any(np.isfinite(weight)) and np.nanmax(weight) > MAX_WEIGHT_KG:
        logging.warning(
            "Weight values >60 kg detected - may be lbs or grams instead of kg"
        )


def _interpolate_arrays(
    agemos: np.ndarray, sex: np.ndarray, table: ReferenceTable
) -> Dict[str, np.ndarray]:
    """Vectorized interpolation of reference statistics per row."""
    n = len(agemos)
    out = {
        key: np.full(n, np.nan, dtype=np.float64)
        for key in ("height_mean_cm", "height_sd_cm", "weight_mean_kg", "weight_sd_kg")
    }
    for member in Sex:
        sex_mask = sex == member.value
        if not np.any(sex_mask):
            continue
        ref = table.arrays(member)
        for key in out:
            out[key][sex_mask] = np.interp(agemos[sex_mask], ref["age_months"], ref[key])
    return out


def _round_array(values: np.ndarray) -> np.ndarray:
    return np.array(
        [round_zscore(v) if np.isfinite(v) else np.nan for v in values], dtype=np.float64
    )


def calculate_growth_metrics(
    agemos: np.ndarray,
    sex: np.ndarray,
    height: np.ndarray,
    weight: np.ndarray,
    table: ReferenceTable = DEFAULT_REFERENCE_TABLE,
) -> Dict[str, np.ndarray]:
    """
    Calculate rounded HAZ, WAZ, WHZ and stunting flags for many children.

    Rows with a missing/non-positive height or weight, a missing/negative
    age, or a missing/unknown sex get NaN scores and a False stunting flag
    instead of raising.

    Args:
        agemos: Age in months
        sex: Sex per row ('male'/'female' or 'M'/'F')
        height: Height in cm
        weight: Weight in kg
        table: Reference table

    Returns:
        Dict with 'haz', 'waz', 'whz' (float arrays) and '_stunted' (bool array)
    """
    agemos = np.asarray(agemos, dtype=np.float64)
    if len(agemos) == 0:
        return {}
    sex = np.asarray(sex, dtype=object)
    _validate_inputs(agemos, sex)
    sex = _normalize_sex(sex)
    height = np.asarray(height, dtype=np.float64)
    weight = np.asarray(weight, dtype=np.float64)

    _log_unit_warnings(height, weight)
    if np.any(agemos > MAX_AGE_MONTHS):
        logging.warning(
            f"Age values >{MAX_AGE_MONTHS} months detected - the WHO under-five standard "
            "does not apply; reference values are clamped to the last sampled age"
        )

    valid = (
        np.isfinite(agemos) & (agemos >= 0)
        & np.isfinite(height) & (height > 0)
        & np.isfinite(weight) & (weight > 0)
        & (sex != "")
    )
    if not np.all(valid):
        logging.warning(
            f"{int(np.sum(~valid))} rows have missing or invalid age/height/weight/sex - Z-scores set to NaN"
        )

    ref = _interpolate_arrays(np.where(valid, agemos, 0.0), sex, table)
    height_v = np.where(valid, height, np.nan)
    weight_v = np.where(valid, weight, np.nan)

    haz = sd_zscore(height_v, ref["height_mean_cm"], ref["height_sd_cm"])
    waz = sd_zscore(weight_v, ref["weight_mean_kg"], ref["weight_sd_kg"])
    expected_weight = ref["weight_mean_kg"] * (height_v / ref["height_mean_cm"])
    whz = sd_zscore(weight_v, expected_weight, ref["weight_sd_kg"])

    haz = _round_array(haz)
    waz = _round_array(waz)
    whz = _round_array(whz)
    stunted = np.where(np.isnan(haz), False, haz < MODERATE_CUTOFF)

    return {"haz": haz, "waz": waz, "whz": whz, "_stunted": stunted.astype(bool)}
