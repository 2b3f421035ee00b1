"""
Nutritional status classification from Z-scores.

Each axis (height-for-age, weight-for-age, weight-for-height) maps a score to
one of four ordered tiers using strict "<" cutoffs:

    score < -3          severe
    -3 <= score < -2    moderate
    -2 <= score < -1    at risk
    score >= -1         normal

so a score of exactly -2.00 is "at risk" and exactly -3.00 is "moderate".
Scores are classified after rounding to two decimals, which keeps the
reported score and its status consistent.
"""

import math
from enum import Enum
from typing import Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict

from .config import AT_RISK_CUTOFF, MODERATE_CUTOFF, SEVERE_CUTOFF
from .exceptions import InvalidMeasurement


class _OrderedStatus(str, Enum):
    """Status enum ordered from most severe (0) to normal (3)."""

    @property
    def severity(self) -> int:
        return list(type(self)).index(self)

    @property
    def is_normal(self) -> bool:
        return self.severity == len(type(self)) - 1


class StuntingStatus(_OrderedStatus):
    SEVERE = "Stunting Berat"
    MODERATE = "Stunting"
    AT_RISK = "Risiko Stunting"
    NORMAL = "Normal"


class UnderweightStatus(_OrderedStatus):
    SEVERE = "Gizi Buruk"
    MODERATE = "Gizi Kurang"
    AT_RISK = "Risiko Gizi Kurang"
    NORMAL = "Normal"


class WastingStatus(_OrderedStatus):
    SEVERE = "Kurus Berat"
    MODERATE = "Kurus"
    AT_RISK = "Risiko Kurus"
    NORMAL = "Normal"


class PriorityLevel(str, Enum):
    HIGH = "PRIORITAS TINGGI"
    MEDIUM = "PRIORITAS SEDANG"
    ROUTINE = "PEMANTAUAN RUTIN"


S = TypeVar("S", bound=_OrderedStatus)


def _classify(score: float, status_cls: Type[S]) -> S:
    if score is None or math.isnan(score):
        raise InvalidMeasurement("Cannot classify a missing or NaN Z-score")
    severe, moderate, at_risk, normal = list(status_cls)
    if score < SEVERE_CUTOFF:
        return severe
    if score < MODERATE_CUTOFF:
        return moderate
    if score < AT_RISK_CUTOFF:
        return at_risk
    return normal


def classify_height_for_age(score: float) -> StuntingStatus:
    return _classify(score, StuntingStatus)


def classify_weight_for_age(score: float) -> UnderweightStatus:
    return _classify(score, UnderweightStatus)


def classify_weight_for_height(score: float) -> WastingStatus:
    return _classify(score, WastingStatus)


def is_stunted(height_for_age: float) -> bool:
    """Binary stunting flag (HAZ < -2) for referral and notification triggers."""
    return height_for_age < MODERATE_CUTOFF


class ZScoreResult(BaseModel):
    """
    Z-scores and classification for one measurement.

    Attributes:
        height_for_age: HAZ, rounded to two decimals.
        weight_for_age: WAZ, rounded to two decimals.
        weight_for_height: WHZ (proportional approximation), rounded.
        stunting_status: Tier from HAZ.
        underweight_status: Tier from WAZ.
        wasting_status: Tier from WHZ.
        is_stunted: True when height_for_age < -2.
    """

    model_config = ConfigDict(frozen=True)

    height_for_age: float
    weight_for_age: float
    weight_for_height: float
    stunting_status: StuntingStatus
    underweight_status: UnderweightStatus
    wasting_status: WastingStatus
    is_stunted: bool

    @property
    def scores(self) -> Tuple[float, float, float]:
        return self.height_for_age, self.weight_for_age, self.weight_for_height


def priority_level(result: ZScoreResult) -> PriorityLevel:
    """Follow-up priority: severe stunting first, then any stunting."""
    if result.height_for_age < SEVERE_CUTOFF:
        return PriorityLevel.HIGH
    if result.is_stunted:
        return PriorityLevel.MEDIUM
    return PriorityLevel.ROUTINE
