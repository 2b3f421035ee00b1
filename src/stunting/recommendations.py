"""
Advisory text for caregivers and health workers.
"""

from typing import List

from .classification import StuntingStatus, ZScoreResult
from .config import COMPLEMENTARY_FEEDING_MAX_AGE, EXCLUSIVE_BREASTFEEDING_MAX_AGE

STUNTED_ADVICE = [
    "Segera rujuk ke fasilitas kesehatan untuk pemeriksaan lebih lanjut",
    "Berikan makanan bergizi tinggi dengan protein hewani",
    "Pastikan pemberian ASI eksklusif (jika usia < 6 bulan)",
    "Monitoring pertumbuhan setiap bulan",
]

AT_RISK_ADVICE = [
    "Tingkatkan asupan gizi dengan makanan beragam",
    "Berikan makanan tambahan yang kaya protein",
    "Lakukan pemantauan pertumbuhan rutin",
]

EXCLUSIVE_BREASTFEEDING_ADVICE = ["Pastikan pemberian ASI eksklusif"]

COMPLEMENTARY_FEEDING_ADVICE = [
    "Berikan MPASI yang beragam dan bergizi",
    "Lanjutkan pemberian ASI hingga 2 tahun",
]

DEFAULT_ADVICE = [
    "Pertahankan pola makan sehat dan bergizi seimbang",
    "Lakukan pemantauan pertumbuhan rutin setiap bulan",
]

INTENSIVE_MONITORING = [
    "Kontrol dokter: Setiap 2 minggu dalam 2 bulan pertama",
    "Penimbangan berat/tinggi: Mingguan di posyandu",
    "Evaluasi progress: Bulanan dengan ahli gizi",
]

ROUTINE_MONITORING = [
    "Pemantauan rutin: Bulanan di posyandu",
    "Kontrol dokter: Setiap 3-6 bulan",
]


def recommend(result: ZScoreResult, age_months: float) -> List[str]:
    """
    Build the ordered list of recommendations for a result.

    Stunted children get the referral set, at-risk children a softer set;
    age-bracket feeding guidance is appended for children under 24 months.
    The list is never empty: without any trigger the default pair is returned.

    Args:
        result: Classified Z-score result
        age_months: Age of the child in months

    Returns:
        Recommendations in display order
    """
    recommendations: List[str] = []

    if result.is_stunted:
        recommendations.extend(STUNTED_ADVICE)
    elif result.stunting_status == StuntingStatus.AT_RISK:
        recommendations.extend(AT_RISK_ADVICE)

    if age_months < EXCLUSIVE_BREASTFEEDING_MAX_AGE:
        recommendations.extend(EXCLUSIVE_BREASTFEEDING_ADVICE)
    elif age_months < COMPLEMENTARY_FEEDING_MAX_AGE:
        recommendations.extend(COMPLEMENTARY_FEEDING_ADVICE)

    if not recommendations:
        recommendations.extend(DEFAULT_ADVICE)

    return recommendations


def monitoring_schedule(result: ZScoreResult) -> List[str]:
    """Follow-up visit plan: intensive for stunted children, routine otherwise."""
    if result.is_stunted:
        return list(INTENSIVE_MONITORING)
    return list(ROUTINE_MONITORING)
