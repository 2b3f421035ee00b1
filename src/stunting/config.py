"""
Configuration constants for the stunting Z-score engine.
"""

# WHO Child Growth Standards apply to children under five
MAX_AGE_MONTHS = 60

# Z-scores are reported with two decimals
ZSCORE_DECIMALS = 2

# Classification cutoffs (strict "<" comparisons)
SEVERE_CUTOFF = -3.0
MODERATE_CUTOFF = -2.0
AT_RISK_CUTOFF = -1.0

# Recommendation age brackets (months)
EXCLUSIVE_BREASTFEEDING_MAX_AGE = 6
COMPLEMENTARY_FEEDING_MAX_AGE = 24

# Child record columns
DEFAULT_COLUMNS = {
    "child_id": "child_id",
    "birth_date": "birth_date",
    "age": "age_months",
    "sex": "sex",
    "height": "height_cm",
    "weight": "weight_kg",
    "village": "dusun",
    "recorded_at": "created_at",
    "status": "stunting_status",
}

REQUIRED_COLUMNS = [
    "sex",
    "height_cm",
    "weight_kg",
]

# Statuses counted as stunting cases in reports
STUNTING_STATUSES = ["Stunting", "Stunting Berat"]

# Plausible measurement ranges for children aged 0-60 months
DEFAULT_PLAUSIBLE_RANGES = {
    "height_cm": {"min": 38.0, "max": 130.0},
    "weight_kg": {"min": 0.9, "max": 35.0},
}

# Unit sanity checks for batch input
MIN_MEAN_HEIGHT_CM = 20.0
MAX_MEAN_HEIGHT_CM = 150.0
MAX_WEIGHT_KG = 60.0
