from datetime import date

import pytest
import pandas as pd


@pytest.fixture
def today() -> date:
    """Fixed reference date for age calculations."""
    return date(2024, 6, 15)


@pytest.fixture
def sample_data() -> pd.DataFrame:
    """Child records: normal, stunted, at-risk and underweight 24-month-olds."""
    return pd.DataFrame(
        {
            "child_id": ["a", "b", "c", "d"],
            "age_months": [24.0, 24.0, 24.0, 24.0],
            "sex": ["male", "male", "female", "female"],
            "height_cm": [87.1, 75.0, 82.0, 86.4],
            "weight_kg": [12.2, 9.0, 10.5, 8.8],
        }
    )
