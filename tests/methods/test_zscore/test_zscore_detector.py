"""
Tests for ZScoreDetector class.

Covers configuration validation, detection logic, and integration with calculate_growth_metrics.
"""

import logging

import pytest
import pandas as pd
import numpy as np
from unittest.mock import patch

from stunting.methods.zscore.detector import ZScoreDetector, ZScoreConfig
from stunting.reference import ReferenceSample, ReferenceTable


class TestZScoreConfig:
    """Tests for ZScoreConfig Pydantic model."""

    def test_tc001_default_config(self):
        """TC001: Test default configuration values."""
        config = ZScoreConfig()
        assert config.age_col == "age_months"
        assert config.sex_col == "sex"
        assert config.height_col == "height_cm"
        assert config.weight_col == "weight_kg"
        assert config.cutoff == -2.0
        assert config.validate_age_units is True

    def test_tc002_config_validate_age_col_type(self):
        """TC002: Config validate age_col type."""
        with pytest.raises(ValueError):
            ZScoreConfig(age_col=123)

    def test_tc003_custom_config(self):
        """TC003: Test custom configuration values."""
        config = ZScoreConfig(
            age_col="umur_bulan",
            sex_col="jenis_kelamin",
            height_col="tinggi",
            weight_col="berat",
            cutoff=-3.0,
            validate_age_units=False,
        )
        assert config.age_col == "umur_bulan"
        assert config.sex_col == "jenis_kelamin"
        assert config.cutoff == -3.0
        assert config.validate_age_units is False

    def test_tc004_invalid_column_names(self):
        """TC004: Test validation of invalid column names."""
        with pytest.raises(ValueError, match="Column name must be a non-empty string"):
            ZScoreConfig(age_col="")

        with pytest.raises(ValueError, match="Column name must be a non-empty string"):
            ZScoreConfig(sex_col="   ")

    @pytest.mark.parametrize("cutoff", [0.5, float("nan"), float("-inf")])
    def test_tc005_invalid_cutoff(self, cutoff):
        """TC005: Positive or non-finite cutoffs are rejected."""
        with pytest.raises(ValueError, match="Cutoff must be a finite value <= 0"):
            ZScoreConfig(cutoff=cutoff)


class TestZScoreDetector:
    """Tests for ZScoreDetector class."""

    def test_tc006_instantiate_with_valid_config(self):
        """TC006: Instantiate ZScoreDetector with valid config."""
        detector = ZScoreDetector()
        assert isinstance(detector, ZScoreDetector)
        assert detector.config.age_col == "age_months"

    def test_tc007_invalid_config_wrapped(self):
        """TC007: Configuration errors surface as ValueError."""
        with pytest.raises(ValueError, match="Invalid configuration"):
            ZScoreDetector(cutoff=1.0)

    def test_tc008_duplicate_columns_rejected(self):
        """TC008: Two roles cannot share one column."""
        with pytest.raises(ValueError, match="unique column names"):
            ZScoreDetector(height_col="x", weight_col="x")

    def test_tc009_detect_flags_below_cutoff(self, sample_data):
        """TC009: Each measure flags Z-scores strictly below -2."""
        results = ZScoreDetector().detect(sample_data, ["haz", "waz", "whz"])
        pd.testing.assert_series_equal(
            results["haz"], pd.Series([False, True, False, False], name="haz")
        )
        pd.testing.assert_series_equal(
            results["waz"], pd.Series([False, True, False, True], name="waz")
        )
        pd.testing.assert_series_equal(
            results["whz"], pd.Series([False, False, False, True], name="whz")
        )

    def test_tc010_custom_cutoff(self, sample_data):
        """TC010: A -3 cutoff keeps only severe cases."""
        results = ZScoreDetector(cutoff=-3.0).detect(sample_data, ["haz", "waz"])
        assert results["haz"].tolist() == [False, True, False, False]
        assert results["waz"].tolist() == [False, False, False, False]

    def test_tc011_custom_column_names(self, sample_data):
        """TC011: Column mappings are honoured."""
        df = sample_data.rename(
            columns={"age_months": "umur", "sex": "jk", "height_cm": "tb", "weight_kg": "bb"}
        )
        detector = ZScoreDetector(age_col="umur", sex_col="jk", height_col="tb", weight_col="bb")
        assert detector.detect(df, ["haz"])["haz"].tolist() == [False, True, False, False]

    def test_tc012_detect_raises_for_missing_column(self):
        """TC012: Missing configured columns raise ValueError."""
        df = pd.DataFrame({"sex": ["M"], "height_cm": [80.0], "weight_kg": [10.0]})
        with pytest.raises(ValueError, match="Column 'age_months' does not exist"):
            ZScoreDetector().detect(df, ["haz"])

    def test_tc013_unsupported_measure(self, sample_data):
        """TC013: Only haz, waz and whz can be requested."""
        with pytest.raises(ValueError, match="Unsupported measure 'bmi'"):
            ZScoreDetector().detect(sample_data, ["bmi"])

    def test_tc014_invalid_sex_not_flagged(self):
        """TC014: Unknown or missing sex codes leave only that row unflagged."""
        df = pd.DataFrame(
            {
                "age_months": [24.0, 24.0, 24.0],
                "sex": ["UNKNOWN", None, "M"],
                "height_cm": [70.0, 70.0, 70.0],
                "weight_kg": [8.0, 8.0, 8.0],
            }
        )
        results = ZScoreDetector().detect(df, ["haz"])
        assert results["haz"].tolist() == [False, False, True]

    def test_tc015_missing_values_not_flagged(self):
        """TC015: Rows with missing measurements are never flagged."""
        df = pd.DataFrame(
            {
                "age_months": [24.0, np.nan, 24.0, 24.0],
                "sex": ["M", "M", "M", "M"],
                "height_cm": [np.nan, 70.0, 70.0, 70.0],
                "weight_kg": [10.0, 8.0, "x", 8.0],
            }
        )
        results = ZScoreDetector().detect(df, ["haz", "whz"])
        assert results["haz"].tolist() == [False, False, False, True]
        assert results["whz"].tolist() == [False, False, False, False]

    def test_tc016_empty_dataframe(self):
        """TC016: Empty input gives empty boolean Series."""
        df = pd.DataFrame(columns=["age_months", "sex", "height_cm", "weight_kg"])
        results = ZScoreDetector().detect(df, ["haz"])
        assert results["haz"].empty
        assert results["haz"].dtype == bool

    def test_tc017_detect_does_not_modify_input_df(self, sample_data):
        """TC017: Detect does not modify input df."""
        df_copy = sample_data.copy()
        ZScoreDetector().detect(sample_data, ["haz", "waz", "whz"])
        pd.testing.assert_frame_equal(sample_data, df_copy)

    def test_tc018_preserves_index(self, sample_data):
        """TC018: Flags align with a non-default index."""
        df = sample_data.set_index(pd.Index([10, 20, 30, 40]))
        results = ZScoreDetector().detect(df, ["haz"])
        assert results["haz"].index.tolist() == [10, 20, 30, 40]
        assert results["haz"].loc[20]

    @patch("stunting.methods.zscore.detector.calculate_growth_metrics")
    def test_tc019_uses_growth_metrics(self, mock_cgm, sample_data):
        """TC019: Flags come from calculate_growth_metrics scores."""
        mock_cgm.return_value = {
            "haz": np.array([-2.5, np.nan, -1.0, -2.0]),
            "waz": np.zeros(4),
            "whz": np.zeros(4),
        }
        results = ZScoreDetector().detect(sample_data, ["haz"])
        assert results["haz"].tolist() == [True, False, False, False]
        mock_cgm.assert_called_once()

    def test_tc020_injected_reference_table(self, sample_data):
        """TC020: A custom reference table changes the scores."""
        samples = [
            ReferenceSample(
                age_months=0, sex=sex, height_mean_cm=100.0, height_sd_cm=5.0,
                weight_mean_kg=12.0, weight_sd_kg=1.0,
            )
            for sex in ("male", "female")
        ]
        detector = ZScoreDetector(table=ReferenceTable(samples))
        # every child in sample_data is more than 2 SD below a 100 cm mean
        assert detector.detect(sample_data, ["haz"])["haz"].all()

    def test_tc021_age_in_years_warning(self, caplog):
        """TC021: Small maximum ages suggest years instead of months."""
        df = pd.DataFrame(
            {
                "age_months": [2.0, 4.0],
                "sex": ["M", "F"],
                "height_cm": [87.0, 100.0],
                "weight_kg": [12.0, 16.0],
            }
        )
        with caplog.at_level(logging.WARNING):
            ZScoreDetector().detect(df, ["haz"])
        assert "suggests ages may be in years" in caplog.text

    def test_tc022_age_over_limit_warning(self, caplog):
        """TC022: Ages above 60 months are warned about."""
        df = pd.DataFrame(
            {"age_months": [72.0], "sex": ["M"], "height_cm": [115.0], "weight_kg": [20.0]}
        )
        with caplog.at_level(logging.WARNING):
            ZScoreDetector().detect(df, ["haz"])
        assert "exceeds the WHO under-five limit" in caplog.text

    def test_tc023_age_validation_can_be_disabled(self, caplog):
        """TC023: validate_age_units=False skips the unit warnings."""
        df = pd.DataFrame(
            {
                "age_months": [2.0, 4.0],
                "sex": ["M", "F"],
                "height_cm": [87.0, 100.0],
                "weight_kg": [12.0, 16.0],
            }
        )
        with caplog.at_level(logging.WARNING):
            ZScoreDetector(validate_age_units=False).detect(df, ["haz"])
        assert "suggests ages may be in years" not in caplog.text

    def test_tc024_registry_includes_zscore_method(self):
        """TC024: Registry includes 'zscore' method."""
        from stunting.methods import registry

        assert "zscore" in registry
        assert registry["zscore"] is ZScoreDetector
