# Tests for DetectorPipeline

import pytest
import pandas as pd
from stunting.detector_pipeline import DetectorPipeline
from stunting.methods.range.detector import RangeDetector
from stunting.methods.zscore.detector import ZScoreDetector


class TestDetectorPipeline:
    """Tests for DetectorPipeline class"""

    def test_tc001_detector_pipeline_or_combination(self):
        flags_df = [
            {"col": pd.Series([True, False])},
            {"col": pd.Series([False, True])},
        ]
        pipeline = DetectorPipeline(logic="OR")
        result = pipeline.combine_flags(flags_df)
        expected = pd.Series([True, True], name="col")
        pd.testing.assert_series_equal(result["col"], expected)

    def test_tc002_detector_pipeline_and_combination(self):
        flags_df = [
            {"col": pd.Series([True, True])},
            {"col": pd.Series([False, True])},
        ]
        pipeline = DetectorPipeline(logic="AND")
        result = pipeline.combine_flags(flags_df)
        expected = pd.Series([False, True], name="col")
        pd.testing.assert_series_equal(result["col"], expected)

    def test_tc003_detector_pipeline_raises_keyerror_for_invalid_logic(self):
        with pytest.raises(KeyError, match="Unsupported combination logic 'XOR'"):
            DetectorPipeline(logic="XOR")

    def test_tc004_detector_pipeline_handles_empty_flags_list(self):
        pipeline = DetectorPipeline(logic="OR")
        assert pipeline.combine_flags([]) == {}
        assert pipeline.combine_flags([{}, {}]) == {}

    def test_tc005_detector_pipeline_multiple_columns_and_logic(self):
        flags_df = [
            {"col1": pd.Series([True, True]), "col2": pd.Series([False, True])},
            {"col1": pd.Series([True, False]), "col2": pd.Series([False, True])},
        ]
        pipeline = DetectorPipeline(logic="AND")
        result = pipeline.combine_flags(flags_df)
        pd.testing.assert_series_equal(result["col1"], pd.Series([True, False], name="col1"))
        pd.testing.assert_series_equal(result["col2"], pd.Series([False, True], name="col2"))

    def test_tc006_missing_name_counts_as_unflagged(self):
        flags_df = [
            {"haz": pd.Series([True, False])},
            {"height_cm": pd.Series([False, True])},
        ]
        or_result = DetectorPipeline(logic="OR").combine_flags(flags_df)
        assert list(or_result) == ["haz", "height_cm"]
        assert or_result["haz"].tolist() == [True, False]
        and_result = DetectorPipeline(logic="AND").combine_flags(flags_df)
        assert and_result["haz"].tolist() == [False, False]
        assert and_result["height_cm"].tolist() == [False, False]

    def test_tc007_run_with_detectors(self, sample_data):
        df = sample_data.copy()
        df.loc[3, "weight_kg"] = 0.5
        steps = [
            (RangeDetector(), ["height_cm", "weight_kg"]),
            (ZScoreDetector(), ["haz"]),
        ]
        result = DetectorPipeline().run(df, steps)
        assert set(result) == {"height_cm", "weight_kg", "haz"}
        assert result["weight_kg"].tolist() == [False, False, False, True]
        assert result["haz"].tolist() == [False, True, False, False]

    def test_tc008_flag_any(self, sample_data):
        df = sample_data.copy()
        df.loc[3, "weight_kg"] = 0.5
        steps = [
            (RangeDetector(), ["weight_kg"]),
            (ZScoreDetector(), ["haz"]),
        ]
        flags = DetectorPipeline().flag_any(df, steps)
        assert flags.tolist() == [False, True, False, True]

    def test_tc009_flag_any_without_steps(self, sample_data):
        flags = DetectorPipeline().flag_any(sample_data, [])
        assert flags.tolist() == [False] * 4
