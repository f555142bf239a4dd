"""Tests for median imputation, row filtering and standardization."""

import numpy as np
import pandas as pd
import pytest
from sklearn.preprocessing import StandardScaler

from cohort_tlbx.data import FCol, FeatureMatrix
from cohort_tlbx.data.preprocessing import (
    as_frame,
    column_medians,
    column_quantiles,
    column_ranges,
    numeric_block,
    preprocess,
)
from cohort_tlbx.utils.engine_config import PreprocessConfig


class TestPreprocess:
    """Test the preprocessing pipeline."""

    def test_row_count_invariant(self, cohort_frame: pd.DataFrame) -> None:
        matrix = preprocess(cohort_frame, [FCol.AGE, FCol.GLUCOSE, FCol.BMI])

        assert isinstance(matrix, FeatureMatrix)
        assert len(matrix.valid_indices) == matrix.n_rows
        assert np.all(np.diff(matrix.valid_indices) > 0)

    def test_standardization_invariant(self, cohort_frame: pd.DataFrame) -> None:
        matrix = preprocess(cohort_frame, [FCol.AGE, FCol.SYS_BP, FCol.GLUCOSE])

        np.testing.assert_allclose(matrix.values.mean(axis=0), 0.0, atol=1e-10)
        np.testing.assert_allclose(matrix.values.std(axis=0, ddof=0), 1.0, atol=1e-10)

    def test_matches_sklearn_after_imputation(self, cohort_frame: pd.DataFrame) -> None:
        features = [FCol.AGE, FCol.GLUCOSE]
        matrix = preprocess(cohort_frame, features)
        imputed = cohort_frame[features].fillna(cohort_frame[features].median())

        expected = StandardScaler().fit_transform(imputed)
        np.testing.assert_allclose(matrix.values, expected)

    def test_missing_cells_use_median(self, cohort_frame: pd.DataFrame) -> None:
        matrix = preprocess(cohort_frame, [FCol.GLUCOSE])
        median = cohort_frame[FCol.GLUCOSE].median()

        assert matrix.medians[0] == pytest.approx(median)
        restored = matrix.values[3, 0] * matrix.scales[0] + matrix.means[0]
        assert restored == pytest.approx(median)

    def test_rows_with_all_features_missing_are_dropped(self) -> None:
        records = [
            {"age": 40.0, "bmi": 22.0},
            {"age": None, "bmi": np.nan},
            {"age": 60.0, "bmi": 30.0},
            {"age": 50.0},
        ]
        matrix = preprocess(records, ["age", "bmi"])

        assert matrix.valid_indices.tolist() == [0, 2, 3]
        assert matrix.n_rows == 3

    def test_constant_column_becomes_zero(self) -> None:
        frame = pd.DataFrame({"age": [40.0, 50.0, 60.0], "male": [1.0, 1.0, 1.0]})
        matrix = preprocess(frame, ["age", "male"])

        assert np.all(matrix.values[:, 1] == 0.0)
        assert matrix.scales[1] == 1.0
        assert matrix.constant_features == ("male",)

    def test_near_constant_column_becomes_zero(self) -> None:
        frame = pd.DataFrame({"a": [1e9, 1e9 + 1e-6, 1e9], "b": [1.0, 2.0, 3.0]})
        matrix = preprocess(frame, ["a", "b"])

        assert np.all(matrix.values[:, 0] == 0.0)
        assert matrix.scales[0] == 1.0
        assert matrix.constant_features == ("a",)
        assert matrix.values[:, 1].std() == pytest.approx(1.0)

    def test_unit_variance_column_is_not_constant(self) -> None:
        # population variance of [-1, 1] is exactly 1
        matrix = preprocess(pd.DataFrame({"a": [-1.0, 1.0]}), ["a"])
        assert matrix.constant_features == ()
        np.testing.assert_allclose(matrix.values[:, 0], [-1.0, 1.0])

    def test_feature_never_observed_uses_default(self) -> None:
        frame = pd.DataFrame({"age": [40.0, 50.0], "glucose": [np.nan, np.nan]})

        matrix = preprocess(frame, ["age", "glucose"])
        assert matrix.medians[1] == 0.0
        assert np.all(matrix.values[:, 1] == 0.0)

        tuned = preprocess(frame, ["age", "glucose"], PreprocessConfig(missing_median_default=80.0))
        assert tuned.medians[1] == 80.0

    def test_no_valid_rows_gives_empty_matrix(self) -> None:
        frame = pd.DataFrame({"age": [np.nan, np.nan], "bmi": [np.nan, np.nan]})
        matrix = preprocess(frame, ["age", "bmi"])

        assert matrix.is_empty
        assert matrix.values.shape == (0, 2)
        assert matrix.valid_indices.size == 0

    def test_three_record_scenario(self) -> None:
        """Record 2 misses age; the imputed median sits exactly at the column mean."""
        records = [
            {"age": 40.0, "bmi": 20.0},
            {"age": 60.0, "bmi": 30.0},
            {"age": None, "bmi": 25.0},
        ]
        matrix = preprocess(records, ["age", "bmi"])

        assert matrix.medians[0] == 50.0
        assert matrix.means[0] == pytest.approx(50.0)
        age = matrix.values[:, 0]
        assert age.mean() == pytest.approx(0.0)
        assert age[2] == pytest.approx(0.0)
        # the imputed row adds no deviation, so the covariance is that of [40, 60] scaled by 2/3
        np.testing.assert_allclose(age[:2], np.array([-1.0, 1.0]) / np.sqrt(2 / 3))

    def test_empty_feature_list_raises(self, cohort_frame: pd.DataFrame) -> None:
        with pytest.raises(ValueError, match="at least one feature"):
            preprocess(cohort_frame, [])

    def test_single_string_raises(self, cohort_frame: pd.DataFrame) -> None:
        with pytest.raises(TypeError, match="not a single string"):
            preprocess(cohort_frame, "age")

    def test_duplicate_features_raise(self, cohort_frame: pd.DataFrame) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            preprocess(cohort_frame, ["age", "age"])

    def test_unknown_feature_raises(self, cohort_frame: pd.DataFrame) -> None:
        with pytest.raises(ValueError, match="Unknown features"):
            preprocess(cohort_frame, ["age", "not_a_column"])

    def test_to_frame_uses_original_index(self) -> None:
        records = [{"age": None}, {"age": 40.0}, {"age": 50.0}]
        frame = preprocess(records, ["age"]).to_frame()
        assert frame.index.tolist() == [1, 2]
        assert frame.index.name == "original_index"


class TestRangeStatistics:
    """Test the statistics shared with the risk estimator."""

    @pytest.fixture
    def frame(self) -> pd.DataFrame:
        return pd.DataFrame({"a": [1.0, 2.0, np.nan, 4.0, 5.0], "b": ["1", "x", "3", None, "5"]})

    def test_numeric_block_coerces(self, frame: pd.DataFrame) -> None:
        block = numeric_block(frame, ["b"])
        assert block["b"].isna().tolist() == [False, True, False, True, False]

    def test_column_medians(self, frame: pd.DataFrame) -> None:
        medians = column_medians(frame, ["a", "b"])
        assert medians["a"] == 3.0
        assert medians["b"] == 3.0

    def test_column_quantiles(self, frame: pd.DataFrame) -> None:
        quantiles = column_quantiles(frame, ["a"], (0.25, 0.5, 0.75))
        assert quantiles.loc["a"].tolist() == [1.75, 3.0, 4.25]

    def test_column_ranges(self, frame: pd.DataFrame) -> None:
        ranges = column_ranges(frame, ["a"])
        assert list(ranges.columns) == ["min", "max", "p25", "p50", "p75"]
        assert ranges.loc["a", "min"] == 1.0
        assert ranges.loc["a", "max"] == 5.0

    def test_as_frame_rejects_strings(self) -> None:
        with pytest.raises(TypeError):
            as_frame("age,bmi")

    def test_as_frame_resets_index(self) -> None:
        frame = pd.DataFrame({"age": [1.0, 2.0]}, index=[10, 20])
        assert as_frame(frame).index.tolist() == [0, 1]
