"""Tests for FraminghamDataset."""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from cohort_tlbx.analysis import ProjectionAnalyzer, RiskEstimator
from cohort_tlbx.data import FCol, FraminghamDataset
from cohort_tlbx.utils.paths import DATA_DIR_ENV, get_dataset_path


class TestFraminghamDataset:
    """Test loading, cleaning and factory methods."""

    def test_from_csv_with_header(self, framingham_csv: Path, cohort_frame: pd.DataFrame) -> None:
        ds = FraminghamDataset.from_csv(framingham_csv)

        assert list(ds.df.columns) == [col.value for col in FCol if col != FCol.TARGET] + ["ten_year_chd"]
        assert len(ds.df) == len(cohort_frame)
        assert isinstance(ds.df.index, pd.RangeIndex)
        assert ds.df[FCol.GLUCOSE].isna().sum() == 3

    def test_from_csv_without_header(self, headerless_csv: Path, framingham_csv: Path) -> None:
        with_header = FraminghamDataset.from_csv(framingham_csv).df
        without_header = FraminghamDataset.from_csv(headerless_csv).df

        pd.testing.assert_frame_equal(with_header, without_header)

    def test_has_header_row(self, framingham_csv: Path, headerless_csv: Path) -> None:
        assert FraminghamDataset._has_header_row(framingham_csv)
        assert not FraminghamDataset._has_header_row(headerless_csv)

    def test_normalize_col_names(self) -> None:
        raw = pd.DataFrame(columns=["currentSmoker", "TenYearCHD", " BMI ", "someNewColumn"])
        normalized = FraminghamDataset._normalize_col_names(raw)
        assert list(normalized.columns) == ["current_smoker", "ten_year_chd", "bmi", "some_new_column"]

    def test_convert_data_types(self) -> None:
        raw = pd.DataFrame({"age": ["39", "x", None], "male": [1, 0, 1]})
        converted = FraminghamDataset._convert_data_types(raw)
        assert converted["age"].dtype == np.float64
        assert converted["age"].isna().tolist() == [False, True, True]

    def test_domain_violation_raises(self, tmp_path: Path, cohort_frame: pd.DataFrame) -> None:
        frame = cohort_frame.copy()
        frame.loc[0, FCol.DIABETES] = 2
        frame.loc[1, FCol.EDUCATION] = 7
        path = tmp_path / "bad.csv"
        frame.rename(columns={col.value: col.original_name for col in FCol}).to_csv(path, index=False, na_rep="NA")

        with pytest.raises(ValueError, match="diabetes") as excinfo:
            FraminghamDataset.from_csv(path)
        assert "education" in str(excinfo.value)

        # skipping validation loads the file as is
        assert FraminghamDataset.from_csv(path, validate=False).df.loc[0, FCol.DIABETES] == 2

    def test_df_before_load_raises(self) -> None:
        with pytest.raises(ValueError, match="Dataset not loaded"):
            _ = FraminghamDataset().df

    def test_pretty_names(self, cohort_dataset: FraminghamDataset) -> None:
        assert cohort_dataset.get_pretty_name(FCol.SYS_BP) == "Systolic BP"
        assert cohort_dataset.get_pretty_name("unknown_col") == "Unknown Col"
        assert "10-Year CHD" in cohort_dataset.df_pretty.columns

    def test_numeric_cols(self, cohort_dataset: FraminghamDataset) -> None:
        assert cohort_dataset.numeric_cols == FCol.numeric_columns()

    def test_preprocess_is_memoized(self, cohort_dataset: FraminghamDataset) -> None:
        first = cohort_dataset.preprocess([FCol.AGE, FCol.BMI])
        second = cohort_dataset.preprocess(["age", "bmi"])
        assert first is second
        assert first.feature_names == ("age", "bmi")

    def test_make_projection_analyzer(self, cohort_dataset: FraminghamDataset) -> None:
        analyzer = cohort_dataset.make_projection_analyzer([FCol.AGE, FCol.SYS_BP, FCol.BMI], method="pca")
        assert isinstance(analyzer, ProjectionAnalyzer)
        result = analyzer.fit().result()
        assert len(result.coords) == cohort_dataset.n_records

    def test_make_risk_estimator(self, cohort_dataset: FraminghamDataset) -> None:
        estimator = cohort_dataset.make_risk_estimator(k=10)
        assert isinstance(estimator, RiskEstimator)
        assert estimator.k == 10

    def test_summarize_and_distribution(self, cohort_dataset: FraminghamDataset) -> None:
        summary = cohort_dataset.summarize(range(10))
        assert summary is not None and summary.n == 10
        dist = cohort_dataset.feature_distribution(FCol.EDUCATION, selected=[0, 1])
        assert dist.bars["value"].tolist() == [1, 2, 3, 4]


class TestPaths:
    """Dataset path resolution."""

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "framingham.csv").write_text("male\n1\n", encoding="utf-8")
        monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))
        assert get_dataset_path("framingham") == (tmp_path / "framingham.csv").resolve()

    def test_missing_file_raises(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))
        with pytest.raises(FileNotFoundError):
            get_dataset_path("framingham")

    def test_default_path_uses_env(self, framingham_csv: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(DATA_DIR_ENV, str(framingham_csv.parent))
        ds = FraminghamDataset.from_csv()
        assert ds.n_records == 200
