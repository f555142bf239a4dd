"""Base dataset class for all dataset implementations."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from cohort_tlbx.utils.engine_config import DEFAULT_PCA_CFG, DEFAULT_PREPROCESS_CFG, DEFAULT_TSNE_CFG
from cohort_tlbx.utils.engine_config import PCAConfig, PreprocessConfig, TSNEConfig

from .base_columns import BaseColumn, ColumnMetadata
from .preprocessing import preprocess
from .views import FeatureMatrix


if TYPE_CHECKING:
    from cohort_tlbx.analysis.linked_views import DistributionResult
    from cohort_tlbx.analysis.projection import ProjectionAnalyzer, ReductionMethod
    from cohort_tlbx.analysis.risk import RiskEstimator
    from cohort_tlbx.analysis.selection import SelectionSnapshot, SelectionState
    from cohort_tlbx.analysis.subgroup import SubgroupComparison, SubgroupSummary


class BaseDataset(ABC):
    """Abstract base class for cohort datasets.

    The frame keeps a ``RangeIndex``: the position of a record is its original
    index, the identity shared by projections, selections and summaries.
    """

    Col: type[BaseColumn]

    def __init__(self, df: pd.DataFrame | None = None) -> None:
        """Initialize the base dataset.

        Args:
            df: Pre-loaded and cleaned DataFrame (optional)
        """
        self._df: pd.DataFrame | None = None if df is None else df.reset_index(drop=True)
        self._matrices: dict[tuple, FeatureMatrix] = {}

    @classmethod
    @abstractmethod
    def from_csv(cls, csv_path: str | Path | None = None, **kwargs: object) -> "BaseDataset":
        """Load dataset from CSV file.

        Args:
            csv_path: Path to the CSV file
            **kwargs: Additional loading parameters

        Returns:
            Dataset instance with loaded data
        """
        ...

    @property
    def df(self) -> pd.DataFrame:
        """Get the raw/cleaned DataFrame.

        Raises:
            ValueError: If dataset not loaded
        """
        if self._df is None:
            raise ValueError("Dataset not loaded. Use from_csv() to load data.")
        return self._df

    @property
    def df_pretty(self) -> pd.DataFrame:
        """Get the DataFrame with pretty column names."""
        return self.df.rename(columns={col: self.get_pretty_name(col) for col in self.df.columns})

    @property
    def numeric_cols(self) -> list[str]:
        """Continuous columns declared by the column enum that are present in the frame."""
        return [col for col in self.Col.numeric_columns() if col in self.df.columns]

    @property
    def n_records(self) -> int:
        return len(self.df)

    def get_pretty_name(self, column_name: str) -> str:
        """Convert column name to pretty name for visualization."""
        try:
            col_enum = self.Col(column_name)
        except ValueError:
            return column_name.replace("_", " ").title()
        else:
            return str(col_enum.pretty_name)

    def get_pretty_names(self, column_names: list[str] | None = None) -> list[str]:
        return [self.get_pretty_name(name) for name in column_names or self.df.columns.to_list()]

    def metadata_for(self, column_name: str) -> ColumnMetadata | None:
        """Descriptor of a column, ``None`` for columns the enum does not know."""
        try:
            return self.Col(column_name).metadata()
        except ValueError:
            return None

    def validate_domains(self) -> None:
        """Check that every present categorical/ordinal value belongs to the column's domain.

        Raises:
            ValueError: Listing every offending column and its unexpected values.
        """
        violations: dict[str, list[float]] = {}
        for col in self.Col:
            domain = col.domain
            if domain is None or col.value not in self.df.columns:
                continue
            values = pd.to_numeric(self.df[col.value], errors="coerce").dropna()
            unexpected = sorted(set(values[~values.isin(domain)].tolist()))
            if unexpected:
                violations[col.value] = unexpected[:10]
        if violations:
            raise ValueError(f"Values outside the declared domain: {violations}")

    def preprocess(
        self,
        features: Iterable[str] | None = None,
        config: PreprocessConfig = DEFAULT_PREPROCESS_CFG,
    ) -> FeatureMatrix:
        """Standardized feature matrix for ``features`` (defaults to the numeric columns).

        Matrices are memoized per ``(features, config)``; the frame is read-only after load.
        """
        features = tuple(str(f) for f in (self.numeric_cols if features is None else features))
        key = (features, config)
        if key not in self._matrices:
            self._matrices[key] = preprocess(self.df, features, config)
        return self._matrices[key]

    def make_projection_analyzer(
        self,
        features: Iterable[str] | None = None,
        method: "str | ReductionMethod" = "pca",
        *,
        preprocess_config: PreprocessConfig = DEFAULT_PREPROCESS_CFG,
        pca_config: PCAConfig = DEFAULT_PCA_CFG,
        tsne_config: TSNEConfig = DEFAULT_TSNE_CFG,
        random_state: int | None = None,
    ) -> "ProjectionAnalyzer":
        """Instantiate a PCA or t-SNE projection analyzer for this dataset.

        Example:
            >>> from cohort_tlbx.data import FraminghamDataset
            >>> ds = FraminghamDataset.from_csv()
            >>> result = ds.make_projection_analyzer(method="pca").fit().result()
            >>> result.axis_labels()
        """
        from cohort_tlbx.analysis.projection import ProjectionAnalyzer

        return ProjectionAnalyzer(
            self.preprocess(features, preprocess_config),
            method,
            pca_config=pca_config,
            tsne_config=tsne_config,
            random_state=random_state,
        )

    def summarize(self, indices: Iterable[int]) -> "SubgroupSummary | None":
        """Summary statistics of the records at ``indices`` (``None`` for an empty set)."""
        from cohort_tlbx.analysis.subgroup import summarize

        return summarize(self.df, indices)

    def compare_subgroups(self, selection: "SelectionState | SelectionSnapshot") -> "SubgroupComparison":
        """Full cohort, selection and pinned group summarized side by side."""
        from cohort_tlbx.analysis.subgroup import compare_subgroups

        return compare_subgroups(self.df, selection)

    def feature_distribution(
        self,
        feature: str,
        selected: Iterable[int] = (),
        bins: int = 20,
    ) -> "DistributionResult":
        """Histogram or per-value counts of ``feature`` with the selected share of every bar."""
        from cohort_tlbx.analysis.linked_views import feature_distribution

        return feature_distribution(self.df, feature, selected, metadata=self.metadata_for(feature), bins=bins)

    def make_risk_estimator(self, features: Iterable[str] | None = None, k: int = 100) -> "RiskEstimator":
        """Instantiate the nearest-neighbour risk estimator on this cohort."""
        from cohort_tlbx.analysis.risk import RiskEstimator

        if features is None:
            return RiskEstimator(self.df, k=k, outcome=self.Col.TARGET)
        return RiskEstimator(self.df, features, k=k, outcome=self.Col.TARGET)
