"""Base column definitions and feature descriptor structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class FeatureKind(StrEnum):
    """Measurement scale of a dataset column."""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    ORDINAL = "ordinal"


@dataclass(frozen=True)
class ColumnMetadata:
    """Feature descriptor for a dataset column.

    Attributes:
        cleaned_name: Standardized column name used in DataFrames.
        dtype: Expected pandas data type as a string.
        pretty_name: Human-readable name for use in plots and summaries.
        kind: Measurement scale (numeric, categorical or ordinal).
        domain: Legal values for categorical/ordinal columns, ``None`` for numeric ones.
        labels: Optional display labels aligned with ``domain``.
        unit: Optional unit of measurement for numeric columns.
    """

    original_name: str
    """Column name as it appears in the raw CSV header."""
    cleaned_name: str
    dtype: str
    pretty_name: str
    kind: FeatureKind = FeatureKind.NUMERIC
    domain: tuple[int, ...] | None = None
    labels: tuple[str, ...] | None = None
    unit: str | None = None

    def __post_init__(self) -> None:
        if self.kind != FeatureKind.NUMERIC and not self.domain:
            raise ValueError(f"Column '{self.cleaned_name}' of kind {self.kind} needs a non-empty domain.")
        if self.labels is not None and (self.domain is None or len(self.labels) != len(self.domain)):
            raise ValueError(f"Labels of column '{self.cleaned_name}' must align with its domain.")

    @property
    def is_categorical(self) -> bool:
        """True for categorical and ordinal columns."""
        return self.kind in {FeatureKind.CATEGORICAL, FeatureKind.ORDINAL}

    def label_for(self, value: float | int) -> str:
        """Return the display label for a domain value (falls back to the value itself)."""
        if self.domain is not None and self.labels is not None and value in self.domain:
            return self.labels[self.domain.index(int(value))]
        return str(int(value)) if float(value).is_integer() else str(value)


class BaseColumn(StrEnum):
    """Base class for dataset column enums.

    All derived column enums must define a TARGET member to specify
    the outcome variable of the dataset.

    Subclasses must implement:
    - metadata(): Return ColumnMetadata for each enum member
    """

    TARGET: str

    def metadata(self) -> ColumnMetadata:
        """Get metadata for this column.

        Raises:
            NotImplementedError: If not implemented by subclass.
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement metadata() method")

    @classmethod
    def numeric_columns(cls) -> list[str]:
        """Get all numeric (continuous) column names."""
        return [col.value for col in cls if col.kind == FeatureKind.NUMERIC]

    @classmethod
    def categorical_columns(cls) -> list[str]:
        """Get all categorical and ordinal column names."""
        return [col.value for col in cls if col.metadata().is_categorical]

    @classmethod
    def binary_columns(cls) -> list[str]:
        """Get categorical columns whose domain is exactly ``(0, 1)``."""
        return [col.value for col in cls if col.metadata().domain == (0, 1)]

    @classmethod
    def feature_columns(cls, *, exclude_target: bool = False) -> list[str]:
        """Get all feature column names.

        Args:
            exclude_target: If True, exclude the outcome column from features.

        Returns:
            List of feature column names in declaration order.
        """
        features = [col.value for col in cls]
        if exclude_target:
            features = list(filter(lambda f: f != cls.TARGET, features))
        return features

    @classmethod
    def by_original_name(cls) -> dict[str, str]:
        """Map raw CSV header names to cleaned column names."""
        return {col.original_name: col.value for col in cls}

    @property
    def pretty_name(self) -> str:
        """Get the human-readable name for plots and summaries."""
        return self.metadata().pretty_name

    @property
    def original_name(self) -> str:
        """Get the original column name from the CSV file."""
        return self.metadata().original_name

    @property
    def dtype_name(self) -> str:
        """Get the expected data type as a string."""
        return self.metadata().dtype

    @property
    def kind(self) -> FeatureKind:
        return self.metadata().kind

    @property
    def domain(self) -> tuple[int, ...] | None:
        return self.metadata().domain
