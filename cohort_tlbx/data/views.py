"""Task-specific views over dataset content."""

from dataclasses import dataclass

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class FeatureMatrix:
    """Immutable, dense and standardized snapshot of the requested features.

    Attributes:
        values: Array of shape ``(n_valid, n_features)``; one row per kept record.
        valid_indices: Original record index of every matrix row (strictly increasing).
        feature_names: Column order of ``values``.
        medians: Per-feature imputation value computed over the whole dataset.
        means: Per-feature mean over kept rows (after imputation).
        scales: Per-feature population standard deviation over kept rows, ``1.0`` for
            constant features.
        constant_features: Features without variation over kept rows; their column is
            exactly zero.
    """

    values: np.ndarray
    valid_indices: np.ndarray
    """Matrix row -> original record index."""
    feature_names: tuple[str, ...]
    medians: np.ndarray
    means: np.ndarray
    scales: np.ndarray
    constant_features: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.values.shape[0] != len(self.valid_indices):
            raise ValueError(
                f"Matrix has {self.values.shape[0]} rows but {len(self.valid_indices)} valid indices.",
            )
        if len(self.valid_indices) > 1 and not np.all(np.diff(self.valid_indices) > 0):
            raise ValueError("valid_indices must be strictly increasing.")

    @property
    def n_rows(self) -> int:
        return int(self.values.shape[0])

    @property
    def n_features(self) -> int:
        return len(self.feature_names)

    @property
    def is_empty(self) -> bool:
        """True when no record survived preprocessing (a displayable "no data" state)."""
        return self.n_rows == 0

    def to_frame(self) -> pd.DataFrame:
        """Return the standardized matrix indexed by original record index."""
        return pd.DataFrame(
            self.values,
            columns=list(self.feature_names),
            index=pd.Index(self.valid_indices, name="original_index"),
        )
