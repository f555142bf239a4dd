"""Median imputation, row filtering and standardization of cohort records.

The range statistics (medians, quantiles, min/max) defined here are shared with
the personal-risk estimator so both agree on how missing values are ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from cohort_tlbx.utils.engine_config import DEFAULT_PREPROCESS_CFG, PreprocessConfig

from .views import FeatureMatrix


logger = logging.getLogger(__name__)

Records = pd.DataFrame | Sequence[Mapping[str, object]]

DEFAULT_QUANTILES: tuple[float, ...] = (0.25, 0.5, 0.75)


def as_frame(records: Records) -> pd.DataFrame:
    """Return the records as a DataFrame whose positional index is the original record index."""
    if isinstance(records, pd.DataFrame):
        return records.reset_index(drop=True)
    if isinstance(records, (str, bytes)) or not isinstance(records, Iterable):
        raise TypeError(f"records must be a DataFrame or a sequence of mappings, got {type(records).__name__}")
    return pd.DataFrame.from_records(list(records))


def validate_feature_names(feature_names: Iterable[str]) -> list[str]:
    """Check the requested feature list and return it as a list."""
    if isinstance(feature_names, str):
        raise TypeError("feature_names must be an iterable of column names, not a single string.")
    features = [str(name) for name in feature_names]
    if not features:
        raise ValueError("feature_names must contain at least one feature.")
    duplicates = sorted({name for name in features if features.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate features requested: {duplicates}")
    return features


def numeric_block(frame: pd.DataFrame, features: Sequence[str]) -> pd.DataFrame:
    """Select ``features`` as floats; non-numeric cells become missing (``NaN``).

    Raises:
        ValueError: If a feature is not a column of a non-empty frame.
    """
    unknown = [name for name in features if name not in frame.columns]
    if unknown and len(frame):
        raise ValueError(f"Unknown features {unknown}. Available: {list(frame.columns)}")
    block = frame.reindex(columns=list(features))
    return block.apply(pd.to_numeric, errors="coerce").astype(float)


def column_medians(
    frame: pd.DataFrame,
    features: Sequence[str],
    default: float = DEFAULT_PREPROCESS_CFG.missing_median_default,
) -> pd.Series:
    """Median of the non-missing values of every feature.

    A feature without any observed value gets ``default``.
    """
    medians = numeric_block(frame, features).median(skipna=True)
    return medians.fillna(default)


def column_quantiles(
    frame: pd.DataFrame,
    features: Sequence[str],
    quantiles: Sequence[float] = DEFAULT_QUANTILES,
) -> pd.DataFrame:
    """Linearly interpolated quantiles of every feature, ignoring missing values.

    Returns:
        DataFrame with one row per feature and one column per quantile.
    """
    block = numeric_block(frame, features)
    return block.quantile(list(quantiles), interpolation="linear").T


def column_ranges(frame: pd.DataFrame, features: Sequence[str]) -> pd.DataFrame:
    """Observed ``min``, ``max`` and quartiles ``p25``/``p50``/``p75`` of every feature."""
    block = numeric_block(frame, features)
    quartiles = column_quantiles(block, features, DEFAULT_QUANTILES)
    quartiles.columns = ["p25", "p50", "p75"]
    return pd.concat([block.min().rename("min"), block.max().rename("max"), quartiles], axis=1)


def preprocess(
    records: Records,
    feature_names: Iterable[str],
    config: PreprocessConfig = DEFAULT_PREPROCESS_CFG,
) -> FeatureMatrix:
    """Convert raw records into a dense, standardized feature matrix.

    1. Median of each feature over the *entire* dataset, ignoring missing values.
    2. Missing cells are replaced by that median.
    3. Records with every requested feature missing are dropped; the original index
       of every kept record is stored in ``valid_indices`` (original order).
    4. Columns are standardized with the population mean and standard deviation of
       the kept rows via :class:`sklearn.preprocessing.StandardScaler`; a constant
       column (or one whose spread is below floating-point resolution) is divided
       by ``1`` and set to all zeros.

    Args:
        records: DataFrame (positional row = original index) or sequence of mappings.
        feature_names: Features to include, in column order.
        config: Imputation policy for features that are never observed.

    Returns:
        FeatureMatrix; empty (zero rows) when no record has any requested feature.

    Raises:
        ValueError: If ``feature_names`` is empty, has duplicates or names unknown columns.
    """
    features = validate_feature_names(feature_names)
    frame = as_frame(records)
    block = numeric_block(frame, features)

    medians = column_medians(block, features, default=config.missing_median_default)
    all_missing = block.isna().all(axis=1).to_numpy()
    imputed = block.fillna(medians)
    kept = imputed.loc[~all_missing].to_numpy(dtype=float)
    valid_indices = np.flatnonzero(~all_missing).astype(np.int64)

    logger.info(
        "Preprocessed %d of %d records for features %s (%d dropped, all features missing)",
        len(valid_indices),
        len(frame),
        features,
        int(all_missing.sum()),
    )

    if kept.shape[0] == 0:
        return FeatureMatrix(
            values=np.empty((0, len(features))),
            valid_indices=valid_indices,
            feature_names=tuple(features),
            medians=medians.to_numpy(dtype=float),
            means=np.full(len(features), np.nan),
            scales=np.ones(len(features)),
        )

    scaler = StandardScaler()
    values = scaler.fit_transform(kept)
    # StandardScaler keeps a unit scale for columns whose variance is lost in rounding
    constant = (np.ptp(kept, axis=0) == 0) | ((scaler.scale_ == 1.0) & ~np.isclose(scaler.var_, 1.0))
    values[:, constant] = 0.0
    scales = np.where(constant, 1.0, scaler.scale_)

    constant_features = tuple(name for name, flag in zip(features, constant, strict=True) if flag)
    if constant_features:
        logger.warning("Constant features standardized to zero: %s", list(constant_features))

    return FeatureMatrix(
        values=values,
        valid_indices=valid_indices,
        feature_names=tuple(features),
        medians=medians.to_numpy(dtype=float),
        means=scaler.mean_.copy(),
        scales=scales,
        constant_features=constant_features,
    )
