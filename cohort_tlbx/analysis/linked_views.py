"""Data behind the linked views: feature distributions, brush emitters and the comparison scatter.

Every function here is a pure function of the records and an index set. Brush
emitters return original record indices, ready for :meth:`SelectionState.brush`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
import pandas as pd

from cohort_tlbx.data.base_columns import ColumnMetadata, FeatureKind
from cohort_tlbx.data.preprocessing import numeric_block

from .selection import SelectionSnapshot, SelectionState


logger = logging.getLogger(__name__)

DEFAULT_BINS = 20


@dataclass(frozen=True)
class DistributionResult:
    """Bars of one feature's distribution with the selected share of every bar.

    Attributes:
        feature: Column name.
        kind: ``numeric`` (histogram bins) or ``categorical``/``ordinal`` (domain values).
        bars: For numeric features columns ``bin_start``, ``bin_end``, ``count``,
            ``selected_count``; otherwise ``value``, ``label``, ``count``, ``selected_count``.
        n_missing: Records without a value for the feature.
    """

    feature: str
    kind: FeatureKind
    bars: pd.DataFrame
    n_missing: int

    @property
    def is_empty(self) -> bool:
        return self.bars.empty or int(self.bars["count"].sum()) == 0


def _feature_values(frame: pd.DataFrame, feature: str) -> pd.Series:
    return numeric_block(frame, [feature])[feature]


def feature_distribution(
    frame: pd.DataFrame,
    feature: str,
    selected: Iterable[int] = (),
    *,
    metadata: ColumnMetadata | None = None,
    bins: int = DEFAULT_BINS,
) -> DistributionResult:
    """Histogram (numeric) or per-value counts (categorical/ordinal) of a feature.

    Args:
        frame: Cohort records; the row position is the original index.
        feature: Column to describe.
        selected: Original indices of the current selection.
        metadata: Descriptor of the column; without it the feature is treated as numeric.
        bins: Number of equal-width histogram bins over the observed range.
    """
    values = _feature_values(frame.reset_index(drop=True), feature)
    mask = np.zeros(len(values), dtype=bool)
    positions = [i for i in selected if 0 <= i < len(values)]
    mask[positions] = True
    present = values.notna().to_numpy()
    n_missing = int((~present).sum())

    if metadata is not None and metadata.is_categorical:
        domain = list(metadata.domain)
        counts = values.value_counts().reindex(domain, fill_value=0)
        selected_counts = values[mask].value_counts().reindex(domain, fill_value=0)
        bars = pd.DataFrame(
            {
                "value": domain,
                "label": [metadata.label_for(v) for v in domain],
                "count": counts.to_numpy(dtype=int),
                "selected_count": selected_counts.to_numpy(dtype=int),
            },
        )
        return DistributionResult(feature=feature, kind=metadata.kind, bars=bars, n_missing=n_missing)

    observed = values[present].to_numpy()
    if observed.size == 0:
        bars = pd.DataFrame(columns=["bin_start", "bin_end", "count", "selected_count"])
        return DistributionResult(feature=feature, kind=FeatureKind.NUMERIC, bars=bars, n_missing=n_missing)

    counts, edges = np.histogram(observed, bins=bins)
    selected_counts, _ = np.histogram(values[mask & present].to_numpy(), bins=edges)
    bars = pd.DataFrame(
        {
            "bin_start": edges[:-1],
            "bin_end": edges[1:],
            "count": counts,
            "selected_count": selected_counts,
        },
    )
    return DistributionResult(feature=feature, kind=FeatureKind.NUMERIC, bars=bars, n_missing=n_missing)


def indices_in_range(frame: pd.DataFrame, feature: str, lower: float, upper: float) -> list[int]:
    """Original indices whose ``feature`` lies in ``[lower, upper]`` (bounds in any order)."""
    lo, hi = sorted((lower, upper))
    values = _feature_values(frame.reset_index(drop=True), feature)
    return np.flatnonzero(values.between(lo, hi).to_numpy()).tolist()


def indices_with_value(frame: pd.DataFrame, feature: str, value: float) -> list[int]:
    """Original indices whose ``feature`` equals ``value`` (a click on one bar)."""
    values = _feature_values(frame.reset_index(drop=True), feature)
    return np.flatnonzero((values == value).to_numpy()).tolist()


def comparison_scatter(
    frame: pd.DataFrame,
    x_feature: str,
    y_feature: str,
    selection: SelectionState | SelectionSnapshot,
) -> pd.DataFrame:
    """Points of a two-feature scatter tagged by subgroup.

    Only records with both features present are kept. ``group`` is ``"pinned"``
    for pinned records (pinned takes precedence), ``"selected"`` for selected ones
    and ``"other"`` otherwise.

    Returns:
        DataFrame with columns ``x``, ``y``, ``group`` indexed by ``original_index``.
    """
    snapshot = selection.snapshot if isinstance(selection, SelectionState) else selection
    block = numeric_block(frame.reset_index(drop=True), [x_feature, y_feature])
    block.columns = ["x", "y"]
    block.index.name = "original_index"
    block = block.dropna()

    group = np.full(len(block), "other", dtype=object)
    group[block.index.isin(list(snapshot.selected))] = "selected"
    group[block.index.isin(list(snapshot.pinned))] = "pinned"
    block["group"] = group

    logger.debug("Comparison scatter %s vs %s: %d points", x_feature, y_feature, len(block))
    return block
