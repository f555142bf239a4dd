"""Summary statistics of record subgroups (full cohort, brushed selection, pinned group)."""

from __future__ import annotations

import logging
import operator
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal

import numpy as np
import pandas as pd

from cohort_tlbx.data.framingham_columns import FraminghamColumn as Col
from cohort_tlbx.data.preprocessing import numeric_block

from .selection import SelectionSnapshot, SelectionState


logger = logging.getLogger(__name__)

MEAN_FEATURES: tuple[str, ...] = (Col.AGE, Col.BMI, Col.TOT_CHOL, Col.SYS_BP)
RATE_FEATURES: tuple[str, ...] = (Col.MALE, Col.CURRENT_SMOKER, Col.DIABETES, Col.PREVALENT_HYP, Col.TARGET)


@dataclass(frozen=True)
class ComparisonMetric:
    """One bar group of the subgroup comparison chart."""

    key: str
    label: str
    feature: str
    statistic: Literal["mean", "percentage"]
    unit: str = ""


COMPARISON_METRICS: tuple[ComparisonMetric, ...] = (
    ComparisonMetric("avg_age", "Avg Age", Col.AGE, "mean", "yrs"),
    ComparisonMetric("avg_bmi", "Avg BMI", Col.BMI, "mean"),
    ComparisonMetric("avg_sys_bp", "Avg Sys BP", Col.SYS_BP, "mean", "mmHg"),
    ComparisonMetric("pct_diabetes", "Diabetes %", Col.DIABETES, "percentage", "%"),
    ComparisonMetric("pct_chd", "10yr CHD %", Col.TARGET, "percentage", "%"),
)


@dataclass(frozen=True)
class SubgroupSummary:
    """Statistics of one non-empty subgroup.

    Attributes:
        n: Number of records ``k`` in the subgroup.
        means: Feature -> mean over the present values, ``None`` if none is present.
        percentages: Feature -> share of records with value ``1`` (in percent of ``k``).
    """

    n: int
    means: Mapping[str, float | None] = field(default_factory=dict)
    percentages: Mapping[str, float] = field(default_factory=dict)

    def value(self, metric: ComparisonMetric) -> float | None:
        if metric.statistic == "mean":
            return self.means.get(metric.feature)
        return self.percentages.get(metric.feature)

    def to_series(self) -> pd.Series:
        """Flat series ``n``, ``mean_<feature>`` and ``pct_<feature>`` (missing means are NaN)."""
        data: dict[str, float] = {"n": float(self.n)}
        data |= {f"mean_{name}": np.nan if v is None else v for name, v in self.means.items()}
        data |= {f"pct_{name}": v for name, v in self.percentages.items()}
        return pd.Series(data, dtype=float)


def _validate_indices(indices: Iterable[int], n_records: int) -> list[int]:
    positions = sorted({operator.index(i) for i in indices})
    out_of_range = [i for i in positions if i < 0 or i >= n_records]
    if out_of_range:
        raise ValueError(f"Record indices out of range [0, {n_records}): {out_of_range[:5]}")
    return positions


def summarize(
    frame: pd.DataFrame,
    indices: Iterable[int],
    *,
    mean_features: Iterable[str] = MEAN_FEATURES,
    rate_features: Iterable[str] = RATE_FEATURES,
) -> SubgroupSummary | None:
    """Summarize the records at the given original indices.

    Args:
        frame: Cohort records; the row position is the original index.
        indices: Original record indices of the subgroup (duplicates are ignored).
        mean_features: Numeric features averaged over their present values.
        rate_features: Binary features reported as percentage of value ``1``. Missing
            and non-``1`` values count as not-true; the divisor is always ``k``.

    Returns:
        SubgroupSummary, or ``None`` for an empty index set (a "no data" state).

    Raises:
        ValueError: If an index is outside the frame or a feature is not a column.
    """
    positions = _validate_indices(indices, len(frame))
    if not positions:
        return None

    subset = frame.iloc[positions]
    k = len(positions)
    mean_block = numeric_block(subset, list(mean_features))
    rate_block = numeric_block(subset, list(rate_features))

    means = {name: (None if column.isna().all() else float(column.mean())) for name, column in mean_block.items()}
    percentages = {name: float((column == 1).sum()) / k * 100 for name, column in rate_block.items()}
    return SubgroupSummary(n=k, means=means, percentages=percentages)


@dataclass(frozen=True)
class SubgroupComparison:
    """Independent summaries of the full cohort, the selection and the pinned group."""

    full: SubgroupSummary | None
    selected: SubgroupSummary | None
    pinned: SubgroupSummary | None

    def groups(self) -> dict[str, SubgroupSummary]:
        """Present groups in display order (full cohort, pinned, selected)."""
        candidates = {"Full Cohort": self.full, "Pinned": self.pinned, "Selected": self.selected}
        return {name: summary for name, summary in candidates.items() if summary is not None}

    def to_frame(self, metrics: Iterable[ComparisonMetric] = COMPARISON_METRICS) -> pd.DataFrame:
        """Metric labels as rows, present groups as columns."""
        metrics = list(metrics)
        return pd.DataFrame(
            {
                name: [np.nan if (v := summary.value(metric)) is None else v for metric in metrics]
                for name, summary in self.groups().items()
            },
            index=pd.Index([metric.label for metric in metrics], name="metric"),
            dtype=float,
        )


def compare_subgroups(frame: pd.DataFrame, selection: SelectionState | SelectionSnapshot) -> SubgroupComparison:
    """Summarize full cohort, current selection and current pin side by side."""
    snapshot = selection.snapshot if isinstance(selection, SelectionState) else selection
    comparison = SubgroupComparison(
        full=summarize(frame, range(len(frame))),
        selected=summarize(frame, snapshot.selected),
        pinned=summarize(frame, snapshot.pinned),
    )
    logger.debug(
        "Compared subgroups: %d records, %d selected, %d pinned",
        len(frame),
        len(snapshot.selected),
        len(snapshot.pinned),
    )
    return comparison
