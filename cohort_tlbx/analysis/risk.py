"""Nearest-neighbour estimate of ten-year CHD risk for a hypothetical profile."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler

from cohort_tlbx.data.framingham_columns import CONTINUOUS_FEATURES
from cohort_tlbx.data.framingham_columns import FraminghamColumn as Col
from cohort_tlbx.data.preprocessing import column_medians, column_ranges, numeric_block, validate_feature_names


logger = logging.getLogger(__name__)

DEFAULT_NEIGHBORS = 100
ZERO_FILLED_FEATURES: tuple[str, ...] = (Col.CIGS_PER_DAY,)
"""Features whose missing values mean "none" rather than "unknown"."""

DEFAULT_PROFILE: dict[str, float] = {
    Col.AGE: 50.0,
    Col.CIGS_PER_DAY: 0.0,
    Col.TOT_CHOL: 200.0,
    Col.SYS_BP: 120.0,
    Col.DIA_BP: 80.0,
    Col.BMI: 25.0,
    Col.HEART_RATE: 75.0,
    Col.GLUCOSE: 85.0,
}
"""Starting values of the what-if profile form."""


def risk_band(percentage: float) -> str:
    """Classify a risk percentage as ``"low"`` (≤ 10), ``"moderate"`` (≤ 20) or ``"high"``."""
    if percentage <= 10:
        return "low"
    if percentage <= 20:
        return "moderate"
    return "high"


@dataclass(frozen=True)
class RiskEstimate:
    """Outcome share among the nearest neighbours of a profile.

    Attributes:
        risk_percentage: Percentage of neighbours with the outcome flag set.
        k: Number of neighbours actually used (``min(k, n_records)``).
        n_events: Neighbours with the outcome flag set.
        neighbor_indices: Original indices of the neighbours, nearest first.
    """

    risk_percentage: float
    k: int
    n_events: int
    neighbor_indices: tuple[int, ...]

    @property
    def band(self) -> str:
        return risk_band(self.risk_percentage)


class RiskEstimator:
    """k-nearest-neighbour risk over min-max normalized continuous features.

    Every feature is scaled to ``[0, 1]`` over its observed range in the cohort
    (``MinMaxScaler``). Missing cohort values are imputed with ``0`` for
    :data:`ZERO_FILLED_FEATURES` and with the feature median otherwise.
    """

    def __init__(
        self,
        frame: pd.DataFrame,
        features: Iterable[str] = CONTINUOUS_FEATURES,
        *,
        k: int = DEFAULT_NEIGHBORS,
        outcome: str = Col.TARGET,
    ):
        if k < 1:
            raise ValueError(f"k must be positive, got {k}")
        frame = frame.reset_index(drop=True)
        if frame.empty:
            raise ValueError("Cannot estimate risk from an empty cohort.")

        self.features = validate_feature_names(features)
        self.k = k
        self.outcome = str(outcome)
        self.ranges = column_ranges(frame, self.features)

        raw = numeric_block(frame, self.features)
        zero_filled = [f for f in self.features if f in ZERO_FILLED_FEATURES]
        imputed = raw.copy()
        imputed[zero_filled] = imputed[zero_filled].fillna(0.0)
        imputed = imputed.fillna(column_medians(frame, self.features))

        self._scaler = MinMaxScaler().fit(raw)
        self._normalized = self._scaler.transform(imputed)
        self._events = (numeric_block(frame, [self.outcome])[self.outcome] == 1).to_numpy()
        logger.info("Risk estimator ready: %d records, %d features, k=%d", len(frame), len(self.features), k)

    @property
    def n_records(self) -> int:
        return int(self._normalized.shape[0])

    def estimate(self, profile: Mapping[str, float]) -> RiskEstimate:
        """Share of the ``k`` records closest to ``profile`` that developed the outcome.

        Raises:
            ValueError: If ``profile`` lacks one of the features.
        """
        missing = [f for f in self.features if f not in profile]
        if missing:
            raise ValueError(f"Profile is missing features: {missing}")

        point = pd.DataFrame([[float(profile[f]) for f in self.features]], columns=self.features)
        normalized = self._scaler.transform(point)[0]
        distances = np.sqrt(((self._normalized - normalized) ** 2).sum(axis=1))

        k = min(self.k, self.n_records)
        nearest = np.argsort(distances, kind="stable")[:k]
        n_events = int(self._events[nearest].sum())
        return RiskEstimate(
            risk_percentage=n_events / k * 100,
            k=k,
            n_events=n_events,
            neighbor_indices=tuple(int(i) for i in nearest),
        )

    def range_indicator(self, feature: str, value: float) -> str:
        """Position of ``value`` relative to the cohort quartiles of ``feature``."""
        if feature not in self.ranges.index:
            raise ValueError(f"Unknown feature '{feature}'. Available: {self.features}")
        row = self.ranges.loc[feature]
        if value < row["p25"]:
            return "Lower"
        if value < row["p50"]:
            return "Below Average"
        if value < row["p75"]:
            return "Above Average"
        return "Higher"

