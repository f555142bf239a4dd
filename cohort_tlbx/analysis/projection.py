"""Dimensionality-reduction strategies and the projections they produce.

A projection maps every kept record to a point ``(x, y)`` tagged with the record's
original index. The reduction method is a pluggable strategy selected by
:class:`ReductionMethod`; both PCA and t-SNE consume the same
:class:`~cohort_tlbx.data.views.FeatureMatrix`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import numpy as np
import pandas as pd

from cohort_tlbx.data.views import FeatureMatrix
from cohort_tlbx.utils.engine_config import DEFAULT_PCA_CFG, DEFAULT_TSNE_CFG, PCAConfig, TSNEConfig

from .base_analyser import BaseAnalyser
from .pca_projector import compute_pca
from .tsne_projector import RandomState, compute_tsne


logger = logging.getLogger(__name__)


class ReductionMethod(StrEnum):
    """Available dimensionality-reduction methods."""

    PCA = "pca"
    TSNE = "tsne"

    @property
    def label(self) -> str:
        return {ReductionMethod.PCA: "PCA", ReductionMethod.TSNE: "t-SNE"}[self]

    @classmethod
    def parse(cls, value: str | ReductionMethod) -> ReductionMethod:
        """Convert a user-supplied name (case-insensitive) to a method."""
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown reduction method '{value}'. Available: {[m.value for m in cls]}",
            ) from None


@dataclass(frozen=True)
class ProjectionPoint:
    """A single projected record."""

    x: float
    y: float
    original_index: int


@dataclass(frozen=True, eq=False)
class ProjectionResult:
    """Two-dimensional coordinates of every kept record.

    Attributes:
        coords: DataFrame with columns ``x`` and ``y`` indexed by ``original_index``
            (same order as the feature matrix rows).
        method: Reduction method that produced the coordinates.
        feature_names: Features the projection was computed from.
        variance_explained: Percentages for ``(PC1, PC2)``; ``None`` for t-SNE.
        axes: Principal axes of shape ``(2, n_features)``; ``None`` for t-SNE.
    """

    coords: pd.DataFrame
    method: ReductionMethod
    feature_names: tuple[str, ...]
    variance_explained: tuple[float, float] | None = None
    axes: np.ndarray | None = None

    @property
    def is_empty(self) -> bool:
        return self.coords.empty

    @property
    def original_indices(self) -> list[int]:
        return self.coords.index.tolist()

    @property
    def points(self) -> list[ProjectionPoint]:
        return [
            ProjectionPoint(x=float(x), y=float(y), original_index=int(idx))
            for idx, x, y in zip(self.coords.index, self.coords["x"], self.coords["y"], strict=True)
        ]

    def axis_labels(self) -> tuple[str, str]:
        """Axis titles, e.g. ``"PC1 (42.0% var.)"`` or ``"t-SNE Dimension 1"``."""
        if self.method == ReductionMethod.PCA and self.variance_explained is not None:
            return tuple(f"PC{i + 1} ({pct:.1f}% var.)" for i, pct in enumerate(self.variance_explained))
        return (f"{self.method.label} Dimension 1", f"{self.method.label} Dimension 2")

    def loadings(self) -> pd.DataFrame:
        """PCA loadings (index = features, columns ``PC1``/``PC2``).

        Raises:
            ValueError: If the projection was not computed with PCA.
        """
        if self.axes is None:
            raise ValueError(f"Loadings are only available for PCA projections, not {self.method.label}.")
        return pd.DataFrame(self.axes.T, index=list(self.feature_names), columns=["PC1", "PC2"])

    def indices_in_box(self, x0: float, x1: float, y0: float, y1: float) -> list[int]:
        """Original indices of the points inside a rectangle (corners in any order, edges inclusive)."""
        x_lo, x_hi = sorted((x0, x1))
        y_lo, y_hi = sorted((y0, y1))
        inside = self.coords["x"].between(x_lo, x_hi) & self.coords["y"].between(y_lo, y_hi)
        return self.coords.index[inside].tolist()


Reducer = Callable[[np.ndarray, PCAConfig, TSNEConfig, RandomState], tuple[np.ndarray, dict]]


def _reduce_pca(values: np.ndarray, pca_config: PCAConfig, tsne_config: TSNEConfig, random_state: RandomState):
    fit = compute_pca(values, pca_config)
    variance = (float(fit.variance_explained[0]), float(fit.variance_explained[1]))
    return fit.scores, {"variance_explained": variance, "axes": fit.axes}


def _reduce_tsne(values: np.ndarray, pca_config: PCAConfig, tsne_config: TSNEConfig, random_state: RandomState):
    return compute_tsne(values, tsne_config, random_state), {}


REDUCERS: dict[ReductionMethod, Reducer] = {
    ReductionMethod.PCA: _reduce_pca,
    ReductionMethod.TSNE: _reduce_tsne,
}


def project(
    matrix: FeatureMatrix,
    method: str | ReductionMethod = ReductionMethod.PCA,
    *,
    pca_config: PCAConfig = DEFAULT_PCA_CFG,
    tsne_config: TSNEConfig = DEFAULT_TSNE_CFG,
    random_state: RandomState = None,
) -> ProjectionResult:
    """Reduce a feature matrix to two dimensions with the chosen method.

    An empty matrix yields an empty projection ("no data") rather than an error.
    """
    method = ReductionMethod.parse(method)
    index = pd.Index(matrix.valid_indices, name="original_index")

    if matrix.is_empty:
        logger.info("No records to project with %s", method.label)
        return ProjectionResult(
            coords=pd.DataFrame({"x": [], "y": []}, index=index, dtype=float),
            method=method,
            feature_names=matrix.feature_names,
        )

    coords, extras = REDUCERS[method](matrix.values, pca_config, tsne_config, random_state)
    return ProjectionResult(
        coords=pd.DataFrame(coords, columns=["x", "y"], index=index),
        method=method,
        feature_names=matrix.feature_names,
        **extras,
    )


class ProjectionAnalyzer(BaseAnalyser):
    """Projection of a feature matrix following the ``fit().result()`` protocol."""

    def __init__(
        self,
        matrix: FeatureMatrix,
        method: str | ReductionMethod = ReductionMethod.PCA,
        *,
        pca_config: PCAConfig = DEFAULT_PCA_CFG,
        tsne_config: TSNEConfig = DEFAULT_TSNE_CFG,
        random_state: RandomState = None,
    ):
        self.matrix = matrix
        self.method = ReductionMethod.parse(method)
        self.pca_config = pca_config
        self.tsne_config = tsne_config
        self.random_state = random_state
        self._result: ProjectionResult | None = None

    def fit(self) -> ProjectionAnalyzer:
        self._result = project(
            self.matrix,
            self.method,
            pca_config=self.pca_config,
            tsne_config=self.tsne_config,
            random_state=self.random_state,
        )
        return self

    def result(self) -> ProjectionResult:
        if self._result is None:
            raise ValueError("Projection not computed. Call fit() first.")
        return self._result


class ProjectionRunner:
    """Tracks the projection currently shown and discards results of superseded runs.

    Every :meth:`start` hands out a ticket; only the result delivered for the most
    recent ticket is accepted, so a slow run finishing after a newer one cannot
    overwrite it.
    """

    def __init__(self) -> None:
        self._latest_ticket = 0
        self._pending: int | None = None
        self._current: ProjectionResult | None = None

    @property
    def current(self) -> ProjectionResult | None:
        return self._current

    @property
    def is_computing(self) -> bool:
        return self._pending is not None

    def start(self) -> int:
        self._latest_ticket += 1
        self._pending = self._latest_ticket
        return self._latest_ticket

    def complete(self, ticket: int, result: ProjectionResult) -> bool:
        """Accept ``result`` if ``ticket`` is the latest one; return whether it was accepted."""
        if ticket != self._latest_ticket:
            logger.warning("Discarding stale %s projection (run %d, latest %d)", result.method.label, ticket, self._latest_ticket)
            return False
        self._current = result
        self._pending = None
        return True

    def run(self, compute: Callable[[], ProjectionResult]) -> ProjectionResult:
        """Start a run, compute synchronously and publish the result."""
        ticket = self.start()
        self.complete(ticket, compute())
        return self._current
