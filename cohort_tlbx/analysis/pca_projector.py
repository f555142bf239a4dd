"""Two-axis principal component analysis via power iteration and deflation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd

from cohort_tlbx.utils.engine_config import DEFAULT_PCA_CFG, PCAConfig


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PCAFit:
    """Truncated eigendecomposition of the covariance of a standardized matrix.

    Attributes:
        axes: Array of shape ``(2, n_features)``; row ``i`` is the unit-length principal
            axis ``v_i``. The sign of each axis is arbitrary. For a single feature the
            second axis is the zero vector.
        eigenvalues: ``(λ1, λ2)`` with ``λi = v_i · C · v_i`` on the full covariance ``C``.
        variance_explained: ``λi / trace(C) * 100``; zeros when ``trace(C) == 0``.
        scores: Array of shape ``(n_rows, 2)``; projections of every row onto ``(v1, v2)``.
        total_variance: ``trace(C)``, the summed variance of all features.
    """

    axes: np.ndarray
    eigenvalues: np.ndarray
    variance_explained: np.ndarray
    scores: np.ndarray
    total_variance: float

    def loadings(self, feature_names: Sequence[str]) -> pd.DataFrame:
        """Return the axes as a loadings table (index = features, columns ``PC1``/``PC2``)."""
        return pd.DataFrame(self.axes.T, index=list(feature_names), columns=["PC1", "PC2"])


def covariance_matrix(values: np.ndarray) -> np.ndarray:
    r"""Feature covariance of an already centered matrix, :math:`C = X^\top X / n`."""
    return values.T @ values / values.shape[0]


def seed_vector(n_features: int, axis: int) -> np.ndarray:
    """Fixed, deterministic start vector for the power iteration of ``axis`` (0 or 1).

    Weights decrease from the first coordinate for the first axis and increase for
    the second one; every coordinate is non-zero so the seed is never orthogonal to
    an axis that happens to be aligned with a coordinate subspace.
    """
    weights = np.arange(n_features, 0, -1, dtype=float) if axis == 0 else np.arange(1, n_features + 1, dtype=float)
    return weights / np.linalg.norm(weights)


def _project_out(vector: np.ndarray, basis: np.ndarray | None) -> np.ndarray:
    if basis is None:
        return vector
    return vector - (vector @ basis) * basis


def power_iteration(
    matrix: np.ndarray,
    start: np.ndarray,
    n_iter: int = DEFAULT_PCA_CFG.n_iter,
    *,
    orthogonal_to: np.ndarray | None = None,
    min_norm: float = DEFAULT_PCA_CFG.min_norm,
) -> np.ndarray:
    """Approximate the dominant eigenvector of a symmetric positive semi-definite matrix.

    Repeatedly multiplies by ``matrix`` and renormalizes for a fixed number of
    iterations. When ``orthogonal_to`` (a unit vector) is given, every candidate is
    re-orthogonalized against it before renormalizing. A candidate whose norm drops
    below ``min_norm`` counts as converged and the last valid vector is returned.

    Returns:
        Unit vector, or the zero vector if ``start`` has no component outside
        ``orthogonal_to``.
    """
    vector = _project_out(np.asarray(start, dtype=float), orthogonal_to)
    norm = np.linalg.norm(vector)
    if norm < min_norm:
        return np.zeros_like(vector)
    vector = vector / norm

    for step in range(n_iter):
        candidate = _project_out(matrix @ vector, orthogonal_to)
        norm = np.linalg.norm(candidate)
        if norm < min_norm:
            logger.warning("Power iteration stopped after %d steps (residual norm %.3g)", step, norm)
            break
        vector = candidate / norm
    return vector


def _second_axis(deflated: np.ndarray, first: np.ndarray, config: PCAConfig) -> np.ndarray:
    n_features = first.shape[0]
    seeds = [seed_vector(n_features, 1), *np.eye(n_features)]
    for seed in seeds:
        axis = power_iteration(deflated, seed, config.n_iter, orthogonal_to=first, min_norm=config.min_norm)
        if np.any(axis):
            return axis
    return np.zeros(n_features)


def compute_pca(values: np.ndarray, config: PCAConfig = DEFAULT_PCA_CFG) -> PCAFit:
    """Compute the first two principal components of a standardized matrix.

    1. Covariance ``C = XᵀX / n`` (the input is already centered).
    2. First axis by power iteration from a fixed seed; ``λ1 = v1·C·v1``.
    3. Deflation ``C' = C - λ1 v1 v1ᵀ``.
    4. Second axis by power iteration on ``C'``, re-orthogonalized against ``v1`` at
       every step; ``λ2 = v2·C·v2`` on the full covariance.
    5. Variance explained ``λi / trace(C) * 100`` and scores ``X · [v1 v2]``.

    The result is deterministic for identical input. Empty input yields empty scores
    and zero variance explained.
    """
    values = np.asarray(values, dtype=float)
    if values.ndim != 2:
        raise ValueError(f"Expected a 2D matrix, got an array with {values.ndim} dimensions")

    n_rows, n_features = values.shape
    if n_rows == 0 or n_features == 0:
        return PCAFit(
            axes=np.zeros((2, n_features)),
            eigenvalues=np.zeros(2),
            variance_explained=np.zeros(2),
            scores=np.empty((n_rows, 2)),
            total_variance=0.0,
        )

    cov = covariance_matrix(values)
    first = power_iteration(cov, seed_vector(n_features, 0), config.n_iter, min_norm=config.min_norm)
    first_eig = float(first @ cov @ first)

    deflated = cov - first_eig * np.outer(first, first)
    second = _second_axis(deflated, first, config)
    second_eig = float(second @ cov @ second)

    if second_eig > first_eig:
        logger.debug("Swapping principal axes (λ1=%.6g < λ2=%.6g)", first_eig, second_eig)
        first, second = second, first
        first_eig, second_eig = second_eig, first_eig

    eigenvalues = np.clip([first_eig, second_eig], 0.0, None)
    total_variance = float(np.trace(cov))
    variance_explained = eigenvalues / total_variance * 100 if total_variance > 0 else np.zeros(2)
    axes = np.vstack([first, second])

    logger.info(
        "PCA: PC1 explains %.1f%%, PC2 explains %.1f%% of %d features",
        variance_explained[0],
        variance_explained[1],
        n_features,
    )
    return PCAFit(
        axes=axes,
        eigenvalues=eigenvalues,
        variance_explained=variance_explained,
        scores=values @ axes.T,
        total_variance=total_variance,
    )
