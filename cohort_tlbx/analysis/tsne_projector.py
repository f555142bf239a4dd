"""Exact t-SNE embedding into two dimensions.

Plain gradient descent with momentum and per-coordinate adaptive gains on the full
``n x n`` affinity matrices (no Barnes-Hut approximation, no early exaggeration).
Quadratic in memory and time; intended for cohorts of a few thousand records.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.spatial.distance import pdist, squareform

from cohort_tlbx.utils.engine_config import DEFAULT_TSNE_CFG, TSNEConfig


logger = logging.getLogger(__name__)

RandomState = int | np.random.Generator | None


def perplexity_for(n_rows: int, max_perplexity: float = DEFAULT_TSNE_CFG.max_perplexity) -> float:
    """Effective perplexity ``min(max_perplexity, floor(n / 3))``, never below 1."""
    return float(max(1.0, min(max_perplexity, n_rows // 3)))


def squared_distances(values: np.ndarray) -> np.ndarray:
    """Pairwise squared Euclidean distances as a square matrix."""
    return squareform(pdist(values, metric="sqeuclidean"))


def _row_entropy(distances: np.ndarray, beta: float, sum_floor: float) -> tuple[np.ndarray, float]:
    weights = np.exp(-distances * beta)
    total = max(float(weights.sum()), sum_floor)
    row = weights / total
    entropy = np.log(total) + beta * float(np.sum(distances * row))
    return row, entropy


def _calibrate_row(distances: np.ndarray, target_entropy: float, config: TSNEConfig) -> tuple[np.ndarray, float]:
    """Binary search for the precision ``beta`` whose row entropy matches ``log(perplexity)``."""
    # shifting by the nearest distance leaves the normalized row unchanged
    shifted = distances - distances.min()
    beta, beta_min, beta_max = 1.0, -np.inf, np.inf
    row, entropy = _row_entropy(shifted, beta, config.sum_floor)
    diff = entropy - target_entropy

    tries = 0
    while abs(diff) > config.entropy_tol and tries < config.max_search_steps:
        if diff > 0:
            beta_min = beta
            beta = beta * 2 if np.isinf(beta_max) else (beta + beta_max) / 2
        else:
            beta_max = beta
            beta = beta / 2 if np.isinf(beta_min) else (beta + beta_min) / 2
        row, entropy = _row_entropy(shifted, beta, config.sum_floor)
        diff = entropy - target_entropy
        tries += 1

    return row, beta


def conditional_affinities(
    sq_distances: np.ndarray,
    perplexity: float,
    config: TSNEConfig = DEFAULT_TSNE_CFG,
) -> np.ndarray:
    """Row-conditional Gaussian affinities ``p(j|i)`` calibrated to ``perplexity``.

    Every row sums to one over ``j != i``, the diagonal is zero and off-diagonal
    entries are floored at ``config.affinity_floor``.
    """
    n_rows = sq_distances.shape[0]
    target_entropy = np.log(perplexity)
    affinities = np.zeros((n_rows, n_rows))
    betas = np.ones(n_rows)

    for i in range(n_rows):
        others = np.arange(n_rows) != i
        row, betas[i] = _calibrate_row(sq_distances[i, others], target_entropy, config)
        affinities[i, others] = np.maximum(row, config.affinity_floor)

    logger.debug("Mean Gaussian bandwidth sigma: %.4f", float(np.mean(np.sqrt(1.0 / betas))))
    return affinities


def joint_affinities(conditional: np.ndarray) -> np.ndarray:
    """Symmetrize conditional affinities: ``(P + Pᵀ) / 2n``."""
    return (conditional + conditional.T) / (2 * conditional.shape[0])


def low_dim_affinities(embedding: np.ndarray, floor: float = DEFAULT_TSNE_CFG.affinity_floor) -> tuple[np.ndarray, np.ndarray]:
    """Student-t kernel ``1 / (1 + |yi - yj|²)`` and its normalization ``Q``.

    Returns:
        Tuple ``(q, num)`` where ``num`` is the kernel with a zero diagonal and
        ``q = num / sum(num)`` floored at ``floor``.
    """
    num = 1.0 / (1.0 + squared_distances(embedding))
    np.fill_diagonal(num, 0.0)
    q = np.maximum(num / num.sum(), floor)
    return q, num


def kl_divergence(p: np.ndarray, q: np.ndarray) -> float:
    """Kullback-Leibler divergence ``KL(P || Q)`` over the positive entries of ``P``."""
    mask = p > 0
    return float(np.sum(p[mask] * np.log(p[mask] / q[mask])))


def tsne_gradient(p: np.ndarray, q: np.ndarray, num: np.ndarray, embedding: np.ndarray) -> np.ndarray:
    """Gradient ``4 Σ_j (p_ij - q_ij) num_ij (y_i - y_j)`` for every row ``i``."""
    weighted = (p - q) * num
    return 4.0 * (weighted.sum(axis=1)[:, None] * embedding - weighted @ embedding)


def _as_generator(random_state: RandomState) -> np.random.Generator:
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)


def compute_tsne(
    values: np.ndarray,
    config: TSNEConfig = DEFAULT_TSNE_CFG,
    random_state: RandomState = None,
) -> np.ndarray:
    """Embed the rows of a standardized matrix into two dimensions.

    Args:
        values: Array of shape ``(n, m)``.
        config: Optimization schedule (iterations, learning rate, momentum, gains).
        random_state: Seed or generator for the initial layout. Runs are only
            reproducible for a fixed seed.

    Returns:
        Array of shape ``(n, 2)``; empty for ``n == 0`` and the origin for ``n == 1``.
        Only relative positions are meaningful.
    """
    values = np.asarray(values, dtype=float)
    if values.ndim != 2:
        raise ValueError(f"Expected a 2D matrix, got an array with {values.ndim} dimensions")

    n_rows = values.shape[0]
    if n_rows == 0:
        return np.empty((0, 2))
    if n_rows == 1:
        return np.zeros((1, 2))

    rng = _as_generator(random_state)
    perplexity = perplexity_for(n_rows, config.max_perplexity)
    if n_rows // 3 < 1:
        logger.warning("Only %d records; perplexity clamped to %.0f", n_rows, perplexity)
    logger.info("Running t-SNE on %d records (perplexity %.0f, %d iterations)", n_rows, perplexity, config.n_iter)
    if n_rows > config.slow_row_count:
        logger.warning("Exact t-SNE on %d records is quadratic in time and memory; expect a long run", n_rows)

    p = joint_affinities(conditional_affinities(squared_distances(values), perplexity, config))

    embedding = rng.uniform(-config.init_scale, config.init_scale, size=(n_rows, 2))
    velocity = np.zeros_like(embedding)
    gains = np.ones_like(embedding)

    for iteration in range(config.n_iter):
        q, num = low_dim_affinities(embedding, config.affinity_floor)
        grad = tsne_gradient(p, q, num, embedding)

        momentum = config.initial_momentum if iteration < config.momentum_switch_iter else config.final_momentum
        same_sign = (grad > 0) == (velocity > 0)
        gains = np.where(same_sign, gains * config.gain_decay, gains + config.gain_increase)
        gains = np.maximum(gains, config.min_gain)

        velocity = momentum * velocity - config.learning_rate * gains * grad
        embedding = embedding + velocity

        if (iteration + 1) % config.recenter_every == 0:
            embedding = embedding - embedding.mean(axis=0)
        if config.log_every and (iteration + 1) % config.log_every == 0:
            logger.debug("t-SNE iteration %d: KL divergence %.4f", iteration + 1, kl_divergence(p, q))

    logger.info("t-SNE finished after %d iterations", config.n_iter)
    return embedding
