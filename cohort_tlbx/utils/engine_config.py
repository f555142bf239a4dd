"""Tunable parameters of the preprocessing and projection engines."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PreprocessConfig:
    """Parameters of :func:`cohort_tlbx.data.preprocessing.preprocess`.

    Attributes:
        missing_median_default: Imputation value for a feature that has no observed
            value anywhere in the dataset. A policy choice kept for compatibility with
            the dashboard, not a property derived from the data.
    """

    missing_median_default: float = 0.0


@dataclass(frozen=True)
class PCAConfig:
    """Parameters of the power-iteration PCA.

    Attributes:
        n_iter: Fixed number of power iterations per axis (50 or more converges for
            well-conditioned covariance matrices of ~10-16 features).
        min_norm: Residual norm below which the second-axis iteration stops and keeps
            the last valid vector.
    """

    n_iter: int = 100
    min_norm: float = 1e-10

    def __post_init__(self) -> None:
        if self.n_iter < 1:
            raise ValueError(f"n_iter must be positive, got {self.n_iter}")


@dataclass(frozen=True)
class TSNEConfig:
    """Parameters of the exact t-SNE optimizer.

    Defaults follow the reference t-SNE recipe: perplexity capped at 30, 1000
    iterations, learning rate 200, momentum 0.5 switching to 0.8 after 250
    iterations and re-centering every 10th iteration.
    """

    max_perplexity: float = 30.0
    n_iter: int = 1000
    learning_rate: float = 200.0
    initial_momentum: float = 0.5
    final_momentum: float = 0.8
    momentum_switch_iter: int = 250
    recenter_every: int = 10
    init_scale: float = 1e-4
    entropy_tol: float = 1e-5
    max_search_steps: int = 50
    min_gain: float = 0.01
    gain_increase: float = 0.2
    gain_decay: float = 0.8
    affinity_floor: float = 1e-100
    sum_floor: float = 1e-10
    log_every: int = 100
    slow_row_count: int = 1500
    """Record count above which a run is reported as slow."""

    def __post_init__(self) -> None:
        if self.n_iter < 0:
            raise ValueError(f"n_iter must be non-negative, got {self.n_iter}")
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        if self.recenter_every < 1:
            raise ValueError(f"recenter_every must be positive, got {self.recenter_every}")


DEFAULT_PREPROCESS_CFG = PreprocessConfig()
DEFAULT_PCA_CFG = PCAConfig()
DEFAULT_TSNE_CFG = TSNEConfig()


__all__ = [
    "DEFAULT_PCA_CFG",
    "DEFAULT_PREPROCESS_CFG",
    "DEFAULT_TSNE_CFG",
    "PCAConfig",
    "PreprocessConfig",
    "TSNEConfig",
]
