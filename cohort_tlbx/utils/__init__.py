from .engine_config import (
    DEFAULT_PCA_CFG,
    DEFAULT_PREPROCESS_CFG,
    DEFAULT_TSNE_CFG,
    PCAConfig,
    PreprocessConfig,
    TSNEConfig,
)
from .paths import get_data_dir, get_dataset_path
from .plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


__all__ = [
    "DEFAULT_PCA_CFG",
    "DEFAULT_PLOT_CFG",
    "DEFAULT_PREPROCESS_CFG",
    "DEFAULT_TSNE_CFG",
    "PCAConfig",
    "PlottingConfig",
    "PreprocessConfig",
    "TSNEConfig",
    "get_data_dir",
    "get_dataset_path",
]
