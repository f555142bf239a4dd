import os
from pathlib import Path
from typing import Literal


__all__ = ["DATA_DIR_ENV", "get_data_dir", "get_dataset_path"]


DATA_DIR_ENV = "COHORT_TLBX_DATA_DIR"

_DATASET_MAP: dict[str, str] = {
    "framingham": "framingham.csv",
}


def get_data_dir() -> Path:
    """Get the path to the data directory.

    The ``COHORT_TLBX_DATA_DIR`` environment variable overrides the default
    ``_data`` directory at the repository root.

    Returns:
        Path to the data directory
    """
    override = os.environ.get(DATA_DIR_ENV)
    data_dir = Path(override) if override else Path(__file__).parents[2] / "_data"
    data_dir = data_dir.resolve()
    if not data_dir.exists():
        raise FileNotFoundError(f"Data directory not found at {data_dir} (set {DATA_DIR_ENV} to override)")
    return data_dir


def get_dataset_path(filename: Literal["framingham"] | str) -> Path:  # noqa: PYI051
    """Get the full path to a dataset file in the data directory.

    Args:
        filename: Key to known dataset or custom filename

    Returns:
        Full path to the dataset file inside the data directory

    Supported: framingham.csv
    """
    data_dir = get_data_dir()
    ds_path = data_dir / _DATASET_MAP.get(filename, filename)
    if not ds_path.exists():
        raise FileNotFoundError(f"Dataset file '{filename}' not found at {ds_path}")

    return ds_path
