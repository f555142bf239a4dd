"""Test configuration for the cohort toolbox."""

from pathlib import Path
import sys

import matplotlib
import numpy as np
import pandas as pd
import pytest


matplotlib.use("Agg")

# Ensure the local package is importable when the repo isn't installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


def make_cohort_frame(n: int = 200, seed: int = 7) -> pd.DataFrame:
    """Synthetic Framingham-shaped records with a few missing cells."""
    from cohort_tlbx.data import FCol

    rng = np.random.default_rng(seed)
    smoker = rng.integers(0, 2, n)
    age = rng.normal(50, 8, n).round()
    sys_bp = rng.normal(130, 20, n).round(1)
    frame = pd.DataFrame(
        {
            FCol.MALE: rng.integers(0, 2, n),
            FCol.AGE: age,
            FCol.EDUCATION: rng.integers(1, 5, n),
            FCol.CURRENT_SMOKER: smoker,
            FCol.CIGS_PER_DAY: np.where(smoker == 1, rng.integers(1, 40, n), 0),
            FCol.BP_MEDS: rng.integers(0, 2, n),
            FCol.PREVALENT_STROKE: (rng.random(n) < 0.05).astype(int),
            FCol.PREVALENT_HYP: (sys_bp > 140).astype(int),
            FCol.DIABETES: (rng.random(n) < 0.1).astype(int),
            FCol.TOT_CHOL: rng.normal(235, 40, n).round(),
            FCol.SYS_BP: sys_bp,
            FCol.DIA_BP: rng.normal(82, 11, n).round(1),
            FCol.BMI: rng.normal(25.8, 4, n).round(2),
            FCol.HEART_RATE: rng.normal(75, 12, n).round(),
            FCol.GLUCOSE: rng.normal(82, 20, n).round(),
            FCol.TARGET: ((age > 55) & (sys_bp > 135)).astype(int),
        },
    ).astype(float)
    frame.columns = [str(c) for c in frame.columns]
    frame.loc[[3, 17, 42], FCol.GLUCOSE] = np.nan
    frame.loc[[5, 60], FCol.EDUCATION] = np.nan
    frame.loc[[8], FCol.BMI] = np.nan
    frame.loc[[11], FCol.CIGS_PER_DAY] = np.nan
    return frame


@pytest.fixture
def cohort_frame() -> pd.DataFrame:
    return make_cohort_frame()


@pytest.fixture
def framingham_csv(tmp_path: Path, cohort_frame: pd.DataFrame) -> Path:
    """The synthetic cohort written like the public file: camelCase header, ``NA`` for missing."""
    from cohort_tlbx.data import FCol

    raw = cohort_frame.rename(columns={col.value: col.original_name for col in FCol})
    raw = raw[FCol.raw_header()]
    path = tmp_path / "framingham.csv"
    raw.to_csv(path, index=False, na_rep="NA")
    return path


@pytest.fixture
def headerless_csv(tmp_path: Path, framingham_csv: Path) -> Path:
    """Same records without the header row, as shipped with the dashboard."""
    lines = framingham_csv.read_text(encoding="utf-8").splitlines()
    path = tmp_path / "framingham_no_header.csv"
    path.write_text("\n".join(lines[1:]) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def cohort_dataset(cohort_frame: pd.DataFrame):
    from cohort_tlbx.data import FraminghamDataset

    return FraminghamDataset(cohort_frame)
