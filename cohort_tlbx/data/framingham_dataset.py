"""Loading and cleaning of the Framingham Heart Study cohort extract."""

import logging
import re
from pathlib import Path

import pandas as pd

from cohort_tlbx.utils.paths import get_dataset_path

from .base_dataset import BaseDataset
from .framingham_columns import FraminghamColumn as Col


logger = logging.getLogger(__name__)

NA_VALUES = ["NA", ""]


class FraminghamDataset(BaseDataset):
    """Loading and cleaning for the Framingham Heart Study teaching dataset (4,240 participants).

    **Example workflow**:
    >>> from cohort_tlbx.data import FraminghamDataset, FCol
    >>> from cohort_tlbx.analysis import SelectionState
    >>> ds = FraminghamDataset.from_csv()
    >>> pca = ds.make_projection_analyzer(method="pca").fit().result()
    >>> state = SelectionState()
    >>> state.brush(pca.indices_in_box(-1, 1, -1, 1))
    >>> state.pin()
    >>> ds.compare_subgroups(state).to_frame()
    """

    Col = Col

    @classmethod
    def from_csv(
        cls,
        csv_path: str | Path | None = None,
        *,
        validate: bool = True,
    ) -> "FraminghamDataset":
        """Load the cohort from a CSV file.

        - Detect whether the first line is a header (the public file ships with one,
          the dashboard copy without)
        - Normalize column names to snake_case
        - Convert data types (``NA`` and empty cells become ``NaN``)
        - Validate categorical/ordinal domains

        Args:
            csv_path: Path to the CSV file (defaults to the bundled ``framingham.csv``)
            validate: Raise ``ValueError`` on values outside a column's domain

        Returns:
            FraminghamDataset instance with loaded data
        """
        csv_path = get_dataset_path("framingham") if csv_path is None else Path(csv_path)

        header = 0 if cls._has_header_row(csv_path) else None
        df = (
            pd.read_csv(
                csv_path,
                header=header,
                names=None if header == 0 else Col.raw_header(),
                na_values=NA_VALUES,
                keep_default_na=False,
                skipinitialspace=True,
            )
            .pipe(cls._normalize_col_names)
            .pipe(cls._convert_data_types)
        )
        logger.info("Loaded %d records with %d columns from %s", len(df), df.shape[1], csv_path)

        dataset = cls(df=df)
        if validate:
            dataset.validate_domains()
        return dataset

    @staticmethod
    def _has_header_row(csv_path: Path) -> bool:
        """True if the first line contains a non-numeric, non-missing cell."""
        with Path(csv_path).open(encoding="utf-8") as fh:
            first = fh.readline().strip()
        for cell in first.split(","):
            cell = cell.strip().strip('"')
            if cell in NA_VALUES:
                continue
            try:
                float(cell)
            except ValueError:
                return True
        return False

    @staticmethod
    def _normalize_col_names(df: pd.DataFrame) -> pd.DataFrame:
        """Rename raw headers to the cleaned enum names.

        Known headers are mapped through the column metadata; unknown ones are
        converted from camelCase to snake_case.
        """
        known = Col.by_original_name()

        def to_snake(name: str) -> str:
            name = str(name).strip()
            if name in known:
                return known[name]
            name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
            return re.sub(r"[\s/\-]+", "_", name).lower()

        return df.set_axis([to_snake(col) for col in df.columns], axis=1)

    @staticmethod
    def _convert_data_types(df: pd.DataFrame) -> pd.DataFrame:
        """Coerce every column to float; unparsable cells become ``NaN``."""
        return df.assign(**{col: pd.to_numeric(df[col], errors="coerce").astype(float) for col in df.columns})
