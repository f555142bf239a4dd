"""Data module for dataset classes."""

from .base_columns import ColumnMetadata, FeatureKind
from .framingham_columns import CONTINUOUS_FEATURES
from .framingham_columns import FraminghamColumn as FCol
from .framingham_dataset import FraminghamDataset
from .preprocessing import column_medians, column_quantiles, column_ranges, preprocess
from .views import FeatureMatrix


__all__ = [
    "CONTINUOUS_FEATURES",
    "ColumnMetadata",
    "FCol",
    "FeatureKind",
    "FeatureMatrix",
    "FraminghamDataset",
    "column_medians",
    "column_quantiles",
    "column_ranges",
    "preprocess",
]
