"""Analysis modules: projections, selection state and subgroup statistics."""

from .linked_views import (
    DistributionResult,
    comparison_scatter,
    feature_distribution,
    indices_in_range,
    indices_with_value,
)
from .pca_projector import PCAFit, compute_pca
from .projection import (
    ProjectionAnalyzer,
    ProjectionPoint,
    ProjectionResult,
    ProjectionRunner,
    ReductionMethod,
    project,
)
from .risk import RiskEstimate, RiskEstimator, risk_band
from .selection import SelectionSnapshot, SelectionState
from .subgroup import COMPARISON_METRICS, SubgroupComparison, SubgroupSummary, compare_subgroups, summarize
from .tsne_projector import compute_tsne


__all__ = [
    "COMPARISON_METRICS",
    "DistributionResult",
    "PCAFit",
    "ProjectionAnalyzer",
    "ProjectionPoint",
    "ProjectionResult",
    "ProjectionRunner",
    "ReductionMethod",
    "RiskEstimate",
    "RiskEstimator",
    "SelectionSnapshot",
    "SelectionState",
    "SubgroupComparison",
    "SubgroupSummary",
    "compare_subgroups",
    "comparison_scatter",
    "compute_pca",
    "compute_tsne",
    "feature_distribution",
    "indices_in_range",
    "indices_with_value",
    "project",
    "risk_band",
    "summarize",
]
