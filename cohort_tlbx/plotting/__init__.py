"""Plotting utilities for the linked cohort views."""

from .distribution_plots import plot_distribution_grid, plot_feature_distribution
from .projection_plots import plot_loadings_bar, plot_projection, plot_projection_plotly, projection_groups
from .subgroup_plots import plot_comparison_scatter, plot_subgroup_comparison


__all__ = [
    "plot_comparison_scatter",
    "plot_distribution_grid",
    "plot_feature_distribution",
    "plot_loadings_bar",
    "plot_projection",
    "plot_projection_plotly",
    "plot_subgroup_comparison",
    "projection_groups",
]
