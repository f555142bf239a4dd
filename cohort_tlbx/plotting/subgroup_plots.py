"""Subgroup comparison visualization functions."""

import matplotlib.pyplot as plt
import pandas as pd
import plotly.graph_objects as go
import seaborn as sns
from matplotlib.figure import Figure

from cohort_tlbx.analysis.subgroup import SubgroupComparison
from cohort_tlbx.utils.plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


def plot_subgroup_comparison(
    comparison: SubgroupComparison,
    *,
    cfg: PlottingConfig = DEFAULT_PLOT_CFG,
    figsize: tuple[int, int] = (12, 4),
) -> Figure:
    """One panel per comparison metric with a bar per present subgroup.

    Metrics have different units (years, mmHg, percent), so every metric gets its
    own y-axis instead of a shared grouped bar chart.
    """
    table = comparison.to_frame()
    groups = list(table.columns)
    fig, axs = plt.subplots(1, len(table.index), figsize=figsize, squeeze=False)

    for ax, (metric, row) in zip(axs[0], table.iterrows(), strict=True):
        ax.set_title(metric)
        if not groups:
            ax.text(0.5, 0.5, "No data", ha="center", va="center", transform=ax.transAxes)
            continue
        sns.barplot(
            x=groups,
            y=row.to_numpy(),
            hue=groups,
            palette=[cfg.group_colors[g] for g in groups],
            legend=False,
            ax=ax,
        )
        for container in ax.containers:
            ax.bar_label(container, fmt="%.1f", fontsize=8)
        ax.set_xlabel("")
        ax.tick_params(axis="x", rotation=30)

    fig.suptitle("Subgroup Comparison")
    fig.tight_layout()
    return fig


def plot_comparison_scatter(
    scatter: pd.DataFrame,
    x_label: str,
    y_label: str,
    *,
    cfg: PlottingConfig = DEFAULT_PLOT_CFG,
    height: int = 450,
) -> go.Figure:
    """Interactive two-feature scatter of the output of :func:`comparison_scatter`."""
    fig = go.Figure()
    for group, name in (("other", "Cohort"), ("pinned", "Pinned"), ("selected", "Selected")):
        points = scatter.loc[scatter["group"] == group]
        if points.empty:
            continue
        fig.add_trace(
            go.Scattergl(
                x=points["x"],
                y=points["y"],
                mode="markers",
                name=name,
                customdata=points.index.to_numpy(),
                hovertemplate=f"Record %{{customdata}}<br>{x_label}: %{{x}}<br>{y_label}: %{{y}}<extra></extra>",
                marker=dict(color=cfg.scatter_colors[group], size=cfg.marker_size, opacity=0.7),
            ),
        )
    fig.update_xaxes(title=x_label)
    fig.update_yaxes(title=y_label)
    fig.update_layout(template=cfg.plotly_template, height=height, legend=dict(orientation="h", y=-0.2))
    return fig
