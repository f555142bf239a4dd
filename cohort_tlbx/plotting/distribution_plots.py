"""Feature distribution visualization functions."""

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from cohort_tlbx.analysis.linked_views import DistributionResult
from cohort_tlbx.data.base_columns import FeatureKind
from cohort_tlbx.utils.plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


def _draw_distribution(ax: Axes, dist: DistributionResult, title: str, cfg: PlottingConfig) -> None:
    bars = dist.bars
    if dist.is_empty:
        ax.text(0.5, 0.5, "No data", ha="center", va="center", transform=ax.transAxes)
    elif dist.kind == FeatureKind.NUMERIC:
        widths = (bars["bin_end"] - bars["bin_start"]).to_numpy()
        ax.bar(bars["bin_start"], bars["count"], width=widths, align="edge", color=cfg.full_cohort_color, alpha=0.6)
        ax.bar(bars["bin_start"], bars["selected_count"], width=widths, align="edge", color=cfg.selected_color)
    else:
        x = np.arange(len(bars))
        ax.bar(x, bars["count"], color=cfg.full_cohort_color, alpha=0.6)
        ax.bar(x, bars["selected_count"], color=cfg.selected_color)
        ax.set_xticks(x)
        ax.set_xticklabels(bars["label"])
    ax.set_title(title, fontsize=cfg.label_size)
    ax.set_ylabel("Count")


def plot_feature_distribution(
    dist: DistributionResult,
    title: str | None = None,
    *,
    cfg: PlottingConfig = DEFAULT_PLOT_CFG,
    figsize: tuple[int, int] = (5, 3),
) -> Figure:
    """Bars of the full cohort (grey) with the selected share overlaid (blue)."""
    fig, ax = plt.subplots(figsize=figsize)
    _draw_distribution(ax, dist, title or dist.feature, cfg)
    fig.tight_layout()
    return fig


def plot_distribution_grid(
    dists: list[DistributionResult],
    titles: list[str] | None = None,
    *,
    ncols: int = 4,
    cfg: PlottingConfig = DEFAULT_PLOT_CFG,
    figsize: tuple[int, int] | None = None,
) -> Figure:
    """Small multiples of several feature distributions."""
    titles = titles or [d.feature for d in dists]
    nrows = max(1, int(np.ceil(len(dists) / ncols)))
    fig, axs = plt.subplots(nrows, ncols, figsize=figsize or (4 * ncols, 3 * nrows), squeeze=False)
    for ax in axs.flat[len(dists) :]:
        ax.set_visible(False)
    for ax, dist, title in zip(axs.flat, dists, titles, strict=False):
        _draw_distribution(ax, dist, title, cfg)
    fig.tight_layout()
    return fig
