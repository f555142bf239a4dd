"""Projection (PCA / t-SNE) visualization functions."""

import itertools

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import plotly.graph_objects as go
import seaborn as sns
from matplotlib.figure import Figure

from cohort_tlbx.analysis.projection import ProjectionResult
from cohort_tlbx.analysis.selection import SelectionSnapshot, SelectionState
from cohort_tlbx.data.base_columns import ColumnMetadata
from cohort_tlbx.data.preprocessing import numeric_block
from cohort_tlbx.utils.plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


def _snapshot(selection: SelectionState | SelectionSnapshot | None) -> SelectionSnapshot:
    if selection is None:
        return SelectionSnapshot()
    return selection.snapshot if isinstance(selection, SelectionState) else selection


def projection_groups(result: ProjectionResult, selection: SelectionState | SelectionSnapshot | None) -> pd.Series:
    """Tag every projected record as ``"pinned"``, ``"selected"`` or ``"other"`` (pinned wins)."""
    snapshot = _snapshot(selection)
    groups = pd.Series("other", index=result.coords.index, name="group", dtype=object)
    groups[groups.index.isin(list(snapshot.selected))] = "selected"
    groups[groups.index.isin(list(snapshot.pinned))] = "pinned"
    return groups


def _category_traces(
    values: pd.Series,
    metadata: ColumnMetadata,
    cfg: PlottingConfig,
) -> list[tuple[str, np.ndarray, str]]:
    """``(name, mask, colour)`` per domain value, plus ``Missing`` for records without a domain value."""
    matched = np.zeros(len(values), dtype=bool)
    traces = []
    for value, color in zip(metadata.domain, itertools.cycle(cfg.category_colors), strict=False):
        mask = (values == value).to_numpy()
        matched |= mask
        traces.append((metadata.label_for(value), mask, color))
    if not matched.all():
        traces.append(("Missing", ~matched, cfg.full_cohort_color))
    return traces


def plot_projection_plotly(
    result: ProjectionResult,
    selection: SelectionState | SelectionSnapshot | None = None,
    *,
    color_feature: str | None = None,
    records: pd.DataFrame | None = None,
    color_metadata: ColumnMetadata | None = None,
    hover_metadata: pd.DataFrame | None = None,
    cfg: PlottingConfig = DEFAULT_PLOT_CFG,
    height: int = 550,
    width: int | None = None,
) -> go.Figure:
    """Interactive projection scatter with the selection and pinned group highlighted.

    One [:class:`plotly.graph_objects.Scatter`](https://plotly.com/python/line-and-scatter/) trace per group;
    ``customdata[0]`` of every point is its original record index so box/lasso selections
    can be turned back into index sets.

    Without a categorical ``color_feature`` the traces are the subgroups (other, pinned,
    selected) in their group colours. With one, there is a trace per domain value named by
    its display label, and selected/pinned records are marked by an outline (black/orange)
    and full opacity instead.

    Args:
        result: Projection to draw.
        selection: Current selection state (optional).
        color_feature: Column of ``records`` to colour by.
        records: Cohort records, row position = original index. Required with ``color_feature``.
        color_metadata: Descriptor of ``color_feature``; numeric features keep the subgroup colouring.
        hover_metadata: Extra columns shown on hover, indexed by original index.
        cfg: Colours and marker size.
        height: Figure height in pixels.
        width: Figure width in pixels (``None`` lets the container decide).

    Raises:
        ValueError: If ``color_feature`` is given without ``records``.
    """
    if color_feature is not None and records is None:
        raise ValueError("records are required to colour the projection by a feature.")

    groups = projection_groups(result, selection)
    focus = (groups != "other").to_numpy()
    has_focus = bool(focus.any())
    x_label, y_label = result.axis_labels()
    hover_df = hover_metadata.reindex(result.coords.index) if hover_metadata is not None else None
    hover_cols = list(hover_df.columns) if hover_df is not None else []

    by_category = color_feature is not None and color_metadata is not None and color_metadata.is_categorical
    if by_category:
        values = numeric_block(records.reset_index(drop=True), [color_feature])[color_feature]
        traces = _category_traces(values.reindex(result.coords.index), color_metadata, cfg)
        opacity = np.where(focus, 1.0, cfg.unselected_opacity) if has_focus else np.full(len(groups), 0.7)
        outline = groups.map({"pinned": cfg.pinned_color, "selected": "black", "other": "rgba(0,0,0,0)"}).to_numpy()
        outline_width = np.where(focus, 1.5, 0.0)
    else:
        traces = [
            (name, (groups == group).to_numpy(), cfg.scatter_colors[group])
            for group, name in (("other", "Cohort"), ("pinned", "Pinned"), ("selected", "Selected"))
            if group == "other" or (groups == group).any()
        ]
        opacity = np.where(focus, 0.8, cfg.unselected_opacity) if has_focus else np.full(len(groups), 0.8)
        outline = np.full(len(groups), "rgba(0,0,0,0)", dtype=object)
        outline_width = np.zeros(len(groups))

    fig = go.Figure()
    for name, mask, color in traces:
        coords = result.coords.loc[mask]
        customdata = np.column_stack(
            [coords.index.to_numpy()] + ([hover_df.loc[mask, c].to_numpy() for c in hover_cols] if hover_cols else []),
        )
        hover_lines = ["Record %{customdata[0]}", f"{x_label}: %{{x:.3f}}", f"{y_label}: %{{y:.3f}}"]
        hover_lines += [f"{col}: %{{customdata[{i + 1}]}}" for i, col in enumerate(hover_cols)]
        fig.add_trace(
            go.Scatter(
                x=coords["x"],
                y=coords["y"],
                mode="markers",
                name=name,
                customdata=customdata,
                hovertemplate="<br>".join([*hover_lines, "<extra></extra>"]),
                marker=dict(
                    color=color,
                    size=cfg.marker_size,
                    opacity=opacity[mask],
                    line=dict(color=outline[mask], width=outline_width[mask]),
                ),
            ),
        )

    fig.update_xaxes(title=x_label)
    fig.update_yaxes(title=y_label)
    fig.update_layout(
        title=f"{result.method.label} projection ({len(result.coords)} records)",
        template=cfg.plotly_template,
        dragmode="select",
        height=height,
        width=width,
        legend=dict(
            orientation="h",
            y=-0.15,
            title=dict(text=f"Color: {color_metadata.pretty_name}" if by_category else ""),
        ),
    )
    return fig


def plot_projection(
    result: ProjectionResult,
    selection: SelectionState | SelectionSnapshot | None = None,
    *,
    cfg: PlottingConfig = DEFAULT_PLOT_CFG,
    figsize: tuple[int, int] = (8, 7),
) -> Figure:
    """Static projection scatter via [:func:`seaborn.scatterplot`](https://seaborn.pydata.org/generated/seaborn.scatterplot.html)."""
    frame = result.coords.assign(group=projection_groups(result, selection))
    x_label, y_label = result.axis_labels()

    fig, ax = plt.subplots(figsize=figsize)
    if not result.is_empty:
        sns.scatterplot(
            data=frame,
            x="x",
            y="y",
            hue="group",
            hue_order=[g for g in ("other", "pinned", "selected") if g in set(frame["group"])],
            palette=cfg.scatter_colors,
            s=cfg.marker_size * 4,
            linewidth=0,
            alpha=0.8,
            ax=ax,
        )
    ax.set_xlabel(x_label)
    ax.set_ylabel(y_label)
    ax.set_title(f"{result.method.label} projection")
    if result.is_empty:
        ax.text(0.5, 0.5, "No data", ha="center", va="center", transform=ax.transAxes)
    fig.tight_layout()
    return fig


def plot_loadings_bar(result: ProjectionResult, figsize: tuple[int, int] = (10, 5)) -> Figure:
    """Grouped bars of the PC1/PC2 loadings of a PCA projection."""
    loadings = result.loadings().rename_axis("feature").reset_index()
    long = loadings.melt(id_vars="feature", var_name="component", value_name="loading")

    fig, ax = plt.subplots(figsize=figsize)
    sns.barplot(data=long, x="feature", y="loading", hue="component", ax=ax)
    ax.axhline(0, color="black", linewidth=0.8)
    ax.tick_params(axis="x", rotation=45)
    ax.set_title("PCA Loadings")
    fig.tight_layout()
    return fig
