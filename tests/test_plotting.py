"""Smoke tests for the plotting functions."""

import matplotlib.pyplot as plt
import pandas as pd
import plotly.graph_objects as go
import pytest
from matplotlib.figure import Figure

from cohort_tlbx.analysis.linked_views import comparison_scatter, feature_distribution
from cohort_tlbx.analysis.projection import project
from cohort_tlbx.analysis.selection import SelectionState
from cohort_tlbx.analysis.subgroup import compare_subgroups
from cohort_tlbx.data import FCol
from cohort_tlbx.data.preprocessing import preprocess
from cohort_tlbx.plotting import (
    plot_comparison_scatter,
    plot_distribution_grid,
    plot_feature_distribution,
    plot_loadings_bar,
    plot_projection,
    plot_projection_plotly,
    plot_subgroup_comparison,
    projection_groups,
)
from cohort_tlbx.utils.engine_config import TSNEConfig


FEATURES = [FCol.AGE, FCol.SYS_BP, FCol.BMI, FCol.GLUCOSE]


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def selection() -> SelectionState:
    state = SelectionState()
    state.brush(range(10))
    state.pin()
    state.brush(range(5, 30))
    return state


@pytest.fixture
def pca_result(cohort_frame: pd.DataFrame):
    return project(preprocess(cohort_frame, FEATURES), "pca")


class TestProjectionPlots:
    """Test the projection scatter and loadings."""

    def test_groups(self, pca_result, selection: SelectionState) -> None:
        groups = projection_groups(pca_result, selection)
        assert groups.loc[0] == "pinned"
        assert groups.loc[7] == "pinned"
        assert groups.loc[20] == "selected"
        assert groups.loc[100] == "other"

    def test_plotly_scatter(self, pca_result, selection: SelectionState) -> None:
        fig = plot_projection_plotly(pca_result, selection)

        assert isinstance(fig, go.Figure)
        assert [trace.name for trace in fig.data] == ["Cohort", "Pinned", "Selected"]
        assert fig.layout.dragmode == "select"
        n_points = sum(len(trace.x) for trace in fig.data)
        assert n_points == len(pca_result.coords)

    def test_plotly_customdata_holds_original_index(self, pca_result) -> None:
        fig = plot_projection_plotly(pca_result)
        trace = fig.data[0]
        assert [int(row[0]) for row in trace.customdata] == pca_result.original_indices

    def test_plotly_hover_metadata(self, pca_result, cohort_frame: pd.DataFrame) -> None:
        fig = plot_projection_plotly(pca_result, hover_metadata=cohort_frame[[FCol.AGE]])
        assert "customdata[1]" in fig.data[0].hovertemplate

    def test_color_by_categorical_feature(self, pca_result, cohort_frame: pd.DataFrame) -> None:
        fig = plot_projection_plotly(
            pca_result,
            color_feature=FCol.TARGET,
            records=cohort_frame,
            color_metadata=FCol.TARGET.metadata(),
        )

        assert [trace.name for trace in fig.data] == ["No", "Yes"]
        assert fig.layout.legend.title.text == "Color: 10-Year CHD"
        n_events = int((cohort_frame[FCol.TARGET] == 1).sum())
        assert len(fig.data[1].x) == n_events
        assert sum(len(trace.x) for trace in fig.data) == len(pca_result.coords)

    def test_color_by_keeps_selection_as_outline(
        self,
        pca_result,
        cohort_frame: pd.DataFrame,
        selection: SelectionState,
    ) -> None:
        fig = plot_projection_plotly(
            pca_result,
            selection,
            color_feature=FCol.MALE,
            records=cohort_frame,
            color_metadata=FCol.MALE.metadata(),
        )

        assert [trace.name for trace in fig.data] == ["Female", "Male"]
        outlined = {
            int(row[0])
            for trace in fig.data
            for row, width in zip(trace.customdata, trace.marker.line.width, strict=True)
            if width > 0
        }
        assert outlined == set(range(30))

    def test_color_by_missing_values(self, pca_result, cohort_frame: pd.DataFrame) -> None:
        fig = plot_projection_plotly(
            pca_result,
            color_feature=FCol.EDUCATION,
            records=cohort_frame,
            color_metadata=FCol.EDUCATION.metadata(),
        )
        assert [trace.name for trace in fig.data] == ["1", "2", "3", "4", "Missing"]
        assert len(fig.data[-1].x) == 2

    def test_color_by_numeric_feature_keeps_groups(self, pca_result, cohort_frame: pd.DataFrame) -> None:
        fig = plot_projection_plotly(
            pca_result,
            color_feature=FCol.BMI,
            records=cohort_frame,
            color_metadata=FCol.BMI.metadata(),
        )
        assert [trace.name for trace in fig.data] == ["Cohort"]

    def test_color_by_requires_records(self, pca_result) -> None:
        with pytest.raises(ValueError, match="records are required"):
            plot_projection_plotly(pca_result, color_feature=FCol.TARGET)

    def test_static_scatter(self, pca_result, selection: SelectionState) -> None:
        assert isinstance(plot_projection(pca_result, selection), Figure)

    def test_static_scatter_empty(self) -> None:
        empty = project(preprocess([{"age": None}], ["age"]), "pca")
        assert isinstance(plot_projection(empty), Figure)

    def test_loadings_bar(self, pca_result) -> None:
        fig = plot_loadings_bar(pca_result)

        assert isinstance(fig, Figure)
        labels = [tick.get_text() for tick in fig.axes[0].get_xticklabels()]
        assert labels == list(pca_result.feature_names)

    def test_loadings_bar_rejects_tsne(self, cohort_frame: pd.DataFrame) -> None:
        tsne = project(
            preprocess(cohort_frame, FEATURES),
            "tsne",
            tsne_config=TSNEConfig(n_iter=5),
            random_state=0,
        )
        with pytest.raises(ValueError, match="only available for PCA"):
            plot_loadings_bar(tsne)


class TestSubgroupPlots:
    """Test the comparison bar chart and scatter."""

    def test_comparison_bars(self, cohort_frame: pd.DataFrame, selection: SelectionState) -> None:
        fig = plot_subgroup_comparison(compare_subgroups(cohort_frame, selection))
        assert isinstance(fig, Figure)
        assert len(fig.axes) == 5

    def test_comparison_scatter(self, cohort_frame: pd.DataFrame, selection: SelectionState) -> None:
        points = comparison_scatter(cohort_frame, FCol.AGE, FCol.SYS_BP, selection)
        fig = plot_comparison_scatter(points, "Age", "Systolic BP")
        assert isinstance(fig, go.Figure)
        assert sum(len(trace.x) for trace in fig.data) == len(points)


class TestDistributionPlots:
    """Test the histogram views."""

    def test_single_distribution(self, cohort_frame: pd.DataFrame) -> None:
        dist = feature_distribution(cohort_frame, FCol.BMI, selected=range(20))
        assert isinstance(plot_feature_distribution(dist), Figure)

    def test_grid(self, cohort_frame: pd.DataFrame) -> None:
        dists = [
            feature_distribution(cohort_frame, FCol.AGE),
            feature_distribution(cohort_frame, FCol.MALE, metadata=FCol.MALE.metadata()),
            feature_distribution(cohort_frame.assign(glucose=float("nan")), FCol.GLUCOSE),
        ]
        fig = plot_distribution_grid(dists, ncols=2)
        assert isinstance(fig, Figure)
        assert sum(ax.get_visible() for ax in fig.axes) == 3
