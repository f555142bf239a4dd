import logging

import pandas as pd

import streamlit as st
from cohort_tlbx.analysis import (
    ProjectionResult,
    ProjectionRunner,
    ReductionMethod,
    SelectionState,
    comparison_scatter,
    indices_in_range,
    indices_with_value,
)
from cohort_tlbx.analysis.risk import DEFAULT_PROFILE
from cohort_tlbx.data import CONTINUOUS_FEATURES, FCol, FraminghamDataset
from cohort_tlbx.plotting import (
    plot_comparison_scatter,
    plot_distribution_grid,
    plot_loadings_bar,
    plot_projection_plotly,
    plot_subgroup_comparison,
)
from cohort_tlbx.utils import DEFAULT_PLOT_CFG, DEFAULT_TSNE_CFG, TSNEConfig

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("cohort_dashboard")

st.set_page_config(
    page_title="Framingham Cohort Explorer",
    layout="wide",
)


@st.cache_resource
def load_dataset() -> FraminghamDataset:
    return FraminghamDataset.from_csv()


@st.cache_data(show_spinner="Computing projection...")
def compute_projection(
    _dataset: FraminghamDataset,
    features: tuple[str, ...],
    method: str,
    seed: int,
    n_iter: int,
) -> ProjectionResult:
    return (
        _dataset.make_projection_analyzer(features, method, tsne_config=TSNEConfig(n_iter=n_iter), random_state=seed)
        .fit()
        .result()
    )


def selected_indices(event: object) -> list[int]:
    """Original record indices of the points in a plotly selection event."""
    points = event.get("selection", {}).get("points", []) if event else []
    indices = []
    for point in points:
        custom = point.get("customdata")
        if custom is None:
            continue
        indices.append(int(custom[0] if isinstance(custom, list | tuple) else custom))
    return sorted(set(indices))


ds = load_dataset()
df = ds.df

if "selection" not in st.session_state:
    st.session_state.selection = SelectionState()
    st.session_state.runner = ProjectionRunner()
    st.session_state.last_event = []
    st.session_state.method = ReductionMethod.PCA
state: SelectionState = st.session_state.selection
runner: ProjectionRunner = st.session_state.runner

st.title("Framingham Heart Study: Cohort Explorer")
st.caption(f"{ds.n_records} participants, {len(df.columns)} variables. Brush points to select, pin to compare.")

# Sidebar: projection configuration and selection controls
with st.sidebar:
    st.header("Projection")
    method = ReductionMethod.parse(
        st.radio("Method", [m.value for m in ReductionMethod], format_func=lambda v: ReductionMethod(v).label),
    )
    if method != st.session_state.method:
        # projections of different methods are not comparable point-wise
        state.clear_selection()
        st.session_state.last_event = []
        st.session_state.method = method
    features = st.multiselect(
        "Features",
        options=FCol.feature_columns(exclude_target=True),
        default=[str(f) for f in CONTINUOUS_FEATURES],
        format_func=ds.get_pretty_name,
    )
    # PCA ignores seed and iterations; fixed values keep its cache entry stable
    seed, n_iter = 0, 0
    if method == ReductionMethod.TSNE:
        seed = int(st.number_input("t-SNE seed", min_value=0, value=42, step=1))
        n_iter = int(
            st.number_input("t-SNE iterations", min_value=50, max_value=2000, value=DEFAULT_TSNE_CFG.n_iter, step=50),
        )
    color_feature = st.selectbox(
        "Color by",
        [str(col) for col in FCol],
        index=[str(col) for col in FCol].index(FCol.TARGET),
        format_func=ds.get_pretty_name,
    )

    st.header("Selection")
    col_pin, col_clear_pin, col_clear = st.columns(3)
    if col_pin.button("Pin", disabled=not state.selected):
        state.pin()
    if col_clear_pin.button("Clear pin", disabled=not state.pinned):
        state.clear_pin()
    if col_clear.button("Clear", disabled=not state.selected):
        state.clear_selection()
    st.metric("Selected", len(state.selected))
    st.metric("Pinned", len(state.pinned))

    st.header("Brush by feature")
    brush_feature = st.selectbox("Feature", df.columns.tolist(), format_func=ds.get_pretty_name)
    metadata = ds.metadata_for(brush_feature)
    if metadata is not None and metadata.is_categorical:
        value = st.selectbox("Value", list(metadata.domain), format_func=metadata.label_for)
        if st.button("Brush value"):
            state.brush(indices_with_value(df, brush_feature, value))
    else:
        observed = df[brush_feature].dropna()
        lo, hi = float(observed.min()), float(observed.max())
        lower, upper = st.slider("Range", min_value=lo, max_value=hi, value=(lo, hi))
        if st.button("Brush range"):
            state.brush(indices_in_range(df, brush_feature, lower, upper))

if not features:
    st.info("Select at least one feature to compute a projection.")
    st.stop()

if method == ReductionMethod.TSNE and ds.n_records > DEFAULT_TSNE_CFG.slow_row_count:
    st.warning(
        f"Exact t-SNE on {ds.n_records} records may take several minutes. "
        "Lower the number of iterations in the sidebar for a quicker preview.",
    )

runner.run(lambda: compute_projection(ds, tuple(features), method.value, seed, n_iter))
result = runner.current

col_proj, col_summary = st.columns([3, 2])
with col_proj:
    if result.is_empty:
        st.info("No record has a value for the selected features.")
    else:
        event = st.plotly_chart(
            plot_projection_plotly(
                result,
                state,
                color_feature=color_feature,
                records=df,
                color_metadata=ds.metadata_for(color_feature),
                hover_metadata=df[[FCol.AGE, FCol.TARGET]],
            ),
            on_select="rerun",
            selection_mode=("box", "lasso"),
            key=f"projection_{method.value}",
        )
        brushed = selected_indices(event)
        if brushed != st.session_state.last_event:
            logger.info("Projection brush selected %d records", len(brushed))
            st.session_state.last_event = brushed
            state.brush(brushed)
            st.rerun()

    with st.expander("Projection details"):
        st.caption("Features: " + ", ".join(ds.get_pretty_names(list(result.feature_names))))
        if result.method == ReductionMethod.PCA and not result.is_empty:
            st.pyplot(plot_loadings_bar(result, figsize=(8, 4)))

with col_summary:
    comparison = ds.compare_subgroups(state)
    st.subheader("Subgroup comparison")
    st.dataframe(comparison.to_frame().style.format("{:.1f}", na_rep="n/a"))
    st.pyplot(plot_subgroup_comparison(comparison, figsize=(10, 3)))
    if comparison.selected is None:
        st.caption("No selection: brush points in the projection or use the sidebar.")

    with st.expander("Selection summary", expanded=comparison.selected is not None):
        groups = {name: summary.to_series() for name, summary in comparison.groups().items()}
        st.dataframe(pd.DataFrame(groups))

st.subheader("Feature distributions")
dists = [ds.feature_distribution(col, state.selected) for col in df.columns]
st.pyplot(plot_distribution_grid(dists, ds.get_pretty_names(df.columns.tolist()), ncols=4))

st.subheader("Feature comparison")
col_x, col_y = st.columns(2)
x_feature = col_x.selectbox("X", CONTINUOUS_FEATURES, index=0, format_func=ds.get_pretty_name)
y_feature = col_y.selectbox("Y", CONTINUOUS_FEATURES, index=1, format_func=ds.get_pretty_name)
scatter = comparison_scatter(df, x_feature, y_feature, state)
st.plotly_chart(plot_comparison_scatter(scatter, ds.get_pretty_name(x_feature), ds.get_pretty_name(y_feature)))

st.subheader("Personal risk calculator")
estimator = ds.make_risk_estimator()
profile = {}
input_cols = st.columns(4)
for i, feature in enumerate(estimator.features):
    with input_cols[i % 4]:
        profile[feature] = st.number_input(ds.get_pretty_name(feature), value=float(DEFAULT_PROFILE[feature]))
        st.caption(estimator.range_indicator(feature, profile[feature]))
estimate = estimator.estimate(profile)
band_color = {"low": "#27ae60", "moderate": "#f39c12", "high": DEFAULT_PLOT_CFG.pinned_color}[estimate.band]
st.markdown(
    f"<h3 style='color:{band_color}'>{estimate.risk_percentage:.1f}% estimated 10-year CHD risk</h3>",
    unsafe_allow_html=True,
)
st.caption(f"{estimate.n_events} of the {estimate.k} most similar participants developed CHD within ten years.")
