import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from firecore.charts import build_chart
from firecore.data import load_record_set
from firecore.engine import DashboardEngine
from firecore.filters import ALL, CAUSE_HUMAN, CAUSE_NATURAL, FilterCommand
from firecore.settings import settings

alt.data_transformers.disable_max_rows()

VIEW_TITLES = {
    "temperature_by_class": "Temperature before discovery, by size class",
    "wind_by_class": "Wind before discovery, by size class",
    "humidity_precipitation": "Humidity and precipitation",
    "year_month_matrix": "Incidents by year and month",
    "cause_trends": "Top causes over time",
    "cause_distribution": "Cause distribution",
    "size_histogram": "Burned area (log scale)",
    "geo_summary": "Incidents by state",
}
CAUSE_MODE_LABELS = {ALL: "All causes", CAUSE_HUMAN: "Human-caused", CAUSE_NATURAL: "Natural (lightning)"}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(filters: dict) -> str:
    geo = (
        f"State: {filters['location']}"
        if filters["location"] != ALL
        else (f"Region: {filters['region']}" if filters["region"] != ALL else "Geography: All")
    )
    chips = [
        geo,
        f"Years: {filters['year_min']}–{filters['year_max']}",
        f"Cause: {CAUSE_MODE_LABELS.get(filters['cause'], filters['cause'])}",
        f"Size class: {'All' if filters['size_class'] == ALL else filters['size_class']}",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_view(name: str, payload: dict, height: Optional[int] = None):
    with card(VIEW_TITLES[name]):
        chart = build_chart(name, payload)
        if chart is None:
            st.info(f"No data for this view ({payload.get('reason', 'empty selection')}).")
            return
        if height is not None:
            chart = chart.properties(height=height)
        st.altair_chart(chart, use_container_width=True)


# ---------- Engine (one per session) ----------
def get_engine() -> Optional[DashboardEngine]:
    if "engine" in st.session_state:
        return st.session_state["engine"]
    region_path = Path(settings.region_mapping_path) if settings.region_mapping_path else None
    try:
        records = load_record_set(Path(settings.data_path), region_path)
    except FileNotFoundError:
        return None
    engine = DashboardEngine(records, histogram_bins=settings.histogram_bins, debounce_seconds=settings.debounce_seconds)
    st.session_state["engine"] = engine
    sync_widgets(engine)
    return engine


def sync_widgets(engine: DashboardEngine):
    f = engine.filters
    st.session_state["f_location"] = f.location
    st.session_state["f_region"] = f.region
    st.session_state["f_years"] = (f.year_min, f.year_max)
    st.session_state["f_cause"] = f.cause
    st.session_state["f_size_class"] = f.size_class


def on_filter_change(kind: str, widget_key: str):
    engine: DashboardEngine = st.session_state["engine"]
    engine.dispatch(FilterCommand(kind, st.session_state[widget_key]))
    sync_widgets(engine)


def on_reset():
    engine: DashboardEngine = st.session_state["engine"]
    engine.reset()
    sync_widgets(engine)


# ---------- UI setup ----------
st.set_page_config(page_title="Wildfire Incident Explorer", layout="wide")
inject_base_styles()
st.title("Wildfire Incident Explorer")
st.caption("Every chart follows the same filter selection.")

engine = get_engine()
if engine is None:
    st.error(f"No incident data found at {settings.data_path}. Set FIRECORE_DATA_PATH to the wildfire CSV.")
    st.stop()
if len(engine.records) == 0:
    st.error("The incident file has no valid rows.")
    st.stop()

domain = engine.domain
first_year, last_year = domain.year_range
with st.sidebar:
    st.markdown("### Filters")
    st.selectbox(
        "Region",
        options=[ALL] + list(domain.regions),
        key="f_region",
        format_func=lambda v: "All regions" if v == ALL else v,
        on_change=on_filter_change,
        args=("region", "f_region"),
    )
    st.selectbox(
        "State",
        options=[ALL] + engine.records.locations,
        key="f_location",
        format_func=lambda v: "All states" if v == ALL else v,
        on_change=on_filter_change,
        args=("location", "f_location"),
    )
    st.slider(
        "Discovery year",
        min_value=first_year,
        max_value=last_year,
        key="f_years",
        on_change=on_filter_change,
        args=("year_range", "f_years"),
    )
    st.selectbox(
        "Cause",
        options=[ALL, CAUSE_HUMAN, CAUSE_NATURAL] + engine.records.causes,
        key="f_cause",
        format_func=lambda v: CAUSE_MODE_LABELS.get(v, v),
        on_change=on_filter_change,
        args=("cause", "f_cause"),
    )
    st.selectbox(
        "Size class",
        options=[ALL] + list(domain.size_classes),
        key="f_size_class",
        format_func=lambda v: "All classes" if v == ALL else v,
        on_change=on_filter_change,
        args=("size_class", "f_size_class"),
    )
    st.button("Reset filters", on_click=on_reset)

result = engine.last_result or engine.recompute()
views = result["views"]
insights = result["insights"]

st.markdown(f"<div class='chip-row'>{format_filter_summary(result['filters'])}</div>", unsafe_allow_html=True)

cols = st.columns(4)
cols[0].metric("Incidents", f"{result['active_count']:,}", help=f"Out of {result['total_count']:,} valid records.")
cols[1].metric("Human-caused", f"{insights['human_share']:.1%}" if insights["human_share"] is not None else "N/A")
cols[2].metric("Busiest month", insights["top_month"] or "N/A")
cols[3].metric("Busiest state", insights["top_location"] or "N/A")

left, right = st.columns(2)
with left:
    render_view("cause_trends", views["cause_trends"])
    render_view("temperature_by_class", views["temperature_by_class"])
    render_view("size_histogram", views["size_histogram"])
with right:
    render_view("cause_distribution", views["cause_distribution"])
    render_view("humidity_precipitation", views["humidity_precipitation"])
    render_view("wind_by_class", views["wind_by_class"])

render_view("year_month_matrix", views["year_month_matrix"], height=420)
render_view("geo_summary", views["geo_summary"])

geo_rows = views["geo_summary"].get("locations", [])
if geo_rows:
    with st.expander("State table", expanded=False):
        st.dataframe(pd.DataFrame(geo_rows), use_container_width=True)
