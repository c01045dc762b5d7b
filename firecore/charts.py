from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import altair as alt
import pandas as pd

from firecore.lookups import MONTHS, SIZE_CLASSES
from firecore.payloads import is_empty_result

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _window_means_chart(payload: Dict[str, Any]) -> alt.Chart:
    labels = [w["label"] for w in payload["windows"]]
    rows = [
        {"size_class": c["size_class"], "window": labels[i], "mean": m, "count": c["count"]}
        for c in payload["classes"]
        for i, m in enumerate(c["means"])
    ]
    hover = alt.selection_point(fields=["size_class"], on="mouseover", empty="all")
    return (
        alt.Chart(pd.DataFrame(rows))
        .mark_line(point={"filled": True, "size": 60})
        .encode(
            x=alt.X("window:N", title="Time window", sort=labels),
            y=alt.Y("mean:Q", title=f"Mean {payload['variable']}", axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color("size_class:N", title="Size class", sort=list(SIZE_CLASSES)),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=["size_class", "window", alt.Tooltip("mean:Q", format=".2f"), alt.Tooltip("count:Q", format=",")],
        )
        .add_params(hover)
        .properties(height=260)
    )


def _dual_series_chart(payload: Dict[str, Any]) -> alt.Chart:
    labels = [w["label"] for w in payload["windows"]]
    rows = [
        {"variable": var, "window": labels[i], "mean": m}
        for var, values in payload["series"].items()
        for i, m in enumerate(values)
    ]
    base = alt.Chart(pd.DataFrame(rows)).encode(x=alt.X("window:N", title="Time window", sort=labels))
    layers = [
        base.transform_filter(alt.datum.variable == var)
        .mark_line(point=True)
        .encode(
            y=alt.Y("mean:Q", title=f"Mean {var}"),
            color=alt.Color("variable:N", title="Variable"),
            tooltip=["variable", "window", alt.Tooltip("mean:Q", format=".2f")],
        )
        for var in payload["series"]
    ]
    return alt.layer(*layers).resolve_scale(y="independent").properties(height=260)


def _matrix_chart(payload: Dict[str, Any]) -> alt.Chart:
    rows = [
        {"year": year, "month": month, "count": payload["counts"][i][j]}
        for i, year in enumerate(payload["years"])
        for j, month in enumerate(payload["months"])
    ]
    return (
        alt.Chart(pd.DataFrame(rows))
        .mark_rect()
        .encode(
            x=alt.X("month:O", title="Month", sort=list(MONTHS)),
            y=alt.Y("year:O", title="Year"),
            color=alt.Color("count:Q", title="Incidents", scale=alt.Scale(scheme="orangered")),
            tooltip=["year", "month", alt.Tooltip("count:Q", format=",")],
        )
    )


def _cause_trends_chart(payload: Dict[str, Any]) -> alt.Chart:
    rows = [{"year": y, "cause": "All causes", "count": n} for y, n in zip(payload["years"], payload["total"])]
    for s in payload["series"]:
        rows.extend({"year": y, "cause": s["cause"], "count": n} for y, n in zip(payload["years"], s["counts"]))
    hover = alt.selection_point(fields=["cause"], on="mouseover", empty="all")
    return (
        alt.Chart(pd.DataFrame(rows))
        .mark_line(point={"filled": True})
        .encode(
            x=alt.X("year:O", title="Year"),
            y=alt.Y("count:Q", title="Incidents", axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color("cause:N", title="Cause"),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=["year", "cause", alt.Tooltip("count:Q", format=",")],
        )
        .add_params(hover)
        .properties(height=260)
    )


def _distribution_chart(payload: Dict[str, Any]) -> alt.Chart:
    df = pd.DataFrame(payload["categories"])
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("count:Q", title="Incidents", axis=alt.Axis(format="~s")),
            y=alt.Y("cause:N", title="Cause", sort="-x"),
            tooltip=["cause", alt.Tooltip("count:Q", format=","), alt.Tooltip("share:Q", format=".1%")],
        )
    )


def _histogram_chart(payload: Dict[str, Any]) -> alt.Chart:
    df = pd.DataFrame(payload["bins"])
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("log_lower:Q", bin="binned", title="Acres (log10)"),
            x2="log_upper:Q",
            y=alt.Y("count:Q", title="Incidents"),
            tooltip=[alt.Tooltip("lower:Q", format=",.2f"), alt.Tooltip("upper:Q", format=",.2f"), alt.Tooltip("count:Q", format=",")],
        )
    )


def _geo_chart(payload: Dict[str, Any], top_n: int = 20) -> alt.Chart:
    df = pd.DataFrame(payload["locations"]).head(top_n)
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("count:Q", title="Incidents"),
            y=alt.Y("location_code:N", title="Location", sort="-x"),
            color=alt.Color("region:N", title="Region"),
            tooltip=[
                "location_code",
                "region",
                alt.Tooltip("count:Q", format=","),
                alt.Tooltip("mean_acres:Q", format=",.1f"),
                "top_cause",
            ],
        )
    )


CHART_BUILDERS: Dict[str, Callable[[Dict[str, Any]], alt.Chart]] = {
    "temperature_by_class": _window_means_chart,
    "wind_by_class": _window_means_chart,
    "humidity_precipitation": _dual_series_chart,
    "year_month_matrix": _matrix_chart,
    "cause_trends": _cause_trends_chart,
    "cause_distribution": _distribution_chart,
    "size_histogram": _histogram_chart,
    "geo_summary": _geo_chart,
}


def build_chart(view: str, payload: Dict[str, Any]) -> Optional[alt.Chart]:
    if view not in CHART_BUILDERS:
        raise KeyError(f"No chart for view: {view}")
    if is_empty_result(payload):
        return None
    return CHART_BUILDERS[view](payload)


def chart_spec(view: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    chart = build_chart(view, payload)
    return to_vega_spec(chart) if chart is not None else None
