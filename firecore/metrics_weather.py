from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from firecore.lookups import SIZE_CLASSES, TIME_WINDOWS, WEATHER_VARIABLES, WINDOW_LABELS
from firecore.payloads import metric_value, no_data, ok


def window_columns(variable: str) -> List[str]:
    if variable not in WEATHER_VARIABLES:
        raise ValueError(f"Unknown weather variable: {variable}")
    return [f"{variable}_{w}" for w in TIME_WINDOWS]


def _windows() -> List[Dict[str, str]]:
    return [{"key": w, "label": WINDOW_LABELS[w]} for w in TIME_WINDOWS]


def compute_window_means_by_class(subset: pd.DataFrame, variable: str = "temperature") -> Dict[str, Any]:
    """Mean of one weather variable at each time window, grouped by size class.

    Only records with all four windows measured take part; classes left with
    no such record are omitted.
    """
    view = f"{variable}_by_class"
    cols = window_columns(variable)
    complete = subset.dropna(subset=cols)
    if complete.empty:
        return no_data(view, "no records with all time windows measured", variable=variable, windows=_windows(), classes=[])

    grouped = complete.groupby("size_class", sort=False)
    means = grouped[cols].mean()
    counts = grouped.size()
    classes = []
    for size_class in SIZE_CLASSES:
        if size_class not in counts.index:
            continue
        row = means.loc[size_class]
        classes.append(
            {
                "size_class": size_class,
                "count": int(counts.loc[size_class]),
                "means": [metric_value(row[c]) for c in cols],
            }
        )
    return ok(view, variable=variable, windows=_windows(), classes=classes, count=int(len(complete)))


def compute_dual_window_means(subset: pd.DataFrame, first: str = "humidity", second: str = "precipitation") -> Dict[str, Any]:
    view = f"{first}_{second}"
    first_cols = window_columns(first)
    second_cols = window_columns(second)
    complete = subset.dropna(subset=first_cols + second_cols)
    if complete.empty:
        return no_data(view, "no records with both variables measured at every window", windows=_windows(), series={})

    means = complete[first_cols + second_cols].mean()
    return ok(
        view,
        windows=_windows(),
        series={
            first: [metric_value(means[c]) for c in first_cols],
            second: [metric_value(means[c]) for c in second_cols],
        },
        count=int(len(complete)),
    )
