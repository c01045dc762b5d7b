from __future__ import annotations

from typing import Any, Dict

import pandas as pd

from firecore.lookups import UNKNOWN_CAUSE
from firecore.payloads import metric_value, no_data, ok


def compute_geo_summary(subset: pd.DataFrame) -> Dict[str, Any]:
    """Per-location count, mean acreage and most frequent cause.

    Locations are ordered by count; equal counts, and equal cause counts
    within a location, keep the order they were first seen in.
    """
    if subset.empty:
        return no_data("geo_summary", "no incidents in the active selection", locations=[])

    df = subset[["location_code", "region", "size_acres", "cause_category"]].copy()
    df["cause_category"] = df["cause_category"].fillna(UNKNOWN_CAUSE)

    per_location = (
        df.groupby("location_code", sort=False)
        .agg(count=("region", "size"), mean_acres=("size_acres", "mean"), region=("region", "first"))
    )

    pair_counts = df.groupby(["location_code", "cause_category"], sort=False).size().reset_index(name="n")
    top_cause = (
        pair_counts.sort_values("n", ascending=False, kind="stable")
        .drop_duplicates(subset=["location_code"], keep="first")
        .set_index("location_code")
    )

    per_location = per_location.sort_values("count", ascending=False, kind="stable")
    locations = [
        {
            "location_code": str(code),
            "region": str(row["region"]),
            "count": int(row["count"]),
            "mean_acres": metric_value(row["mean_acres"]),
            "top_cause": str(top_cause.loc[code, "cause_category"]),
            "top_cause_count": int(top_cause.loc[code, "n"]),
        }
        for code, row in per_location.iterrows()
    ]
    return ok("geo_summary", locations=locations, max_count=locations[0]["count"])
