from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd

from firecore.lookups import HISTOGRAM_BINS
from firecore.payloads import metric_value, no_data, ok


def compute_size_histogram(subset: pd.DataFrame, bins: int = HISTOGRAM_BINS) -> Dict[str, Any]:
    """Histogram of burned acreage in log10 space, plus mean and median acreage.

    Only positive acreage takes part. The bin edges span the observed
    minimum to maximum; a single distinct value gets one unit-wide span
    centred on it.
    """
    bins = max(1, int(bins))
    acres = subset["size_acres"]
    acres = acres[acres.notna() & (acres > 0)].to_numpy(dtype=float)
    if acres.size == 0:
        return no_data("size_histogram", "no incidents with positive acreage", bins=[], count=0, mean=None, median=None)

    logs = np.log10(acres)
    lo, hi = float(logs.min()), float(logs.max())
    if lo == hi:
        lo, hi = lo - 0.5, hi + 0.5
    counts, edges = np.histogram(logs, bins=bins, range=(lo, hi))
    rows = [
        {
            "log_lower": float(edges[i]),
            "log_upper": float(edges[i + 1]),
            "lower": float(10 ** edges[i]),
            "upper": float(10 ** edges[i + 1]),
            "count": int(counts[i]),
        }
        for i in range(len(counts))
    ]
    return ok(
        "size_histogram",
        bins=rows,
        count=int(acres.size),
        mean=metric_value(acres.mean()),
        median=metric_value(np.median(acres)),
        min=metric_value(acres.min()),
        max=metric_value(acres.max()),
    )
