from __future__ import annotations

from typing import Any, Dict

import pandas as pd

from firecore.lookups import UNKNOWN_CAUSE
from firecore.payloads import no_data, ok


def compute_cause_distribution(subset: pd.DataFrame) -> Dict[str, Any]:
    if subset.empty:
        return no_data("cause_distribution", "no incidents in the active selection", total=0, categories=[])

    causes = subset["cause_category"].fillna(UNKNOWN_CAUSE)
    counts = causes.groupby(causes, sort=False).size().sort_values(ascending=False, kind="stable")
    total = int(counts.sum())
    categories = [
        {"cause": str(cause), "count": int(n), "share": float(n) / total}
        for cause, n in counts.items()
    ]
    return ok("cause_distribution", total=total, categories=categories)
