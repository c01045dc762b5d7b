from __future__ import annotations

from typing import Any, Dict, Optional

import pandas as pd

from firecore.payloads import STATUS_INSUFFICIENT, STATUS_OK


def _first_mode(values: pd.Series) -> Optional[Any]:
    # groupby(sort=False) keeps first-seen order and idxmax returns the first maximum.
    values = values.dropna()
    if values.empty:
        return None
    counts = values.groupby(values, sort=False).size()
    return counts.idxmax()


def compute_insights(subset: pd.DataFrame) -> Dict[str, Any]:
    total = int(len(subset))
    if total == 0:
        return {
            "status": STATUS_INSUFFICIENT,
            "total": 0,
            "human_share": None,
            "top_month": None,
            "top_location": None,
        }

    human = int(subset["is_human_caused"].sum())
    top_month = _first_mode(subset["month"])
    top_location = _first_mode(subset["location_code"])
    return {
        "status": STATUS_OK,
        "total": total,
        "human_count": human,
        "human_share": human / total,
        "top_month": str(top_month) if top_month is not None else None,
        "top_location": str(top_location) if top_location is not None else None,
    }
