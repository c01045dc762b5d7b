from __future__ import annotations

from typing import Any, Dict, Tuple

import pandas as pd

from firecore.lookups import MONTHS, TOP_CAUSES_N, UNKNOWN_CAUSE, YEAR_RANGE
from firecore.payloads import no_data, ok


def compute_frequency_matrix(subset: pd.DataFrame, year_range: Tuple[int, int] = YEAR_RANGE) -> Dict[str, Any]:
    """Incident counts on a fixed (year x month) grid, zeros included."""
    first, last = year_range
    years = list(range(first, last + 1))
    months = list(MONTHS)
    in_axes = subset[subset["year"].between(first, last) & subset["month"].isin(months)]
    if in_axes.empty:
        table = pd.DataFrame(0, index=years, columns=months)
    else:
        table = pd.crosstab(in_axes["year"], in_axes["month"]).reindex(index=years, columns=months, fill_value=0)
    counts = table.astype(int).values.tolist()
    return ok(
        "year_month_matrix",
        years=years,
        months=months,
        counts=counts,
        total=int(table.values.sum()),
        max_count=int(table.values.max()) if years else 0,
    )


def compute_top_cause_series(subset: pd.DataFrame, top_n: int = TOP_CAUSES_N) -> Dict[str, Any]:
    if subset.empty:
        return no_data("cause_trends", "no incidents in the active selection", years=[], total=[], series=[])

    causes = subset["cause_category"].fillna(UNKNOWN_CAUSE)
    # Overall totals in first-seen order; the stable sort keeps that order among ties.
    overall = causes.groupby(causes, sort=False).size().sort_values(ascending=False, kind="stable")
    top = overall.head(top_n).index.tolist()

    years = list(range(int(subset["year"].min()), int(subset["year"].max()) + 1))
    per_year = subset.groupby("year").size().reindex(years, fill_value=0)

    frame = pd.DataFrame({"year": subset["year"], "cause": causes})
    frame = frame[frame["cause"].isin(top)]
    by_cause = pd.crosstab(frame["year"], frame["cause"]).reindex(index=years, columns=top, fill_value=0)

    series = [
        {"cause": cause, "total": int(overall.loc[cause]), "counts": by_cause[cause].astype(int).tolist()}
        for cause in top
    ]
    return ok("cause_trends", years=years, total=per_year.astype(int).tolist(), series=series)
