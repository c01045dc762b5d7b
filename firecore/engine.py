from __future__ import annotations

import logging
import time
from dataclasses import asdict
from typing import Any, Callable, Dict, Mapping, Optional

import pandas as pd

from firecore.data import RecordSet
from firecore.debounce import Debouncer
from firecore.filters import (
    ALL,
    FilterCommand,
    FilterDomain,
    FilterSnapshot,
    FilterState,
    apply_command,
    normalize_selection,
)
from firecore.insights import compute_insights
from firecore.lookups import HISTOGRAM_BINS
from firecore.metrics_causes import compute_cause_distribution
from firecore.metrics_geo import compute_geo_summary
from firecore.metrics_size import compute_size_histogram
from firecore.metrics_temporal import compute_frequency_matrix, compute_top_cause_series
from firecore.metrics_weather import compute_dual_window_means, compute_window_means_by_class
from firecore.view import ActiveSubset, evaluate

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Dict[str, Any]], None]


class DashboardEngine:
    """Owns the record set and the one FilterState every view is computed from.

    Filter changes arrive as FilterCommands. Discrete commands recompute at
    once; continuous ones (the year slider) can be debounced by passing
    ``on_result``, in which case only the last command in a burst triggers a
    recompute.
    """

    def __init__(
        self,
        records: RecordSet,
        *,
        histogram_bins: int = HISTOGRAM_BINS,
        debounce_seconds: float = 0.3,
    ) -> None:
        self._records = records
        self._domain = FilterDomain.from_records(records.locations, records.causes, records.tables)
        self._state = FilterState(domain=self._domain)
        self._debouncer = Debouncer(debounce_seconds)
        self.histogram_bins = histogram_bins
        self.last_result: Optional[Dict[str, Any]] = None
        self._views: Dict[str, Callable[[pd.DataFrame], Dict[str, Any]]] = {
            "temperature_by_class": lambda df: compute_window_means_by_class(df, "temperature"),
            "wind_by_class": lambda df: compute_window_means_by_class(df, "wind"),
            "humidity_precipitation": lambda df: compute_dual_window_means(df, "humidity", "precipitation"),
            "year_month_matrix": lambda df: compute_frequency_matrix(df, self._records.year_range),
            "cause_trends": compute_top_cause_series,
            "cause_distribution": compute_cause_distribution,
            "size_histogram": lambda df: compute_size_histogram(df, self.histogram_bins),
            "geo_summary": compute_geo_summary,
        }

    @property
    def records(self) -> RecordSet:
        return self._records

    @property
    def domain(self) -> FilterDomain:
        return self._domain

    @property
    def filters(self) -> FilterSnapshot:
        return self._state.snapshot()

    @property
    def view_names(self) -> list[str]:
        return list(self._views)

    @property
    def recompute_pending(self) -> bool:
        return self._debouncer.pending

    def dispatch(self, command: FilterCommand, *, on_result: Optional[ResultCallback] = None) -> Optional[Dict[str, Any]]:
        apply_command(self._state, command)
        if command.continuous and on_result is not None:
            self._debouncer.call(self._deliver, on_result)
            return None
        return self._debouncer.flush(self.recompute)

    def reset(self) -> Dict[str, Any]:
        return self.dispatch(FilterCommand("reset"))

    def apply_selection(self, raw: Mapping[str, Any]) -> FilterSnapshot:
        """Set every dimension from a request-style dict without recomputing.

        The whole selection is validated before the shared state is touched.
        """
        selected = normalize_selection(raw, self._domain).snapshot()
        self._debouncer.cancel()
        commands = [
            FilterCommand("reset"),
            FilterCommand("year_range", (selected.year_min, selected.year_max)),
            FilterCommand("region", selected.region),
            FilterCommand("cause", selected.cause),
            FilterCommand("size_class", selected.size_class),
        ]
        if selected.location != ALL:
            commands.append(FilterCommand("location", selected.location))
        for command in commands:
            apply_command(self._state, command)
        return self.filters

    def active_subset(self) -> ActiveSubset:
        return evaluate(self._records, self._state)

    def compute_view(self, name: str) -> Dict[str, Any]:
        if name not in self._views:
            raise KeyError(f"Unknown view: {name}")
        return self._views[name](self.active_subset().frame)

    def recompute(self) -> Dict[str, Any]:
        started = time.perf_counter()
        subset = self.active_subset()
        views = {name: build(subset.frame) for name, build in self._views.items()}
        elapsed_ms = (time.perf_counter() - started) * 1000
        result = {
            "filters": asdict(self.filters),
            "active_count": subset.count,
            "total_count": len(self._records),
            "views": views,
            "insights": compute_insights(subset.frame),
            "elapsed_ms": round(elapsed_ms, 2),
        }
        logger.debug("Recomputed %d views over %d records in %.1f ms", len(views), subset.count, elapsed_ms)
        self.last_result = result
        return result

    def _deliver(self, on_result: ResultCallback) -> None:
        on_result(self.recompute())
