"""DashboardEngine: command dispatch, recompute and debounced delivery."""

import asyncio
import time

import pytest

from firecore.data import build_record_set
from firecore.engine import DashboardEngine
from firecore.errors import FilterDomainError
from firecore.filters import ALL, CAUSE_HUMAN, FilterCommand
from firecore.payloads import STATUS_INSUFFICIENT, STATUS_NO_DATA, STATUS_OK

VIEWS = {
    "temperature_by_class",
    "wind_by_class",
    "humidity_precipitation",
    "year_month_matrix",
    "cause_trends",
    "cause_distribution",
    "size_histogram",
    "geo_summary",
}


def test_recompute_shape(engine):
    result = engine.recompute()
    assert set(result["views"]) == VIEWS
    assert result["active_count"] == result["total_count"] == 3
    assert result["filters"]["location"] == ALL
    assert result["insights"]["total"] == 3
    assert engine.last_result is result


def test_every_view_reports_its_name_and_status(engine):
    for name, payload in engine.recompute()["views"].items():
        assert payload["view"] == name
        assert payload["status"] == STATUS_OK


def test_discrete_command_recomputes_immediately(engine):
    result = engine.dispatch(FilterCommand("region", "West"))
    assert result["active_count"] == 1
    assert result["views"]["geo_summary"]["locations"][0]["location_code"] == "CA"
    assert engine.filters.region == "West"


def test_commands_accumulate(engine):
    engine.dispatch(FilterCommand("cause", CAUSE_HUMAN))
    result = engine.dispatch(FilterCommand("year_range", (2006, 2015)))
    assert result["active_count"] == 1
    assert result["filters"]["cause"] == CAUSE_HUMAN


def test_location_then_region(engine):
    engine.dispatch(FilterCommand("location", "TX"))
    result = engine.dispatch(FilterCommand("region", "Northeast"))
    assert result["filters"]["location"] == ALL
    assert result["active_count"] == 1


def test_reset(engine):
    engine.dispatch(FilterCommand("size_class", "G"))
    result = engine.reset()
    assert result["active_count"] == 3
    assert engine.filters.size_class == ALL


def test_invalid_command_leaves_state_unchanged(engine):
    engine.dispatch(FilterCommand("region", "South"))
    before = engine.filters
    with pytest.raises(FilterDomainError):
        engine.dispatch(FilterCommand("region", "Atlantis"))
    assert engine.filters == before


def test_empty_selection_gives_explicit_empty_results(engine):
    result = engine.dispatch(FilterCommand("size_class", "E"))
    assert result["active_count"] == 0
    views = result["views"]
    assert views["year_month_matrix"]["status"] == STATUS_OK
    for name in VIEWS - {"year_month_matrix"}:
        assert views[name]["status"] == STATUS_NO_DATA
    assert result["insights"]["status"] == STATUS_INSUFFICIENT


def test_compute_view(engine):
    engine.dispatch(FilterCommand("cause", "Arson"))
    payload = engine.compute_view("cause_distribution")
    assert payload["categories"] == [{"cause": "Arson", "count": 1, "share": 1.0}]


def test_compute_unknown_view(engine):
    with pytest.raises(KeyError):
        engine.compute_view("pie")


def test_domain_comes_from_records_and_tables(engine):
    assert {"CA", "TX", "NY", "WY"} <= engine.domain.locations
    assert {"Lightning", "Arson", "Smoking"} <= engine.domain.causes


class TestApplySelection:
    def test_sets_every_dimension(self, engine):
        snap = engine.apply_selection({"region": "South", "year_min": 2004, "year_max": 2006, "cause": CAUSE_HUMAN, "size_class": "g"})
        assert (snap.region, snap.year_min, snap.year_max, snap.cause, snap.size_class) == ("South", 2004, 2006, CAUSE_HUMAN, "G")
        assert engine.recompute()["active_count"] == 1

    def test_location_wins(self, engine):
        snap = engine.apply_selection({"location": "NY", "region": "West"})
        assert (snap.location, snap.region) == ("NY", ALL)

    def test_replaces_previous_selection(self, engine):
        engine.dispatch(FilterCommand("size_class", "A"))
        snap = engine.apply_selection({"cause": "Arson"})
        assert snap.size_class == ALL

    def test_invalid_selection_leaves_state_unchanged(self, engine):
        engine.apply_selection({"region": "West"})
        with pytest.raises(FilterDomainError):
            engine.apply_selection({"region": "Midwest", "size_class": "Z"})
        assert engine.filters.region == "West"


class TestDebouncedSlider:
    def test_burst_delivers_one_result_for_the_last_range(self, engine):
        results = []

        async def scenario():
            for hi in (2003, 2007, 2010):
                assert engine.dispatch(FilterCommand("year_range", (1992, hi)), on_result=results.append) is None
            assert engine.recompute_pending
            await asyncio.sleep(0.25)

        asyncio.run(scenario())
        assert len(results) == 1
        assert results[0]["filters"]["year_max"] == 2010
        assert results[0]["active_count"] == 3
        assert not engine.recompute_pending

    def test_discrete_command_supersedes_pending_recompute(self, engine):
        results = []

        async def scenario():
            engine.dispatch(FilterCommand("year_range", (2004, 2015)), on_result=results.append)
            immediate = engine.dispatch(FilterCommand("cause", CAUSE_HUMAN))
            assert not engine.recompute_pending
            await asyncio.sleep(0.25)
            return immediate

        immediate = asyncio.run(scenario())
        assert results == []
        assert immediate["active_count"] == 2
        assert immediate["filters"]["year_min"] == 2004

    def test_without_callback_slider_recomputes_at_once(self, engine):
        result = engine.dispatch(FilterCommand("year_range", (2010, 2010)))
        assert result["active_count"] == 1


class TestLatency:
    ROWS = 60_000
    STATES = ["CA", "TX", "NY", "OH", "FL", "OR", "AZ", "GA"]
    CAUSES = ["Lightning", "Arson", "Campfire", "Smoking", "Debris Burning", None, "Equipment Use"]
    BUDGET_SECONDS = 0.5

    @pytest.fixture(scope="class")
    def large_engine(self, make_row):
        rows = []
        for i in range(self.ROWS):
            # Every third record carries the -1 sentinel in one or more windows.
            temp = (-1, 18.0, 19.0, 20.0) if i % 3 == 0 else (15.0 + i % 7, 16.0, 17.0, 18.0)
            prec = (0.0, -1, 0.5, 1.0) if i % 5 == 0 else (0.0, 0.2, 0.4, 0.6)
            rows.append(
                make_row(
                    state=self.STATES[i % len(self.STATES)],
                    year=1992 + i % 24,
                    size_class="ABCDEFG"[i % 7],
                    cause=self.CAUSES[i % len(self.CAUSES)],
                    month=["Jan", "Apr", "Jul", "Oct", "Dec"][i % 5],
                    acres=float(i % 900 + 1) / 3,
                    temp=temp,
                    prec=prec,
                )
            )
        engine = DashboardEngine(build_record_set(rows))
        engine.recompute()
        return engine

    def _timed(self, fn):
        started = time.perf_counter()
        result = fn()
        return result, time.perf_counter() - started

    def test_full_recompute_within_budget(self, large_engine):
        result, elapsed = self._timed(large_engine.recompute)
        assert result["active_count"] == self.ROWS
        assert elapsed < self.BUDGET_SECONDS

    @pytest.mark.parametrize(
        "command",
        [
            FilterCommand("region", "West"),
            FilterCommand("cause", "human-aggregate"),
            FilterCommand("year_range", (2000, 2010)),
            FilterCommand("reset"),
        ],
    )
    def test_dispatch_within_budget(self, large_engine, command):
        result, elapsed = self._timed(lambda: large_engine.dispatch(command))
        assert elapsed < self.BUDGET_SECONDS
        assert 0 < result["active_count"] <= self.ROWS

    def test_sentinel_windows_excluded_at_scale(self, large_engine):
        large_engine.reset()
        temperature = large_engine.compute_view("temperature_by_class")
        assert temperature["count"] == self.ROWS - len(range(0, self.ROWS, 3))


def test_sentinel_record_counts_everywhere_but_the_weather_means(engine):
    result = engine.recompute()
    assert result["active_count"] == 3
    assert result["views"]["cause_distribution"]["total"] == 3
    assert result["views"]["geo_summary"]["locations"][1]["location_code"] == "TX"
    assert result["views"]["temperature_by_class"]["count"] == 2
    assert "G" not in [c["size_class"] for c in result["views"]["temperature_by_class"]["classes"]]
