"""Shared fixtures: raw rows shaped like the wildfire CSV, record sets and engines."""

from typing import Any, Dict, Optional, Sequence

import pytest

from firecore.data import _load_record_set_cached, build_record_set
from firecore.engine import DashboardEngine

WINDOWS = ("pre_30", "pre_15", "pre_7", "cont")


def _row(
    state: Optional[str] = "CA",
    year: Any = 2000,
    size_class: Optional[str] = "B",
    cause: Optional[str] = "Lightning",
    month: Optional[str] = "Jul",
    acres: Any = 10.0,
    temp: Sequence[Any] = (20.0, 21.0, 22.0, 19.0),
    wind: Sequence[Any] = (3.0, 3.0, 3.0, 3.0),
    hum: Sequence[Any] = (40.0, 40.0, 40.0, 40.0),
    prec: Sequence[Any] = (0.0, 0.0, 0.0, 0.0),
) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "state": state,
        "disc_pre_year": year,
        "discovery_month": month,
        "stat_cause_descr": cause,
        "fire_size_class": size_class,
        "fire_size": acres,
    }
    for prefix, values in (("Temp", temp), ("Wind", wind), ("Hum", hum), ("Prec", prec)):
        for window, value in zip(WINDOWS, values):
            row[f"{prefix}_{window}"] = value
    return row


@pytest.fixture(scope="session")
def make_row():
    return _row


@pytest.fixture
def spec_rows():
    """The three incidents used throughout: CA/West, TX/South, NY/Northeast."""
    return [
        _row(state="CA", year=2000, size_class="B", cause="Lightning", month="Jul", acres=120.0,
             temp=(30.0, 31.0, 32.0, 28.0), wind=(3.0, 4.0, 5.0, 2.0),
             hum=(20.0, 25.0, 30.0, 40.0), prec=(0.0, 1.0, 2.0, 3.0)),
        _row(state="TX", year=2005, size_class="G", cause="Arson", month="Mar", acres=5000.0,
             temp=(-1, -1, -1, -1), wind=(6.0, 6.0, 6.0, 6.0),
             hum=(10.0, 10.0, 10.0, 10.0), prec=(0.0, 0.0, 0.0, 0.0)),
        _row(state="NY", year=2010, size_class="A", cause="Campfire", month="Jul", acres=0.2,
             temp=(10.0, 12.0, 14.0, 9.0), wind=(1.0, 1.0, 1.0, 1.0),
             hum=(60.0, 62.0, 64.0, 70.0), prec=(2.0, 2.0, 2.0, 2.0)),
    ]


@pytest.fixture
def record_set(spec_rows):
    return build_record_set(spec_rows)


@pytest.fixture
def frame(record_set):
    return record_set.frame


@pytest.fixture
def engine(record_set):
    return DashboardEngine(record_set, debounce_seconds=0.05)


@pytest.fixture
def frame_of():
    """Build the enriched frame for an ad-hoc list of raw rows."""

    def _build(rows):
        return build_record_set(rows).frame

    return _build


@pytest.fixture(autouse=True)
def _clear_loader_cache():
    _load_record_set_cached.cache_clear()
    yield
    _load_record_set_cached.cache_clear()
