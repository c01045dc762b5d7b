from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from firecore.errors import RecordSourceError
from firecore.lookups import (
    DEFAULT_TABLES,
    MISSING_SENTINEL,
    MONTHS,
    SIZE_CLASSES,
    TIME_WINDOWS,
    WEATHER_VARIABLES,
    LookupTables,
)


_WEATHER_PREFIX = {"temperature": "Temp", "wind": "Wind", "humidity": "Hum", "precipitation": "Prec"}

WEATHER_FIELDS: Tuple[str, ...] = tuple(f"{var}_{win}" for var in WEATHER_VARIABLES for win in TIME_WINDOWS)

FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "location_code": ("location_code", "state", "STATE", "State"),
    "year": ("year", "fire_year", "FIRE_YEAR", "disc_pre_year"),
    "month": ("month", "discovery_month", "disc_month"),
    "cause_category": ("cause_category", "stat_cause_descr", "STAT_CAUSE_DESCR", "cause"),
    "size_class": ("size_class", "fire_size_class", "FIRE_SIZE_CLASS"),
    "size_acres": ("size_acres", "fire_size", "FIRE_SIZE"),
    **{
        f"{var}_{win}": (f"{var}_{win}", f"{_WEATHER_PREFIX[var]}_{win}")
        for var in WEATHER_VARIABLES
        for win in TIME_WINDOWS
    },
}

REJECT_SIZE_CLASS = "invalid_size_class"
REJECT_LOCATION = "missing_location"
REJECT_YEAR = "missing_year"
REJECT_YEAR_RANGE = "year_out_of_range"

_FULL_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_MONTH_LOOKUP = {
    **{m.lower(): m for m in MONTHS},
    **{full.lower(): abbr for full, abbr in zip(_FULL_MONTH_NAMES, MONTHS)},
    **{str(i): abbr for i, abbr in enumerate(MONTHS, start=1)},
}
_NA_TOKENS = {"", "nan", "none", "null", "<na>", "na", "n/a"}


@dataclass(frozen=True)
class IncidentRow:
    """One accepted source row, with weather sentinels already replaced by None."""

    location_code: str
    year: int
    month: Optional[str]
    cause_category: Optional[str]
    size_class: str
    size_acres: Optional[float]
    weather: Mapping[str, Optional[float]]

    def weather_value(self, variable: str, window: str) -> Optional[float]:
        return self.weather.get(f"{variable}_{window}")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        return False
    return isinstance(value, str) and value.strip().lower() in _NA_TOKENS


def _to_str(value: Any) -> Optional[str]:
    if _is_blank(value):
        return None
    return str(value).strip()


def _to_int(value: Any) -> Optional[int]:
    if _is_blank(value):
        return None
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return None


def _to_float(value: Any) -> Optional[float]:
    if _is_blank(value):
        return None
    try:
        out = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if pd.isna(out) or out in (float("inf"), float("-inf")):
        return None
    return out


def normalize_month(value: Any) -> Optional[str]:
    s = _to_str(value)
    if s is None:
        return None
    key = s.lower()
    if key.endswith(".0"):
        key = key[:-2]
    return _MONTH_LOOKUP.get(key, s)


def normalize_weather(value: Any) -> Optional[float]:
    out = _to_float(value)
    if out is None or out == MISSING_SENTINEL:
        return None
    return out


def _field(row: Mapping[str, Any], name: str) -> Any:
    for alias in FIELD_ALIASES[name]:
        if alias in row:
            return row[alias]
    return None


def parse_row(row: Mapping[str, Any], tables: LookupTables = DEFAULT_TABLES) -> Tuple[Optional[IncidentRow], Optional[str]]:
    """Return (accepted_row, None) or (None, rejection_reason)."""
    size_class = _to_str(_field(row, "size_class"))
    size_class = size_class.upper() if size_class else None
    if size_class not in SIZE_CLASSES:
        return None, REJECT_SIZE_CLASS

    location = _to_str(_field(row, "location_code"))
    if not location:
        return None, REJECT_LOCATION

    year = _to_int(_field(row, "year"))
    if year is None:
        return None, REJECT_YEAR
    first, last = tables.year_range
    if not first <= year <= last:
        return None, REJECT_YEAR_RANGE

    acres = _to_float(_field(row, "size_acres"))
    if acres is not None and acres < 0:
        acres = None

    weather = {name: normalize_weather(_field(row, name)) for name in WEATHER_FIELDS}
    return (
        IncidentRow(
            location_code=location.upper(),
            year=year,
            month=normalize_month(_field(row, "month")),
            cause_category=_to_str(_field(row, "cause_category")),
            size_class=size_class,
            size_acres=acres,
            weather=MappingProxyType(weather),
        ),
        None,
    )


def _check_source(rows: Any) -> Sequence:
    if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
        raise RecordSourceError(
            "Record source must be a sequence of row mappings",
            details={"type": type(rows).__name__},
        )
    for i, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise RecordSourceError(
                "Record source contains a non-mapping row",
                details={"index": i, "type": type(row).__name__},
            )
    return rows


def _parse_all(rows: Any, tables: LookupTables) -> Iterable[Tuple[Optional[IncidentRow], Optional[str]]]:
    for row in _check_source(rows):
        yield parse_row(row, tables)


def validate_rows(rows: Sequence[Mapping[str, Any]], tables: LookupTables = DEFAULT_TABLES) -> List[IncidentRow]:
    return [accepted for accepted, _ in _parse_all(rows, tables) if accepted is not None]


def validate_with_report(
    rows: Sequence[Mapping[str, Any]], tables: LookupTables = DEFAULT_TABLES
) -> Tuple[List[IncidentRow], Dict[str, Any]]:
    """Accepted rows and the reject/missing-weather counts from a single pass."""
    rejected: Dict[str, int] = {REJECT_SIZE_CLASS: 0, REJECT_LOCATION: 0, REJECT_YEAR: 0, REJECT_YEAR_RANGE: 0}
    accepted: List[IncidentRow] = []
    weather_missing = {name: 0 for name in WEATHER_FIELDS}
    for row, reason in _parse_all(rows, tables):
        if row is None:
            rejected[reason] += 1
            continue
        accepted.append(row)
        for name, value in row.weather.items():
            if value is None:
                weather_missing[name] += 1
    report = {
        "input_rows": len(accepted) + sum(rejected.values()),
        "accepted_rows": len(accepted),
        "rejected_rows": rejected,
        "weather_missing": weather_missing,
    }
    return accepted, report


def validation_report(rows: Sequence[Mapping[str, Any]], tables: LookupTables = DEFAULT_TABLES) -> Dict[str, Any]:
    return validate_with_report(rows, tables)[1]
