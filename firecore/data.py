from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from firecore.derive import derive
from firecore.lookups import DEFAULT_TABLES, LookupTables, load_lookup_tables
from firecore.records import WEATHER_FIELDS, IncidentRow, validate_rows, validate_with_report

logger = logging.getLogger(__name__)

RECORD_COLUMNS: Tuple[str, ...] = (
    "location_code",
    "year",
    "month",
    "cause_category",
    "size_class",
    "size_acres",
    *WEATHER_FIELDS,
    "region",
    "season",
    "is_human_caused",
)
NUMERIC_COLUMNS: Tuple[str, ...] = ("size_acres", *WEATHER_FIELDS)


@dataclass(frozen=True)
class RecordSet:
    """The enriched incident set, built once and never edited.

    ``frame`` hands out a copy; filtering goes through ``select`` so the stored
    frame itself never leaves this object.
    """

    _frame: pd.DataFrame = field(repr=False)
    tables: LookupTables = DEFAULT_TABLES

    def __len__(self) -> int:
        return len(self._frame)

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    def select(self, mask_fn: Callable[[pd.DataFrame], pd.Series]) -> pd.DataFrame:
        """Rows for which ``mask_fn(frame)`` is true, as a new frame."""
        return self._frame.loc[mask_fn(self._frame)]

    @property
    def year_range(self) -> Tuple[int, int]:
        return self.tables.year_range

    @property
    def locations(self) -> List[str]:
        return sorted(self._frame["location_code"].dropna().unique().tolist())

    @property
    def causes(self) -> List[str]:
        return sorted(self._frame["cause_category"].dropna().unique().tolist())

    @property
    def size_classes(self) -> List[str]:
        return sorted(self._frame["size_class"].unique().tolist())


def _empty_frame() -> pd.DataFrame:
    df = pd.DataFrame({c: pd.Series(dtype=object) for c in RECORD_COLUMNS})
    df["year"] = df["year"].astype("int64")
    df["is_human_caused"] = df["is_human_caused"].astype(bool)
    for c in NUMERIC_COLUMNS:
        df[c] = df[c].astype("float64")
    return df


def _record_set_from(accepted: List[IncidentRow], tables: LookupTables) -> RecordSet:
    if not accepted:
        return RecordSet(_frame=_empty_frame(), tables=tables)
    df = pd.DataFrame.from_records([derive(r, tables).to_row() for r in accepted], columns=list(RECORD_COLUMNS))
    df["year"] = df["year"].astype("int64")
    df["is_human_caused"] = df["is_human_caused"].astype(bool)
    for c in NUMERIC_COLUMNS:
        df[c] = pd.to_numeric(df[c], errors="coerce").astype("float64")
    return RecordSet(_frame=df, tables=tables)


def build_record_set(rows: Sequence[Mapping[str, Any]], tables: LookupTables = DEFAULT_TABLES) -> RecordSet:
    return _record_set_from(validate_rows(rows, tables), tables)


# ---------------- Loaders ----------------
def load_raw_rows(path: Path) -> List[Dict[str, Any]]:
    """Read the incident CSV into row dicts (blank cells become None)."""
    df = pd.read_csv(path, low_memory=False)
    df = df.rename(columns={c: str(c).strip() for c in df.columns})
    df = df.loc[:, ~df.columns.duplicated()]
    df = df.astype(object).where(df.notna(), None)
    return df.to_dict(orient="records")


def file_signature(path: Path) -> Tuple[str, float]:
    return (str(path), path.stat().st_mtime)


@lru_cache(maxsize=4)
def _load_record_set_cached(signature: Tuple[str, float], region_mapping_path: Optional[str]) -> Tuple[RecordSet, Dict[str, Any]]:
    path = Path(signature[0])
    tables = load_lookup_tables(Path(region_mapping_path) if region_mapping_path else None)
    rows = load_raw_rows(path)
    accepted, report = validate_with_report(rows, tables)
    record_set = _record_set_from(accepted, tables)
    logger.info(
        "Loaded %s: %d rows accepted, %d rejected",
        path.name,
        report["accepted_rows"],
        report["input_rows"] - report["accepted_rows"],
    )
    return record_set, report


def load_record_set(path: Path, region_mapping_path: Optional[Path] = None) -> RecordSet:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Incident data not found: {path}")
    record_set, _ = _load_record_set_cached(file_signature(path), str(region_mapping_path) if region_mapping_path else None)
    return record_set


def load_validation_report(path: Path, region_mapping_path: Optional[Path] = None) -> Dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Incident data not found: {path}")
    _, report = _load_record_set_cached(file_signature(path), str(region_mapping_path) if region_mapping_path else None)
    return report
