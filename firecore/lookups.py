from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

import pandas as pd

from firecore.errors import LookupTableError


SIZE_CLASSES: Tuple[str, ...] = ("A", "B", "C", "D", "E", "F", "G")
MONTHS: Tuple[str, ...] = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
WEATHER_VARIABLES: Tuple[str, ...] = ("temperature", "wind", "humidity", "precipitation")
TIME_WINDOWS: Tuple[str, ...] = ("pre_30", "pre_15", "pre_7", "cont")
WINDOW_LABELS: Dict[str, str] = {
    "pre_30": "30 days before",
    "pre_15": "15 days before",
    "pre_7": "7 days before",
    "cont": "At containment",
}

MISSING_SENTINEL = -1.0
YEAR_RANGE: Tuple[int, int] = (1992, 2015)
TOP_CAUSES_N = 5
HISTOGRAM_BINS = 30

UNKNOWN_CAUSE = "Unknown"
OTHER_REGION = "Other"
UNKNOWN_SEASON = "Unknown"
NATURAL_CAUSE = "Lightning"

REGIONS: Tuple[str, ...] = ("West", "Midwest", "South", "Northeast")

REGION_BY_LOCATION: Dict[str, str] = {
    **{code: "West" for code in ("AK", "AZ", "CA", "CO", "HI", "ID", "MT", "NM", "NV", "OR", "UT", "WA", "WY")},
    **{code: "Midwest" for code in ("IA", "IL", "IN", "KS", "MI", "MN", "MO", "ND", "NE", "OH", "SD", "WI")},
    **{
        code: "South"
        for code in ("AL", "AR", "DC", "DE", "FL", "GA", "KY", "LA", "MD", "MS", "NC", "OK", "SC", "TN", "TX", "VA", "WV")
    },
    **{code: "Northeast" for code in ("CT", "MA", "ME", "NH", "NJ", "NY", "PA", "RI", "VT")},
}

SEASON_BY_MONTH: Dict[str, str] = {
    "Dec": "Winter",
    "Jan": "Winter",
    "Feb": "Winter",
    "Mar": "Spring",
    "Apr": "Spring",
    "May": "Spring",
    "Jun": "Summer",
    "Jul": "Summer",
    "Aug": "Summer",
    "Sep": "Fall",
    "Oct": "Fall",
    "Nov": "Fall",
}

HUMAN_CAUSES: FrozenSet[str] = frozenset(
    {
        "Arson",
        "Campfire",
        "Children",
        "Debris Burning",
        "Equipment Use",
        "Fireworks",
        "Powerline",
        "Railroad",
        "Smoking",
        "Structure",
    }
)


@dataclass(frozen=True)
class LookupTables:
    """Partitions consumed by the derivation step."""

    region_by_location: Mapping[str, str] = field(default_factory=lambda: dict(REGION_BY_LOCATION))
    season_by_month: Mapping[str, str] = field(default_factory=lambda: dict(SEASON_BY_MONTH))
    human_causes: FrozenSet[str] = HUMAN_CAUSES
    natural_cause: str = NATURAL_CAUSE
    regions: Tuple[str, ...] = REGIONS
    year_range: Tuple[int, int] = YEAR_RANGE


DEFAULT_TABLES = LookupTables()


def validate_tables(tables: LookupTables) -> LookupTables:
    unknown_regions = sorted({r for r in tables.region_by_location.values() if r not in tables.regions})
    if unknown_regions:
        raise LookupTableError(
            "Region table maps codes to undeclared regions",
            details={"regions": unknown_regions},
        )
    bad_codes = sorted(c for c in tables.region_by_location if len(c) != 2 or not c.isalpha() or not c.isupper())
    if bad_codes:
        raise LookupTableError("Location codes must be two upper-case letters", details={"codes": bad_codes})

    missing_months = [m for m in MONTHS if m not in tables.season_by_month]
    extra_months = sorted(m for m in tables.season_by_month if m not in MONTHS)
    if missing_months or extra_months:
        raise LookupTableError(
            "Season table must partition exactly the 12 months",
            details={"missing": missing_months, "extra": extra_months},
        )
    if len(set(tables.season_by_month.values())) != 4:
        raise LookupTableError("Season table must use exactly 4 seasons")

    if tables.natural_cause in tables.human_causes:
        raise LookupTableError("Natural cause cannot also be a human cause", details={"cause": tables.natural_cause})

    first, last = tables.year_range
    if first > last:
        raise LookupTableError("Year range is inverted", details={"year_range": [first, last]})
    return tables


def load_region_mapping(path: Path) -> Dict[str, str]:
    """Read a `location_code,region` CSV into a lookup dict."""
    df = pd.read_csv(path, dtype="string")
    df = df.rename(columns={c: str(c).strip().lower() for c in df.columns})
    if not {"location_code", "region"}.issubset(df.columns):
        raise LookupTableError(
            "Region mapping needs location_code and region columns",
            details={"path": str(path), "columns": list(df.columns)},
        )
    df = df.dropna(subset=["location_code", "region"])
    df["location_code"] = df["location_code"].str.strip().str.upper()
    df["region"] = df["region"].str.strip()
    dupes = df[df["location_code"].duplicated()]["location_code"].tolist()
    if dupes:
        raise LookupTableError("Location codes mapped more than once", details={"codes": sorted(set(dupes))})
    return dict(zip(df["location_code"], df["region"]))


def load_lookup_tables(region_mapping_path: Optional[Path] = None) -> LookupTables:
    if region_mapping_path is None:
        return validate_tables(DEFAULT_TABLES)
    mapping = load_region_mapping(Path(region_mapping_path))
    return validate_tables(LookupTables(region_by_location=mapping))
