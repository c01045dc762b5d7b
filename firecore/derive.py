from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from firecore.lookups import DEFAULT_TABLES, OTHER_REGION, UNKNOWN_SEASON, LookupTables
from firecore.records import IncidentRow


@dataclass(frozen=True)
class EnrichedRecord:
    location_code: str
    year: int
    month: Optional[str]
    cause_category: Optional[str]
    size_class: str
    size_acres: Optional[float]
    weather: Mapping[str, Optional[float]]
    region: str
    season: str
    is_human_caused: bool

    def to_row(self) -> Dict[str, Any]:
        """Flatten into one record-set row (weather fields become columns)."""
        return {
            "location_code": self.location_code,
            "year": self.year,
            "month": self.month,
            "cause_category": self.cause_category,
            "size_class": self.size_class,
            "size_acres": self.size_acres,
            **dict(self.weather),
            "region": self.region,
            "season": self.season,
            "is_human_caused": self.is_human_caused,
        }


def derive_region(location_code: Optional[str], tables: LookupTables = DEFAULT_TABLES) -> str:
    if not location_code:
        return OTHER_REGION
    return tables.region_by_location.get(location_code, OTHER_REGION)


def derive_season(month: Optional[str], tables: LookupTables = DEFAULT_TABLES) -> str:
    if not month:
        return UNKNOWN_SEASON
    return tables.season_by_month.get(month, UNKNOWN_SEASON)


def derive_is_human_caused(cause_category: Optional[str], tables: LookupTables = DEFAULT_TABLES) -> bool:
    return cause_category is not None and cause_category in tables.human_causes


def derive(row: IncidentRow, tables: LookupTables = DEFAULT_TABLES) -> EnrichedRecord:
    return EnrichedRecord(
        location_code=row.location_code,
        year=row.year,
        month=row.month,
        cause_category=row.cause_category,
        size_class=row.size_class,
        size_acres=row.size_acres,
        weather=row.weather,
        region=derive_region(row.location_code, tables),
        season=derive_season(row.month, tables),
        is_human_caused=derive_is_human_caused(row.cause_category, tables),
    )
