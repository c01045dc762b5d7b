from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Literal, Mapping, Optional, Tuple

from firecore.errors import FilterDomainError
from firecore.lookups import DEFAULT_TABLES, SIZE_CLASSES, YEAR_RANGE, LookupTables

ALL = "all"
CAUSE_HUMAN = "human-aggregate"
CAUSE_NATURAL = "natural-aggregate"
CAUSE_MODE_ALIASES = {"human": CAUSE_HUMAN, "natural": CAUSE_NATURAL}

CommandKind = Literal["location", "region", "year_range", "cause", "size_class", "reset"]
CONTINUOUS_COMMANDS: FrozenSet[str] = frozenset({"year_range"})


@dataclass(frozen=True)
class FilterDomain:
    """Legal values for each filter dimension."""

    locations: FrozenSet[str] = frozenset()
    regions: Tuple[str, ...] = DEFAULT_TABLES.regions
    causes: FrozenSet[str] = frozenset()
    size_classes: Tuple[str, ...] = SIZE_CLASSES
    year_range: Tuple[int, int] = YEAR_RANGE

    @classmethod
    def from_records(cls, locations, causes, tables: LookupTables = DEFAULT_TABLES) -> "FilterDomain":
        return cls(
            locations=frozenset(locations) | frozenset(tables.region_by_location),
            regions=tables.regions,
            causes=frozenset(causes) | tables.human_causes | {tables.natural_cause},
            year_range=tables.year_range,
        )


@dataclass(frozen=True)
class FilterSnapshot:
    location: str
    region: str
    year_min: int
    year_max: int
    cause: str
    size_class: str


@dataclass(frozen=True)
class FilterCommand:
    kind: CommandKind
    value: Any = None

    @property
    def continuous(self) -> bool:
        return self.kind in CONTINUOUS_COMMANDS


@dataclass
class FilterState:
    domain: FilterDomain = field(default_factory=FilterDomain)
    location: str = ALL
    region: str = ALL
    year_min: int = field(init=False, default=YEAR_RANGE[0])
    year_max: int = field(init=False, default=YEAR_RANGE[1])
    cause: str = ALL
    size_class: str = ALL

    def __post_init__(self) -> None:
        self.year_min, self.year_max = self.domain.year_range

    def set_location(self, code: str) -> None:
        code = _token(code, "location")
        if code != ALL:
            code = code.upper()
            if code not in self.domain.locations:
                raise FilterDomainError("Unknown location code", details={"location": code})
            self.region = ALL
        self.location = code

    def set_region(self, region: str) -> None:
        region = _token(region, "region")
        if region != ALL:
            if region not in self.domain.regions:
                raise FilterDomainError("Unknown region", details={"region": region, "allowed": list(self.domain.regions)})
            self.location = ALL
        self.region = region

    def set_year_range(self, year_min: int, year_max: int) -> None:
        first, last = self.domain.year_range
        try:
            lo = min(max(int(year_min), first), last)
            hi = min(max(int(year_max), first), last)
        except (TypeError, ValueError) as exc:
            raise FilterDomainError("Year bounds must be integers", details={"year_min": year_min, "year_max": year_max}) from exc
        if lo > hi:
            lo, hi = hi, lo
        self.year_min, self.year_max = lo, hi

    def set_cause(self, value: str) -> None:
        value = _token(value, "cause")
        # Short forms are accepted but the state always holds the aggregate token.
        value = CAUSE_MODE_ALIASES.get(value, value)
        if value not in (ALL, CAUSE_HUMAN, CAUSE_NATURAL) and value not in self.domain.causes:
            raise FilterDomainError("Unknown cause", details={"cause": value})
        self.cause = value

    def set_size_class(self, value: str) -> None:
        value = _token(value, "size_class")
        if value != ALL:
            value = value.upper()
            if value not in self.domain.size_classes:
                raise FilterDomainError("Unknown size class", details={"size_class": value})
        self.size_class = value

    def reset(self) -> None:
        self.location = ALL
        self.region = ALL
        self.year_min, self.year_max = self.domain.year_range
        self.cause = ALL
        self.size_class = ALL

    def snapshot(self) -> FilterSnapshot:
        return FilterSnapshot(
            location=self.location,
            region=self.region,
            year_min=self.year_min,
            year_max=self.year_max,
            cause=self.cause,
            size_class=self.size_class,
        )


def _token(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise FilterDomainError(f"Filter value for {name} must be a non-empty string", details={name: value})
    value = value.strip()
    return ALL if value.lower() == ALL else value


def apply_command(state: FilterState, command: FilterCommand) -> None:
    kind, value = command.kind, command.value
    if kind == "location":
        state.set_location(value)
    elif kind == "region":
        state.set_region(value)
    elif kind == "year_range":
        if not isinstance(value, (tuple, list)) or len(value) != 2:
            raise FilterDomainError("year_range expects a (min, max) pair", details={"value": value})
        state.set_year_range(value[0], value[1])
    elif kind == "cause":
        state.set_cause(value)
    elif kind == "size_class":
        state.set_size_class(value)
    elif kind == "reset":
        state.reset()
    else:
        raise FilterDomainError("Unknown filter command", details={"kind": kind})


def normalize_selection(raw: Mapping[str, Any], domain: FilterDomain) -> FilterState:
    """Build a FilterState from a request-style dict.

    Location wins over region when both are given, matching the order the
    commands are applied in.
    """
    state = FilterState(domain=domain)
    first, last = domain.year_range
    year_min: Optional[Any] = raw.get("year_min")
    year_max: Optional[Any] = raw.get("year_max")
    state.set_year_range(first if year_min is None else year_min, last if year_max is None else year_max)
    state.set_region(raw.get("region") or ALL)
    location = raw.get("location") or ALL
    if location != ALL:
        state.set_location(location)
    state.set_cause(raw.get("cause") or ALL)
    state.set_size_class(raw.get("size_class") or ALL)
    return state
