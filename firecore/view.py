from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from firecore.data import RecordSet
from firecore.filters import ALL, CAUSE_HUMAN, CAUSE_NATURAL, FilterState


@dataclass(frozen=True)
class ActiveSubset:
    frame: pd.DataFrame

    @property
    def count(self) -> int:
        return len(self.frame)

    @property
    def empty(self) -> bool:
        return self.frame.empty


def build_mask(df: pd.DataFrame, state: FilterState, natural_cause: str) -> pd.Series:
    mask = df["year"].between(state.year_min, state.year_max, inclusive="both")
    if state.location != ALL:
        mask &= df["location_code"] == state.location
    if state.region != ALL:
        mask &= df["region"] == state.region
    if state.cause == CAUSE_HUMAN:
        mask &= df["is_human_caused"]
    elif state.cause == CAUSE_NATURAL:
        mask &= df["cause_category"] == natural_cause
    elif state.cause != ALL:
        mask &= df["cause_category"] == state.cause
    if state.size_class != ALL:
        mask &= df["size_class"] == state.size_class
    return mask


def evaluate(record_set: RecordSet, state: FilterState) -> ActiveSubset:
    natural_cause = record_set.tables.natural_cause
    return ActiveSubset(frame=record_set.select(lambda df: build_mask(df, state, natural_cause)))
