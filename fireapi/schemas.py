from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class FilterSelectionModel(BaseModel):
    location: str = "all"
    region: str = "all"
    year_min: Optional[int] = None
    year_max: Optional[int] = None
    cause: str = "all"
    size_class: str = "all"


class FilterOptionsResponse(BaseModel):
    locations: List[str]
    regions: List[str]
    causes: List[str]
    cause_modes: List[str]
    size_classes: List[str]
    year_range: List[int] = Field(min_length=2, max_length=2)


class HealthResponse(BaseModel):
    status: str
    records: int
    year_range: List[int]
