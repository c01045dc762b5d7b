"""Exception hierarchy for the wildfire engine.

Data-quality exclusions and empty results are not errors and never raise.
These types cover the two fatal conditions: a record source that is not a
sequence of rows, and a filter value outside its declared domain.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class FireCoreError(Exception):
    code = "FIRECORE_ERROR"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class RecordSourceError(FireCoreError, TypeError):
    code = "RECORD_SOURCE_INVALID"


class FilterDomainError(FireCoreError, ValueError):
    code = "FILTER_DOMAIN_INVALID"


class LookupTableError(FireCoreError, ValueError):
    code = "LOOKUP_TABLE_INVALID"
