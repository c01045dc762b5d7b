from __future__ import annotations

from typing import Any, Dict, Optional

import pandas as pd

STATUS_OK = "ok"
STATUS_NO_DATA = "no_data"
STATUS_INSUFFICIENT = "insufficient_data"


def metric_value(value: Any, ndigits: Optional[int] = None) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    out = float(value)
    return round(out, ndigits) if ndigits is not None else out


def ok(view: str, **payload: Any) -> Dict[str, Any]:
    return {"view": view, "status": STATUS_OK, **payload}


def no_data(view: str, reason: str, **payload: Any) -> Dict[str, Any]:
    return {"view": view, "status": STATUS_NO_DATA, "reason": reason, **payload}


def is_empty_result(payload: Dict[str, Any]) -> bool:
    return payload.get("status") in (STATUS_NO_DATA, STATUS_INSUFFICIENT)
