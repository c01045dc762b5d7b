from __future__ import annotations

import logging
import math
from dataclasses import asdict
from pathlib import Path

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from fireapi.schemas import FilterOptionsResponse, FilterSelectionModel, HealthResponse
from firecore.charts import chart_spec
from firecore.data import RecordSet, load_record_set, load_validation_report
from firecore.engine import DashboardEngine
from firecore.errors import FilterDomainError
from firecore.filters import ALL, CAUSE_HUMAN, CAUSE_NATURAL
from firecore.settings import settings

app = FastAPI(title=settings.app_name, version="0.1.0")
logger = logging.getLogger(__name__)
logging.getLogger("firecore").setLevel(settings.log_level)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_record_set() -> RecordSet:
    region_path = Path(settings.region_mapping_path) if settings.region_mapping_path else None
    return load_record_set(Path(settings.data_path), region_path)


def _engine_for(selection: FilterSelectionModel) -> DashboardEngine:
    """Fresh engine over the shared (cached, immutable) record set with the selection applied."""
    engine = DashboardEngine(
        get_record_set(),
        histogram_bins=settings.histogram_bins,
        debounce_seconds=settings.debounce_seconds,
    )
    engine.apply_selection(selection.model_dump())
    return engine


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        ),
    )


def _domain_error(exc: FilterDomainError) -> JSONResponse:
    return _json({"error": exc.message, "type": type(exc).__name__, **exc.to_dict()}, status_code=422)


def _server_error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/health", response_model=HealthResponse)
def health():
    try:
        records = get_record_set()
        return _json({"status": "ok", "records": len(records), "year_range": list(records.year_range)})
    except Exception as exc:
        logger.exception("health failed")
        return _server_error(exc)


@app.get("/meta/filters", response_model=FilterOptionsResponse)
def meta_filters():
    try:
        records = get_record_set()
        return _json(
            {
                "locations": records.locations,
                "regions": list(records.tables.regions),
                "causes": records.causes,
                "cause_modes": [ALL, CAUSE_HUMAN, CAUSE_NATURAL],
                "size_classes": records.size_classes,
                "year_range": list(records.year_range),
            }
        )
    except Exception as exc:
        logger.exception("meta_filters failed")
        return _server_error(exc)


@app.get("/data-quality")
def data_quality():
    try:
        region_path = Path(settings.region_mapping_path) if settings.region_mapping_path else None
        return _json(load_validation_report(Path(settings.data_path), region_path))
    except Exception as exc:
        logger.exception("data_quality failed")
        return _server_error(exc)


@app.post("/recompute")
def recompute(selection: FilterSelectionModel):
    try:
        return _json(_engine_for(selection).recompute())
    except FilterDomainError as exc:
        return _domain_error(exc)
    except Exception as exc:
        logger.exception("recompute failed")
        return _server_error(exc)


@app.post("/views/{view}")
def view_payload(view: str, selection: FilterSelectionModel):
    try:
        engine = _engine_for(selection)
        if view not in engine.view_names:
            return JSONResponse(status_code=404, content={"error": f"Unknown view: {view}", "views": engine.view_names})
        return _json({"filters": asdict(engine.filters), **engine.compute_view(view)})
    except FilterDomainError as exc:
        return _domain_error(exc)
    except Exception as exc:
        logger.exception("view %s failed", view)
        return _server_error(exc)


@app.post("/charts/{view}")
def chart_payload(view: str, selection: FilterSelectionModel):
    try:
        engine = _engine_for(selection)
        if view not in engine.view_names:
            return JSONResponse(status_code=404, content={"error": f"Unknown view: {view}", "views": engine.view_names})
        payload = engine.compute_view(view)
        return _json({"view": view, "status": payload["status"], "spec": chart_spec(view, payload)})
    except FilterDomainError as exc:
        return _domain_error(exc)
    except Exception as exc:
        logger.exception("chart %s failed", view)
        return _server_error(exc)


@app.post("/export")
def export(selection: FilterSelectionModel):
    try:
        subset = _engine_for(selection).active_subset()
        csv_bytes = subset.frame.to_csv(index=False).encode("utf-8")
        return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=incidents.csv"})
    except FilterDomainError as exc:
        return _domain_error(exc)
    except Exception as exc:
        logger.exception("export failed")
        return _server_error(exc)
