from __future__ import annotations

from dataclasses import asdict
import logging
import math
from typing import Tuple

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from analytics.charts import build_charts
from analytics.data import DataLoadError, load_session
from analytics.filters import criteria_for_hospital, normalize_criteria, normalize_settings
from analytics.geo import MAP_CENTER, place_hospitals
from analytics.records import records_to_frame
from analytics.session import DashboardSession, DashboardViews, recompute, reset
from api.schemas import FilterCriteriaModel, FilterOptionsResponse


app = FastAPI(title="Healthcare Analytics API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _session_from_model(model: FilterCriteriaModel) -> Tuple[DashboardSession, DashboardViews]:
    raw = model.model_dump()
    session = load_session(settings=normalize_settings(raw))
    return session, recompute(session, normalize_criteria(raw))


def _json(data: object) -> JSONResponse:
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
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _load_failed(exc: DataLoadError) -> JSONResponse:
    logger.error("dataset unavailable: %s", exc)
    return JSONResponse(status_code=503, content={"error": str(exc), "type": type(exc).__name__})


def _dashboard_payload(session: DashboardSession, views: DashboardViews) -> dict:
    return {
        "views": asdict(views),
        "charts": build_charts(views),
        "dropped_rows": session.dropped_rows,
    }


@app.get("/meta/options", response_model=FilterOptionsResponse)
def meta_options():
    try:
        session = load_session()
        options = session.options()
        return _json(
            {
                **asdict(options),
                "dataset_records": len(session.dataset),
                "dropped_rows": session.dropped_rows,
            }
        )
    except DataLoadError as exc:
        return _load_failed(exc)
    except Exception as exc:
        logger.exception("meta_options failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/dashboard")
def dashboard(filters: FilterCriteriaModel):
    try:
        session, views = _session_from_model(filters)
        return _json(_dashboard_payload(session, views))
    except DataLoadError as exc:
        return _load_failed(exc)
    except Exception as exc:
        logger.exception("dashboard failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/reset")
def reset_dashboard():
    try:
        session = load_session()
        return _json(_dashboard_payload(session, reset(session)))
    except DataLoadError as exc:
        return _load_failed(exc)
    except Exception as exc:
        logger.exception("reset failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/map")
def hospital_map(filters: FilterCriteriaModel):
    try:
        _, views = _session_from_model(filters)
        markers = place_hospitals(views.hospitals)
        return _json(
            {
                "center": {"longitude": MAP_CENTER[0], "latitude": MAP_CENTER[1]},
                "markers": [asdict(m) for m in markers],
                "skipped": len(views.hospitals) - len(markers),
            }
        )
    except DataLoadError as exc:
        return _load_failed(exc)
    except Exception as exc:
        logger.exception("hospital_map failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/map/select")
def select_hospital(filters: FilterCriteriaModel, hospital: str = Query(...)):
    try:
        raw = filters.model_dump()
        session = load_session(settings=normalize_settings(raw))
        views = recompute(session, criteria_for_hospital(normalize_criteria(raw), hospital))
        return _json(_dashboard_payload(session, views))
    except DataLoadError as exc:
        return _load_failed(exc)
    except Exception as exc:
        logger.exception("select_hospital failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/export")
def export_records(filters: FilterCriteriaModel):
    try:
        session, _ = _session_from_model(filters)
    except DataLoadError as exc:
        return _load_failed(exc)
    export_df = records_to_frame(session.filtered())
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=patients.csv"})
