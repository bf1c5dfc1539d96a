from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import JsonInputModel, ViewParamsModel
from core.data import (
    DashboardState,
    clear_data,
    ingest_json,
    load_dashboard_data,
    prepare_context,
    realms_frame,
    sample_json,
)
from core.filters import ViewParams, normalize_view_params
from core.matrix import matrix_frame
from core.metrics_military import compute_military
from core.metrics_resources import compute_resources, visible_resources
from core.military import summary_frame

CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"]

app = FastAPI(title="Realm Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_state: Optional[DashboardState] = None


def current_state() -> DashboardState:
    global _state
    if _state is None:
        _state = DashboardState(realms=load_dashboard_data().get("realms", ()))
    return _state


def set_state(state: DashboardState) -> DashboardState:
    global _state
    _state = state
    return state


def _params_from_model(model: ViewParamsModel) -> ViewParams:
    return normalize_view_params(model.model_dump())


def _data_summary(state: DashboardState) -> Dict[str, Any]:
    return {
        "realms": len(state.realms),
        "last_updated": state.last_updated,
        "active_tab": state.params.active_tab,
    }


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


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
            },
        )
    )


@app.get("/health")
def health():
    try:
        return _json({"status": "ok", "realms": len(current_state().realms)})
    except Exception as exc:
        logger.exception("health failed")
        return _error(500, exc)


@app.post("/data")
def load_data(payload: JsonInputModel):
    try:
        state = set_state(ingest_json(current_state(), payload.json_input))
        if state.json_error:
            return JSONResponse(status_code=422, content={"error": state.json_error, "realms": len(state.realms)})
        return _json(_data_summary(state))
    except Exception as exc:
        logger.exception("load_data failed")
        return _error(500, exc)


@app.post("/data/sample")
def load_sample():
    try:
        state = set_state(ingest_json(current_state(), sample_json()))
        return _json(_data_summary(state))
    except Exception as exc:
        logger.exception("load_sample failed")
        return _error(500, exc)


@app.delete("/data")
def delete_data():
    try:
        state = set_state(clear_data(current_state()))
        return _json(_data_summary(state))
    except Exception as exc:
        logger.exception("delete_data failed")
        return _error(500, exc)


@app.get("/meta/realms")
def meta_realms():
    try:
        ctx = prepare_context(current_state().realms)
        labels = ctx["realm_labels"]
        realms = [{"id": r.id, "name": r.name, "label": labels[r.id]} for r in ctx["realm_columns"]]
        return _json({"realms": realms})
    except Exception as exc:
        logger.exception("meta_realms failed")
        return _error(500, exc)


@app.get("/meta/resources")
def meta_resources():
    try:
        ctx = prepare_context(current_state().realms)
        return _json(
            {
                "resources": ctx["resources"],
                "military_units": ctx["military_units"],
                "economic_resources": ctx["economic_resources"],
            }
        )
    except Exception as exc:
        logger.exception("meta_resources failed")
        return _error(500, exc)


@app.post("/resources")
def resources(params: ViewParamsModel):
    try:
        p = _params_from_model(params)
        ctx = prepare_context(current_state().realms)
        return _json(compute_resources(p, ctx))
    except Exception as exc:
        logger.exception("resources failed")
        return _error(500, exc)


@app.post("/military")
def military(params: ViewParamsModel):
    try:
        p = replace(_params_from_model(params), active_tab="military")
        ctx = prepare_context(current_state().realms)
        return _json(compute_military(p, ctx))
    except Exception as exc:
        logger.exception("military failed")
        return _error(500, exc)


@app.post("/export/{page}")
def export_page(page: str, params: ViewParamsModel):
    try:
        p = _params_from_model(params)
        ctx = prepare_context(current_state().realms)

        filename = f"{page}.csv"
        if page == "resources":
            names = visible_resources(p, ctx)
            export_df = matrix_frame(ctx["matrix"], names, ctx["realm_columns"])
        elif page == "military":
            export_df = summary_frame(ctx["military_summary"])
        elif page == "realms":
            export_df = realms_frame(ctx["realms"])
        else:
            export_df = pd.DataFrame()

        csv_bytes = export_df.to_csv(index=False).encode("utf-8")
        return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
    except Exception as exc:
        logger.exception("export failed")
        return _error(500, exc)
