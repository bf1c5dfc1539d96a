from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from core.charts import to_vega_spec, totals_bar_chart
from core.filters import ViewParams, filter_names, resolve_sort_key, sort_rows
from core.matrix import TOTAL_KEY, matrix_frame


def visible_resources(params: ViewParams, ctx: Dict[str, Any]) -> List[str]:
    """Rows for the active tab after search and sort."""
    pool = ctx.get("military_units", []) if params.active_tab == "military" else ctx.get("economic_resources", [])
    names = filter_names(pool, params.search_term)
    key = resolve_sort_key(params.sort_key, ctx.get("realms", ()))
    return sort_rows(names, key, params.sort_direction, ctx.get("matrix", {}))


def compute_resources(params: ViewParams, ctx: Dict[str, Any]) -> Dict[str, Any]:
    columns = ctx.get("realm_columns", [])
    labels: Dict[int, str] = ctx.get("realm_labels", {})
    matrix = ctx.get("matrix", {})

    names = visible_resources(params, ctx)
    rows = [
        {
            "resource": name,
            "cells": [matrix[name].get(realm.id, 0) for realm in columns],
            "total": matrix[name].get(TOTAL_KEY, 0),
        }
        for name in names
    ]

    charts: Dict[str, Any] = {}
    if rows:
        df = matrix_frame(matrix, names, columns)
        charts["totals"] = to_vega_spec(totals_bar_chart(df))

    return {
        "params": asdict(params),
        "has_data": bool(ctx.get("realms")),
        "columns": [{"id": r.id, "name": r.name, "label": labels.get(r.id, r.name)} for r in columns],
        "rows": rows,
        "counts": {"resources": len(rows), "realms": len(columns)},
        "footer": f"Showing {len(rows)} resources across {len(columns)} realms",
        "charts": charts,
    }
