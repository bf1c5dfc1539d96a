from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from core.catalog import MILITARY_FAMILIES, TIERS, group_units_by_family
from core.charts import tier_stack_chart, to_vega_spec
from core.filters import ViewParams
from core.matrix import TOTAL_KEY
from core.military import GRAND_TOTAL_KEY, TOTALS_KEY, empty_military_summary


def _unit_card(unit: str, columns: List[Any], labels: Dict[int, str], matrix: Dict[str, Dict[Any, float]]) -> Dict[str, Any]:
    row = matrix.get(unit, {})
    holdings = [
        {"realm_id": realm.id, "label": labels.get(realm.id, realm.name), "amount": row.get(realm.id, 0)}
        for realm in columns
        if row.get(realm.id, 0) > 0
    ]
    return {"unit": unit, "holdings": holdings, "total": row.get(TOTAL_KEY, 0)}


def compute_military(params: ViewParams, ctx: Dict[str, Any]) -> Dict[str, Any]:
    summary = ctx.get("military_summary") or empty_military_summary()
    units: List[str] = ctx.get("military_units", [])
    columns = ctx.get("realm_columns", [])
    labels: Dict[int, str] = ctx.get("realm_labels", {})
    matrix = ctx.get("matrix", {})

    unit_rows = [
        {
            "unit": unit,
            "cells": [matrix[unit].get(realm.id, 0) for realm in columns],
            "total": matrix[unit].get(TOTAL_KEY, 0),
        }
        for unit in units
    ]

    groups = group_units_by_family(units)
    cards = {family: [_unit_card(u, columns, labels, matrix) for u in groups[family]] for family in MILITARY_FAMILIES}

    charts: Dict[str, Any] = {}
    grand_total = summary[TOTALS_KEY][GRAND_TOTAL_KEY]
    if grand_total:
        long_df = pd.DataFrame(
            [{"family": f, "tier": t, "amount": summary[f][t]} for f in MILITARY_FAMILIES for t in TIERS]
        )
        charts["tiers"] = to_vega_spec(tier_stack_chart(long_df))

    return {
        "params": asdict(params),
        "has_data": bool(ctx.get("realms")),
        "summary": summary,
        "has_units": bool(grand_total),
        "columns": [{"id": r.id, "name": r.name, "label": labels.get(r.id, r.name)} for r in columns],
        "units": unit_rows,
        "cards": cards,
        "charts": charts,
    }
