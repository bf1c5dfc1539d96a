from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def totals_bar_chart(df: pd.DataFrame, *, title: str = "Total") -> alt.Chart:
    """Horizontal bars of per-resource totals; keeps the row order of ``df``."""
    hover = alt.selection_point(fields=["Resource"], on="mouseover", empty="all")
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            y=alt.Y("Resource:N", sort=list(df["Resource"]), title=None),
            x=alt.X("Total:Q", title=title, axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.6)),
            tooltip=[alt.Tooltip("Resource:N"), alt.Tooltip("Total:Q", format=",")],
        )
        .add_params(hover)
    )


def tier_stack_chart(long_df: pd.DataFrame) -> alt.Chart:
    """Stacked bars per unit family, one segment per tier."""
    return (
        alt.Chart(long_df)
        .mark_bar()
        .encode(
            x=alt.X("family:N", title="Unit Type", axis=alt.Axis(grid=False)),
            y=alt.Y("amount:Q", title="Units", axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color("tier:N", title="Tier"),
            tooltip=["family", "tier", alt.Tooltip("amount:Q", format=",")],
        )
    )
