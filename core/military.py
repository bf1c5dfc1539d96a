from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Optional

import pandas as pd

from core.catalog import MILITARY_FAMILIES, TIERS, classify_unit

if TYPE_CHECKING:
    from core.data import Realm

TOTALS_KEY = "totals"
GRAND_TOTAL_KEY = "grandTotal"

MilitarySummary = Dict[str, Dict[str, float]]


def empty_military_summary() -> MilitarySummary:
    summary: MilitarySummary = {family: {**{t: 0 for t in TIERS}, "total": 0} for family in MILITARY_FAMILIES}
    summary[TOTALS_KEY] = {**{t: 0 for t in TIERS}, GRAND_TOTAL_KEY: 0}
    return summary


def build_military_summary(realms: Optional[Iterable["Realm"]]) -> MilitarySummary:
    """Roll unit amounts up by family and tier.

    Only the nine canonical unit tokens count; every other resource is skipped.
    Repeated entries within a realm each contribute.
    """
    summary = empty_military_summary()
    for realm in realms or ():
        for entry in realm.resources:
            unit = classify_unit(entry.name)
            if unit is None:
                continue
            family, tier = unit
            summary[family][tier] += entry.amount
            summary[family]["total"] += entry.amount
            summary[TOTALS_KEY][tier] += entry.amount
            summary[TOTALS_KEY][GRAND_TOTAL_KEY] += entry.amount
    return summary


def summary_frame(summary: MilitarySummary) -> pd.DataFrame:
    rows = []
    for family in MILITARY_FAMILIES:
        cell = summary[family]
        rows.append({"Unit Type": family, "Tier 1": cell["T1"], "Tier 2": cell["T2"], "Tier 3": cell["T3"], "Total": cell["total"]})
    totals = summary[TOTALS_KEY]
    rows.append(
        {"Unit Type": "TOTAL", "Tier 1": totals["T1"], "Tier 2": totals["T2"], "Tier 3": totals["T3"], "Total": totals[GRAND_TOTAL_KEY]}
    )
    return pd.DataFrame(rows, columns=["Unit Type", "Tier 1", "Tier 2", "Tier 3", "Total"])
