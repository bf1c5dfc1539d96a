from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from core.catalog import text_sort_key

if TYPE_CHECKING:
    from core.data import Realm

TOTAL_KEY = "total"

# resource name -> {realm id -> amount, "total" -> sum}
MatrixRow = Dict[Union[int, str], float]
ResourceMatrix = Dict[str, MatrixRow]


def order_realms(realms: Iterable["Realm"]) -> List["Realm"]:
    """Default column order: realms alphabetically by name, id breaks ties."""
    return sorted(realms or (), key=lambda r: (text_sort_key(r.name), r.id))


def realm_labels(realms: Iterable["Realm"]) -> Dict[int, str]:
    """Column labels keyed by realm id. Realms sharing a name get their id appended."""
    realms = list(realms or ())
    counts = Counter(r.name for r in realms)
    return {r.id: (r.name if counts[r.name] == 1 else f"{r.name} (#{r.id})") for r in realms}


def _first_amount(realm: "Realm", resource_name: str) -> float:
    for entry in realm.resources:
        if entry.name == resource_name:
            return entry.amount
    return 0


def build_matrix(
    realms: Iterable["Realm"],
    resource_names: Iterable[str],
    realm_order: Optional[Sequence["Realm"]] = None,
) -> ResourceMatrix:
    """Resource x realm amounts with a per-resource total.

    Columns are keyed by realm id so duplicate realm names cannot overwrite
    each other. Within a realm the first entry with a matching name wins.
    """
    columns = list(realm_order) if realm_order is not None else order_realms(realms)
    matrix: ResourceMatrix = {}
    for name in resource_names:
        row: MatrixRow = {}
        for realm in columns:
            row[realm.id] = _first_amount(realm, name)
        row[TOTAL_KEY] = sum(row.values())
        matrix[name] = row
    return matrix


def matrix_frame(
    matrix: ResourceMatrix,
    resource_names: Sequence[str],
    realms: Sequence["Realm"],
) -> pd.DataFrame:
    labels = realm_labels(realms)
    realm_cols = [labels[r.id] for r in realms]
    records = []
    for name in resource_names:
        row = matrix.get(name, {})
        record = {"Resource": name}
        for realm in realms:
            record[labels[realm.id]] = row.get(realm.id, 0)
        record["Total"] = row.get(TOTAL_KEY, 0)
        records.append(record)
    return pd.DataFrame.from_records(records, columns=["Resource", *realm_cols, "Total"])
