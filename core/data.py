from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from core.catalog import collect_resource_names, order_resources, split_resources
from core.filters import ViewParams
from core.matrix import build_matrix, order_realms, realm_labels
from core.military import build_military_summary

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.environ.get("REALM_DASHBOARD_DATA_DIR") or Path(__file__).resolve().parents[1])
FILE_GLOB = "realms*.json"

SAMPLE_REALMS: List[Dict[str, Any]] = [
    {
        "entityId": 1,
        "name": "Sample Realm 1",
        "resources": [
            {"name": "Wood", "totalAmount": 1000},
            {"name": "Stone", "totalAmount": 500},
            {"name": "Knight", "totalAmount": 100},
        ],
    },
    {
        "entityId": 2,
        "name": "Sample Realm 2",
        "resources": [
            {"name": "Wood", "totalAmount": 750},
            {"name": "Copper", "totalAmount": 250},
            {"name": "Crossbowman", "totalAmount": 50},
        ],
    },
]


# ---------------- Errors ----------------
class RealmDataError(ValueError):
    """Pasted or fixture input could not be turned into realms."""

    def __init__(self, message: str, *, index: Optional[int] = None, realm_name: Optional[str] = None):
        super().__init__(message)
        self.index = index
        self.realm_name = realm_name


class ParseError(RealmDataError):
    pass


class SchemaError(RealmDataError):
    pass


# ---------------- Model ----------------
@dataclass(frozen=True)
class ResourceEntry:
    name: str
    amount: float = 0


@dataclass(frozen=True)
class Realm:
    id: int
    name: str
    resources: Tuple[ResourceEntry, ...] = ()


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_entry(raw: object, *, realm_index: int, realm_name: str, entry_index: int) -> ResourceEntry:
    where = f'Realm "{realm_name}" resource at index {entry_index}'
    if not isinstance(raw, dict):
        raise SchemaError(f"{where} is not an object", index=realm_index, realm_name=realm_name)
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise SchemaError(f"{where} is missing name", index=realm_index, realm_name=realm_name)
    amount = raw.get("totalAmount", raw.get("amount", 0))
    if amount is None:
        amount = 0
    if not _is_number(amount) or (isinstance(amount, float) and not math.isfinite(amount)) or amount < 0:
        raise SchemaError(f'{where} ("{name}") has invalid amount', index=realm_index, realm_name=realm_name)
    return ResourceEntry(name=name, amount=amount)


def _parse_realm(raw: object, index: int) -> Realm:
    if not isinstance(raw, dict):
        raise SchemaError(f"Realm at index {index} is not an object", index=index)
    realm_id = raw.get("entityId", raw.get("id"))
    if realm_id is None:
        raise SchemaError(f"Realm at index {index} is missing entityId", index=index)
    if isinstance(realm_id, bool) or not isinstance(realm_id, int):
        raise SchemaError(f"Realm at index {index} has a non-integer entityId", index=index)
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise SchemaError(f"Realm at index {index} is missing name", index=index)
    resources = raw.get("resources")
    if not isinstance(resources, list):
        raise SchemaError(f'Realm "{name}" has invalid resources (not an array)', index=index, realm_name=name)
    entries = tuple(
        _parse_entry(item, realm_index=index, realm_name=name, entry_index=i) for i, item in enumerate(resources)
    )
    return Realm(id=realm_id, name=name, resources=entries)


def realms_from_records(records: object) -> Tuple[Realm, ...]:
    if not isinstance(records, list):
        raise SchemaError("Data must be an array of realms")
    realms: List[Realm] = []
    seen_ids: Dict[int, int] = {}
    for index, raw in enumerate(records):
        realm = _parse_realm(raw, index)
        if realm.id in seen_ids:
            raise SchemaError(
                f"Realm at index {index} repeats entityId {realm.id} (first used at index {seen_ids[realm.id]})",
                index=index,
                realm_name=realm.name,
            )
        seen_ids[realm.id] = index
        realms.append(realm)
    return tuple(realms)


def parse_realms(text: str) -> Tuple[Realm, ...]:
    try:
        records = json.loads(text)
    except (TypeError, ValueError, RecursionError) as exc:
        raise ParseError(str(exc)) from exc
    return realms_from_records(records)


def realms_frame(realms: Tuple[Realm, ...]) -> pd.DataFrame:
    """Long format: one row per resource entry."""
    rows = [
        {"realm_id": r.id, "realm_name": r.name, "resource": e.name, "amount": e.amount}
        for r in realms
        for e in r.resources
    ]
    return pd.DataFrame(rows, columns=["realm_id", "realm_name", "resource", "amount"])


def sample_json() -> str:
    return json.dumps(SAMPLE_REALMS, indent=2)


# ---------------- Application state ----------------
def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class DashboardState:
    realms: Tuple[Realm, ...] = ()
    params: ViewParams = field(default_factory=ViewParams)
    last_updated: str = field(default_factory=_now_iso)
    json_error: str = ""

    @property
    def has_data(self) -> bool:
        return bool(self.realms)


def with_params(state: DashboardState, **changes: Any) -> DashboardState:
    return replace(state, params=replace(state.params, **changes))


def ingest_json(state: DashboardState, text: str) -> DashboardState:
    """Load pasted JSON. A rejected payload keeps the current realms and records the message."""
    try:
        realms = parse_realms(text)
    except RealmDataError as exc:
        logger.warning("rejected realm input: %s", exc)
        return replace(state, json_error=f"Error parsing JSON: {exc}")
    logger.info("loaded %d realms", len(realms))
    return replace(
        state,
        realms=realms,
        last_updated=_now_iso(),
        json_error="",
        params=replace(state.params, active_tab="resources"),
    )


def clear_data(state: DashboardState) -> DashboardState:
    return replace(state, realms=(), json_error="", params=replace(state.params, active_tab="data-entry"))


# ---------------- Static fixtures ----------------
def get_source_files() -> List[Path]:
    return sorted(DATA_DIR.glob(FILE_GLOB))


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((str(f), f.stat().st_mtime) for f in files)


@lru_cache(maxsize=4)
def _load_fixture_realms_cached(files_sig: Tuple[Tuple[str, float], ...]) -> Tuple[Realm, ...]:
    realms: List[Realm] = []
    for path, _ in files_sig:
        try:
            realms.extend(parse_realms(Path(path).read_text(encoding="utf-8")))
        except (OSError, RealmDataError) as exc:
            logger.warning("skipping realm fixture %s: %s", path, exc)
    return tuple(realms)


def load_dashboard_data() -> Dict[str, object]:
    files = get_source_files()
    if not files:
        return {"files": [], "realms": ()}
    sig = file_signature(files)
    return {"files": [Path(name).name for name, _ in sig], "realms": _load_fixture_realms_cached(sig)}


# ---------------- Derived context ----------------
def prepare_context(realms: Tuple[Realm, ...]) -> Dict[str, object]:
    """Everything the pages need, derived once per snapshot."""
    realms = tuple(realms or ())
    resources = order_resources(collect_resource_names(realms))
    military, economic = split_resources(resources)
    columns = order_realms(realms)
    return {
        "realms": realms,
        "realm_columns": columns,
        "realm_labels": realm_labels(columns),
        "resources": resources,
        "military_units": military,
        "economic_resources": economic,
        "matrix": build_matrix(realms, resources, columns),
        "military_summary": build_military_summary(realms),
    }
