from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterable, List, Literal, Optional, Union

from core.catalog import order_resources
from core.matrix import TOTAL_KEY, ResourceMatrix

if TYPE_CHECKING:
    from core.data import Realm

Tab = Literal["data-entry", "resources", "military"]
Direction = Literal["ascending", "descending"]
SortKey = Union[int, str]

TABS = ("data-entry", "resources", "military")
DIRECTIONS = ("ascending", "descending")
RESOURCE_SORT_KEY = "resource"


@dataclass(frozen=True)
class ViewParams:
    active_tab: Tab = "data-entry"
    sort_key: SortKey = RESOURCE_SORT_KEY
    sort_direction: Direction = "ascending"
    search_term: str = ""


def _as_choice(value: object, choices: Iterable[str], default: str) -> str:
    text = str(value).strip().lower() if value is not None else ""
    return text if text in choices else default


def normalize_view_params(raw: Optional[dict]) -> ViewParams:
    raw = raw or {}
    active_tab = _as_choice(raw.get("active_tab"), TABS, "data-entry")
    sort_direction = _as_choice(raw.get("sort_direction"), DIRECTIONS, "ascending")

    sort_key = raw.get("sort_key")
    if isinstance(sort_key, str):
        sort_key = sort_key.strip()
    if sort_key is None or sort_key == "" or isinstance(sort_key, bool):
        sort_key = RESOURCE_SORT_KEY

    search_term = raw.get("search_term") or ""
    return ViewParams(
        active_tab=active_tab,
        sort_key=sort_key,
        sort_direction=sort_direction,
        search_term=str(search_term),
    )


def toggle_sort(params: ViewParams, key: SortKey) -> ViewParams:
    """Column-header click: the active ascending column flips, anything else sorts ascending."""
    direction: Direction = (
        "descending" if params.sort_key == key and params.sort_direction == "ascending" else "ascending"
    )
    return replace(params, sort_key=key, sort_direction=direction)


def resolve_sort_key(sort_key: SortKey, realms: Iterable["Realm"]) -> SortKey:
    """Map a realm name or id coming from a UI/API onto the matrix column key (realm id).

    'resource' and 'total' pass through. A name shared by several realms
    resolves to the first realm carrying it; an unknown key passes through
    and sorts as all zeros.
    """
    if sort_key in (RESOURCE_SORT_KEY, TOTAL_KEY):
        return sort_key
    realms = list(realms or ())
    for realm in realms:
        if sort_key == realm.id:
            return realm.id
    for realm in realms:
        if sort_key == realm.name:
            return realm.id
    for realm in realms:
        if str(sort_key) == str(realm.id):
            return realm.id
    return sort_key


def sort_rows(
    resource_names: Iterable[str],
    sort_key: SortKey,
    direction: Direction,
    matrix: ResourceMatrix,
) -> List[str]:
    """Order resource rows for the table.

    Equal numeric values keep their incoming order; callers should not rely on it.
    """
    descending = direction == "descending"
    if sort_key == RESOURCE_SORT_KEY:
        return order_resources(resource_names, descending=descending)
    return sorted(
        resource_names,
        key=lambda name: matrix.get(name, {}).get(sort_key, 0) or 0,
        reverse=descending,
    )


def filter_names(names: Iterable[str], substring: Optional[str]) -> List[str]:
    names = list(names)
    if not (substring or "").strip():
        return names
    query = substring.lower()
    return [n for n in names if query in n.lower()]
