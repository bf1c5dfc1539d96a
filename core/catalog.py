from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Tuple

MILITARY_FAMILIES: Tuple[str, ...] = ("Knight", "Crossbowman", "Paladin")
TIERS: Tuple[str, ...] = ("T1", "T2", "T3")

# Unit token -> (family, tier). T1 units carry no suffix.
MILITARY_UNITS: Dict[str, Tuple[str, str]] = {
    f"{family}{'' if tier == 'T1' else tier}": (family, tier)
    for family in MILITARY_FAMILIES
    for tier in TIERS
}

RESOURCE_ORDER: Tuple[str, ...] = (
    # Military
    "Knight", "KnightT2", "KnightT3",
    "Crossbowman", "CrossbowmanT2", "CrossbowmanT3",
    "Paladin", "PaladinT2", "PaladinT3",
    # Transport
    "Donkey",
    # Raw resources
    "Wood", "Stone", "Coal", "Copper", "Obsidian", "Silver", "Ironwood",
    "ColdIron", "Gold", "Hartwood", "Diamonds", "Sapphire", "Ruby",
    "DeepCrystal", "Ignium", "EtherealSilica", "TrueIce", "TwilightQuartz",
    "AlchemicalSilver", "Adamantine", "Mithral", "Dragonhide",
    # Others
    "Lords", "Labor", "AncientFragment", "Wheat", "Fish",
)

_ORDER_INDEX: Dict[str, int] = {name: idx for idx, name in enumerate(RESOURCE_ORDER)}
_WHITESPACE = re.compile(r"\s+")


def normalize_resource_name(name: str) -> str:
    """'Knight T2' -> 'KnightT2'. Used for matching only, never for display."""
    return _WHITESPACE.sub("", str(name))


def text_sort_key(value: str) -> Tuple[str, str]:
    # Case-insensitive first; on ties lowercase sorts before uppercase.
    return value.casefold(), value.swapcase()


def resource_order_key(name: str) -> Tuple[int, int, Tuple[str, str]]:
    idx = _ORDER_INDEX.get(normalize_resource_name(name))
    if idx is not None:
        return 0, idx, ("", "")
    return 1, 0, text_sort_key(name)


def order_resources(names: Iterable[str], *, descending: bool = False) -> List[str]:
    """Catalog order: priority list first, then alphabetical.

    Descending is the exact reverse, so priority names end up last and read
    backwards.
    """
    return sorted(names, key=resource_order_key, reverse=descending)


def collect_resource_names(realms: Iterable[object]) -> List[str]:
    seen: Dict[str, None] = {}
    for realm in realms or ():
        for entry in realm.resources:
            seen.setdefault(entry.name, None)
    return list(seen)


def classify_unit(name: str) -> Optional[Tuple[str, str]]:
    """Return (family, tier) for one of the nine unit tokens, else None."""
    return MILITARY_UNITS.get(normalize_resource_name(name))


def is_military_unit(name: str) -> bool:
    return classify_unit(name) is not None


def split_resources(names: Iterable[str]) -> Tuple[List[str], List[str]]:
    military: List[str] = []
    economic: List[str] = []
    for name in names:
        (military if is_military_unit(name) else economic).append(name)
    return military, economic


def group_units_by_family(units: Iterable[str]) -> Dict[str, List[str]]:
    """Group unit names for the card layout. Display only; totals use classify_unit."""
    units = list(units)
    return {family: [u for u in units if family in u] for family in MILITARY_FAMILIES}
