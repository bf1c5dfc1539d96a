"""Unit tests for resource ordering and unit classification."""

from __future__ import annotations

from core.catalog import (
    RESOURCE_ORDER,
    classify_unit,
    collect_resource_names,
    group_units_by_family,
    is_military_unit,
    normalize_resource_name,
    order_resources,
    split_resources,
)


def test_normalize_strips_all_whitespace():
    assert normalize_resource_name("Knight T2") == "KnightT2"
    assert normalize_resource_name(" Deep\tCrystal ") == "DeepCrystal"


def test_priority_names_come_first_in_list_order():
    names = ["Mystery", "Wood", "Knight T2", "Apple", "Knight", "Fish", "Donkey"]
    assert order_resources(names) == ["Knight", "Knight T2", "Donkey", "Wood", "Fish", "Apple", "Mystery"]


def test_non_priority_names_sort_case_insensitively():
    assert order_resources(["banana", "Apple", "apple"]) == ["apple", "Apple", "banana"]


def test_descending_is_exact_reverse_of_ascending():
    names = ["Zinc", "Wood", "Paladin", "KnightT3", "Amber", "Fish"]
    ascending = order_resources(names)
    descending = order_resources(names, descending=True)
    assert descending == list(reversed(ascending))
    assert descending[:2] == ["Zinc", "Amber"]
    assert descending[2:] == ["Fish", "Wood", "Paladin", "KnightT3"]


def test_display_name_is_kept():
    assert order_resources(["Cold Iron", "Wood"]) == ["Wood", "Cold Iron"]


def test_every_catalog_entry_orders_by_position():
    assert order_resources(reversed(RESOURCE_ORDER)) == list(RESOURCE_ORDER)


def test_military_classification_is_a_closed_set():
    assert is_military_unit("Knight")
    assert is_military_unit("Crossbowman T3")
    assert classify_unit("PaladinT2") == ("Paladin", "T2")
    assert classify_unit("Knight") == ("Knight", "T1")
    assert not is_military_unit("KnightT4")
    assert not is_military_unit("Archer")
    assert not is_military_unit("Knights")
    assert not is_military_unit("Donkey")


def test_split_preserves_order():
    military, economic = split_resources(["Knight", "Wood", "PaladinT3", "Mystery"])
    assert military == ["Knight", "PaladinT3"]
    assert economic == ["Wood", "Mystery"]


def test_collect_resource_names_first_seen(mixed_realms):
    assert collect_resource_names(mixed_realms) == [
        "Stone",
        "Knight T2",
        "Mystery",
        "PaladinT3",
        "Wood",
        "CrossbowmanT2",
    ]
    assert collect_resource_names([]) == []


def test_group_units_by_family_uses_substring():
    groups = group_units_by_family(["Knight", "KnightT2", "PaladinT3"])
    assert groups == {"Knight": ["Knight", "KnightT2"], "Crossbowman": [], "Paladin": ["PaladinT3"]}
