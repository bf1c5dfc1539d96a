"""Pytest configuration and shared realm fixtures.

Adds the repository root to `sys.path` so tests can import the `core` and
`api` packages without requiring an editable install in CI.
"""

import json
import sys
from pathlib import Path

import pytest

ROOT_PATH = Path(__file__).resolve().parents[1]
if str(ROOT_PATH) not in sys.path:
    sys.path.insert(0, str(ROOT_PATH))

from core.data import parse_realms  # noqa: E402


SCENARIO = [
    {
        "id": 1,
        "name": "A",
        "resources": [
            {"name": "Wood", "totalAmount": 1000},
            {"name": "Knight", "totalAmount": 100},
        ],
    },
    {
        "id": 2,
        "name": "B",
        "resources": [
            {"name": "Wood", "totalAmount": 750},
            {"name": "Crossbowman", "totalAmount": 50},
        ],
    },
]


@pytest.fixture
def scenario_json():
    return json.dumps(SCENARIO)


@pytest.fixture
def scenario_realms(scenario_json):
    return parse_realms(scenario_json)


@pytest.fixture
def mixed_realms():
    """Three realms with units, unknown resources and a whitespace-spelled tier."""
    return parse_realms(
        json.dumps(
            [
                {
                    "entityId": 10,
                    "name": "Northwatch",
                    "resources": [
                        {"name": "Stone", "totalAmount": 40},
                        {"name": "Knight T2", "totalAmount": 7},
                        {"name": "Mystery", "totalAmount": 3},
                        {"name": "PaladinT3", "totalAmount": 2},
                    ],
                },
                {
                    "entityId": 11,
                    "name": "Emberfall",
                    "resources": [
                        {"name": "Stone", "totalAmount": 10},
                        {"name": "Wood", "totalAmount": 5},
                        {"name": "CrossbowmanT2", "totalAmount": 12},
                    ],
                },
                {"entityId": 12, "name": "Ashen Hollow", "resources": []},
            ]
        )
    )
