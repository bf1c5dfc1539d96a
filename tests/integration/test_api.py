"""Integration tests for the FastAPI application."""

import pytest
from fastapi.testclient import TestClient

from api import main
from core.data import DashboardState


@pytest.fixture
def client():
    """Test client with a fresh, empty dashboard state."""
    main.set_state(DashboardState())
    yield TestClient(main.app)
    main.set_state(DashboardState())


@pytest.fixture
def loaded_client(client, scenario_json):
    response = client.post("/data", json={"json_input": scenario_json})
    assert response.status_code == 200
    return client


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "realms": 0}


def test_load_data(client, scenario_json):
    response = client.post("/data", json={"json_input": scenario_json})
    assert response.status_code == 200
    data = response.json()
    assert data["realms"] == 2
    assert data["active_tab"] == "resources"


def test_malformed_input_keeps_prior_data(loaded_client):
    response = loaded_client.post("/data", json={"json_input": '{"not":"an array"}'})
    assert response.status_code == 422
    assert response.json() == {"error": "Error parsing JSON: Data must be an array of realms", "realms": 2}

    response = loaded_client.post("/data", json={"json_input": "not json"})
    assert response.status_code == 422
    assert response.json()["error"].startswith("Error parsing JSON")

    assert loaded_client.get("/health").json()["realms"] == 2


def test_sample_and_clear(client):
    response = client.post("/data/sample")
    assert response.status_code == 200
    assert response.json()["realms"] == 2

    names = [r["name"] for r in client.get("/meta/realms").json()["realms"]]
    assert names == ["Sample Realm 1", "Sample Realm 2"]

    response = client.delete("/data")
    assert response.status_code == 200
    assert response.json()["realms"] == 0
    assert response.json()["active_tab"] == "data-entry"


def test_meta_resources(loaded_client):
    data = loaded_client.get("/meta/resources").json()
    assert data == {
        "resources": ["Knight", "Crossbowman", "Wood"],
        "military_units": ["Knight", "Crossbowman"],
        "economic_resources": ["Wood"],
    }


def test_resources_payload(loaded_client):
    response = loaded_client.post("/resources", json={"active_tab": "military", "sort_key": "total", "sort_direction": "descending"})
    assert response.status_code == 200
    data = response.json()
    assert [r["resource"] for r in data["rows"]] == ["Knight", "Crossbowman"]
    assert data["rows"][0]["cells"] == [100, 0]
    assert data["params"]["sort_direction"] == "descending"


def test_resources_sort_by_realm_id(loaded_client):
    response = loaded_client.post("/resources", json={"active_tab": "military", "sort_key": 2, "sort_direction": "descending"})
    assert [r["resource"] for r in response.json()["rows"]] == ["Crossbowman", "Knight"]


def test_military_payload(loaded_client):
    response = loaded_client.post("/military", json={})
    assert response.status_code == 200
    summary = response.json()["summary"]
    assert summary["Knight"] == {"T1": 100, "T2": 0, "T3": 0, "total": 100}
    assert summary["Crossbowman"]["total"] == 50
    assert summary["Paladin"]["total"] == 0
    assert summary["totals"]["grandTotal"] == 150


def test_invalid_view_params_rejected(client):
    response = client.post("/resources", json={"sort_direction": "sideways"})
    assert response.status_code == 422


def test_export_resources_csv(loaded_client):
    response = loaded_client.post("/export/resources", json={"active_tab": "resources"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0] == "Resource,A,B,Total"
    assert lines[1] == "Wood,1000,750,1750"


def test_export_military_csv(loaded_client):
    response = loaded_client.post("/export/military", json={})
    lines = response.text.strip().splitlines()
    assert lines[0] == "Unit Type,Tier 1,Tier 2,Tier 3,Total"
    assert lines[-1] == "TOTAL,150,0,0,150"


def test_deeply_nested_input_is_rejected_not_fatal(loaded_client):
    response = loaded_client.post("/data", json={"json_input": "[" * 100000})
    assert response.status_code == 422
    assert response.json()["error"].startswith("Error parsing JSON")
    assert response.json()["realms"] == 2


def test_sample_load_stamps_last_updated(client):
    main.set_state(DashboardState(last_updated="2000-01-01T00:00:00+00:00", json_error="stale"))
    data = client.post("/data/sample").json()
    assert data["active_tab"] == "resources"
    assert data["last_updated"] > "2000-01-01T00:00:00+00:00"
    assert main.current_state().json_error == ""


def test_export_realms_long_format(loaded_client):
    response = loaded_client.post("/export/realms", json={})
    assert response.status_code == 200
    lines = response.text.strip().splitlines()
    assert lines[0] == "realm_id,realm_name,resource,amount"
    assert lines[1:] == ["1,A,Wood,1000", "1,A,Knight,100", "2,B,Wood,750", "2,B,Crossbowman,50"]


def test_unexpected_failure_is_logged_as_500(client, monkeypatch):
    def boom(state):
        raise RuntimeError("state unavailable")

    monkeypatch.setattr(main, "clear_data", boom)
    response = client.delete("/data")
    assert response.status_code == 500
    assert response.json() == {"error": "state unavailable", "type": "RuntimeError"}
