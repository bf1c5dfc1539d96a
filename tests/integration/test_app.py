"""Smoke test for the Streamlit front end."""

from pathlib import Path

from streamlit.testing.v1 import AppTest

APP_PATH = Path(__file__).resolve().parents[2] / "app.py"


def test_app_starts_on_data_entry():
    at = AppTest.from_file(str(APP_PATH), default_timeout=30).run()
    assert not at.exception
    assert at.title[0].value == "Realm Resource Dashboard"
    assert at.session_state["dashboard_state"].params.active_tab == "data-entry"
