import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, List, Optional

from core.catalog import MILITARY_FAMILIES
from core.data import DashboardState, clear_data, ingest_json, load_dashboard_data, prepare_context, sample_json, with_params
from core.filters import RESOURCE_SORT_KEY, toggle_sort
from core.matrix import matrix_frame
from core.metrics_military import compute_military
from core.metrics_resources import compute_resources, visible_resources
from core.military import summary_frame

alt.data_transformers.disable_max_rows()

TAB_LABELS = {"data-entry": "Data Entry", "resources": "Resources View", "military": "Military Units"}
FAMILY_COLORS = {"Knight": "#ef4444", "Crossbowman": "#3b82f6", "Paladin": "#22c55e"}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .unit-card {border-left: 4px solid var(--accent);padding: 8px 12px;margin-bottom: 8px;background: #ffffff;
                    border-radius: 8px;box-shadow: 0 1px 2px rgba(0,0,0,0.04);}
        .unit-card .unit-row {display: flex;justify-content: space-between;}
        .unit-card .unit-total {border-top: 1px solid #e5e7eb;margin-top: 6px;padding-top: 4px;font-weight: 700;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header"><div class="card-title">{title}</div></div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_page_header(title: str, breadcrumb: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )


def get_state() -> DashboardState:
    if "dashboard_state" not in st.session_state:
        st.session_state["dashboard_state"] = DashboardState(realms=load_dashboard_data().get("realms", ()))
    return st.session_state["dashboard_state"]


def set_state(state: DashboardState) -> None:
    st.session_state["dashboard_state"] = state


def format_number(value) -> str:
    return f"{value:,}" if isinstance(value, int) else f"{value:,.2f}".rstrip("0").rstrip(".")


def rows_frame(payload: Dict, key: str, name_field: str, label: str) -> pd.DataFrame:
    headers = [c["label"] for c in payload["columns"]]
    records = []
    for row in payload[key]:
        record = {label: row[name_field]}
        record.update({h: format_number(v) for h, v in zip(headers, row["cells"])})
        record["Total"] = format_number(row["total"])
        records.append(record)
    return pd.DataFrame(records, columns=[label, *headers, "Total"])


# ---------- Pages ----------
def render_data_entry_page(state: DashboardState):
    render_page_header("Enter Game Data", "Home / Data Entry")
    st.caption(
        "Paste your JSON data below. The data should be an array of realms, "
        "with each realm having a name, entityId, and a resources array."
    )
    btn_cols = st.columns([2, 2, 6])
    if btn_cols[0].button("Load Sample Data"):
        st.session_state["json_input"] = sample_json()
    if btn_cols[1].button("Clear Data", disabled=not state.has_data):
        set_state(clear_data(state))
        st.session_state["json_input"] = ""
        st.rerun()

    with st.form("json_form"):
        text = st.text_area("JSON Data", key="json_input", height=320, placeholder='[{"entityId": 1, "name": "Realm Name", "resources": []}]')
        submitted = st.form_submit_button("Load Data")
    if submitted:
        new_state = ingest_json(state, text)
        set_state(new_state)
        if not new_state.json_error:
            st.rerun()
    if get_state().json_error:
        st.error(get_state().json_error)


def render_search_and_sort(state: DashboardState, ctx: Dict) -> DashboardState:
    params = state.params
    options = [RESOURCE_SORT_KEY, "total"] + [r.id for r in ctx["realm_columns"]]
    fmt = {RESOURCE_SORT_KEY: "Resource", "total": "Total", **ctx["realm_labels"]}
    if st.session_state.get("sort_key") not in options:
        st.session_state["sort_key"] = params.sort_key if params.sort_key in options else RESOURCE_SORT_KEY
    st.session_state.setdefault("search_term", params.search_term)

    c1, c2, c3 = st.columns([6, 3, 2])
    search = c1.text_input("Search Resources", key="search_term", placeholder="Search by resource name...")
    sort_key = c2.selectbox("Sort by", options=options, key="sort_key", format_func=lambda k: fmt.get(k, str(k)))
    toggle_clicked = c3.button("Toggle order ↑↓")
    if toggle_clicked or sort_key != params.sort_key:
        toggled = toggle_sort(params, sort_key)
        state = with_params(state, sort_key=toggled.sort_key, sort_direction=toggled.sort_direction)
    if search != params.search_term:
        state = with_params(state, search_term=search)
    set_state(state)
    return state


def render_resources_page(state: DashboardState, ctx: Dict):
    render_page_header("Resources View", "Home / Resources")
    state = render_search_and_sort(state, ctx)
    payload = compute_resources(state.params, ctx)
    arrow = "↑" if state.params.sort_direction == "ascending" else "↓"
    with card(f"Economic resources ({arrow})"):
        if payload["rows"]:
            st.dataframe(rows_frame(payload, "rows", "resource", "Resource"), use_container_width=True, hide_index=True)
            export_df = matrix_frame(ctx["matrix"], visible_resources(state.params, ctx), ctx["realm_columns"])
            st.download_button("Export CSV", data=export_df.to_csv(index=False).encode("utf-8"), file_name="resources.csv", mime="text/csv")
        else:
            st.info("No resources match the current search.")
    if payload["charts"].get("totals"):
        with card("Totals"):
            st.vega_lite_chart(payload["charts"]["totals"], use_container_width=True)
    st.caption(payload["footer"])


def render_unit_cards(payload: Dict):
    cols = st.columns(len(MILITARY_FAMILIES))
    for col, family in zip(cols, MILITARY_FAMILIES):
        with col:
            st.markdown(f"#### {family}s")
            cards: List[Dict] = payload["cards"][family]
            if not cards:
                st.caption(f"No {family} units found")
            for unit_card in cards:
                holdings = "".join(
                    f"<div class='unit-row'><span>{h['label']}:</span><span>{format_number(h['amount'])}</span></div>"
                    for h in unit_card["holdings"]
                )
                st.markdown(
                    f"<div class='unit-card' style='--accent: {FAMILY_COLORS[family]}'><b>{unit_card['unit']}</b>{holdings}"
                    f"<div class='unit-row unit-total'><span>Total:</span><span>{format_number(unit_card['total'])}</span></div></div>",
                    unsafe_allow_html=True,
                )


def render_military_page(state: DashboardState, ctx: Dict):
    render_page_header(
        "Military Units",
        "Home / Military",
        export_df=summary_frame(ctx["military_summary"]),
        export_name="military.csv",
    )
    payload = compute_military(state.params, ctx)
    with card("Military Units Summary"):
        if payload["has_units"]:
            st.dataframe(summary_frame(payload["summary"]), use_container_width=True, hide_index=True)
        else:
            st.info("No military units found in the current data.")
    if payload["charts"].get("tiers"):
        with card("Units by tier"):
            st.vega_lite_chart(payload["charts"]["tiers"], use_container_width=True)
    with card("Units by realm"):
        if payload["units"]:
            st.dataframe(rows_frame(payload, "units", "unit", "Unit Type"), use_container_width=True, hide_index=True)
        else:
            st.info("No military units found in the current data")
    st.markdown("### Military Units By Type")
    render_unit_cards(payload)


def render_no_data():
    st.warning("No Data Available. Please go to the Data Entry tab to input your game data.")


# ---------- UI setup ----------
st.set_page_config(page_title="Realm Resource Dashboard", layout="wide")
inject_base_styles()
st.title("Realm Resource Dashboard")

state = get_state()
st.caption(f"Last updated: {datetime.fromisoformat(state.last_updated):%Y-%m-%d %H:%M:%S %Z}")

def on_nav_change():
    set_state(with_params(get_state(), active_tab=st.session_state["nav"]))


with st.sidebar:
    st.markdown("### Navigate")
    st.session_state["nav"] = state.params.active_tab
    st.radio("Navigate", list(TAB_LABELS), key="nav", format_func=TAB_LABELS.get, on_change=on_nav_change)
    st.markdown("---")
    st.caption(f"{len(state.realms)} realms loaded")

if state.params.active_tab == "data-entry":
    render_data_entry_page(state)
elif not state.has_data:
    render_no_data()
else:
    ctx = prepare_context(state.realms)
    if state.params.active_tab == "resources":
        render_resources_page(state, ctx)
    else:
        render_military_page(state, ctx)
