import pandas as pd
import streamlit as st
from dataclasses import asdict
from typing import List

from analytics import charts
from analytics.data import DataLoadError, load_session
from analytics.filters import ALL, FilterCriteria, normalize_criteria
from analytics.geo import place_hospitals
from analytics.records import TEST_RESULTS, records_to_frame
from analytics.session import DashboardViews, recompute
from analytics.views import HospitalSummary

FILTER_KEYS = {
    "hospital": "hospital_filter",
    "medical_condition": "condition_filter",
    "test_result": "test_result_filter",
}
HOSPITAL_TABLE_KEY = "hospital_table"
MAP_RADIUS_SCALE = 2500  # marker size -> metres on the map


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def format_filter_summary(criteria: FilterCriteria) -> str:
    chips = [
        f"Hospital: {criteria.hospital if criteria.hospital != ALL else 'All'}",
        f"Condition: {criteria.medical_condition if criteria.medical_condition != ALL else 'All'}",
        f"Test Result: {criteria.test_result if criteria.test_result != ALL else 'All'}",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def reset_filters():
    for key in FILTER_KEYS.values():
        st.session_state[key] = ALL


def select_hospital_from_table(hospitals: List[HospitalSummary]):
    selection = st.session_state.get(HOSPITAL_TABLE_KEY)
    rows = selection.selection.rows if selection is not None else []
    if rows and rows[0] < len(hospitals):
        st.session_state[FILTER_KEYS["hospital"]] = hospitals[rows[0]].name


def render_kpi_tiles(views: DashboardViews):
    stats = views.statistics
    cols = st.columns(4)
    cols[0].metric("Total Patients", f"{stats.total_records:,}")
    cols[1].metric("Avg Billing", f"${stats.avg_billing:,.2f}")
    cols[2].metric("Avg Length of Stay", f"{stats.avg_length_of_stay:.1f} days")
    cols[3].metric("Hospitals", f"{stats.hospital_count:,}")


def render_hospital_map(views: DashboardViews):
    markers = place_hospitals(views.hospitals)
    if not markers:
        st.info("No hospitals with known coordinates in the current selection.")
        return
    map_df = pd.DataFrame([asdict(m) for m in markers])
    map_df["radius"] = map_df["size"] * MAP_RADIUS_SCALE
    st.map(map_df, latitude="latitude", longitude="longitude", size="radius", color="color")
    skipped = len(views.hospitals) - len(markers)
    if skipped:
        st.caption(f"{skipped} hospital(s) have no map coordinates and are not shown.")


# ---------- UI setup ----------
st.set_page_config(page_title="Healthcare Analytics Dashboard", layout="wide")
inject_base_styles()
st.title("Healthcare Analytics Dashboard")
st.caption("Patient outcomes, billing and demographics across hospitals.")

try:
    session = load_session()
except DataLoadError as exc:
    st.error(
        f"Failed to load data: {exc}\n\n"
        "Place healthcare_data.csv under data/ or point HEALTHCARE_DATA_CSV at the file."
    )
    st.stop()

if not session.dataset:
    st.error("No usable patient records found in the data file.")
    st.stop()

options = session.options()
for key in FILTER_KEYS.values():
    st.session_state.setdefault(key, ALL)

# ----- Sidebar: filters -----
with st.sidebar:
    st.markdown("### Filters")
    st.selectbox("Hospital", options=[ALL] + options.hospitals, key=FILTER_KEYS["hospital"])
    st.selectbox("Medical Condition", options=[ALL] + options.medical_conditions, key=FILTER_KEYS["medical_condition"])
    st.selectbox("Test Result", options=[ALL] + list(TEST_RESULTS), key=FILTER_KEYS["test_result"])
    st.button("Reset Filters", on_click=reset_filters)
    st.markdown("---")
    st.caption(f"{len(session.dataset):,} records loaded, {session.dropped_rows:,} rows dropped for missing fields.")

criteria = normalize_criteria({name: st.session_state[key] for name, key in FILTER_KEYS.items()})
views = recompute(session, criteria)

st.markdown(f"<div class='chip-row'>{format_filter_summary(views.criteria)}</div>", unsafe_allow_html=True)
render_kpi_tiles(views)

c1, c2 = st.columns(2)
with c1:
    st.subheader("Test Results Distribution")
    st.altair_chart(charts.test_results_chart(views.test_results), use_container_width=True)
with c2:
    st.subheader("Top Medical Conditions by Test Result")
    st.altair_chart(charts.conditions_chart(views.conditions), use_container_width=True)

c3, c4 = st.columns(2)
with c3:
    st.subheader("Billing Amount Distribution")
    st.altair_chart(charts.billing_chart(views.billing), use_container_width=True)
with c4:
    st.subheader("Patient Demographics")
    st.altair_chart(charts.demographics_chart(views.demographics), use_container_width=True)

st.subheader("Hospitals")
render_hospital_map(views)
hospital_df = pd.DataFrame(
    [
        {
            "Hospital": h.name,
            "Patients": h.patient_count,
            "Avg Billing": round(h.avg_billing, 2),
            "Avg Stay": round(h.avg_stay, 1),
            "Dominant Result": h.dominant_result,
        }
        for h in views.hospitals
    ]
)
st.dataframe(
    hospital_df,
    hide_index=True,
    use_container_width=True,
    key=HOSPITAL_TABLE_KEY,
    on_select=lambda: select_hospital_from_table(views.hospitals),
    selection_mode="single-row",
)

st.download_button(
    "Export filtered records (CSV)",
    data=records_to_frame(session.filtered()).to_csv(index=False).encode("utf-8"),
    file_name="patients.csv",
    mime="text/csv",
)
