# main.py
from __future__ import annotations

import io
import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import matplotlib.pyplot as plt
import streamlit as st

from mdp_dashboard.components.charts import (
    assessment_area_chart,
    function_chart,
    radar_chart,
    rotation_chart,
    score_distribution_chart,
)
from mdp_dashboard.config import DATA_FILE, DISPLAY_TIMEZONE
from mdp_dashboard.core.analytics import compare_mdps, compute_stats, mdp_history
from mdp_dashboard.core.filters import RecordFilter, apply_filter, describe, filter_options
from mdp_dashboard.core.records import (
    ASSESSMENT_AREAS,
    FUNCTION_QUESTIONS,
    FUNCTIONS,
    ResponseRecord,
    ValidationFault,
    validate_submission,
)
from mdp_dashboard.core.scoring import score_label
from mdp_dashboard.core.store import NotFoundFault, RecordStore, StorageFault
from mdp_dashboard.logging_config import setup_logging
from mdp_dashboard.reports.csv_export import csv_filename, records_to_csv
from mdp_dashboard.reports.pdf_export import export_pdf


logger = logging.getLogger(__name__)

RATING_OPTIONS = [1, 2, 3, 4, 5]
ROTATION_OPTIONS = ["", "1", "2", "3", "4", "5", "6"]
FILTER_KEYS = ("filter_function", "filter_manager", "filter_rotation", "filter_search")
VIEW_MODES = ["Cohort", "Individual", "Compare"]


# ----------------------------
# Helpers
# ----------------------------
def format_timestamp(ts: str) -> str:
    if not ts:
        return "Unknown"
    try:
        parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return ts
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        parsed = parsed.astimezone(ZoneInfo(DISPLAY_TIMEZONE))
    except ZoneInfoNotFoundError:
        logger.warning("Unknown display timezone %s; showing UTC", DISPLAY_TIMEZONE)
    return parsed.strftime("%m/%d/%Y %I:%M:%S %p")


def table_rows(records: List[ResponseRecord], with_id: bool = False) -> List[Dict[str, Any]]:
    rows = []
    for r in sorted(records, key=lambda item: item.timestamp, reverse=True):
        row = {
            "Submitted": format_timestamp(r.timestamp),
            "MDP Name": r.mdp_name,
            "Function": r.function,
            "Manager": r.manager_name,
            "Rotation": r.rotation,
            "Composite Score": round(r.composite_score, 2),
            "Level": score_label(r.composite_score),
            "Job Knowledge": r.job_knowledge,
            "Quality of Work": r.quality_of_work,
            "Communication": r.communication,
            "Initiative": r.initiative,
        }
        if with_id:
            row = {"ID": r.id, **row}
        rows.append(row)
    return rows


def show_figure(fig) -> None:
    st.pyplot(fig)
    plt.close(fig)


def load_records(store: RecordStore) -> Optional[List[ResponseRecord]]:
    try:
        return store.list_all()
    except StorageFault as exc:
        st.error(f"Failed to load survey data: {exc}")
        return None


# ----------------------------
# UI Helpers
# ----------------------------
def init_state():
    for key in FILTER_KEYS:
        if key not in st.session_state:
            st.session_state[key] = ""
    if "compare_a" not in st.session_state:
        st.session_state.compare_a = ""
    if "compare_b" not in st.session_state:
        st.session_state.compare_b = ""


def clear_filters():
    for key in FILTER_KEYS:
        st.session_state[key] = ""


def swap_mdps():
    st.session_state.compare_a, st.session_state.compare_b = (
        st.session_state.compare_b,
        st.session_state.compare_a,
    )


def rating_input(label: str, key: str) -> Optional[int]:
    return st.radio(label, RATING_OPTIONS, index=None, horizontal=True, key=key)


def keep_valid(key: str, options: List[str]) -> None:
    # a stored selection can outlive the record it came from
    if st.session_state.get(key, "") not in options:
        st.session_state[key] = options[0]


def sidebar_filter(records: List[ResponseRecord]) -> RecordFilter:
    options = filter_options(records)
    keep_valid("filter_function", [""] + options["functions"])
    keep_valid("filter_manager", [""] + options["managers"])
    keep_valid("filter_rotation", [""] + options["rotations"])
    st.sidebar.header("Filters")
    function = st.sidebar.selectbox(
        "Function", [""] + options["functions"], key="filter_function", format_func=lambda v: v or "All"
    )
    manager = st.sidebar.selectbox(
        "Manager", [""] + options["managers"], key="filter_manager", format_func=lambda v: v or "All"
    )
    rotation = st.sidebar.selectbox(
        "Rotation", [""] + options["rotations"], key="filter_rotation", format_func=lambda v: v or "All"
    )
    search = st.sidebar.text_input("Search MDP name", key="filter_search")
    st.sidebar.button("Clear filters", on_click=clear_filters)
    return RecordFilter(function=function, manager=manager, rotation=rotation, search=search.strip())


# ----------------------------
# Survey
# ----------------------------
def render_survey(store: RecordStore):
    st.subheader("MDP Performance Evaluation")
    st.write("Ratings are 1–5 (Needs improvement → Exceptional).")

    # outside the form so the function-specific questions follow the selection
    function = st.selectbox("Function", [""] + list(FUNCTIONS), format_func=lambda v: v or "Select a function")

    with st.form("survey_form", clear_on_submit=True):
        c1, c2, c3 = st.columns(3)
        mdp_name = c1.text_input("MDP name")
        manager_name = c2.text_input("Manager name")
        rotation = c3.selectbox("Rotation", ROTATION_OPTIONS, format_func=lambda v: v or "Select")

        st.markdown("#### Core Assessment")
        job_knowledge = rating_input("Job Knowledge (50%)", "rating_jobKnowledge")
        quality_of_work = rating_input("Quality of Work (20%)", "rating_qualityOfWork")
        communication = rating_input("Communication Skills & Teamwork (15%)", "rating_communication")
        initiative = rating_input("Initiative & Productivity (15%)", "rating_initiative")

        specific_1 = specific_2 = None
        if function:
            st.markdown(f"#### {function} Questions")
            first, second = FUNCTION_QUESTIONS[function]
            specific_1 = rating_input(first, "rating_functionSpecific1")
            specific_2 = rating_input(second, "rating_functionSpecific2")

        submitted = st.form_submit_button("Submit Evaluation")

    if not submitted:
        return

    raw = {
        "mdpName": mdp_name,
        "function": function,
        "managerName": manager_name,
        "rotation": rotation,
        "jobKnowledge": job_knowledge,
        "qualityOfWork": quality_of_work,
        "communication": communication,
        "initiative": initiative,
        "functionSpecific1": specific_1,
        "functionSpecific2": specific_2,
    }
    try:
        submission = validate_submission(raw, require_function_specific=True)
        record = store.append(submission)
    except ValidationFault as exc:
        st.error("Please complete all required fields:\n\n" + "\n".join(f"- {p}" for p in exc.problems))
        return
    except StorageFault:
        st.error("Failed to save survey response. Please try again.")
        return
    st.success(f"✅ Evaluation submitted for {record.mdp_name}. Composite score: {record.composite_score:.2f}")


# ----------------------------
# Dashboard
# ----------------------------
def render_cohort(records: List[ResponseRecord], filtered: List[ResponseRecord], record_filter: RecordFilter):
    stats = compute_stats(filtered)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total MDPs", stats.total_mdps, help="Responses in current view")
    c2.metric("Average Score", f"{stats.average_score:.2f}", help="Weighted composite")
    c3.metric("Top Performer", stats.top_performer, f"{stats.top_score:.2f}", delta_color="off")
    c4.metric("Functions", stats.unique_functions)

    left, right = st.columns(2)
    with left:
        show_figure(assessment_area_chart(stats.assessment_area_averages))
        show_figure(rotation_chart(stats.rotation_breakdown))
    with right:
        show_figure(function_chart(stats.function_breakdown))
        show_figure(score_distribution_chart(stats.score_distribution))

    if stats.function_averages:
        st.markdown("### Average Score by Function")
        st.table([{"Function": fn, "Average": f"{avg:.2f}", "Responses": stats.function_breakdown[fn]}
                  for fn, avg in stats.function_averages.items()])

    st.markdown("### Responses")
    if not filtered:
        st.info("No survey responses match the current filters.")
    else:
        st.dataframe(table_rows(filtered), use_container_width=True, hide_index=True)

    st.divider()
    st.markdown("### Export")
    st.download_button(
        "Download CSV",
        data=records_to_csv(filtered),
        file_name=csv_filename(date.today()),
        mime="text/csv",
    )
    st.download_button(
        "Download JSON statistics",
        data=json.dumps(stats.to_dict(), indent=2),
        file_name="mdp_statistics.json",
        mime="application/json",
    )
    # per session, in memory
    pdf_buf = io.BytesIO()
    export_pdf(
        pdf_buf,
        stats,
        record_filter,
        total_records=len(records),
        generated_at=datetime.now().isoformat(timespec="seconds"),
    )
    st.download_button(
        "Download PDF summary",
        data=pdf_buf.getvalue(),
        file_name="mdp_dashboard_report.pdf",
        mime="application/pdf",
    )


def render_individual(records: List[ResponseRecord], mdp_name: str):
    history = mdp_history(records, mdp_name)
    stats = compute_stats(history)

    c1, c2, c3 = st.columns(3)
    c1.metric("Evaluations", stats.total_responses)
    c2.metric("Average Score", f"{stats.average_score:.2f}")
    c3.metric("Best Score", f"{stats.top_score:.2f}")

    left, right = st.columns(2)
    with left:
        show_figure(radar_chart([(mdp_name, stats.assessment_area_averages)]))
    with right:
        show_figure(assessment_area_chart(stats.assessment_area_averages))

    st.markdown("### Rotation History")
    st.dataframe(table_rows(history), use_container_width=True, hide_index=True)


def render_comparison(records: List[ResponseRecord], mdp_names: List[str]):
    options = [""] + mdp_names
    keep_valid("compare_a", options)
    keep_valid("compare_b", options)

    c1, c2, c3 = st.columns([3, 3, 1])
    mdp_a = c1.selectbox("MDP A", options, key="compare_a", format_func=lambda v: v or "Select")
    mdp_b = c2.selectbox("MDP B", options, key="compare_b", format_func=lambda v: v or "Select")
    c3.button("Swap", on_click=swap_mdps)

    if not mdp_a or not mdp_b:
        st.info("Select two MDPs to compare.")
        return

    comparison = compare_mdps(records, mdp_a, mdp_b)
    left, right = st.columns(2)
    with left:
        show_figure(radar_chart([(mdp_a, comparison.areas_a), (mdp_b, comparison.areas_b)]))
    with right:
        rows = [
            {"Area": area, mdp_a: f"{a:.2f}", mdp_b: f"{b:.2f}", "Difference": f"{d:+.2f}"}
            for area, a, b, d in zip(ASSESSMENT_AREAS, comparison.areas_a, comparison.areas_b, comparison.difference)
        ]
        rows.append({
            "Area": "Composite",
            mdp_a: f"{comparison.average_a:.2f}",
            mdp_b: f"{comparison.average_b:.2f}",
            "Difference": f"{comparison.average_a - comparison.average_b:+.2f}",
        })
        st.table(rows)
        st.caption(f"{mdp_a}: {comparison.count_a} evaluation(s) · {mdp_b}: {comparison.count_b} evaluation(s)")


def render_dashboard(store: RecordStore):
    st.subheader("MDP Performance Dashboard")
    records = load_records(store)
    if records is None:
        return

    record_filter = sidebar_filter(records)
    filtered = apply_filter(records, record_filter)
    mdp_names = filter_options(records)["mdp_names"]

    st.sidebar.header("View")
    mode = st.sidebar.radio("Mode", VIEW_MODES, key="view_mode")
    st.caption(describe(len(filtered), len(records), record_filter))

    if mode == "Cohort":
        render_cohort(records, filtered, record_filter)
    elif mode == "Compare":
        render_comparison(records, mdp_names)
    else:
        keep_valid("individual_mdp", [""] + mdp_names)
        mdp_name = st.sidebar.selectbox(
            "MDP", [""] + mdp_names, key="individual_mdp", format_func=lambda v: v or "Select"
        )
        if not mdp_name:
            st.info("Select an MDP in the sidebar.")
            return
        st.markdown(f"**Individual: {mdp_name}**")
        render_individual(records, mdp_name)


# ----------------------------
# Admin
# ----------------------------
def render_admin(store: RecordStore):
    st.subheader("Manage Responses")
    notice = st.session_state.pop("admin_notice", None)
    if notice:
        st.success(notice)
    records = load_records(store)
    if records is None:
        return
    if not records:
        st.info("No survey responses yet.")
        return

    st.dataframe(table_rows(records, with_id=True), use_container_width=True, hide_index=True)

    labels = {r.id: f"{r.mdp_name} · {r.function} · Rotation {r.rotation} ({r.id})" for r in records}
    record_id = st.selectbox("Response to delete", list(labels), format_func=labels.get)
    confirm = st.checkbox("I understand this cannot be undone")
    if st.button("Delete response", disabled=not confirm):
        try:
            removed = store.delete_by_id(record_id)
        except NotFoundFault:
            st.error("Survey response not found. It may already have been deleted.")
        except StorageFault:
            st.error("Failed to delete survey response.")
        else:
            # shown after the rerun
            st.session_state.admin_notice = f"Deleted response for {removed.mdp_name}."
            st.rerun()


# ----------------------------
# Main app
# ----------------------------
def main():
    st.set_page_config(page_title="MDP Performance Dashboard", layout="wide")
    setup_logging()
    init_state()

    st.title("MDP Performance Survey & Dashboard")
    st.caption("Rotational program performance evaluations. Composite = 50% Job Knowledge, "
               "20% Quality of Work, 15% Communication, 15% Initiative.")

    store = RecordStore(DATA_FILE)
    try:
        store.ensure()
    except StorageFault:
        st.error("The survey data file could not be created. Check MDP_DATA_FILE.")
        return

    tab1, tab2, tab3 = st.tabs(["Survey", "Dashboard", "Admin"])
    with tab1:
        render_survey(store)
    with tab2:
        render_dashboard(store)
    with tab3:
        render_admin(store)


if __name__ == "__main__":
    main()
