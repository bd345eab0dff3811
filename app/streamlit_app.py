import sys, os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import io
import json
import random
import time
from datetime import date, timedelta

import streamlit as st

from klausurplan.algorithms.greedy import distribute_exams
from klausurplan.algorithms.repair import auto_fix
from klausurplan.dates import week_label, weeks_between
from klausurplan.io_utils import PlannerState, load_state, load_timetables, state_to_dict
from klausurplan.models import PdfSettings, WEEKDAYS, Weekday
from klausurplan.pdf_export import export_to_pdf
from klausurplan.scheduling.edits import (
    default_selection, merge_timetables, move_exam, remove_subject, toggle_class_day_block, toggle_day_block,
    toggle_pin, toggle_week_block, toggle_week_type,
)
from klausurplan.scheduling.evaluation import exams_frame, summary
from klausurplan.scheduling.validation import validate_move

# ---------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------
st.set_page_config(page_title="Klausurplan", layout="wide")
st.title("Klausurplan – Exam Week Planner")

if "planner" not in st.session_state:
    st.session_state.planner = PlannerState()
state: PlannerState = st.session_state.planner


def _bytes_of(upload):
    if upload is None:
        return None
    return upload.getvalue()


# ---------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------
@st.cache_data
def load_timetables_cached(raw: bytes):
    return load_timetables(io.BytesIO(raw))


# ---------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------
st.subheader("Inputs")
c1, c2 = st.columns(2)
state_file = c1.file_uploader("Planner document (JSON)", type=["json"])
timetable_file = c2.file_uploader("Timetables (JSON, className/subjects)", type=["json"])

if state_file is not None and st.button("Load planner document"):
    try:
        st.session_state.planner = load_state(io.BytesIO(_bytes_of(state_file)))
        st.rerun()
    except ValueError as e:
        st.error(str(e))

if timetable_file is not None and st.button("Import timetables"):
    try:
        imported = load_timetables_cached(_bytes_of(timetable_file))
    except ValueError as e:
        st.error(str(e))
        st.stop()
    state.classes = merge_timetables(state.classes, imported)
    state.selected_subjects.update(default_selection(imported))
    st.success(f"Imported {len(imported)} classes.")

with st.form("weeks"):
    d1, d2 = st.columns(2)
    start = d1.date_input("Exam period start", date.today())
    end = d2.date_input("Exam period end", date.today() + timedelta(weeks=8))
    if st.form_submit_button("Set exam period"):
        state.weeks = weeks_between(start, end)

if not state.classes or not state.weeks:
    st.info("Import timetables and set an exam period to begin.")
    st.stop()

with st.expander("Weeks", expanded=False):
    for week in state.weeks:
        label = f"{week_label(week)} {week.year} ({week.week_type})"
        if st.checkbox(f"Block {label}", value=week.is_blocked, key=f"wk_{week.id}") != week.is_blocked:
            state.weeks = toggle_week_block(state.weeks, week.id)
        if st.button(f"Switch {label} to {'B' if week.week_type == 'A' else 'A'}", key=f"wt_{week.id}"):
            state.weeks = toggle_week_type(state.weeks, week.id)
            st.rerun()

with st.expander("Timetables", expanded=False):
    for t in state.classes:
        st.markdown(f"**{t.class_name}**")
        cols = st.columns(len(WEEKDAYS))
        for col, day in zip(cols, WEEKDAYS):
            col.caption(day.value)
            for i, subject in enumerate(t.subjects_on(day)):
                if col.button(f"✕ {subject}", key=f"rm_{t.class_name}_{day.value}_{i}"):
                    state.classes = remove_subject(state.classes, t.class_name, day, subject)
                    st.rerun()

with st.expander("Subjects with exams", expanded=False):
    for t in state.classes:
        state.selected_subjects[t.class_name] = st.multiselect(
            t.class_name, t.all_subjects(),
            default=[s for s in state.selected_subjects.get(t.class_name, []) if s in t.all_subjects()],
            key=f"sel_{t.class_name}",
        )

# ---------------------------------------------------------------------
# Algorithm
# ---------------------------------------------------------------------
st.subheader("Placement")
a1, a2, a3, a4 = st.columns(4)
max_per_week = a1.number_input("Max exams per class and week", 1, 5, 2)
seed = a2.number_input("Seed (0 = random)", 0, 1_000_000, 0)
rng = random.Random(int(seed) or None)

if a3.button("Distribute (fresh)"):
    t0 = time.perf_counter()
    state.exams = distribute_exams(state.classes, state.weeks, state.blocked_days, state.selected_subjects,
                                   state.blocked_class_days, rng=rng, max_per_week=int(max_per_week))
    st.caption(f"Distribution time: {time.perf_counter() - t0:.3f}s")
if a4.button("Auto-fix (keep pins)"):
    state.exams = auto_fix(state.exams, state.classes, state.weeks, state.blocked_days,
                           state.blocked_class_days, rng=rng, max_per_week=int(max_per_week))

if not state.exams:
    st.stop()

# ---------------------------------------------------------------------
# Manual edits
# ---------------------------------------------------------------------
by_class = {t.class_name: t for t in state.classes}
weeks_by_label = {f"{week_label(w)} {w.year}": w for w in state.weeks}
exam_labels = {f"{e.class_name} · {e.subject}": e for e in state.exams}

with st.form("move"):
    m1, m2, m3 = st.columns(3)
    picked = m1.selectbox("Exam", list(exam_labels))
    week_key = m2.selectbox("Week", ["(unassigned)", *weeks_by_label])
    day_name = m3.selectbox("Day", [d.value for d in WEEKDAYS])
    b1, b2, b3 = st.columns(3)
    do_check = b1.form_submit_button("Check")
    do_move = b2.form_submit_button("Move")
    do_pin = b3.form_submit_button("Toggle pin")

exam = exam_labels[picked]
if week_key == "(unassigned)":
    target = (None, None)
else:
    target = (weeks_by_label[week_key].id, Weekday(day_name))
if do_check or do_move:
    if target[0] is not None:
        check = validate_move(exam, target[0], target[1], state.exams, by_class.get(exam.class_name),
                              state.blocked_days, state.blocked_class_days, int(max_per_week))
        if check.valid:
            st.success("Slot is free.")
        else:
            st.warning(check.reason)
    if do_move:
        state.exams = move_exam(state.exams, exam.id, *target)
if do_pin:
    state.exams = toggle_pin(state.exams, exam.id)

with st.form("block"):
    k1, k2, k3 = st.columns(3)
    cls = k1.selectbox("Class", list(by_class))
    bweek = k2.selectbox("Week", list(weeks_by_label), key="block_week")
    bday = k3.selectbox("Day", [d.value for d in WEEKDAYS], key="block_day")
    g1, g2 = st.columns(2)
    if g1.form_submit_button("Toggle class block"):
        state.blocked_class_days = toggle_class_day_block(state.blocked_class_days, cls,
                                                          weeks_by_label[bweek].id, Weekday(bday))
    if g2.form_submit_button("Toggle block for all classes"):
        state.blocked_days = toggle_day_block(state.blocked_days, weeks_by_label[bweek].id, Weekday(bday))

# ---------------------------------------------------------------------
# UI Output
# ---------------------------------------------------------------------
st.subheader("Summary")
st.text(summary(state.exams, state.classes, state.weeks, state.blocked_days,
                state.blocked_class_days, int(max_per_week)))

frame = exams_frame(state.exams, state.weeks)
overview = frame.assign(slot=frame['date'].astype(str).where(frame['date'].notna(), '–'))
st.dataframe(overview.pivot_table(index='subject', columns='class', values='slot', aggfunc='first'),
             use_container_width=True)
st.dataframe(frame.drop(columns=['exam_id']), use_container_width=True)

# ---------------------------------------------------------------------
# Downloads
# ---------------------------------------------------------------------
with st.expander("PDF settings"):
    title = st.text_input("Title", "Klausurplanung")
    makeup = st.text_input("Make-up exam info", "")
    grades = st.text_input("Grades due", "")

pdf_buf = io.BytesIO()
export_to_pdf(state, pdf_buf, PdfSettings(title=title, makeup_exam_info=makeup or None,
                                          grades_due_date=grades or None))
st.download_button("Download klausurplan.json", json.dumps(state_to_dict(state), indent=2, ensure_ascii=False),
                   file_name="klausurplan.json", mime="application/json")
st.download_button("Download klausurplan.csv", frame.to_csv(index=False), file_name="klausurplan.csv",
                   mime="text/csv")
st.download_button("Download klausurplan.pdf", pdf_buf.getvalue(), file_name="klausurplan_uebersicht.pdf",
                   mime="application/pdf")
