import asyncio
import logging
import pathlib
import sys
import streamlit as st

from typing import List

# Ensure the package imports without installing: PYTHONPATH=src
ROOT = pathlib.Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from exaprep.configuration import settings
from exaprep.encoding import ACCEPTED_EXTENSIONS
from exaprep.errors import ExportError, GenerationInProgressError
from exaprep.models import Difficulty, Exam, Question, QuestionType
from exaprep.services.export_service import export_exam_pdf, export_filename
from exaprep.services.generation_service import ExamGenerator
from exaprep.storage import SQLiteHistoryStore

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def _render_question(q: Question, show_answer: bool):
    st.markdown(f"**{q.question_number}. {q.question_text}**")
    st.caption(q.question_type.label)
    if q.question_type is QuestionType.MCQ and q.options:
        for letter, option in q.lettered_options():
            st.write(f"{letter}. {option}")
    if show_answer:
        st.success(f"Answer: {q.correct_answer}")


def _render_exam(exam: Exam):
    st.subheader(exam.title)
    st.caption(f"Created {exam.created_at.astimezone().strftime('%Y-%m-%d %H:%M')}")
    show_answers = st.toggle("Show answers", key=f"answers_{exam.id}")
    try:
        pdf = export_exam_pdf(exam, show_answers=show_answers)
    except ExportError as e:
        st.error(str(e))
    else:
        st.download_button("Export PDF", data=pdf, file_name=export_filename(exam), mime="application/pdf")
    st.divider()
    for q in exam.sorted_questions():
        _render_question(q, show_answers)


def _render_history(history: List[Exam]):
    st.sidebar.markdown("### History")
    if st.sidebar.button("New exam", key="new_exam"):
        st.session_state.current_exam = None
        st.session_state.generator.reset()
        st.session_state.uploader_key += 1
        st.rerun()
    if not history:
        st.sidebar.caption("Generated exams will appear here.")
        return
    current = st.session_state.current_exam
    for exam in history:
        label = f"{exam.title} · {exam.created_at.astimezone().strftime('%Y-%m-%d %H:%M')}"
        selected = current is not None and current.id == exam.id
        if st.sidebar.button(label, key=f"hist_{exam.id}", disabled=selected, use_container_width=True):
            st.session_state.current_exam = exam
            # viewing history clears the pending upload
            st.session_state.uploader_key += 1
            st.rerun()


st.set_page_config(page_title="ExaPrep AI", layout="wide")
st.title("📝 ExaPrep AI")

if "history_store" not in st.session_state:
    st.session_state.history_store = SQLiteHistoryStore()
if "generator" not in st.session_state:
    st.session_state.generator = ExamGenerator(history=st.session_state.history_store)
if "current_exam" not in st.session_state:
    st.session_state.current_exam = None
if "uploader_key" not in st.session_state:
    st.session_state.uploader_key = 0

generator: ExamGenerator = st.session_state.generator

config_col, exam_col = st.columns([1, 3])

with config_col:
    st.markdown("### Create New Exam")
    uploaded = st.file_uploader(
        "Course material",
        type=ACCEPTED_EXTENSIONS,
        key=f"upload_{st.session_state.uploader_key}",
    )
    if uploaded is not None:
        difficulty = st.selectbox(
            "Difficulty Level",
            list(Difficulty),
            index=list(Difficulty).index(Difficulty.MEDIUM),
            format_func=lambda d: d.value,
        )
        chosen_types = st.multiselect(
            "Question Types",
            list(QuestionType),
            default=[QuestionType.MCQ],
            format_func=lambda t: t.label,
        )
        count = st.slider(
            "Number of Questions",
            min_value=settings.min_questions,
            max_value=settings.max_questions,
            value=settings.default_questions,
        )
        if not chosen_types:
            st.warning("Select at least one question type.")
        run_clicked = st.button(
            "Generating..." if generator.is_generating else "Generate Exam",
            disabled=generator.is_generating or not chosen_types,
            type="primary",
            use_container_width=True,
        )
        if run_clicked:
            st.session_state.current_exam = None
            with exam_col:
                with st.spinner("Generating your exam..."):
                    try:
                        exam = asyncio.run(generator.generate(uploaded, difficulty, chosen_types, count))
                    except GenerationInProgressError as e:
                        st.warning(str(e))
                        exam = None
            if exam is not None:
                st.session_state.current_exam = exam

_render_history(st.session_state.history_store.load())

with exam_col:
    current = st.session_state.current_exam
    if generator.error and current is None:
        st.error(generator.error)
    elif current is not None:
        _render_exam(current)
    else:
        st.markdown("## Welcome to ExaPrep AI")
        st.write(
            "Upload your course material, choose your settings, and let our AI create "
            "a practice exam to help you ace your test."
        )
