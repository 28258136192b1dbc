"""
PDF export of a generated exam.

Questions are laid out in questionNumber order; MCQ options are lettered
A, B, C and on. Answers are included only when the user has them switched on.
"""

import logging
import re
from io import BytesIO
from typing import List

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import KeepTogether, Paragraph, SimpleDocTemplate, Spacer

from exaprep.errors import ExportError
from exaprep.models import Exam, Question, QuestionType

log = logging.getLogger(__name__)


def _escape_html(text: str) -> str:
    """Escape characters ReportLab's paragraph parser would read as markup."""
    return (text or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def get_custom_styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name='ExamTitle',
        parent=styles['Heading1'],
        fontSize=16,
        alignment=TA_CENTER,
        spaceAfter=4,
        fontName='Helvetica-Bold',
    ))
    styles.add(ParagraphStyle(
        name='ExamDetails',
        parent=styles['Normal'],
        fontSize=9,
        textColor=colors.grey,
        alignment=TA_CENTER,
        spaceAfter=12,
    ))
    styles.add(ParagraphStyle(
        name='QuestionText',
        parent=styles['Normal'],
        fontSize=11,
        alignment=TA_JUSTIFY,
        spaceAfter=6,
        leading=14,
    ))
    styles.add(ParagraphStyle(
        name='MCQOption',
        parent=styles['Normal'],
        fontSize=10,
        alignment=TA_LEFT,
        leftIndent=20,
        spaceAfter=3,
    ))
    styles.add(ParagraphStyle(
        name='AnswerText',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.HexColor("#1a7a1a"),
        leftIndent=10,
        spaceBefore=4,
        leading=13,
    ))
    return styles


def _question_block(q: Question, styles, show_answers: bool) -> List:
    block = [Paragraph(
        f"<b>{q.question_number}.</b> {_escape_html(q.question_text)}",
        styles['QuestionText'],
    )]
    if q.question_type is QuestionType.MCQ and q.options:
        for letter, option in q.lettered_options():
            block.append(Paragraph(f"{letter}. {_escape_html(option)}", styles['MCQOption']))
    if show_answers:
        block.append(Paragraph(
            f"<b>Answer:</b> {_escape_html(q.correct_answer)}",
            styles['AnswerText'],
        ))
    block.append(Spacer(1, 0.3*cm))
    return block


def export_exam_pdf(exam: Exam, show_answers: bool = False) -> bytes:
    """Render `exam` to PDF bytes. Raises ExportError if ReportLab fails."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=2*cm,
        leftMargin=2*cm,
        topMargin=2*cm,
        bottomMargin=2*cm,
        title=exam.title,
    )
    styles = get_custom_styles()
    story = [
        Paragraph(_escape_html(exam.title), styles['ExamTitle']),
        Paragraph(
            f"Created {exam.created_at.strftime('%Y-%m-%d %H:%M')} · {len(exam.questions)} questions",
            styles['ExamDetails'],
        ),
    ]
    for q in exam.sorted_questions():
        story.append(KeepTogether(_question_block(q, styles, show_answers)))

    try:
        doc.build(story)
    except Exception as exc:
        log.error("PDF export failed for exam %s: %s", exam.id, exc)
        raise ExportError("An error occurred while generating the PDF.") from exc
    return buffer.getvalue()


def export_filename(exam: Exam) -> str:
    return re.sub(r"\s+", "_", exam.title.strip()) + ".pdf"
