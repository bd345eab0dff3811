"""
PDF overview export.

One landscape page (or more, if it overflows) with a subject x class matrix:
each cell shows the exam date and calendar week, tinted per week so exams of
the same week are easy to spot across classes.
"""

from typing import Dict, List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .dates import exam_date, week_label
from .io_utils import PlannerState
from .models import Exam, PdfSettings, Week

WEEK_COLORS = [
    colors.HexColor('#FCA5A5'),
    colors.HexColor('#FDBA74'),
    colors.HexColor('#FDE047'),
    colors.HexColor('#86EFAC'),
    colors.HexColor('#93C5FD'),
    colors.HexColor('#C4B5FD'),
    colors.HexColor('#F9A8D4'),
    colors.HexColor('#E5E7EB'),
]
NO_EXAM_COLOR = colors.Color(220 / 255, 220 / 255, 220 / 255)
NO_EXAM_TEXT = 'Keine\nKlausur'


def week_color(week: Week):
    return WEEK_COLORS[week.week_number % len(WEEK_COLORS)]


def build_matrix(state: PlannerState, settings: PdfSettings) -> Tuple[List[List[str]], List[tuple]]:
    """Table rows plus the per-cell style commands that go with them."""
    class_names = sorted(t.class_name for t in state.classes)
    taught = {t.class_name: set(t.all_subjects()) for t in state.classes}
    subjects = sorted({e.subject for e in state.exams})
    weeks: Dict[str, Week] = {w.id: w for w in state.weeks}
    exam_at: Dict[Tuple[str, str], Exam] = {}
    for e in state.exams:
        exam_at.setdefault((e.class_name, e.subject), e)

    data: List[List[str]] = [['Fach', *class_names]]
    cell_styles: List[tuple] = []
    for r, subject in enumerate(subjects, start=1):
        row = [subject]
        for c, class_name in enumerate(class_names, start=1):
            exam: Optional[Exam] = exam_at.get((class_name, subject))
            week = weeks.get(exam.assigned_week_id) if exam and exam.assigned_week_id else None
            if week is not None and exam.assigned_day is not None:
                row.append(f"{exam_date(week, exam.assigned_day):%d.%m.}\n({week_label(week)})")
                cell_styles.append(('BACKGROUND', (c, r), (c, r), week_color(week)))
            elif subject in taught.get(class_name, ()):
                row.append(NO_EXAM_TEXT)
                cell_styles.append(('BACKGROUND', (c, r), (c, r), NO_EXAM_COLOR))
                cell_styles.append(('FONTSIZE', (c, r), (c, r), 8))
            else:
                row.append('')
        data.append(row)

    for label, value in (('Nachschreibetermin', settings.makeup_exam_info),
                         ('Noten eintragen', settings.grades_due_date)):
        if value:
            data.append([label, *([value] * len(class_names))])
    return data, cell_styles


def export_to_pdf(state: PlannerState, target, settings: Optional[PdfSettings] = None):
    """Write the overview to `target` (a filename or a binary file object)."""
    settings = settings or PdfSettings()
    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(target, pagesize=landscape(A4))
    elements = [Paragraph(settings.title, styles['Title']), Spacer(1, 12)]

    data, cell_styles = build_matrix(state, settings)
    if len(data) > 1:
        table = Table(data, repeatRows=1)
        table.setStyle(TableStyle([
            ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTNAME', (0, 1), (0, -1), 'Helvetica-Bold'),
            ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
            ('ALIGN', (1, 0), (-1, -1), 'CENTER'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            *cell_styles,
        ]))
        elements.append(table)
    else:
        elements.append(Paragraph('No exams planned yet.', styles['Normal']))

    elements.append(Spacer(1, 10))
    for note in settings.footnotes:
        elements.append(Paragraph(note, styles['Italic']))
    doc.build(elements)
