# reportcards/report/composer.py
"""
Report card HTML composer.

generate_report_card_html(data, template_config) turns an already-resolved
ReportCardData into a single print-ready HTML page. It performs no I/O and
reads no clock, so identical input always yields identical output. Every value
that comes from school/student records is escaped before it is embedded.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from markupsafe import escape
from pydantic import ValidationError

from reportcards.grading.calculator import (
    NO_GRADE,
    REPORT_CARD_PASS_THRESHOLD,
    calculate_percentage,
    get_grade_from_marks,
)
from reportcards.grading.scales import legend_order, normalize_grade_scales
from reportcards.models.report_card import (
    ExamMarksData,
    MultiExamSubjectMarks,
    ReportCardData,
    SubjectMarks,
)
from reportcards.report.errors import InvalidReportCardInput
from reportcards.report.formatting import fmt_number, fmt_percent
from reportcards.report.styles import build_stylesheet
from reportcards.report.template import (
    ReportCardTemplateConfig,
    ResolvedTemplate,
    coerce_template_config,
    resolve_template,
)

ABSENT_MARK = "AB"


@dataclass(frozen=True)
class DerivedSummary:
    total_obtained: float
    total_max: float
    percentage: float
    grade: str


def coerce_report_data(data: Union[ReportCardData, Dict[str, Any], None]) -> ReportCardData:
    """Fail fast on missing school/student/exam or malformed rows."""
    if isinstance(data, ReportCardData):
        return data
    if not isinstance(data, dict):
        raise InvalidReportCardInput("report card data must be a mapping with school, student and exam")
    missing = [k for k in ("school", "student", "exam") if data.get(k) is None]
    if missing:
        raise InvalidReportCardInput(f"report card data is missing: {', '.join(missing)}")
    try:
        return ReportCardData.model_validate(data)
    except ValidationError as e:
        raise InvalidReportCardInput(str(e)) from e


def is_absent(row: SubjectMarks) -> bool:
    return row.marks_obtained is None or str(row.remarks or "").strip().lower() == "absent"


def derive_summary(data: ReportCardData) -> DerivedSummary:
    """
    Precomputed summary values win field by field; anything missing is derived
    from the single-exam rows, with absent rows counting as 0.
    """
    summary = data.summary
    total_obtained = summary.total_marks if summary and summary.total_marks is not None else None
    total_max = summary.total_max_marks if summary and summary.total_max_marks is not None else None

    if total_obtained is None:
        total_obtained = sum(m.marks_obtained or 0 for m in data.marks)
    if total_max is None:
        total_max = sum(m.max_marks or 0 for m in data.marks)

    if summary and summary.percentage is not None:
        percentage = summary.percentage
    else:
        percentage = calculate_percentage(total_obtained, total_max)

    if summary and summary.grade:
        grade = summary.grade
    elif data.grade_scales:
        grade = get_grade_from_marks(data.grade_scales, total_obtained, total_max)
    else:
        grade = NO_GRADE

    return DerivedSummary(total_obtained, total_max, percentage, grade)


# ---------------- Header ----------------

def _logo(cls: str, url: str, alt: str) -> str:
    if url:
        return f'<div class="{cls}"><img src="{escape(url)}" alt="{alt}" /></div>'
    return f'<div class="{cls}">LOGO</div>'


def _header(t: ResolvedTemplate) -> str:
    code_line = f"School Code: {escape(t.school_code)}"
    if t.show_affiliation:
        code_line += f" | Affiliation No: {escape(t.affiliation)}"

    lines = [
        f'<div class="contact-info">{code_line}</div>',
        f'<div class="school-name">{escape(t.school_name)}</div>',
        f'<div class="subtitle">{escape(t.sub_title)}</div>',
    ]
    if t.show_affiliation:
        lines.append(f'<div class="contact-info">{escape(t.affiliation_board)}</div>')
    if t.school_address:
        lines.append(f'<div class="contact-info">{escape(t.school_address)}</div>')

    contact = []
    if t.show_email:
        contact.append(f"Email: {escape(t.school_email)}")
    if t.show_contact:
        contact.append(f"Phone: {escape(t.school_phone)}")
    if contact:
        lines.append(f'<div class="contact-info">{" | ".join(contact)}</div>')

    badge = escape(t.label("report_title"))
    if t.show_academic_session:
        badge = f"{badge} | {escape(t.academic_year)}"
    lines.append(f'<div class="session-badge">{badge}</div>')

    right = ""
    if t.show_right_logo:
        right = _logo("logo-right", t.right_logo, "Board Logo")

    return (
        '<div class="header-border"></div>\n'
        '<div class="header">\n'
        f'{_logo("logo-left", t.left_logo, "School Logo")}\n'
        '<div class="header-center">\n' + "\n".join(lines) + "\n</div>\n"
        f"{right}\n"
        "</div>"
    )


# ---------------- Sections ----------------

def _profile_values(data: ReportCardData) -> Dict[str, str]:
    s = data.student
    return {
        "student_name": s.student_name or "N/A",
        "class_section": f"{s.class_name or 'N/A'}-{s.section or 'A'}",
        "father_name": f"Mr. {s.father_name}" if s.father_name else "N/A",
        "mother_name": f"Mrs. {s.mother_name}" if s.mother_name else "N/A",
        "address": s.address or "N/A",
        "admission_no": s.admission_no or "N/A",
        "contact_no": s.student_contact or "N/A",
        "roll_number": s.roll_number or "N/A",
    }


def _profile_section(t: ResolvedTemplate, data: ReportCardData) -> str:
    values = _profile_values(data)
    items = "\n".join(
        f'<div class="profile-item"><span class="profile-label">{escape(t.label(key))}:</span> '
        f'<span class="profile-value">{escape(values[key])}</span></div>'
        for key in t.profile_fields
    )
    return (
        f'<div class="section-title">{escape(t.label("section_student_profile"))}</div>\n'
        f'<div class="profile-grid">\n{items}\n</div>'
    )


def _single_exam_row(t: ResolvedTemplate, index: int, row: SubjectMarks, data: ReportCardData) -> str:
    max_marks = row.max_marks or 0
    absent = is_absent(row)
    if absent:
        grade = row.grade or NO_GRADE
    else:
        grade = row.grade or (
            get_grade_from_marks(data.grade_scales, row.marks_obtained, max_marks)
            if data.grade_scales else NO_GRADE
        )

    cells = []
    if t.show_sno:
        cells.append(f'<td class="center">{index}</td>')
    cells.append(f"<td><strong>{escape(row.subject.name or 'N/A')}</strong></td>")
    if t.show_max_marks:
        cells.append(f'<td class="center">{fmt_number(max_marks)}</td>')
    obtained = ABSENT_MARK if absent else fmt_number(row.marks_obtained)
    cells.append(f'<td class="center"><strong>{obtained}</strong></td>')
    if t.show_percentage:
        if absent:
            pct = "-"
        else:
            pct = fmt_percent(calculate_percentage(row.marks_obtained, max_marks), t.round_percentage)
        cells.append(f'<td class="center">{pct}</td>')
    if t.show_grade:
        cells.append(f'<td class="center"><strong class="grade">{escape(grade)}</strong></td>')
    return "<tr>" + "".join(cells) + "</tr>"


def _single_exam_table(t: ResolvedTemplate, data: ReportCardData) -> str:
    headers = []
    if t.show_sno:
        headers.append('<th class="center" style="width: 60px;">S.No</th>')
    headers.append("<th>Subject</th>")
    if t.show_max_marks:
        headers.append('<th class="center" style="width: 100px;">Max Marks</th>')
    headers.append('<th class="center" style="width: 120px;">Marks Obtained</th>')
    if t.show_percentage:
        headers.append('<th class="center" style="width: 100px;">Percentage</th>')
    if t.show_grade:
        headers.append('<th class="center" style="width: 80px;">Grade</th>')

    rows = "\n".join(_single_exam_row(t, i, m, data) for i, m in enumerate(data.marks, start=1))
    return (
        '<table class="marks-table single-exam">\n'
        f"<thead><tr>{''.join(headers)}</tr></thead>\n"
        f"<tbody>\n{rows}\n</tbody>\n"
        "</table>"
    )


def _exam_cell(subject: MultiExamSubjectMarks, exam_id: str, position: int) -> Optional[ExamMarksData]:
    for entry in subject.exams:
        if entry.exam_id == exam_id:
            return entry
    if position < len(subject.exams):
        return subject.exams[position]
    return None


def _multi_exam_row(index: int, subject: MultiExamSubjectMarks, data: ReportCardData) -> str:
    cells = [
        f'<td class="center">{index}</td>',
        f"<td><strong>{escape(subject.subject.name or 'N/A')}</strong></td>",
    ]
    for position, exam in enumerate(data.exams_list):
        entry = _exam_cell(subject, exam.id, position)
        if entry is None or entry.marks_obtained is None:
            marks, grade = "-", "-"
        else:
            marks, grade = fmt_number(entry.marks_obtained), entry.grade or NO_GRADE
        cells.append(f'<td class="center">{marks}</td>')
        cells.append(f'<td class="center"><strong class="grade">{escape(grade)}</strong></td>')

    cells.append(f'<td class="center"><strong>{fmt_number(subject.overall_marks_obtained)}</strong></td>')
    cells.append(
        f'<td class="center"><strong class="grade">{escape(subject.overall_grade or NO_GRADE)}</strong></td>'
    )
    return "<tr>" + "".join(cells) + "</tr>"


def _multi_exam_table(t: ResolvedTemplate, data: ReportCardData) -> str:
    exams = data.exams_list
    top = [
        '<th rowspan="2" class="center" style="width: 30px;">S.No</th>',
        '<th rowspan="2">Subject</th>',
    ]
    top += [f'<th colspan="2" class="center">{escape(e.name)}</th>' for e in exams]
    top.append('<th colspan="2" class="center overall">Overall</th>')

    sub = ['<th class="center">Marks</th><th class="center">Grade</th>' for _ in exams]
    sub.append('<th class="center overall">Total</th><th class="center overall">Grade</th>')

    rows = "\n".join(
        _multi_exam_row(i, subject, data) for i, subject in enumerate(data.multi_exam_marks, start=1)
    )
    return (
        '<table class="marks-table multi-exam">\n'
        "<thead>\n"
        f"<tr>{''.join(top)}</tr>\n"
        f"<tr>{''.join(sub)}</tr>\n"
        "</thead>\n"
        f"<tbody>\n{rows}\n</tbody>\n"
        "</table>"
    )


def _summary_box(t: ResolvedTemplate, data: ReportCardData, summary: DerivedSummary) -> str:
    items = []
    attendance = data.attendance
    if t.show_attendance and attendance is not None:
        fraction = f'<div class="summary-value">{attendance.present}/{attendance.total}</div>'
        pct = f'<div class="summary-label">{fmt_percent(attendance.percentage)}</div>'
        if t.attendance_display == "fraction":
            body = fraction
        elif t.attendance_display == "percentage":
            body = f'<div class="summary-value">{fmt_percent(attendance.percentage)}</div>'
        else:
            body = fraction + pct
        items.append(
            '<div class="summary-item attendance">'
            f'<div class="summary-label">{escape(t.label("attendance"))}</div>{body}</div>'
        )

    if t.show_total or t.show_overall_percentage:
        body = ""
        if t.show_total:
            body += (
                f'<div class="summary-value">'
                f"{fmt_number(summary.total_obtained)}/{fmt_number(summary.total_max)}</div>"
            )
        if t.show_overall_percentage:
            body += f'<div class="summary-label">{fmt_percent(summary.percentage)}</div>'
        items.append(
            '<div class="summary-item">'
            f'<div class="summary-label">{escape(t.label("grand_total"))}</div>{body}</div>'
        )

    if t.show_overall_grade:
        items.append(
            '<div class="summary-item">'
            f'<div class="summary-label">{escape(t.label("overall_grade"))}</div>'
            f'<div class="summary-value">{escape(summary.grade)}</div></div>'
        )

    if not items:
        return ""
    return '<div class="summary-box">\n' + "\n".join(items) + "\n</div>"


def _marks_section(t: ResolvedTemplate, data: ReportCardData, summary: DerivedSummary) -> str:
    part = escape(t.label("section_scholastic"))
    if t.show_exam_name:
        part = f"{part} ({escape(t.exam_name)})"
    table = _multi_exam_table(t, data) if data.is_multi_exam else _single_exam_table(t, data)
    parts = [
        f'<div class="section-title">{escape(t.label("section_academic_performance"))}</div>',
        f'<div class="part-title">{part}</div>',
        table,
        _summary_box(t, data, summary),
    ]
    return "\n".join(p for p in parts if p)


def _co_scholastic_section(t: ResolvedTemplate, data: ReportCardData) -> str:
    rows = "\n".join(
        "<tr>"
        f"<td>{escape(c.name)}</td>"
        f'<td class="center">{escape(c.term1_grade or "-")}</td>'
        f'<td class="center">{escape(c.term2_grade or "-")}</td>'
        "</tr>"
        for c in data.co_scholastic
    )
    return (
        f'<div class="part-title">{escape(t.label("section_co_scholastic"))}</div>\n'
        '<table class="co-scholastic">\n'
        "<thead><tr><th>Co-Scholastic Area</th>"
        '<th class="center" style="width: 120px;">Term-1 Grade</th>'
        '<th class="center" style="width: 120px;">Term-2 Grade</th></tr></thead>\n'
        f"<tbody>\n{rows}\n</tbody>\n"
        "</table>"
    )


def _remarks_section(t: ResolvedTemplate) -> str:
    return (
        '<div class="remarks-box">\n'
        f'<div class="remarks-label">{escape(t.label("section_remarks"))}</div>\n'
        f'<div class="remarks-content">{escape(t.remarks)}</div>\n'
        '<div class="handwritten">'
        "<div class=\"handwritten-title\">Teacher's Handwritten Remarks:</div>"
        '<div class="handwritten-line"></div><div class="handwritten-line"></div>'
        "</div>\n"
        "</div>"
    )


def _result_section(
    t: ResolvedTemplate, data: ReportCardData, summary: DerivedSummary, pass_threshold: float
) -> str:
    passed = summary.percentage >= pass_threshold
    items = []
    if t.show_pass_fail:
        items.append(
            f'<div class="result-item"><span class="result-label">{escape(t.label("result"))}:</span> '
            f'<span class="result-value pass-fail">{"&#10003; PASS" if passed else "&#10007; FAIL"}</span></div>'
        )
    if t.show_rank:
        rank = "-" if data.rank is None or data.rank == "" else str(data.rank)
        items.append(
            f'<div class="result-item"><span class="result-label">{escape(t.label("rank"))}:</span> '
            f'<span class="result-value">{escape(rank)}</span></div>'
        )
    items.append(
        f'<div class="result-item"><span class="result-label">{escape(t.label("promoted_to"))}:</span> '
        f'<span class="result-value">{escape(t.promoted_to)}</span></div>'
    )
    if t.show_result_date:
        items.append(
            f'<div class="result-item"><span class="result-label">{escape(t.label("result_date"))}:</span> '
            f'<span class="result-value">{escape(data.exam.result_date or "-")}</span></div>'
        )
    css = "result-box" if passed else "result-box fail"
    return f'<div class="{css}">\n' + "\n".join(items) + "\n</div>"


def _signature(label: str, name: str = "") -> str:
    name_html = f'<div class="sig-name">{escape(name)}</div>' if name else ""
    return (
        '<div class="sig-block"><div class="sig-line"></div>'
        f'{name_html}<div class="sig-label">{escape(label)}</div></div>'
    )


def _signatures_section(t: ResolvedTemplate) -> str:
    blocks = []
    if t.show_class_teacher_signature:
        blocks.append(_signature(t.label("class_teacher")))
    if t.show_principal_signature:
        blocks.append(_signature(t.label("principal"), t.principal_name))
    blocks.append(_signature(t.label("parent")))
    return '<div class="signatures">\n' + "\n".join(blocks) + "\n</div>"


def _grading_scale_section(t: ResolvedTemplate, data: ReportCardData) -> str:
    items = "\n".join(
        '<div class="grade-item">'
        f'<div class="grade-letter">{escape(s.grade)}</div>'
        f'<div class="grade-range">{fmt_number(s.lower) if s.has_lower else "-"}'
        f'-{fmt_number(s.upper) if s.has_upper else "-"}</div>'
        "</div>"
        for s in legend_order(normalize_grade_scales(data.grade_scales))
    )
    return (
        '<div class="grade-scale">\n'
        f'<div class="grade-scale-title">{escape(t.label("section_grading_scale"))}</div>\n'
        f'<div class="grade-scale-grid">\n{items}\n</div>\n'
        "</div>"
    )


def _instructions_section(t: ResolvedTemplate) -> str:
    return (
        '<div class="instructions">\n'
        f'<strong>{escape(t.label("section_instructions"))}</strong>\n'
        f'<div class="instructions-text">{escape(t.instructions)}</div>\n'
        "</div>"
    )


def render_sections(
    data: ReportCardData,
    t: ResolvedTemplate,
    pass_threshold: float = REPORT_CARD_PASS_THRESHOLD,
) -> List[Tuple[str, str]]:
    """
    Visible body sections as (name, markup) in page order. The order is fixed;
    result and signatures are always present.
    """
    summary = derive_summary(data)
    sections: List[Tuple[str, str]] = []
    if t.show_student_profile:
        sections.append(("student_profile", _profile_section(t, data)))
    if t.show_marks_table:
        sections.append(("marks_table", _marks_section(t, data, summary)))
    if t.show_co_scholastic and data.co_scholastic:
        sections.append(("co_scholastic", _co_scholastic_section(t, data)))
    if t.show_remarks:
        sections.append(("remarks", _remarks_section(t)))
    sections.append(("result", _result_section(t, data, summary, pass_threshold)))
    sections.append(("signatures", _signatures_section(t)))
    if t.show_grading_scale and data.grade_scales:
        sections.append(("grading_scale", _grading_scale_section(t, data)))
    if t.show_instructions:
        sections.append(("instructions", _instructions_section(t)))
    return sections


def generate_report_card_html(
    data: Union[ReportCardData, Dict[str, Any]],
    template_config: Union[ReportCardTemplateConfig, Dict[str, Any], None] = None,
    *,
    pass_threshold: float = REPORT_CARD_PASS_THRESHOLD,
) -> str:
    report = coerce_report_data(data)
    try:
        config = coerce_template_config(template_config)
    except ValidationError as e:
        raise InvalidReportCardInput(f"invalid template config: {e}") from e

    t = resolve_template(config, report)
    body = "\n".join(markup for _, markup in render_sections(report, t, pass_threshold))
    watermark = (
        f'<div class="watermark"><img src="{escape(t.left_logo)}" alt="" /></div>\n'
        if t.show_watermark else ""
    )
    title = f"Report Card - {escape(report.student.student_name or 'N/A')} - {escape(t.academic_year)}"

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title}</title>
<style>{build_stylesheet(t)}</style>
</head>
<body>
<div class="report-card">
{watermark}{_header(t)}
<div class="content">
{body}
</div>
</div>
</body>
</html>
"""
