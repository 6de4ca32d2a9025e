# reportcards/services/report_data.py
"""
Builds ReportCardData from MongoDB documents.

The build_* functions are pure and take raw documents; the fetch_* functions
run the queries and hand the results to them.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError
from pymongo import DESCENDING

from reportcards.core.config import CONFIG
from reportcards.core.database import (
    examinations,
    grade_scales,
    report_card_templates,
    report_cards,
    schools,
    student_attendance,
    student_exam_summary,
    student_subject_marks,
    students,
    term_co_scholastic,
)
from reportcards.core.logger import get_logger
from reportcards.grading.calculator import calculate_percentage, get_grade_from_marks, get_pass_status
from reportcards.grading.scales import DEFAULT_GRADE_SCALES
from reportcards.models.report_card import (
    Attendance,
    CoScholasticEntry,
    ExamInfo,
    ExamListItem,
    ExamMarksData,
    GradeScale,
    MultiExamSubjectMarks,
    ReportCardData,
    ReportSummary,
    SchoolInfo,
    StudentInfo,
    SubjectMarks,
    SubjectRef,
)

logger = get_logger("report_data")

Doc = Dict[str, Any]


def _num(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def format_result_date(today: dt.date) -> str:
    # en-IN short form, e.g. 19/10/2026
    return today.strftime("%d/%m/%Y")


def academic_year_window(academic_year: Optional[str], today: Optional[dt.date] = None) -> Tuple[str, str]:
    """'2025-26' -> ('2025-04-01', '2026-03-31'); falls back to the current year."""
    today = today or dt.date.today()
    start_year = today.year
    if academic_year:
        head = str(academic_year).split("-")[0].strip()
        if head.isdigit():
            start_year = int(head)
    return f"{start_year}-04-01", f"{start_year + 1}-03-31"


def summarize_attendance(rows: Sequence[Doc]) -> Optional[Attendance]:
    if not rows:
        return None
    total = len(rows)
    present = sum(1 for r in rows if str(r.get("status") or "").lower() == "present")
    return Attendance(present=present, total=total, percentage=calculate_percentage(present, total))


def grade_scales_or_default(scale_docs: Sequence[Doc]) -> List[GradeScale]:
    if scale_docs:
        return [GradeScale.model_validate(d) for d in scale_docs]
    return [GradeScale.model_validate(d) for d in DEFAULT_GRADE_SCALES]


def school_info(doc: Doc) -> SchoolInfo:
    return SchoolInfo(
        school_name=doc.get("school_name") or "",
        school_code=doc.get("school_code") or "",
        affiliation=doc.get("affiliation"),
        school_email=doc.get("school_email"),
        school_phone=doc.get("school_phone"),
        school_address=doc.get("school_address"),
        logo_url=doc.get("logo_url"),
        right_logo_url=doc.get("right_logo_url"),
        principal_name=doc.get("principal_name"),
        instructions=doc.get("instructions"),
        sub_title=doc.get("sub_title"),
    )


def student_info(doc: Doc) -> StudentInfo:
    return StudentInfo(
        student_name=doc.get("student_name") or "",
        admission_no=doc.get("admission_no") or "",
        class_name=doc.get("class") or "",
        section=doc.get("section") or "",
        father_name=doc.get("father_name"),
        mother_name=doc.get("mother_name"),
        address=doc.get("address"),
        student_contact=doc.get("student_contact") or doc.get("phone") or doc.get("mobile"),
        roll_number=doc.get("roll_number"),
    )


def _exam_name(doc: Doc) -> str:
    return doc.get("exam_name") or doc.get("name") or ""


def _promoted_to(student: Doc) -> Optional[str]:
    if not student.get("class"):
        return None
    return f"{student['class']}-{student.get('section') or 'A'}"


def _co_scholastic(rows: Sequence[Doc]) -> Optional[List[CoScholasticEntry]]:
    if not rows:
        return None
    first = rows[0]
    return [
        CoScholasticEntry(
            name="Work Education or Pre Vocational Education",
            term1_grade=first.get("discipline_grade"),
            term2_grade=first.get("work_habits_grade"),
        ),
        CoScholasticEntry(name="Art Education"),
        CoScholasticEntry(name="Health & Physical Education"),
    ]


def build_report_card_data(
    school: Doc,
    student: Doc,
    exam: Doc,
    marks: Sequence[Doc],
    summary: Optional[Doc],
    scale_docs: Sequence[Doc],
    attendance_rows: Sequence[Doc],
    co_scholastic_rows: Sequence[Doc],
    result_date: str,
) -> ReportCardData:
    """Single-exam report card from raw documents."""
    rows = [
        SubjectMarks(
            subject=SubjectRef(name=m.get("subject_name") or "N/A"),
            max_marks=_num(m.get("max_marks")) or 0,
            marks_obtained=_num(m.get("marks_obtained")),
            percentage=_num(m.get("percentage")),
            grade=m.get("grade"),
            remarks=m.get("remarks"),
        )
        for m in marks
    ]

    total_obtained = (summary or {}).get("total_marks")
    if total_obtained is None:
        total_obtained = sum(r.marks_obtained or 0 for r in rows)
    total_max = (summary or {}).get("total_max_marks")
    if total_max is None:
        total_max = sum(r.max_marks for r in rows)
    overall_pct = calculate_percentage(total_obtained, total_max)

    return ReportCardData(
        school=school_info(school),
        student=student_info(student),
        exam=ExamInfo(
            exam_name=_exam_name(exam),
            academic_year=exam.get("academic_year") or "",
            result_date=result_date,
        ),
        marks=rows,
        summary=ReportSummary(
            total_marks=summary.get("total_marks"),
            total_max_marks=summary.get("total_max_marks"),
            percentage=summary.get("percentage"),
            grade=summary.get("grade"),
        ) if summary else None,
        attendance=summarize_attendance(attendance_rows),
        co_scholastic=_co_scholastic(co_scholastic_rows),
        grade_scales=grade_scales_or_default(scale_docs),
        result=get_pass_status(overall_pct, CONFIG.REPORT_CARD_PASS_THRESHOLD),
        promoted_to=_promoted_to(student),
    )


def build_multi_exam_report_card_data(
    school: Doc,
    student: Doc,
    exams: Sequence[Doc],
    marks: Sequence[Doc],
    scale_docs: Sequence[Doc],
    attendance_rows: Sequence[Doc],
    result_date: str,
) -> ReportCardData:
    """
    Term-wise report card: marks grouped by subject, one column pair per exam
    in `exams` order. Exams a subject has no mark for are filled with
    null marks and max 0.
    """
    scales = grade_scales_or_default(scale_docs)
    exam_ids = [e["exam_id"] for e in exams]
    exam_names = {e["exam_id"]: _exam_name(e) or "Exam" for e in exams}

    by_subject: Dict[str, Dict[str, Any]] = {}
    for m in marks:
        exam_id = m.get("exam_id")
        if exam_id not in exam_names:
            continue
        name = m.get("subject_name") or "N/A"
        key = m.get("subject_id") or name
        max_marks = _num(m.get("max_marks")) or 0
        obtained = _num(m.get("marks_obtained"))

        entry = by_subject.setdefault(key, {"name": name, "exams": {}, "max": 0.0, "obtained": None})
        fields = dict(
            exam_id=exam_id,
            exam_name=exam_names[exam_id],
            marks_obtained=obtained,
            max_marks=max_marks,
            grade=get_grade_from_marks(scales, obtained, max_marks) if obtained is not None else None,
        )
        try:
            entry["exams"][exam_id] = ExamMarksData(**fields)
        except ValidationError as e:
            # render stored marks as recorded
            logger.warning("Out-of-range mark for %s in %s kept as stored: %s", name, exam_id, e.errors()[0]["msg"])
            entry["exams"][exam_id] = ExamMarksData.model_construct(**fields)
        entry["max"] += max_marks
        if obtained is not None:
            entry["obtained"] = (entry["obtained"] or 0) + obtained

    multi: List[MultiExamSubjectMarks] = []
    for entry in by_subject.values():
        overall_obtained = entry["obtained"]
        multi.append(
            MultiExamSubjectMarks(
                subject=SubjectRef(name=entry["name"]),
                exams=[
                    entry["exams"].get(eid)
                    or ExamMarksData(exam_id=eid, exam_name=exam_names[eid], marks_obtained=None, max_marks=0)
                    for eid in exam_ids
                ],
                overall_max_marks=entry["max"],
                overall_marks_obtained=overall_obtained,
                overall_grade=get_grade_from_marks(scales, overall_obtained or 0, entry["max"]),
            )
        )

    # flat rows keep the derived totals available to single-exam consumers
    flat = [
        SubjectMarks(
            subject=m.subject,
            max_marks=m.overall_max_marks,
            marks_obtained=m.overall_marks_obtained,
            grade=m.overall_grade,
        )
        for m in multi
    ]
    total_obtained = sum(r.marks_obtained or 0 for r in flat)
    total_max = sum(r.max_marks for r in flat)
    overall_pct = calculate_percentage(total_obtained, total_max)

    first = exams[0]
    combined_name = " + ".join(n for n in (exam_names[eid] for eid in exam_ids) if n) or "Combined Exam"
    return ReportCardData(
        school=school_info(school),
        student=student_info(student),
        exam=ExamInfo(
            exam_name=combined_name,
            academic_year=first.get("academic_year") or "",
            result_date=result_date,
        ),
        marks=flat,
        multi_exam_marks=multi,
        exams_list=[ExamListItem(id=eid, name=exam_names[eid]) for eid in exam_ids],
        summary=ReportSummary(
            total_marks=total_obtained,
            total_max_marks=total_max,
            percentage=overall_pct,
            grade=get_grade_from_marks(scales, total_obtained, total_max),
        ),
        attendance=summarize_attendance(attendance_rows),
        grade_scales=scales,
        result=get_pass_status(overall_pct, CONFIG.REPORT_CARD_PASS_THRESHOLD),
        promoted_to=_promoted_to(student),
    )


# ---------------- MongoDB access ----------------

_NO_ID = {"_id": 0}


def _active_grade_scales(school_code: str, academic_year: Optional[str]) -> List[Doc]:
    query = {
        "school_code": school_code,
        "is_active": True,
        "$or": [{"academic_year": None}, {"academic_year": academic_year or ""}],
    }
    cursor = grade_scales.find(query, _NO_ID).sort("display_order", DESCENDING)
    return list(cursor)


def _attendance_rows(school_code: str, student_id: str, academic_year: Optional[str]) -> List[Doc]:
    start, end = academic_year_window(academic_year)
    return list(
        student_attendance.find(
            {
                "school_code": school_code,
                "student_id": student_id,
                "date": {"$gte": start, "$lte": end},
            },
            {"_id": 0, "status": 1, "date": 1},
        )
    )


def _school_and_student(school_code: str, student_id: str) -> Tuple[Optional[Doc], Optional[Doc]]:
    school = schools.find_one({"school_code": school_code}, _NO_ID)
    student = students.find_one({"student_id": student_id, "school_code": school_code}, _NO_ID)
    return school, student


def fetch_report_card_data(school_code: str, student_id: str, exam_id: str) -> Optional[ReportCardData]:
    school, student = _school_and_student(school_code, student_id)
    exam = examinations.find_one({"exam_id": exam_id, "school_code": school_code}, _NO_ID)
    if not school or not student or not exam:
        logger.warning(
            "Report card data incomplete: school=%s student=%s exam=%s",
            bool(school), bool(student), bool(exam),
        )
        return None

    marks = list(
        student_subject_marks.find({"exam_id": exam_id, "student_id": student_id}, _NO_ID).sort("created_at", 1)
    )
    summary = student_exam_summary.find_one({"exam_id": exam_id, "student_id": student_id}, _NO_ID)
    scales = _active_grade_scales(school_code, exam.get("academic_year"))
    attendance = _attendance_rows(school_code, student_id, exam.get("academic_year"))
    co_rows = list(term_co_scholastic.find({"student_id": student_id}, _NO_ID).limit(5))

    return build_report_card_data(
        school, student, exam, marks, summary, scales, attendance, co_rows,
        result_date=format_result_date(dt.date.today()),
    )


def fetch_report_card_data_multi_exam(
    school_code: str, student_id: str, exam_ids: Sequence[str]
) -> Optional[ReportCardData]:
    if not exam_ids:
        return None
    if len(exam_ids) == 1:
        return fetch_report_card_data(school_code, student_id, exam_ids[0])

    school, student = _school_and_student(school_code, student_id)
    if not school or not student:
        return None

    exams = list(
        examinations.find({"exam_id": {"$in": list(exam_ids)}, "school_code": school_code}, _NO_ID).sort(
            "start_date", 1
        )
    )
    if not exams:
        return None

    marks = list(
        student_subject_marks.find({"exam_id": {"$in": list(exam_ids)}, "student_id": student_id}, _NO_ID).sort(
            [("exam_id", 1), ("created_at", 1)]
        )
    )
    academic_year = exams[0].get("academic_year")
    scales = _active_grade_scales(school_code, academic_year)
    attendance = _attendance_rows(school_code, student_id, academic_year)

    return build_multi_exam_report_card_data(
        school, student, exams, marks, scales, attendance,
        result_date=format_result_date(dt.date.today()),
    )


def load_template_config(school_code: str, template_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Explicit template first, else the newest active template for the school."""
    if template_id:
        doc = report_card_templates.find_one({"template_id": template_id}, _NO_ID)
    else:
        doc = report_card_templates.find_one(
            {"school_code": school_code, "is_active": True},
            _NO_ID,
            sort=[("created_at", DESCENDING)],
        )
    if not doc:
        logger.info("No report card template for school %s, using default styling", school_code)
        return None
    config = doc.get("config")
    if not isinstance(config, dict) or not config:
        logger.info("Template %s has an empty config, using default styling", doc.get("template_id"))
        return None
    logger.info("Using report card template %s", doc.get("name") or doc.get("template_id"))
    return config


def save_report_card(school_code: str, exam_id: str, student_id: str, data: ReportCardData, html: str) -> None:
    report_cards.update_one(
        {"school_code": school_code, "student_id": student_id, "exam_id": exam_id},
        {"$set": {
            "student_name": data.student.student_name,
            "admission_no": data.student.admission_no,
            "class_name": data.student.class_name,
            "section": data.student.section,
            "academic_year": data.exam.academic_year,
            "html_content": html,
            "updated_at": dt.datetime.now(dt.timezone.utc),
        }},
        upsert=True,
    )
