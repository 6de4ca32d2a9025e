from typing import Any, Dict, List, Optional, Sequence

from reportcards.core.config import CONFIG
from reportcards.core.database import examinations, student_subject_marks, students
from reportcards.grading.calculator import (
    calculate_percentage,
    get_grade_color,
    get_grade_from_percentage,
    get_pass_status,
    get_pass_status_color,
)
from reportcards.models.marks_schemas import ExamMarks, MarkEntry, StudentMarksResponse, StudentProfile


def build_student_marks(
    student_doc: Dict[str, Any],
    marks: Sequence[Dict[str, Any]],
    exam_names: Optional[Dict[str, str]] = None,
    pass_threshold: Optional[float] = None,
) -> StudentMarksResponse:
    """
    Group a student's marks by exam and attach percentage, grade and pass
    status the same way the marks pages show them.
    """
    exam_names = exam_names or {}
    if pass_threshold is None:
        pass_threshold = CONFIG.UI_PASS_THRESHOLD

    groups: Dict[str, Dict[str, Any]] = {}
    for doc in marks:
        exam_id = doc.get("exam_id") or ""
        max_m = float(doc.get("max_marks") or 0)
        obtained = doc.get("marks_obtained")
        obtained = float(obtained) if obtained is not None else None
        absent = obtained is None or str(doc.get("remarks") or "").lower() == "absent"

        pct = 0.0 if absent else calculate_percentage(obtained, max_m)
        grade = "-" if absent else get_grade_from_percentage(pct)

        g = groups.setdefault(exam_id, {"marks": [], "total_obtained": 0.0, "total_max": 0.0})
        g["marks"].append(MarkEntry(
            subject=doc.get("subject_name") or "N/A",
            marks_obtained=obtained,
            max_marks=max_m,
            percentage=round(pct, 2),
            grade=grade,
            grade_color=get_grade_color(grade),
            is_absent=absent,
        ))
        g["total_obtained"] += obtained or 0
        g["total_max"] += max_m

    exams: List[ExamMarks] = []
    for exam_id, g in groups.items():
        pct = calculate_percentage(g["total_obtained"], g["total_max"])
        status = get_pass_status(pct, pass_threshold)
        exams.append(ExamMarks(
            exam_id=exam_id,
            exam_name=exam_names.get(exam_id) or exam_id,
            marks=g["marks"],
            total_marks=g["total_obtained"],
            total_max_marks=g["total_max"],
            percentage=round(pct, 2),
            grade=get_grade_from_percentage(pct),
            pass_status=status,
            pass_status_color=get_pass_status_color(status),
        ))

    profile = StudentProfile(
        student_id=str(student_doc.get("student_id", "")),
        student_name=student_doc.get("student_name", "Unknown"),
        class_name=str(student_doc.get("class", "Unknown")),
        section=str(student_doc.get("section") or ""),
    )
    return StudentMarksResponse(profile=profile, exams=exams)


def fetch_student_marks(school_code: str, student_id: str) -> Optional[StudentMarksResponse]:
    student_doc = students.find_one({"student_id": student_id, "school_code": school_code}, {"_id": 0})
    if not student_doc:
        return None
    marks = list(
        student_subject_marks.find({"student_id": student_id, "school_code": school_code}, {"_id": 0}).sort(
            "created_at", 1
        )
    )
    exam_ids = list({m.get("exam_id") for m in marks})
    names = {
        e["exam_id"]: e.get("exam_name") or e.get("name") or e["exam_id"]
        for e in examinations.find({"exam_id": {"$in": exam_ids}}, {"_id": 0})
    }
    return build_student_marks(student_doc, marks, names)
