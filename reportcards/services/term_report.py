# reportcards/services/term_report.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from pymongo.errors import PyMongoError

from reportcards.core.database import exam_term_mappings, student_subject_marks, subjects, term_co_scholastic
from reportcards.core.logger import get_logger
from reportcards.grading.calculator import calculate_percentage, get_grade_from_percentage
from reportcards.models.term_schemas import SubjectBreakup, TermCoScholastic, TermReport

logger = get_logger("term_report")

COUNTED_STATUSES = ["submitted", "approved"]


def parse_exam_weightages(exam_ids: str, weightages: str) -> Tuple[List[str], List[float]]:
    """
    Parse comma-separated exam ids and weightages. Both lists must be non-empty
    and the same length.
    """
    ids = [s.strip() for s in (exam_ids or "").split(",") if s.strip()]
    weights: List[float] = []
    for raw in (weightages or "").split(","):
        raw = raw.strip()
        if not raw:
            continue
        try:
            weights.append(float(raw))
        except ValueError:
            raise ValueError(f"weightage {raw!r} is not a number")
    if not ids or len(ids) != len(weights):
        raise ValueError("exam_ids and weightages (comma-separated, same length) are required")
    return ids, weights


def weighted_subject_breakup(
    marks: Sequence[Dict[str, Any]],
    exam_ids: Sequence[str],
    weightages: Sequence[float],
    subject_names: Optional[Dict[str, str]] = None,
) -> List[SubjectBreakup]:
    """
    Weighted mean percentage per subject: sum(pct * w) / sum(w) with
    w = weightage / 100. Marks for exams outside exam_ids are ignored.
    """
    names = dict(subject_names or {})
    sums: Dict[str, List[float]] = {}
    for m in marks:
        exam_id = m.get("exam_id")
        if exam_id not in exam_ids:
            continue
        weight = weightages[list(exam_ids).index(exam_id)] / 100
        max_marks = float(m.get("max_marks") or 0)
        if max_marks > 0:
            pct = calculate_percentage(float(m.get("marks_obtained") or 0), max_marks)
        else:
            pct = float(m.get("percentage") or 0)
        subject_id = m.get("subject_id")
        if not names.get(subject_id) and m.get("subject_name"):
            names[subject_id] = m["subject_name"]
        acc = sums.setdefault(subject_id, [0.0, 0.0])
        acc[0] += weight
        acc[1] += pct * weight

    breakup = []
    for subject_id, (weight_sum, pct_sum) in sums.items():
        weighted = pct_sum / weight_sum if weight_sum > 0 else 0.0
        breakup.append(
            SubjectBreakup(
                subject_id=str(subject_id),
                subject_name=names.get(subject_id) or str(subject_id),
                weighted_percentage=round(weighted, 2),
                grade=get_grade_from_percentage(weighted),
            )
        )
    return breakup


def build_term_report(
    student_id: str,
    exam_ids: Sequence[str],
    weightages: Sequence[float],
    marks: Sequence[Dict[str, Any]],
    subject_names: Optional[Dict[str, str]] = None,
    term_id: Optional[str] = None,
    co_scholastic: Optional[Dict[str, Any]] = None,
) -> TermReport:
    breakup = weighted_subject_breakup(marks, exam_ids, weightages, subject_names)
    overall = sum(b.weighted_percentage for b in breakup) / len(breakup) if breakup else 0.0
    return TermReport(
        student_id=student_id,
        term_id=term_id,
        exam_ids=list(exam_ids),
        weightages=list(weightages),
        subject_breakup=breakup,
        overall_percentage=round(overall, 2),
        overall_grade=get_grade_from_percentage(overall),
        co_scholastic=TermCoScholastic.model_validate(co_scholastic) if co_scholastic else None,
    )


def term_exam_weightages(term_id: str) -> Tuple[List[str], List[float]]:
    mappings = list(exam_term_mappings.find({"term_id": term_id, "is_active": True}, {"_id": 0}))
    if not mappings:
        raise LookupError(f"term {term_id} not found or has no exams")
    return [m["exam_id"] for m in mappings], [float(m.get("weightage") or 0) for m in mappings]


def _term_co_scholastic(term_id: str, student_id: str) -> Optional[Dict[str, Any]]:
    try:
        return term_co_scholastic.find_one(
            {"term_id": term_id, "student_id": student_id},
            {"_id": 0, "attendance_percentage": 1, "discipline_grade": 1, "work_habits_grade": 1, "teacher_remarks": 1},
        )
    except PyMongoError as e:
        logger.warning("Co-scholastic lookup failed for %s in term %s: %s", student_id, term_id, e)
        return None


def fetch_term_report(
    school_code: str,
    student_id: str,
    exam_ids: Sequence[str],
    weightages: Sequence[float],
    term_id: Optional[str] = None,
) -> TermReport:
    marks = list(
        student_subject_marks.find(
            {
                "school_code": school_code,
                "student_id": student_id,
                "exam_id": {"$in": list(exam_ids)},
                "status": {"$in": COUNTED_STATUSES},
            },
            {"_id": 0},
        )
    )
    subject_ids = list({m.get("subject_id") for m in marks})
    names = {
        s["subject_id"]: s.get("name") or ""
        for s in subjects.find({"subject_id": {"$in": subject_ids}}, {"_id": 0, "subject_id": 1, "name": 1})
    }
    co_scholastic = _term_co_scholastic(term_id, student_id) if term_id else None
    logger.info("Term report for %s: %d marks across %d exams", student_id, len(marks), len(exam_ids))
    return build_term_report(
        student_id, exam_ids, weightages, marks, names, term_id=term_id, co_scholastic=co_scholastic
    )
