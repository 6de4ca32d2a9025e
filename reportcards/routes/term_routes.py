from fastapi import APIRouter, HTTPException, Query

from reportcards.models.term_schemas import TermReport
from reportcards.services.term_report import fetch_term_report, parse_exam_weightages, term_exam_weightages

router = APIRouter(prefix="/terms", tags=["Terms"])


@router.get("/report-card", response_model=TermReport)
def term_report_card(
    school_code: str = Query(..., description="School code"),
    student_id: str = Query(..., description="Student id"),
    term_id: str | None = Query(None, description="Term whose exam mappings give exams and weightages"),
    class_id: str | None = Query(None, description="Class (needed with exam_ids + weightages)"),
    exam_ids: str | None = Query(None, description="Comma-separated exam ids"),
    weightages: str | None = Query(None, description="Comma-separated weightages, same order"),
):
    """
    Weighted term result: per-subject weighted percentage and grade, plus the
    overall mean. Exams come from the term mapping or from explicit lists.

    class_id only selects the explicit-list form; marks are looked up by
    student, so its value is not used in the query.
    """
    if term_id:
        try:
            ids, weights = term_exam_weightages(term_id)
        except LookupError as e:
            raise HTTPException(status_code=400, detail=str(e))
    elif class_id and exam_ids and weightages:
        try:
            ids, weights = parse_exam_weightages(exam_ids, weightages)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    else:
        raise HTTPException(
            status_code=400,
            detail="Provide either term_id, or class_id + exam_ids + weightages",
        )

    return fetch_term_report(school_code, student_id, ids, weights, term_id=term_id)
