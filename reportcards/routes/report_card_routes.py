from __future__ import annotations

import re

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import HTMLResponse

from reportcards.core.config import CONFIG
from reportcards.core.logger import get_logger
from reportcards.models.requests import (
    GenerateReportCardsRequest,
    GenerateReportCardsResponse,
    GeneratedReportCard,
    GenerationError,
    PreviewRequest,
)
from reportcards.report import InvalidReportCardInput, generate_report_card_html
from reportcards.services.report_data import (
    fetch_report_card_data,
    fetch_report_card_data_multi_exam,
    load_template_config,
    save_report_card,
)

logger = get_logger("report_card_routes")

router = APIRouter(prefix="/report-card", tags=["Report Cards"])

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9_.-]+")


def report_card_filename(student_id: str, exam_id: str, ext: str = "pdf") -> str:
    """report_card_<studentId>_<examId>.<ext>, safe for a Content-Disposition header."""
    student = _UNSAFE_FILENAME.sub("_", str(student_id))
    exam = _UNSAFE_FILENAME.sub("_", str(exam_id))
    return f"report_card_{student}_{exam}.{ext}"


def _render(data, template_config=None) -> str:
    try:
        return generate_report_card_html(
            data, template_config, pass_threshold=CONFIG.REPORT_CARD_PASS_THRESHOLD
        )
    except InvalidReportCardInput as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/html", response_class=HTMLResponse)
def report_card_html(
    school_code: str = Query(..., description="School code"),
    student_id: str = Query(..., description="Student id"),
    exam_id: str = Query(..., description="Exam id"),
    template_id: str | None = Query(None, description="Template to style the card with"),
) -> HTMLResponse:
    """
    Render one student's report card on the fly (nothing is stored).
    """
    try:
        data = fetch_report_card_data(school_code, student_id, exam_id)
    except Exception as e:
        logger.exception("Report card lookup failed for student %s, exam %s", student_id, exam_id)
        raise HTTPException(status_code=500, detail=f"Failed to load report card data: {str(e)}")
    if data is None:
        raise HTTPException(status_code=404, detail="Data not found")

    html = _render(data, load_template_config(school_code, template_id))
    filename = report_card_filename(student_id, exam_id, ext="html")
    return HTMLResponse(
        html,
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.post("/preview", response_class=HTMLResponse)
def report_card_preview(payload: PreviewRequest) -> HTMLResponse:
    """
    Render a report card from a raw payload, e.g. while editing a template.
    """
    return HTMLResponse(_render(payload.data, payload.template_config))


@router.post("/generate", response_model=GenerateReportCardsResponse)
def generate_report_cards(payload: GenerateReportCardsRequest) -> GenerateReportCardsResponse:
    """
    Generate and store report cards for several students. One failing student
    does not stop the batch; failures are listed in `errors`.
    """
    exam_ids = payload.resolved_exam_ids()
    if not exam_ids or not payload.student_ids:
        raise HTTPException(
            status_code=400,
            detail="school_code, exam_id or exam_ids, and student_ids (non-empty array) are required",
        )

    primary_exam_id = exam_ids[0]
    template_config = load_template_config(payload.school_code, payload.template_id)

    generated = []
    errors = []
    for student_id in payload.student_ids:
        try:
            if len(exam_ids) == 1:
                data = fetch_report_card_data(payload.school_code, student_id, primary_exam_id)
            else:
                data = fetch_report_card_data_multi_exam(payload.school_code, student_id, exam_ids)

            if data is None:
                errors.append(GenerationError(student_id=student_id, error="Student or exam not found"))
                continue

            html = generate_report_card_html(
                data, template_config, pass_threshold=CONFIG.REPORT_CARD_PASS_THRESHOLD
            )
            save_report_card(payload.school_code, primary_exam_id, student_id, data, html)
            generated.append(GeneratedReportCard(student_id=student_id, student_name=data.student.student_name))
        except Exception as e:
            logger.exception("Report card generation failed for student %s", student_id)
            errors.append(GenerationError(student_id=student_id, error=str(e)))

    logger.info("Report card generation complete: %d generated, %d errors", len(generated), len(errors))
    return GenerateReportCardsResponse(
        message=f"Generated {len(generated)} report card(s)",
        generated=generated,
        errors=errors,
    )
