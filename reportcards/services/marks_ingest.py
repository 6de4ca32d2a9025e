import csv
import io
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from reportcards.core.database import students, student_subject_marks
from reportcards.core.logger import get_logger

logger = get_logger("marks_ingest")

ABSENT_TOKENS = {"", "ab", "absent", "-"}


@dataclass
class MarkRow:
    school_code: str
    student_id: str
    student_name: str
    class_name: str
    section: str
    exam_id: str
    subject_id: str
    subject_name: str
    marks_obtained: Optional[float]
    max_marks: float
    remarks: str


def _parse_row(row: dict) -> MarkRow:
    """Raises ValueError with a readable message when the row can't be stored."""
    school_code = (row.get("school_code") or "").strip()
    sid = (row.get("student_id") or "").strip()
    exam_id = (row.get("exam_id") or "").strip()
    subject_name = (row.get("subject_name") or row.get("subject") or "").strip()
    if not school_code or not sid or not exam_id or not subject_name:
        raise ValueError("school_code, student_id, exam_id and subject_name are required")

    try:
        max_marks = float((row.get("max_marks") or "100").strip())
    except ValueError:
        raise ValueError(f"max_marks {row.get('max_marks')!r} is not a number")
    if max_marks <= 0:
        raise ValueError("max_marks must be positive")

    raw = (row.get("marks_obtained") or "").strip()
    remarks = (row.get("remarks") or "").strip()
    if raw.lower() in ABSENT_TOKENS:
        obtained = None
        remarks = remarks or "Absent"
    else:
        try:
            obtained = float(raw)
        except ValueError:
            raise ValueError(f"marks_obtained {raw!r} is not a number")
        if not 0 <= obtained <= max_marks:
            raise ValueError(f"marks_obtained {obtained:g} outside 0-{max_marks:g}")

    return MarkRow(
        school_code=school_code,
        student_id=sid,
        student_name=(row.get("student_name") or "").strip(),
        class_name=(row.get("class") or row.get("class_name") or "").strip(),
        section=(row.get("section") or "").strip(),
        exam_id=exam_id,
        subject_id=(row.get("subject_id") or "").strip() or subject_name,
        subject_name=subject_name,
        marks_obtained=obtained,
        max_marks=max_marks,
        remarks=remarks,
    )


def parse_marks_csv(file_content: bytes) -> Tuple[List[MarkRow], List[str]]:
    """
    Expected headers: school_code, student_id, student_name, class, section,
    exam_id, subject_id, subject_name, marks_obtained, max_marks, remarks.
    Blank / AB marks mean absent. Returns (valid rows, per-line errors).
    """
    decoded = file_content.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(decoded))

    rows: List[MarkRow] = []
    errors: List[str] = []
    for line_no, row in enumerate(reader, start=2):
        try:
            rows.append(_parse_row(row))
        except ValueError as e:
            errors.append(f"line {line_no}: {e}")
    return rows, errors


def process_marks_csv(file_content: bytes) -> dict:
    """
    Parses a CSV uploaded by a teacher and upserts one mark document per
    student / exam / subject.
    """
    rows, errors = parse_marks_csv(file_content)

    students_updated = set()
    now = datetime.now(timezone.utc)
    for r in rows:
        if r.student_id not in students_updated and r.student_name:
            students.update_one(
                {"student_id": r.student_id, "school_code": r.school_code},
                {"$set": {
                    "student_name": r.student_name,
                    "class": r.class_name,
                    "section": r.section,
                }},
                upsert=True,
            )
        students_updated.add(r.student_id)

        student_subject_marks.update_one(
            {
                "school_code": r.school_code,
                "student_id": r.student_id,
                "exam_id": r.exam_id,
                "subject_id": r.subject_id,
            },
            {
                "$set": {
                    "subject_name": r.subject_name,
                    "marks_obtained": r.marks_obtained,
                    "max_marks": r.max_marks,
                    "remarks": r.remarks,
                    "status": "submitted",
                    "updated_at": now,
                },
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
        )

    if errors:
        logger.warning("Skipped %d invalid mark rows", len(errors))
    logger.info("Stored %d mark rows for %d students", len(rows), len(students_updated))

    return {
        "status": "success",
        "records_processed": len(rows),
        "unique_students": len(students_updated),
        "errors": errors,
    }
