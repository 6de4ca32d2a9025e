from fastapi import APIRouter, UploadFile, File, HTTPException, Query
from reportcards.core.logger import get_logger
from reportcards.models.marks_schemas import MarksUploadResult, StudentMarksResponse
from reportcards.services.marks_dashboard import fetch_student_marks
from reportcards.services.marks_ingest import process_marks_csv

logger = get_logger("marks_routes")

router = APIRouter(prefix="/marks", tags=["Marks"])

@router.post("/upload", response_model=MarksUploadResult)
async def upload_marks_csv(file: UploadFile = File(...)):
    """
    Bulk upload of subject marks for one or more exams via CSV.
    Invalid lines are skipped and reported back.
    """
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only CSV files are allowed.")

    content = await file.read()
    try:
        return process_marks_csv(content)
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8 encoded.")
    except Exception as e:
        logger.exception("Marks upload failed for %s", file.filename)
        raise HTTPException(status_code=500, detail=f"Failed to process marks: {str(e)}")

@router.get("/{student_id}", response_model=StudentMarksResponse)
def get_student_marks_dashboard(
    student_id: str,
    school_code: str = Query(..., description="School code"),
):
    """
    A student's marks grouped by exam, with percentage, grade and pass status.
    """
    result = fetch_student_marks(school_code, student_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Student not found.")
    return result
