from pydantic import BaseModel
from typing import List, Optional

class MarkEntry(BaseModel):
    subject: str
    marks_obtained: Optional[float] = None
    max_marks: float
    percentage: float = 0.0
    grade: str = "-"
    grade_color: str = ""
    is_absent: bool = False

class ExamMarks(BaseModel):
    exam_id: str
    exam_name: str
    marks: List[MarkEntry]
    total_marks: float = 0.0
    total_max_marks: float = 0.0
    percentage: float = 0.0
    grade: str = "-"
    pass_status: str = "Fail"
    pass_status_color: str = ""

class StudentProfile(BaseModel):
    student_id: str
    student_name: str
    class_name: str
    section: str = ""

class StudentMarksResponse(BaseModel):
    profile: StudentProfile
    exams: List[ExamMarks]

class MarksUploadResult(BaseModel):
    status: str
    records_processed: int
    unique_students: int
    errors: List[str] = []
