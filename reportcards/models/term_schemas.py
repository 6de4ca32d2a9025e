from pydantic import BaseModel
from typing import List, Optional


class SubjectBreakup(BaseModel):
    subject_id: str
    subject_name: str
    weighted_percentage: float
    grade: str


class TermCoScholastic(BaseModel):
    attendance_percentage: Optional[float] = None
    discipline_grade: Optional[str] = None
    work_habits_grade: Optional[str] = None
    teacher_remarks: Optional[str] = None


class TermReport(BaseModel):
    """Weighted, term-wise result for one student across several exams."""

    student_id: str
    term_id: Optional[str] = None
    exam_ids: List[str]
    weightages: List[float]
    subject_breakup: List[SubjectBreakup]
    overall_percentage: float
    overall_grade: str
    # only looked up when the report is for a named term
    co_scholastic: Optional[TermCoScholastic] = None
