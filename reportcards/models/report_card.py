"""
Input shapes for report-card generation.

Each model mirrors one block of the JSON a caller (an API handler or a stored
preview payload) hands to the composer. camelCase keys are accepted as
aliases; attributes are snake_case.
"""
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from reportcards.grading.calculator import calculate_percentage


class _ReportModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class SubjectRef(_ReportModel):
    name: str = "N/A"


class ExamMarksData(_ReportModel):
    exam_id: str
    exam_name: str = "Exam"
    marks_obtained: Optional[float] = None  # None means absent
    max_marks: float = Field(0, ge=0)
    grade: Optional[str] = None

    @model_validator(mode="after")
    def _obtained_within_max(self):
        if self.max_marks > 0 and self.marks_obtained is not None:
            if not 0 <= self.marks_obtained <= self.max_marks:
                raise ValueError(
                    f"marks_obtained {self.marks_obtained} outside [0, {self.max_marks}] "
                    f"for exam {self.exam_id}"
                )
        return self


class MultiExamSubjectMarks(_ReportModel):
    subject: SubjectRef = Field(default_factory=SubjectRef)
    exams: List[ExamMarksData] = Field(default_factory=list)
    overall_max_marks: float = 0
    overall_marks_obtained: Optional[float] = None
    overall_grade: Optional[str] = None

    @model_validator(mode="after")
    def _overall_covers_each_exam(self):
        if self.exams:
            largest = max(e.max_marks for e in self.exams)
            if self.overall_max_marks < largest:
                raise ValueError(
                    f"overall_max_marks {self.overall_max_marks} is below a single exam's max_marks {largest}"
                )
        return self


class SubjectMarks(_ReportModel):
    """One subject row of a single-exam report card. Not range-checked."""

    subject: SubjectRef = Field(default_factory=SubjectRef)
    max_marks: float = 0
    marks_obtained: Optional[float] = None
    percentage: Optional[float] = None
    grade: Optional[str] = None
    remarks: Optional[str] = None


class SchoolInfo(_ReportModel):
    school_name: str
    school_code: str
    affiliation: Optional[str] = None
    school_email: Optional[str] = None
    school_phone: Optional[str] = None
    school_address: Optional[str] = None
    logo_url: Optional[str] = None
    right_logo_url: Optional[str] = None
    principal_name: Optional[str] = None
    instructions: Optional[str] = None
    sub_title: Optional[str] = None


class StudentInfo(_ReportModel):
    student_name: str
    admission_no: str = ""
    class_name: str = Field("", alias="class")
    section: str = ""
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    address: Optional[str] = None
    student_contact: Optional[str] = None
    roll_number: Optional[str] = None


class ExamInfo(_ReportModel):
    exam_name: str = ""
    academic_year: str = ""
    result_date: Optional[str] = None


class ExamListItem(_ReportModel):
    id: str
    name: str = "Exam"
    max_marks_per_subject: float = 100


class ReportSummary(_ReportModel):
    total_marks: Optional[float] = None
    total_max_marks: Optional[float] = None
    percentage: Optional[float] = None
    grade: Optional[str] = None


class Attendance(_ReportModel):
    present: int = 0
    total: int = 0
    percentage: Optional[float] = None

    @model_validator(mode="after")
    def _fill_percentage(self):
        if self.percentage is None:
            self.percentage = calculate_percentage(self.present, self.total)
        return self


class CoScholasticEntry(_ReportModel):
    name: str
    term1_grade: Optional[str] = None
    term2_grade: Optional[str] = None


class GradeScale(_ReportModel):
    grade: str
    min_marks: Optional[float] = None
    max_marks: Optional[float] = None
    min_percentage: Optional[float] = None
    max_percentage: Optional[float] = None


class ReportCardData(_ReportModel):
    school: SchoolInfo
    student: StudentInfo
    exam: ExamInfo
    marks: List[SubjectMarks] = Field(default_factory=list)
    multi_exam_marks: Optional[List[MultiExamSubjectMarks]] = Field(None, alias="multiExamMarks")
    exams_list: Optional[List[ExamListItem]] = Field(None, alias="examsList")
    summary: Optional[ReportSummary] = None
    attendance: Optional[Attendance] = None
    co_scholastic: Optional[List[CoScholasticEntry]] = Field(None, alias="coScholastic")
    grade_scales: List[GradeScale] = Field(default_factory=list, alias="gradeScales")
    remarks: Optional[str] = None
    rank: Optional[Union[int, str]] = None
    result: Optional[str] = None
    promoted_to: Optional[str] = None

    @field_validator("result", mode="before")
    @classmethod
    def _normalize_result(cls, value):
        # "PASS" / "pass" -> "Pass"; anything unrecognised is dropped
        text = str(value or "").strip().capitalize()
        return text if text in ("Pass", "Fail") else None

    @property
    def is_multi_exam(self) -> bool:
        """Term-wise layout needs more than one exam and some per-subject rows."""
        return bool(self.multi_exam_marks) and len(self.exams_list or []) > 1
