# reportcards/models/__init__.py

from .report_card import ReportCardData, GradeScale, ExamMarksData, MultiExamSubjectMarks

__all__ = [
    "ReportCardData",
    "GradeScale",
    "ExamMarksData",
    "MultiExamSubjectMarks",
]
