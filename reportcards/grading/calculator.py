# reportcards/grading/calculator.py
"""
Percentage, grade and pass/fail rules shared by marks entry, the marks
dashboard and report-card generation. Everything here is pure.
"""
from __future__ import annotations

from typing import Any, Iterable

from reportcards.grading.scales import normalize_grade_scales

# Marks entry / marks dashboard pass line.
UI_PASS_THRESHOLD = 40.0
# Report-card result line. Kept separate from UI_PASS_THRESHOLD.
REPORT_CARD_PASS_THRESHOLD = 33.0

# (lower bound inclusive, grade), high to low
GRADE_LADDER = [
    (90.0, "A+"),
    (80.0, "A"),
    (70.0, "B"),
    (60.0, "C"),
    (50.0, "D"),
]
LOWEST_GRADE = "E"

NO_GRADE = "-"

# keyed by grade prefix, so A+, A1 and A2 share a colour
_GRADE_COLORS = {
    "A": "bg-emerald-100 text-emerald-700 border-emerald-200",
    "B": "bg-blue-100 text-blue-700 border-blue-200",
    "C": "bg-yellow-100 text-yellow-700 border-yellow-200",
    "D": "bg-orange-100 text-orange-700 border-orange-200",
}
_FAILING_GRADE_COLOR = "bg-red-100 text-red-700 border-red-200"
_MISSING_GRADE_COLOR = "bg-gray-100 text-gray-700"

_STATUS_COLORS = {
    "pass": "bg-green-100 text-green-800",
    "fail": "bg-red-100 text-red-800",
}
_UNKNOWN_STATUS_COLOR = "bg-gray-100 text-gray-700"


def calculate_percentage(obtained: float, max_marks: float) -> float:
    """
    obtained / max_marks * 100, or 0 when max_marks <= 0.
    Out-of-range input is passed through, not clamped.
    """
    if max_marks <= 0:
        return 0.0
    return (obtained / max_marks) * 100


def get_grade_from_percentage(percentage: float) -> str:
    for threshold, grade in GRADE_LADDER:
        if percentage >= threshold:
            return grade
    return LOWEST_GRADE


def get_grade_from_marks(scales: Iterable[Any], obtained: float, max_marks: float) -> str:
    """
    Grade from a school's own scale list. The first scale (in the order given)
    whose range contains the percentage wins; '-' when nothing matches.
    """
    if max_marks <= 0:
        return NO_GRADE
    pct = calculate_percentage(obtained, max_marks)
    for scale in normalize_grade_scales(scales):
        if scale.contains(pct):
            return scale.grade
    return NO_GRADE


def get_pass_status(percentage: float, threshold: float = UI_PASS_THRESHOLD) -> str:
    return "Pass" if percentage >= threshold else "Fail"


def get_grade_color(grade: str | None) -> str:
    if not grade or grade in ("-", "N/A"):
        return _MISSING_GRADE_COLOR
    return _GRADE_COLORS.get(grade.strip().upper()[:1], _FAILING_GRADE_COLOR)


def get_pass_status_color(status: str | None) -> str:
    return _STATUS_COLORS.get((status or "").strip().lower(), _UNKNOWN_STATUS_COLOR)
