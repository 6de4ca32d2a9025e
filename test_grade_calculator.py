import pytest
from pydantic import ValidationError

from reportcards.grading.calculator import (
    GRADE_LADDER,
    LOWEST_GRADE,
    REPORT_CARD_PASS_THRESHOLD,
    UI_PASS_THRESHOLD,
    calculate_percentage,
    get_grade_color,
    get_grade_from_marks,
    get_grade_from_percentage,
    get_pass_status,
    get_pass_status_color,
)
from reportcards.grading.scales import DEFAULT_GRADE_SCALES, legend_order, normalize_grade_scale
from reportcards.models.report_card import ExamMarksData, GradeScale, MultiExamSubjectMarks


def test_percentage_stays_within_bounds_for_in_range_marks():
    for max_marks in (1, 7, 50, 100, 250):
        for obtained in range(0, max_marks + 1):
            pct = calculate_percentage(obtained, max_marks)
            assert 0 <= pct <= 100


@pytest.mark.parametrize("obtained", [0, 10, -5, 1000])
def test_zero_or_negative_max_gives_zero(obtained):
    assert calculate_percentage(obtained, 0) == 0
    assert calculate_percentage(obtained, -10) == 0


def test_out_of_range_marks_are_not_clamped():
    assert calculate_percentage(150, 100) == 150
    assert calculate_percentage(-10, 100) == -10


@pytest.mark.parametrize(
    "pct, grade",
    [(100, "A+"), (90, "A+"), (89.99, "A"), (80, "A"), (70, "B"), (60, "C"), (50, "D"), (49.9, "E"), (0, "E")],
)
def test_ladder_boundaries_belong_to_higher_band(pct, grade):
    assert get_grade_from_percentage(pct) == grade


def test_ladder_grades_are_monotonic():
    order = [g for _, g in GRADE_LADDER] + [LOWEST_GRADE]
    rank = {g: i for i, g in enumerate(order)}  # lower index = better grade
    previous = None
    for tenth in range(0, 1001):
        grade = get_grade_from_percentage(tenth / 10)
        if previous is not None:
            assert rank[grade] <= rank[previous]
        previous = grade


def test_grade_from_marks_with_percentage_scales():
    scales = [
        {"grade": "A", "min_percentage": 90, "max_percentage": 100},
        {"grade": "B", "min_percentage": 75, "max_percentage": 89.99},
    ]
    assert get_grade_from_marks(scales, 80, 100) == "B"
    assert get_grade_from_marks(scales, 95, 100) == "A"
    assert get_grade_from_marks(scales, 50, 100) == "-"


def test_grade_from_marks_zero_max_is_placeholder():
    assert get_grade_from_marks(DEFAULT_GRADE_SCALES, 10, 0) == "-"


def test_grade_from_marks_reads_marks_fields_and_models():
    scales = [GradeScale(grade="P", min_marks=33, max_marks=100), GradeScale(grade="F", min_marks=0, max_marks=32.99)]
    assert get_grade_from_marks(scales, 40, 100) == "P"
    assert get_grade_from_marks(scales, 20, 100) == "F"


def test_grade_from_marks_uses_caller_order_not_display_order():
    scales = [
        {"grade": "Wide", "min_percentage": 0, "max_percentage": 100},
        {"grade": "Top", "min_percentage": 50, "max_percentage": 100},
    ]
    assert get_grade_from_marks(scales, 70, 100) == "Wide"
    # display sorting must not reorder the caller's list
    legend_order(scales)
    assert [s["grade"] for s in scales] == ["Wide", "Top"]


def test_legend_order_is_descending_by_upper_bound():
    ordered = legend_order(list(reversed(DEFAULT_GRADE_SCALES)))
    assert [s.grade for s in ordered] == [s["grade"] for s in DEFAULT_GRADE_SCALES]


def test_normalize_prefers_percentage_fields_and_defaults_bounds():
    s = normalize_grade_scale({"grade": "X", "min_marks": 10, "min_percentage": 20})
    assert s.lower == 20
    assert s.upper == 100
    assert s.has_lower and not s.has_upper


def test_dual_pass_thresholds_are_kept_apart():
    assert UI_PASS_THRESHOLD == 40
    assert REPORT_CARD_PASS_THRESHOLD == 33
    assert get_pass_status(35) == "Fail"
    assert get_pass_status(35, REPORT_CARD_PASS_THRESHOLD) == "Pass"
    assert get_pass_status(40) == "Pass"


def test_color_lookups():
    assert "emerald" in get_grade_color("A+")
    assert "emerald" in get_grade_color("a")
    assert "blue" in get_grade_color("B")
    assert "red" in get_grade_color("E")
    assert "gray" in get_grade_color(None)
    assert "green" in get_pass_status_color("Pass")
    assert "red" in get_pass_status_color("FAIL")
    assert "gray" in get_pass_status_color("")


@pytest.mark.parametrize(
    "grade, colour",
    [("A1", "emerald"), ("A2", "emerald"), ("B1", "blue"), ("B2", "blue"), ("C1", "yellow"), ("D", "orange"), ("E", "red")],
)
def test_grade_color_follows_grade_prefix(grade, colour):
    assert colour in get_grade_color(grade)


def test_exam_marks_must_fit_max():
    with pytest.raises(ValidationError):
        ExamMarksData(exam_id="E1", exam_name="Unit 1", marks_obtained=60, max_marks=50)
    assert ExamMarksData(exam_id="E1", marks_obtained=None, max_marks=50).marks_obtained is None


def test_overall_max_must_cover_each_exam():
    with pytest.raises(ValidationError):
        MultiExamSubjectMarks(
            subject={"name": "Maths"},
            exams=[{"exam_id": "E1", "marks_obtained": 40, "max_marks": 80}],
            overall_max_marks=50,
        )
