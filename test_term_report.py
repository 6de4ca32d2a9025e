import pytest

from reportcards.services.term_report import build_term_report, parse_exam_weightages, weighted_subject_breakup

MARKS = [
    {"exam_id": "T1", "subject_id": "M", "marks_obtained": 80, "max_marks": 100},
    {"exam_id": "T2", "subject_id": "M", "marks_obtained": 30, "max_marks": 50},
    {"exam_id": "T1", "subject_id": "S", "marks_obtained": 45, "max_marks": 50},
    {"exam_id": "T2", "subject_id": "S", "max_marks": 0, "percentage": 90},
]


def test_parse_exam_weightages():
    assert parse_exam_weightages("T1, T2", "40,60") == (["T1", "T2"], [40.0, 60.0])


@pytest.mark.parametrize(
    "exam_ids, weightages",
    [("T1,T2", "40"), ("", ""), ("T1", "forty")],
)
def test_parse_exam_weightages_rejects_bad_input(exam_ids, weightages):
    with pytest.raises(ValueError):
        parse_exam_weightages(exam_ids, weightages)


def test_weighted_subject_breakup():
    breakup = {b.subject_id: b for b in weighted_subject_breakup(MARKS, ["T1", "T2"], [40, 60], {"M": "Maths"})}
    assert breakup["M"].weighted_percentage == 68
    assert breakup["M"].grade == "C"
    assert breakup["M"].subject_name == "Maths"
    assert breakup["S"].weighted_percentage == 90
    assert breakup["S"].grade == "A+"
    assert breakup["S"].subject_name == "S"


def test_marks_outside_requested_exams_are_ignored():
    marks = MARKS + [{"exam_id": "T9", "subject_id": "M", "marks_obtained": 0, "max_marks": 100}]
    breakup = {b.subject_id: b for b in weighted_subject_breakup(marks, ["T1", "T2"], [40, 60])}
    assert breakup["M"].weighted_percentage == 68


def test_term_report_overall_is_mean_of_subjects():
    report = build_term_report("S001", ["T1", "T2"], [40, 60], MARKS, term_id="TERM1")
    assert report.overall_percentage == 79
    assert report.overall_grade == "B"
    assert report.term_id == "TERM1"
    assert len(report.subject_breakup) == 2


def test_term_report_without_marks():
    report = build_term_report("S001", ["T1"], [100], [])
    assert report.subject_breakup == []
    assert report.overall_percentage == 0
    assert report.overall_grade == "E"
