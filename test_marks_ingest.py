import pytest

from reportcards.services import marks_ingest
from reportcards.services.marks_dashboard import build_student_marks
from reportcards.services.marks_ingest import parse_marks_csv, process_marks_csv

HEADER = "school_code,student_id,student_name,class,section,exam_id,subject_id,subject_name,marks_obtained,max_marks,remarks\n"


class FakeCollection:
    def __init__(self):
        self.upserts = []

    def update_one(self, query, update, upsert=False):
        self.upserts.append((query, update, upsert))


@pytest.fixture
def fake_db(monkeypatch):
    students, marks = FakeCollection(), FakeCollection()
    monkeypatch.setattr(marks_ingest, "students", students)
    monkeypatch.setattr(marks_ingest, "student_subject_marks", marks)
    return students, marks


def test_parse_marks_csv_reports_bad_lines():
    content = (
        "\ufeff" + HEADER
        + "SCH001,S001,Aarav,X,B,HY,MATH,Maths,78,100,\n"
        + "SCH001,S001,Aarav,X,B,HY,ENG,English,AB,100,\n"
        + "SCH001,S001,Aarav,X,B,HY,SCI,Science,120,100,\n"
        + ",S002,Diya,X,B,HY,MATH,Maths,50,100,\n"
        + "SCH001,S002,Diya,X,B,HY,MATH,Maths,50,zero,\n"
    ).encode("utf-8")
    rows, errors = parse_marks_csv(content)

    assert [r.subject_id for r in rows] == ["MATH", "ENG"]
    assert rows[1].marks_obtained is None
    assert rows[1].remarks == "Absent"
    assert len(errors) == 3
    assert errors[0].startswith("line 4:")
    assert errors[1].startswith("line 5:")
    assert errors[2].startswith("line 6:")


def test_subject_id_defaults_to_name():
    rows, _ = parse_marks_csv((HEADER + "SCH001,S001,Aarav,X,B,HY,,Maths,10,20,\n").encode())
    assert rows[0].subject_id == "Maths"
    assert rows[0].max_marks == 20


def test_process_marks_csv_upserts(fake_db):
    students, marks = fake_db
    content = (
        HEADER
        + "SCH001,S001,Aarav,X,B,HY,MATH,Maths,78,100,\n"
        + "SCH001,S001,Aarav,X,B,HY,ENG,English,66,100,\n"
        + "SCH001,S002,,X,B,HY,MATH,Maths,-1,100,\n"
    ).encode()
    result = process_marks_csv(content)

    assert result["status"] == "success"
    assert result["records_processed"] == 2
    assert result["unique_students"] == 1
    assert len(result["errors"]) == 1
    assert len(students.upserts) == 1
    assert students.upserts[0][0] == {"student_id": "S001", "school_code": "SCH001"}
    assert len(marks.upserts) == 2
    query, update, upsert = marks.upserts[0]
    assert query["subject_id"] == "MATH"
    assert update["$set"]["marks_obtained"] == 78
    assert update["$set"]["status"] == "submitted"
    assert update["$set"]["updated_at"].tzinfo is not None
    assert upsert is True


def test_build_student_marks_uses_ui_threshold():
    student = {"student_id": "S001", "student_name": "Aarav", "class": "X", "section": "B"}
    marks = [
        {"exam_id": "HY", "subject_name": "Maths", "marks_obtained": 36, "max_marks": 100},
        {"exam_id": "HY", "subject_name": "English", "marks_obtained": None, "max_marks": 100},
        {"exam_id": "UT", "subject_name": "Maths", "marks_obtained": 45, "max_marks": 50},
    ]
    result = build_student_marks(student, marks, {"HY": "Half Yearly"})

    assert result.profile.class_name == "X"
    hy, ut = result.exams
    assert hy.exam_name == "Half Yearly"
    assert hy.total_marks == 36
    assert hy.total_max_marks == 200
    assert hy.pass_status == "Fail"
    assert "red" in hy.pass_status_color

    absent = hy.marks[1]
    assert absent.is_absent
    assert absent.grade == "-"
    assert "gray" in absent.grade_color

    assert ut.exam_name == "UT"
    assert ut.grade == "A+"
    assert ut.pass_status == "Pass"

    lenient = build_student_marks(student, marks[:1], pass_threshold=33)
    assert lenient.exams[0].pass_status == "Pass"
