import pytest
from fastapi.testclient import TestClient

from reportcards.main import app
from reportcards.models.report_card import ReportCardData
from reportcards.models.term_schemas import TermReport
from reportcards.routes import marks_routes, report_card_routes, term_routes
from reportcards.routes.report_card_routes import report_card_filename
from reportcards.services import term_report

client = TestClient(app)


@pytest.fixture
def report_data(report_payload):
    return ReportCardData.model_validate(report_payload)


def test_root():
    response = client.get("/")
    assert response.status_code == 200
    assert "message" in response.json()


def test_report_card_filename():
    assert report_card_filename("S001", "HY25") == "report_card_S001_HY25.pdf"
    assert report_card_filename('S"1', "a/b", ext="html") == "report_card_S_1_a_b.html"


def test_report_card_html(monkeypatch, report_data):
    monkeypatch.setattr(report_card_routes, "fetch_report_card_data", lambda *a: report_data)
    monkeypatch.setattr(report_card_routes, "load_template_config", lambda *a: {"labels": {"report_title": "TERM CARD"}})

    response = client.get("/report-card/html", params={"school_code": "GVPS01", "student_id": "S001", "exam_id": "HY"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert response.headers["content-disposition"] == 'inline; filename="report_card_S001_HY.html"'
    assert "TERM CARD" in response.text
    assert "Aarav Sharma" in response.text


def test_report_card_html_not_found(monkeypatch):
    monkeypatch.setattr(report_card_routes, "fetch_report_card_data", lambda *a: None)
    response = client.get("/report-card/html", params={"school_code": "X", "student_id": "S", "exam_id": "E"})
    assert response.status_code == 404


def test_preview(report_payload):
    response = client.post("/report-card/preview", json={"data": report_payload, "template_config": None})
    assert response.status_code == 200
    assert "Aarav Sharma" in response.text


def test_preview_rejects_incomplete_data(report_payload):
    del report_payload["exam"]
    response = client.post("/report-card/preview", json={"data": report_payload})
    assert response.status_code == 422


def test_generate_collects_errors_per_student(monkeypatch, report_data):
    saved = []

    def fake_fetch(school_code, student_id, exam_id):
        if student_id == "missing":
            return None
        if student_id == "broken":
            raise RuntimeError("database unavailable")
        return report_data

    monkeypatch.setattr(report_card_routes, "fetch_report_card_data", fake_fetch)
    monkeypatch.setattr(report_card_routes, "load_template_config", lambda *a: None)
    monkeypatch.setattr(report_card_routes, "save_report_card", lambda *a: saved.append(a[:3]))

    response = client.post(
        "/report-card/generate",
        json={"school_code": "GVPS01", "exam_id": "HY", "student_ids": ["S001", "missing", "broken"]},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Generated 1 report card(s)"
    assert body["generated"] == [{"student_id": "S001", "student_name": "Aarav Sharma"}]
    assert {e["student_id"] for e in body["errors"]} == {"missing", "broken"}
    assert saved == [("GVPS01", "HY", "S001")]


def test_generate_multi_exam_uses_first_exam_as_key(monkeypatch, report_data):
    calls = []
    monkeypatch.setattr(
        report_card_routes,
        "fetch_report_card_data_multi_exam",
        lambda school_code, student_id, exam_ids: calls.append(exam_ids) or report_data,
    )
    monkeypatch.setattr(report_card_routes, "load_template_config", lambda *a: None)
    saved = []
    monkeypatch.setattr(report_card_routes, "save_report_card", lambda *a: saved.append(a[1]))

    response = client.post(
        "/report-card/generate",
        json={"school_code": "GVPS01", "exam_ids": ["UT1", "UT2"], "student_ids": ["S001"]},
    )
    assert response.status_code == 200
    assert calls == [["UT1", "UT2"]]
    assert saved == ["UT1"]


@pytest.mark.parametrize(
    "payload",
    [
        {"school_code": "GVPS01", "student_ids": ["S001"]},
        {"school_code": "GVPS01", "exam_id": "HY", "student_ids": []},
    ],
)
def test_generate_requires_exams_and_students(payload):
    assert client.post("/report-card/generate", json=payload).status_code == 400


def test_term_report_with_explicit_weightages(monkeypatch):
    seen = {}

    def fake_fetch(school_code, student_id, exam_ids, weightages, term_id=None):
        seen.update(exam_ids=exam_ids, weightages=weightages)
        return TermReport(
            student_id=student_id,
            exam_ids=exam_ids,
            weightages=weightages,
            subject_breakup=[],
            overall_percentage=0,
            overall_grade="E",
        )

    monkeypatch.setattr(term_routes, "fetch_term_report", fake_fetch)
    response = client.get(
        "/terms/report-card",
        params={"school_code": "GVPS01", "student_id": "S001", "class_id": "X", "exam_ids": "T1,T2", "weightages": "40,60"},
    )
    assert response.status_code == 200
    assert seen == {"exam_ids": ["T1", "T2"], "weightages": [40.0, 60.0]}


def test_term_report_errors(monkeypatch):
    def unknown_term(term_id):
        raise LookupError(f"term {term_id} not found or has no exams")

    monkeypatch.setattr(term_routes, "term_exam_weightages", unknown_term)
    base = {"school_code": "GVPS01", "student_id": "S001"}
    assert client.get("/terms/report-card", params={**base, "term_id": "T9"}).status_code == 400
    assert client.get("/terms/report-card", params=base).status_code == 400
    bad = {**base, "class_id": "X", "exam_ids": "T1,T2", "weightages": "40"}
    assert client.get("/terms/report-card", params=bad).status_code == 400


def test_upload_rejects_non_csv():
    response = client.post("/marks/upload", files={"file": ("marks.xlsx", b"data", "application/octet-stream")})
    assert response.status_code == 400


def test_upload_csv(monkeypatch):
    monkeypatch.setattr(
        marks_routes,
        "process_marks_csv",
        lambda content: {"status": "success", "records_processed": 1, "unique_students": 1, "errors": []},
    )
    response = client.post("/marks/upload", files={"file": ("marks.csv", b"school_code\n", "text/csv")})
    assert response.status_code == 200
    assert response.json()["records_processed"] == 1


def test_student_marks_not_found(monkeypatch):
    monkeypatch.setattr(marks_routes, "fetch_student_marks", lambda *a: None)
    assert client.get("/marks/S404", params={"school_code": "GVPS01"}).status_code == 404


class FakeCollection:
    def __init__(self, docs=None):
        self.docs = docs or []

    def find(self, query=None, projection=None):
        return list(self.docs)

    def find_one(self, query=None, projection=None):
        return self.docs[0] if self.docs else None


def test_term_report_includes_co_scholastic_for_term(monkeypatch):
    monkeypatch.setattr(
        term_report,
        "exam_term_mappings",
        FakeCollection([{"exam_id": "T1", "weightage": 40}, {"exam_id": "T2", "weightage": 60}]),
    )
    monkeypatch.setattr(
        term_report,
        "student_subject_marks",
        FakeCollection([
            {"exam_id": "T1", "subject_id": "M", "marks_obtained": 80, "max_marks": 100},
            {"exam_id": "T2", "subject_id": "M", "marks_obtained": 30, "max_marks": 50},
        ]),
    )
    monkeypatch.setattr(term_report, "subjects", FakeCollection([{"subject_id": "M", "name": "Maths"}]))
    monkeypatch.setattr(
        term_report,
        "term_co_scholastic",
        FakeCollection([{
            "attendance_percentage": 91.5,
            "discipline_grade": "A",
            "work_habits_grade": "B",
            "teacher_remarks": "Participates well.",
        }]),
    )

    response = client.get(
        "/terms/report-card", params={"school_code": "GVPS01", "student_id": "S001", "term_id": "TERM1"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["term_id"] == "TERM1"
    assert body["subject_breakup"][0]["subject_name"] == "Maths"
    assert body["overall_percentage"] == 68
    assert body["co_scholastic"] == {
        "attendance_percentage": 91.5,
        "discipline_grade": "A",
        "work_habits_grade": "B",
        "teacher_remarks": "Participates well.",
    }


def test_term_report_without_term_has_no_co_scholastic(monkeypatch):
    monkeypatch.setattr(term_report, "student_subject_marks", FakeCollection())
    monkeypatch.setattr(term_report, "subjects", FakeCollection())
    monkeypatch.setattr(term_report, "term_co_scholastic", FakeCollection([{"discipline_grade": "A"}]))

    response = client.get(
        "/terms/report-card",
        params={"school_code": "GVPS01", "student_id": "S001", "class_id": "X", "exam_ids": "T1", "weightages": "100"},
    )
    assert response.status_code == 200
    assert response.json()["co_scholastic"] is None
