import copy

import pytest


BASE_REPORT = {
    "school": {
        "school_name": "Green Valley Public School",
        "school_code": "GVPS01",
        "affiliation": "2130456",
        "school_email": "office@greenvalley.edu",
        "school_phone": "0120-445566",
        "school_address": "Sector 12, Noida",
        "principal_name": "Dr. R. Mehta",
    },
    "student": {
        "student_name": "Aarav Sharma",
        "admission_no": "ADM-1042",
        "class": "X",
        "section": "B",
        "father_name": "Rakesh Sharma",
        "mother_name": "Sunita Sharma",
        "roll_number": 17,
    },
    "exam": {"exam_name": "Half Yearly", "academic_year": "2025-26", "result_date": "15/10/2025"},
    "marks": [
        {"subject": {"name": "Mathematics"}, "max_marks": 100, "marks_obtained": 78},
        {"subject": {"name": "English"}, "max_marks": 100, "marks_obtained": 66},
    ],
    "summary": None,
    "attendance": {"present": 92, "total": 100, "percentage": 92.0},
    "coScholastic": [{"name": "Art Education", "term1_grade": "A", "term2_grade": "B"}],
    "gradeScales": [
        {"grade": "A", "min_percentage": 90, "max_percentage": 100},
        {"grade": "B", "min_percentage": 75, "max_percentage": 89.99},
        {"grade": "C", "min_percentage": 33, "max_percentage": 74.99},
        {"grade": "E", "min_percentage": 0, "max_percentage": 32.99},
    ],
    "remarks": "Consistent effort through the term.",
    "rank": 4,
    "promoted_to": "XI-B",
}


@pytest.fixture
def report_payload():
    return copy.deepcopy(BASE_REPORT)
