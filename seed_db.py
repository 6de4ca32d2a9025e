import os
import sys

# Ensure the package is importable when run from a checkout
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from reportcards.core.database import examinations, grade_scales, schools
from reportcards.grading.scales import DEFAULT_GRADE_SCALES
from reportcards.services.marks_ingest import process_marks_csv

SAMPLE_SCHOOL = {
    "school_code": "SCH001",
    "school_name": "Sample Public School",
    "affiliation": "0000000",
    "school_email": "office@sample-school.test",
    "principal_name": "Principal",
}
SAMPLE_EXAM = {"exam_id": "HY2025", "school_code": "SCH001", "exam_name": "Half Yearly", "academic_year": "2025-26"}


def seed_school():
    schools.update_one({"school_code": SAMPLE_SCHOOL["school_code"]}, {"$set": SAMPLE_SCHOOL}, upsert=True)
    examinations.update_one({"exam_id": SAMPLE_EXAM["exam_id"]}, {"$set": SAMPLE_EXAM}, upsert=True)
    for order, scale in enumerate(reversed(DEFAULT_GRADE_SCALES)):
        grade_scales.update_one(
            {"school_code": SAMPLE_SCHOOL["school_code"], "grade": scale["grade"]},
            {"$set": {**scale, "display_order": order, "is_active": True, "academic_year": None}},
            upsert=True,
        )


def main():
    csv_path = sys.argv[1] if len(sys.argv) > 1 else "sample_marks.csv"
    if not os.path.exists(csv_path):
        print(f"Error: {csv_path} not found.")
        return

    print("Seeding sample school, exam and grade scale...")
    seed_school()

    print(f"Reading {csv_path}...")
    with open(csv_path, "rb") as f:
        file_content = f.read()

    result = process_marks_csv(file_content)
    print(f"Stored {result['records_processed']} rows for {result['unique_students']} students")
    for err in result["errors"]:
        print(f"  skipped {err}")


if __name__ == "__main__":
    main()
