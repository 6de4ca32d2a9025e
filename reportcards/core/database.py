from pymongo import MongoClient
import os
from dotenv import load_dotenv

from reportcards.core.config import CONFIG
from reportcards.core.logger import get_logger

load_dotenv()

logger = get_logger("database")

# Falls back to a local server when MONGO_URI is not set.
# MongoClient connects lazily, so importing this module never blocks.
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")

client = MongoClient(MONGO_URI)

db = client[CONFIG.MONGO_DB]

# School / people
schools = db["schools"]
students = db["students"]
subjects = db["subjects"]

# Examinations and marks
examinations = db["examinations"]
student_subject_marks = db["student_subject_marks"]
student_exam_summary = db["student_exam_summary"]
grade_scales = db["grade_scales"]
exam_term_mappings = db["exam_term_mappings"]

# Attendance and co-scholastic records
student_attendance = db["student_attendance"]
term_co_scholastic = db["term_co_scholastic"]

# Report cards
report_card_templates = db["report_card_templates"]
report_cards = db["report_cards"]

logger.info("MongoDB client configured for database %s", CONFIG.MONGO_DB)
