# reportcards/core/config.py

from typing import List
from pydantic_settings import BaseSettings

from reportcards.grading.calculator import REPORT_CARD_PASS_THRESHOLD, UI_PASS_THRESHOLD


class Settings(BaseSettings):
    # Mongo database holding school, student, marks and template collections
    MONGO_DB: str = "school_dashboard"

    # Pass lines for the marks pages and for the report-card result line
    UI_PASS_THRESHOLD: float = UI_PASS_THRESHOLD
    REPORT_CARD_PASS_THRESHOLD: float = REPORT_CARD_PASS_THRESHOLD

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_prefix = "REPORTCARDS_"
        case_sensitive = False


CONFIG = Settings()
