from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class GenerateReportCardsRequest(BaseModel):
    school_code: str
    exam_id: Optional[str] = None
    exam_ids: List[str] = Field(default_factory=list)
    student_ids: List[str]
    template_id: Optional[str] = None

    def resolved_exam_ids(self) -> List[str]:
        if self.exam_ids:
            return self.exam_ids
        return [self.exam_id] if self.exam_id else []


class GeneratedReportCard(BaseModel):
    student_id: str
    student_name: str


class GenerationError(BaseModel):
    student_id: str
    error: str


class GenerateReportCardsResponse(BaseModel):
    message: str
    generated: List[GeneratedReportCard]
    errors: List[GenerationError] = Field(default_factory=list)


class PreviewRequest(BaseModel):
    """Raw report card payload, as a template editor would send it."""

    data: Dict[str, Any]
    template_config: Optional[Dict[str, Any]] = None
