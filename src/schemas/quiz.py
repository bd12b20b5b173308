from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from services.quiz_engine.models import QuestionSpec

class QuizSummary(BaseModel):
    id: str
    title: str
    subtitle: str
    version: str
    sections: List[str]
    question_count: int

class QuestionsResponse(BaseModel):
    quiz_id: str
    questions: List[QuestionSpec]

class AnswersRequest(BaseModel):
    answers: Dict[str, Any] = Field(default_factory=dict)  # question_id → raw answer value
    section: Optional[str] = None  # validate a single wizard step when set

class ValidationResponse(BaseModel):
    quiz_id: str
    valid: bool
    missing: List[str]

class QuizResultResponse(BaseModel):
    quiz_id: str
    score: int
    tier: str
    tier_source: str
    auxiliary_metrics: Dict[str, float]
    advice: List[str]
