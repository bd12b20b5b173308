from fastapi import APIRouter, HTTPException, Depends
from functools import lru_cache
from typing import List
import logging

from src.core.config import quiz_settings
from src.core.logging_config import quiz_log_context
from src.schemas.quiz import (
    AnswersRequest,
    QuestionsResponse,
    QuizResultResponse,
    QuizSummary,
    ValidationResponse,
)
from services.quiz_engine.catalog import QuizCatalog
from services.quiz_engine.engine import QuizEngine
from services.quiz_engine.models import IncompleteAnswersError, UnknownQuizError

router = APIRouter()
logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_quiz_catalog() -> QuizCatalog:
    # Definitions are static, so one catalog per process is enough
    return QuizCatalog(quiz_settings.assets_dir)


def _get_engine(catalog: QuizCatalog, quiz_id: str) -> QuizEngine:
    try:
        return catalog.get(quiz_id)
    except UnknownQuizError as e:
        logger.warning(f"Quiz lookup failed: {e}")
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/quizzes", response_model=List[QuizSummary])
async def list_quizzes(catalog: QuizCatalog = Depends(get_quiz_catalog)):
    return [
        QuizSummary(
            id=engine.config.id,
            title=engine.config.title,
            subtitle=engine.config.subtitle,
            version=engine.config.version,
            sections=engine.sections,
            question_count=len(engine.config.questions),
        )
        for engine in catalog
    ]


@router.get("/quizzes/{quiz_id}/questions", response_model=QuestionsResponse)
async def get_questions(quiz_id: str, catalog: QuizCatalog = Depends(get_quiz_catalog)):
    engine = _get_engine(catalog, quiz_id)
    return QuestionsResponse(quiz_id=quiz_id, questions=engine.config.questions)


@router.post("/quizzes/{quiz_id}/validate", response_model=ValidationResponse)
async def validate_answers(
    quiz_id: str,
    request: AnswersRequest,
    catalog: QuizCatalog = Depends(get_quiz_catalog),
):
    """
    Reports whether the form (or one wizard section) may proceed, and which
    questions are still blocking it.
    """
    engine = _get_engine(catalog, quiz_id)
    missing = engine.missing_questions(request.answers, section=request.section)
    return ValidationResponse(quiz_id=quiz_id, valid=not missing, missing=missing)


@router.post("/quizzes/{quiz_id}/score", response_model=QuizResultResponse)
async def score_quiz(
    quiz_id: str,
    request: AnswersRequest,
    catalog: QuizCatalog = Depends(get_quiz_catalog),
):
    """
    Scores a completed submission and returns the tier and advice.
    """
    engine = _get_engine(catalog, quiz_id)
    try:
        outcome = engine.evaluate(request.answers)
    except IncompleteAnswersError as e:
        logger.info(
            f"Incomplete submission for quiz '{quiz_id}': {e.missing}",
            extra=quiz_log_context(quiz_id, missing=e.missing),
        )
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception(f"Unexpected error while scoring quiz '{quiz_id}': {e}", extra=quiz_log_context(quiz_id))
        raise HTTPException(status_code=500, detail="Internal Server Error")

    result = outcome.result
    return QuizResultResponse(
        quiz_id=outcome.quiz_id,
        score=result.numeric_score,
        tier=result.tier.value,
        tier_source=result.tier_source,
        auxiliary_metrics=result.auxiliary_metrics,
        advice=outcome.advice,
    )
