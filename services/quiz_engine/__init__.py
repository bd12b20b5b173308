# This file makes the 'quiz_engine' directory a Python package.

from .answers import AnswerSet
from .catalog import QuizCatalog
from .engine import QuizEngine
from .models import (
    AnswerSetFrozenError,
    IncompleteAnswersError,
    QuestionKind,
    QuestionSpec,
    QuizConfigurationError,
    QuizOutcome,
    ScoreResult,
    Tier,
    UnknownQuizError,
)

__all__ = [
    "AnswerSet",
    "QuizCatalog",
    "QuizEngine",
    "AnswerSetFrozenError",
    "IncompleteAnswersError",
    "QuestionKind",
    "QuestionSpec",
    "QuizConfigurationError",
    "QuizOutcome",
    "ScoreResult",
    "Tier",
    "UnknownQuizError",
]
