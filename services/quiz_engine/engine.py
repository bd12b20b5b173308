import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .advice import AdviceGenerator
from .answers import AnswerSet
from .loader import load_quiz_config_from_file
from .models import (
    IncompleteAnswersError,
    QuestionSpec,
    QuizConfig,
    QuizOutcome,
    ScoreResult,
)
from .scoring_engine import build_scorer
from .validity import is_complete, is_form_valid, missing_questions

logger = logging.getLogger(__name__)


class QuizEngine:
    """
    Validity checks, scoring and advice for a single quiz definition.

    The engine holds no per-user state and can be shared freely; answers
    are always passed in.
    """
    def __init__(self, config: QuizConfig):
        self.config = config
        self._scorer = build_scorer(config.scoring)
        self._advisor = AdviceGenerator(config.advice)
        self._build_lookup_maps()

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "QuizEngine":
        """
        Loads and validates a quiz definition from YAML.

        Args:
            config_path: Path to the quiz YAML file.

        Raises:
            QuizConfigurationError: If the file is missing, unparsable or inconsistent.
            pydantic.ValidationError: If the document does not match the schema.
        """
        config = load_quiz_config_from_file(str(config_path))
        logger.info(
            f"Loaded quiz '{config.id}' v{config.version} ({len(config.questions)} questions) from {config_path}",
            extra={"quiz_id": config.id},
        )
        return cls(config)

    def _build_lookup_maps(self):
        self.questions_by_id: Dict[str, QuestionSpec] = {q.id: q for q in self.config.questions}
        sections: List[str] = []
        for q in self.config.questions:
            if q.section is not None and q.section not in sections:
                sections.append(q.section)
        self.sections = sections

    @property
    def quiz_id(self) -> str:
        return self.config.id

    def get_questions(self, section: Optional[str] = None) -> List[Dict[str, Any]]:
        """Questions as plain dicts for a rendering layer, optionally for one wizard section."""
        return [
            q.model_dump(mode="json", exclude_none=True)
            for q in self.config.questions
            if section is None or q.section == section
        ]

    def new_answer_set(self) -> AnswerSet:
        return AnswerSet()

    # --- Validity gate ---

    def is_complete(self, question_id: str, value: Any) -> bool:
        question = self.questions_by_id.get(question_id)
        if question is None:
            return False
        return is_complete(question, value)

    def missing_questions(self, answers: Mapping, section: Optional[str] = None) -> List[str]:
        return missing_questions(self.config.questions, answers, section)

    def is_form_valid(self, answers: Mapping, section: Optional[str] = None) -> bool:
        return is_form_valid(self.config.questions, answers, section)

    # --- Scoring and advice ---

    def calculate_score(self, answers: Mapping) -> ScoreResult:
        return self._scorer.score(answers)

    def generate_advice(self, answers: Mapping, result: ScoreResult) -> List[str]:
        return self._advisor.advise(answers, result)

    def evaluate(self, answers: Mapping) -> QuizOutcome:
        """
        Submits a completed form: checks completeness, freezes the answer
        set and returns the score together with its advice.

        Raises:
            IncompleteAnswersError: If any required question lacks a valid answer.
        """
        missing = self.missing_questions(answers)
        if missing:
            raise IncompleteAnswersError(missing)

        if isinstance(answers, AnswerSet):
            answers.freeze()

        result = self.calculate_score(answers)
        advice = self.generate_advice(answers, result)
        logger.info(
            f"Quiz '{self.quiz_id}' scored {result.numeric_score} ({result.tier.value}) with {len(advice)} advice items",
            extra={"quiz_id": self.quiz_id, "score": result.numeric_score, "tier": result.tier.value},
        )
        return QuizOutcome(quiz_id=self.quiz_id, result=result, advice=advice)
