# services/quiz_engine/validity.py
# Completeness checks that gate progression through a quiz form.

from collections.abc import Mapping
from typing import Any, Iterable, List, Optional

from .models import QuestionKind, QuestionSpec
from .utils import to_finite_float

# Slider bounds when the question does not set them
DEFAULT_SLIDER_MIN = 0.0
DEFAULT_SLIDER_MAX = 100.0


def _within_bounds(number: float, lower: Optional[float], upper: Optional[float]) -> bool:
    if lower is not None and number < lower:
        return False
    if upper is not None and number > upper:
        return False
    return True


def is_complete(question: QuestionSpec, value: Any) -> bool:
    """
    Returns True if `value` is an acceptable answer for `question`.

    Optional questions are always complete. Never raises.
    """
    if not question.required:
        return True

    kind = question.kind
    if kind == QuestionKind.SINGLE_CHOICE:
        return isinstance(value, str) and len(value) > 0 and value in (question.options or ())

    if kind == QuestionKind.MULTI_CHOICE:
        if not isinstance(value, (list, tuple)) or not value:
            return False
        options = question.options or ()
        return all(isinstance(item, str) and item in options for item in value)

    if kind == QuestionKind.NUMERIC_SLIDER:
        # Sliders always produce real numbers; strings and booleans are not slider values
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        number = to_finite_float(value)
        if number is None:
            return False
        lower = question.min if question.min is not None else DEFAULT_SLIDER_MIN
        upper = question.max if question.max is not None else DEFAULT_SLIDER_MAX
        return _within_bounds(number, lower, upper)

    if kind == QuestionKind.NUMERIC_INPUT:
        number = to_finite_float(value)
        if number is None:
            return False
        return _within_bounds(number, question.min, question.max)

    if kind == QuestionKind.BOOLEAN:
        return isinstance(value, bool)

    return False


def _in_section(question: QuestionSpec, section: Optional[str]) -> bool:
    return section is None or question.section == section


def missing_questions(
    questions: Iterable[QuestionSpec],
    answers: Mapping,
    section: Optional[str] = None,
) -> List[str]:
    """Ids of incomplete questions in schema order, limited to `section` when given."""
    return [
        q.id for q in questions
        if _in_section(q, section) and not is_complete(q, answers.get(q.id))
    ]


def is_form_valid(
    questions: Iterable[QuestionSpec],
    answers: Mapping,
    section: Optional[str] = None,
) -> bool:
    return not missing_questions(questions, answers, section)
