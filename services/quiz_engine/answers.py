import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional

from .models import AnswerSetFrozenError

logger = logging.getLogger(__name__)


class AnswerSet(Mapping):
    """
    The user's responses, keyed by question id.

    Built up one answer at a time while the quiz is in progress and frozen
    when the quiz is submitted. Restarting a quiz means creating a new
    AnswerSet rather than clearing this one.
    """

    def __init__(self, initial: Optional[Mapping] = None):
        self._values: Dict[str, Any] = dict(initial or {})
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def set(self, question_id: str, value: Any) -> None:
        if self._frozen:
            raise AnswerSetFrozenError(f"Cannot answer '{question_id}': answer set is frozen")
        self._values[question_id] = value

    def discard(self, question_id: str) -> None:
        if self._frozen:
            raise AnswerSetFrozenError(f"Cannot clear '{question_id}': answer set is frozen")
        self._values.pop(question_id, None)

    def freeze(self) -> "AnswerSet":
        if not self._frozen:
            logger.debug(f"Freezing answer set with {len(self._values)} answers")
        self._frozen = True
        return self

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __getitem__(self, question_id: str) -> Any:
        return self._values[question_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"AnswerSet({self._values!r}, {state})"
