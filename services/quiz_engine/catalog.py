import logging
from pathlib import Path
from typing import Dict, Iterator, List, Union

from .engine import QuizEngine
from .models import QuizConfigurationError, UnknownQuizError

logger = logging.getLogger(__name__)


class QuizCatalog:
    """Every quiz definition found in an assets directory, keyed by quiz id."""

    def __init__(self, assets_dir: Union[str, Path]):
        self.assets_dir = Path(assets_dir)
        if not self.assets_dir.is_dir():
            raise QuizConfigurationError(f"Quiz assets directory not found: {assets_dir}")

        self._engines: Dict[str, QuizEngine] = {}
        for path in sorted(self.assets_dir.glob("*.yml")):
            engine = QuizEngine.from_file(path)
            if engine.quiz_id in self._engines:
                raise QuizConfigurationError(f"Duplicate quiz ID '{engine.quiz_id}' in {path}")
            self._engines[engine.quiz_id] = engine

        logger.info(f"Quiz catalog loaded {len(self._engines)} quizzes from {self.assets_dir}")

    def get(self, quiz_id: str) -> QuizEngine:
        try:
            return self._engines[quiz_id]
        except KeyError:
            raise UnknownQuizError(f"Unknown quiz '{quiz_id}'") from None

    def ids(self) -> List[str]:
        return list(self._engines)

    def __contains__(self, quiz_id: object) -> bool:
        return quiz_id in self._engines

    def __iter__(self) -> Iterator[QuizEngine]:
        return iter(self._engines.values())

    def __len__(self) -> int:
        return len(self._engines)
