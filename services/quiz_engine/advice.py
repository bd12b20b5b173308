# services/quiz_engine/advice.py
# Turns answers and a score into a short, ordered list of advice strings.

import logging
from collections.abc import Mapping
from typing import List, Optional

from .models import AdviceBand, AdviceConfig, AdviceRule, ScoreResult
from .utils import to_finite_float

logger = logging.getLogger(__name__)


def select_band(bands: List[AdviceBand], score: float) -> Optional[AdviceBand]:
    """The band with the highest min_score that the score reaches."""
    reached = [band for band in bands if score >= band.min_score]
    if not reached:
        return None
    return max(reached, key=lambda band: band.min_score)


def rule_matches(rule: AdviceRule, answers: Mapping, result: ScoreResult) -> bool:
    if rule.when == "tier_in":
        return result.tier.value in rule.value

    value = answers.get(rule.question_id)
    if rule.when == "equals":
        return value == rule.value
    if rule.when == "in":
        return isinstance(value, str) and value in rule.value
    if rule.when == "is_true":
        return value is True
    if rule.when == "is_not_true":
        # Unanswered counts as "not true"
        return value is not True
    if rule.when == "at_least":
        number = to_finite_float(value)
        return number is not None and number >= rule.value
    return False


class AdviceGenerator:
    """
    Builds the advice list in a fixed order: the general message for the
    score band first, then targeted messages in configuration order.
    Duplicates are dropped (first occurrence wins) and the list is capped
    at `max_items`.
    """

    def __init__(self, config: AdviceConfig):
        self.config = config

    def advise(self, answers: Mapping, result: ScoreResult) -> List[str]:
        messages: List[str] = []

        band = select_band(self.config.bands, result.numeric_score)
        if band is not None:
            messages.append(band.message)

        for rule in self.config.rules:
            if rule_matches(rule, answers, result):
                messages.append(rule.message)

        unique = list(dict.fromkeys(messages))
        if len(unique) > self.config.max_items:
            logger.debug(f"Trimming advice from {len(unique)} to {self.config.max_items} items")
        return unique[:self.config.max_items]
