"""
Quiz Scoring Engine

Both scoring models are total: missing, unmatched or malformed answers
fall back to the defaults documented on the configuration models and
never raise.
"""
import logging
from collections.abc import Mapping
from typing import Any, Dict, Union

from .models import (
    BooleanModifier,
    CategoricalModifier,
    CompositeScoring,
    CompositeSpec,
    Factor,
    NumericModifier,
    ScoreResult,
    Tier,
    TierThresholds,
    WeightedSumScoring,
)
from .utils import clamp, round_half_up, to_finite_float

logger = logging.getLogger(__name__)

# Normalised value for ordinal answers that are missing or not on the scale
ORDINAL_MIDPOINT = 0.5


def derive_tier(score: float, thresholds: TierThresholds) -> Tier:
    """Highest tier whose (inclusive) lower bound the score reaches; Low otherwise."""
    if score >= thresholds.high:
        return Tier.HIGH
    if score >= thresholds.moderate:
        return Tier.MODERATE
    return Tier.LOW


class WeightedSumScorer:
    """
    Base value from a lookup table keyed by one primary answer, plus
    additive modifiers from the remaining answers.
    """

    def __init__(self, config: WeightedSumScoring):
        self.config = config

    def score(self, answers: Mapping) -> ScoreResult:
        base = self._base_term(answers)
        modifiers = sum(self._modifier_term(rule, answers) for rule in self.config.modifiers)

        raw = base + modifiers
        numeric_score = round_half_up(clamp(raw, 0.0, 100.0))
        tier = derive_tier(numeric_score, self.config.thresholds)

        logger.debug(f"Weighted-sum score: base={base} modifiers={modifiers} raw={raw} -> {numeric_score} ({tier.value})")
        return ScoreResult(
            numeric_score=numeric_score,
            tier=tier,
            auxiliary_metrics={"base": base, "modifiers": modifiers, "raw": raw},
        )

    def _base_term(self, answers: Mapping) -> float:
        primary = self.config.primary
        label = answers.get(primary.question_id)
        if label is None:
            label = primary.default_answer
        if isinstance(label, str) and label in primary.table:
            return primary.table[label]
        logger.debug(f"No base value for '{primary.question_id}'={label!r}, using default {primary.default_base}")
        return primary.default_base

    def _modifier_term(self, rule, answers: Mapping) -> float:
        value = answers.get(rule.question_id)

        if isinstance(rule, NumericModifier):
            number = to_finite_float(value)
            if number is None:
                number = rule.default
            lower, upper = rule.clamp
            return clamp(number, lower, upper) * rule.coefficient

        if isinstance(rule, BooleanModifier):
            # Only an explicit True counts; missing is not the same as False but contributes nothing either
            return rule.when_true if value is True else 0.0

        if isinstance(rule, CategoricalModifier):
            if value is None:
                value = rule.default
            if isinstance(value, str):
                return rule.table.get(value, 0.0)
            return 0.0

        return 0.0


class CompositeScorer:
    """
    Multi-metric scorer.

    Every factor is normalised to [0, 1]; composites are weighted means of
    factors. The score blends composites with a weight vector summing to 1,
    the tier comes from its own independently weighted composite, and levels
    map a composite onto a 0..N integer scale.
    """

    def __init__(self, config: CompositeScoring):
        self.config = config

    def normalise_factor(self, factor: Factor, value: Any) -> float:
        if factor.scale is not None:
            labels = self.config.scales.get(factor.scale, [])
            if isinstance(value, str) and value in labels and len(labels) > 1:
                normalised = labels.index(value) / (len(labels) - 1)
            else:
                normalised = ORDINAL_MIDPOINT
        else:
            number = to_finite_float(value)
            if number is None:
                number = factor.default if factor.default is not None else factor.min
            span = factor.max - factor.min
            normalised = (clamp(number, factor.min, factor.max) - factor.min) / span

        return 1.0 - normalised if factor.invert else normalised

    def composite_value(self, composite: CompositeSpec, answers: Mapping) -> float:
        total_weight = sum(f.weight for f in composite.factors)
        weighted = sum(
            f.weight * self.normalise_factor(f, answers.get(f.question_id))
            for f in composite.factors
        )
        return clamp(weighted / total_weight, 0.0, 1.0)

    def composite_values(self, answers: Mapping) -> Dict[str, float]:
        return {
            name: self.composite_value(spec, answers)
            for name, spec in self.config.composites.items()
        }

    def score(self, answers: Mapping) -> ScoreResult:
        values = self.composite_values(answers)

        blend = self.config.score
        blended = 0.0
        for name, weight in blend.weights.items():
            value = values[name]
            blended += weight * (1.0 - value if name in blend.inverted else value)
        numeric_score = round_half_up(clamp(blended * 100.0, 0.0, 100.0))

        tier_metric = self.config.tier_metric
        tier_value = round_half_up(values[tier_metric.composite] * 100.0)
        tier = derive_tier(tier_value, tier_metric.thresholds)

        metrics: Dict[str, float] = {name: round(value * 100.0, 1) for name, value in values.items()}
        metrics[tier_metric.composite] = tier_value
        for level_name, level in self.config.levels.items():
            level_value = round_half_up(values[level.composite] * level.max_level)
            metrics[level_name] = max(0, min(level.max_level, level_value))

        logger.debug(f"Composite score: composites={metrics} -> {numeric_score}, {tier_metric.composite} tier {tier.value}")
        return ScoreResult(
            numeric_score=numeric_score,
            tier=tier,
            tier_source=tier_metric.composite,
            auxiliary_metrics=metrics,
        )


Scorer = Union[WeightedSumScorer, CompositeScorer]


def build_scorer(config: Union[WeightedSumScoring, CompositeScoring]) -> Scorer:
    """Picks the scorer implementation for a quiz's scoring configuration."""
    if isinstance(config, WeightedSumScoring):
        return WeightedSumScorer(config)
    if isinstance(config, CompositeScoring):
        return CompositeScorer(config)
    raise TypeError(f"Unsupported scoring configuration: {type(config).__name__}")


def score_answers(config: Union[WeightedSumScoring, CompositeScoring], answers: Mapping) -> ScoreResult:
    return build_scorer(config).score(answers)
