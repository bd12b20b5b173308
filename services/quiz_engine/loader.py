import logging
import math
from typing import Any, Dict, Set

import yaml
from pydantic import ValidationError

from services.quiz_engine.models import (
    CHOICE_KINDS,
    CategoricalModifier,
    CompositeScoring,
    QuizConfig,
    QuizConfigurationError,
    WeightedSumScoring,
)

logger = logging.getLogger(__name__)


def _check_questions(config: QuizConfig) -> Set[str]:
    question_ids: Set[str] = set()
    for question in config.questions:
        if question.id in question_ids:
            raise QuizConfigurationError(f"Duplicate question ID '{question.id}' in quiz '{config.id}'")
        question_ids.add(question.id)

        if question.kind in CHOICE_KINDS:
            if not question.options:
                raise QuizConfigurationError(f"Choice question '{question.id}' has no options")
            if len(set(question.options)) != len(question.options):
                raise QuizConfigurationError(f"Duplicate option in question '{question.id}'")
        if question.min is not None and question.max is not None and question.max < question.min:
            raise QuizConfigurationError(f"Question '{question.id}' has max < min")
    return question_ids


def _check_weighted_sum(config: QuizConfig, scoring: WeightedSumScoring, question_ids: Set[str]) -> None:
    options_by_id = {q.id: q.options or () for q in config.questions}

    primary = scoring.primary
    if primary.question_id not in question_ids:
        raise QuizConfigurationError(f"Primary term references unknown question '{primary.question_id}'")
    unlisted = [label for label in primary.table if label not in options_by_id[primary.question_id]]
    if unlisted:
        # Not fatal: extra table rows are simply never selected by the form
        logger.warning(f"Quiz '{config.id}': base table labels not offered as options: {unlisted}")

    for rule in scoring.modifiers:
        if rule.question_id not in question_ids:
            raise QuizConfigurationError(f"Modifier references unknown question '{rule.question_id}'")
        if isinstance(rule, CategoricalModifier) and rule.default is not None and rule.default not in rule.table:
            logger.warning(f"Quiz '{config.id}': default '{rule.default}' for '{rule.question_id}' contributes nothing")
        if rule.type == "numeric" and rule.clamp[1] < rule.clamp[0]:
            raise QuizConfigurationError(f"Modifier for '{rule.question_id}' has an inverted clamp range")


def _check_composite(scoring: CompositeScoring, question_ids: Set[str]) -> None:
    for scale_name, labels in scoring.scales.items():
        if len(labels) < 2:
            raise QuizConfigurationError(f"Scale '{scale_name}' needs at least two labels")
        if len(set(labels)) != len(labels):
            raise QuizConfigurationError(f"Duplicate label in scale '{scale_name}'")

    for composite_name, composite in scoring.composites.items():
        for factor in composite.factors:
            if factor.question_id not in question_ids:
                raise QuizConfigurationError(
                    f"Composite '{composite_name}' references unknown question '{factor.question_id}'"
                )
            if factor.scale is not None and factor.scale not in scoring.scales:
                raise QuizConfigurationError(
                    f"Composite '{composite_name}' references unknown scale '{factor.scale}'"
                )

    weights = scoring.score.weights
    unknown = [name for name in weights if name not in scoring.composites]
    if unknown:
        raise QuizConfigurationError(f"Score weights reference unknown composites: {unknown}")
    if not math.isclose(sum(weights.values()), 1.0, abs_tol=1e-6):
        raise QuizConfigurationError(f"Score weights must sum to 1.0, got {sum(weights.values())}")
    stray = [name for name in scoring.score.inverted if name not in weights]
    if stray:
        raise QuizConfigurationError(f"Inverted composites are not weighted: {stray}")

    if scoring.tier_metric.composite not in scoring.composites:
        raise QuizConfigurationError(f"Tier metric references unknown composite '{scoring.tier_metric.composite}'")
    for level_name, level in scoring.levels.items():
        if level.composite not in scoring.composites:
            raise QuizConfigurationError(f"Level '{level_name}' references unknown composite '{level.composite}'")


def load_quiz_config_data(data: Dict[str, Any]) -> QuizConfig:
    """
    Validates the raw dictionary data against the QuizConfig model
    and performs the cross-reference checks pydantic cannot express.
    """
    try:
        config = QuizConfig.model_validate(data)
    except ValidationError as e:
        # Re-raise Pydantic's validation error for schema issues
        raise e

    question_ids = _check_questions(config)

    if isinstance(config.scoring, WeightedSumScoring):
        _check_weighted_sum(config, config.scoring, question_ids)
    else:
        _check_composite(config.scoring, question_ids)

    for rule in config.advice.rules:
        if rule.question_id is not None and rule.question_id not in question_ids:
            raise QuizConfigurationError(f"Advice rule references unknown question '{rule.question_id}'")

    return config


def load_quiz_config_from_file(file_path: str) -> QuizConfig:
    """
    Loads a quiz definition from a YAML file, validates it,
    and returns a QuizConfig object.
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise QuizConfigurationError(f"File not found: {file_path}")
    except yaml.YAMLError as e:
        raise QuizConfigurationError(f"Error parsing YAML file {file_path}: {e}")

    if data is None:
        raise QuizConfigurationError(f"YAML file is empty or invalid: {file_path}")
    if not isinstance(data, dict):
        raise QuizConfigurationError(f"YAML file must contain a mapping at the top level: {file_path}")

    return load_quiz_config_data(data)
