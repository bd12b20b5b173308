import copy
import logging
import pytest
import yaml
from pydantic import ValidationError

from services.quiz_engine.loader import load_quiz_config_data, load_quiz_config_from_file
from services.quiz_engine.models import (
    CompositeScoring,
    QuizConfig,
    QuizConfigurationError,
    WeightedSumScoring,
)

MINIMAL_WEIGHTED_QUIZ = {
    "id": "mini",
    "title": "Mini Quiz",
    "questions": [
        {"id": "spot", "kind": "single-choice", "prompt": "Where?", "options": ["Attic", "Sofa"]},
        {"id": "clutter", "kind": "numeric-slider", "prompt": "Clutter", "min": 0, "max": 100},
        {"id": "gate", "kind": "boolean", "prompt": "Gate?"},
    ],
    "scoring": {
        "model": "weighted_sum",
        "primary": {"question_id": "spot", "table": {"Attic": 90, "Sofa": 40}},
        "modifiers": [
            {"type": "numeric", "question_id": "clutter", "coefficient": 0.3},
            {"type": "boolean", "question_id": "gate", "when_true": -10},
        ],
        "thresholds": {"low": 0, "moderate": 36, "high": 66},
    },
    "advice": {
        "bands": [{"min_score": 0, "message": "ok"}],
        "rules": [{"when": "is_not_true", "question_id": "gate", "message": "Fit a gate."}],
    },
}

MINIMAL_COMPOSITE_QUIZ = {
    "id": "mini_composite",
    "title": "Mini Composite",
    "questions": [
        {"id": "mood", "kind": "single-choice", "prompt": "Mood?", "options": ["Bad", "Good"], "section": "one"},
        {"id": "hours", "kind": "numeric-input", "prompt": "Hours?", "min": 0, "max": 10, "section": "two"},
    ],
    "scoring": {
        "model": "composite",
        "scales": {"mood": ["Bad", "Good"]},
        "composites": {
            "mood": {"factors": [{"question_id": "mood", "scale": "mood"}]},
            "effort": {"factors": [{"question_id": "hours", "min": 0, "max": 10}]},
        },
        "score": {"weights": {"mood": 0.6, "effort": 0.4}, "inverted": ["effort"]},
        "tier_metric": {"composite": "effort", "thresholds": {"moderate": 40, "high": 70}},
        "levels": {"effort_level": {"composite": "effort", "max_level": 3}},
    },
    "advice": {"bands": [{"min_score": 0, "message": "ok"}], "max_items": 2},
}


def _weighted(**patch):
    data = copy.deepcopy(MINIMAL_WEIGHTED_QUIZ)
    data.update(patch)
    return data


def _composite_scoring(**patch):
    data = copy.deepcopy(MINIMAL_COMPOSITE_QUIZ)
    data["scoring"].update(patch)
    return data


def create_temp_yaml(tmp_path, filename, content):
    """Writes `content` as YAML and returns the path as a string."""
    filepath = tmp_path / filename
    with open(filepath, 'w', encoding='utf-8') as f:
        yaml.dump(content, f, allow_unicode=True)
    return str(filepath)


# --- Valid definitions ---

def test_load_minimal_weighted_quiz():
    config = load_quiz_config_data(copy.deepcopy(MINIMAL_WEIGHTED_QUIZ))
    assert isinstance(config, QuizConfig)
    assert isinstance(config.scoring, WeightedSumScoring)
    assert config.questions[0].options == ("Attic", "Sofa")
    assert config.questions[0].required is True
    assert config.scoring.primary.default_base == 50.0
    assert config.advice.max_items == 8


def test_load_minimal_composite_quiz():
    config = load_quiz_config_data(copy.deepcopy(MINIMAL_COMPOSITE_QUIZ))
    assert isinstance(config.scoring, CompositeScoring)
    assert config.scoring.levels["effort_level"].max_level == 3


def test_load_from_file(tmp_path):
    path = create_temp_yaml(tmp_path, "mini.yml", MINIMAL_WEIGHTED_QUIZ)
    config = load_quiz_config_from_file(path)
    assert config.id == "mini"


def test_shipped_definitions_load(assets_dir):
    for path in sorted(assets_dir.glob("*.yml")):
        config = load_quiz_config_from_file(str(path))
        assert config.questions


def test_config_is_immutable():
    config = load_quiz_config_data(copy.deepcopy(MINIMAL_WEIGHTED_QUIZ))
    with pytest.raises(ValidationError):
        config.title = "Changed"
    with pytest.raises(ValidationError):
        config.questions[0].prompt = "Changed"


# --- File errors ---

def test_missing_file(tmp_path):
    with pytest.raises(QuizConfigurationError, match="File not found"):
        load_quiz_config_from_file(str(tmp_path / "nope.yml"))


def test_empty_file(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(QuizConfigurationError, match="empty or invalid"):
        load_quiz_config_from_file(str(path))


def test_malformed_yaml(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("id: [unclosed\n", encoding="utf-8")
    with pytest.raises(QuizConfigurationError, match="Error parsing YAML"):
        load_quiz_config_from_file(str(path))


def test_top_level_list_rejected(tmp_path):
    path = create_temp_yaml(tmp_path, "list.yml", [1, 2, 3])
    with pytest.raises(QuizConfigurationError, match="mapping"):
        load_quiz_config_from_file(path)


# --- Schema errors (pydantic) ---

def test_missing_required_field():
    data = _weighted()
    del data["scoring"]
    with pytest.raises(ValidationError):
        load_quiz_config_data(data)


def test_unknown_scoring_model():
    data = _weighted()
    data["scoring"]["model"] = "neural"
    with pytest.raises(ValidationError):
        load_quiz_config_data(data)


def test_unknown_question_kind():
    data = _weighted()
    data["questions"][0]["kind"] = "dropdown"
    with pytest.raises(ValidationError):
        load_quiz_config_data(data)


def test_thresholds_must_ascend():
    data = _weighted()
    data["scoring"]["thresholds"] = {"low": 0, "moderate": 70, "high": 40}
    with pytest.raises(ValidationError, match="ascending"):
        load_quiz_config_data(data)


def test_factor_needs_scale_or_range():
    data = _composite_scoring()
    data["scoring"]["composites"]["effort"]["factors"][0] = {"question_id": "hours", "min": 0}
    with pytest.raises(ValidationError):
        load_quiz_config_data(data)


# --- Cross-reference checks ---

def test_duplicate_question_id():
    data = _weighted()
    data["questions"].append({"id": "gate", "kind": "boolean", "prompt": "Again?"})
    with pytest.raises(QuizConfigurationError, match="Duplicate question ID 'gate'"):
        load_quiz_config_data(data)


def test_choice_question_without_options():
    data = _weighted()
    data["questions"][0]["options"] = []
    with pytest.raises(QuizConfigurationError, match="has no options"):
        load_quiz_config_data(data)


def test_duplicate_options():
    data = _weighted()
    data["questions"][0]["options"] = ["Attic", "Attic"]
    with pytest.raises(QuizConfigurationError, match="Duplicate option"):
        load_quiz_config_data(data)


def test_modifier_unknown_question():
    data = _weighted()
    data["scoring"]["modifiers"].append({"type": "boolean", "question_id": "ghost", "when_true": 5})
    with pytest.raises(QuizConfigurationError, match="unknown question 'ghost'"):
        load_quiz_config_data(data)


def test_primary_unknown_question():
    data = _weighted()
    data["scoring"]["primary"]["question_id"] = "location"
    with pytest.raises(QuizConfigurationError, match="Primary term"):
        load_quiz_config_data(data)


def test_extra_table_label_only_warns(caplog):
    data = _weighted()
    data["scoring"]["primary"]["table"]["Roof"] = 99
    with caplog.at_level("WARNING"):
        load_quiz_config_data(data)
    assert "Roof" in caplog.text


def test_advice_rule_unknown_question():
    data = _weighted()
    data["advice"]["rules"].append({"when": "is_true", "question_id": "ghost", "message": "boo"})
    with pytest.raises(QuizConfigurationError, match="Advice rule"):
        load_quiz_config_data(data)


def test_composite_weights_must_sum_to_one():
    data = _composite_scoring(score={"weights": {"mood": 0.6, "effort": 0.6}})
    with pytest.raises(QuizConfigurationError, match="sum to 1.0"):
        load_quiz_config_data(data)


def test_composite_unknown_scale():
    data = _composite_scoring()
    data["scoring"]["composites"]["mood"]["factors"][0]["scale"] = "vibes"
    with pytest.raises(QuizConfigurationError, match="unknown scale 'vibes'"):
        load_quiz_config_data(data)


def test_scale_needs_two_labels():
    data = _composite_scoring(scales={"mood": ["Only"]})
    with pytest.raises(QuizConfigurationError, match="at least two labels"):
        load_quiz_config_data(data)


def test_score_weights_unknown_composite():
    data = _composite_scoring(score={"weights": {"mood": 0.5, "stress": 0.5}})
    with pytest.raises(QuizConfigurationError, match="unknown composites"):
        load_quiz_config_data(data)


def test_inverted_composite_must_be_weighted():
    data = _composite_scoring(score={"weights": {"mood": 1.0}, "inverted": ["effort"]})
    with pytest.raises(QuizConfigurationError, match="not weighted"):
        load_quiz_config_data(data)


def test_tier_metric_unknown_composite():
    data = _composite_scoring(tier_metric={"composite": "stress", "thresholds": {"moderate": 40, "high": 70}})
    with pytest.raises(QuizConfigurationError, match="Tier metric"):
        load_quiz_config_data(data)


def test_level_unknown_composite():
    data = _composite_scoring(levels={"stress_level": {"composite": "stress", "max_level": 3}})
    with pytest.raises(QuizConfigurationError, match="Level 'stress_level'"):
        load_quiz_config_data(data)


@pytest.mark.parametrize("filename", ["holiday_hide_and_seek.yml", "work_life_balance.yml"])
def test_shipped_quizzes_load_without_warnings(assets_dir, caplog, filename):
    with caplog.at_level(logging.WARNING, logger="services.quiz_engine.loader"):
        load_quiz_config_from_file(str(assets_dir / filename))
    assert [r for r in caplog.records if r.levelno >= logging.WARNING] == []


def test_unoffered_table_label_logs_warning(caplog):
    data = copy.deepcopy(MINIMAL_WEIGHTED_QUIZ)
    data["scoring"]["primary"]["table"]["Garage"] = 80
    with caplog.at_level(logging.WARNING, logger="services.quiz_engine.loader"):
        load_quiz_config_data(data)
    assert any("Garage" in r.getMessage() for r in caplog.records)
