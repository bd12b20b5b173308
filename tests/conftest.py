import pytest
from pathlib import Path

from services.quiz_engine.engine import QuizEngine

ASSETS_DIR = Path(__file__).resolve().parents[1] / "assets"
HIDE_AND_SEEK_PATH = ASSETS_DIR / "holiday_hide_and_seek.yml"
WORK_LIFE_PATH = ASSETS_DIR / "work_life_balance.yml"


@pytest.fixture(scope="session")
def assets_dir() -> Path:
    return ASSETS_DIR


@pytest.fixture(scope="session")
def hide_and_seek_engine() -> QuizEngine:
    """Engine for the shipped Holiday Hide-and-Seek definition."""
    return QuizEngine.from_file(HIDE_AND_SEEK_PATH)


@pytest.fixture(scope="session")
def work_life_engine() -> QuizEngine:
    """Engine for the shipped Work-Life Balance definition."""
    return QuizEngine.from_file(WORK_LIFE_PATH)


@pytest.fixture
def neutral_hide_and_seek_answers():
    """A complete submission where every modifier contributes zero."""
    return {
        "spot": "Behind curtains",
        "clutter_level": 0,
        "stairs_nearby": False,
        "heaters_or_candles": False,
        "cords_or_string_lights": False,
        "breakables_within_reach": False,
        "age_group": "9–12",
        "kids_count": "1",
        "understands_rules": False,
        "time_limit_set": False,
        "adult_checkins": False,
    }


@pytest.fixture
def best_work_life_answers():
    """Best label on every sentiment question, no sacrifices, no AI use."""
    return {
        "energy_level": "Thriving",
        "work_satisfaction": "Very satisfied",
        "personal_time_quality": "Excellent",
        "boundaries_respected": "Strongly agree",
        "skipped_meals": "Never",
        "missed_personal_events": "Never",
        "weekend_work": "Never",
        "lost_sleep": "Never",
        "ai_tools_count": 0,
        "ai_hours_saved": 0,
        "automation_share": 0,
    }


@pytest.fixture
def worst_work_life_answers():
    return {
        "energy_level": "Drained",
        "work_satisfaction": "Very dissatisfied",
        "personal_time_quality": "Poor",
        "boundaries_respected": "Strongly disagree",
        "skipped_meals": "Always",
        "missed_personal_events": "Always",
        "weekend_work": "Always",
        "lost_sleep": "Always",
        "ai_tools_count": 10,
        "ai_hours_saved": 20,
        "automation_share": 100,
    }
