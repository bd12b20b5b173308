from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# Load .env file if it exists, for local development
# In production, environment variables should be set directly.
if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv()

DEFAULT_ASSETS_DIR = Path(__file__).resolve().parents[2] / "assets"


class QuizSettings(BaseSettings):
    assets_dir: str = str(DEFAULT_ASSETS_DIR)  # Directory holding the quiz YAML definitions
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"

    model_config = SettingsConfigDict(env_prefix='QUIZ_')


# Instantiate settings
quiz_settings = QuizSettings()
