import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    gemini_api_key: str | None = os.getenv("GEMINI_API_KEY")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    practice_temperature: float = float(os.getenv("PRACTICE_TEMPERATURE", "0.4"))
    chat_temperature: float = float(os.getenv("CHAT_TEMPERATURE", "0.7"))
    default_question_limit: int = int(os.getenv("DEFAULT_QUESTION_LIMIT", "10"))
    max_question_limit: int = int(os.getenv("MAX_QUESTION_LIMIT", "50"))
    # out of 10; pedagogically arbitrary, so keep it tunable
    passing_score: int = int(os.getenv("PASSING_SCORE", "6"))
    topic_min: int = int(os.getenv("TOPIC_MIN", "8"))
    topic_max: int = int(os.getenv("TOPIC_MAX", "12"))
    flashcard_count: int = int(os.getenv("FLASHCARD_COUNT", "10"))
    exam_year_from: int = int(os.getenv("EXAM_YEAR_FROM", "2015"))
    exam_year_to: int = int(os.getenv("EXAM_YEAR_TO", "2024"))
    profile_store_path: str = os.getenv("PROFILE_STORE_PATH", ".examenbuddy/profile.json")
    transcript_dir: str = os.getenv("TRANSCRIPT_DIR", "logs")
    log_level: str = os.getenv("LOG_LEVEL", "DEBUG")
    cors_origins: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

settings = Settings()
