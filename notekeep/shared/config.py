# notekeep/shared/config.py
from pydantic import BaseModel
import os

class Settings(BaseModel):
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # storage (local stand-in for the managed document db)
    DB_URL: str | None = os.getenv("DB_URL")
    FEED_QUEUE_MAX: int = int(os.getenv("FEED_QUEUE_MAX", "100"))

    # auth
    MIN_PASSWORD_LEN: int = int(os.getenv("MIN_PASSWORD_LEN", "6"))
    JWT_KEY: str = os.getenv("JWT_KEY", "dev-secret")
    JWT_ALG: str = os.getenv("JWT_ALG", "HS256")
    JWT_EXPIRE_MIN: int = int(os.getenv("JWT_EXPIRE_MIN", "60"))

    # content suggestions (Gemini REST)
    GEMINI_API_KEY: str | None = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    GEMINI_BASE_URL: str = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    GEMINI_TIMEOUT: float = float(os.getenv("GEMINI_TIMEOUT", "30"))

settings = Settings()
