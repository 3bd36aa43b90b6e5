# app/core/config.py
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    SECRET_KEY: str = "your-super-secret-jwt-key-change-in-prod"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 43200  # 30 days

    DATABASE_URL: str = "sqlite:///./attendance.db"

    CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://127.0.0.1",
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # IANA name, e.g. "Asia/Kolkata". None = server local time.
    TIMEZONE: Optional[str] = None

    # How early a teacher may open a session before the lecture starts
    SESSION_OPEN_LEAD_MINUTES: int = 5
    FACE_MATCH_THRESHOLD: float = 0.6

    SWEEP_ENABLED: bool = True
    SWEEP_INTERVAL_SECONDS: int = 60

    LOG_LEVEL: str = "INFO"
    DEFAULT_PROFILE_PICTURE: str = "https://example.com/default-profile.png"

    class Config:
        env_file = ".env"

# Created once
settings = Settings()
