# app/config/settings.py
"""Application settings, read from environment variables once."""

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "Team Task Manager API")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./team_tasks.db")
    DB_SSLMODE: str = os.getenv("DB_SSLMODE", "require")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    RELOAD: bool = os.getenv("RELOAD", "true").lower() == "true"


settings = Settings()
