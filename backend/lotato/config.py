"""
backend/lotato/config.py

Purpose:
    Central settings loading for the LOTATO back office.

Dependencies:
    - pydantic-settings
    - pathlib
"""

from pathlib import Path

from pydantic_settings import BaseSettings

# Prefer backend/.env, fallback to project-root .env.
_BACKEND_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
_ROOT_ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"


class Settings(BaseSettings):
    # Required; validated at startup by database.connect and TokenService.
    MONGO_URI: str = ""
    MONGO_DB: str = "lotato"
    JWT_SECRET: str = ""
    JWT_SECRET_OLD: str = ""  # Set during rotation; cleared once old tokens expired
    BACKEND_CORS_ORIGINS: str = "http://localhost:5173"

    # Agents work a full shift on one login.
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 24 * 60

    LOG_LEVEL: str = "INFO"

    # Draw schedule
    DRAW_TIMEZONE: str = "America/New_York"
    BET_CUTOFF_MINUTES: int = 5

    # Percent of the ticket total credited to the issuing agent
    DEFAULT_COMMISSION_RATE: float = 10.0

    TICKET_LIST_MAX: int = 500

    # Seed master user (leave empty to skip seeding)
    SEED_MASTER_USERNAME: str = ""
    SEED_MASTER_PASSWORD: str = ""

    model_config = {
        "env_file": (str(_BACKEND_ENV_FILE), str(_ROOT_ENV_FILE)),
        "extra": "ignore",
    }


settings = Settings()
