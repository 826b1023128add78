"""
Application configuration using pydantic-settings.
"""

from decimal import Decimal
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


def find_env_file() -> str:
    """Find .env file by checking multiple locations."""
    # Try relative to this file (server/lavajato/config.py)
    current_dir = Path(__file__).parent
    candidates = [
        current_dir / ".env",  # server/lavajato/.env
        current_dir.parent / ".env",  # server/.env
        current_dir.parent.parent / ".env",  # project root/.env
    ]

    for candidate in candidates:
        if candidate.exists():
            return str(candidate)

    # Default to project root
    return str(current_dir.parent.parent / ".env")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=find_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./lavajato.db"

    # Twilio (WhatsApp completion notices)
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_WHATSAPP_FROM: str = ""
    NOTIFICATION_TIMEOUT_SECONDS: float = 10.0

    # Pickup & delivery ("leva e traz")
    # The fee charged on the appointment and the fee quoted by the mobile
    # checkout differ; both stay configurable until product settles on one.
    PICKUP_FEE: Decimal = Decimal("15.00")
    PICKUP_QUOTED_FEE: Decimal = Decimal("50.00")

    # Auth (stubbed phone login)
    JWT_SECRET_KEY: str = "change-me-in-production"  # pragma: allowlist secret
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    VERIFICATION_CODE: str = "123456"

    # Business Logic
    LOYALTY_POINTS_PER_COMPLETION: int = 0  # 0 keeps points manual


settings = Settings()
