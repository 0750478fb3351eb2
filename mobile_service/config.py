# mobile_service/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./mobile_service.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 5000
    FRONTEND_URL: str = "http://localhost:5173"   # Used in cancellation links

    # ── Security ──────────────────────────────────────────────────────────
    SECRET_KEY: str = "change-me-in-production"
    TOKEN_ALGORITHM: str = "HS256"
    TOKEN_EXPIRE_MINUTES: int = 24 * 60          # Staff sessions last one day

    # ── Email (Resend) ────────────────────────────────────────────────────
    RESEND_API_KEY: Optional[str] = None         # Leave empty to skip sending
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "Mobile Oil Service <bookings@example.com>"
    BUSINESS_EMAIL: str = "office@example.com"
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    # ── Booking rules ─────────────────────────────────────────────────────
    TIME_SLOTS: list[str] = [
        "08:00 AM", "09:00 AM", "10:00 AM", "11:00 AM",
        "01:00 PM", "02:00 PM", "03:00 PM", "04:00 PM",
    ]
    SERVICE_PRICES: dict[str, int] = {
        "Standard Blend": 59,
        "High Mileage": 79,
        "Full Synthetic": 89,
    }
    CANCELLATION_CUTOFF_HOURS: int = 2           # Customers cannot cancel inside this window
    FOLLOW_UP_MONTHS: int = 6                    # Next-service reminder date offset

    # ── Reminder job ──────────────────────────────────────────────────────
    REMINDERS_ENABLED: bool = True
    REMINDER_HOUR: int = 8                       # Local wall-clock hour, 0-23

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "scheduler.log"              # Written under logs/ at the repo root
    LOG_MAX_MB: int = 5
    LOG_BACKUPS: int = 10

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
