import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./medibook.db")
SEED_DEMO_DATA = _get_bool(os.getenv("SEED_DEMO_DATA"), default=True)

CORS_ORIGINS = _get_list(os.getenv("CORS_ORIGINS"), ["http://localhost:3000"])

WORKING_START_HOUR = int(os.getenv("WORKING_START_HOUR", "9"))
WORKING_END_HOUR = int(os.getenv("WORKING_END_HOUR", "18"))
SLOT_INTERVAL_MINUTES = int(os.getenv("SLOT_INTERVAL_MINUTES", "30"))

VIDEO_CONSULTATION_DISCOUNT = int(os.getenv("VIDEO_CONSULTATION_DISCOUNT", "100"))
MAX_APPOINTMENT_NOTES_LENGTH = int(os.getenv("MAX_APPOINTMENT_NOTES_LENGTH", "600"))

def validate_runtime_config() -> None:
    if not 0 <= WORKING_START_HOUR < WORKING_END_HOUR <= 24:
        raise RuntimeError("WORKING_START_HOUR must be before WORKING_END_HOUR.")
    if SLOT_INTERVAL_MINUTES <= 0 or 60 % SLOT_INTERVAL_MINUTES != 0:
        raise RuntimeError("SLOT_INTERVAL_MINUTES must evenly divide an hour.")
    if APP_ENV.lower() == "production" and DATABASE_URL.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must point at a server database in production.")
