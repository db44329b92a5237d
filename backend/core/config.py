import os

from dotenv import load_dotenv

from backend.scheduling.day_grid import GridConfig


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: str) -> list[str]:
    raw = default if value is None else value
    return [item.strip() for item in raw.split(",") if item.strip()]


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinic.db")
DATABASE_ECHO = _get_bool(os.getenv("DATABASE_ECHO"), default=False)

CORS_ORIGINS = _get_list(os.getenv("CORS_ORIGINS"), "http://localhost:3000")

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

DAY_GRID_START = os.getenv("DAY_GRID_START", "07:00")
DAY_GRID_END = os.getenv("DAY_GRID_END", "23:55")
DAY_GRID_STEP_MINUTES = int(os.getenv("DAY_GRID_STEP_MINUTES", "5"))
DEFAULT_APPOINTMENT_DURATION_MINUTES = int(os.getenv("DEFAULT_APPOINTMENT_DURATION_MINUTES", "15"))

DEFAULT_DOCTORS = _get_list(os.getenv("DEFAULT_DOCTORS"), "Dr. Wong,Dr. Smith")
DEFAULT_ADMIN_USERNAME = os.getenv("DEFAULT_ADMIN_USERNAME", "")
DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "")


def get_grid_config() -> GridConfig:
    return GridConfig.from_labels(DAY_GRID_START, DAY_GRID_END, DAY_GRID_STEP_MINUTES)


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if DEFAULT_APPOINTMENT_DURATION_MINUTES <= 0:
        raise RuntimeError("DEFAULT_APPOINTMENT_DURATION_MINUTES must be positive.")
    get_grid_config()
