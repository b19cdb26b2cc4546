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


DEFAULT_JWT_SECRET = "supersecret"

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mentorship.db")

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY") or os.getenv("JWT_SECRET") or DEFAULT_JWT_SECRET
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", str(24 * 60)))

PASSWORD_HASH_ROUNDS = int(os.getenv("PASSWORD_HASH_ROUNDS", "10"))

CORS_ALLOW_ORIGINS = _get_list(os.getenv("CORS_ALLOW_ORIGINS"), ["*"])

# Off: status changes, feedback and comments are accepted in any session state.
ENFORCE_SESSION_STATUS_RULES = _get_bool(os.getenv("ENFORCE_SESSION_STATUS_RULES"), default=False)


def uses_default_secret() -> bool:
    return JWT_SECRET_KEY == DEFAULT_JWT_SECRET


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and uses_default_secret():
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
