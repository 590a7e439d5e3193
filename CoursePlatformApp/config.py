import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str = "") -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Deployment configuration read from the environment."""
    secret_key: str = os.getenv(
        "DJANGO_SECRET_KEY",
        "dev-only-insecure-key-change-me-0123456789abcdefghijklmnopqrstuvwxyz",
    )
    debug: bool = _env_bool("DJANGO_DEBUG")
    allowed_hosts: list[str] = field(default_factory=lambda: _env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1"))
    db_engine: str = os.getenv("DB_ENGINE", "sqlite")
    db_name: str = os.getenv("DB_NAME", "course_platform")
    db_host: str = os.getenv("DB_HOST", "localhost")
    db_port: str = os.getenv("DB_PORT", "5432")
    db_user: str = os.getenv("DB_USER", "course_platform")
    db_password: str = os.getenv("DB_PASSWORD", "course_platform")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    media_root: str = os.getenv("MEDIA_ROOT", "media")
    max_upload_mb: int = int(os.getenv("MAX_UPLOAD_MB", "50"))
    default_from_email: str = os.getenv("DEFAULT_FROM_EMAIL", "no-reply@course-platform.local")

settings = Settings()
