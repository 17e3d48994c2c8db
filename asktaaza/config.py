import os
from dataclasses import dataclass


def _env(name: str, default: str) -> str:
    return os.getenv(name, default)


def _int_env(name: str, default: int) -> int:
    try:
        return int(_env(name, str(default)))
    except Exception:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(_env(name, str(default)))
    except Exception:
        return default


@dataclass
class Settings:
    db_url: str = "sqlite:///./asktaaza.db"
    secret_key: str = "dev-secret-change-me"
    admin_emails: tuple[str, ...] = ()
    log_level: str = "INFO"
    # submission guard
    max_submissions_per_day: int = 3
    min_seconds_between: int = 60
    history_size: int = 10
    duplicate_threshold: float = 0.7


def _split_emails(raw: str) -> tuple[str, ...]:
    return tuple(e.strip().lower() for e in raw.split(",") if e.strip())


def get_settings() -> Settings:
    return Settings(
        db_url=_env("ASKTAAZA_DB_URL", "sqlite:///./asktaaza.db"),
        secret_key=_env("ASKTAAZA_SECRET_KEY", "dev-secret-change-me"),
        admin_emails=_split_emails(_env("ASKTAAZA_ADMIN_EMAILS", "")),
        log_level=_env("ASKTAAZA_LOG_LEVEL", "INFO").upper(),
        max_submissions_per_day=_int_env("ASKTAAZA_MAX_SUBMISSIONS_PER_DAY", 3),
        min_seconds_between=_int_env("ASKTAAZA_MIN_SECONDS_BETWEEN", 60),
        history_size=_int_env("ASKTAAZA_SUBMISSION_HISTORY", 10),
        duplicate_threshold=_float_env("ASKTAAZA_DUPLICATE_THRESHOLD", 0.7),
    )
