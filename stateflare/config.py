import os


def normalize_database_url(url: str) -> str:
    if url.startswith("postgres://"):
        return "postgresql+psycopg://" + url[len("postgres://") :]
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://") :]
    return url


def _as_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SQLALCHEMY_DATABASE_URI = normalize_database_url(
        os.getenv("DATABASE_URL", "sqlite:///stateflare.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLITE_BUSY_TIMEOUT = int(os.getenv("SQLITE_BUSY_TIMEOUT", "30"))

    # "unique" keeps one row per (site, visitor); "pageviews" only keeps site counters.
    STATS_MODE = os.getenv("STATS_MODE", "unique").strip().lower()

    TRUST_FORWARDED_HEADERS = _as_bool("TRUST_FORWARDED_HEADERS", "true")
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL")
    TRACK_SCRIPT_MAX_AGE = int(os.getenv("TRACK_SCRIPT_MAX_AGE", "3600"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
