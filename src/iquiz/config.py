import os


def _env(name: str, default):
    value = os.environ.get(f"IQUIZ_{name}")
    if value is None:
        return default
    if isinstance(default, bool):
        return value.lower() in ("1", "true", "yes")
    return type(default)(value)


class Settings:
    PROJECT_NAME: str = "iquiz"
    DEBUG: bool = _env("DEBUG", False)
    LOG_DIR: str = _env("LOG_DIR", "log")
    LOG_FILE: str = _env("LOG_FILE", "iquiz.log")
    LOG_MAX_BYTES: int = 5_000_000
    LOG_BACKUP_COUNT: int = 3
    REDIS_URL: str = _env("REDIS_URL", "redis://localhost:6379/0")
    DEFAULT_DATA_URL: str = _env(
        "DEFAULT_DATA_URL", "https://tednewardsandbox.site44.com/questions.json"
    )
    DEFAULT_REFRESH_INTERVAL: float = _env("DEFAULT_REFRESH_INTERVAL", 60.0)
    MAX_REFRESH_INTERVAL: float = 86400.0
    PREFS_URL_KEY: str = "quizDataURL"
    PREFS_INTERVAL_KEY: str = "quizRefreshInterval"
    SESSION_COOKIE_NAME: str = "quiz_session_id"
    SESSION_TIMEOUT_MINUTES: int = _env("SESSION_TIMEOUT_MINUTES", 120)
    REACHABILITY_TIMEOUT: float = _env("REACHABILITY_TIMEOUT", 3.0)


settings = Settings()
