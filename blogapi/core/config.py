import os
from functools import lru_cache


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Application settings read from the environment"""

    def __init__(self):
        self.app_env = os.getenv("APP_ENV", "development")
        self.database_url = os.getenv("DATABASE_URL")
        self.secret_key = os.getenv("SECRET_KEY", "blog-api-secret-key")  # don't use this in production
        self.access_token_expire_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(24 * 60)))
        self.post_max_age_hours = int(os.getenv("POST_MAX_AGE_HOURS", "24"))
        self.sweep_interval_minutes = int(os.getenv("SWEEP_INTERVAL_MINUTES", "60"))
        self.sweeper_enabled = _env_bool("SWEEPER_ENABLED", self.app_env != "test")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")


@lru_cache()
def get_settings() -> Settings:
    """获取应用配置"""
    return Settings()
