from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="dev", alias="APP_ENV")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    app_timezone: str = Field(default="Asia/Kolkata", alias="APP_TIMEZONE")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_renderer: Literal["json", "console"] = Field(default="json", alias="LOG_RENDERER")
    docs_enabled: bool = Field(default=True, alias="DOCS_ENABLED")

    internal_api_token: str = Field(
        default="dev_internal_token_change_me",
        alias="INTERNAL_API_TOKEN",
    )
    internal_api_allowlist: str = Field(
        default="127.0.0.1/32,::1/128",
        alias="INTERNAL_API_ALLOWLIST",
    )
    internal_api_trusted_proxies: str = Field(default="", alias="INTERNAL_API_TRUSTED_PROXIES")

    database_url: str = Field(alias="DATABASE_URL")
    database_pool_size: int = Field(default=10, ge=1, alias="DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(default=20, ge=0, alias="DATABASE_MAX_OVERFLOW")
    redis_url: str = Field(alias="REDIS_URL")

    celery_broker_url: str = Field(alias="CELERY_BROKER_URL")
    celery_result_backend: str = Field(alias="CELERY_RESULT_BACKEND")
    celery_default_queue: str = Field(default="arena_ace", alias="CELERY_DEFAULT_QUEUE")
    celery_task_soft_time_limit_seconds: int = Field(
        default=120,
        ge=1,
        alias="CELERY_TASK_SOFT_TIME_LIMIT_SECONDS",
    )

    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    follow_up_model: str = Field(default="gpt-4o-mini", alias="FOLLOW_UP_MODEL")
    follow_up_threshold_hours: int = Field(default=24, ge=1, alias="FOLLOW_UP_THRESHOLD_HOURS")
    follow_up_timeout_seconds: float = Field(default=20.0, gt=0, alias="FOLLOW_UP_TIMEOUT_SECONDS")

    outbox_dispatch_interval_seconds: float = Field(
        default=15.0,
        gt=0,
        alias="OUTBOX_DISPATCH_INTERVAL_SECONDS",
    )
    outbox_batch_size: int = Field(default=100, ge=1, alias="OUTBOX_BATCH_SIZE")
    outbox_max_attempts: int = Field(default=8, ge=1, alias="OUTBOX_MAX_ATTEMPTS")
    outbox_retention_days: int = Field(default=7, ge=1, alias="OUTBOX_RETENTION_DAYS")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
