"""Конфигурация приложения."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from content_audit.config import EngineConfig


class Settings(BaseSettings):
    """Настройки приложения."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CONTENT_AUDIT_", extra="ignore")

    # Data sources
    articles_path: Optional[str] = None  # JSON файл со статьями
    rule_overrides_path: Optional[str] = None  # JSON файл с настройками правил

    # Engine
    max_concurrency: int = 4
    audit_timeout_seconds: Optional[float] = 30.0
    stats_sample_size: int = 10

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: str = "*"

    def engine_config(self) -> EngineConfig:
        return EngineConfig(
            max_concurrency=self.max_concurrency,
            audit_timeout_seconds=self.audit_timeout_seconds or None,
            stats_sample_size=self.stats_sample_size,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
