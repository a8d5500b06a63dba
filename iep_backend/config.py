"""Application settings for the IEP extraction backend."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Runtime configuration loaded from the environment (and ``.env``)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Rate limiting / retry
    iep_requests_per_minute: int = Field(default=50, gt=0)
    iep_requests_per_day: int = Field(default=10_000, gt=0)
    iep_burst_limit: int = Field(default=10, gt=0)
    iep_backoff_multiplier: float = Field(default=2.0, gt=0)
    iep_max_retries: int = Field(default=3, gt=0)

    # Extraction call
    iep_llm_model: str = "o4-mini-2025-04-16"
    iep_llm_timeout_s: float = Field(default=300.0, gt=0)
    iep_llm_max_tokens: int = Field(default=32_000, gt=0)
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"

    # Artifacts
    iep_output_dir: Path = Path("output/batches")
    iep_artifact_db_url: str = "sqlite:///data/iep_artifacts.db"
    iep_artifact_sink: Literal["directory", "database", "none"] = "directory"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def output_dir(self) -> Path:
        """Return the artifact directory resolved against the project root."""

        path = Path(self.iep_output_dir)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Drop the cached settings so the next call re-reads the environment."""

    get_settings.cache_clear()


__all__ = ["PROJECT_ROOT", "Settings", "get_settings", "reset_settings_cache"]
