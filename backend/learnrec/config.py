import os
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: Optional[str] = Field(None, alias="LEARNREC_DATABASE_URL")
    database_pool_size: int = Field(10, alias="LEARNREC_DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(10, alias="LEARNREC_DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(False, alias="LEARNREC_DATABASE_ECHO")
    data_backend: Literal["database", "snapshot"] = Field("database", alias="LEARNREC_DATA_BACKEND")
    snapshot_path: Optional[str] = Field(None, alias="LEARNREC_SNAPSHOT_PATH")
    redis_url: Optional[str] = Field(None, alias="LEARNREC_REDIS_URL")
    cache_enabled: bool = Field(True, alias="LEARNREC_CACHE_ENABLED")
    cache_ttl_seconds: int = Field(3600, ge=1, alias="LEARNREC_CACHE_TTL_SECONDS")
    recommendation_timeout_seconds: float = Field(5.0, gt=0, alias="LEARNREC_RECOMMENDATION_TIMEOUT")
    trending_window_days: int = Field(30, ge=1, alias="LEARNREC_TRENDING_WINDOW_DAYS")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        populate_by_name = True


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid recommendation service configuration: {exc}") from exc
