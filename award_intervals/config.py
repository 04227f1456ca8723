"""
Configuration settings for the award interval engine.

Uses Pydantic Settings to load environment variables for storage selection,
database connections, logging, ingestion limits and result caching.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Storage
    store_backend: Literal["memory", "postgres"] = Field("memory", alias="STORE_BACKEND")
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("award_intervals", alias="DB_NAME")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(5, alias="DB_POOL_MAX_SIZE")

    # Ingestion
    ingest_batch_size: int = Field(1000, alias="INGEST_BATCH_SIZE", gt=0)
    ingest_year_min: int = Field(1900, alias="INGEST_YEAR_MIN", ge=1900)
    ingest_year_max: int = Field(2100, alias="INGEST_YEAR_MAX")
    ingest_timeout_seconds: Optional[float] = Field(None, alias="INGEST_TIMEOUT_SECONDS")
    data_file: str = Field("data/movielist.csv", alias="DATA_FILE")

    # Result cache
    cache_enabled: bool = Field(True, alias="CACHE_ENABLED")
    cache_ttl_seconds: Optional[float] = Field(600.0, alias="CACHE_TTL_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
