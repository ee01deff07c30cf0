"""Settings, read from SHELFMARK_* environment variables or a .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SEMANTIC_MODEL = "intfloat/multilingual-e5-small"
DEFAULT_MAX_ITEMS_PER_FOLDER = 3
DEFAULT_MAX_CHARS = 1000
DEFAULT_K = 5

_VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SHELFMARK_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- General ---
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=True)

    # --- Methods ---
    METHOD: str = Field(
        default="tfidf",
        description="Method id used when a request does not name one.",
    )
    SEMANTIC_MODEL: str = Field(default=DEFAULT_SEMANTIC_MODEL)
    SEMANTIC_DEVICE: Optional[str] = Field(default=None)

    # --- Tokenizer ---
    STEMMER_LANGUAGE: Optional[str] = Field(default="english")
    DROP_STOP_WORDS: bool = Field(default=True)

    # --- Centroids ---
    MAX_ITEMS_PER_FOLDER: int = Field(default=DEFAULT_MAX_ITEMS_PER_FOLDER, gt=0)
    EMBED_BATCH_SIZE: int = Field(default=32, gt=0)

    # --- Embedder ---
    MAX_CHARS: int = Field(default=DEFAULT_MAX_CHARS, gt=0)
    EMBED_TIMEOUT_SECONDS: Optional[float] = Field(default=30.0)

    # --- Ranking ---
    DEFAULT_K: int = Field(default=DEFAULT_K, gt=0)

    # --- Cache ---
    CACHE_DIR: Optional[Path] = Field(
        default=None,
        description="Directory for persisted fingerprints. Unset keeps them in memory.",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("LOG_LEVEL")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        if v not in _VALID_LOG_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL '{v}'. Must be one of {_VALID_LOG_LEVELS}")
        return v

    @field_validator("STEMMER_LANGUAGE", mode="before")
    @classmethod
    def empty_language_disables_stemming(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v
