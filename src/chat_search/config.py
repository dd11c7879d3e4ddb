"""Centralized configuration for chat-search using Pydantic Settings."""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_search.search.query_engine import MAX_RESULTS
from chat_search.search.storage import DEFAULT_STORAGE_KEY


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``CHAT_SEARCH_*`` environment variables.

    Only operational knobs live here. Tokenizer thresholds, the stopword list
    and the result cap are part of the ranking contract and stay constants.
    """

    model_config = SettingsConfigDict(
        env_prefix="CHAT_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY,
        min_length=1,
        description="Key under which the whole index is persisted",
    )
    autosave: bool = Field(default=True, description="Persist the index after every change")
    default_limit: int = Field(
        default=20,
        ge=1,
        le=MAX_RESULTS,
        description="Result limit applied when a search does not pass one",
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON log lines")

    service_name: str = Field(default="chat-search", description="Service name reported with metrics")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        if not isinstance(logging.getLevelName(value.upper()), int):
            raise ValueError(f"Unknown log level '{value}'")
        return value.lower()
