from __future__ import annotations
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="JOBFORM_",
    )
    DRAFT_DIR: str = Field(
        default=".jobform",
        description="Directory holding the persisted draft snapshot",
    )
    DRAFT_KEY: str = Field(
        default="job-application-draft",
        description="Storage slot the single draft is written to",
    )
    DEBUG: bool = Field(default=False)
    SUBMIT_URL: str = Field(
        default="",
        description=(
            "Endpoint accepting the submitted record as JSON. "
            "When empty, submissions are only logged."
        ),
    )
    REQUEST_TIMEOUT_SECONDS: int = Field(default=20)
    USER_AGENT: str = Field(
        default="jobform/0.1",
        description="User-Agent sent with submissions; override via JOBFORM_USER_AGENT",
    )
    STRICT_OPTIONAL_TEXT: bool = Field(
        default=False,
        description="Reject whitespace-only values in optional free-text fields such as salary",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
