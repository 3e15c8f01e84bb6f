"""Journal parser configuration loaded from environment variables.

Uses pydantic-settings so every field can be overridden via env vars.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class ParserConfig(BaseSettings):
    """Envelope parser and process settings."""

    model_config = {"env_prefix": "JOURNAL_"}

    pipelined_hashing: bool = Field(
        default=False,
        description="Hash parts on a collector thread while the MIME tree is walked",
    )
    collector_queue_size: int = Field(
        default=1,
        ge=1,
        description="Bound of the hand-off queue between traversal and collector",
    )
    log_json: bool = Field(default=True, description="Emit JSON log lines")
    log_level: str = Field(default="INFO", description="Root log level name")


class RetryConfig(BaseSettings):
    """Retry / backoff settings driven by Tenacity."""

    model_config = {"env_prefix": "RETRY_"}

    max_attempts: int = Field(default=3, description="Maximum attempts per request")
    initial_wait_seconds: float = Field(
        default=0.5,
        description="Initial backoff wait in seconds",
    )
    max_wait_seconds: float = Field(
        default=10.0,
        description="Maximum backoff wait in seconds",
    )
    multiplier: float = Field(default=2.0, description="Exponential backoff multiplier")


class TextExtractionConfig(BaseSettings):
    """Document-to-text conversion service settings."""

    model_config = {"env_prefix": "TEXT_EXTRACTION_"}

    base_url: str = Field(
        default="",
        description="Base URL of the text extraction service (empty disables it)",
    )
    endpoint: str = Field(default="/v1/extract", description="Extraction endpoint path")
    timeout_seconds: float = Field(default=30.0, description="HTTP request timeout")
    retry: RetryConfig = Field(default_factory=RetryConfig)
