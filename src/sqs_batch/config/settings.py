"""
Module: settings.py
Description: Processor configuration using pydantic-settings.

Loads processor defaults from environment variables with validation.
Supports .env files for local development.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# DeleteMessageBatch accepts at most 10 entries per call
SQS_MAX_DELETE_BATCH_SIZE = 10


class Settings(BaseSettings):
    """Processor settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    app_name: str = Field(default="sqs-batch", description="Application name")
    log_level: str = Field(default="INFO", description="Logging level")

    # AWS settings
    aws_region: str = Field(default="us-east-1", description="AWS region for the default SQS client")

    # SQS settings
    queue_url: Optional[str] = Field(
        default=None,
        description="URL of the source queue; resolved from the event source ARN when unset"
    )
    max_delete_batch_size: int = Field(
        default=SQS_MAX_DELETE_BATCH_SIZE,
        ge=1,
        le=SQS_MAX_DELETE_BATCH_SIZE,
        description="Maximum entries per DeleteMessageBatch call"
    )

    # Processing settings
    max_workers: int = Field(
        default=1,
        ge=1,
        description="Number of messages handled concurrently within one batch"
    )
    suppress_exception: bool = Field(
        default=False,
        description="Return normally instead of raising when some messages fail"
    )

    @field_validator('queue_url')
    @classmethod
    def validate_queue_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate queue URL is an HTTP(S) URL when provided."""
        if v is None or v == "":
            return None
        if not v.startswith(('http://', 'https://')):
            raise ValueError("queue_url must be a valid HTTP/HTTPS URL")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()


# Global settings instance
settings = Settings()
