"""Pydantic configuration models for MarketChat.

This module defines all configuration models used throughout MarketChat.
For loading and merging logic, see loader.py.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_BASE_URL = "https://trademystuffmarketplace.com/api"


class ApiConfig(BaseModel):
    """Configuration for the remote marketplace REST API."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Base URL all endpoint paths are joined to")
    timeout_seconds: float = Field(default=10.0, description="Client-level request timeout in seconds")
    user_agent: str = Field(default="marketchat", description="User-Agent header sent with every request")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL without a trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid base_url '{v}'. Expected an http:// or https:// URL.")
        return v.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be positive")
        return v


class StorageConfig(BaseModel):
    """Configuration for persisted credentials."""

    backend: str = Field(default="file", description="Credential store backend: file or memory")
    path: Path = Field(
        default=Path.home() / ".marketchat" / "credentials.json",
        description="Credential file location for the file backend",
    )
    encrypt: bool = Field(default=True, description="Encrypt stored values at rest")
    key_path: Path | None = Field(default=None, description="Encryption key file (defaults to ~/.marketchat_key)")

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        if v not in ("file", "memory"):
            raise ValueError(f"Invalid storage backend '{v}'. Use 'file' or 'memory'.")
        return v


class ChatConfig(BaseModel):
    """Configuration for the conversation store."""

    sort_conversations: bool = Field(
        default=True,
        description="Order the conversation list by most recent activity",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging system."""

    level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    directory: str = Field(default="logs", description="Directory for log files")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB before rotation")
    backup_count: int = Field(default=5, description="Number of backup log files to keep")


class Config(BaseModel):
    """Root configuration for MarketChat."""

    api: ApiConfig = Field(default_factory=ApiConfig, description="REST API settings")
    storage: StorageConfig = Field(default_factory=StorageConfig, description="Credential storage settings")
    chat: ChatConfig = Field(default_factory=ChatConfig, description="Conversation store settings")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    model_config = {"extra": "allow"}
