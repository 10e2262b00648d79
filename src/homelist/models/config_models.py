"""Configuration models for Homelist.

This module defines the pydantic models persisted in ``config.json``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class APIConfig(BaseModel):
    """API configuration."""

    endpoint: str = Field(default="http://127.0.0.1:8000")
    timeout: int = Field(default=30)
    retry: int = Field(default=3)


class ListConfig(BaseModel):
    """Task list paging and reconciliation settings."""

    page_size: int = Field(default=8, ge=1)
    refetch_threshold: int = Field(
        default=5, ge=0, description="Refetch when fewer tasks remain visible"
    )
    scroll_fetch_threshold: float = Field(
        default=85, ge=0, le=100, description="Scroll percentage loading the next page"
    )


class RealtimeConfig(BaseModel):
    """Real-time channel configuration."""

    channel: str = Field(default="user-household")
    reconnect_delay: float = Field(default=2.0, ge=0)

    @field_validator("channel")
    @classmethod
    def validate_channel(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("channel cannot be empty")
        return v.strip()


class ServerConfig(BaseModel):
    """Task service configuration."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)
    db_path: str | None = Field(default=None, description="SQLite file; None for default")
    edit_secret: str | None = Field(
        default=None, description="Shared secret of the external edit endpoint"
    )


class UserConfig(BaseModel):
    """Identity of the current user (provided by the session provider)."""

    id: str | None = None
    name: str | None = None


class AppConfig(BaseModel):
    """Main Homelist configuration"""

    api: APIConfig = Field(default_factory=APIConfig)
    list: ListConfig = Field(default_factory=ListConfig)
    realtime: RealtimeConfig = Field(default_factory=RealtimeConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    user: UserConfig = Field(default_factory=UserConfig)
