"""Configuration models for the TaskNest client and server."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class APIConfig(BaseModel):
    """Client-side API configuration.

    ``retry`` only applies to reads; mutations are never retried.
    """

    endpoint: str = Field(default="http://127.0.0.1:5000/api")
    timeout: int = Field(default=30)
    retry: int = Field(default=0, ge=0)

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Strip whitespace and trailing slashes."""
        if not v or not v.strip():
            raise ValueError("endpoint cannot be empty")
        return v.strip().rstrip("/")


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5000)
    db_path: str | None = Field(
        default=None, description="SQLite file, defaults to the user data dir"
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )


class OutputConfig(BaseModel):
    """Output configuration."""

    format: str = Field(default="pretty")
    color: bool = Field(default=True)


class AppConfig(BaseModel):
    """Main TaskNest configuration."""

    api: APIConfig = Field(default_factory=APIConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
