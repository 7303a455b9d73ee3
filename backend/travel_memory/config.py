"""
TravelMemory Backend — Application Configuration
=================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges; get_settings() layers explicit overrides on top.
Who:   Imported by the application factory and the CLI entry point.
When:  Resolved once at startup; immutable afterwards.

Precedence (highest first):
    1. Explicit values passed to Settings(...), which is where CLI flags go
    2. Environment variables (MONGO_URI, PORT, HOST, LOG_LEVEL, ...)
    3. `.env` file in the working directory
    4. Literal defaults below
"""

from typing import Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MONGO_URI = "mongodb://localhost:27017/TravelMemory-Mern"
DEFAULT_PORT = 3001


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development against a
    MongoDB instance on localhost. Invalid values raise a pydantic
    ValidationError at construction time, so misconfiguration fails fast.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Format: mongodb://[user:password@]host[:port]/dbname
    mongo_uri: str = Field(
        default=DEFAULT_MONGO_URI,
        description="MongoDB connection string",
    )

    # Driver default is 30s; lower it to surface an unreachable server sooner
    mongo_server_selection_timeout_ms: int = Field(default=30_000, ge=1, le=600_000)

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated origins, "*" accepts any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # PORT and port both work
        extra="ignore",
    )

    @field_validator("port", mode="before")
    @classmethod
    def default_blank_port(cls, v: Any) -> Any:
        """An empty PORT behaves like an unset one."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_PORT
        return v

    @field_validator("mongo_uri", mode="before")
    @classmethod
    def validate_mongo_uri(cls, v: Any) -> Any:
        """Blank falls back to the default; anything else must be a MongoDB URI."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_MONGO_URI
        if isinstance(v, str) and not v.strip().startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(
                "MONGO_URI must start with 'mongodb://' or 'mongodb+srv://'"
            )
        return v.strip() if isinstance(v, str) else v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper


def get_settings(**overrides: Any) -> Settings:
    """
    Resolve settings, letting explicit overrides win over the environment.

    Overrides whose value is None are dropped so an omitted CLI flag does not
    mask the environment variable underneath it.
    """
    explicit = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**explicit)
