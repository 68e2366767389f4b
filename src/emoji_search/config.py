"""Centralized configuration for emoji-search-server using Pydantic Settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Values are validated once at startup; an invalid port or log level fails
    fast instead of surfacing on the first request.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Server settings
    host: str = Field(default="127.0.0.1", description="HTTP bind address")
    port: int = Field(default=5020, ge=1, le=65535, description="HTTP port")

    # Persistence
    database_path: str = Field(
        default="database.json",
        description="Snapshot file written after every insert; empty keeps the index in memory only",
    )

    # Tokenization
    keyword_stemming: bool = Field(
        default=False,
        description="Stem emoji keywords and plain-text query words before TF-IDF scoring",
    )

    # HTTP middleware
    cors_allow_origins: str = Field(default="*", description="Comma-separated CORS origins")
    gzip_minimum_size: int = Field(default=500, ge=0, description="Responses above this size are gzip-compressed")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Tracing
    service_name: str = Field(default="emoji-search-server", description="OpenTelemetry service.name")
    otlp_endpoint: str = Field(
        default="",
        description="OTLP/HTTP traces endpoint (e.g. http://collector:4318/v1/traces); empty disables export",
    )

    def get_database_path(self) -> Path | None:
        """Return the snapshot path, or None when persistence is disabled."""
        if not self.database_path.strip():
            return None
        return Path(self.database_path.strip()).expanduser()

    def get_cors_allow_origins(self) -> list[str]:
        """Get list of allowed CORS origins."""
        if not self.cors_allow_origins:
            return []
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

    def get_analyzer_name(self) -> str:
        """Analyzer used for emoji keywords and plain-text queries."""
        return "english" if self.keyword_stemming else "english-nostem"
