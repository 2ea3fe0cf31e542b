"""Application configuration with validation."""

import os
from typing import Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# SQLite file created inside DATA_DIR when DATABASE_URL is not set.
DEFAULT_DB_FILE_NAME = "chartdb.sqlite"
DEFAULT_MAX_VERSIONS_PER_DIAGRAM = 100


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every value comes from the environment (or a local ``.env`` file).
    The resulting object is handed to ``create_app()`` explicitly; nothing
    reads a module-level settings instance.
    """

    # Server
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, description="Listen port")

    # Storage
    data_dir: str = Field(
        default="/data",
        description="Directory holding the SQLite database file"
    )
    database_url: str = Field(
        default="",
        description="Explicit SQLAlchemy URL (overrides DATA_DIR when set)"
    )

    # Version history retention. Non-positive means unlimited.
    max_versions_per_diagram: int = Field(
        default=DEFAULT_MAX_VERSIONS_PER_DIAGRAM,
        description="Versions kept per diagram (<= 0 keeps everything)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="*",
        description="Allowed CORS origins (comma-separated)"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

    def get_database_url(self) -> str:
        """Resolve the database URL, defaulting to a SQLite file in data_dir."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{os.path.join(self.data_dir, DEFAULT_DB_FILE_NAME)}"

    @field_validator('max_versions_per_diagram', mode='before')
    @classmethod
    def parse_max_versions(cls, v: Any) -> Any:
        """Fall back to the default for blank or non-integer values."""
        if isinstance(v, str):
            v = v.strip()
            try:
                return int(v)
            except ValueError:
                return DEFAULT_MAX_VERSIONS_PER_DIAGRAM
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ('json', 'text'):
            raise ValueError("Invalid log format. Must be 'json' or 'text'")
        return v_lower

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        # Allow reading from environment variables with different case
        case_sensitive = False
