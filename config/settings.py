"""Application settings and configuration."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(
        default="Photo Roster Service",
        description="Application name"
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version"
    )
    environment: Literal["local", "dev", "stage", "prod"] = Field(
        default="local",
        description="Deployment environment"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # API Configuration
    api_prefix: str = Field(
        default="/api",
        description="API route prefix"
    )
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )
    host: str = Field(
        default="0.0.0.0",
        description="Interface the server binds to"
    )
    port: int = Field(
        default=3000,
        description="Port the server listens on"
    )

    # Storage Configuration (for uploaded photo files)
    storage_type: Literal["local"] = Field(
        default="local",
        description="Storage backend type for photo files"
    )
    uploads_root: Path = Field(
        default=Path("data/uploads"),
        description="Directory holding uploaded photo files"
    )
    uploads_url_prefix: str = Field(
        default="/uploads",
        description="URL prefix under which uploaded files are served"
    )

    # Document Storage Configuration (clients and photo records)
    document_storage: Literal["json", "memory"] = Field(
        default="json",
        description="Backend for the clients/photos document"
    )
    document_path: Path = Field(
        default=Path("data/db.json"),
        description="Path of the JSON document file"
    )

    # Static documentation bundle served at the root path
    docs_root: Path = Field(
        default=Path("docs"),
        description="Directory of static documentation/UI assets"
    )

    @field_validator("uploads_root", "document_path", "docs_root", mode="before")
    @classmethod
    def resolve_path(cls, v: str | Path) -> Path:
        """Ensure configured paths are Path objects."""
        if isinstance(v, str):
            return Path(v)
        return v

    @field_validator("uploads_url_prefix")
    @classmethod
    def normalize_url_prefix(cls, v: str) -> str:
        """Ensure the uploads prefix starts with a slash and has no trailing one."""
        v = "/" + v.strip("/")
        if v == "/":
            raise ValueError("uploads_url_prefix cannot be the root path")
        return v

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Path to log file (if None, logs to stdout only)"
    )

    @property
    def log_level_numeric(self) -> int:
        """Get numeric log level."""
        return getattr(logging, self.log_level)

    def configure_logging(self) -> None:
        """Configure logging based on settings."""
        import sys

        handlers: list[logging.Handler] = []

        console_handler = logging.StreamHandler(sys.stdout)
        handlers.append(console_handler)

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.log_file)
            handlers.append(file_handler)

        if self.log_json:
            # JSON formatter for structured logging
            import json

            class JSONFormatter(logging.Formatter):
                def format(self, record: logging.LogRecord) -> str:
                    log_obj = {
                        "timestamp": self.formatTime(record),
                        "level": record.levelname,
                        "logger": record.name,
                        "message": record.getMessage(),
                        "module": record.module,
                        "function": record.funcName,
                        "line": record.lineno,
                    }
                    if record.exc_info:
                        log_obj["exception"] = self.formatException(record.exc_info)
                    return json.dumps(log_obj)

            formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(self.log_format)

        for handler in handlers:
            handler.setFormatter(formatter)

        logging.basicConfig(
            level=self.log_level_numeric,
            handlers=handlers,
            force=True,
        )

        if self.debug:
            logging.getLogger("photo_roster").setLevel(logging.DEBUG)
        else:
            # Reduce noise from third-party libraries
            logging.getLogger("multipart").setLevel(logging.WARNING)
            logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
