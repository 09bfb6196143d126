"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def _require_http_url(v: str) -> str:
    if not v.startswith(("http://", "https://")):
        raise ValueError(f"URL must include an http:// or https:// scheme: {v}")
    return v.rstrip("/")


class MessengerConfig(BaseModel):
    """Messenger platform credentials and Send API settings."""

    app_secret: str
    validation_token: str
    page_access_token: str
    server_url: str
    graph_url: str = "https://graph.facebook.com"
    api_version: str = "v2.6"
    strict_signature: bool = True
    send_timeout: float = Field(5.0, gt=0.0, le=60.0)

    @field_validator("app_secret", "validation_token", "page_access_token")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only secrets."""
        if not v.strip():
            raise ValueError("Messenger secrets must not be empty")
        return v

    @field_validator("server_url", "graph_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL scheme."""
        return _require_http_url(v)


class ContentConfig(BaseModel):
    """Publication (curation) API configuration."""

    api_url: str = "https://gazette.swmdigital.io/curation-api/the-west/publication"
    site_url: str = "https://thewest.com.au"
    topic_page_size: int = Field(5, ge=1, le=10)
    lookup_page_size: int = Field(100, ge=1, le=100)
    include_future: bool = True
    timeout: float = Field(5.0, gt=0.0, le=60.0)

    @field_validator("api_url", "site_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL scheme."""
        return _require_http_url(v)


class DataConfig(BaseModel):
    """Locations of the static lookup tables."""

    explainers_path: Path = DATA_DIR / "explainers.json"
    jokes_path: Path = DATA_DIR / "jokes.json"


class BehaviorConfig(BaseModel):
    """Reply behaviour switches."""

    echo_unmatched: bool = False
    joke_signature: str = "This awful joke is brought to you by TABTouch"
    authorization_code: str = "1234567890"


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "0.0.0.0"  # noqa: S104
    port: int = Field(5000, ge=1, le=65535)
    shutdown_grace_period: float = Field(20.0, ge=0.0, le=120.0)


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("/var/log/cricket-bot/bot.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: FileLoggingConfig = FileLoggingConfig()


class BotConfig(BaseSettings):
    """Root configuration for the cricket Messenger bot."""

    messenger: MessengerConfig
    content: ContentConfig = ContentConfig()
    data: DataConfig = DataConfig()
    behavior: BehaviorConfig = BehaviorConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        frozen=True,
    )
