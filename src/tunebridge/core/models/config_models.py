"""Pydantic models for configuration validation."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


class LogLevel(StrEnum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    NOTSET = "NOTSET"


class LogLevelsConfig(BaseModel):
    """Per-target log levels."""

    console: LogLevel = LogLevel.INFO
    main_file: LogLevel = LogLevel.INFO

    @field_validator("console", "main_file", mode="before")
    @classmethod
    def _upper(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class LoggingConfig(BaseModel):
    """Logging destinations and levels."""

    levels: LogLevelsConfig = Field(default_factory=LogLevelsConfig)
    logs_base_dir: str = "logs"
    main_log_file: str = "tunebridge.log"
    file_logging: bool = True


class HttpConfig(BaseModel):
    """HTTP transport settings shared by all platform adapters."""

    user_agent: str = "tunebridge/0.1 (+https://github.com/tunebridge/tunebridge)"
    timeout_seconds: float = Field(default=15.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    retry_delay_seconds: float = Field(default=1.0, ge=0)
    max_retry_delay_seconds: float = Field(default=30.0, ge=0)


class RateLimitConfig(BaseModel):
    """Moving-window rate limit for one platform."""

    requests_per_window: int = Field(default=10, ge=1)
    window_seconds: float = Field(default=1.0, gt=0)


class RateLimitsConfig(BaseModel):
    """Rate limits per platform."""

    # Deezer documents 50 requests per 5 seconds
    deezer: RateLimitConfig = Field(default_factory=lambda: RateLimitConfig(requests_per_window=50, window_seconds=5.0))
    spotify: RateLimitConfig = Field(default_factory=RateLimitConfig)
    youtube_music: RateLimitConfig = Field(default_factory=RateLimitConfig)


class MatchingConfig(BaseModel):
    """Matching engine knobs. Scoring weights are fixed in code."""

    search_limit: int = Field(default=3, ge=1, le=5)
    max_results: int = Field(default=5, ge=1, le=5)


class DeezerConfig(BaseModel):
    """Deezer public API settings."""

    base_url: str = "https://api.deezer.com"
    strict_search: bool = True


class YouTubeMusicConfig(BaseModel):
    """YouTube Music link settings."""

    default_thumbnail: str = "https://i.ytimg.com/vi/default/mqdefault.jpg"


class AppConfig(BaseModel):
    """Main application configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    rate_limits: RateLimitsConfig = Field(default_factory=RateLimitsConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    deezer: DeezerConfig = Field(default_factory=DeezerConfig)
    youtube_music: YouTubeMusicConfig = Field(default_factory=YouTubeMusicConfig)
