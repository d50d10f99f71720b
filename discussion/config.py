"""Application configuration."""

from typing import Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from discussion.domain.value.types import CommentSortType


class SourceSettings(BaseModel):
    """Event source (server) configuration."""

    base_url: str = "http://localhost:8536"

    # Newline-delimited JSON stream of server events
    events_path: str = "/api/v1/events"

    # Commands (e.g. GetPost) are POSTed here; replies arrive on the stream
    command_path: str = "/api/v1/command"

    # Applies to connect/write; the event stream itself never times out on read
    timeout_seconds: float = 10.0


class StreamSettings(BaseModel):
    """Subscription retry configuration."""

    # Fixed delay between resubscription attempts
    retry_delay_ms: int = 3000

    # Delivery errors tolerated over the life of the subscription
    max_retries: int = 10

    # Count only consecutive errors: any delivered message resets the count
    reset_on_delivery: bool = False


class RankingSettings(BaseModel):
    """Comment ranking configuration."""

    # Gravity factor for time-decay ranking algorithm
    # Higher values = faster decay (more emphasis on recency)
    gravity: float = 1.8

    # Hours added to comment age before applying decay
    time_offset: float = 2.0

    # Added to score before the log transform, so slightly negative
    # comments still get a floor rank of zero rather than a negative one
    score_offset: int = 3

    scale: float = 10000.0


class ObservabilitySettings(BaseModel):
    """Observability configuration for Logfire."""

    # Logfire API token (optional - if not set, logs only go to console)
    # Can be set via OBSERVABILITY__LOGFIRE_TOKEN env var
    logfire_token: str | None = None

    # Whether to send telemetry to Logfire cloud
    # If None, will auto-determine: sends if token is present, otherwise console-only
    send_to_logfire: bool | None = None


class Settings(BaseSettings):
    """Application settings.

    Set environment variables to override, using ``__`` for nested sections:

        SOURCE__BASE_URL=https://lemmy.example.org
        STREAM__MAX_RETRIES=5
        DEFAULT_SORT=top
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["test", "development", "staging", "production"] = "development"
    debug: bool = False

    # Comment ordering a freshly opened view starts with
    default_sort: CommentSortType = CommentSortType.HOT

    # Nested settings
    source: SourceSettings = SourceSettings()
    stream: StreamSettings = StreamSettings()
    ranking: RankingSettings = RankingSettings()
    observability: ObservabilitySettings = ObservabilitySettings()
