"""Application configuration models with Pydantic validation."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

AVAILABLE_SOUNDS: tuple[str, ...] = (
    "Glass",
    "Ping",
    "Pop",
    "Purr",
    "Tink",
    "Blow",
    "Funk",
    "Hero",
    "Morse",
    "Submarine",
)


def default_projects_dir() -> str:
    """Default root of Claude Code session logs."""
    return str(Path.home() / ".claude" / "projects")


class WatcherConfig(BaseModel):
    """Session log watcher configuration."""

    projects_dir: str = Field(
        default_factory=default_projects_dir,
        description="Root directory holding one subdirectory per project",
    )
    log_suffix: str = Field(
        default=".jsonl",
        description="File name suffix of session logs",
    )
    stale_after_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Logs not modified for this long are not an active session",
    )
    poll_interval: float = Field(
        default=1.0,
        gt=0,
        le=60,
        description="Seconds between log polls",
    )
    process_check_interval: float = Field(
        default=5.0,
        gt=0,
        le=300,
        description="Seconds between agent process checks",
    )
    process_name: str = Field(
        default="claude",
        min_length=1,
        description="Exact process name of the agent",
    )


class TimerConfig(BaseModel):
    """Notification timer delays, in seconds."""

    question_delay: float = Field(
        default=3.0,
        ge=0,
        description="Notify delay after a turn ending in a question",
    )
    statement_delay: float = Field(
        default=0.5,
        ge=0,
        description="Notify delay after any other turn end",
    )
    silence_timeout: float = Field(
        default=1.0,
        gt=0,
        description="Silence after a tool call before assuming a permission prompt",
    )


class SoundConfig(BaseModel):
    """Notification sound preferences."""

    name: str = Field(default="Glass", description="System sound to play")
    volume: float = Field(default=0.5, ge=0.0, le=1.0)

    @field_validator("name")
    @classmethod
    def _known_sound(cls, value: str) -> str:
        if value not in AVAILABLE_SOUNDS:
            raise ValueError(f"Unknown sound '{value}'")
        return value


class NotificationConfig(BaseModel):
    """Notification configuration."""

    enabled: bool = Field(
        default=True,
        description="Whether notifications are enabled",
    )
    desktop: bool = Field(
        default=False,
        description="Also post a desktop notification via terminal-notifier",
    )


class AppConfig(BaseModel):
    """Root application configuration.

    Loaded from config.yaml and validated with Pydantic.
    """

    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
    timers: TimerConfig = Field(default_factory=TimerConfig)
    sound: SoundConfig = Field(default_factory=SoundConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    port: int = Field(
        default=5050,
        ge=1024,
        le=65535,
        description="Port for the Flask server",
    )
    debug: bool = Field(
        default=False,
        description="Enable Flask debug mode",
    )
