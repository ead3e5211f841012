"""Configuration management for the E2E test harness."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BrowserEngine(str, Enum):
    """Browser engines Playwright can launch."""
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


def resolve_browser_engine(value: Any) -> BrowserEngine:
    """Map a raw engine hint to a supported engine.

    Matching is case-insensitive. Blank or unrecognized hints fall back to
    chromium rather than failing the run.
    """
    if isinstance(value, BrowserEngine):
        return value
    raw = str(value or "").strip().lower()
    try:
        return BrowserEngine(raw)
    except ValueError:
        return BrowserEngine.CHROMIUM


def resolve_headless(value: Any) -> bool:
    """Only the literal string 'false' turns headless mode off."""
    if isinstance(value, bool):
        return value
    return str(value) != "false"


class Settings(BaseSettings):
    """Harness settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        populate_by_name=True,
        extra="ignore",
    )

    # Browser selection, first non-empty variable wins
    browser_engine: BrowserEngine = Field(
        BrowserEngine.CHROMIUM,
        validation_alias=AliasChoices("E2E_BROWSER", "PW_BROWSER", "PLAYWRIGHT_BROWSER", "browser_engine"),
        description="Browser engine to launch (chromium, firefox, webkit)",
    )
    headless: bool = Field(
        True,
        validation_alias=AliasChoices("HEADLESS", "headless"),
        description="Run the browser headless unless set to 'false'",
    )
    viewport_width: int = Field(1366, description="Default viewport width in pixels")
    viewport_height: int = Field(768, description="Default viewport height in pixels")

    # Wait timeouts
    visible_timeout_ms: int = Field(10000, gt=0, description="Timeout for visibility/attachment waits")
    hidden_timeout_ms: int = Field(10000, gt=0, description="Timeout for waiting until an element is hidden")
    check_timeout_ms: int = Field(5000, gt=0, description="Timeout for boolean presence/visibility checks")
    url_timeout_ms: int = Field(5000, gt=0, description="Timeout for waiting on a URL")
    navigation_timeout_ms: int = Field(30000, gt=0, description="Timeout for page navigation")

    # Screen recording
    recordings_dir: str = Field("./recordings", description="Directory for scenario recordings")
    ffmpeg_path: str = Field("ffmpeg", description="Capture tool executable")
    recording_framerate: int = Field(30, description="Capture framerate")
    recording_display: str = Field(":0.0", description="X11 display captured on Linux")
    recording_extension: str = Field("mp4", description="Container extension for recordings")
    recording_grace_period_ms: int = Field(
        3000,
        description="Upper bound to wait for the capture process to finalize after interrupt",
    )

    # Artifacts
    screenshots_dir: str = Field("./screenshots", description="Directory for screenshots")
    report_path: str = Field("e2e_test_report.json", description="JSON report file")

    # Logging
    log_level: str = Field("INFO", description="Log level")
    log_json: bool = Field(False, description="Emit logs as JSON")

    @field_validator("browser_engine", mode="before")
    @classmethod
    def _normalize_engine(cls, value: Any) -> BrowserEngine:
        return resolve_browser_engine(value)

    @field_validator("headless", mode="before")
    @classmethod
    def _normalize_headless(cls, value: Any) -> bool:
        return resolve_headless(value)


def get_settings() -> Settings:
    """Get harness settings."""
    return Settings()
