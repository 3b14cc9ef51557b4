"""Promoscope configuration settings."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _bool_env(var_name: str, default: str = "") -> bool:
    return os.getenv(var_name, default).strip().lower() in {"1", "true", "yes", "on"}


def _path_env(var_name: str) -> Path | None:
    raw = os.getenv(var_name, "").strip()
    return Path(raw) if raw else None


class SourceType(str, Enum):
    """Page families the engine knows how to extract."""

    SMARTLINK = "smartlink"
    ANALYTICS = "analytics"
    ARTICLE = "article"
    PLAYLIST = "playlist"


class BrowserConfig(BaseModel):
    """Browser launch configuration."""

    headless: bool = Field(default_factory=lambda: _bool_env("PROMOSCOPE_HEADLESS", "true"))
    locale: str = "en-US"


class TimeoutConfig(BaseModel):
    """Timeout budgets for realization."""

    navigation_timeout_s: int = 30
    post_scroll_settle_s: float = 3.0


class ScrollConfig(BaseModel):
    """Bounds for the progressive scroll loop.

    The target distance is fixed once, from the scroll height observed when
    the loop starts plus ``overshoot_px``. ``max_iterations`` caps the loop
    regardless of the target.
    """

    step_px: int = 300
    interval_ms: int = 100
    overshoot_px: int = 1000
    max_iterations: int = 500

    @field_validator("step_px", "max_iterations")
    @classmethod
    def _validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("scroll step and iteration cap must be >= 1")
        return value


class ScreenshotMode(str, Enum):
    FULL_PAGE = "full_page"
    CLIP = "clip"


class SourceProfile(BaseModel):
    """How a page of one source type is realized."""

    viewport_width: int = 1400
    viewport_height: int = 900
    user_agent: str | None = DEFAULT_USER_AGENT
    settle_s: float = 3.0
    scroll: bool = False
    screenshot_mode: ScreenshotMode = ScreenshotMode.FULL_PAGE
    clip_width: int = 1400
    clip_height: int = 800


def default_profiles() -> dict[SourceType, SourceProfile]:
    return {
        SourceType.SMARTLINK: SourceProfile(
            viewport_width=1200,
            viewport_height=800,
            user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
        ),
        SourceType.ANALYTICS: SourceProfile(
            viewport_width=1400,
            viewport_height=2000,
            user_agent=None,
            settle_s=5.0,
            scroll=True,
        ),
        SourceType.ARTICLE: SourceProfile(screenshot_mode=ScreenshotMode.CLIP),
        SourceType.PLAYLIST: SourceProfile(),
    }


class StorageConfig(BaseModel):
    """Where screenshots and reports are written."""

    data_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("PROMOSCOPE_DATA_DIR", "./data"))
    )
    uploads_url_prefix: str = "/uploads"
    debug_mode: bool = Field(default_factory=lambda: _bool_env("PROMOSCOPE_DEBUG"))

    @property
    def uploads_dir(self) -> Path:
        return self.data_dir / "uploads"

    @property
    def reports_dir(self) -> Path:
        return self.data_dir / "reports"


class APIConfig(BaseModel):
    """API/security controls from environment."""

    api_token: str = Field(default_factory=lambda: os.getenv("PROMOSCOPE_API_TOKEN", ""))
    block_private_network_targets: bool = True
    log_level: str = Field(default_factory=lambda: os.getenv("PROMOSCOPE_LOG_LEVEL", "INFO"))

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level


class PromoscopeConfig(BaseModel):
    """Root configuration for the extraction engine."""

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    scroll: ScrollConfig = Field(default_factory=ScrollConfig)
    profiles: dict[SourceType, SourceProfile] = Field(default_factory=default_profiles)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    catalogue_path: Path | None = Field(
        default_factory=lambda: _path_env("PROMOSCOPE_CATALOGUE_PATH")
    )

    def profile_for(self, source_type: SourceType) -> SourceProfile:
        return self.profiles.get(source_type) or SourceProfile()
