"""
Central SDK configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden via an environment variable carrying the
REALITY_DEFENDER_ prefix (case-insensitive), e.g.:

    export REALITY_DEFENDER_API_KEY=rd_live_...
    REALITY_DEFENDER_POLLING_INTERVAL_SEC=5 python examples/detect_file.py

A `.env` file in the working directory is loaded automatically.
Arguments passed to `RealityDefender(...)` take precedence per instance.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REALITY_DEFENDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ------------------------------------------------------------------ #
    # API access                                                          #
    # ------------------------------------------------------------------ #
    api_key: Optional[str] = Field(
        None, description="API key sent as X-API-KEY on every request"
    )
    base_url: str = Field(
        "https://api.prd.realitydefender.xyz", description="API root URL"
    )
    request_timeout_sec: float = Field(
        30.0, description="aiohttp total timeout per HTTP call (seconds)"
    )
    user_agent: str = Field(
        "RealityDefender-Python-SDK/0.1.0", description="User-Agent header value"
    )

    # ------------------------------------------------------------------ #
    # Result polling                                                      #
    # ------------------------------------------------------------------ #
    polling_interval_sec: float = Field(
        2.0, description="Pause between result fetches for get_result()"
    )
    result_timeout_sec: float = Field(
        30.0, description="Wall-clock budget for get_result() with default settings"
    )
    page_polling_interval_sec: float = Field(
        2.0, description="Pause between page fetches while items are ANALYZING"
    )
    default_page_size: int = Field(
        10, description="Items per page when GetResultsOptions.size is unset"
    )

    # ------------------------------------------------------------------ #
    # Worker pools                                                        #
    # ------------------------------------------------------------------ #
    worker_pool_size: int = Field(
        4, description="Threads running *_async() blocking polls"
    )
    scheduler_pool_size: int = Field(
        2, description="Threads executing callback-driven poll attempts"
    )
    shutdown_grace_sec: float = Field(
        5.0, description="Time close() waits for outstanding work before forcing a stop"
    )

    # ------------------------------------------------------------------ #
    # Upload size limits                                                  #
    # ------------------------------------------------------------------ #
    max_video_upload_mb: int = Field(
        250, description="Max MB for .mp4 / .mov uploads"
    )
    max_image_upload_mb: int = Field(
        50, description="Max MB for image uploads"
    )
    max_audio_upload_mb: int = Field(
        20, description="Max MB for audio uploads"
    )
    max_text_upload_mb: int = Field(
        5, description="Max MB for .txt uploads"
    )

    # ------------------------------------------------------------------ #
    # Derived byte-level properties (computed from MB fields)             #
    # ------------------------------------------------------------------ #
    @property
    def max_video_upload_bytes(self) -> int:
        return self.max_video_upload_mb * 1024 * 1024

    @property
    def max_image_upload_bytes(self) -> int:
        return self.max_image_upload_mb * 1024 * 1024

    @property
    def max_audio_upload_bytes(self) -> int:
        return self.max_audio_upload_mb * 1024 * 1024

    @property
    def max_text_upload_bytes(self) -> int:
        return self.max_text_upload_mb * 1024 * 1024


# Single shared instance; RealityDefender(...) copies it with per-client overrides.
settings = Settings()
