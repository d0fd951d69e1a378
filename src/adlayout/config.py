"""Application configuration for the ad layout builder.

Values are read from ``ADLAYOUT_*`` environment variables. The default
backend is a local SQLite database so the builder runs without the managed
data service; set ``ADLAYOUT_STORE_BACKEND=supabase`` together with
``ADLAYOUT_SUPABASE_URL``/``ADLAYOUT_SUPABASE_KEY`` to talk to it instead.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PAGE_KEYS = ("home", "past_papers", "pdf_viewer", "global_header", "dashboard")


class AppConfig(BaseSettings):
    """Pydantic settings container for the layout builder."""

    model_config = SettingsConfigDict(env_prefix="ADLAYOUT_")

    store_backend: Literal["sqlalchemy", "supabase"] = Field(
        default="sqlalchemy",
        description="Layout store implementation used by the builder.",
    )
    database_url: str = Field(
        default="sqlite:///adlayout.db",
        description="SQLAlchemy URL for the local layout store.",
    )
    supabase_url: str | None = Field(
        default=None,
        description="Base URL of the managed data service (without /rest/v1).",
    )
    supabase_key: str | None = Field(
        default=None,
        description="API key sent as both apikey and bearer token.",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        ge=0.1,
        description="Timeout applied to remote store requests in seconds.",
    )
    default_page_key: str = Field(default="home", min_length=1)
    default_page_keys: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PAGE_KEYS),
        description="Page keys offered when the store knows none.",
    )
    row_height: int = Field(default=40, ge=1, description="Grid row height in px.")
    gap: int = Field(default=8, ge=0, description="Gap between grid cells in px.")
    append_new_assignments: bool = Field(
        default=False,
        description=(
            "Append dropped campaigns at the end of the rotation instead of "
            "inserting them with rotation index 0."
        ),
    )
    notification_history_limit: int = Field(default=50, ge=1)

    @model_validator(mode="after")
    def _check_supabase(self) -> "AppConfig":
        if self.store_backend == "supabase" and not (self.supabase_url and self.supabase_key):
            raise ValueError("supabase backend requires supabase_url and supabase_key")
        return self


def load_config() -> AppConfig:
    """Load configuration from environment."""
    return AppConfig()


__all__ = ["AppConfig", "DEFAULT_PAGE_KEYS", "load_config"]
