"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="CARDO_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Cardo Order Desk API"
    api_prefix: str = "/api"
    log_level: str = "INFO"
    data_root: Path = Field(default=Path("data"), description="Root directory for local data and caches.")
    cache_dir: Optional[Path] = Field(
        default=None,
        description="Directory for derived caches (defaults to <data_root>/cache).",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Order request rules
    description_min_length: int = Field(default=10, ge=1)
    request_list_limit: int = Field(default=100, ge=1, le=500)

    # Client polling and notification behaviour
    api_base_url: str = Field(default="http://localhost:8000/api", description="Base URL used by dashboard clients.")
    http_timeout_seconds: float = Field(default=10.0, gt=0.0)
    notification_poll_seconds: float = Field(default=30.0, gt=0.0)
    request_poll_seconds: float = Field(default=60.0, gt=0.0)
    ephemeral_ttl_seconds: float = Field(default=10.0, gt=0.0)
    notification_fetch_limit: int = Field(default=50, ge=1, le=200)
    mark_read_timeout_seconds: float = Field(default=5.0, gt=0.0)

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("data_root", "cache_dir", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Optional[Path]:
        if value is None or value == "":
            return None
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @property
    def resolved_cache_dir(self) -> Path:
        return self.cache_dir or (self.data_root / "cache")


settings = Settings()
