"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (QUIETHN__SERVER__PORT=8080)
  2. quiethn.yaml           (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

# Added to the refresh interval when cache.expiration_seconds is unset
CACHE_EXPIRATION_GRACE_SECONDS = 2


def _find_config_file() -> str | None:
    """Return the path of the first quiethn.yaml found, or None."""
    candidates = [
        Path("quiethn.yaml"),
        Path(platformdirs.user_config_dir("quiethn")) / "quiethn.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)


class StoriesSettings(BaseModel):
    count: int = Field(default=30, gt=0)
    # Serve a short list instead of failing when the top-ID feed runs dry
    allow_partial: bool = False


class CacheSettings(BaseModel):
    strategy: Literal["on_demand", "periodic"] = "periodic"
    refresh_interval_seconds: int = Field(default=5, gt=0)
    expiration_seconds: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _default_expiration(self) -> CacheSettings:
        if self.expiration_seconds is None:
            self.expiration_seconds = (
                self.refresh_interval_seconds + CACHE_EXPIRATION_GRACE_SECONDS
            )
        return self


class HackerNewsSettings(BaseModel):
    base_url: str = "https://hacker-news.firebaseio.com/v0"
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    item_timeout_seconds: float = Field(default=5.0, gt=0)
    max_concurrency: int = Field(default=50, gt=0)
    max_connections: int = Field(default=100, gt=0)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: QUIETHN__SERVER__PORT=9090
        env_prefix="QUIETHN__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    stories: StoriesSettings = StoriesSettings()
    cache: CacheSettings = CacheSettings()
    hackernews: HackerNewsSettings = HackerNewsSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
