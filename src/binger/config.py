"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (BINGER__OMDB__API_KEY=...)
  2. binger.yaml            (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; everything except the OMDb API key has a
working default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from binger.cache import LATEST_TTL_SECONDS, METADATA_TTL_SECONDS, SEASON_TTL_SECONDS

_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("binger")

PLACEHOLDER_IMAGE_PATH = "/images/no-binger.jpg"


def _find_config_file() -> str | None:
    """Return the path of the first binger.yaml found, or None."""
    candidates = [
        Path("binger.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "binger.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    admin_auth_enabled: bool = True
    admin_key: str = ""


class OmdbSettings(BaseModel):
    # Get a free key at https://omdbapi.com; lookups fail without one.
    api_key: str = ""
    api_url: str = "http://www.omdbapi.com"
    img_url: str = "http://img.omdbapi.com"


class EmbedSettings(BaseModel):
    # The vidsrc player domain is prone to being taken down. Alternatives:
    # vidsrc.in, vidsrc.pm, vidsrc.xyz, vidsrc.net
    vidsrc_domain: str = "vidsrc.in"
    multi_domain: str = ""
    latest_movies_url: str | None = None
    latest_series_url: str | None = None

    @property
    def movies_feed_url(self) -> str:
        return self.latest_movies_url or f"https://{self.vidsrc_domain}/movies/latest/page-1.json"

    @property
    def series_feed_url(self) -> str:
        return self.latest_series_url or f"https://{self.vidsrc_domain}/tvshows/latest/page-1.json"


class AppSettings(BaseModel):
    url: str = "http://localhost:3000"
    name: str = "Binger"
    placeholder_image: str | None = None

    @property
    def placeholder_poster(self) -> str:
        return self.placeholder_image or f"{self.url.rstrip('/')}{PLACEHOLDER_IMAGE_PATH}"


class FetcherSettings(BaseModel):
    timeout_seconds: float = 10.0
    max_redirects: int = 5
    max_retries: int = 2
    backoff_base_seconds: float = 0.3
    backoff_jitter_seconds: float = 0.1
    max_connections: int = 20
    user_agent: str = "binger/1.0"


class CacheSettings(BaseModel):
    metadata_ttl_seconds: float = METADATA_TTL_SECONDS
    season_ttl_seconds: float = SEASON_TTL_SECONDS
    latest_ttl_seconds: float = LATEST_TTL_SECONDS


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: BINGER__EMBED__MULTI_DOMAIN=multi.example
        env_prefix="BINGER__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    omdb: OmdbSettings = OmdbSettings()
    embed: EmbedSettings = EmbedSettings()
    app: AppSettings = AppSettings()
    fetcher: FetcherSettings = FetcherSettings()
    cache: CacheSettings = CacheSettings()
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
