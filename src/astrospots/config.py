"""Runtime configuration loaded from the environment and an optional ``.env`` file."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Defaults applied when an environment variable is present but empty
_FIELD_DEFAULTS = {
    "anthropic_model": "claude-sonnet-4-6",
    "discovery_max_tokens": 4096,
    "open_meteo_url": "https://api.open-meteo.com/v1/forecast",
    "default_region": "Germany",
    "default_radius_km": 500,
    "fallback_radius_km": 100,
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    anthropic_api_key: str | None = Field(
        None, description="Anthropic API key; the SDK reads ANTHROPIC_API_KEY itself when unset"
    )
    anthropic_model: str = Field(
        _FIELD_DEFAULTS["anthropic_model"], description="Model used for spot discovery"
    )
    discovery_max_tokens: int = Field(
        _FIELD_DEFAULTS["discovery_max_tokens"],
        ge=256,
        description="Token ceiling for a discovery response",
    )
    open_meteo_url: str = Field(
        _FIELD_DEFAULTS["open_meteo_url"], description="Open-Meteo forecast endpoint"
    )
    default_region: str = Field(
        _FIELD_DEFAULTS["default_region"], description="Region searched on first load"
    )
    default_radius_km: int = Field(
        _FIELD_DEFAULTS["default_radius_km"],
        ge=1,
        description="Radius searched on first load",
    )
    fallback_radius_km: int = Field(
        _FIELD_DEFAULTS["fallback_radius_km"],
        ge=1,
        description="Radius used when the typed radius is not a positive number",
    )

    @field_validator("anthropic_api_key", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        if v == "":
            return None
        return v

    @field_validator(*_FIELD_DEFAULTS, mode="before")
    @classmethod
    def empty_str_to_default(cls, v, info):
        if v == "":
            return _FIELD_DEFAULTS[info.field_name]
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide Settings instance."""
    return Settings()
