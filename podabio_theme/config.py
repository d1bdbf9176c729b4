from __future__ import annotations

import re

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_HEX_COLOR_RE = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


class Settings(BaseSettings):
    THEME_DB_URL: str = "sqlite:///./podabio_theme.db"
    THEME_MAX_USER_THEMES: int = 3
    THEME_NAME_MAX_LENGTH: int = 100

    THEME_DEFAULT_FONT: str = "Inter"
    THEME_DEFAULT_PRIMARY_COLOR: str = "#000000"
    THEME_DEFAULT_SECONDARY_COLOR: str = "#ffffff"
    THEME_DEFAULT_ACCENT_COLOR: str = "#0066ff"

    COLOR_EXTRACTOR_TIMEOUT_SECONDS: float = 10.0
    COLOR_EXTRACTOR_MAX_BYTES: int = 10_000_000
    COLOR_EXTRACTOR_MAX_DIMENSION: int = 200
    COLOR_EXTRACTOR_USER_AGENT: str = "PodaBio/1.0"

    # Three different limits are used for generated text; kept separate until product confirms.
    GENERATOR_THEME_NAME_MAX_LENGTH: int = 60
    GENERATOR_PODCAST_NAME_MAX_LENGTH: int = 30
    GENERATOR_PODCAST_DESCRIPTION_MAX_LENGTH: int = 113

    @field_validator(
        "THEME_DEFAULT_PRIMARY_COLOR",
        "THEME_DEFAULT_SECONDARY_COLOR",
        "THEME_DEFAULT_ACCENT_COLOR",
    )
    @classmethod
    def validate_default_color(cls, value: str) -> str:
        value = value.strip()
        if not _HEX_COLOR_RE.match(value):
            raise ValueError(f"Default theme colors must be 3- or 6-digit hex values, got {value!r}")
        return value

    @field_validator(
        "THEME_MAX_USER_THEMES",
        "THEME_NAME_MAX_LENGTH",
        "COLOR_EXTRACTOR_MAX_BYTES",
        "COLOR_EXTRACTOR_MAX_DIMENSION",
        "GENERATOR_THEME_NAME_MAX_LENGTH",
        "GENERATOR_PODCAST_NAME_MAX_LENGTH",
        "GENERATOR_PODCAST_DESCRIPTION_MAX_LENGTH",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Limits must be positive integers")
        return value

    @field_validator("COLOR_EXTRACTOR_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("COLOR_EXTRACTOR_TIMEOUT_SECONDS must be positive")
        return value

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
