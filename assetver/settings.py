from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .formatter import DEFAULT_PATTERN
from .strategies import STRATEGY_KINDS, STRATEGY_MANIFEST


def _truthy(value, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None or value == "":
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


class AssetSettings(BaseSettings):
    """Asset resolver configuration pulled from environment/.env."""

    manifest_source: str = Field("static/manifest.json", alias="ASSET_MANIFEST_SOURCE")
    manifest_redis_key: str = Field("assets:manifest", alias="ASSET_MANIFEST_REDIS_KEY")
    # When false a missing manifest file behaves as an empty manifest (dev checkouts)
    manifest_required: bool = Field(True, alias="ASSET_MANIFEST_REQUIRED")
    manifest_ttl: float = Field(0.0, alias="ASSET_MANIFEST_TTL")
    manifest_timeout: float = Field(5.0, alias="ASSET_MANIFEST_TIMEOUT")
    strategy: str = Field(STRATEGY_MANIFEST, alias="ASSET_STRATEGY")
    # Validated when the resolver is built, not here, so the error type stays InvalidFormatPattern
    format_pattern: str = Field(DEFAULT_PATTERN, alias="ASSET_FORMAT_PATTERN")
    static_version: str = Field("", alias="ASSET_STATIC_VERSION")
    base_url: str = Field("", alias="ASSET_BASE_URL")
    preload: bool = Field(False, alias="ASSET_PRELOAD")
    admin_token: str = Field("", alias="ASSET_ADMIN_TOKEN")
    static_dir: Optional[str] = Field(None, alias="ASSET_STATIC_DIR")
    app_version: str = Field("dev", alias="APP_VERSION")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("manifest_source", "manifest_redis_key", mode="before")
    @classmethod
    def _strip(cls, value: str | None) -> str:
        return (value or "").strip()

    @field_validator("static_version", "base_url", "admin_token", mode="before")
    @classmethod
    def _strip_optional(cls, value: str | None) -> str:
        return (value or "").strip()

    @field_validator("static_dir", mode="before")
    @classmethod
    def _strip_static_dir(cls, value: str | None) -> Optional[str]:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("manifest_required", mode="before")
    @classmethod
    def _parse_required(cls, value) -> bool:
        return _truthy(value, True)

    @field_validator("preload", mode="before")
    @classmethod
    def _parse_preload(cls, value) -> bool:
        return _truthy(value, False)

    @field_validator("manifest_ttl", mode="before")
    @classmethod
    def _parse_ttl(cls, value):
        if value is None or value == "":
            return 0.0
        return value

    @field_validator("manifest_timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value):
        if value is None or value == "":
            return 5.0
        return value

    @field_validator("manifest_ttl", "manifest_timeout")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must be >= 0")
        return value

    @field_validator("strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, value: str | None) -> str:
        val = (value or STRATEGY_MANIFEST).strip().lower().replace("-", "_")
        if val not in STRATEGY_KINDS:
            raise ValueError(f"must be one of {', '.join(STRATEGY_KINDS)}")
        return val

    @property
    def effective_static_version(self) -> str:
        if self.static_version:
            return self.static_version
        version = (self.app_version or "").strip()
        return "" if version in {"", "dev"} else version


@lru_cache(maxsize=1)
def get_settings() -> AssetSettings:
    return AssetSettings()


def reset_settings_cache() -> None:
    """Testing helper to clear cached settings."""
    get_settings.cache_clear()
