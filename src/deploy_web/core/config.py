"""Configuration management for Deploy Web."""

import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Action configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server configuration
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"), description="Server host")
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "8000")), description="Server port")
    workers: int = Field(1, description="Number of worker processes")

    # Repository storage
    preinstalled_dir: str = Field(
        str(PACKAGE_DIR / "preInstalled"),
        description="Root of repositories shipped alongside the action",
    )
    scratch_dir: str = Field(
        str(Path(tempfile.gettempdir()) / "deploy-web" / "tmp"),
        description="Root that fresh clones are written under",
    )

    # OpenWhisk activation environment
    activation_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("activation_id", "__OW_ACTIVATION_ID"),
    )
    api_host: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("api_host", "__OW_API_HOST"),
    )
    api_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("api_key", "__OW_API_KEY"),
    )

    # Deploy tool
    wskdeploy_path: str = Field("wskdeploy", description="wskdeploy executable")
    deploy_timeout_seconds: Optional[float] = Field(
        None,
        description="Wall-clock limit for a single wskdeploy run; unset means no limit",
    )

    # Observability
    log_level: str = Field("INFO")
    log_format: str = Field("json")
    metrics_enabled: bool = Field(True)

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    @field_validator("deploy_timeout_seconds", mode="before")
    @classmethod
    def empty_timeout_is_none(cls, v):
        if v in ("", None):
            return None
        return v

    @property
    def preinstalled_root(self) -> Path:
        return Path(self.preinstalled_dir)

    @property
    def scratch_root(self) -> Path:
        return Path(self.scratch_dir)
