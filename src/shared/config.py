"""Process configuration management using pydantic-settings."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class SharedConfig(BaseSettings):
    """Base configuration shared by every entry point."""
    log_level: str = Field(default="info", validation_alias="LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class GateSettings(SharedConfig):
    """Settings for the quality gates build step."""
    global_config_path: str = Field(
        default="./quality-gates.yaml", validation_alias="QG_GLOBAL_CONFIG"
    )
    http_timeout: float = Field(default=30.0, validation_alias="QG_HTTP_TIMEOUT")
