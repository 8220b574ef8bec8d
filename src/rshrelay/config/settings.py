"""Configuration management for rshrelay.

Loads settings from a YAML configuration file with environment variable
overrides (``RSHRELAY_`` prefix, ``__`` as the nested delimiter).
Supports .env files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/rshrelay.yaml")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0", description="Interface to listen on")
    backlog: int = Field(default=1, ge=1)
    poll_interval: float = Field(
        default=0.25,
        gt=0,
        description="Longest single wait before the abort flag is checked again",
    )


class ScanConfig(BaseModel):
    prompt_timeout: float = Field(default=1.0, gt=0)
    reply_timeout: float = Field(default=120.0, gt=0)
    completion: Literal["sentinel_then_space", "sentinel"] = Field(
        default="sentinel_then_space",
    )
    timeout_mode: Literal["idle", "total"] = Field(default="idle")


class FramingConfig(BaseModel):
    max_command_length: int = Field(default=1024, ge=16)
    exit_command: str = Field(default="exit\n")

    @field_validator("exit_command")
    @classmethod
    def _newline_terminated(cls, value: str) -> str:
        if not value.endswith("\n"):
            value += "\n"
        return value


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for rshrelay.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "RSHRELAY_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    server: ServerConfig = Field(default_factory=ServerConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    framing: FramingConfig = Field(default_factory=FramingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # YAML values arrive as init kwargs; environment wins over them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
