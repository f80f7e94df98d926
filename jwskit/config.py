from __future__ import annotations

import codecs
import os
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from .algorithms import Algorithm


class CliConfig(BaseModel):
    """Defaults for the ``jwskit`` command line."""

    algorithm: str = "HS256"

    @field_validator("algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        return Algorithm.parse(value).value


class JwskitConfig(BaseModel):
    """Top-level configuration model."""

    model_config = ConfigDict(validate_assignment=True)

    encoding: str = "utf-8"
    log_level: str = "WARNING"
    cli: CliConfig = CliConfig()

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"Unknown text encoding: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()


_config_instance: JwskitConfig | None = None


def load_config(path: Optional[str] = None) -> JwskitConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to JWSKIT_CONFIG env
            variable or 'jwskit.yaml' in the current directory.
    """

    config_path = path or os.getenv("JWSKIT_CONFIG", "jwskit.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = JwskitConfig(**data)
    else:
        config = JwskitConfig()

    env_encoding = os.getenv("JWSKIT_ENCODING")
    if env_encoding:
        config.encoding = env_encoding
    env_level = os.getenv("JWSKIT_LOG_LEVEL")
    if env_level:
        config.log_level = env_level
    return config


def get_config() -> JwskitConfig:
    """Return the process-wide configuration, loading it on first use."""

    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance


def clear_config_cache() -> None:
    global _config_instance
    _config_instance = None
