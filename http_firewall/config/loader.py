"""YAML options file + env var settings loading with pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from http_firewall.models.options import FirewallOptions

logger = structlog.get_logger()


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML mapping, returning an empty dict when the file is missing or empty."""
    if not path.exists():
        return {}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping of firewall options, got {type(data).__name__}")
    return data


class FirewallSettings(BaseSettings):
    """Process settings for the demo server, overridden by FIREWALL_* env vars."""

    model_config = SettingsConfigDict(
        env_prefix="FIREWALL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "127.0.0.1"
    listen_port: int = 5428
    log_level: str = "info"
    log_json: bool = True

    # YAML file with FirewallOptions (camelCase or snake_case keys)
    options_file: str = ""


_settings: FirewallSettings | None = None


def get_settings() -> FirewallSettings:
    """Get or create the singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def load_settings() -> FirewallSettings:
    """Load settings from env vars (env vars override model defaults)."""
    global _settings
    _settings = FirewallSettings()
    logger.info("config_loaded", host=_settings.host, port=_settings.listen_port)
    return _settings


def load_firewall_options(path: str | Path | None = None) -> FirewallOptions:
    """Read FirewallOptions from a YAML file.

    A missing or unset file yields the default (most restrictive) options.
    Invalid content raises pydantic.ValidationError.
    """
    if not path:
        return FirewallOptions()
    path = Path(path)
    data = _load_yaml(path)
    if not data:
        logger.info("firewall_options_defaults", path=str(path), exists=path.exists())
        return FirewallOptions()
    options = FirewallOptions.model_validate(data)
    logger.info("firewall_options_loaded", path=str(path), keys=sorted(data))
    return options
