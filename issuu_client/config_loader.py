"""Config Loader - Loads IssuuSettings from YAML or the environment.

YAML files may hold the settings under an "issuu" section or at the top
level. String values support ${ENV_VAR} substitution so tokens can stay out
of the file.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Mapping

import yaml

from issuu_client.models import DEFAULT_BASE_URL, IssuuSettings


class ConfigError(Exception):
    """Raised when configuration loading fails."""


CONFIGURATION_SECTION = "issuu"

ENV_BASE_URL = "ISSUU_BASE_URL"
ENV_TOKEN = "ISSUU_TOKEN"
ENV_CAPTURE_REQUEST = "ISSUU_CAPTURE_REQUEST_CONTENT"
ENV_CAPTURE_RESPONSE = "ISSUU_CAPTURE_RESPONSE_CONTENT"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")
_TRUE_VALUES = {"1", "true", "yes", "on"}


def load_settings(config_path: Path) -> IssuuSettings:
    """Load settings from YAML with ${ENV_VAR} substitution."""
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError("Config file must be a YAML mapping")

    section = raw_config.get(CONFIGURATION_SECTION, raw_config)
    if not isinstance(section, dict):
        raise ConfigError(f"'{CONFIGURATION_SECTION}' section must be a YAML mapping")

    section = _substitute_env_vars(section)

    try:
        return IssuuSettings.model_validate(section)
    except Exception as e:
        raise ConfigError(f"Invalid config structure: {e}") from e


def settings_from_env(environ: Mapping[str, str] | None = None) -> IssuuSettings:
    """Build settings from ISSUU_* environment variables."""
    env = os.environ if environ is None else environ

    token = env.get(ENV_TOKEN)
    if not token:
        raise ConfigError(f"Environment variable '{ENV_TOKEN}' is not set")

    try:
        return IssuuSettings(
            base_url=env.get(ENV_BASE_URL) or DEFAULT_BASE_URL,
            token=token,
            capture_request_content=_env_flag(env.get(ENV_CAPTURE_REQUEST)),
            capture_response_content=_env_flag(env.get(ENV_CAPTURE_RESPONSE)),
        )
    except Exception as e:
        raise ConfigError(f"Invalid settings in environment: {e}") from e


def _env_flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUE_VALUES


def _substitute_env_vars(data: Any) -> Any:
    """Recursively substitute ${ENV_VAR} patterns in strings within data."""
    if isinstance(data, str):
        return _substitute_string(data)
    elif isinstance(data, dict):
        return {k: _substitute_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars(item) for item in data]
    return data


def _substitute_string(s: str) -> str:
    """Substitute ${ENV_VAR} patterns. Raises ConfigError if env var is not set."""

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(f"Environment variable '{var_name}' is not set")
        return value

    return _ENV_VAR_PATTERN.sub(replacer, s)
