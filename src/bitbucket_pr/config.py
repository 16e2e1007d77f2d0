"""
Configuration file loading.

The configuration file is TOML, looked up in this order:
    1. The path given with --config
    2. The BB_CONFIG environment variable
    3. $XDG_CONFIG_HOME/bb/configuration.toml (~/.config/bb/configuration.toml
       when XDG_CONFIG_HOME is unset)

A missing file is not an error: every setting has a default, and
credentials can come from CLI flags or environment variables instead.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from bitbucket_pr.errors import ConfigError

BB_CONFIG_ENV_VAR = "BB_CONFIG"
XDG_CONFIG_HOME_ENV_VAR = "XDG_CONFIG_HOME"
CONFIG_FILE_NAME = "configuration.toml"


class Settings(BaseModel):
    """Settings read from the configuration file."""

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    email: str | None = None
    api_token: str | None = None
    default_destination: str = "main"
    remote: str = "origin"


def default_config_path() -> Path:
    config_home = os.environ.get(XDG_CONFIG_HOME_ENV_VAR)
    base_dir = Path(config_home) if config_home else Path.home() / ".config"
    return base_dir / "bb" / CONFIG_FILE_NAME


def resolve_config_path(cli_config_path: str | None) -> Path:
    if cli_config_path:
        return Path(cli_config_path)
    env_config_path = os.environ.get(BB_CONFIG_ENV_VAR)
    if env_config_path:
        return Path(env_config_path)
    return default_config_path()


def load_settings(cli_config_path: str | None = None) -> Settings:
    """
    Load settings from the configuration file.

    Args:
        cli_config_path: Path given via --config, or None.

    Returns:
        Parsed Settings; defaults when the file does not exist.

    Raises:
        ConfigError: If the file is not valid TOML or a key has the wrong type.
    """
    config_path = resolve_config_path(cli_config_path)

    if not config_path.is_file():
        return Settings()

    try:
        with config_path.open("rb") as config_file:
            raw_settings = tomllib.load(config_file)
    except tomllib.TOMLDecodeError as toml_error:
        raise ConfigError(f"Invalid TOML in {config_path}: {toml_error}") from toml_error

    try:
        return Settings.model_validate(raw_settings)
    except ValidationError as validation_error:
        raise ConfigError(
            f"Invalid configuration in {config_path}: {validation_error}"
        ) from validation_error
