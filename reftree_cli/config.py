"""Configuration file handling."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from reftree_engine.errors import ConfigError
from reftree_engine.settings import TreeSettings

CONFIG_ENV = "REFTREE_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".reftree" / "config.json"


def get_config_path() -> Path:
    """Config file location, overridable through REFTREE_CONFIG."""
    override = os.environ.get(CONFIG_ENV)
    return Path(override) if override else DEFAULT_CONFIG_PATH


def load_config() -> Dict[str, Any]:
    """Read the config file; a missing file is an empty config.

    Raises:
        ConfigError: If the file cannot be read or is not a JSON object
    """
    path = get_config_path()
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Config file {path} must hold a JSON object")
    return config


def save_setting(key: str, value: Any) -> Path:
    """Validate and persist one setting.

    Raises:
        KeyError: If the key is not a known setting
        ConfigError: If the existing config file cannot be read
        pydantic.ValidationError: If the value is invalid for the key
    """
    if key not in TreeSettings.model_fields:
        raise KeyError(key)

    config = load_config()
    config[key] = value
    # Validate the merged config before writing it
    config[key] = getattr(TreeSettings.model_validate(config), key)

    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
    return path


def load_settings(**overrides: Optional[Any]) -> TreeSettings:
    """Settings from the config file, the environment and explicit overrides.

    Raises:
        ConfigError: If the config file is unreadable or a value does not validate
    """
    config = load_config()
    try:
        return TreeSettings.from_env(base=config, **overrides)
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise ConfigError(f"Invalid setting {location}: {error['msg']}") from e
