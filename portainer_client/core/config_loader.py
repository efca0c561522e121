"""Configuration loading for the Portainer client.

Sources, lowest priority first: field defaults, the user config file
(``~/.config/portainer-client/config.yml``), the project config file (argument
or ``PORTAINER_CLIENT_CONFIG``), then environment variables and ``.env``.
"""

import asyncio
import os
from pathlib import Path
from typing import Any

import structlog
import yaml
from dotenv import load_dotenv

from ..constants import ENV_CLIENT_CONFIG
from .exceptions import ConfigurationError
from .settings import PortainerSettings

logger = structlog.get_logger()

USER_CONFIG_PATH = Path.home() / ".config" / "portainer-client" / "config.yml"
DEFAULT_PROJECT_CONFIG = "config/portainer.yml"


def load_settings(config_path: str | Path | None = None) -> PortainerSettings:
    """Load settings from YAML files and the environment (synchronous interface).

    Raises:
        ConfigurationError: If a config file exists but cannot be parsed.
    """
    load_dotenv()

    values: dict[str, Any] = {}
    values.update(_load_config_file(USER_CONFIG_PATH))

    project_path = Path(config_path or os.getenv(ENV_CLIENT_CONFIG, DEFAULT_PROJECT_CONFIG))
    values.update(_load_config_file(project_path))

    _apply_env_overrides(values)
    return PortainerSettings(**values)


async def load_settings_async(config_path: str | Path | None = None) -> PortainerSettings:
    """Async interface for ``load_settings``; file reads run in a worker thread."""
    return await asyncio.to_thread(load_settings, config_path)


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Read a YAML config file and return its values keyed by env alias."""
    if not config_path.exists():
        return {}

    try:
        loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config from {config_path}: {e}") from e

    if not isinstance(loaded, dict):
        return {}

    # Files may use either field names (url, api_key) or env names (PORTAINER_URL)
    section = loaded.get("portainer", loaded)
    if not isinstance(section, dict):
        return {}

    values: dict[str, Any] = {}
    for field_name, field in PortainerSettings.model_fields.items():
        alias = field.alias or field_name.upper()
        if field_name in section:
            values[alias] = section[field_name]
        elif alias in section:
            values[alias] = section[alias]

    logger.debug("Loaded config file", path=str(config_path), keys=sorted(values))
    return values


def _apply_env_overrides(values: dict[str, Any]) -> None:
    """Environment variables take precedence over file values."""
    for field_name, field in PortainerSettings.model_fields.items():
        alias = field.alias or field_name.upper()
        env_value = os.getenv(alias)
        if env_value is not None:
            values[alias] = env_value
