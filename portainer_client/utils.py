"""Utility functions for the Portainer client.

Name sanitizing and matching, numeric parameter normalization and compose
content checks shared by the lookup and creation services.
"""

import math
import re
from typing import Any

import yaml

from .constants import CONTAINER_NAME_PREFIX, DOCKER_PROXY_PATH

_UNSAFE_NAME_CHARS = re.compile(r"[^a-z0-9-]")


def sanitize_container_name(name: str) -> str:
    """Lowercase a name and replace every character outside ``[a-z0-9-]`` with ``-``.

    Examples:
        >>> sanitize_container_name("Test Container!")
        'test-container-'
        >>> sanitize_container_name("TestContainer")
        'testcontainer'
    """
    return _UNSAFE_NAME_CHARS.sub("-", name.lower())


def container_name_matches(names: list[str], target: str) -> bool:
    """Permissive container name match.

    A container matches when any of its names contains ``target``, equals
    ``"/" + target``, or equals ``target`` once one leading separator is
    stripped.
    """
    if not target:
        return False
    prefixed = f"{CONTAINER_NAME_PREFIX}{target}"
    for name in names:
        if target in name or name == prefixed:
            return True
        if name.removeprefix(CONTAINER_NAME_PREFIX) == target:
            return True
    return False


def normalize_non_negative(
    value: Any,
    default: int,
    param_name: str,
    logger: Any,
) -> int:
    """Coerce a retry count or millisecond timeout to a non-negative int.

    Missing, non-numeric, boolean, NaN, infinite and negative values are
    replaced by ``default`` with a warning. Valid values are floored.
    """
    if value is None:
        logger.warning("Parameter missing, using default value", parameter=param_name, default=default)
        return default

    if isinstance(value, bool) or not isinstance(value, int | float):
        logger.warning(
            "Parameter is not a number, using default value",
            parameter=param_name,
            value=repr(value),
            default=default,
        )
        return default

    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        logger.warning(
            "Parameter is not finite, using default value", parameter=param_name, default=default
        )
        return default

    floored = math.floor(value)
    if floored < 0:
        logger.warning(
            "Parameter is negative, using default value",
            parameter=param_name,
            value=value,
            default=default,
        )
        return default
    return floored


def validate_compose_content(compose_content: str) -> str | None:
    """Check that compose content is a YAML mapping.

    Returns:
        None when valid, otherwise a description of the problem.
    """
    try:
        compose_data = yaml.safe_load(compose_content)
    except yaml.YAMLError as e:
        return f"Compose content is not valid YAML: {e}"
    if not isinstance(compose_data, dict):
        return "Compose content must be a YAML mapping"
    return None


def docker_path(env_id: int, suffix: str) -> str:
    """Path of a Docker engine endpoint proxied by Portainer for ``env_id``."""
    return f"{DOCKER_PROXY_PATH.format(env_id=env_id)}{suffix}"


def is_positive_id(value: Any) -> bool:
    """True for a positive int (bools excluded)."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
