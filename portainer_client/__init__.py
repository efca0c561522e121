"""Async client for the Portainer API with verified stack and container creation."""

from .client import PortainerClient  # noqa: F401
from .core.config_loader import load_settings, load_settings_async  # noqa: F401
from .core.exceptions import (  # noqa: F401
    ConfigurationError,
    PortainerClientError,
    TransportError,
)
from .core.logging_config import get_client_logger, setup_logging  # noqa: F401
from .core.result import Result  # noqa: F401
from .core.settings import PortainerSettings  # noqa: F401
from .models import (  # noqa: F401
    CommandExecution,
    Container,
    ContainerAction,
    ContainerActionOptions,
    ContainerCreated,
    ContainerCreateRequest,
    ContainerCriteria,
    ContainerResources,
    Environment,
    EnvVar,
    ErrorKind,
    Image,
    Stack,
    StackCreateRequest,
)

__version__ = "0.1.0"

__all__ = [
    "PortainerClient",
    "PortainerSettings",
    "load_settings",
    "load_settings_async",
    "setup_logging",
    "get_client_logger",
    # Results and errors
    "Result",
    "ErrorKind",
    "PortainerClientError",
    "ConfigurationError",
    "TransportError",
    # Models
    "CommandExecution",
    "Container",
    "ContainerAction",
    "ContainerActionOptions",
    "ContainerCreated",
    "ContainerCreateRequest",
    "ContainerCriteria",
    "ContainerResources",
    "Environment",
    "EnvVar",
    "Image",
    "Stack",
    "StackCreateRequest",
]
