"""Data models for the Portainer client."""

from .enums import ContainerAction, ErrorKind  # noqa: F401
from .requests import (  # noqa: F401
    CommandExecution,
    ContainerActionOptions,
    ContainerCreated,
    ContainerCreateRequest,
    ContainerCriteria,
    ContainerResources,
    EnvVar,
    StackCreateRequest,
)
from .resources import (  # noqa: F401
    Container,
    Environment,
    Image,
    Stack,
)

__all__ = [
    # Enums
    "ContainerAction",
    "ErrorKind",
    # Resource models
    "Container",
    "Environment",
    "Image",
    "Stack",
    # Request models
    "CommandExecution",
    "ContainerActionOptions",
    "ContainerCreated",
    "ContainerCreateRequest",
    "ContainerCriteria",
    "ContainerResources",
    "EnvVar",
    "StackCreateRequest",
]
