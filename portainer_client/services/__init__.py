"""Services composed by ``PortainerClient``."""

from .containers import ContainerControls  # noqa: F401
from .creation import CreationOrchestrator  # noqa: F401
from .environment import EnvironmentResolver  # noqa: F401
from .fetching import ResourceFetcher  # noqa: F401
from .lookup import ResourceLookup  # noqa: F401
from .shell import ShellControls  # noqa: F401
from .stacks import StackControls  # noqa: F401
from .verification import VerificationPoller  # noqa: F401

__all__ = [
    "ContainerControls",
    "CreationOrchestrator",
    "EnvironmentResolver",
    "ResourceFetcher",
    "ResourceLookup",
    "ShellControls",
    "StackControls",
    "VerificationPoller",
]
