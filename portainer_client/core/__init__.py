"""Core infrastructure: settings, transport, logging, errors and results."""

from .exceptions import ConfigurationError, PortainerClientError, TransportError  # noqa: F401
from .result import Result  # noqa: F401
from .settings import PortainerSettings  # noqa: F401
from .transport import PortainerTransport, build_async_client  # noqa: F401

__all__ = [
    "ConfigurationError",
    "PortainerClientError",
    "PortainerSettings",
    "PortainerTransport",
    "Result",
    "TransportError",
    "build_async_client",
]
