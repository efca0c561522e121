"""Core exceptions for Portainer client operations."""


class PortainerClientError(Exception):
    """Base exception for Portainer client operations."""


class ConfigurationError(PortainerClientError):
    """Configuration validation or loading failed."""


class TransportError(PortainerClientError):
    """HTTP request to the Portainer API failed."""

    def __init__(
        self,
        message: str,
        *,
        method: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404
