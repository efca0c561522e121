"""
Environment Resolver

Resolves and caches the environment id that environment-scoped operations
default to.
"""

from typing import Any

import structlog
from pydantic import ValidationError

from ..constants import ENDPOINTS_PATH
from ..core.exceptions import TransportError
from ..core.result import Result
from ..core.transport import PortainerTransport
from ..models.enums import ErrorKind
from ..models.resources import Environment
from ..utils import is_positive_id


class EnvironmentResolver:
    """Holds the client's current environment id.

    The first successful ``resolve()`` caches the first environment returned
    by Portainer (listing order, no sorting). Later calls return the cached id
    without a network call until ``set_environment`` clears or overrides it.
    """

    def __init__(
        self,
        transport: PortainerTransport,
        environment_id: int | None = None,
        logger: Any = None,
    ):
        self.transport = transport
        self._environment_id = environment_id
        self.logger = (logger or structlog.get_logger()).bind(component="environment_resolver")

    @property
    def current(self) -> int | None:
        return self._environment_id

    def set_environment(self, environment_id: int | None) -> None:
        """Override the cached environment id; ``None`` clears it."""
        if environment_id is not None and not is_positive_id(environment_id):
            raise ValueError(f"Invalid environment id: {environment_id!r}")
        self._environment_id = environment_id

    async def list_environments(self) -> Result[list[Environment]]:
        """Fetch every environment (endpoint) registered in Portainer."""
        self.logger.info("Fetching environments from Portainer")
        try:
            data = await self.transport.get(ENDPOINTS_PATH)
        except TransportError as e:
            self.logger.error("Failed to fetch environments", error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Failed to fetch environments: {e}")

        if not isinstance(data, list):
            self.logger.error("Unexpected environments payload", payload_type=type(data).__name__)
            return Result.failure(ErrorKind.TRANSPORT, "Unexpected environments payload")

        try:
            environments = [Environment.model_validate(item) for item in data]
        except ValidationError as e:
            self.logger.error("Malformed environments payload", error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Malformed environments payload: {e}")
        self.logger.info("Fetched environments", count=len(environments))
        return Result.success(environments)

    async def resolve(self) -> Result[int]:
        """Return the cached environment id, resolving the first available one if unset."""
        if self._environment_id is not None:
            return Result.success(self._environment_id)

        self.logger.warning("Environment ID is not set, getting default environment ID")
        environments = await self.list_environments()
        if not environments.ok or not environments.value:
            self.logger.error(
                "No Portainer environments found. Operations requiring an environment ID "
                "will fail until one is set.",
                reason=environments.message or "empty environment listing",
            )
            return Result.failure(ErrorKind.NOT_FOUND, "No Portainer environments found")

        self._environment_id = environments.value[0].id
        self.logger.info("Resolved default environment", environment_id=self._environment_id)
        return Result.success(self._environment_id)

    async def resolve_or(self, environment_id: int | None) -> Result[int]:
        """Use an explicit environment id when given, otherwise ``resolve()``."""
        if environment_id is None:
            return await self.resolve()
        if not is_positive_id(environment_id):
            self.logger.error("Invalid environment id", environment_id=environment_id)
            return Result.failure(
                ErrorKind.PRECONDITION,
                f"Invalid environment id {environment_id!r}: must be a positive integer",
            )
        return Result.success(environment_id)
