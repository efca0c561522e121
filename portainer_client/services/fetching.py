"""
Resource Fetching Service

Listing and detail reads for environments, stacks, containers and images.
Every method returns a ``Result``; transport failures become ``TRANSPORT``
failures and an unresolvable environment becomes the resolver's failure.
"""

from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from ..constants import ENDPOINTS_PATH, STACKS_PATH, STATUS_PATH
from ..core.exceptions import TransportError
from ..core.result import Result
from ..core.transport import PortainerTransport
from ..models.enums import ErrorKind
from ..models.resources import Container, Environment, Image, Stack
from ..utils import container_name_matches, docker_path
from .environment import EnvironmentResolver

ModelT = TypeVar("ModelT", bound=BaseModel)


class ResourceFetcher:
    """Read-only access to Portainer resources."""

    def __init__(
        self,
        transport: PortainerTransport,
        resolver: EnvironmentResolver,
        logger: Any = None,
    ):
        self.transport = transport
        self.resolver = resolver
        self.logger = (logger or structlog.get_logger()).bind(component="resource_fetcher")

    async def get_environments(self) -> Result[list[Environment]]:
        return await self.resolver.list_environments()

    async def get_environment(self, environment_id: int | None = None) -> Result[Environment]:
        """Fetch one environment, defaulting to the resolved one."""
        env = await self.resolver.resolve_or(environment_id)
        if not env.ok:
            return env.as_failure()

        try:
            data = await self.transport.get(f"{ENDPOINTS_PATH}/{env.value}")
        except TransportError as e:
            self.logger.error("Failed to fetch environment", environment_id=env.value, error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Failed to fetch environment: {e}")
        return self._parse_one(Environment, data, "environment")

    async def get_stacks(self) -> Result[list[Stack]]:
        """Fetch every stack Portainer manages, across all environments."""
        try:
            data = await self.transport.get(STACKS_PATH)
        except TransportError as e:
            self.logger.error("Failed to fetch stacks", error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Failed to fetch stacks: {e}")
        return self._parse_list(Stack, data, "stacks")

    async def get_containers(
        self, include_all: bool = True, environment_id: int | None = None
    ) -> Result[list[Container]]:
        """Fetch containers of an environment (``all=true`` includes stopped ones)."""
        env = await self.resolver.resolve_or(environment_id)
        if not env.ok:
            self.logger.error("Cannot fetch containers without an environment")
            return env.as_failure()

        try:
            data = await self.transport.get(
                docker_path(env.value, "/containers/json"),
                params={"all": str(include_all).lower()},
            )
        except TransportError as e:
            self.logger.error("Failed to fetch containers", environment_id=env.value, error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Failed to fetch containers: {e}")
        return self._parse_list(Container, data, "containers")

    async def get_container_details(
        self, identifier: str, environment_id: int | None = None
    ) -> Result[Container]:
        """Find a container by id, then by name.

        Tries the engine inspect endpoint with ``identifier`` first; when that
        fails, falls back to the permissive name match over the full listing.
        """
        if not identifier:
            self.logger.error("Container identifier is required to fetch container details")
            return Result.failure(ErrorKind.PRECONDITION, "Container identifier is required")

        env = await self.resolver.resolve_or(environment_id)
        if not env.ok:
            return env.as_failure()

        try:
            data = await self.transport.get(
                docker_path(env.value, f"/containers/{identifier}/json")
            )
            if isinstance(data, dict):
                return Result.success(Container.from_inspect(data))
        except TransportError as e:
            self.logger.debug("Inspect by id failed, matching by name", identifier=identifier, error=str(e))

        containers = await self.get_containers(True, env.value)
        if not containers.ok:
            return containers.as_failure()

        for container in containers.value or []:
            if container_name_matches(container.names, identifier):
                return Result.success(container)
        return Result.failure(ErrorKind.NOT_FOUND, f"Container '{identifier}' not found")

    async def get_images(self, environment_id: int | None = None) -> Result[list[Image]]:
        env = await self.resolver.resolve_or(environment_id)
        if not env.ok:
            self.logger.error("Cannot fetch images without an environment")
            return env.as_failure()

        try:
            data = await self.transport.get(docker_path(env.value, "/images/json"))
        except TransportError as e:
            self.logger.error("Failed to fetch images", environment_id=env.value, error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Failed to fetch images: {e}")
        return self._parse_list(Image, data, "images")

    async def get_status(self) -> Result[dict[str, Any]]:
        """Fetch Portainer's system status (version, instance id)."""
        try:
            data = await self.transport.get(STATUS_PATH)
        except TransportError as e:
            self.logger.error("Failed to fetch system status", error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Failed to fetch system status: {e}")
        return Result.success(data if isinstance(data, dict) else {"status": data})

    def _parse_list(
        self, model: type[ModelT], data: Any, resource: str
    ) -> Result[list[ModelT]]:
        if not isinstance(data, list):
            self.logger.error("Unexpected payload", resource=resource, payload_type=type(data).__name__)
            return Result.failure(ErrorKind.TRANSPORT, f"Unexpected {resource} payload")
        try:
            return Result.success([model.model_validate(item) for item in data])
        except ValidationError as e:
            self.logger.error("Malformed payload", resource=resource, error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Malformed {resource} payload: {e}")

    def _parse_one(self, model: type[ModelT], data: Any, resource: str) -> Result[ModelT]:
        try:
            return Result.success(model.model_validate(data))
        except ValidationError as e:
            self.logger.error("Malformed payload", resource=resource, error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Malformed {resource} payload: {e}")
