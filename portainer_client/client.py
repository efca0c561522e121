"""
Portainer Client

Composes the transport and the services into the single object applications
use. Each client owns its cached environment id; there is no shared global
instance.
"""

from collections.abc import Mapping
from typing import Any

import httpx

from .constants import (
    DEFAULT_KILL_SIGNAL,
    DEFAULT_MAX_RETRY_COUNT,
    DEFAULT_RESTART_TIMEOUT_MS,
    DEFAULT_VERIFY_TIMEOUT_MS,
)
from .core.config_loader import load_settings
from .core.exceptions import ConfigurationError
from .core.logging_config import get_client_logger
from .core.result import Result
from .core.settings import PortainerSettings
from .core.transport import PortainerTransport
from .models.enums import ContainerAction
from .models.requests import (
    CommandExecution,
    ContainerActionOptions,
    ContainerCreated,
    ContainerCreateRequest,
    ContainerCriteria,
    ContainerResources,
    StackCreateRequest,
)
from .models.resources import Container, Environment, Image, Stack
from .services import (
    ContainerControls,
    CreationOrchestrator,
    EnvironmentResolver,
    ResourceFetcher,
    ResourceLookup,
    ShellControls,
    StackControls,
    VerificationPoller,
)
from .utils import is_positive_id


class PortainerClient:
    """Async client for one Portainer instance.

    Construction fails with ``ConfigurationError`` when the base URL or the
    API key is missing. Every operation afterwards returns a ``Result``.

    Example:
        async with PortainerClient() as client:
            created = await client.create_stack({"Name": "web", "ComposeFile": compose})
            if not created.ok:
                print(created.error, created.message)
    """

    def __init__(
        self,
        settings: PortainerSettings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        logger: Any = None,
    ):
        self.settings = settings if settings is not None else load_settings()
        self.logger = logger or get_client_logger()

        environment_id = self.settings.environment_id
        if environment_id is not None and not is_positive_id(environment_id):
            raise ConfigurationError(
                f"PORTAINER_ENVIRONMENT_ID must be a positive integer, got {environment_id!r}"
            )

        self.transport = PortainerTransport(
            self.settings, http_client=http_client, logger=self.logger
        )
        self.resolver = EnvironmentResolver(self.transport, environment_id, logger=self.logger)

        self.fetcher = ResourceFetcher(self.transport, self.resolver, logger=self.logger)
        self.lookup = ResourceLookup(self.fetcher, logger=self.logger)
        self.poller = VerificationPoller(
            self.lookup, poll_interval_ms=self.settings.poll_interval_ms, logger=self.logger
        )
        self.containers = ContainerControls(
            self.transport, self.resolver, self.fetcher, logger=self.logger
        )
        self.stacks = StackControls(self.transport, self.resolver, self.lookup, logger=self.logger)
        self.shell = ShellControls(self.transport, self.resolver, logger=self.logger)
        self.creation = CreationOrchestrator(
            self.transport,
            self.resolver,
            self.lookup,
            self.poller,
            self.containers,
            settle_delay_ms=self.settings.settle_delay_ms,
            logger=self.logger,
        )

        self.logger.info(
            "Portainer client initialized",
            url=self.settings.url,
            environment_id=self.settings.environment_id,
        )

    async def __aenter__(self) -> "PortainerClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    @property
    def environment_id(self) -> int | None:
        return self.resolver.current

    # Environment

    async def resolve_environment(self) -> Result[int]:
        return await self.resolver.resolve()

    def set_environment(self, environment_id: int | None) -> None:
        self.resolver.set_environment(environment_id)

    # Lookup

    async def find_stack_by_name(
        self, name: str, environment_id: int | None = None
    ) -> Result[Stack]:
        return await self.lookup.find_stack_by_name(name, environment_id)

    async def find_stack_by_id(self, stack_id: int, environment_id: int) -> Result[Stack]:
        return await self.lookup.find_stack_by_id(stack_id, environment_id)

    async def find_container_by_name(
        self, name: str, environment_id: int | None = None
    ) -> Result[Container]:
        return await self.lookup.find_container_by_name(name, environment_id)

    async def find_container_by_details(
        self,
        criteria: ContainerCriteria | Mapping[str, Any],
        environment_id: int | None = None,
    ) -> Result[Container]:
        return await self.lookup.find_container_by_details(criteria, environment_id)

    # Verification

    async def verify_stack_created(
        self, name: str, timeout_ms: Any = DEFAULT_VERIFY_TIMEOUT_MS
    ) -> bool:
        return await self.poller.verify_stack_created(name, timeout_ms)

    async def verify_container_created(
        self, name: str, timeout_ms: Any = DEFAULT_VERIFY_TIMEOUT_MS
    ) -> bool:
        return await self.poller.verify_container_created(name, timeout_ms)

    # Creation

    async def create_stack(
        self,
        spec: StackCreateRequest | Mapping[str, Any],
        max_retry_count: Any = DEFAULT_MAX_RETRY_COUNT,
        timeout_ms: Any = DEFAULT_VERIFY_TIMEOUT_MS,
    ) -> Result[Stack | dict[str, Any]]:
        return await self.creation.create_stack(spec, max_retry_count, timeout_ms)

    async def create_container(
        self,
        spec: ContainerCreateRequest | Mapping[str, Any],
        max_retry_count: Any = DEFAULT_MAX_RETRY_COUNT,
        timeout_ms: Any = DEFAULT_VERIFY_TIMEOUT_MS,
    ) -> Result[ContainerCreated]:
        return await self.creation.create_container(spec, max_retry_count, timeout_ms)

    # Fetching

    async def get_environments(self) -> Result[list[Environment]]:
        return await self.fetcher.get_environments()

    async def get_environment(self, environment_id: int | None = None) -> Result[Environment]:
        return await self.fetcher.get_environment(environment_id)

    async def get_stacks(self) -> Result[list[Stack]]:
        return await self.fetcher.get_stacks()

    async def get_containers(
        self, include_all: bool = True, environment_id: int | None = None
    ) -> Result[list[Container]]:
        return await self.fetcher.get_containers(include_all, environment_id)

    async def get_container_details(
        self, identifier: str, environment_id: int | None = None
    ) -> Result[Container]:
        return await self.fetcher.get_container_details(identifier, environment_id)

    async def get_images(self, environment_id: int | None = None) -> Result[list[Image]]:
        return await self.fetcher.get_images(environment_id)

    async def get_status(self) -> Result[dict[str, Any]]:
        return await self.fetcher.get_status()

    # Container controls

    async def start_container(
        self, container_id: str, environment_id: int | None = None
    ) -> Result[bool]:
        return await self.containers.start_container(container_id, environment_id)

    async def stop_container(
        self, container_id: str, environment_id: int | None = None
    ) -> Result[bool]:
        return await self.containers.stop_container(container_id, environment_id)

    async def remove_container(
        self,
        container_id: str,
        environment_id: int | None = None,
        force: bool = False,
        remove_volumes: bool = False,
    ) -> Result[bool]:
        return await self.containers.remove_container(
            container_id, environment_id, force, remove_volumes
        )

    async def kill_container(
        self, container_id: str, environment_id: int | None = None, signal: str = DEFAULT_KILL_SIGNAL
    ) -> Result[bool]:
        return await self.containers.kill_container(container_id, environment_id, signal)

    async def pause_container(
        self, container_id: str, environment_id: int | None = None
    ) -> Result[bool]:
        return await self.containers.pause_container(container_id, environment_id)

    async def unpause_container(
        self, container_id: str, environment_id: int | None = None
    ) -> Result[bool]:
        return await self.containers.unpause_container(container_id, environment_id)

    async def restart_container(
        self, container_id: str, environment_id: int | None = None, timeout_ms: int = DEFAULT_RESTART_TIMEOUT_MS
    ) -> Result[bool]:
        return await self.containers.restart_container(container_id, environment_id, timeout_ms)

    async def handle_container(
        self,
        action: ContainerAction | str,
        container_id: str,
        environment_id: int | None = None,
        options: ContainerActionOptions | Mapping[str, Any] | None = None,
    ) -> Result[bool]:
        return await self.containers.handle_container(action, container_id, environment_id, options)

    async def pull_image(self, image: str, environment_id: int | None = None) -> Result[bool]:
        return await self.containers.pull_image(image, environment_id)

    async def update_container_resources(
        self,
        container_id: str,
        resources: ContainerResources | Mapping[str, Any],
        environment_id: int | None = None,
    ) -> Result[bool]:
        return await self.containers.update_container_resources(
            container_id, resources, environment_id
        )

    async def cleanup_existing_container(
        self, container_name: str, environment_id: int | None = None
    ) -> Result[bool]:
        return await self.containers.cleanup_existing_container(container_name, environment_id)

    # Stack controls

    async def start_stack(self, stack_id: int, environment_id: int | None = None) -> Result[bool]:
        return await self.stacks.start_stack(stack_id, environment_id)

    async def stop_stack(self, stack_id: int, environment_id: int | None = None) -> Result[bool]:
        return await self.stacks.stop_stack(stack_id, environment_id)

    async def delete_stack(
        self, stack: int | str, environment_id: int | None = None
    ) -> Result[Any]:
        return await self.stacks.delete_stack(stack, environment_id)

    # Shell

    async def execute_command(
        self, container_id: str, command: str, environment_id: int | None = None
    ) -> Result[CommandExecution]:
        return await self.shell.execute_command(container_id, command, environment_id)
