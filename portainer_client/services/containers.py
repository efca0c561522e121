"""
Container Controls Service

Lifecycle actions (start, stop, remove, kill, pause, unpause, restart), image
pulls, resource updates and the pre-creation cleanup of same-named
containers, all through the Docker engine API proxied by Portainer.
"""

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from ..constants import CONTAINER_NAME_PREFIX, DEFAULT_KILL_SIGNAL, DEFAULT_RESTART_TIMEOUT_MS
from ..core.exceptions import TransportError
from ..core.result import Result
from ..core.transport import PortainerTransport
from ..models.enums import ContainerAction, ErrorKind
from ..models.requests import ContainerActionOptions, ContainerResources
from ..models.resources import Container
from ..utils import docker_path
from .environment import EnvironmentResolver
from .fetching import ResourceFetcher


class ContainerControls:
    """Container lifecycle operations for one Portainer instance."""

    def __init__(
        self,
        transport: PortainerTransport,
        resolver: EnvironmentResolver,
        fetcher: ResourceFetcher,
        logger: Any = None,
    ):
        self.transport = transport
        self.resolver = resolver
        self.fetcher = fetcher
        self.logger = (logger or structlog.get_logger()).bind(component="container_controls")

    async def start_container(
        self, container_id: str, environment_id: int | None = None
    ) -> Result[bool]:
        return await self.handle_container(ContainerAction.START, container_id, environment_id)

    async def stop_container(
        self, container_id: str, environment_id: int | None = None
    ) -> Result[bool]:
        return await self.handle_container(ContainerAction.STOP, container_id, environment_id)

    async def remove_container(
        self,
        container_id: str,
        environment_id: int | None = None,
        force: bool = False,
        remove_volumes: bool = False,
    ) -> Result[bool]:
        return await self.handle_container(
            ContainerAction.REMOVE,
            container_id,
            environment_id,
            ContainerActionOptions(force=force, remove_volumes=remove_volumes),
        )

    async def kill_container(
        self, container_id: str, environment_id: int | None = None, signal: str = DEFAULT_KILL_SIGNAL
    ) -> Result[bool]:
        return await self.handle_container(
            ContainerAction.KILL,
            container_id,
            environment_id,
            ContainerActionOptions(signal=signal),
        )

    async def pause_container(
        self, container_id: str, environment_id: int | None = None
    ) -> Result[bool]:
        return await self.handle_container(ContainerAction.PAUSE, container_id, environment_id)

    async def unpause_container(
        self, container_id: str, environment_id: int | None = None
    ) -> Result[bool]:
        return await self.handle_container(ContainerAction.UNPAUSE, container_id, environment_id)

    async def restart_container(
        self, container_id: str, environment_id: int | None = None, timeout_ms: int = DEFAULT_RESTART_TIMEOUT_MS
    ) -> Result[bool]:
        """Restart a container; ``timeout_ms`` is the grace period before it is killed."""
        return await self.handle_container(
            ContainerAction.RESTART,
            container_id,
            environment_id,
            {"timeout_ms": timeout_ms},
        )

    async def handle_container(
        self,
        action: ContainerAction | str,
        container_id: str,
        environment_id: int | None = None,
        options: ContainerActionOptions | Mapping[str, Any] | None = None,
    ) -> Result[bool]:
        """Validate and dispatch a container lifecycle action.

        Args:
            action: A ``ContainerAction`` or its string value ("start", "kill" ...)
            container_id: Container id or name as accepted by the engine
            environment_id: Target environment; resolved when omitted
            options: Action options (force, remove_volumes, signal, timeout_ms)

        Returns:
            ``Result`` holding True when the engine accepted the action
        """
        try:
            action = ContainerAction(action)
        except ValueError:
            self.logger.error("Invalid container action", action=action)
            valid = ", ".join(a.value for a in ContainerAction)
            return Result.failure(
                ErrorKind.PRECONDITION, f"Invalid action {action!r}: must be one of {valid}"
            )

        if not container_id or not isinstance(container_id, str):
            self.logger.error("Invalid container id: must be a non-empty string")
            return Result.failure(ErrorKind.PRECONDITION, "Container id must be a non-empty string")

        if options is None:
            options = ContainerActionOptions()
        elif not isinstance(options, ContainerActionOptions):
            try:
                options = ContainerActionOptions.model_validate(dict(options))
            except (ValidationError, TypeError, ValueError) as e:
                self.logger.error("Invalid container action options", error=str(e))
                return Result.failure(ErrorKind.PRECONDITION, f"Invalid action options: {e}")

        env = await self.resolver.resolve_or(environment_id)
        if not env.ok:
            self.logger.error("No Portainer environment available for container action", action=action.value)
            return env.as_failure()

        try:
            await self._execute_action(action, container_id, env.value, options)
        except TransportError as e:
            self.logger.error(
                "Container action failed",
                action=action.value,
                container_id=container_id,
                error=str(e),
            )
            return Result.failure(
                ErrorKind.TRANSPORT, f"Failed to {action.value} container {container_id}: {e}"
            )
        return Result.success(True)

    async def _execute_action(
        self,
        action: ContainerAction,
        container_id: str,
        environment_id: int,
        options: ContainerActionOptions,
    ) -> None:
        base = docker_path(environment_id, f"/containers/{container_id}")
        self.logger.info("Running container action", action=action.value, container_id=container_id)

        if action is ContainerAction.REMOVE:
            params = {}
            if options.force:
                params["force"] = "true"
            if options.remove_volumes:
                params["v"] = "true"
            await self.transport.delete(base, params=params or None)
        elif action is ContainerAction.KILL:
            await self.transport.post(f"{base}/kill", params={"signal": options.signal})
        elif action is ContainerAction.RESTART:
            await self.transport.post(
                f"{base}/restart", params={"t": options.timeout_ms // 1000}
            )
        else:
            await self.transport.post(f"{base}/{action.value}")

        self.logger.info("Container action completed", action=action.value, container_id=container_id)

    async def pull_image(self, image: str, environment_id: int | None = None) -> Result[bool]:
        """Pull ``image`` (``name[:tag]``) into the environment's engine."""
        if not image or not isinstance(image, str):
            self.logger.error("Invalid image name: must be a non-empty string")
            return Result.failure(ErrorKind.PRECONDITION, "Image name must be a non-empty string")

        env = await self.resolver.resolve_or(environment_id)
        if not env.ok:
            self.logger.error("No Portainer environment available to pull image")
            return env.as_failure()

        self.logger.info("Pulling image", image=image, environment_id=env.value)
        try:
            await self.transport.post(
                docker_path(env.value, "/images/create"), params={"fromImage": image}
            )
        except TransportError as e:
            self.logger.error("Failed to pull image", image=image, error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Failed to pull image {image}: {e}")

        self.logger.info("Image pulled", image=image)
        return Result.success(True)

    async def update_container_resources(
        self,
        container_id: str,
        resources: ContainerResources | Mapping[str, Any],
        environment_id: int | None = None,
    ) -> Result[bool]:
        """Apply CPU and memory limits to a running container.

        Limits left unset keep the values from the container's current
        ``HostConfig``, as does the restart policy.
        """
        if not container_id or not isinstance(container_id, str):
            self.logger.error("Invalid container id: must be a non-empty string")
            return Result.failure(ErrorKind.PRECONDITION, "Container id must be a non-empty string")

        if not isinstance(resources, ContainerResources):
            if not isinstance(resources, Mapping):
                self.logger.error("Invalid resources: must be a mapping")
                return Result.failure(ErrorKind.PRECONDITION, "Resources must be a mapping")
            try:
                resources = ContainerResources.model_validate(dict(resources))
            except ValidationError as e:
                self.logger.error("Invalid container resources", error=str(e))
                return Result.failure(ErrorKind.PRECONDITION, f"Invalid resources: {e}")

        env = await self.resolver.resolve_or(environment_id)
        if not env.ok:
            self.logger.error("No Portainer environment available to update resources")
            return env.as_failure()

        path = docker_path(env.value, f"/containers/{container_id}")
        self.logger.info("Updating container resources", container_id=container_id)
        try:
            info = await self.transport.get(f"{path}/json")
            host_config = (info.get("HostConfig") if isinstance(info, dict) else None) or {}
            update = {
                "Memory": _pick(resources.memory, host_config.get("Memory")),
                "CpuQuota": _pick(resources.cpu_quota, host_config.get("CpuQuota")),
                "CpuPeriod": _pick(resources.cpu_period, host_config.get("CpuPeriod")),
                "RestartPolicy": host_config.get("RestartPolicy"),
            }
            await self.transport.post(f"{path}/update", json=update)
        except TransportError as e:
            self.logger.error(
                "Failed to update container resources", container_id=container_id, error=str(e)
            )
            return Result.failure(
                ErrorKind.TRANSPORT, f"Failed to update resources of {container_id}: {e}"
            )

        self.logger.info("Container resources updated", container_id=container_id)
        return Result.success(True)

    async def cleanup_existing_container(
        self, container_name: str, environment_id: int | None = None
    ) -> Result[bool]:
        """Stop (when running) and remove a container that already uses ``container_name``.

        Only exact names match, with or without the leading ``/``. The value is
        True when a container was removed and False when none existed.
        """
        if not container_name or not isinstance(container_name, str):
            self.logger.error("Invalid container name: must be a non-empty string")
            return Result.failure(
                ErrorKind.PRECONDITION, "Container name must be a non-empty string"
            )

        env = await self.resolver.resolve_or(environment_id)
        if not env.ok:
            self.logger.error("No Portainer environment available for cleanup")
            return env.as_failure()

        containers = await self.fetcher.get_containers(True, env.value)
        if not containers.ok:
            self.logger.error("No containers found, canceled cleanup operation")
            return containers.as_failure()

        existing = _find_exact(containers.value or [], container_name)
        if existing is None:
            return Result.success(False)

        self.logger.info(
            "Cleaning up existing container", container_name=container_name, container_id=existing.id
        )
        path = docker_path(env.value, f"/containers/{existing.id}")
        try:
            if existing.is_running:
                await self.transport.post(f"{path}/stop")
                self.logger.info("Container stopped", container_id=existing.id)
            await self.transport.delete(path)
        except TransportError as e:
            self.logger.warning(
                "Failed to cleanup existing container", container_name=container_name, error=str(e)
            )
            return Result.failure(
                ErrorKind.TRANSPORT, f"Failed to cleanup container '{container_name}': {e}"
            )

        self.logger.info("Container removed", container_id=existing.id)
        return Result.success(True)


def _pick(requested: int | None, current: Any) -> Any:
    return current if requested is None else requested


def _find_exact(containers: list[Container], name: str) -> Container | None:
    bare = name.removeprefix(CONTAINER_NAME_PREFIX)
    for container in containers:
        if any(n.removeprefix(CONTAINER_NAME_PREFIX) == bare for n in container.names):
            return container
    return None
