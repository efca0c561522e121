"""
Shell Controls Service

Runs shell commands inside containers through the engine exec API.
"""

from typing import Any

import structlog

from ..core.exceptions import TransportError
from ..core.result import Result
from ..core.transport import PortainerTransport
from ..models.enums import ErrorKind
from ..models.requests import CommandExecution
from ..utils import docker_path
from .environment import EnvironmentResolver


class ShellControls:
    """Execute commands in running containers."""

    def __init__(
        self,
        transport: PortainerTransport,
        resolver: EnvironmentResolver,
        logger: Any = None,
    ):
        self.transport = transport
        self.resolver = resolver
        self.logger = (logger or structlog.get_logger()).bind(component="shell_controls")

    async def execute_command(
        self, container_id: str, command: str, environment_id: int | None = None
    ) -> Result[CommandExecution]:
        """Run ``command`` with ``/bin/sh -c`` inside a container.

        When the engine answers 404 the first listed environment is tried once,
        provided it differs from the one that failed. The resolver's cached
        environment is left untouched.
        """
        if not isinstance(container_id, str) or not container_id.strip():
            self.logger.error("Invalid container id: must be a non-empty string")
            return Result.failure(ErrorKind.PRECONDITION, "Container id must be a non-empty string")
        if not isinstance(command, str) or not command.strip():
            self.logger.error("Invalid command: must be a non-empty string")
            return Result.failure(ErrorKind.PRECONDITION, "Command must be a non-empty string")

        env = await self.resolver.resolve_or(environment_id)
        if not env.ok:
            self.logger.error("No Portainer environment available to execute command")
            return env.as_failure()

        try:
            return Result.success(await self._execute_in(container_id, command, env.value))
        except TransportError as e:
            if e.is_not_found:
                retried = await self._retry_with_new_environment(container_id, command, env.value)
                if retried is not None:
                    return Result.success(retried)
            self.logger.error(
                "Failed to execute command", container_id=container_id, error=str(e)
            )
            return Result.failure(
                ErrorKind.TRANSPORT, f"Failed to execute command in {container_id}: {e}"
            )

    async def _execute_in(
        self, container_id: str, command: str, environment_id: int
    ) -> CommandExecution:
        created = await self.transport.post(
            docker_path(environment_id, f"/containers/{container_id}/exec"),
            json={"AttachStdout": True, "AttachStderr": True, "Cmd": ["/bin/sh", "-c", command]},
        )
        exec_id = created.get("Id") if isinstance(created, dict) else None
        if not exec_id:
            raise TransportError(
                "Exec create response did not contain an Id",
                method="POST",
                url=docker_path(environment_id, f"/containers/{container_id}/exec"),
            )

        output = await self.transport.post(
            docker_path(environment_id, f"/exec/{exec_id}/start"),
            json={"Detach": False, "Tty": False},
        )
        return CommandExecution(output="" if output is None else str(output), exit_code=0)

    async def _retry_with_new_environment(
        self, container_id: str, command: str, original_env_id: int
    ) -> CommandExecution | None:
        self.logger.warning(
            "Command target not found, attempting to discover a valid environment",
            container_id=container_id,
            environment_id=original_env_id,
        )
        environments = await self.resolver.list_environments()
        if not environments.ok or not environments.value:
            return None
        candidate = environments.value[0].id
        if candidate == original_env_id:
            return None

        self.logger.info("Retrying command in discovered environment", environment_id=candidate)
        try:
            return await self._execute_in(container_id, command, candidate)
        except TransportError as e:
            self.logger.error("Retry with new environment failed", error=str(e))
            return None
