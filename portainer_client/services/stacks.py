"""
Stack Controls Service

Start, stop and delete Portainer stacks. Stacks are addressed by id together
with the environment they belong to.
"""

from typing import Any

import structlog

from ..constants import STACKS_PATH
from ..core.exceptions import TransportError
from ..core.result import Result
from ..core.transport import PortainerTransport
from ..models.enums import ErrorKind
from ..utils import is_positive_id
from .environment import EnvironmentResolver
from .lookup import ResourceLookup


class StackControls:
    """Lifecycle operations on existing stacks."""

    def __init__(
        self,
        transport: PortainerTransport,
        resolver: EnvironmentResolver,
        lookup: ResourceLookup,
        logger: Any = None,
    ):
        self.transport = transport
        self.resolver = resolver
        self.lookup = lookup
        self.logger = (logger or structlog.get_logger()).bind(component="stack_controls")

    async def start_stack(self, stack_id: int, environment_id: int | None = None) -> Result[bool]:
        return await self._stack_action("start", stack_id, environment_id)

    async def stop_stack(self, stack_id: int, environment_id: int | None = None) -> Result[bool]:
        return await self._stack_action("stop", stack_id, environment_id)

    async def delete_stack(
        self, stack: int | str, environment_id: int | None = None
    ) -> Result[Any]:
        """Delete a stack given its id or its name.

        The stack must exist in the target environment before the delete is
        sent; a name is first resolved to its id. The value is Portainer's
        delete response body (usually None).
        """
        if isinstance(stack, str):
            if not stack.strip():
                self.logger.error("Invalid stack name: must not be empty")
                return Result.failure(ErrorKind.PRECONDITION, "Stack name must not be empty")
        elif not is_positive_id(stack):
            self.logger.error("Invalid stack id: must be a positive integer", stack_id=stack)
            return Result.failure(
                ErrorKind.PRECONDITION, "Stack must be a positive id or a non-empty name"
            )

        env = await self.resolver.resolve_or(environment_id)
        if not env.ok:
            self.logger.error("No Portainer environment available to delete stack")
            return env.as_failure()

        if isinstance(stack, str):
            found = await self.lookup.find_stack_by_name(stack, env.value)
        else:
            found = await self.lookup.find_stack_by_id(stack, env.value)
        if not found.ok:
            self.logger.error(
                "Stack does not exist in environment", stack_ref=stack, environment_id=env.value
            )
            return found.as_failure()

        stack_id = found.value.id
        self.logger.info("Deleting stack", stack_id=stack_id, environment_id=env.value)
        try:
            response = await self.transport.delete(
                f"{STACKS_PATH}/{stack_id}", params={"endpointId": env.value}
            )
        except TransportError as e:
            self.logger.error("Failed to delete stack", stack_id=stack_id, error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Failed to delete stack {stack_id}: {e}")

        self.logger.info("Stack deleted", stack_id=stack_id)
        return Result.success(response)

    async def _stack_action(
        self, action: str, stack_id: int, environment_id: int | None
    ) -> Result[bool]:
        if not is_positive_id(stack_id):
            self.logger.error("Invalid stack id: must be a positive integer", stack_id=stack_id)
            return Result.failure(ErrorKind.PRECONDITION, "Stack id must be a positive integer")

        env = await self.resolver.resolve_or(environment_id)
        if not env.ok:
            self.logger.error("No Portainer environment available for stack action", action=action)
            return env.as_failure()

        self.logger.info("Running stack action", action=action, stack_id=stack_id)
        try:
            await self.transport.post(
                f"{STACKS_PATH}/{stack_id}/{action}", params={"endpointId": env.value}
            )
        except TransportError as e:
            self.logger.error("Stack action failed", action=action, stack_id=stack_id, error=str(e))
            return Result.failure(ErrorKind.TRANSPORT, f"Failed to {action} stack {stack_id}: {e}")

        self.logger.info("Stack action completed", action=action, stack_id=stack_id)
        return Result.success(True)
