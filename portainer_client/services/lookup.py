"""
Resource Lookup Service

Finds stacks and containers by scanning full listings; Portainer offers no
server-side filtering for these queries.

A listing that cannot be fetched is reported as ``NOT_FOUND``, the same kind
as "no match". The message carries the underlying cause.
"""

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from ..core.result import Result
from ..models.enums import ErrorKind
from ..models.requests import ContainerCriteria
from ..models.resources import Container, Stack
from ..utils import container_name_matches, is_positive_id
from .fetching import ResourceFetcher


class ResourceLookup:
    """Linear-scan lookups over stack and container listings."""

    def __init__(self, fetcher: ResourceFetcher, logger: Any = None):
        self.fetcher = fetcher
        self.logger = (logger or structlog.get_logger()).bind(component="resource_lookup")

    async def find_stack_by_name(
        self, name: str, environment_id: int | None = None
    ) -> Result[Stack]:
        """First stack called ``name``; restricted to one environment when ``environment_id`` is given."""
        if not name or not isinstance(name, str):
            self.logger.error("Invalid stack name: must be a non-empty string")
            return Result.failure(ErrorKind.PRECONDITION, "Stack name must be a non-empty string")

        stacks = await self._list_stacks(f"Failed to get stack by name '{name}'")
        if not stacks.ok:
            return stacks.as_failure()

        for stack in stacks.value or []:
            if stack.name != name:
                continue
            if environment_id is None or stack.environment_id == environment_id:
                return Result.success(stack)
        if environment_id is not None:
            return Result.failure(
                ErrorKind.NOT_FOUND, f"Stack '{name}' not found in environment {environment_id}"
            )
        return Result.failure(ErrorKind.NOT_FOUND, f"Stack '{name}' not found")

    async def find_stack_by_id(self, stack_id: int, environment_id: int) -> Result[Stack]:
        """Find a stack by its strict identity; an id under another environment is not a match."""
        if not is_positive_id(stack_id):
            self.logger.error("Invalid stack id: must be a positive integer", stack_id=stack_id)
            return Result.failure(ErrorKind.PRECONDITION, "Stack id must be a positive integer")
        if not is_positive_id(environment_id):
            self.logger.error(
                "Invalid environment id: must be a positive integer", environment_id=environment_id
            )
            return Result.failure(
                ErrorKind.PRECONDITION, "Environment id must be a positive integer"
            )

        stacks = await self._list_stacks(
            f"Failed to get stack by id {stack_id} in environment {environment_id}"
        )
        if not stacks.ok:
            return stacks.as_failure()

        for stack in stacks.value or []:
            if stack.id == stack_id and stack.environment_id == environment_id:
                return Result.success(stack)
        return Result.failure(
            ErrorKind.NOT_FOUND,
            f"Stack {stack_id} not found in environment {environment_id}",
        )

    async def find_container_by_name(
        self, name: str, environment_id: int | None = None
    ) -> Result[Container]:
        """First container (listing order) whose names match ``name`` permissively."""
        if not name or not isinstance(name, str):
            self.logger.error("Invalid container name: must be a non-empty string")
            return Result.failure(
                ErrorKind.PRECONDITION, "Container name must be a non-empty string"
            )

        containers = await self._list_containers(environment_id)
        if not containers.ok:
            return containers.as_failure()

        for container in containers.value or []:
            if container_name_matches(container.names, name):
                return Result.success(container)
        return Result.failure(ErrorKind.NOT_FOUND, f"Container '{name}' not found")

    async def find_container_by_details(
        self,
        criteria: ContainerCriteria | Mapping[str, Any],
        environment_id: int | None = None,
    ) -> Result[Container]:
        """First container matching every given criterion.

        ``image`` must equal the container image; ``label`` only needs to be
        present as a label key (its value is not compared).
        """
        if isinstance(criteria, Mapping):
            try:
                criteria = ContainerCriteria.model_validate(dict(criteria))
            except ValidationError as e:
                self.logger.error("Invalid criteria", error=str(e))
                return Result.failure(ErrorKind.PRECONDITION, f"Invalid search criteria: {e}")
        elif not isinstance(criteria, ContainerCriteria):
            self.logger.error("Invalid criteria: must be a mapping or ContainerCriteria")
            return Result.failure(ErrorKind.PRECONDITION, "Invalid search criteria")

        if not criteria.image and not criteria.label:
            self.logger.error("At least one search criterion (image or label) must be provided")
            return Result.failure(
                ErrorKind.PRECONDITION, "At least one of image or label is required"
            )

        containers = await self._list_containers(environment_id)
        if not containers.ok:
            return containers.as_failure()

        for container in containers.value or []:
            if criteria.image and container.image != criteria.image:
                continue
            if criteria.label and criteria.label not in container.labels:
                continue
            return Result.success(container)
        return Result.failure(ErrorKind.NOT_FOUND, "No container matches the given criteria")

    async def _list_stacks(self, context: str) -> Result[list[Stack]]:
        stacks = await self.fetcher.get_stacks()
        if not stacks.ok:
            self.logger.error(context, error=stacks.message)
            return Result.failure(ErrorKind.NOT_FOUND, f"{context}: {stacks.message}")
        return stacks

    async def _list_containers(self, environment_id: int | None) -> Result[list[Container]]:
        containers = await self.fetcher.get_containers(True, environment_id)
        if not containers.ok:
            self.logger.error("No containers available for lookup", error=containers.message)
            return Result.failure(
                ErrorKind.NOT_FOUND, f"Container listing unavailable: {containers.message}"
            )
        return containers
