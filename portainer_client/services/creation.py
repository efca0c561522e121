"""
Creation Orchestrator

Creates stacks and containers and confirms each one by polling until it shows
up in Portainer's listings. Portainer acknowledges a create before the
resource is visible, so a submit is only reported as successful once the
poller has seen it.

Stack creation is "create or reuse": an existing stack with the same name is
returned without submitting anything. Container creation replaces: a
container already using the sanitized name is stopped and removed first.
"""

import asyncio
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from ..constants import (
    DEFAULT_MAX_RETRY_COUNT,
    DEFAULT_SETTLE_DELAY_MS,
    DEFAULT_VERIFY_TIMEOUT_MS,
    STACK_CREATE_PATH,
    STACK_TYPE_COMPOSE,
)
from ..core.exceptions import TransportError
from ..core.result import Result
from ..core.transport import PortainerTransport
from ..models.enums import ErrorKind
from ..models.requests import ContainerCreated, ContainerCreateRequest, StackCreateRequest
from ..models.resources import Stack
from ..utils import docker_path, normalize_non_negative, sanitize_container_name, validate_compose_content
from .containers import ContainerControls
from .environment import EnvironmentResolver
from .lookup import ResourceLookup
from .verification import VerificationPoller


class CreationOrchestrator:
    """Submit, settle, verify and retry resource creation."""

    def __init__(
        self,
        transport: PortainerTransport,
        resolver: EnvironmentResolver,
        lookup: ResourceLookup,
        poller: VerificationPoller,
        container_controls: ContainerControls,
        settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS,
        logger: Any = None,
    ):
        self.transport = transport
        self.resolver = resolver
        self.lookup = lookup
        self.poller = poller
        self.container_controls = container_controls
        self.settle_delay_ms = settle_delay_ms
        self.logger = (logger or structlog.get_logger()).bind(component="creation_orchestrator")

    async def create_stack(
        self,
        spec: StackCreateRequest | Mapping[str, Any],
        max_retry_count: Any = DEFAULT_MAX_RETRY_COUNT,
        timeout_ms: Any = DEFAULT_VERIFY_TIMEOUT_MS,
    ) -> Result[Stack | dict[str, Any]]:
        """Create a compose stack, or return the existing stack with that name.

        Args:
            spec: ``StackCreateRequest`` or a mapping with ``Name`` and
                ``ComposeFile``/``StackFileContent`` (and optional ``Env``)
            max_retry_count: Maximum number of submissions (default 3)
            timeout_ms: Verification timeout per attempt in ms (default 5000)

        Returns:
            The created stack (the raw creation response when it does not
            parse as a ``Stack``) or the pre-existing one
        """
        request = self._validate_stack_request(spec)
        if not request.ok:
            return request.as_failure()
        stack_request = request.value

        max_retry_count = normalize_non_negative(
            max_retry_count, DEFAULT_MAX_RETRY_COUNT, "max_retry_count", self.logger
        )
        timeout_ms = normalize_non_negative(
            timeout_ms, DEFAULT_VERIFY_TIMEOUT_MS, "timeout_ms", self.logger
        )

        existing = await self.lookup.find_stack_by_name(stack_request.name)
        if existing.ok:
            self.logger.warning(
                "Stack already exists, skipping creation",
                stack_name=stack_request.name,
                stack_id=existing.value.id,
            )
            return existing

        env = await self.resolver.resolve()
        if not env.ok:
            self.logger.error("Environment ID is required to create a stack")
            return Result.failure(
                ErrorKind.PRECONDITION, f"Cannot create stack without an environment: {env.message}"
            )

        for attempt in range(1, max_retry_count + 1):
            self.logger.info(
                "Submitting stack creation",
                stack_name=stack_request.name,
                environment_id=env.value,
                attempt=attempt,
                max_attempts=max_retry_count,
            )
            try:
                response = await self.transport.post(
                    STACK_CREATE_PATH,
                    stack_request.to_payload(),
                    params={"endpointId": env.value, "type": STACK_TYPE_COMPOSE},
                )
            except TransportError as e:
                self.logger.error("Failed to create stack", stack_name=stack_request.name, error=str(e))
                return Result.failure(ErrorKind.TRANSPORT, f"Failed to create stack: {e}")

            await self._settle()
            if await self.poller.verify_stack_created(stack_request.name, timeout_ms):
                self.logger.info("Stack created and verified", stack_name=stack_request.name)
                return Result.success(self._parse_stack(response))

            self.logger.warning(
                "Stack not verified, retrying",
                stack_name=stack_request.name,
                attempt=attempt,
                max_attempts=max_retry_count,
            )

        self.logger.error(
            "Stack creation could not be verified",
            stack_name=stack_request.name,
            attempts=max_retry_count,
        )
        return Result.failure(
            ErrorKind.EXHAUSTED,
            f"Failed to create and verify stack '{stack_request.name}' "
            f"after {max_retry_count} attempts",
        )

    async def create_container(
        self,
        spec: ContainerCreateRequest | Mapping[str, Any],
        max_retry_count: Any = DEFAULT_MAX_RETRY_COUNT,
        timeout_ms: Any = DEFAULT_VERIFY_TIMEOUT_MS,
    ) -> Result[ContainerCreated]:
        """Create and start a container, replacing any container with the same name.

        The name is sanitized first (see ``sanitize_container_name``); the
        sanitized name is the one created and verified.
        """
        request = self._validate_container_request(spec)
        if not request.ok:
            return request.as_failure()
        container_request = request.value

        max_retry_count = normalize_non_negative(
            max_retry_count, DEFAULT_MAX_RETRY_COUNT, "max_retry_count", self.logger
        )
        timeout_ms = normalize_non_negative(
            timeout_ms, DEFAULT_VERIFY_TIMEOUT_MS, "timeout_ms", self.logger
        )
        name = sanitize_container_name(container_request.name)

        env = await self.resolver.resolve()
        if not env.ok:
            self.logger.error("Environment ID is required to create a container")
            return Result.failure(
                ErrorKind.PRECONDITION,
                f"Cannot create container without an environment: {env.message}",
            )

        for attempt in range(1, max_retry_count + 1):
            cleanup = await self.container_controls.cleanup_existing_container(name, env.value)
            if not cleanup.ok:
                self.logger.warning(
                    "Cleanup of existing container failed, continuing",
                    container_name=name,
                    error=cleanup.message,
                )

            self.logger.info(
                "Submitting container creation",
                container_name=name,
                environment_id=env.value,
                attempt=attempt,
                max_attempts=max_retry_count,
            )
            try:
                created = await self.transport.post(
                    docker_path(env.value, "/containers/create"),
                    container_request.payload,
                    params={"name": name},
                )
                container_id = created.get("Id") if isinstance(created, dict) else None
                if not container_id:
                    self.logger.error(
                        "Container create response did not contain an Id", container_name=name
                    )
                    return Result.failure(
                        ErrorKind.TRANSPORT,
                        f"Failed to create container '{name}': response did not contain an Id",
                    )
                await self.transport.post(docker_path(env.value, f"/containers/{container_id}/start"))
            except TransportError as e:
                self.logger.error("Failed to create container", container_name=name, error=str(e))
                return Result.failure(ErrorKind.TRANSPORT, f"Failed to create container: {e}")

            await self._settle()
            if await self.poller.verify_container_created(name, timeout_ms, env.value):
                self.logger.info(
                    "Container created and verified", container_name=name, container_id=container_id
                )
                return Result.success(ContainerCreated(id=container_id, name=name))

            self.logger.warning(
                "Container not verified, retrying",
                container_name=name,
                attempt=attempt,
                max_attempts=max_retry_count,
            )

        self.logger.error(
            "Container creation could not be verified", container_name=name, attempts=max_retry_count
        )
        return Result.failure(
            ErrorKind.EXHAUSTED,
            f"Failed to create and verify container '{name}' after {max_retry_count} attempts",
        )

    def _validate_stack_request(
        self, spec: StackCreateRequest | Mapping[str, Any]
    ) -> Result[StackCreateRequest]:
        if isinstance(spec, Mapping):
            try:
                spec = StackCreateRequest.from_mapping(spec)
            except ValidationError as e:
                self.logger.error("Invalid stack request", error=str(e))
                return Result.failure(ErrorKind.PRECONDITION, f"Invalid stack request: {e}")
        elif not isinstance(spec, StackCreateRequest):
            self.logger.error("Invalid stack request: must be a mapping or StackCreateRequest")
            return Result.failure(ErrorKind.PRECONDITION, "Invalid stack request")

        if not spec.name or not spec.compose_content:
            self.logger.error("Stack name and compose content are required")
            return Result.failure(
                ErrorKind.PRECONDITION, "Stack name and compose content are required"
            )

        problem = validate_compose_content(spec.compose_content)
        if problem:
            self.logger.error("Invalid compose content", stack_name=spec.name, error=problem)
            return Result.failure(ErrorKind.PRECONDITION, problem)
        return Result.success(spec)

    def _validate_container_request(
        self, spec: ContainerCreateRequest | Mapping[str, Any]
    ) -> Result[ContainerCreateRequest]:
        if isinstance(spec, Mapping):
            try:
                spec = ContainerCreateRequest.from_mapping(spec)
            except ValidationError as e:
                self.logger.error("Invalid container request", error=str(e))
                return Result.failure(ErrorKind.PRECONDITION, f"Invalid container request: {e}")
        elif not isinstance(spec, ContainerCreateRequest):
            self.logger.error("Invalid container request: must be a mapping or ContainerCreateRequest")
            return Result.failure(ErrorKind.PRECONDITION, "Invalid container request")

        if not spec.name or spec.payload is None:
            self.logger.error("Container name and payload are required")
            return Result.failure(
                ErrorKind.PRECONDITION, "Container name and payload are required"
            )
        return Result.success(spec)

    async def _settle(self) -> None:
        if self.settle_delay_ms > 0:
            await asyncio.sleep(self.settle_delay_ms / 1000)

    def _parse_stack(self, response: Any) -> Stack | dict[str, Any]:
        if not isinstance(response, dict):
            return {}
        try:
            return Stack.model_validate(response)
        except ValidationError:
            return response
