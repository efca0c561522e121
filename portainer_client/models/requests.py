"""Request and result models for creation, control and shell operations."""

from collections.abc import Mapping
from typing import Any

from pydantic import Field

from ..constants import CONTAINER_CREATE_METHOD, DEFAULT_KILL_SIGNAL, DEFAULT_RESTART_TIMEOUT_MS
from .resources import PortainerModel


class EnvVar(PortainerModel):
    """Stack environment variable as sent to Portainer."""

    name: str
    value: str = ""


class StackCreateRequest(PortainerModel):
    """Request to create a standalone compose stack."""

    name: str = Field(alias="Name")
    compose_content: str = Field(default="", alias="StackFileContent")
    env: list[EnvVar] = Field(default_factory=list, alias="Env")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StackCreateRequest":
        """Build from a wire-style mapping.

        The compose content may be given as ``ComposeFile`` or
        ``StackFileContent``; ``ComposeFile`` wins when both are present.
        """
        values = dict(data)
        compose_file = values.pop("ComposeFile", None)
        if compose_file:
            values["StackFileContent"] = compose_file
        return cls.model_validate(values)

    def to_payload(self) -> dict[str, Any]:
        return {
            "Name": self.name,
            "StackFileContent": self.compose_content,
            "Env": [var.model_dump() for var in self.env],
        }


class ContainerCreateRequest(PortainerModel):
    """Request to create a container directly through the engine API.

    ``payload`` is the engine-specific create body (``Image``, ``Env``,
    ``HostConfig`` ...) and is passed through unchanged.
    """

    name: str = Field(alias="Name")
    payload: dict[str, Any] | None = Field(default=None, alias="ContainerPayload")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ContainerCreateRequest":
        return cls.model_validate(dict(data))


class ContainerCreated(PortainerModel):
    """Synthesized record for a created and verified container."""

    id: str
    name: str
    method: str = CONTAINER_CREATE_METHOD
    created: bool = True
    verified: bool = True


class ContainerCriteria(PortainerModel):
    """Search criteria for ``find_container_by_details``; both fields AND together."""

    image: str | None = None
    label: str | None = None


class ContainerActionOptions(PortainerModel):
    """Options for container lifecycle actions."""

    force: bool = False
    remove_volumes: bool = False
    signal: str = DEFAULT_KILL_SIGNAL
    timeout_ms: int = Field(default=DEFAULT_RESTART_TIMEOUT_MS, ge=0, description="Restart grace period (ms)")


class ContainerResources(PortainerModel):
    """CPU and memory limits for ``update_container_resources``."""

    cpu_quota: int | None = Field(default=None, ge=0, description="CPU quota (us per period)")
    cpu_period: int | None = Field(default=None, gt=0, description="CPU period (us)")
    memory: int | None = Field(default=None, ge=0, description="Memory limit (bytes)")


class CommandExecution(PortainerModel):
    """Output of a command executed inside a container."""

    output: str
    exit_code: int = 0
