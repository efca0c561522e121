"""Remote resource models.

Portainer and the Docker engine API it proxies use PascalCase field names;
the models accept those through aliases and expose snake_case attributes.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PortainerModel(BaseModel):
    """Base model with common wire settings."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def model_dump(self, **kwargs) -> dict[str, Any]:
        """Convert to dict with exclude_none by default."""
        kwargs.setdefault("exclude_none", True)
        return super().model_dump(**kwargs)


class Environment(PortainerModel):
    """A registered Portainer environment (endpoint)."""

    id: int = Field(alias="Id")
    name: str = Field(default="", alias="Name")


class Stack(PortainerModel):
    """A Portainer stack. ``(id, environment_id)`` is its strict identity."""

    id: int = Field(alias="Id")
    name: str = Field(alias="Name")
    environment_id: int = Field(alias="EndpointId")


class Container(PortainerModel):
    """A container as listed by the Docker engine ``/containers/json`` endpoint."""

    id: str = Field(alias="Id")
    names: list[str] = Field(default_factory=list, alias="Names")
    image: str = Field(default="", alias="Image")
    labels: dict[str, str] = Field(default_factory=dict, alias="Labels")
    state: str = Field(default="", alias="State")
    status: str = Field(default="", alias="Status")

    # The engine reports missing names/labels as null.
    @field_validator("names", mode="before")
    @classmethod
    def names_none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("labels", mode="before")
    @classmethod
    def labels_none_to_dict(cls, v: Any) -> Any:
        return {} if v is None else v

    @classmethod
    def from_inspect(cls, data: dict[str, Any]) -> "Container":
        """Build from a ``/containers/{id}/json`` inspect payload."""
        config = data.get("Config") or {}
        state = data.get("State") or {}
        if isinstance(state, dict):
            state_name = state.get("Status", "")
            status = "running" if state.get("Running") else state_name
        else:
            state_name = status = str(state)
        name = data.get("Name")
        return cls(
            Id=data.get("Id", ""),
            Names=[name] if name else [],
            Image=config.get("Image", data.get("Image", "")),
            Labels=config.get("Labels") or {},
            State=state_name,
            Status=status,
        )

    @property
    def is_running(self) -> bool:
        return self.state == "running"

    @property
    def display_name(self) -> str:
        """First name without the engine's leading separator."""
        if not self.names:
            return self.id[:12]
        return self.names[0].removeprefix("/")


class Image(PortainerModel):
    """An image as listed by the Docker engine ``/images/json`` endpoint."""

    id: str = Field(alias="Id")
    repo_tags: list[str] = Field(default_factory=list, alias="RepoTags")
    created: int = Field(default=0, alias="Created")
    size: int = Field(default=0, alias="Size")

    @field_validator("repo_tags", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v
