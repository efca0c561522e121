"""Shared pytest fixtures for Portainer client tests.

``FakePortainer`` is an in-memory Portainer served through
``httpx.MockTransport``; tests seed its state and inspect the requests it
received.
"""

import json
import re
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest

from portainer_client import PortainerClient, PortainerSettings
from portainer_client.core.transport import build_async_client

BASE_URL = "http://portainer.test"
API_KEY = "test-api-key"

_DOCKER = r"^/api/endpoints/(?P<env>\d+)/docker"


class FakePortainer:
    """Minimal Portainer + proxied Docker engine API."""

    def __init__(self) -> None:
        self.environments: list[dict[str, Any]] = [{"Id": 1, "Name": "local"}]
        self.stacks: list[dict[str, Any]] = []
        self.containers: dict[int, list[dict[str, Any]]] = {1: []}
        self.images: dict[int, list[dict[str, Any]]] = {1: []}
        self.requests: list[httpx.Request] = []
        # Whether created resources show up in later listings
        self.stacks_visible = True
        self.containers_visible = True
        # Created while containers_visible was False: inspectable and startable, never listed
        self.hidden_containers: list[dict[str, Any]] = []
        # (METHOD, path) -> (status, body)
        self.failures: dict[tuple[str, str], tuple[int, str]] = {}
        self.exec_output = "hello\n"
        self._next_id = 100

    # Request inspection helpers

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def count(self, method: str, pattern: str) -> int:
        return sum(
            1 for r in self.requests if r.method == method and re.search(pattern, r.url.path)
        )

    def add_container(self, env_id: int = 1, **fields: Any) -> dict[str, Any]:
        container = {
            "Id": fields.pop("Id", f"c{self._new_id()}"),
            "Names": fields.pop("Names", []),
            "Image": fields.pop("Image", "nginx:alpine"),
            "Labels": fields.pop("Labels", {}),
            "State": fields.pop("State", "running"),
            "Status": fields.pop("Status", "Up 1 minute"),
            **fields,
        }
        self.containers.setdefault(env_id, []).append(container)
        return container

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    # Routing

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        method = request.method

        if (method, path) in self.failures:
            status, body = self.failures[(method, path)]
            return httpx.Response(status, text=body)

        if request.headers.get("X-API-Key") != API_KEY:
            return httpx.Response(401, json={"message": "Unauthorized"})

        if path == "/api/endpoints" and method == "GET":
            return httpx.Response(200, json=self.environments)
        if path == "/api/stacks" and method == "GET":
            return httpx.Response(200, json=self.stacks)
        if path == "/api/system/status":
            return httpx.Response(200, json={"Version": "2.19.4", "InstanceID": "abc-123"})
        if path == "/api/stacks/create/standalone/string" and method == "POST":
            return self._create_stack(request)

        if m := re.match(r"^/api/endpoints/(\d+)$", path):
            env = next((e for e in self.environments if e["Id"] == int(m.group(1))), None)
            return httpx.Response(200, json=env) if env else httpx.Response(404, text="not found")

        if m := re.match(r"^/api/stacks/(\d+)(?:/(start|stop))?$", path):
            return self._stack_action(method, int(m.group(1)), m.group(2))

        if m := re.match(_DOCKER + r"(?P<rest>/.*)$", path):
            return self._docker(request, int(m.group("env")), m.group("rest"))

        return httpx.Response(404, text=f"no route for {method} {path}")

    def _create_stack(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        stack = {
            "Id": self._new_id(),
            "Name": body["Name"],
            "EndpointId": int(request.url.params["endpointId"]),
            "Type": int(request.url.params["type"]),
        }
        if self.stacks_visible:
            self.stacks.append(stack)
        return httpx.Response(200, json=stack)

    def _stack_action(self, method: str, stack_id: int, action: str | None) -> httpx.Response:
        stack = next((s for s in self.stacks if s["Id"] == stack_id), None)
        if stack is None:
            return httpx.Response(404, json={"message": "Stack not found"})
        if method == "DELETE" and action is None:
            self.stacks.remove(stack)
            return httpx.Response(204)
        if method == "POST" and action:
            return httpx.Response(200, json=stack)
        return httpx.Response(405)

    def _docker(self, request: httpx.Request, env_id: int, rest: str) -> httpx.Response:
        if env_id not in self.containers:
            return httpx.Response(404, text="environment not found")
        containers = self.containers[env_id]
        method = request.method

        if rest == "/containers/json":
            listed = [c for c in containers if not any(c is h for h in self.hidden_containers)]
            return httpx.Response(200, json=listed)
        if rest == "/images/json":
            return httpx.Response(200, json=self.images.get(env_id, []))
        if rest == "/images/create" and method == "POST":
            return httpx.Response(200, text='{"status":"Downloaded newer image"}\n')
        if rest == "/containers/create" and method == "POST":
            body = json.loads(request.content)
            container_id = f"c{self._new_id()}"
            container = self.add_container(
                env_id,
                Id=container_id,
                Names=[f"/{request.url.params['name']}"],
                Image=body.get("Image", ""),
                State="created",
            )
            if not self.containers_visible:
                self.hidden_containers.append(container)
            return httpx.Response(201, json={"Id": container_id, "Warnings": []})
        if re.match(r"^/exec/[^/]+/start$", rest):
            return httpx.Response(200, text=self.exec_output)

        m = re.match(r"^/containers/([^/]+)(?:/([a-z]+))?$", rest)
        if not m:
            return httpx.Response(404, text="no such route")
        ident, action = m.group(1), m.group(2)
        container = next(
            (c for c in containers if c["Id"] == ident or f"/{ident}" in c["Names"]), None
        )
        if container is None:
            return httpx.Response(404, json={"message": f"No such container: {ident}"})

        if method == "DELETE" and action is None:
            containers.remove(container)
            return httpx.Response(204)
        if action == "json":
            return httpx.Response(
                200,
                json={
                    "Id": container["Id"],
                    "Name": container["Names"][0] if container["Names"] else "",
                    "Config": {"Image": container["Image"], "Labels": container["Labels"]},
                    "State": {"Status": container["State"], "Running": container["State"] == "running"},
                    "HostConfig": container.get(
                        "HostConfig",
                        {"Memory": 0, "CpuQuota": 0, "CpuPeriod": 100000, "RestartPolicy": {"Name": "no"}},
                    ),
                },
            )
        if action == "exec":
            return httpx.Response(201, json={"Id": "exec-1"})
        if action == "update":
            return httpx.Response(200, json={"Warnings": []})
        if action in {"start", "restart", "unpause"}:
            container["State"] = "running"
        elif action in {"stop", "kill"}:
            container["State"] = "exited"
        elif action == "pause":
            container["State"] = "paused"
        else:
            return httpx.Response(404, text="unknown action")
        return httpx.Response(204)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment variables out of settings."""
    for var in (
        "PORTAINER_URL",
        "PORTAINER_API_KEY",
        "PORTAINER_ENVIRONMENT_ID",
        "PORTAINER_HTTP_TIMEOUT",
        "PORTAINER_VERIFY_SSL",
        "PORTAINER_POLL_INTERVAL_MS",
        "PORTAINER_SETTLE_DELAY_MS",
        "PORTAINER_CLIENT_CONFIG",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def settings() -> PortainerSettings:
    """Settings with short polling so verification tests stay fast."""
    return PortainerSettings(
        _env_file=None,
        PORTAINER_URL=BASE_URL,
        PORTAINER_API_KEY=API_KEY,
        PORTAINER_POLL_INTERVAL_MS=10,
        PORTAINER_SETTLE_DELAY_MS=0,
    )


@pytest.fixture
def fake_portainer() -> FakePortainer:
    return FakePortainer()


@pytest.fixture
async def client(
    settings: PortainerSettings, fake_portainer: FakePortainer
) -> AsyncGenerator[PortainerClient, None]:
    """PortainerClient wired to the in-memory Portainer."""
    http_client = build_async_client(settings, transport=httpx.MockTransport(fake_portainer.handler))
    async with PortainerClient(settings, http_client=http_client) as portainer:
        yield portainer
    await http_client.aclose()
