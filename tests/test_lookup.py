"""Tests for stack and container lookups."""

import pytest

from portainer_client import ContainerCriteria, ErrorKind


class TestStackLookup:
    """find_stack_by_name / find_stack_by_id."""

    @pytest.fixture(autouse=True)
    def seed_stacks(self, fake_portainer):
        fake_portainer.environments.append({"Id": 2, "Name": "remote"})
        fake_portainer.stacks = [
            {"Id": 5, "Name": "web", "EndpointId": 1},
            {"Id": 6, "Name": "db", "EndpointId": 2},
        ]

    @pytest.mark.asyncio
    async def test_find_stack_by_name(self, client):
        result = await client.find_stack_by_name("db")

        assert result.ok
        assert result.value.id == 6
        assert result.value.environment_id == 2

    @pytest.mark.asyncio
    async def test_find_stack_by_name_is_exact(self, client):
        result = await client.find_stack_by_name("we")

        assert result.error is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_find_stack_by_name_in_environment(self, client, fake_portainer):
        fake_portainer.stacks.insert(0, {"Id": 8, "Name": "db", "EndpointId": 1})

        in_remote = await client.find_stack_by_name("db", 2)
        in_local = await client.find_stack_by_name("web", 2)

        assert in_remote.value.id == 6
        assert in_local.error is ErrorKind.NOT_FOUND
        assert "environment 2" in in_local.message

    @pytest.mark.asyncio
    async def test_find_stack_by_id(self, client):
        result = await client.find_stack_by_id(5, 1)

        assert result.ok
        assert result.value.name == "web"

    @pytest.mark.asyncio
    async def test_find_stack_by_id_is_isolated_per_environment(self, client):
        result = await client.find_stack_by_id(5, 2)

        assert not result.ok
        assert result.error is ErrorKind.NOT_FOUND

    @pytest.mark.parametrize("stack_id,env_id", [(0, 1), (5, 0), (-1, 1), (5, None)])
    @pytest.mark.asyncio
    async def test_find_stack_by_id_rejects_invalid_ids(self, client, fake_portainer, stack_id, env_id):
        result = await client.find_stack_by_id(stack_id, env_id)

        assert result.error is ErrorKind.PRECONDITION
        assert fake_portainer.calls("GET", "/api/stacks") == []

    @pytest.mark.asyncio
    async def test_empty_name_is_precondition(self, client):
        result = await client.find_stack_by_name("")

        assert result.error is ErrorKind.PRECONDITION

    @pytest.mark.asyncio
    async def test_listing_failure_is_not_found(self, client, fake_portainer):
        fake_portainer.failures[("GET", "/api/stacks")] = (502, "bad gateway")

        result = await client.find_stack_by_name("web")

        assert result.error is ErrorKind.NOT_FOUND
        assert "502" in result.message


class TestContainerLookup:
    """find_container_by_name / find_container_by_details."""

    @pytest.fixture(autouse=True)
    def seed_containers(self, fake_portainer):
        fake_portainer.add_container(
            Id="aaa", Names=["/my-app"], Image="nginx:alpine", Labels={"tier": "frontend"}
        )
        fake_portainer.add_container(
            Id="bbb", Names=["/cache"], Image="redis:7", Labels={"tier": "backend"}
        )

    @pytest.mark.parametrize("query", ["my-app", "app", "/my-app"])
    @pytest.mark.asyncio
    async def test_permissive_name_match(self, client, query):
        result = await client.find_container_by_name(query)

        assert result.ok
        assert result.value.id == "aaa"

    @pytest.mark.asyncio
    async def test_unknown_name_is_not_found(self, client):
        result = await client.find_container_by_name("other")

        assert result.error is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_first_match_in_listing_order_wins(self, client, fake_portainer):
        fake_portainer.add_container(Id="ccc", Names=["/my-app-2"])

        result = await client.find_container_by_name("my-app")

        assert result.value.id == "aaa"

    @pytest.mark.asyncio
    async def test_find_by_image(self, client):
        result = await client.find_container_by_details({"image": "redis:7"})

        assert result.value.id == "bbb"

    @pytest.mark.asyncio
    async def test_find_by_label_key(self, client):
        result = await client.find_container_by_details(ContainerCriteria(label="tier"))

        assert result.value.id == "aaa"

    @pytest.mark.asyncio
    async def test_criteria_are_combined(self, client):
        result = await client.find_container_by_details(
            {"image": "redis:7", "label": "missing"}
        )

        assert result.error is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_empty_criteria_is_precondition(self, client, fake_portainer):
        result = await client.find_container_by_details({})

        assert result.error is ErrorKind.PRECONDITION
        assert fake_portainer.count("GET", r"/containers/json$") == 0

    @pytest.mark.asyncio
    async def test_lookup_in_other_environment(self, client, fake_portainer):
        fake_portainer.add_container(env_id=2, Id="zzz", Names=["/remote-app"])

        assert (await client.find_container_by_name("remote-app")).error is ErrorKind.NOT_FOUND
        assert (await client.find_container_by_name("remote-app", 2)).value.id == "zzz"
